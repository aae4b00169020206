from apiary.modules.rewards.progress import (
    PersistentProgressRecorder,
    ProgressEntry,
    ProgressRecorder,
)
from apiary.modules.rewards.service import RewardDistributorService, RewardOutcome

__all__ = [
    "PersistentProgressRecorder",
    "ProgressEntry",
    "ProgressRecorder",
    "RewardDistributorService",
    "RewardOutcome",
]
