"""
Domain models package for Apiary.

Rich domain models with the hive's business rules. Persistence documents are
produced and parsed by `apiary.modules.hive.schema`; services orchestrate the
models and never manipulate raw documents directly.
"""

from .base import (
    AggregateRoot,
    DomainEvent,
    DomainValidationError,
    Entity,
    validate_non_negative,
    validate_not_empty,
)
from .species import BeeSpecies, Perk, Rarity, UnlockRequirement, UnlockRequirementType
from .hive import (
    BeeEgg,
    CollectedBee,
    Evolution,
    GuildHive,
    HiveRoom,
    HiveRuleViolation,
    MAX_FRAGMENT,
)

__all__ = [
    # Base classes
    "Entity",
    "AggregateRoot",
    "DomainEvent",
    "DomainValidationError",
    # Validators
    "validate_non_negative",
    "validate_not_empty",
    # Species
    "BeeSpecies",
    "Perk",
    "Rarity",
    "UnlockRequirement",
    "UnlockRequirementType",
    # Hive
    "BeeEgg",
    "CollectedBee",
    "Evolution",
    "GuildHive",
    "HiveRoom",
    "HiveRuleViolation",
    "MAX_FRAGMENT",
]
