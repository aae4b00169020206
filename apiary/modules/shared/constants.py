"""
Apiary Domain Constants

Purpose
-------
Gameplay constants for the hive progression engine: rarity weights and
bonuses, perk effects, room template and unlock thresholds, leveling
thresholds and activity reward profiles.

IMPORTANT:
These are the built-in balance defaults. `BALANCE_DEFAULTS` mirrors them in
the nested shape ConfigManager serves, so YAML files under `config/` can
override any value without code changes.

Design Notes
------------
- Values are annotated with typing.Final to signal immutability
- Grouped by game system
- No side effects at import time
"""

from __future__ import annotations

from typing import Any, Dict, Final, Tuple

# ============================================================================
# STORAGE
# ============================================================================

GUILD_STORAGE_KEY: Final[str] = "hive:guild"
BEE_SPECIES_STORAGE_KEY: Final[str] = "hive:bee-species"
GAME_SCORES_STORAGE_KEY: Final[str] = "hive:game-scores"
QUIZ_RESULTS_STORAGE_KEY: Final[str] = "hive:quiz-results"
FLASHCARD_PROGRESS_STORAGE_KEY: Final[str] = "hive:flashcard-progress"

HIVE_SCHEMA_VERSION: Final[int] = 2

# ============================================================================
# RARITY
# ============================================================================

RARITY_WEIGHTS: Final[Dict[str, int]] = {
    "common": 60,
    "uncommon": 20,
    "rare": 10,
    "epic": 7,
    "legendary": 3,
}
UNKNOWN_RARITY_WEIGHT: Final[int] = 1

RARITY_FRAGMENT_BONUS: Final[Dict[str, int]] = {
    "common": 0,
    "uncommon": 5,
    "rare": 10,
    "epic": 20,
    "legendary": 30,
}

# ============================================================================
# LEVELING & EVOLUTION
# ============================================================================

BEE_EXPERIENCE_PER_LEVEL: Final[int] = 100
HIVE_EXPERIENCE_PER_LEVEL: Final[int] = 200  # threshold is hive.level * this

# ============================================================================
# ROOMS
# ============================================================================

ROOM_UNLOCK_STEP: Final[int] = 5  # 2nd room at 5, 3rd at 10, 4th at 15
MAX_PROMOTED_ROOMS: Final[int] = 3
UNLOCKED_ROOM_CAPACITY: Final[int] = 3

DEFAULT_ROOMS: Final[Tuple[Dict[str, Any], ...]] = (
    {"id": "room-entrance", "name": "Entrance Hall", "capacity": 3, "level": 1, "bonus": "speed"},
    {"id": "room-nursery", "name": "Royal Nursery", "capacity": 0, "level": 0, "bonus": None},
    {"id": "room-library", "name": "Knowledge Library", "capacity": 0, "level": 0, "bonus": None},
    {"id": "room-throne", "name": "Throne Chamber", "capacity": 0, "level": 0, "bonus": None},
)

# ============================================================================
# PERKS
# ============================================================================

# Fields ending in "_multiplier" multiply, every other field adds.
PERK_EFFECTS: Final[Dict[str, Dict[str, float]]] = {
    "haste": {"game_time_multiplier": 0.8},
    "focus": {"quiz_score_bonus": 0.10},
    "wisdom": {"xp_bonus": 0.20, "flashcard_retention_bonus": 0.30},
    "speed": {"game_score_multiplier": 1.05},
    "luck": {"fragment_bonus": 0.10, "honey_bonus": 0.15},
    "energy": {"fragment_bonus": 0.05},
    "inspiration": {"xp_bonus": 0.10, "quiz_score_bonus": 0.05},
}

ROOM_BONUS_EFFECTS: Final[Dict[str, Dict[str, float]]] = {
    "haste": {"game_time_multiplier": 0.95},
    "speed": {"game_score_multiplier": 1.02},
    "focus": {"quiz_score_bonus": 0.02},
}

# ============================================================================
# REWARDS
# ============================================================================

# Time divisors are None for activities without a countdown.
REWARD_PROFILES: Final[Dict[str, Dict[str, Any]]] = {
    "memory-match": {
        "fragment_divisor": 2,
        "fragment_floor": 10,
        "honey_divisor": 5,
        "honey_floor": 5,
        "honey_rarity_divisor": 2,
        "fragment_time_divisor": None,
        "honey_time_divisor": None,
    },
    "word-hive": {
        "fragment_divisor": 2,
        "fragment_floor": 5,
        "honey_divisor": 4,
        "honey_floor": 3,
        "honey_rarity_divisor": 3,
        "fragment_time_divisor": None,
        "honey_time_divisor": None,
    },
    "buzz-race": {
        "fragment_divisor": 2,
        "fragment_floor": 5,
        "honey_divisor": 3,
        "honey_floor": 5,
        "honey_rarity_divisor": 4,
        "fragment_time_divisor": 2,
        "honey_time_divisor": 4,
    },
    "quiz": {
        "fragment_divisor": 2,
        "fragment_floor": 5,
        "honey_divisor": 4,
        "honey_floor": 3,
        "honey_rarity_divisor": 3,
        "fragment_time_divisor": None,
        "honey_time_divisor": None,
    },
}

QUIZ_PROFILE: Final[str] = "quiz"
MAX_QUIZ_SCORE: Final[int] = 100

BUZZ_RACE_BASE_SECONDS: Final[int] = 30
BUZZ_RACE_MIN_SECONDS: Final[int] = 6

# ============================================================================
# CONFIG MANAGER DEFAULTS
# ============================================================================

BALANCE_DEFAULTS: Final[Dict[str, Any]] = {
    "rarity": {
        "weights": dict(RARITY_WEIGHTS),
        "fragment_bonus": dict(RARITY_FRAGMENT_BONUS),
    },
    "perks": {
        "effects": {perk: dict(effect) for perk, effect in PERK_EFFECTS.items()},
        "room_bonuses": {perk: dict(effect) for perk, effect in ROOM_BONUS_EFFECTS.items()},
    },
    "hive": {
        "room_unlock_step": ROOM_UNLOCK_STEP,
        "experience_per_level": HIVE_EXPERIENCE_PER_LEVEL,
        "bee_experience_per_level": BEE_EXPERIENCE_PER_LEVEL,
    },
    "rewards": {
        "profiles": {name: dict(profile) for name, profile in REWARD_PROFILES.items()},
    },
}
