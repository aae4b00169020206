"""
Bee species reference model.

Species are catalog-defined and never mutated at runtime. The persisted
catalog override uses the camelCase document keys of the original catalog
(`primaryPerk`, `secondaryPerk`, `unlockRequirement`).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from apiary.domain.models.base import DomainValidationError, validate_not_empty


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Perk(str, Enum):
    HASTE = "haste"
    FOCUS = "focus"
    WISDOM = "wisdom"
    SPEED = "speed"
    LUCK = "luck"
    ENERGY = "energy"
    INSPIRATION = "inspiration"


class UnlockRequirementType(str, Enum):
    QUIZ_SCORE = "quiz-score"
    GAMES_PLAYED = "games-played"
    COURSE_COMPLETE = "course-complete"
    FRIENDS_COUNT = "friends-count"


@dataclass(frozen=True)
class UnlockRequirement:
    """Threshold a learner must reach before a species is meant to drop."""

    type: UnlockRequirementType
    value: int

    def is_met(self, stats: Dict[str, int]) -> bool:
        """True when `stats[type]` reaches the threshold (missing counts as 0)."""
        return stats.get(self.type.value, 0) >= self.value

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UnlockRequirement":
        return cls(type=UnlockRequirementType(data["type"]), value=int(data["value"]))


@dataclass(frozen=True)
class BeeSpecies:
    """
    Immutable value object describing a collectible species.

    Attributes
    ----------
    id : str
        Stable species id (e.g. "bee-worker")
    name : str
        Display name
    rarity : Rarity
        Drives weighted selection and the reward rarity bonus
    primary_perk : Perk
        Perk granted while a bee of this species is housed in a room
    secondary_perk : Optional[Perk]
        Optional second perk
    unlock_requirement : Optional[UnlockRequirement]
        Declared gate; not enforced by the reward flow
    emoji, description : str
        Display-only fields
    """

    id: str
    name: str
    rarity: Rarity
    primary_perk: Perk
    secondary_perk: Optional[Perk] = None
    unlock_requirement: Optional[UnlockRequirement] = None
    emoji: str = ""
    description: str = ""

    def __post_init__(self) -> None:
        validate_not_empty(self.id, "id")
        validate_not_empty(self.name, "name")
        if not isinstance(self.rarity, Rarity):
            raise DomainValidationError(f"Unknown rarity: {self.rarity}", field="rarity")
        if not isinstance(self.primary_perk, Perk):
            raise DomainValidationError(
                f"Unknown perk: {self.primary_perk}", field="primary_perk"
            )

    @property
    def perks(self) -> Tuple[Perk, ...]:
        if self.secondary_perk is None:
            return (self.primary_perk,)
        return (self.primary_perk, self.secondary_perk)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "emoji": self.emoji,
            "rarity": self.rarity.value,
            "primaryPerk": self.primary_perk.value,
            "description": self.description,
        }
        if self.secondary_perk is not None:
            data["secondaryPerk"] = self.secondary_perk.value
        if self.unlock_requirement is not None:
            data["unlockRequirement"] = self.unlock_requirement.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BeeSpecies":
        """
        Build a species from a catalog document entry.

        Raises
        ------
        KeyError, ValueError, DomainValidationError
            If the entry is incomplete or names an unknown rarity/perk
        """
        secondary = data.get("secondaryPerk")
        requirement = data.get("unlockRequirement")
        return cls(
            id=data["id"],
            name=data["name"],
            rarity=Rarity(data["rarity"]),
            primary_perk=Perk(data["primaryPerk"]),
            secondary_perk=Perk(secondary) if secondary else None,
            unlock_requirement=(
                UnlockRequirement.from_dict(requirement) if requirement else None
            ),
            emoji=data.get("emoji", ""),
            description=data.get("description", ""),
        )
