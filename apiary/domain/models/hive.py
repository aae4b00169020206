"""
Guild Hive Domain Model for Apiary.

Purpose
-------
Rich domain model for a learner's hive: the collected bees, the eggs being
filled with fragments, the fixed set of rooms bees can live in, the honey
treasury and the hive's own level/experience.

Responsibilities
----------------
- Enforce fragment accumulation and hatching rules
- Handle bee experience rollover and evolution stages
- Keep room membership and the bee `active` flag synchronized
- Gate room unlocking on hive level
- Emit domain events for important changes

Non-Responsibilities
--------------------
- Persistence and document migration (handled by apiary.modules.hive.schema)
- User ownership checks (handled by HiveService)
- Perk/modifier computation (handled by PerkModifierService)

Business Rules
--------------
- An egg holds 0-100 fragment; reaching 100 removes it and hatches one
  larva bee. At most one egg per species.
- A bee gains a level for every 100 experience; evolution advances at
  exactly levels 3, 6 and 9.
- Hive level rises by one when hive experience reaches level * 200,
  checked once per experience gain.
- A bee is active iff its id is in exactly one room's inhabitants.
- Locked rooms (level 0) have capacity 0 and take no inhabitants.

Domain Events
-------------
- hive.fragment_added, hive.egg_hatched, hive.bee_collected
- hive.bee_leveled, hive.bee_evolved, hive.level_up
- hive.bee_renamed, hive.bee_assigned, hive.bee_removed
- hive.room_unlocked, hive.treasury_changed
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from apiary.domain.models.base import (
    AggregateRoot,
    DomainValidationError,
    validate_non_negative,
    validate_not_empty,
)
from apiary.domain.models.species import Perk

# ============================================================================
# CONSTANTS
# ============================================================================

MAX_FRAGMENT = 100

IdFactory = Callable[[str], str]


class Evolution(str, Enum):
    LARVA = "larva"
    PUPA = "pupa"
    ADULT = "adult"
    ELDER = "elder"


# (level reached, required current stage, next stage)
EVOLUTION_STEPS: Tuple[Tuple[int, Evolution, Evolution], ...] = (
    (3, Evolution.LARVA, Evolution.PUPA),
    (6, Evolution.PUPA, Evolution.ADULT),
    (9, Evolution.ADULT, Evolution.ELDER),
)


class HiveRuleViolation(DomainValidationError):
    """
    Raised when an operation is not allowed by the current hive state.

    `reason` is a stable code ("room_full", "level_too_low", ...) that the
    service layer reports back as an ignored operation.
    """

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message, field=None)
        self.reason = reason


# ============================================================================
# CHILD ENTITIES
# ============================================================================


@dataclass
class CollectedBee:
    """A hatched or granted bee owned by one hive."""

    id: str
    user_id: str
    species_id: str
    level: int = 1
    experience: int = 0
    evolution: Evolution = Evolution.LARVA
    active: bool = False
    joined_at: int = 0
    nickname: Optional[str] = None

    def gain_experience(self, amount: int, per_level: int) -> Tuple[int, List[Evolution]]:
        """
        Add experience, rolling over into as many levels as it covers.

        Returns the number of levels gained and the evolution stages entered.
        """
        self.experience += amount
        levels = 0
        evolutions: List[Evolution] = []
        while self.experience >= per_level:
            self.level += 1
            self.experience -= per_level
            levels += 1
            for level, current, nxt in EVOLUTION_STEPS:
                if self.level == level and self.evolution == current:
                    self.evolution = nxt
                    evolutions.append(nxt)
        return levels, evolutions

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "userId": self.user_id,
            "speciesId": self.species_id,
            "level": self.level,
            "experience": self.experience,
            "evolution": self.evolution.value,
            "joinedAt": self.joined_at,
            "active": self.active,
        }
        if self.nickname is not None:
            data["nickname"] = self.nickname
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CollectedBee":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            species_id=data["speciesId"],
            level=int(data.get("level", 1)),
            experience=int(data.get("experience", 0)),
            evolution=Evolution(data.get("evolution", Evolution.LARVA.value)),
            active=bool(data.get("active", False)),
            joined_at=int(data.get("joinedAt", 0)),
            nickname=data.get("nickname"),
        )


@dataclass
class BeeEgg:
    """Partial progress toward hatching a bee of one species."""

    id: str
    user_id: str
    species_id: str
    fragment: int = 0
    acquired_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "speciesId": self.species_id,
            "fragment": self.fragment,
            "acquiredAt": self.acquired_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BeeEgg":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            species_id=data["speciesId"],
            fragment=min(MAX_FRAGMENT, max(0, int(data.get("fragment", 0)))),
            acquired_at=int(data.get("acquiredAt", 0)),
        )


@dataclass
class HiveRoom:
    """One of the hive's fixed rooms."""

    id: str
    name: str
    capacity: int = 0
    level: int = 0
    inhabitants: List[str] = field(default_factory=list)
    bonus: Optional[Perk] = None

    @property
    def is_unlocked(self) -> bool:
        return self.level > 0

    @property
    def has_space(self) -> bool:
        return len(self.inhabitants) < self.capacity

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "capacity": self.capacity,
            "level": self.level,
            "inhabitants": list(self.inhabitants),
        }
        if self.bonus is not None:
            data["bonus"] = self.bonus.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HiveRoom":
        bonus = data.get("bonus")
        return cls(
            id=data["id"],
            name=data["name"],
            capacity=int(data.get("capacity", 0)),
            level=int(data.get("level", 0)),
            inhabitants=list(data.get("inhabitants", [])),
            bonus=Perk(bonus) if bonus else None,
        )


# ============================================================================
# GUILD HIVE AGGREGATE ROOT
# ============================================================================


class GuildHive(AggregateRoot):
    """
    Guild hive aggregate root, one per user.

    All child entities (bees, eggs, rooms) are exclusively owned by the hive
    and are only mutated through its methods.
    """

    def __init__(
        self,
        user_id: str,
        hive_name: str,
        rooms: Iterable[HiveRoom],
        level: int = 1,
        experience: int = 0,
        collected_bees: Optional[Iterable[CollectedBee]] = None,
        bee_eggs: Optional[Iterable[BeeEgg]] = None,
        treasury: int = 0,
        created_at: int = 0,
    ) -> None:
        validate_not_empty(user_id, "user_id")
        super().__init__(user_id)
        self.hive_name = hive_name
        self.level = level
        self.experience = experience
        self.rooms: List[HiveRoom] = list(rooms)
        self.collected_bees: List[CollectedBee] = list(collected_bees or [])
        self.bee_eggs: List[BeeEgg] = list(bee_eggs or [])
        self.treasury = treasury
        self.created_at = created_at

    @property
    def user_id(self) -> str:
        return self.id

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    def find_bee(self, bee_id: str) -> Optional[CollectedBee]:
        return next((b for b in self.collected_bees if b.id == bee_id), None)

    def find_egg(self, species_id: str) -> Optional[BeeEgg]:
        return next((e for e in self.bee_eggs if e.species_id == species_id), None)

    def find_room(self, room_id: str) -> Optional[HiveRoom]:
        return next((r for r in self.rooms if r.id == room_id), None)

    def active_bees(self) -> List[CollectedBee]:
        return [b for b in self.collected_bees if b.active]

    def unlocked_rooms(self) -> List[HiveRoom]:
        return [r for r in self.rooms if r.is_unlocked]

    # ========================================================================
    # BUSINESS LOGIC - EGGS & BEES
    # ========================================================================

    def _new_bee(self, species_id: str, next_id: IdFactory, now_ms: int) -> CollectedBee:
        bee = CollectedBee(
            id=next_id("bee"),
            user_id=self.user_id,
            species_id=species_id,
            joined_at=now_ms,
        )
        self.collected_bees.append(bee)
        return bee

    def add_fragment(
        self,
        species_id: str,
        amount: int,
        next_id: IdFactory,
        now_ms: int,
    ) -> Tuple[Optional[BeeEgg], Optional[CollectedBee]]:
        """
        Add fragment toward the species' egg, hatching it at 100.

        Returns
        -------
        (egg, hatched_bee)
            `egg` is the egg still waiting (None once hatched);
            `hatched_bee` is the new bee when the egg hatched.
        """
        validate_not_empty(species_id, "species_id")
        validate_non_negative(amount, "amount")

        egg = self.find_egg(species_id)
        if egg is None:
            egg = BeeEgg(
                id=next_id("egg"),
                user_id=self.user_id,
                species_id=species_id,
                fragment=0,
                acquired_at=now_ms,
            )
            self.bee_eggs.append(egg)

        egg.fragment = min(MAX_FRAGMENT, egg.fragment + amount)
        self.add_domain_event(
            "hive.fragment_added",
            {
                "user_id": self.user_id,
                "species_id": species_id,
                "amount": amount,
                "fragment": egg.fragment,
            },
        )

        if egg.fragment < MAX_FRAGMENT:
            return egg, None

        self.bee_eggs = [e for e in self.bee_eggs if e.species_id != species_id]
        bee = self._new_bee(species_id, next_id, now_ms)
        self.add_domain_event(
            "hive.egg_hatched",
            {"user_id": self.user_id, "species_id": species_id, "bee_id": bee.id},
        )
        return None, bee

    def collect_bee(self, species_id: str, next_id: IdFactory, now_ms: int) -> CollectedBee:
        """Grant a level-1 bee directly, bypassing the egg."""
        validate_not_empty(species_id, "species_id")
        bee = self._new_bee(species_id, next_id, now_ms)
        self.add_domain_event(
            "hive.bee_collected",
            {"user_id": self.user_id, "species_id": species_id, "bee_id": bee.id},
        )
        return bee

    def _require_bee(self, bee_id: str) -> CollectedBee:
        bee = self.find_bee(bee_id)
        if bee is None:
            raise HiveRuleViolation("bee_not_found", f"No bee with id {bee_id}")
        return bee

    def level_up_bee(
        self,
        bee_id: str,
        experience_gain: int,
        bee_experience_per_level: int,
        hive_experience_per_level: int,
    ) -> CollectedBee:
        """
        Give a bee experience and feed the same amount into the hive.

        The hive gains at most one level per call even if the gain covers
        several thresholds.
        """
        validate_non_negative(experience_gain, "experience_gain")
        bee = self._require_bee(bee_id)

        old_level = bee.level
        levels, evolutions = bee.gain_experience(experience_gain, bee_experience_per_level)
        if levels:
            self.add_domain_event(
                "hive.bee_leveled",
                {
                    "user_id": self.user_id,
                    "bee_id": bee.id,
                    "old_level": old_level,
                    "new_level": bee.level,
                },
            )
        for stage in evolutions:
            self.add_domain_event(
                "hive.bee_evolved",
                {"user_id": self.user_id, "bee_id": bee.id, "evolution": stage.value},
            )

        self.experience += experience_gain
        if self.experience >= self.level * hive_experience_per_level:
            self.level += 1
            self.add_domain_event(
                "hive.level_up",
                {"user_id": self.user_id, "new_level": self.level},
            )
        return bee

    def rename_bee(self, bee_id: str, nickname: str) -> CollectedBee:
        bee = self._require_bee(bee_id)
        bee.nickname = nickname
        self.add_domain_event(
            "hive.bee_renamed",
            {"user_id": self.user_id, "bee_id": bee.id, "nickname": nickname},
        )
        return bee

    # ========================================================================
    # BUSINESS LOGIC - ROOMS
    # ========================================================================

    def assign_bee_to_room(self, bee_id: str, room_id: str) -> HiveRoom:
        """Move a bee into a room, evicting it from any other room first."""
        bee = self._require_bee(bee_id)
        room = self.find_room(room_id)
        if room is None:
            raise HiveRuleViolation("room_not_found", f"No room with id {room_id}")
        if not room.is_unlocked:
            raise HiveRuleViolation("room_locked", f"Room {room_id} is locked")
        if not room.has_space:
            raise HiveRuleViolation("room_full", f"Room {room_id} is full")

        for other in self.rooms:
            other.inhabitants = [i for i in other.inhabitants if i != bee_id]
        room.inhabitants.append(bee_id)
        bee.active = True

        self.add_domain_event(
            "hive.bee_assigned",
            {"user_id": self.user_id, "bee_id": bee_id, "room_id": room.id},
        )
        return room

    def remove_bee_from_room(self, bee_id: str) -> None:
        """Take a bee out of every room and mark it inactive."""
        for room in self.rooms:
            room.inhabitants = [i for i in room.inhabitants if i != bee_id]

        bee = self.find_bee(bee_id)
        if bee is not None:
            bee.active = False

        self.add_domain_event(
            "hive.bee_removed",
            {"user_id": self.user_id, "bee_id": bee_id},
        )

    def unlock_next_room(
        self,
        unlock_step: int,
        max_promoted: int,
        capacity: int,
    ) -> HiveRoom:
        """
        Unlock the first locked room if the hive level allows it.

        `promoted` counts rooms unlocked beyond the entrance; the next room
        needs hive level >= (promoted + 1) * unlock_step.
        """
        unlocked = len(self.unlocked_rooms())
        promoted = max(0, unlocked - 1)
        room = next((r for r in self.rooms if not r.is_unlocked), None)

        if room is None or promoted >= max_promoted:
            raise HiveRuleViolation("no_locked_room", "Every room is already unlocked")

        required = (promoted + 1) * unlock_step
        if self.level < required:
            raise HiveRuleViolation(
                "level_too_low",
                f"Hive level {self.level} is below the required {required}",
            )

        room.level = 1
        room.capacity = capacity
        self.add_domain_event(
            "hive.room_unlocked",
            {"user_id": self.user_id, "room_id": room.id, "required_level": required},
        )
        return room

    # ========================================================================
    # BUSINESS LOGIC - TREASURY
    # ========================================================================

    def add_treasury_honey(self, amount: int) -> int:
        validate_non_negative(amount, "amount")
        self.treasury += amount
        self.add_domain_event(
            "hive.treasury_changed",
            {"user_id": self.user_id, "amount": amount, "treasury": self.treasury},
        )
        return self.treasury

    # ========================================================================
    # INVARIANTS
    # ========================================================================

    def invariant_violations(self) -> List[str]:
        """
        Describe every broken structural invariant (empty when consistent).

        Checked: room capacity, locked rooms empty, active flag matching
        membership in exactly one room, egg fragment range and uniqueness.
        """
        problems: List[str] = []

        membership: Dict[str, int] = {}
        for room in self.rooms:
            if len(room.inhabitants) > room.capacity:
                problems.append(f"{room.id} over capacity")
            if not room.is_unlocked and room.inhabitants:
                problems.append(f"{room.id} is locked but inhabited")
            for bee_id in room.inhabitants:
                membership[bee_id] = membership.get(bee_id, 0) + 1

        for bee in self.collected_bees:
            count = membership.get(bee.id, 0)
            if bee.active and count != 1:
                problems.append(f"{bee.id} active but housed in {count} rooms")
            if not bee.active and count:
                problems.append(f"{bee.id} inactive but housed in {count} rooms")

        seen_species = set()
        for egg in self.bee_eggs:
            if not 0 <= egg.fragment < MAX_FRAGMENT:
                problems.append(f"{egg.id} fragment {egg.fragment} out of range")
            if egg.species_id in seen_species:
                problems.append(f"duplicate egg for {egg.species_id}")
            seen_species.add(egg.species_id)

        return problems
