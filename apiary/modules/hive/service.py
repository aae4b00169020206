"""
Hive Service
============

Purpose
-------
Owns the learner's `GuildHive` aggregate for the session and exposes every
state-changing hive operation: eggs and fragments, direct bee grants, bee
leveling, nicknames, room membership, room unlocking and the treasury.

Domain
------
- One hive in memory at a time, restored with `load()` or created with
  `initialize()`
- Calls for a user other than the hive's owner, or before a hive exists,
  are ignored and reported through `OperationResult`
- Every accepted change is written through to persistence as one document

Design Notes
------------
- Gameplay rules live on `GuildHive`; this service adds ownership checks,
  config lookup, persistence and event publication
- `HiveRuleViolation` from the aggregate becomes an ignored result
- Persistence failures keep the in-memory change and set `persisted=False`
- Domain events are published after the save, followed by `hive.updated`
"""

from __future__ import annotations

import itertools
import time
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, TypeVar

from apiary.core.logging.logger import LogContext
from apiary.core.persistence.base import PersistenceAdapter
from apiary.domain.models.base import DomainValidationError
from apiary.domain.models.hive import (
    CollectedBee,
    GuildHive,
    HiveRoom,
    HiveRuleViolation,
    IdFactory,
)
from apiary.modules.hive.schema import default_rooms, hive_from_document, hive_to_document
from apiary.modules.shared import constants
from apiary.modules.shared.base_service import BaseService
from apiary.modules.shared.exceptions import PersistenceError, ValidationError
from apiary.modules.shared.results import IgnoreReason, OperationResult

if TYPE_CHECKING:
    from logging import Logger

    from apiary.core.config.manager import ConfigManager
    from apiary.core.event.bus import EventBus

T = TypeVar("T")

Clock = Callable[[], int]


def epoch_millis() -> int:
    return int(time.time() * 1000)


class TimestampIdFactory:
    """
    Produces `<prefix>-<epoch ms>-<n>` identifiers.

    The counter keeps ids unique when several bees are created within the
    same millisecond.
    """

    def __init__(self, clock: Clock = epoch_millis) -> None:
        self._clock = clock
        self._counter = itertools.count(1)

    def __call__(self, prefix: str) -> str:
        return f"{prefix}-{self._clock()}-{next(self._counter)}"


class HiveService(BaseService):
    """
    Session-scoped store for the active learner's hive.

    Dependencies
    ------------
    - PersistenceAdapter: loads/saves the `hive:guild` document
    - ConfigManager: leveling thresholds and room unlock step
    - EventBus: domain events and `hive.updated` snapshots
    - Logger: structured logging

    Public Methods
    --------------
    - load() -> Restore the stored hive
    - initialize() -> Create the hive once
    - add_fragment() -> Fill (and possibly hatch) a species egg
    - collect_bee() -> Grant a bee directly
    - level_up_bee() -> Give a bee (and the hive) experience
    - rename_bee() -> Set a bee nickname
    - assign_bee_to_room() / remove_bee_from_room() -> Room membership
    - unlock_room() -> Open the next room when the hive level allows
    - add_treasury_honey() -> Add honey to the treasury
    """

    def __init__(
        self,
        persistence: PersistenceAdapter,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        clock: Clock = epoch_millis,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._persistence = persistence
        self._clock = clock
        self._next_id: IdFactory = id_factory or TimestampIdFactory(clock)
        self._hive: Optional[GuildHive] = None

    # ========================================================================
    # READ ACCESSORS
    # ========================================================================

    @property
    def hive(self) -> Optional[GuildHive]:
        return self._hive

    def get_bee_by_id(self, bee_id: str) -> Optional[CollectedBee]:
        if self._hive is None:
            return None
        return self._hive.find_bee(bee_id)

    def owns_hive(self, user_id: str) -> bool:
        return self._hive is not None and self._hive.user_id == user_id

    # ========================================================================
    # LOADING
    # ========================================================================

    def load(self, user_id: Optional[str] = None) -> Optional[GuildHive]:
        """
        Restore the stored hive, migrating older documents.

        A missing, unreadable or malformed document leaves the service with
        no hive. When `user_id` is given, a stored hive owned by someone
        else is not adopted.
        """
        key = constants.GUILD_STORAGE_KEY
        try:
            document = self._persistence.load(key)
        except PersistenceError as exc:
            self.log_error("load_hive", exc, storage_key=key)
            self._hive = None
            return None

        if document is None:
            self._hive = None
            return None

        try:
            hive = hive_from_document(document)
        except (KeyError, TypeError, ValueError, DomainValidationError) as exc:
            self.log.warning(
                "Malformed hive document; starting without a hive",
                extra={"storage_key": key, "error_message": str(exc)},
            )
            self._hive = None
            return None

        if user_id is not None and hive.user_id != user_id:
            self.log.info(
                "Stored hive belongs to another user; not adopting it",
                extra={"user_id": user_id, "owner_id": hive.user_id},
            )
            self._hive = None
            return None

        self._hive = hive
        self.log_operation(
            "load_hive",
            user_id=hive.user_id,
            bee_count=len(hive.collected_bees),
            hive_level=hive.level,
        )
        return hive

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def initialize(self, user_id: str, hive_name: str) -> OperationResult[GuildHive]:
        """
        Create the hive with the four-room template.

        Only the first call has an effect; later calls are ignored with
        `already_initialized`, whoever makes them.
        """
        self.validate_identifier(user_id, "user_id")

        if self._hive is not None:
            return self._ignore("initialize", user_id, IgnoreReason.ALREADY_INITIALIZED)

        with LogContext(user_id=user_id, operation="initialize"):
            hive = GuildHive(
                user_id=user_id,
                hive_name=hive_name,
                rooms=default_rooms(),
                created_at=self._clock(),
            )
            self._hive = hive
            persisted = self._persist("initialize")
            self.emit_event(
                "hive.initialized",
                {"user_id": user_id, "hive_name": hive_name, "persisted": persisted},
            )
            self._publish_update("initialize", persisted)
            self.log_operation("initialize", user_id=user_id, hive_name=hive_name)
            return OperationResult.success(hive, persisted=persisted)

    # ========================================================================
    # EGGS & BEES
    # ========================================================================

    def add_fragment(
        self, user_id: str, species_id: str, amount: int
    ) -> OperationResult[Dict[str, Any]]:
        """
        Add fragment toward a species egg.

        The result value is `{"egg": BeeEgg | None, "hatched_bee":
        CollectedBee | None}`; `egg` is None once the egg has hatched.

        Raises:
            ValidationError: If amount is negative or species_id is empty
        """
        self.validate_identifier(species_id, "species_id")
        self.validate_non_negative_int(amount, "amount")

        def apply(hive: GuildHive) -> Dict[str, Any]:
            egg, bee = hive.add_fragment(species_id, amount, self._next_id, self._clock())
            return {"egg": egg, "hatched_bee": bee}

        return self._mutate("add_fragment", user_id, apply, species_id=species_id, amount=amount)

    def collect_bee(self, user_id: str, species_id: str) -> OperationResult[CollectedBee]:
        self.validate_identifier(species_id, "species_id")
        return self._mutate(
            "collect_bee",
            user_id,
            lambda hive: hive.collect_bee(species_id, self._next_id, self._clock()),
            species_id=species_id,
        )

    def level_up_bee(
        self, user_id: str, bee_id: str, experience_gain: int
    ) -> OperationResult[CollectedBee]:
        """
        Give a bee experience; the hive receives the same amount.

        Unknown bees are ignored with `bee_not_found` and the hive gains
        nothing.
        """
        self.validate_non_negative_int(experience_gain, "experience_gain")
        bee_per_level = self.get_config(
            "hive.bee_experience_per_level", constants.BEE_EXPERIENCE_PER_LEVEL
        )
        hive_per_level = self.get_config(
            "hive.experience_per_level", constants.HIVE_EXPERIENCE_PER_LEVEL
        )
        return self._mutate(
            "level_up_bee",
            user_id,
            lambda hive: hive.level_up_bee(
                bee_id, experience_gain, bee_per_level, hive_per_level
            ),
            bee_id=bee_id,
            experience_gain=experience_gain,
        )

    def rename_bee(
        self, user_id: str, bee_id: str, nickname: str
    ) -> OperationResult[CollectedBee]:
        if not isinstance(nickname, str):
            raise ValidationError("nickname", "nickname must be a string")
        return self._mutate(
            "rename_bee",
            user_id,
            lambda hive: hive.rename_bee(bee_id, nickname),
            bee_id=bee_id,
        )

    # ========================================================================
    # ROOMS
    # ========================================================================

    def assign_bee_to_room(
        self, user_id: str, bee_id: str, room_id: str
    ) -> OperationResult[HiveRoom]:
        return self._mutate(
            "assign_bee_to_room",
            user_id,
            lambda hive: hive.assign_bee_to_room(bee_id, room_id),
            bee_id=bee_id,
            room_id=room_id,
        )

    def remove_bee_from_room(self, user_id: str, bee_id: str) -> OperationResult[None]:
        return self._mutate(
            "remove_bee_from_room",
            user_id,
            lambda hive: hive.remove_bee_from_room(bee_id),
            bee_id=bee_id,
        )

    def unlock_room(self, user_id: str) -> OperationResult[HiveRoom]:
        """
        Unlock the first locked room once the hive level allows it.

        Rooms beyond the entrance open at hive levels 5, 10 and 15 with the
        default unlock step.
        """
        unlock_step = self.get_config("hive.room_unlock_step", constants.ROOM_UNLOCK_STEP)
        return self._mutate(
            "unlock_room",
            user_id,
            lambda hive: hive.unlock_next_room(
                unlock_step,
                constants.MAX_PROMOTED_ROOMS,
                constants.UNLOCKED_ROOM_CAPACITY,
            ),
        )

    # ========================================================================
    # TREASURY
    # ========================================================================

    def add_treasury_honey(self, user_id: str, amount: int) -> OperationResult[int]:
        """
        Raises:
            ValidationError: If amount is negative
        """
        self.validate_non_negative_int(amount, "amount")
        return self._mutate(
            "add_treasury_honey",
            user_id,
            lambda hive: hive.add_treasury_honey(amount),
            amount=amount,
        )

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _guard(self, user_id: str) -> Optional[IgnoreReason]:
        if self._hive is None:
            return IgnoreReason.HIVE_NOT_INITIALIZED
        if self._hive.user_id != user_id:
            return IgnoreReason.USER_MISMATCH
        return None

    def _ignore(
        self, operation: str, user_id: str, reason: IgnoreReason, **context: Any
    ) -> OperationResult[Any]:
        self.log.debug(
            f"Hive operation ignored: {operation}",
            extra={
                "operation": operation,
                "user_id": user_id,
                "reason": reason.value,
                **context,
            },
        )
        return OperationResult.skipped(reason)

    def _mutate(
        self,
        operation: str,
        user_id: str,
        action: Callable[[GuildHive], T],
        **context: Any,
    ) -> OperationResult[T]:
        reason = self._guard(user_id)
        if reason is not None:
            return self._ignore(operation, user_id, reason, **context)

        hive = self._hive
        assert hive is not None

        with LogContext(user_id=user_id, operation=operation):
            try:
                value = action(hive)
            except HiveRuleViolation as exc:
                hive.clear_domain_events()
                return self._ignore(operation, user_id, IgnoreReason(exc.reason), **context)
            except DomainValidationError as exc:
                hive.clear_domain_events()
                raise ValidationError(exc.field or operation, str(exc)) from exc

            persisted = self._persist(operation)
            for event in hive.clear_domain_events():
                self.emit_event(event.event_name, event.payload)
            self._publish_update(operation, persisted)

            self.log_operation(operation, user_id=user_id, persisted=persisted, **context)
            return OperationResult.success(value, persisted=persisted)

    def _persist(self, operation: str) -> bool:
        assert self._hive is not None
        key = constants.GUILD_STORAGE_KEY
        try:
            self._persistence.save(key, hive_to_document(self._hive))
        except PersistenceError as exc:
            self.log_error(operation, exc, storage_key=key, user_id=self._hive.user_id)
            return False
        return True

    def _publish_update(self, operation: str, persisted: bool) -> None:
        assert self._hive is not None
        self.emit_event(
            "hive.updated",
            {
                "user_id": self._hive.user_id,
                "operation": operation,
                "persisted": persisted,
                "hive": hive_to_document(self._hive),
            },
        )
