"""
Tagged operation results.

Hive operations never raise for expected gameplay outcomes. Instead they
return an `OperationResult` telling the caller whether the change happened
(`ok`) or was skipped (`ignored`, with a reason code), and whether the
updated hive reached the persistence backend.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class OperationStatus(str, Enum):
    OK = "ok"
    IGNORED = "ignored"


class IgnoreReason(str, Enum):
    HIVE_NOT_INITIALIZED = "hive_not_initialized"
    USER_MISMATCH = "user_mismatch"
    ALREADY_INITIALIZED = "already_initialized"
    BEE_NOT_FOUND = "bee_not_found"
    ROOM_NOT_FOUND = "room_not_found"
    ROOM_LOCKED = "room_locked"
    ROOM_FULL = "room_full"
    NO_LOCKED_ROOM = "no_locked_room"
    LEVEL_TOO_LOW = "level_too_low"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """
    Outcome of a hive operation.

    Attributes
    ----------
    status : OperationStatus
        `ok` when the hive changed, `ignored` otherwise
    reason : Optional[IgnoreReason]
        Why the operation was ignored
    value : Optional[T]
        Operation-specific payload (new bee, unlocked room, ...)
    persisted : bool
        False when the in-memory change could not be saved
    """

    status: OperationStatus
    reason: Optional[IgnoreReason] = None
    value: Optional[T] = None
    persisted: bool = False

    @property
    def ok(self) -> bool:
        return self.status == OperationStatus.OK

    @property
    def ignored(self) -> bool:
        return self.status == OperationStatus.IGNORED

    @classmethod
    def success(cls, value: Any = None, persisted: bool = True) -> "OperationResult[Any]":
        return cls(status=OperationStatus.OK, value=value, persisted=persisted)

    @classmethod
    def skipped(cls, reason: IgnoreReason) -> "OperationResult[Any]":
        return cls(status=OperationStatus.IGNORED, reason=reason)
