"""
Learning-progress recording.

The reward flow reports every completed activity to a `ProgressRecorder`.
`PersistentProgressRecorder` keeps the three progress lists (game scores,
quiz results, flashcard reviews) as JSON documents through any
`PersistenceAdapter`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from apiary.core.logging.logger import get_logger
from apiary.core.persistence.base import PersistenceAdapter
from apiary.modules.shared import constants

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProgressEntry:
    """One completed activity as seen by the learning-progress store."""

    user_id: str
    activity_id: str
    score: int
    completed_at: int
    time: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "userId": self.user_id,
            "activityId": self.activity_id,
            "score": self.score,
            "completedAt": self.completed_at,
        }
        if self.time is not None:
            data["time"] = self.time
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProgressEntry":
        return cls(
            user_id=data["userId"],
            activity_id=data["activityId"],
            score=int(data["score"]),
            completed_at=int(data["completedAt"]),
            time=data.get("time"),
        )


class ProgressRecorder(ABC):
    @abstractmethod
    def record_game_score(self, entry: ProgressEntry) -> None:
        ...

    @abstractmethod
    def record_quiz_result(self, entry: ProgressEntry) -> None:
        ...

    @abstractmethod
    def record_flashcard_review(self, user_id: str, flashcard_id: str) -> int:
        """Count one review; returns the new review total for the card."""


class PersistentProgressRecorder(ProgressRecorder):
    """
    Append-only progress lists stored as whole documents.

    Flashcard reviews are kept per (user, card) with a running count and
    the time of the last review. A stored document that is not a list is
    read as empty, and entries that are not objects are dropped.
    """

    def __init__(self, persistence: PersistenceAdapter, clock: Callable[[], int]) -> None:
        self._persistence = persistence
        self._clock = clock

    def _load_list(self, key: str) -> List[Dict[str, Any]]:
        document = self._persistence.load(key)
        if document is None:
            return []
        if not isinstance(document, list):
            logger.warning(
                "Progress document is not a list; starting empty",
                extra={"storage_key": key, "document_type": type(document).__name__},
            )
            return []

        entries = [e for e in document if isinstance(e, dict)]
        if len(entries) != len(document):
            logger.warning(
                "Dropped malformed progress entries",
                extra={"storage_key": key, "dropped": len(document) - len(entries)},
            )
        return entries

    def _append(self, key: str, entry: ProgressEntry) -> None:
        entries = self._load_list(key)
        entries.append(entry.to_dict())
        self._persistence.save(key, entries)

    def record_game_score(self, entry: ProgressEntry) -> None:
        self._append(constants.GAME_SCORES_STORAGE_KEY, entry)

    def record_quiz_result(self, entry: ProgressEntry) -> None:
        self._append(constants.QUIZ_RESULTS_STORAGE_KEY, entry)

    def record_flashcard_review(self, user_id: str, flashcard_id: str) -> int:
        key = constants.FLASHCARD_PROGRESS_STORAGE_KEY
        records = self._load_list(key)
        now = self._clock()

        for record in records:
            if record.get("userId") == user_id and record.get("flashcardId") == flashcard_id:
                count = record.get("timesReviewed")
                reviewed = (count if isinstance(count, int) else 0) + 1
                record["timesReviewed"] = reviewed
                record["lastReviewedAt"] = now
                break
        else:
            records.append(
                {
                    "userId": user_id,
                    "flashcardId": flashcard_id,
                    "timesReviewed": 1,
                    "lastReviewedAt": now,
                    "mastered": False,
                }
            )
            reviewed = 1

        self._persistence.save(key, records)
        return reviewed

    def game_scores(self, user_id: str) -> List[ProgressEntry]:
        return self._entries_for(constants.GAME_SCORES_STORAGE_KEY, user_id)

    def quiz_results(self, user_id: str) -> List[ProgressEntry]:
        return self._entries_for(constants.QUIZ_RESULTS_STORAGE_KEY, user_id)

    def _entries_for(self, key: str, user_id: str) -> List[ProgressEntry]:
        entries: List[ProgressEntry] = []
        for data in self._load_list(key):
            if data.get("userId") != user_id:
                continue
            try:
                entries.append(ProgressEntry.from_dict(data))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning(
                    "Skipping unreadable progress entry",
                    extra={"storage_key": key, "error_type": type(exc).__name__},
                )
        return entries
