"""
Persistence adapter contract.

The hive engine stores whole JSON documents under namespaced keys
("hive:guild", "hive:bee-species"). Adapters only move documents; they know
nothing about their contents.

Every adapter raises `PersistenceError` for backend failures and for stored
payloads that are not valid JSON, so callers handle a single exception type.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Optional

from apiary.modules.shared.exceptions import PersistenceError

JSONDocument = Any


class PersistenceAdapter(ABC):
    """Load/save JSON documents by key."""

    name: str = "abstract"

    @abstractmethod
    def load(self, key: str) -> Optional[JSONDocument]:
        """Return the stored document, or None when the key is absent."""

    @abstractmethod
    def save(self, key: str, document: JSONDocument) -> None:
        """Store `document` under `key`, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key` if present."""

    def close(self) -> None:
        """Release backend resources."""

    @staticmethod
    def _encode(key: str, document: JSONDocument) -> str:
        try:
            return json.dumps(document, ensure_ascii=False, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise PersistenceError("save", key, exc) from exc

    @staticmethod
    def _decode(key: str, raw: Optional[str]) -> Optional[JSONDocument]:
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise PersistenceError("load", key, exc) from exc
