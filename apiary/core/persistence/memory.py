"""In-process persistence adapter, used by default and in tests."""

from __future__ import annotations

from typing import Dict, Optional

from apiary.core.persistence.base import JSONDocument, PersistenceAdapter


class InMemoryPersistence(PersistenceAdapter):
    """
    Stores encoded JSON strings in a dict.

    Documents go through the same encode/decode step as the real backends,
    so callers never share mutable state with the store.
    """

    name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[JSONDocument]:
        return self._decode(key, self._data.get(key))

    def save(self, key: str, document: JSONDocument) -> None:
        self._data[key] = self._encode(key, document)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def raw(self, key: str) -> Optional[str]:
        """Return the stored encoded string."""
        return self._data.get(key)

    def put_raw(self, key: str, raw: str) -> None:
        """Store an already-encoded (possibly malformed) payload."""
        self._data[key] = raw
