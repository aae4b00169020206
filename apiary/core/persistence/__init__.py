"""
Persistence adapters for hive documents.

`RedisPersistence` (apiary.core.persistence.redis_store) and
`SqlPersistence` (apiary.core.persistence.sql_store) are imported by the
service container only when selected.
"""

from apiary.core.persistence.base import JSONDocument, PersistenceAdapter
from apiary.core.persistence.memory import InMemoryPersistence

__all__ = ["InMemoryPersistence", "JSONDocument", "PersistenceAdapter"]
