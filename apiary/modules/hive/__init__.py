from apiary.modules.hive.schema import hive_from_document, hive_to_document, migrate_document
from apiary.modules.hive.service import HiveService, TimestampIdFactory

__all__ = [
    "HiveService",
    "TimestampIdFactory",
    "hive_from_document",
    "hive_to_document",
    "migrate_document",
]
