"""
Guild hive document schema and migrations.

The hive is persisted as a single JSON document under `hive:guild` with
camelCase keys and a `schema_version` tag. Documents written before the tag
existed are treated as version 1.

Version history
---------------
1  untagged; `treasury`, `beeEggs` and `createdAt` could be missing and
   rooms carried no `bonus` for the entrance
2  tagged; every field present
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from apiary.domain.models.hive import BeeEgg, CollectedBee, GuildHive, HiveRoom
from apiary.modules.shared.constants import DEFAULT_ROOMS, HIVE_SCHEMA_VERSION

SCHEMA_VERSION_KEY = "schema_version"


def default_rooms() -> List[HiveRoom]:
    """Fresh copy of the four-room template."""
    return [HiveRoom.from_dict(dict(room)) for room in DEFAULT_ROOMS]


def hive_to_document(hive: GuildHive) -> Dict[str, Any]:
    return {
        SCHEMA_VERSION_KEY: HIVE_SCHEMA_VERSION,
        "userId": hive.user_id,
        "hiveName": hive.hive_name,
        "level": hive.level,
        "experience": hive.experience,
        "rooms": [room.to_dict() for room in hive.rooms],
        "collectedBees": [bee.to_dict() for bee in hive.collected_bees],
        "beeEggs": [egg.to_dict() for egg in hive.bee_eggs],
        "treasury": hive.treasury,
        "createdAt": hive.created_at,
    }


def _migrate_v1(document: Dict[str, Any]) -> Dict[str, Any]:
    migrated = dict(document)
    migrated.setdefault("treasury", 0)
    migrated.setdefault("beeEggs", [])
    migrated.setdefault("collectedBees", [])
    migrated.setdefault("createdAt", 0)
    migrated.setdefault("level", 1)
    migrated.setdefault("experience", 0)

    rooms = migrated.get("rooms")
    if not rooms:
        migrated["rooms"] = [dict(room) for room in DEFAULT_ROOMS]
    else:
        template = {room["id"]: room for room in DEFAULT_ROOMS}
        patched = []
        for room in rooms:
            room = dict(room)
            if "bonus" not in room and room.get("id") in template:
                room["bonus"] = template[room["id"]]["bonus"]
            patched.append(room)
        migrated["rooms"] = patched

    migrated[SCHEMA_VERSION_KEY] = 2
    return migrated


# from_version -> step producing from_version + 1
MIGRATIONS: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    1: _migrate_v1,
}


def migrate_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring a stored hive document up to the current schema version.

    Raises:
        ValueError: If the document is newer than this code understands
            or no migration path exists.
    """
    version = int(document.get(SCHEMA_VERSION_KEY, 1))
    if version > HIVE_SCHEMA_VERSION:
        raise ValueError(
            f"Hive document schema {version} is newer than supported {HIVE_SCHEMA_VERSION}"
        )

    while version < HIVE_SCHEMA_VERSION:
        step = MIGRATIONS.get(version)
        if step is None:
            raise ValueError(f"No migration from hive schema {version}")
        document = step(document)
        version = int(document[SCHEMA_VERSION_KEY])
    return document


def hive_from_document(document: Dict[str, Any]) -> GuildHive:
    """
    Rebuild the aggregate from a stored document, migrating it first.

    Raises KeyError/TypeError/ValueError (or DomainValidationError) for
    documents that cannot be interpreted.
    """
    if not isinstance(document, dict):
        raise TypeError(f"Hive document must be an object, got {type(document).__name__}")

    data = migrate_document(document)
    return GuildHive(
        user_id=data["userId"],
        hive_name=data.get("hiveName", ""),
        rooms=[HiveRoom.from_dict(room) for room in data["rooms"]],
        level=int(data["level"]),
        experience=int(data["experience"]),
        collected_bees=[CollectedBee.from_dict(bee) for bee in data["collectedBees"]],
        bee_eggs=[BeeEgg.from_dict(egg) for egg in data["beeEggs"]],
        treasury=int(data["treasury"]),
        created_at=int(data["createdAt"]),
    )
