"""
Unit tests for the hive document schema and its migrations.
"""

import pytest

from apiary.domain.models.hive import BeeEgg, CollectedBee, Evolution, GuildHive
from apiary.modules.hive import hive_from_document, hive_to_document, migrate_document
from apiary.modules.hive import schema
from apiary.modules.shared.constants import HIVE_SCHEMA_VERSION


@pytest.fixture
def hive():
    hive = GuildHive(
        user_id="user-1",
        hive_name="Comb",
        rooms=schema.default_rooms(),
        level=4,
        experience=700,
        treasury=55,
        created_at=123,
    )
    hive.collected_bees.append(
        CollectedBee(
            id="bee-1",
            user_id="user-1",
            species_id="bee-sage",
            level=6,
            evolution=Evolution.ADULT,
            active=True,
            nickname="Sol",
        )
    )
    hive.rooms[0].inhabitants.append("bee-1")
    hive.bee_eggs.append(
        BeeEgg(id="egg-2", user_id="user-1", species_id="bee-drone", fragment=35, acquired_at=99)
    )
    return hive


@pytest.mark.unit
class TestDocument:
    def test_document_layout(self, hive):
        document = hive_to_document(hive)

        assert document["schema_version"] == HIVE_SCHEMA_VERSION
        assert sorted(document) == sorted(
            [
                "schema_version",
                "userId",
                "hiveName",
                "level",
                "experience",
                "rooms",
                "collectedBees",
                "beeEggs",
                "treasury",
                "createdAt",
            ]
        )
        assert document["collectedBees"][0]["nickname"] == "Sol"
        assert document["rooms"][0]["inhabitants"] == ["bee-1"]
        assert "bonus" not in document["rooms"][1]

    def test_rebuild_keeps_state(self, hive):
        restored = hive_from_document(hive_to_document(hive))

        assert restored.user_id == "user-1"
        assert (restored.level, restored.experience, restored.treasury) == (4, 700, 55)
        assert restored.find_bee("bee-1").evolution == Evolution.ADULT
        assert restored.find_egg("bee-drone").fragment == 35
        assert restored.invariant_violations() == []

    def test_default_rooms_are_fresh_copies(self):
        first = schema.default_rooms()
        first[0].inhabitants.append("bee-x")

        assert schema.default_rooms()[0].inhabitants == []


@pytest.mark.unit
class TestMigration:
    def test_untagged_document_without_rooms_gets_template(self):
        migrated = migrate_document({"userId": "user-1", "hiveName": "Old"})

        assert migrated["schema_version"] == 2
        assert [room["id"] for room in migrated["rooms"]] == [
            "room-entrance",
            "room-nursery",
            "room-library",
            "room-throne",
        ]
        assert (migrated["treasury"], migrated["level"], migrated["experience"]) == (0, 1, 0)

    def test_existing_bonus_is_kept(self):
        migrated = migrate_document(
            {
                "userId": "user-1",
                "rooms": [
                    {"id": "room-entrance", "name": "Entrance Hall", "bonus": "focus"},
                    {"id": "room-custom", "name": "Attic"},
                ],
            }
        )

        assert migrated["rooms"][0]["bonus"] == "focus"
        assert "bonus" not in migrated["rooms"][1]

    def test_current_document_untouched(self, hive):
        document = hive_to_document(hive)

        assert migrate_document(document) == document

    def test_newer_version_rejected(self):
        with pytest.raises(ValueError):
            migrate_document({"schema_version": HIVE_SCHEMA_VERSION + 1})

    def test_missing_migration_step(self, monkeypatch):
        monkeypatch.setattr(schema, "MIGRATIONS", {})

        with pytest.raises(ValueError):
            migrate_document({"userId": "user-1"})

    def test_non_mapping_rejected(self):
        with pytest.raises(TypeError):
            hive_from_document(["not", "a", "hive"])
