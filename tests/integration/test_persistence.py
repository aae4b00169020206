"""
Integration Tests for Persistence Adapters
==========================================

Purpose
-------
Exercise the document adapters the hive engine stores its state through.

Test Coverage
-------------
- SqlPersistence against an in-memory SQLite database (real SQLAlchemy)
- RedisPersistence with a mocked client (key prefixing, error mapping)
- InMemoryPersistence isolation from caller-held documents
- A HiveService writing through and reloading from SQL

Testing Strategy
----------------
- SQLite needs no external service, so these run in every environment
- Redis is mocked at the client boundary; no server is required
"""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool

from apiary.core.logging.logger import get_logger
from apiary.core.persistence.memory import InMemoryPersistence
from apiary.core.persistence.redis_store import RedisPersistence
from apiary.core.persistence.sql_store import SqlPersistence
from apiary.modules.hive import HiveService
from apiary.modules.shared.constants import GUILD_STORAGE_KEY
from apiary.modules.shared.exceptions import PersistenceError
from tests.conftest import USER_ID


@pytest.fixture
def sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sqlite_engine):
    return SqlPersistence(engine=sqlite_engine)


# ============================================================================
# SQL
# ============================================================================


@pytest.mark.integration
class TestSqlPersistence:
    def test_schema_created(self, sql_store, sqlite_engine):
        assert "kv_documents" in inspect(sqlite_engine).get_table_names()

    def test_save_and_load(self, sql_store):
        sql_store.save("hive:guild", {"userId": USER_ID, "level": 2})

        assert sql_store.load("hive:guild") == {"userId": USER_ID, "level": 2}

    def test_missing_key(self, sql_store):
        assert sql_store.load("hive:absent") is None

    def test_save_replaces_previous_document(self, sql_store):
        sql_store.save("hive:guild", {"level": 1})
        sql_store.save("hive:guild", {"level": 2})

        assert sql_store.load("hive:guild") == {"level": 2}

    def test_delete(self, sql_store):
        sql_store.save("hive:guild", {"level": 1})

        sql_store.delete("hive:guild")
        sql_store.delete("hive:guild")

        assert sql_store.load("hive:guild") is None

    def test_unencodable_document(self, sql_store):
        with pytest.raises(PersistenceError):
            sql_store.save("hive:guild", {"when": object()})

    def test_backend_error_is_wrapped(self, sql_store, mocker):
        mocker.patch.object(
            sql_store,
            "_upsert",
            side_effect=OperationalError("INSERT", {}, Exception("disk I/O error")),
        )

        with pytest.raises(PersistenceError) as excinfo:
            sql_store.save("hive:guild", {"level": 1})

        assert excinfo.value.operation == "save"
        assert excinfo.value.key == "hive:guild"

    def test_requires_url_or_engine(self):
        with pytest.raises(ValueError):
            SqlPersistence()

    def test_hive_round_trip_through_sql(self, sql_store, config_manager, event_bus):
        writer = HiveService(sql_store, config_manager, event_bus, get_logger("tests.sql"))
        writer.initialize(USER_ID, "Durable")
        bee = writer.collect_bee(USER_ID, "bee-scout").value
        writer.assign_bee_to_room(USER_ID, bee.id, "room-entrance")

        reader = HiveService(sql_store, config_manager, event_bus, get_logger("tests.sql"))
        hive = reader.load(USER_ID)

        assert hive.hive_name == "Durable"
        assert hive.find_bee(bee.id).active is True
        assert hive.find_room("room-entrance").inhabitants == [bee.id]


# ============================================================================
# REDIS
# ============================================================================


@pytest.mark.integration
class TestRedisPersistence:
    def test_keys_are_prefixed(self, mocker):
        client = mocker.MagicMock()
        store = RedisPersistence(key_prefix="apiary:", client=client)

        store.save(GUILD_STORAGE_KEY, {"level": 1})

        client.set.assert_called_once_with("apiary:hive:guild", '{"level": 1}')

    def test_load_decodes_bytes(self, mocker):
        client = mocker.MagicMock()
        client.get.return_value = b'{"level": 3}'
        store = RedisPersistence(client=client)

        assert store.load(GUILD_STORAGE_KEY) == {"level": 3}
        client.get.assert_called_once_with("apiary:hive:guild")

    def test_missing_key(self, mocker):
        client = mocker.MagicMock()
        client.get.return_value = None

        assert RedisPersistence(client=client).load("hive:absent") is None

    def test_connection_error_is_wrapped(self, mocker):
        client = mocker.MagicMock()
        client.get.side_effect = RedisConnectionError("connection refused")

        with pytest.raises(PersistenceError) as excinfo:
            RedisPersistence(client=client).load(GUILD_STORAGE_KEY)

        assert excinfo.value.operation == "load"

    def test_undecodable_bytes_are_wrapped(self, mocker):
        client = mocker.MagicMock()
        client.get.return_value = b"\xff\xfe{"

        with pytest.raises(PersistenceError) as excinfo:
            RedisPersistence(client=client).load(GUILD_STORAGE_KEY)

        assert isinstance(excinfo.value.cause, UnicodeDecodeError)

    def test_client_decode_error_is_wrapped(self, mocker):
        client = mocker.MagicMock()
        client.get.side_effect = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        with pytest.raises(PersistenceError):
            RedisPersistence(client=client).load(GUILD_STORAGE_KEY)

    def test_hive_load_falls_back_on_undecodable_payload(self, mocker, config_manager, event_bus):
        client = mocker.MagicMock()
        client.get.return_value = b"\xff\xfe{"
        service = HiveService(
            RedisPersistence(client=client), config_manager, event_bus, get_logger("tests.redis")
        )

        assert service.load(USER_ID) is None
        assert service.hive is None

    def test_corrupt_payload(self, mocker):
        client = mocker.MagicMock()
        client.get.return_value = "{broken"

        with pytest.raises(PersistenceError):
            RedisPersistence(client=client).load(GUILD_STORAGE_KEY)

    def test_delete_and_close(self, mocker):
        client = mocker.MagicMock()
        store = RedisPersistence(key_prefix="x:", client=client)

        store.delete("hive:guild")
        store.close()

        client.delete.assert_called_once_with("x:hive:guild")
        client.close.assert_called_once()

    def test_requires_url_or_client(self):
        with pytest.raises(ValueError):
            RedisPersistence()


# ============================================================================
# MEMORY
# ============================================================================


@pytest.mark.integration
class TestInMemoryPersistence:
    def test_documents_are_copied(self):
        store = InMemoryPersistence()
        document = {"rooms": [{"id": "room-entrance"}]}

        store.save("hive:guild", document)
        document["rooms"].clear()
        loaded = store.load("hive:guild")
        loaded["rooms"].append({"id": "room-x"})

        assert store.load("hive:guild") == {"rooms": [{"id": "room-entrance"}]}

    def test_raw_payload_is_json(self):
        store = InMemoryPersistence()

        store.save("k", {"b": 1, "a": 2})

        assert store.raw("k") == '{"a": 2, "b": 1}'
