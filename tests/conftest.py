"""
Pytest Configuration and Fixtures for Apiary Tests
===================================================

Purpose
-------
Centralized fixtures for the hive engine test suite: balance configuration,
event bus, in-memory persistence, wired services and a deterministic clock
and id factory.

Architecture Notes
------------------
- Unit tests run against InMemoryPersistence (fast, isolated)
- Integration tests use an in-memory SQLite database through SQLAlchemy
- Fixtures are function-scoped so every test starts with a clean hive
"""

from __future__ import annotations

import os
import random
from typing import Callable, List

import pytest

from apiary.core.config.manager import ConfigManager
from apiary.core.event.bus import EventBus
from apiary.core.logging.logger import get_logger
from apiary.core.persistence.memory import InMemoryPersistence
from apiary.domain.models.species import BeeSpecies
from apiary.modules.catalog import SpeciesCatalogService
from apiary.modules.hive import HiveService
from apiary.modules.perks import PerkModifierService
from apiary.modules.rewards import PersistentProgressRecorder, RewardDistributorService
from apiary.modules.shared.constants import BALANCE_DEFAULTS

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
FIXED_NOW_MS = 1_700_000_000_000

# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Configure pytest environment."""
    os.environ.setdefault("APIARY_ENV", "testing")
    os.environ.setdefault("APIARY_LOG_LEVEL", "DEBUG")


# ============================================================================
# INFRASTRUCTURE FIXTURES
# ============================================================================


@pytest.fixture
def config_manager() -> ConfigManager:
    """Balance configuration with built-in defaults only (no YAML)."""
    return ConfigManager(defaults=BALANCE_DEFAULTS)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def persistence() -> InMemoryPersistence:
    return InMemoryPersistence()


@pytest.fixture
def clock() -> Callable[[], int]:
    return lambda: FIXED_NOW_MS


@pytest.fixture
def id_factory() -> Callable[[str], str]:
    """Sequential ids: bee-1, egg-2, bee-3, ..."""
    counter = iter(range(1, 10_000))
    return lambda prefix: f"{prefix}-{next(counter)}"


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def catalog(persistence, config_manager, event_bus) -> SpeciesCatalogService:
    return SpeciesCatalogService(
        persistence=persistence,
        config_manager=config_manager,
        event_bus=event_bus,
        logger=get_logger("tests.catalog"),
    )


@pytest.fixture
def hive_service(persistence, config_manager, event_bus, clock, id_factory) -> HiveService:
    return HiveService(
        persistence=persistence,
        config_manager=config_manager,
        event_bus=event_bus,
        logger=get_logger("tests.hive"),
        clock=clock,
        id_factory=id_factory,
    )


@pytest.fixture
def initialized_hive(hive_service) -> HiveService:
    """HiveService with a fresh hive owned by USER_ID."""
    hive_service.initialize(USER_ID, "Test Hive")
    return hive_service


@pytest.fixture
def bare_entrance(initialized_hive) -> HiveService:
    """Initialized hive whose entrance hall carries no room bonus."""
    initialized_hive.hive.rooms[0].bonus = None
    return initialized_hive


@pytest.fixture
def perk_service(hive_service, catalog, config_manager, event_bus) -> PerkModifierService:
    return PerkModifierService(
        hive_service=hive_service,
        catalog=catalog,
        config_manager=config_manager,
        event_bus=event_bus,
        logger=get_logger("tests.perks"),
    )


@pytest.fixture
def progress(persistence, clock) -> PersistentProgressRecorder:
    return PersistentProgressRecorder(persistence, clock)


@pytest.fixture
def reward_service(
    hive_service, catalog, perk_service, progress, config_manager, event_bus, clock
) -> RewardDistributorService:
    return RewardDistributorService(
        hive_service=hive_service,
        catalog=catalog,
        perk_service=perk_service,
        progress=progress,
        config_manager=config_manager,
        event_bus=event_bus,
        logger=get_logger("tests.rewards"),
        clock=clock,
    )


# ============================================================================
# HELPERS
# ============================================================================


@pytest.fixture
def house_bee(initialized_hive) -> Callable[[str], str]:
    """Collect a bee of `species_id` and put it in the entrance hall."""

    def _house(species_id: str, room_id: str = "room-entrance") -> str:
        bee = initialized_hive.collect_bee(USER_ID, species_id).value
        initialized_hive.assign_bee_to_room(USER_ID, bee.id, room_id)
        return bee.id

    return _house


def published_names(publish_spy) -> List[str]:
    """Event names from a `mocker.spy(event_bus, "publish")`."""
    return [call.args[0] for call in publish_spy.call_args_list]


def species_ids(species: List[BeeSpecies]) -> List[str]:
    return [s.id for s in species]
