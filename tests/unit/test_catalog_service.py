"""
Unit tests for SpeciesCatalogService.

Covers lookup, config-driven rarity weights and bonuses, weighted draws and
the persisted catalog override.
"""

import random

import pytest

from apiary.core.config.manager import ConfigManager
from apiary.domain.models.species import BeeSpecies, Perk, Rarity
from apiary.modules.catalog import DEFAULT_BEE_SPECIES, SpeciesCatalogService
from apiary.modules.shared.constants import BEE_SPECIES_STORAGE_KEY
from apiary.modules.shared.exceptions import NotFoundError, PersistenceError
from tests.conftest import species_ids


class _FixedRoll:
    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.mark.unit
class TestLookup:
    def test_all_returns_default_catalog(self, catalog):
        assert species_ids(catalog.all()) == [s.id for s in DEFAULT_BEE_SPECIES]

    def test_get_known_species(self, catalog):
        assert catalog.get("bee-sage").rarity == Rarity.LEGENDARY

    def test_get_unknown_species(self, catalog):
        assert catalog.get("bee-unknown") is None

    def test_require_unknown_raises(self, catalog):
        with pytest.raises(NotFoundError):
            catalog.require("bee-unknown")

    def test_rarity_bonus_from_config(self, catalog, config_manager):
        sage = catalog.get("bee-sage")

        assert catalog.rarity_bonus(sage) == 30

        config_manager.set_override("rarity.fragment_bonus.legendary", 50)
        assert catalog.rarity_bonus(sage) == 50

    def test_is_unlocked_for(self, catalog):
        assert catalog.is_unlocked_for(catalog.get("bee-worker"), {}) is True
        assert catalog.is_unlocked_for(catalog.get("bee-queen"), {"quiz-score": 79}) is False
        assert catalog.is_unlocked_for(catalog.get("bee-queen"), {"quiz-score": 80}) is True


@pytest.mark.unit
class TestWeightedDraw:
    def test_lowest_roll_picks_first_species(self, catalog):
        assert catalog.get_random_species_weighted(_FixedRoll(0.0)).id == "bee-worker"

    def test_high_roll_picks_last_species(self, catalog):
        """Total weight 217; a roll of 0.99 lands in the final epic slot."""
        assert catalog.get_random_species_weighted(_FixedRoll(0.99)).id == "bee-muse"

    def test_legendary_slot(self, catalog):
        """Cumulative weight before the sage is 107; its slot ends at 110."""
        assert catalog.get_random_species_weighted(_FixedRoll(108 / 217)).id == "bee-sage"

    def test_empty_catalog_yields_none(self, persistence, config_manager, event_bus, mocker):
        empty = SpeciesCatalogService(
            persistence, config_manager, event_bus, mocker.MagicMock(), species=[]
        )

        assert empty.get_random_species_weighted() is None
        assert empty.get_random_species() is None

    def test_unknown_rarity_weight_defaults_to_one(self, persistence, event_bus, mocker):
        partial = ConfigManager(defaults={"rarity": {"weights": {"common": 60}}})
        catalog = SpeciesCatalogService(persistence, partial, event_bus, mocker.MagicMock())

        assert catalog.rarity_weight(catalog.get("bee-worker")) == 60
        assert catalog.rarity_weight(catalog.get("bee-sage")) == 1

    def test_draws_follow_weights(self, catalog):
        rng = random.Random(42)
        counts = {}

        for _ in range(4000):
            species = catalog.get_random_species_weighted(rng)
            counts[species.rarity] = counts.get(species.rarity, 0) + 1

        assert counts[Rarity.COMMON] > counts[Rarity.UNCOMMON] > counts[Rarity.LEGENDARY]

    def test_uniform_fallback_covers_catalog(self, catalog):
        rng = random.Random(7)

        seen = {catalog.get_random_species(rng).id for _ in range(500)}

        assert seen == {s.id for s in DEFAULT_BEE_SPECIES}


@pytest.mark.unit
class TestOverride:
    def test_override_replaces_catalog(self, catalog, persistence):
        custom = BeeSpecies(id="bee-moon", name="Moon Bee", rarity=Rarity.EPIC, primary_perk=Perk.LUCK)
        persistence.save(BEE_SPECIES_STORAGE_KEY, [custom.to_dict()])

        applied = catalog.load_override()

        assert applied is True
        assert catalog.all() == [custom]

    def test_missing_override_keeps_defaults(self, catalog):
        assert catalog.load_override() is False
        assert len(catalog.all()) == len(DEFAULT_BEE_SPECIES)

    def test_malformed_override_keeps_defaults(self, catalog, persistence, mocker):
        persistence.save(BEE_SPECIES_STORAGE_KEY, [{"id": "bee-bad", "rarity": "mythic"}])
        warning = mocker.spy(catalog.log, "warning")

        assert catalog.load_override() is False
        assert len(catalog.all()) == len(DEFAULT_BEE_SPECIES)
        warning.assert_called_once()

    def test_override_that_is_not_a_list(self, catalog, persistence):
        persistence.save(BEE_SPECIES_STORAGE_KEY, {"bee-worker": {}})

        assert catalog.load_override() is False

    def test_unreadable_override_keeps_defaults(self, catalog, persistence):
        persistence.put_raw(BEE_SPECIES_STORAGE_KEY, "{not json")

        assert catalog.load_override() is False
        assert len(catalog.all()) == len(DEFAULT_BEE_SPECIES)

    def test_backend_failure_keeps_defaults(self, catalog, persistence, mocker):
        mocker.patch.object(
            persistence, "load", side_effect=PersistenceError("load", BEE_SPECIES_STORAGE_KEY)
        )

        assert catalog.load_override() is False

    def test_save_override_persists(self, catalog, persistence):
        subset = catalog.all()[:2]

        catalog.save_override(subset)

        stored = persistence.load(BEE_SPECIES_STORAGE_KEY)
        assert [entry["id"] for entry in stored] == ["bee-worker", "bee-drone"]
        assert catalog.all() == subset
