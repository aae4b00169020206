"""
Unit Tests for the BeeSpecies Value Object
"""

import pytest

from apiary.domain.models.base import DomainValidationError
from apiary.domain.models.species import (
    BeeSpecies,
    Perk,
    Rarity,
    UnlockRequirement,
    UnlockRequirementType,
)
from apiary.modules.catalog.data import DEFAULT_BEE_SPECIES


@pytest.mark.unit
@pytest.mark.domain
class TestBeeSpecies:
    def test_perks_include_secondary(self):
        species = BeeSpecies(
            id="bee-x",
            name="X",
            rarity=Rarity.RARE,
            primary_perk=Perk.LUCK,
            secondary_perk=Perk.ENERGY,
        )

        assert species.perks == (Perk.LUCK, Perk.ENERGY)

    def test_perks_without_secondary(self):
        species = BeeSpecies(id="bee-x", name="X", rarity=Rarity.EPIC, primary_perk=Perk.FOCUS)

        assert species.perks == (Perk.FOCUS,)

    def test_species_is_immutable(self):
        species = DEFAULT_BEE_SPECIES[0]

        with pytest.raises(AttributeError):
            species.rarity = Rarity.LEGENDARY

    def test_empty_id_rejected(self):
        with pytest.raises(DomainValidationError):
            BeeSpecies(id=" ", name="X", rarity=Rarity.COMMON, primary_perk=Perk.SPEED)

    def test_document_uses_camel_case_keys(self):
        queen = next(s for s in DEFAULT_BEE_SPECIES if s.id == "bee-queen")

        data = queen.to_dict()

        assert data["primaryPerk"] == "wisdom"
        assert data["secondaryPerk"] == "inspiration"
        assert data["unlockRequirement"] == {"type": "quiz-score", "value": 80}
        assert BeeSpecies.from_dict(data) == queen

    def test_unknown_rarity_in_document(self):
        with pytest.raises(ValueError):
            BeeSpecies.from_dict(
                {"id": "bee-x", "name": "X", "rarity": "mythic", "primaryPerk": "speed"}
            )


@pytest.mark.unit
@pytest.mark.domain
class TestUnlockRequirement:
    def test_met_at_threshold(self):
        requirement = UnlockRequirement(UnlockRequirementType.GAMES_PLAYED, 10)

        assert requirement.is_met({"games-played": 10}) is True
        assert requirement.is_met({"games-played": 9}) is False

    def test_missing_stat_counts_as_zero(self):
        requirement = UnlockRequirement(UnlockRequirementType.FRIENDS_COUNT, 3)

        assert requirement.is_met({}) is False


@pytest.mark.unit
class TestDefaultCatalog:
    def test_eleven_species_with_unique_ids(self):
        ids = [s.id for s in DEFAULT_BEE_SPECIES]

        assert len(ids) == 11
        assert len(set(ids)) == 11

    def test_gated_species(self):
        gated = {
            s.id: (s.unlock_requirement.type.value, s.unlock_requirement.value)
            for s in DEFAULT_BEE_SPECIES
            if s.unlock_requirement is not None
        }

        assert gated == {
            "bee-queen": ("quiz-score", 80),
            "bee-scout": ("games-played", 10),
            "bee-guardian": ("course-complete", 1),
            "bee-sage": ("friends-count", 3),
        }
