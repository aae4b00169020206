"""
SpeciesCatalogService - read-only bee species reference data
=============================================================

Handles:
- Species lookup by id
- Rarity weights and rarity reward bonuses (config-driven)
- Weighted-random species draws for activity rewards
- Optional persisted catalog override ("hive:bee-species")

The catalog declares unlock requirements on some species but the reward
flow does not enforce them; `is_unlocked_for` is offered for callers that
want to gate drops themselves.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional

from apiary.core.persistence.base import PersistenceAdapter
from apiary.domain.models.base import DomainValidationError
from apiary.domain.models.species import BeeSpecies
from apiary.modules.catalog.data import DEFAULT_BEE_SPECIES
from apiary.modules.shared import constants
from apiary.modules.shared.base_service import BaseService
from apiary.modules.shared.exceptions import ApiaryDomainException, NotFoundError
from apiary.modules.shared.formulas import weighted_pick

if TYPE_CHECKING:
    from logging import Logger

    from apiary.core.config.manager import ConfigManager
    from apiary.core.event.bus import EventBus


class SpeciesCatalogService(BaseService):
    """Lookup and weighted selection over the bee species catalog."""

    def __init__(
        self,
        persistence: PersistenceAdapter,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        species: Optional[Iterable[BeeSpecies]] = None,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._persistence = persistence
        self._species: List[BeeSpecies] = list(
            species if species is not None else DEFAULT_BEE_SPECIES
        )

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load_override(self) -> bool:
        """
        Replace the catalog with the persisted override, if one exists.

        A missing, unreadable or malformed override leaves the current
        catalog in place. Returns True when an override was applied.
        """
        key = constants.BEE_SPECIES_STORAGE_KEY
        try:
            document = self._persistence.load(key)
        except ApiaryDomainException as exc:
            self.log_error("load_species_override", exc, storage_key=key)
            return False

        if document is None:
            return False

        try:
            if not isinstance(document, list):
                raise ValueError(f"expected a list, got {type(document).__name__}")
            species = [BeeSpecies.from_dict(entry) for entry in document]
        except (KeyError, TypeError, ValueError, DomainValidationError) as exc:
            self.log.warning(
                "Malformed bee species override; keeping built-in catalog",
                extra={"storage_key": key, "error_message": str(exc)},
            )
            return False

        self._species = species
        self.log_operation("load_species_override", species_count=len(species))
        return True

    def save_override(self, species: Iterable[BeeSpecies]) -> None:
        """Replace the catalog and persist it as the override document."""
        self._species = list(species)
        self._persistence.save(
            constants.BEE_SPECIES_STORAGE_KEY,
            [entry.to_dict() for entry in self._species],
        )
        self.log_operation("save_species_override", species_count=len(self._species))

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def all(self) -> List[BeeSpecies]:
        return list(self._species)

    def get(self, species_id: str) -> Optional[BeeSpecies]:
        return next((s for s in self._species if s.id == species_id), None)

    def require(self, species_id: str) -> BeeSpecies:
        species = self.get(species_id)
        if species is None:
            raise NotFoundError("BeeSpecies", species_id)
        return species

    def rarity_weight(self, species: BeeSpecies) -> int:
        weights: Dict[str, int] = self.get_config(
            "rarity.weights", constants.RARITY_WEIGHTS
        )
        return weights.get(species.rarity.value, constants.UNKNOWN_RARITY_WEIGHT)

    def rarity_bonus(self, species: BeeSpecies) -> int:
        bonuses: Dict[str, int] = self.get_config(
            "rarity.fragment_bonus", constants.RARITY_FRAGMENT_BONUS
        )
        return bonuses.get(species.rarity.value, 0)

    # -------------------------------------------------------------------------
    # Draws
    # -------------------------------------------------------------------------

    def get_random_species_weighted(
        self, rng: Optional[random.Random] = None
    ) -> Optional[BeeSpecies]:
        """
        Draw a species proportionally to its rarity weight.

        Returns None when the catalog is empty.
        """
        roll = (rng or random).random()
        weights = [self.rarity_weight(s) for s in self._species]
        return weighted_pick(self._species, weights, roll)

    def get_random_species(self, rng: Optional[random.Random] = None) -> Optional[BeeSpecies]:
        """Uniform draw, the fallback when a weighted draw yields nothing."""
        if not self._species:
            return None
        return (rng or random).choice(self._species)

    @staticmethod
    def is_unlocked_for(species: BeeSpecies, stats: Dict[str, int]) -> bool:
        """True when the species has no requirement or `stats` meets it."""
        if species.unlock_requirement is None:
            return True
        return species.unlock_requirement.is_met(stats)
