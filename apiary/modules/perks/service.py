"""
PerkModifierService - derived modifier table from the active hive
==================================================================

Handles:
- The set of perks carried by bees currently housed in rooms
- Folding perk effects and unlocked-room bonuses into `PerkModifiers`

Perks are deduplicated before they are folded in: two active bees sharing a
perk apply its effect once. Room bonuses apply once per unlocked room that
carries one, regardless of who lives there.

This service only reads hive state.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import TYPE_CHECKING, Dict, List

from apiary.domain.models.species import Perk
from apiary.modules.catalog.service import SpeciesCatalogService
from apiary.modules.hive.service import HiveService
from apiary.modules.shared import constants
from apiary.modules.shared.base_service import BaseService
from apiary.modules.shared.exceptions import ConfigurationError

if TYPE_CHECKING:
    from logging import Logger

    from apiary.core.config.manager import ConfigManager
    from apiary.core.event.bus import EventBus


@dataclass
class PerkModifiers:
    """Bonuses consumed by quiz, game and flashcard scoring."""

    quiz_score_bonus: float = 0.0
    game_time_multiplier: float = 1.0
    xp_bonus: float = 0.0
    honey_bonus: float = 0.0
    fragment_bonus: float = 0.0
    game_score_multiplier: float = 1.0
    flashcard_retention_bonus: float = 0.0

    def apply(self, effect: Dict[str, float]) -> None:
        """Fields ending in `_multiplier` multiply; every other field adds."""
        known = {f.name for f in fields(self)}
        for name, value in effect.items():
            if name not in known:
                raise ConfigurationError(
                    f"perks.effects.{name}", f"Unknown modifier field '{name}'"
                )
            current = getattr(self, name)
            if name.endswith("_multiplier"):
                setattr(self, name, current * value)
            else:
                setattr(self, name, current + value)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


class PerkModifierService(BaseService):
    def __init__(
        self,
        hive_service: HiveService,
        catalog: SpeciesCatalogService,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._hives = hive_service
        self._catalog = catalog

    def get_active_perks(self, user_id: str) -> List[Perk]:
        """
        Distinct perks of every active bee's species, in first-seen order.

        Empty for an uninitialized hive or a user who does not own it.
        """
        if not self._hives.owns_hive(user_id):
            return []

        hive = self._hives.hive
        assert hive is not None

        perks: List[Perk] = []
        for bee in hive.active_bees():
            species = self._catalog.get(bee.species_id)
            if species is None:
                self.log.debug(
                    "Active bee references unknown species",
                    extra={"bee_id": bee.id, "species_id": bee.species_id},
                )
                continue
            for perk in species.perks:
                if perk not in perks:
                    perks.append(perk)
        return perks

    def get_perk_modifiers(self, user_id: str) -> PerkModifiers:
        """
        Modifier table for the user's hive.

        Example:
            Active bees carrying focus and wisdom, no room bonuses:
            >>> mods = perk_service.get_perk_modifiers("u1")
            >>> (mods.quiz_score_bonus, mods.xp_bonus, mods.flashcard_retention_bonus)
            (0.1, 0.2, 0.3)
        """
        modifiers = PerkModifiers()
        if not self._hives.owns_hive(user_id):
            return modifiers

        effects: Dict[str, Dict[str, float]] = self.get_config(
            "perks.effects", constants.PERK_EFFECTS
        )
        for perk in self.get_active_perks(user_id):
            modifiers.apply(effects.get(perk.value, {}))

        room_bonuses: Dict[str, Dict[str, float]] = self.get_config(
            "perks.room_bonuses", constants.ROOM_BONUS_EFFECTS
        )
        hive = self._hives.hive
        assert hive is not None
        for room in hive.unlocked_rooms():
            if room.bonus is not None:
                modifiers.apply(room_bonuses.get(room.bonus.value, {}))

        return modifiers
