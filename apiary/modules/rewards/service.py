"""
RewardDistributorService - activity completion rewards
=======================================================

Purpose
-------
Turns a finished game or quiz into hive rewards: draws a species, computes
fragment and honey with the activity's reward profile and the learner's
current perk modifiers, hands both to the hive, and records the adjusted
score with the learning-progress recorder.

Design Notes
------------
- Reward distribution is best-effort. Failures from the hive or the
  progress recorder are logged and reported on the `RewardOutcome`; they
  never propagate to the activity flow
- All arithmetic lives in `apiary.modules.shared.formulas`
- Species unlock requirements are not checked before awarding fragment
- Publishes `reward.distributed` after each game or quiz
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from apiary.core.logging.logger import LogContext
from apiary.domain.models.hive import CollectedBee
from apiary.domain.models.species import BeeSpecies
from apiary.modules.catalog.service import SpeciesCatalogService
from apiary.modules.hive.service import Clock, HiveService, epoch_millis
from apiary.modules.perks.service import PerkModifiers, PerkModifierService
from apiary.modules.rewards.progress import ProgressEntry, ProgressRecorder
from apiary.modules.shared import constants
from apiary.modules.shared.base_service import BaseService
from apiary.modules.shared.exceptions import NotFoundError
from apiary.modules.shared.formulas import (
    RewardProfile,
    calculate_fragment_reward,
    calculate_game_time_limit,
    calculate_honey_reward,
    calculate_quiz_score,
    calculate_recorded_game_score,
)
from apiary.modules.shared.results import OperationResult

if TYPE_CHECKING:
    from logging import Logger

    from apiary.core.config.manager import ConfigManager
    from apiary.core.event.bus import EventBus


@dataclass
class RewardOutcome:
    """
    What a completed activity earned.

    `fragment_result` / `honey_result` are the hive's answers (None when the
    call was not made or raised); `errors` lists the failures that were
    absorbed.
    """

    user_id: str
    activity_id: str
    score: int
    species_id: Optional[str] = None
    fragment: int = 0
    honey: int = 0
    fragment_result: Optional[OperationResult[Any]] = None
    honey_result: Optional[OperationResult[Any]] = None
    errors: List[str] = field(default_factory=list)

    @property
    def hatched_bee(self) -> Optional[CollectedBee]:
        if self.fragment_result is None or not self.fragment_result.ok:
            return None
        return self.fragment_result.value["hatched_bee"]

    @property
    def awarded(self) -> bool:
        """True when the hive accepted both the fragment and the honey."""
        return bool(
            self.fragment_result
            and self.fragment_result.ok
            and self.honey_result
            and self.honey_result.ok
        )

    def to_dict(self) -> Dict[str, Any]:
        hatched = self.hatched_bee
        return {
            "user_id": self.user_id,
            "activity_id": self.activity_id,
            "score": self.score,
            "species_id": self.species_id,
            "fragment": self.fragment,
            "honey": self.honey,
            "awarded": self.awarded,
            "hatched_bee_id": hatched.id if hatched else None,
            "errors": list(self.errors),
        }


class RewardDistributorService(BaseService):
    """
    Dependencies
    ------------
    - HiveService: receives fragment and honey
    - SpeciesCatalogService: species draw and rarity bonus
    - PerkModifierService: learner modifiers
    - ProgressRecorder: game scores, quiz results, flashcard reviews
    """

    def __init__(
        self,
        hive_service: HiveService,
        catalog: SpeciesCatalogService,
        perk_service: PerkModifierService,
        progress: ProgressRecorder,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        clock: Clock = epoch_millis,
    ) -> None:
        super().__init__(config_manager, event_bus, logger)
        self._hives = hive_service
        self._catalog = catalog
        self._perks = perk_service
        self._progress = progress
        self._clock = clock

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def complete_game(
        self,
        user_id: str,
        activity_id: str,
        score: int,
        time_left: Optional[int] = None,
        time: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> RewardOutcome:
        """
        Reward a finished mini-game.

        Args:
            user_id: Learner who played
            activity_id: Reward profile name ("memory-match", "word-hive",
                "buzz-race", or any profile added in config)
            score: Raw game score
            time_left: Seconds left on the clock for timed games
            time: Seconds taken, stored with the progress entry
            rng: Random source for the species draw

        Raises:
            ValidationError: If score is negative
            NotFoundError: If no reward profile exists for activity_id
        """
        self.validate_non_negative_int(score, "score")
        profile = self.get_reward_profile(activity_id)

        with LogContext(user_id=user_id, activity=activity_id, operation="complete_game"):
            modifiers = self._perks.get_perk_modifiers(user_id)
            recorded = calculate_recorded_game_score(score, modifiers.game_score_multiplier)
            outcome = self._distribute(
                user_id,
                profile,
                score,
                recorded,
                modifiers,
                score_multiplier=modifiers.game_score_multiplier,
                time_left=time_left,
                rng=rng,
            )

            entry = ProgressEntry(
                user_id=user_id,
                activity_id=activity_id,
                score=recorded,
                completed_at=self._clock(),
                time=time,
            )
            self._record(outcome, "record_game_score", self._progress.record_game_score, entry)
            self._finish(outcome)
            return outcome

    def complete_quiz(
        self,
        user_id: str,
        quiz_id: str,
        raw_score: int,
        rng: Optional[random.Random] = None,
    ) -> RewardOutcome:
        """
        Reward a finished quiz.

        The raw percentage is raised by the quiz score bonus and capped at
        100; the capped score is recorded and drives the quiz reward
        profile.
        """
        self.validate_non_negative_int(raw_score, "raw_score")
        profile = self.get_reward_profile(constants.QUIZ_PROFILE)

        with LogContext(user_id=user_id, activity=quiz_id, operation="complete_quiz"):
            modifiers = self._perks.get_perk_modifiers(user_id)
            final_score = calculate_quiz_score(
                raw_score, modifiers.quiz_score_bonus, constants.MAX_QUIZ_SCORE
            )
            outcome = self._distribute(user_id, profile, final_score, final_score, modifiers, rng=rng)
            outcome.activity_id = quiz_id

            entry = ProgressEntry(
                user_id=user_id,
                activity_id=quiz_id,
                score=final_score,
                completed_at=self._clock(),
            )
            self._record(outcome, "record_quiz_result", self._progress.record_quiz_result, entry)
            self._finish(outcome)
            return outcome

    def review_flashcard(self, user_id: str, flashcard_id: str) -> float:
        """
        Count a flashcard review and return the learner's retention bonus.

        The hive is not changed.
        """
        self.validate_identifier(flashcard_id, "flashcard_id")
        try:
            self._progress.record_flashcard_review(user_id, flashcard_id)
        except Exception as exc:
            self.log_error("review_flashcard", exc, user_id=user_id, flashcard_id=flashcard_id)
        return self._perks.get_perk_modifiers(user_id).flashcard_retention_bonus

    def game_time_limit(
        self,
        user_id: str,
        base_seconds: int = constants.BUZZ_RACE_BASE_SECONDS,
        minimum: int = constants.BUZZ_RACE_MIN_SECONDS,
    ) -> int:
        """
        Countdown length for a timed game after haste modifiers.

        Example:
            >>> distributor.game_time_limit("u1")  # one haste bee active
            24
        """
        modifiers = self._perks.get_perk_modifiers(user_id)
        return calculate_game_time_limit(base_seconds, modifiers.game_time_multiplier, minimum)

    def get_reward_profile(self, activity_id: str) -> RewardProfile:
        profiles: Dict[str, Dict[str, Any]] = self.get_config(
            "rewards.profiles", constants.REWARD_PROFILES
        )
        data = profiles.get(activity_id)
        if data is None:
            raise NotFoundError("RewardProfile", activity_id)
        return RewardProfile.from_config(activity_id, data)

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _draw_species(self, rng: Optional[random.Random]) -> Optional[BeeSpecies]:
        species = self._catalog.get_random_species_weighted(rng)
        if species is None:
            species = self._catalog.get_random_species(rng)
        return species

    def _distribute(
        self,
        user_id: str,
        profile: RewardProfile,
        score: int,
        recorded_score: int,
        modifiers: PerkModifiers,
        score_multiplier: float = 1.0,
        time_left: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> RewardOutcome:
        outcome = RewardOutcome(
            user_id=user_id, activity_id=profile.activity_id, score=recorded_score
        )

        species = self._draw_species(rng)
        if species is None:
            self.log.warning(
                "Species catalog is empty; no reward distributed",
                extra={"activity_id": profile.activity_id},
            )
            outcome.errors.append("empty_catalog")
            return outcome

        rarity_bonus = self._catalog.rarity_bonus(species)
        outcome.species_id = species.id
        outcome.fragment = calculate_fragment_reward(
            score,
            profile,
            rarity_bonus,
            score_multiplier=score_multiplier,
            fragment_bonus=modifiers.fragment_bonus,
            time_left=time_left,
        )
        outcome.honey = calculate_honey_reward(
            score,
            profile,
            rarity_bonus,
            score_multiplier=score_multiplier,
            honey_bonus=modifiers.honey_bonus,
            time_left=time_left,
        )

        try:
            outcome.fragment_result = self._hives.add_fragment(
                user_id, species.id, outcome.fragment
            )
        except Exception as exc:
            self.log_error("add_fragment", exc, user_id=user_id, species_id=species.id)
            outcome.errors.append(f"add_fragment: {exc}")

        try:
            outcome.honey_result = self._hives.add_treasury_honey(user_id, outcome.honey)
        except Exception as exc:
            self.log_error("add_treasury_honey", exc, user_id=user_id)
            outcome.errors.append(f"add_treasury_honey: {exc}")

        return outcome

    def _record(
        self,
        outcome: RewardOutcome,
        operation: str,
        record: Callable[[ProgressEntry], None],
        entry: ProgressEntry,
    ) -> None:
        try:
            record(entry)
        except Exception as exc:
            self.log_error(operation, exc, user_id=entry.user_id)
            outcome.errors.append(f"{operation}: {exc}")

    def _finish(self, outcome: RewardOutcome) -> None:
        self.emit_event("reward.distributed", outcome.to_dict())
        self.log_operation(
            "distribute_reward",
            user_id=outcome.user_id,
            activity_id=outcome.activity_id,
            species_id=outcome.species_id,
            fragment=outcome.fragment,
            honey=outcome.honey,
            awarded=outcome.awarded,
        )
