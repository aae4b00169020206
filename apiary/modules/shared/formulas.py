"""
Apiary Reward Formulas

Purpose
-------
Pure calculation functions for the hive economy: weighted species draws,
fragment and honey rewards per activity, quiz score adjustment and the
timed-activity limit.

Design Notes
------------
- Pure functions only (no side effects, no config access)
- Every activity shares one fragment formula and one honey formula,
  parameterized by a `RewardProfile`
- Rounding follows the learner-facing client: `js_round` rounds halves up
  (2.5 -> 3, -2.5 -> -2), unlike Python's banker's rounding

Usage
-----
    from apiary.modules.shared.formulas import calculate_fragment_reward

    fragment = calculate_fragment_reward(80, profile, rarity_bonus=10)
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RewardProfile:
    """
    Activity-specific divisors and floors for the reward formulas.

    `fragment_time_divisor` / `honey_time_divisor` are None for activities
    without a countdown; otherwise remaining seconds divided by them are
    added as a speed bonus.
    """

    activity_id: str
    fragment_divisor: float
    fragment_floor: int
    honey_divisor: float
    honey_floor: int
    honey_rarity_divisor: int
    fragment_time_divisor: Optional[float] = None
    honey_time_divisor: Optional[float] = None
    fragment_cap: int = 100

    @classmethod
    def from_config(cls, activity_id: str, data: Dict[str, Any]) -> "RewardProfile":
        return cls(
            activity_id=activity_id,
            fragment_divisor=data["fragment_divisor"],
            fragment_floor=int(data["fragment_floor"]),
            honey_divisor=data["honey_divisor"],
            honey_floor=int(data["honey_floor"]),
            honey_rarity_divisor=int(data["honey_rarity_divisor"]),
            fragment_time_divisor=data.get("fragment_time_divisor"),
            honey_time_divisor=data.get("honey_time_divisor"),
            fragment_cap=int(data.get("fragment_cap", 100)),
        )


def js_round(value: float) -> int:
    """
    Round half up, like JavaScript's Math.round.

    Example:
        >>> js_round(2.5)
        3
        >>> js_round(-2.5)
        -2
    """
    return math.floor(value + 0.5)


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def weighted_pick(items: Sequence[T], weights: Sequence[float], roll: float) -> Optional[T]:
    """
    Pick an item proportionally to its weight using a roll in [0, 1).

    Draws `r = roll * total` and subtracts weights in order until `r <= 0`.
    Falls back to the last item for rolls that exhaust the pool. Returns None
    for an empty pool.

    Example:
        >>> weighted_pick(["a", "b"], [60, 40], 0.5)
        'a'
        >>> weighted_pick(["a", "b"], [60, 40], 0.7)
        'b'
    """
    if not items:
        return None
    remaining = roll * sum(weights)
    for item, weight in zip(items, weights):
        remaining -= weight
        if remaining <= 0:
            return item
    return items[-1]


def calculate_base_amount(score: float, divisor: float, score_multiplier: float = 1.0) -> int:
    """floor(score / divisor * score_multiplier)"""
    return math.floor(score / divisor * score_multiplier)


def calculate_time_bonus(time_left: Optional[float], divisor: Optional[float]) -> int:
    if divisor is None or not time_left or time_left <= 0:
        return 0
    return math.floor(time_left / divisor)


def calculate_fragment_reward(
    score: float,
    profile: RewardProfile,
    rarity_bonus: int,
    score_multiplier: float = 1.0,
    fragment_bonus: float = 0.0,
    time_left: Optional[float] = None,
) -> int:
    """
    Fragment awarded toward the drawn species' egg.

    fragment = clamp(base + time_bonus + rarity_bonus + round(base * fragment_bonus),
                     profile.fragment_floor, profile.fragment_cap)

    Example:
        >>> memory = RewardProfile("memory-match", 2, 10, 5, 5, 2)
        >>> calculate_fragment_reward(80, memory, rarity_bonus=10)
        50
        >>> calculate_fragment_reward(4, memory, rarity_bonus=0)
        10
    """
    base = calculate_base_amount(score, profile.fragment_divisor, score_multiplier)
    total = (
        base
        + calculate_time_bonus(time_left, profile.fragment_time_divisor)
        + rarity_bonus
        + js_round(base * fragment_bonus)
    )
    return clamp(total, profile.fragment_floor, profile.fragment_cap)


def calculate_honey_reward(
    score: float,
    profile: RewardProfile,
    rarity_bonus: int,
    score_multiplier: float = 1.0,
    honey_bonus: float = 0.0,
    time_left: Optional[float] = None,
) -> int:
    """
    Honey added to the treasury. Floored but never capped.

    honey = max(profile.honey_floor,
                base + time_bonus + floor(rarity_bonus / honey_rarity_divisor)
                + round(base * honey_bonus))

    Example:
        >>> memory = RewardProfile("memory-match", 2, 10, 5, 5, 2)
        >>> calculate_honey_reward(80, memory, rarity_bonus=10)
        21
    """
    base = calculate_base_amount(score, profile.honey_divisor, score_multiplier)
    total = (
        base
        + calculate_time_bonus(time_left, profile.honey_time_divisor)
        + rarity_bonus // profile.honey_rarity_divisor
        + js_round(base * honey_bonus)
    )
    return max(profile.honey_floor, total)


def calculate_recorded_game_score(score: float, score_multiplier: float) -> int:
    """Score written to learning progress: round(score * multiplier)."""
    return js_round(score * score_multiplier)


def calculate_quiz_score(raw_score: float, quiz_score_bonus: float, max_score: int = 100) -> int:
    """
    Apply the quiz bonus to a raw percentage score, capped at `max_score`.

    Example:
        >>> calculate_quiz_score(80, 0.10)
        88
        >>> calculate_quiz_score(95, 0.15)
        100
    """
    return min(max_score, js_round(raw_score * (1 + quiz_score_bonus)))


def calculate_game_time_limit(base_seconds: float, time_multiplier: float, minimum: int) -> int:
    """
    Countdown length for timed activities after haste perks.

    Example:
        >>> calculate_game_time_limit(30, 0.8, 6)
        24
    """
    return max(minimum, js_round(base_seconds * time_multiplier))
