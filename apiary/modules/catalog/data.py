"""Built-in bee species catalog."""

from __future__ import annotations

from typing import Tuple

from apiary.domain.models.species import (
    BeeSpecies,
    Perk,
    Rarity,
    UnlockRequirement,
    UnlockRequirementType,
)

DEFAULT_BEE_SPECIES: Tuple[BeeSpecies, ...] = (
    BeeSpecies(
        id="bee-worker",
        name="Worker Bee",
        emoji="🐝",
        rarity=Rarity.COMMON,
        primary_perk=Perk.SPEED,
        secondary_perk=Perk.ENERGY,
        description="Reliable and steady. Provides a +5% speed boost to all activities.",
    ),
    BeeSpecies(
        id="bee-drone",
        name="Drone Bee",
        emoji="🎯",
        rarity=Rarity.UNCOMMON,
        primary_perk=Perk.FOCUS,
        secondary_perk=Perk.WISDOM,
        description="Focused and thoughtful. +10% bonus to quiz scores when active.",
    ),
    BeeSpecies(
        id="bee-queen",
        name="Queen Bee",
        emoji="👑",
        rarity=Rarity.EPIC,
        primary_perk=Perk.WISDOM,
        secondary_perk=Perk.INSPIRATION,
        description="Regal and powerful. +20% experience gain from all learning activities.",
        unlock_requirement=UnlockRequirement(UnlockRequirementType.QUIZ_SCORE, 80),
    ),
    BeeSpecies(
        id="bee-scout",
        name="Scout Bee",
        emoji="⚡",
        rarity=Rarity.RARE,
        primary_perk=Perk.HASTE,
        secondary_perk=Perk.SPEED,
        description="Quick and agile. Reduce game time limits by 20%.",
        unlock_requirement=UnlockRequirement(UnlockRequirementType.GAMES_PLAYED, 10),
    ),
    BeeSpecies(
        id="bee-guardian",
        name="Guardian Bee",
        emoji="🛡️",
        rarity=Rarity.RARE,
        primary_perk=Perk.FOCUS,
        description="Protective and steady. Prevent quiz mistakes (-5% error rate).",
        unlock_requirement=UnlockRequirement(UnlockRequirementType.COURSE_COMPLETE, 1),
    ),
    BeeSpecies(
        id="bee-sage",
        name="Sage Bee",
        emoji="📚",
        rarity=Rarity.LEGENDARY,
        primary_perk=Perk.WISDOM,
        secondary_perk=Perk.FOCUS,
        description="Ancient knowledge keeper. +30% flashcard retention rate.",
        unlock_requirement=UnlockRequirement(UnlockRequirementType.FRIENDS_COUNT, 3),
    ),
    BeeSpecies(
        id="bee-lucky",
        name="Lucky Bee",
        emoji="🍀",
        rarity=Rarity.RARE,
        primary_perk=Perk.LUCK,
        secondary_perk=Perk.ENERGY,
        description="Fortune smiles upon this bee. +15% honey rewards from games.",
    ),
    BeeSpecies(
        id="bee-engineer",
        name="Engineer Bee",
        emoji="🔧",
        rarity=Rarity.UNCOMMON,
        primary_perk=Perk.WISDOM,
        secondary_perk=Perk.INSPIRATION,
        description="Tinkerer of the hive. +10% XP and small quiz bonus.",
    ),
    BeeSpecies(
        id="bee-nectar",
        name="Nectar Bee",
        emoji="🍯",
        rarity=Rarity.COMMON,
        primary_perk=Perk.ENERGY,
        description="Collects nectar efficiently. +5% fragment gain from games.",
    ),
    BeeSpecies(
        id="bee-ember",
        name="Ember Bee",
        emoji="🔥",
        rarity=Rarity.RARE,
        primary_perk=Perk.SPEED,
        description="Fiery and fast. Slightly increases game score multipliers.",
    ),
    BeeSpecies(
        id="bee-muse",
        name="Muse Bee",
        emoji="🎵",
        rarity=Rarity.EPIC,
        primary_perk=Perk.INSPIRATION,
        description="Inspires learners. Small quiz and XP bonuses.",
    ),
)
