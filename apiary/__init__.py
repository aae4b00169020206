"""
Apiary: the hive progression engine behind a gamified learning tracker.

Learners earn fragments and honey from quizzes and mini-games, hatch
collectible bees, house them in hive rooms, and get perk modifiers back
for their next activity.
"""

__version__ = "0.1.0"
