"""Engine modules for Questlog integration.

Contains pure computation engines:
- level_engine: XP curve, level carry-over and the profile ledger
- quest_engine: Quest counters, batch advancement and rule evaluation
- streak_engine: Daily streak, freeze/saver and welcome-back rules
- pet_engine: Derived pet hatching states
- achievement_engine: Tiered achievement progress
"""

# Use relative imports within package to avoid mypy module resolution issues
from .achievement_engine import AchievementEngine
from .level_engine import LevelEngine
from .pet_engine import PetEngine
from .quest_engine import QuestCredit, QuestEngine
from .streak_engine import StreakEngine

__all__ = [
    "AchievementEngine",
    "LevelEngine",
    "PetEngine",
    "QuestCredit",
    "QuestEngine",
    "StreakEngine",
]
