"""Manager modules for Questlog integration.

Managers are stateful owners of document sections:
- ProfileManager: userProfile (XP, levels, coins, ledger)
- QuestManager: currentBatch, questProgress and quest extras
- StreakManager: streak keys and transient popups
- PetManager: userPets
- AchievementManager: userAchievements
"""

from .achievement_manager import AchievementManager
from .base_manager import BaseManager
from .pet_manager import PetManager
from .profile_manager import ProfileManager
from .quest_manager import QuestManager
from .streak_manager import StreakManager

__all__ = [
    "AchievementManager",
    "BaseManager",
    "PetManager",
    "ProfileManager",
    "QuestManager",
    "StreakManager",
]
