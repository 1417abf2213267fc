"""Achievement Engine - Pure logic for tiered achievements.

The calendar achievement needs 3, 5, 7, 9, 10, 10, ... events per level: the
requirement grows by 2 after each level and is capped at 10. Level and
progress are a pure function of the total event count, so replaying the same
count can never over-credit.

ARCHITECTURE: Stateless, pure functions with NO Home Assistant dependencies.
"""

from __future__ import annotations

from .. import const
from ..type_defs import AchievementTier


class AchievementEngine:
    """Stateless achievement tier math."""

    @staticmethod
    def max_progress_for_level(
        level: int,
        initial: int = const.ACHIEVEMENT_INITIAL_MAX_PROGRESS,
        step: int = const.ACHIEVEMENT_MAX_PROGRESS_STEP,
        cap: int = const.ACHIEVEMENT_MAX_PROGRESS_CAP,
    ) -> int:
        """Return the events needed to complete ``level``.

        Examples:
            max_progress_for_level(1) → 3
            max_progress_for_level(4) → 9
            max_progress_for_level(8) → 10
        """
        return min(cap, initial + step * (max(1, level) - 1))

    @staticmethod
    def tier_for_count(count: int) -> AchievementTier:
        """Return (level, current_progress, max_progress) for an event count.

        Examples:
            tier_for_count(0) → (1, 0, 3)
            tier_for_count(3) → (2, 0, 5)
            tier_for_count(10) → (3, 2, 7)
        """
        remaining = max(0, int(count))
        level = 1
        needed = AchievementEngine.max_progress_for_level(level)
        while remaining >= needed:
            remaining -= needed
            level += 1
            needed = AchievementEngine.max_progress_for_level(level)
        return AchievementTier(level, remaining, needed)

    @staticmethod
    def levels_to_reward(new_level: int, highest_rewarded: int) -> list[int]:
        """Return the reached levels above the highest already rewarded.

        Level 1 is the starting level and is never rewarded.
        """
        start = max(highest_rewarded, 1) + 1
        return list(range(start, new_level + 1))

    @staticmethod
    def title_for_level(base_title: str, level: int) -> str:
        """Return the display title for a level (e.g. "Calendar Intermediate")."""
        suffix = const.ACHIEVEMENT_LEVEL_TITLES.get(
            level, const.ACHIEVEMENT_LEVEL_TITLE_MAX
        )
        prefix = base_title.rsplit(" ", 1)[0] if " " in base_title else base_title
        return f"{prefix} {suffix}"
