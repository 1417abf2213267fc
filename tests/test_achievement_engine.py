"""Tests for AchievementEngine - pure logic, no HA fixtures needed."""

from __future__ import annotations

import pytest

from custom_components.questlog.engines.achievement_engine import AchievementEngine


@pytest.mark.parametrize(
    ("level", "expected"),
    [(1, 3), (2, 5), (3, 7), (4, 9), (5, 10), (9, 10)],
)
def test_max_progress_grows_and_caps(level: int, expected: int) -> None:
    """Requirement grows by 2 per level and stops at 10."""
    assert AchievementEngine.max_progress_for_level(level) == expected


@pytest.mark.parametrize(
    ("count", "tier"),
    [
        (0, (1, 0, 3)),
        (2, (1, 2, 3)),
        (3, (2, 0, 5)),
        (10, (3, 2, 7)),
        (15, (4, 0, 9)),
        (34, (6, 0, 10)),
    ],
)
def test_tier_for_count(count: int, tier: tuple[int, int, int]) -> None:
    """Level and progress are a pure function of the event total."""
    assert tuple(AchievementEngine.tier_for_count(count)) == tier


def test_negative_count_is_level_one() -> None:
    """Negative totals are treated as zero."""
    assert tuple(AchievementEngine.tier_for_count(-3)) == (1, 0, 3)


def test_levels_to_reward() -> None:
    """Only levels above the watermark are returned; level 1 never is."""
    assert AchievementEngine.levels_to_reward(1, 1) == []
    assert AchievementEngine.levels_to_reward(3, 1) == [2, 3]
    assert AchievementEngine.levels_to_reward(3, 3) == []
    assert AchievementEngine.levels_to_reward(2, 4) == []


def test_title_for_level() -> None:
    """Titles follow the level names, then Master."""
    assert (
        AchievementEngine.title_for_level("Calendar Beginner", 1)
        == "Calendar Beginner"
    )
    assert (
        AchievementEngine.title_for_level("Calendar Beginner", 2)
        == "Calendar Intermediate"
    )
    assert AchievementEngine.title_for_level("Calendar Beginner", 9) == "Calendar Master"
