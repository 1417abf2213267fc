"""Level Engine - Pure logic for XP thresholds and level progression.

This engine provides stateless, pure Python functions for:
- The XP threshold curve (base_xp * level ** exponent)
- Applying XP gains with multi-level carry-over
- Progress-to-next-level calculations
- Profile ledger entry creation and pruning

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies.
All functions are static methods that operate on passed-in data.
State management belongs in ProfileManager.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .. import const
from ..type_defs import LevelResult
from ..utils.dt_utils import dt_now_iso
from ..utils.math_utils import calculate_ratio, round_xp

if TYPE_CHECKING:
    from ..type_defs import LedgerEntry


class LevelEngine:
    """Pure logic engine for XP and level calculations.

    All methods are static - no instance state.

    The threshold for level N is the XP needed to go from N to N+1; XP is
    stored relative to the current level, so the profile invariant is
    ``xp < xp_required_for_level(level)``.
    """

    # Safety stop for pathological curve options
    MAX_LEVELS_PER_GRANT: int = 1000

    @staticmethod
    def xp_required_for_level(
        level: int,
        base_xp: float = const.DEFAULT_XP_BASE,
        exponent: float = const.DEFAULT_XP_EXPONENT,
    ) -> float:
        """Return the XP needed to advance from ``level`` to ``level + 1``.

        Strictly increasing in level for base_xp > 0 and exponent > 0.

        Examples:
            xp_required_for_level(1) → 50.0
            xp_required_for_level(3) → 150.0
            xp_required_for_level(2, 100, 1.5) → 282.84
        """
        level = max(const.LEVEL_MIN, int(level))
        return round_xp(base_xp * level**exponent)

    @staticmethod
    def apply_xp(
        level: int,
        xp: float,
        amount: float,
        base_xp: float = const.DEFAULT_XP_BASE,
        exponent: float = const.DEFAULT_XP_EXPONENT,
    ) -> LevelResult:
        """Add XP and carry any surplus across as many levels as it covers.

        Args:
            level: Current level (>= 1)
            xp: XP accumulated inside the current level
            amount: XP to add (non-positive amounts leave the state untouched)
            base_xp: Curve base
            exponent: Curve exponent

        Returns:
            LevelResult with the new level, leftover XP and every level reached
            (in ascending order).
        """
        level = max(const.LEVEL_MIN, int(level))
        current = max(0.0, float(xp))
        if amount <= 0:
            return LevelResult(level, current, [])

        current += amount
        crossed: list[int] = []
        threshold = LevelEngine.xp_required_for_level(level, base_xp, exponent)
        while current >= threshold and threshold > 0:
            current -= threshold
            level += 1
            crossed.append(level)
            if len(crossed) >= LevelEngine.MAX_LEVELS_PER_GRANT:
                const.LOGGER.warning(
                    "WARNING: Level curve stopped after %s levels in one grant",
                    len(crossed),
                )
                break
            threshold = LevelEngine.xp_required_for_level(level, base_xp, exponent)

        return LevelResult(level, current, crossed)

    @staticmethod
    def normalize(
        level: int,
        xp: float,
        base_xp: float = const.DEFAULT_XP_BASE,
        exponent: float = const.DEFAULT_XP_EXPONENT,
    ) -> LevelResult:
        """Re-establish the level invariant, e.g. after curve options change."""
        if xp <= 0:
            return LevelResult(max(const.LEVEL_MIN, int(level)), 0.0, [])
        return LevelEngine.apply_xp(level, 0.0, xp, base_xp, exponent)

    @staticmethod
    def progress_to_next_level(
        level: int,
        xp: float,
        base_xp: float = const.DEFAULT_XP_BASE,
        exponent: float = const.DEFAULT_XP_EXPONENT,
    ) -> float:
        """Return the fraction of the current level completed, in [0, 1]."""
        threshold = LevelEngine.xp_required_for_level(level, base_xp, exponent)
        return calculate_ratio(xp, threshold)

    @staticmethod
    def xp_to_next_level(
        level: int,
        xp: float,
        base_xp: float = const.DEFAULT_XP_BASE,
        exponent: float = const.DEFAULT_XP_EXPONENT,
    ) -> float:
        """Return the XP still missing to reach the next level."""
        threshold = LevelEngine.xp_required_for_level(level, base_xp, exponent)
        return round_xp(max(0.0, threshold - xp))

    @staticmethod
    def unlocks_for_level(level: int) -> str | None:
        """Return the feature unlocked when ``level`` is reached, if any."""
        return const.LEVEL_UNLOCKS.get(level)

    @staticmethod
    def create_ledger_entry(
        xp_delta: float,
        coins_delta: int,
        level_after: int,
        source: str,
        reference: str | None = None,
    ) -> LedgerEntry:
        """Create a ledger entry for one profile transaction."""
        return {
            "timestamp": dt_now_iso(),
            "xp_delta": round_xp(xp_delta),
            "coins_delta": int(coins_delta),
            "level_after": int(level_after),
            "source": source,
            "reference": reference,
        }

    @staticmethod
    def prune_ledger(
        ledger: list[LedgerEntry],
        max_entries: int = const.MAX_LEDGER_ENTRIES,
    ) -> list[LedgerEntry]:
        """Trim the ledger in place to the newest ``max_entries`` entries.

        Newest entries are at the END of the list (append order).
        """
        if len(ledger) > max_entries:
            del ledger[: len(ledger) - max_entries]
        return ledger
