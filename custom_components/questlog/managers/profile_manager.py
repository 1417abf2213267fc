"""Profile Manager - XP, levels and coins.

This manager handles all profile-related operations:
- XP grants with multi-level carry-over (LevelEngine)
- Coin deposits and NSF-checked spending
- The profile ledger (most recent transactions)
- Level-up and profile change events

ARCHITECTURE:
- ProfileManager = "The Bank" (STATEFUL profile operations)
- LevelEngine = Pure XP curve and ledger logic (STATELESS)
- Quest, pet and achievement rewards arrive as signals and are credited here
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from .. import const
from ..engines.level_engine import LevelEngine
from ..utils.dt_utils import dt_now_iso
from ..utils.math_utils import round_xp
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestlogDataCoordinator
    from ..type_defs import LevelResult, ProfileData


class ProfileManager(BaseManager):
    """Manager for the single player profile.

    Responsibilities:
    - Keep ``xp < xp_required_for_level(level)`` after every mutation
    - Emit SIGNAL_SUFFIX_PROFILE_UPDATED and SIGNAL_SUFFIX_LEVEL_UP
    - Credit rewards announced by other managers
    """

    LOCK_PROFILE = "profile"

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: QuestlogDataCoordinator,
    ) -> None:
        """Initialize the ProfileManager."""
        super().__init__(hass, coordinator)
        self._coordinator = coordinator

    async def async_setup(self) -> None:
        """Set up the ProfileManager.

        Re-applies the level curve (options may have changed since the last
        run) and subscribes to reward events.
        """
        profile = self.profile
        result = LevelEngine.normalize(
            profile[const.DATA_PROFILE_LEVEL],
            profile[const.DATA_PROFILE_XP],
            self._coordinator.xp_base,
            self._coordinator.xp_exponent,
        )
        if (result.level, result.xp) != (
            profile[const.DATA_PROFILE_LEVEL],
            profile[const.DATA_PROFILE_XP],
        ):
            const.LOGGER.info(
                "INFO: Profile re-leveled for current curve: level %s -> %s",
                profile[const.DATA_PROFILE_LEVEL],
                result.level,
            )
            profile[const.DATA_PROFILE_LEVEL] = result.level
            profile[const.DATA_PROFILE_XP] = result.xp
            await self._coordinator.async_persist()

        self.listen(const.SIGNAL_SUFFIX_QUEST_COMPLETED, self._on_quest_completed)
        self.listen(const.SIGNAL_SUFFIX_PET_UNLOCKED, self._on_pet_unlocked)
        self.listen(
            const.SIGNAL_SUFFIX_ACHIEVEMENT_LEVEL_UP, self._on_achievement_level_up
        )

    # =========================================================================
    # Event handlers
    # =========================================================================

    async def _on_quest_completed(self, payload: dict[str, Any]) -> None:
        """Credit a completed quest's reward."""
        await self.grant_reward(
            payload.get("xp", 0.0),
            payload.get("coins", 0),
            source=const.SOURCE_QUEST,
            reference=payload.get("quest_name"),
        )

    async def _on_pet_unlocked(self, payload: dict[str, Any]) -> None:
        """Credit the pet reveal reward."""
        await self.grant_reward(
            payload.get("xp", 0.0),
            payload.get("coins", 0),
            source=const.SOURCE_PET,
            reference=payload.get("pet_id"),
        )

    async def _on_achievement_level_up(self, payload: dict[str, Any]) -> None:
        """Credit the XP attached to an achievement level."""
        await self.grant_reward(
            payload.get("xp", 0.0),
            0,
            source=const.SOURCE_ACHIEVEMENT,
            reference=payload.get("achievement_id"),
        )

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def profile(self) -> ProfileData:
        """The live profile record."""
        return self._coordinator.profile_data

    @property
    def level(self) -> int:
        """Current level."""
        return self.profile[const.DATA_PROFILE_LEVEL]

    @property
    def xp(self) -> float:
        """XP accumulated inside the current level."""
        return self.profile[const.DATA_PROFILE_XP]

    @property
    def coins(self) -> int:
        """Spendable coins."""
        return self.profile[const.DATA_PROFILE_COINS]

    def snapshot(self) -> dict[str, Any]:
        """Return a detached copy of the profile with derived progress values."""
        result: dict[str, Any] = copy.deepcopy(dict(self.profile))
        result[const.DATA_PROFILE_XP] = round_xp(self.xp)
        result[const.DATA_PROFILE_TOTAL_XP_EARNED] = round_xp(
            self.profile[const.DATA_PROFILE_TOTAL_XP_EARNED]
        )
        result["xp_required"] = self.xp_required_for_current_level()
        result["xp_to_next_level"] = LevelEngine.xp_to_next_level(
            self.level, self.xp, self._coordinator.xp_base, self._coordinator.xp_exponent
        )
        result["progress"] = self.progress_to_next_level()
        return result

    def xp_required_for_current_level(self) -> float:
        """XP needed to leave the current level."""
        return LevelEngine.xp_required_for_level(
            self.level, self._coordinator.xp_base, self._coordinator.xp_exponent
        )

    def progress_to_next_level(self) -> float:
        """Fraction of the current level completed, in [0, 1]."""
        return LevelEngine.progress_to_next_level(
            self.level, self.xp, self._coordinator.xp_base, self._coordinator.xp_exponent
        )

    # =========================================================================
    # Mutations
    # =========================================================================

    async def grant_xp(
        self,
        amount: float,
        *,
        source: str = const.SOURCE_MANUAL,
        reference: str | None = None,
    ) -> LevelResult | None:
        """Add XP, carrying the surplus across level thresholds.

        Non-positive amounts are logged and ignored.

        Returns:
            The LevelResult, or None when nothing was applied.
        """
        if amount <= 0:
            const.LOGGER.debug("DEBUG: Ignoring non-positive XP grant: %s", amount)
            return None
        return await self.grant_reward(amount, 0, source=source, reference=reference)

    async def add_coins(
        self,
        amount: int,
        *,
        source: str = const.SOURCE_MANUAL,
        reference: str | None = None,
    ) -> int:
        """Add coins to the balance and return the new balance."""
        if amount <= 0:
            const.LOGGER.debug("DEBUG: Ignoring non-positive coin deposit: %s", amount)
            return self.coins
        await self.grant_reward(0, amount, source=source, reference=reference)
        return self.coins

    async def grant_reward(
        self,
        xp: float,
        coins: int,
        *,
        source: str,
        reference: str | None = None,
    ) -> LevelResult | None:
        """Apply an XP and coin reward as one atomic profile mutation.

        Negative parts are treated as zero. Emits profile_updated once and
        level_up once per level crossed.
        """
        xp = max(0.0, float(xp or 0))
        coins = max(0, int(coins or 0))
        if xp <= 0 and coins <= 0:
            return None

        async with self._get_lock(self.LOCK_PROFILE):
            profile = self.profile
            old_level = profile[const.DATA_PROFILE_LEVEL]
            result = LevelEngine.apply_xp(
                old_level,
                profile[const.DATA_PROFILE_XP],
                xp,
                self._coordinator.xp_base,
                self._coordinator.xp_exponent,
            )
            profile[const.DATA_PROFILE_LEVEL] = result.level
            profile[const.DATA_PROFILE_XP] = result.xp
            profile[const.DATA_PROFILE_COINS] = profile[const.DATA_PROFILE_COINS] + coins
            profile[const.DATA_PROFILE_TOTAL_XP_EARNED] += xp
            self._append_ledger(xp, coins, result.level, source, reference)

            await self._coordinator.async_persist()

            const.LOGGER.debug(
                "DEBUG: ProfileManager.grant_reward: xp=%.2f coins=%s source=%s "
                "level %s -> %s",
                xp,
                coins,
                source,
                old_level,
                result.level,
            )
            self._emit_profile_updated()
            for new_level in result.levels_crossed:
                self.emit(
                    const.SIGNAL_SUFFIX_LEVEL_UP,
                    old_level=new_level - 1,
                    new_level=new_level,
                    celebrate=new_level == const.LEVEL_CELEBRATION,
                    unlocks=LevelEngine.unlocks_for_level(new_level),
                )
            return result

    async def spend_coins(
        self,
        amount: int,
        *,
        source: str = const.SOURCE_PURCHASE,
        reference: str | None = None,
    ) -> bool:
        """Debit coins if the balance covers ``amount``.

        Returns:
            False with no mutation when the balance is too low or the amount
            is negative; True after a successful debit.
        """
        if amount < 0:
            const.LOGGER.warning("WARNING: Refusing negative coin spend: %s", amount)
            return False

        async with self._get_lock(self.LOCK_PROFILE):
            profile = self.profile
            balance = profile[const.DATA_PROFILE_COINS]
            if balance < amount:
                const.LOGGER.debug(
                    "DEBUG: Insufficient coins: balance=%s, requested=%s",
                    balance,
                    amount,
                )
                return False

            profile[const.DATA_PROFILE_COINS] = balance - amount
            self._append_ledger(
                0.0, -amount, profile[const.DATA_PROFILE_LEVEL], source, reference
            )
            await self._coordinator.async_persist()
            self._emit_profile_updated()
            return True

    async def set_name(self, name: str) -> None:
        """Rename the profile."""
        name = (name or "").strip()
        if not name:
            const.LOGGER.warning("WARNING: Ignoring empty profile name")
            return
        async with self._get_lock(self.LOCK_PROFILE):
            self.profile[const.DATA_PROFILE_NAME] = name
            self.profile[const.DATA_PROFILE_UPDATED_AT] = dt_now_iso()
            await self._coordinator.async_persist()
            self._emit_profile_updated()

    async def mark_measurement_completed(self, flag: str) -> None:
        """Record that a profile measurement (e.g. a graph) has been filled in."""
        async with self._get_lock(self.LOCK_PROFILE):
            measurements = self.profile[const.DATA_PROFILE_COMPLETED_MEASUREMENTS]
            if measurements.get(flag):
                return
            measurements[flag] = True
            self.profile[const.DATA_PROFILE_UPDATED_AT] = dt_now_iso()
            await self._coordinator.async_persist()
            self._emit_profile_updated()

    # =========================================================================
    # Internals
    # =========================================================================

    def _append_ledger(
        self,
        xp: float,
        coins: int,
        level_after: int,
        source: str,
        reference: str | None,
    ) -> None:
        """Record a transaction and prune the ledger."""
        profile = self.profile
        ledger = profile[const.DATA_PROFILE_LEDGER]
        ledger.append(
            LevelEngine.create_ledger_entry(xp, coins, level_after, source, reference)
        )
        LevelEngine.prune_ledger(ledger)
        profile[const.DATA_PROFILE_UPDATED_AT] = dt_now_iso()

    def _emit_profile_updated(self) -> None:
        """Publish the new profile snapshot."""
        self.emit(const.SIGNAL_SUFFIX_PROFILE_UPDATED, profile=self.snapshot())
