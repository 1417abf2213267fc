"""Quest Manager - Quest counters and batch progression.

This manager handles:
- Quest credits by step, increment and static force
- Reward announcement (exactly once per quest)
- Batch advancement and immediate re-crediting from the last reported totals
- Rule-driven credits from calendar counts, graph updates and app signals
- Maintenance operations (reset current batch, clear all, acknowledge rewards)

ARCHITECTURE:
- QuestManager = STATEFUL owner of currentBatch, questProgress and extras
- QuestEngine = Pure counter/rule logic (STATELESS)
- ProfileManager listens to QUEST_COMPLETED and pays the reward
"""

from __future__ import annotations

from collections import defaultdict
import copy
import functools
from typing import TYPE_CHECKING, Any

from .. import catalog, const
from .. import data_builders as db
from ..engines.quest_engine import QuestCredit, QuestEngine
from .base_manager import BaseManager

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..coordinator import QuestlogDataCoordinator
    from ..type_defs import QuestData, SignalQuestRule

# (signal suffix, payload) pairs collected inside the lock, emitted after save
PendingEvents = list[tuple[str, dict[str, Any]]]


class QuestManager(BaseManager):
    """Manager for the quest/batch state machine.

    Quests are addressed by (name, batch). Operations that omit the batch use
    the current batch; any credit aimed at another batch is a no-op.
    """

    LOCK_QUESTS = "quests"

    def __init__(
        self,
        hass: HomeAssistant,
        coordinator: QuestlogDataCoordinator,
    ) -> None:
        """Initialize the QuestManager."""
        super().__init__(hass, coordinator)
        self._coordinator = coordinator

    async def async_setup(self) -> None:
        """Set up the QuestManager.

        Verifies every rule targets a catalogued quest (raises vol.Invalid on
        misalignment) and subscribes to the consumed signals.
        """
        targets: list[tuple[str, int]] = [
            (rule.quest_name, rule.batch)
            for rule in (*catalog.ADD_EVENT_RULES, *catalog.SCHEDULED_EVENT_RULES)
        ]
        targets.extend((rule.quest_name, rule.batch) for rule in catalog.GRAPH_RULES)
        targets.extend(
            (rule.quest_name, rule.batch) for rule in catalog.SIGNAL_QUEST_RULES
        )
        targets.append((catalog.STREAK_QUEST_NAME, catalog.STREAK_QUEST_BATCH))
        QuestEngine.validate_rule_targets(targets, catalog.QUEST_CATALOG)

        self.listen(
            const.SIGNAL_SUFFIX_CALENDAR_EVENT_COUNT_CHANGED,
            self._on_calendar_event_count_changed,
        )
        self.listen(
            const.SIGNAL_SUFFIX_SCHEDULED_EVENT_COUNT_CHANGED,
            self._on_scheduled_event_count_changed,
        )
        self.listen(const.SIGNAL_SUFFIX_GRAPH_UPDATED, self._on_graph_updated)
        self.listen(const.SIGNAL_SUFFIX_STREAK_UPDATED, self._on_streak_updated)

        rules_by_signal: dict[str, list[SignalQuestRule]] = defaultdict(list)
        for rule in catalog.SIGNAL_QUEST_RULES:
            rules_by_signal[rule.signal_suffix].append(rule)
        for suffix, rules in rules_by_signal.items():
            self.listen(suffix, functools.partial(self._on_signal_rule, tuple(rules)))

    # =========================================================================
    # Document accessors
    # =========================================================================

    @property
    def _data(self) -> dict[str, Any]:
        return self._coordinator.document

    @property
    def quests(self) -> list[QuestData]:
        """Live quest progress list."""
        return self._coordinator.quests_data

    @property
    def current_batch(self) -> int:
        """The active batch (max batch + 1 once the catalog is exhausted)."""
        return self._data[const.DATA_CURRENT_BATCH]

    @property
    def is_catalog_exhausted(self) -> bool:
        """True once every catalogued batch has been completed."""
        return self.current_batch > catalog.MAX_BATCH

    @property
    def pending_reward_quests(self) -> list[str]:
        """Names of completed quests the user has not acknowledged yet."""
        return list(self._data[const.DATA_QUEST_PENDING_REWARDS])

    @property
    def show_glow_icon(self) -> bool:
        """True while there are unacknowledged rewards."""
        return bool(self._data[const.DATA_QUEST_SHOW_GLOW_ICON])

    # =========================================================================
    # Queries
    # =========================================================================

    def current_batch_quests(self) -> list[QuestData]:
        """Return detached copies of the current batch's quests."""
        return copy.deepcopy(QuestEngine.batch_quests(self.quests, self.current_batch))

    def batch_completion_percentage(self) -> float:
        """Percentage of the current batch's quests that are completed."""
        return QuestEngine.completion_percentage(self.quests, self.current_batch)

    def is_quest_completed(self, name: str, batch: int | None = None) -> bool:
        """Return True if the quest (default: in the current batch) is completed."""
        quest = QuestEngine.find_quest(
            self.quests, name, self.current_batch if batch is None else batch
        )
        return quest is not None and QuestEngine.is_completed(quest)

    # =========================================================================
    # Credit operations
    # =========================================================================

    async def complete_quest(self, name: str) -> bool:
        """Advance the named quest of the current batch by one step.

        Returns:
            True when the counter changed.
        """
        return await self._async_apply_credits(
            [QuestCredit(name, self.current_batch, 1, False)]
        )

    async def complete_quest_with_increment(
        self, name: str, num: int, batch: int | None = None
    ) -> bool:
        """Advance the named quest by ``num`` (clamped at its requirement)."""
        if num < 0:
            const.LOGGER.warning(
                "WARNING: Ignoring negative increment %s for quest '%s'", num, name
            )
            return False
        return await self._async_apply_credits(
            [QuestCredit(name, self.current_batch if batch is None else batch, num, False)]
        )

    async def complete_quest_with_increment_static_force(
        self, name: str, num: int, batch: int | None = None
    ) -> bool:
        """Set the named quest to max(current, clamp(num)).

        Idempotent and monotonic; safe to replay with the same running total.
        """
        if num < 0:
            const.LOGGER.warning(
                "WARNING: Ignoring negative count %s for quest '%s'", num, name
            )
            return False
        return await self._async_apply_credits(
            [QuestCredit(name, self.current_batch if batch is None else batch, num, True)]
        )

    async def report_event_count(self, count: int) -> bool:
        """Apply the calendar-events-added running total."""
        return await self._async_report_count(
            const.DATA_QUEST_LAST_EVENT_COUNT, catalog.ADD_EVENT_RULES, count
        )

    async def report_scheduled_count(self, count: int) -> bool:
        """Apply the scheduled-events-completed running total."""
        return await self._async_report_count(
            const.DATA_QUEST_LAST_SCHEDULED_COUNT, catalog.SCHEDULED_EVENT_RULES, count
        )

    async def report_graph_updated(self, graph: str) -> bool:
        """Record a graph update in the current batch and apply graph rules."""
        graph = (graph or "").strip().lower()
        if not graph:
            const.LOGGER.debug("DEBUG: Ignoring graph update without a graph name")
            return False

        async with self._get_lock(self.LOCK_QUESTS):
            if self.is_catalog_exhausted:
                return False
            batch_graphs: list[str] = self._data[const.DATA_QUEST_BATCH_GRAPHS]
            graph_is_new = graph not in batch_graphs
            if graph_is_new:
                batch_graphs.append(graph)
            credits = QuestEngine.evaluate_graph_rules(
                catalog.GRAPH_RULES, graph, self.current_batch, batch_graphs
            )
            changed = self._apply_all(credits)
            if not changed and not graph_is_new:
                return False
            events = self._settle()
            await self._commit(events)
            return changed

    # =========================================================================
    # Maintenance
    # =========================================================================

    async def reset_current_batch(self) -> None:
        """Zero the counters of the current batch.

        Rewards already paid stay paid: the rewarded flags are kept.
        """
        async with self._get_lock(self.LOCK_QUESTS):
            for quest in QuestEngine.batch_quests(self.quests, self.current_batch):
                quest["completed_count"] = 0
            self._data[const.DATA_QUEST_BATCH_GRAPHS] = []
            await self._coordinator.async_persist()
            const.LOGGER.info("INFO: Reset quests of batch %s", self.current_batch)

    async def clear_all(self) -> None:
        """Reset all quest state, including the batch cursor and rewards."""
        async with self._get_lock(self.LOCK_QUESTS):
            self._data.update(db.build_quest_state())
            await self._coordinator.async_persist()
            const.LOGGER.info("INFO: Cleared all quest progress")

    async def acknowledge_rewards(self) -> None:
        """Clear the pending-reward list and the glow indicator."""
        async with self._get_lock(self.LOCK_QUESTS):
            if not self.pending_reward_quests and not self.show_glow_icon:
                return
            self._data[const.DATA_QUEST_PENDING_REWARDS] = []
            self._data[const.DATA_QUEST_SHOW_GLOW_ICON] = False
            await self._coordinator.async_persist()

    # =========================================================================
    # Event handlers
    # =========================================================================

    async def _on_calendar_event_count_changed(self, payload: dict[str, Any]) -> None:
        """Handle a new calendar-events-added total."""
        await self.report_event_count(int(payload.get("count", 0)))

    async def _on_scheduled_event_count_changed(self, payload: dict[str, Any]) -> None:
        """Handle a new scheduled-events-completed total."""
        await self.report_scheduled_count(int(payload.get("count", 0)))

    async def _on_graph_updated(self, payload: dict[str, Any]) -> None:
        """Handle a graph update reported by the app."""
        await self.report_graph_updated(str(payload.get("graph", "")))

    async def _on_streak_updated(self, payload: dict[str, Any]) -> None:
        """Credit the streak quest once the streak is long enough."""
        if int(payload.get("current_streak", 0)) >= catalog.STREAK_QUEST_DAYS:
            await self.complete_quest_with_increment_static_force(
                catalog.STREAK_QUEST_NAME, 1, catalog.STREAK_QUEST_BATCH
            )

    async def _on_signal_rule(
        self, rules: tuple[SignalQuestRule, ...], payload: dict[str, Any]
    ) -> None:
        """Apply one-shot quest credits bound to a signal."""
        await self._async_apply_credits(
            [QuestCredit(rule.quest_name, rule.batch, 1, True) for rule in rules]
        )

    # =========================================================================
    # Internals
    # =========================================================================

    async def _async_apply_credits(self, credits: list[QuestCredit]) -> bool:
        """Apply credits under the lock, then settle, persist and emit."""
        async with self._get_lock(self.LOCK_QUESTS):
            if not self._apply_all(credits):
                return False
            events = self._settle()
            await self._commit(events)
            return True

    async def _async_report_count(
        self, last_key: str, table: tuple[Any, ...], count: int
    ) -> bool:
        """Store a running total and evaluate its threshold rules."""
        if count < 0:
            const.LOGGER.warning("WARNING: Ignoring negative running total %s", count)
            return False

        async with self._get_lock(self.LOCK_QUESTS):
            total_changed = self._data[last_key] != count
            self._data[last_key] = count
            changed = self._apply_all(
                QuestEngine.evaluate_threshold_rules(table, count)
            )
            if not changed and not total_changed:
                return False
            events = self._settle()
            await self._commit(events)
            return changed

    def _apply_all(self, credits: list[QuestCredit]) -> bool:
        """Apply credits in order; True if any counter changed."""
        changed = False
        for credit in credits:
            changed = self._apply_credit(credit) or changed
        return changed

    def _apply_credit(self, credit: QuestCredit) -> bool:
        """Apply one credit to the in-memory document (no save, no emit)."""
        if credit.batch != self.current_batch:
            const.LOGGER.debug(
                "DEBUG: Credit for '%s' ignored: batch %s is not active (current %s)",
                credit.quest_name,
                credit.batch,
                self.current_batch,
            )
            return False

        quest = QuestEngine.find_quest(self.quests, credit.quest_name, credit.batch)
        if quest is None:
            const.LOGGER.warning(
                "WARNING: Unknown quest '%s' in batch %s",
                credit.quest_name,
                credit.batch,
            )
            return False

        if credit.static_force:
            return QuestEngine.apply_static_force(quest, credit.value)
        return QuestEngine.apply_increment(quest, credit.value)

    def _settle(self) -> PendingEvents:
        """Announce newly completed quests and advance finished batches.

        Each announced quest is flagged rewarded in the same step so its
        reward can never be emitted twice.
        """
        events: PendingEvents = []
        self._announce_rewards(events)

        while QuestEngine.is_batch_complete(self.quests, self.current_batch):
            new_batch = QuestEngine.next_batch(self.current_batch, catalog.MAX_BATCH)
            self._data[const.DATA_CURRENT_BATCH] = new_batch
            self._data[const.DATA_QUEST_BATCH_GRAPHS] = []
            events.append(
                (
                    const.SIGNAL_SUFFIX_BATCH_UNLOCKED,
                    {
                        "batch": new_batch,
                        "catalog_exhausted": new_batch > catalog.MAX_BATCH,
                    },
                )
            )
            const.LOGGER.info("INFO: Quest batch %s unlocked", new_batch)
            if new_batch > catalog.MAX_BATCH:
                break
            self._recredit_new_batch()
            self._announce_rewards(events)

        return events

    def _recredit_new_batch(self) -> None:
        """Credit the new batch from the last reported totals and streak."""
        credits = QuestEngine.evaluate_threshold_rules(
            catalog.ADD_EVENT_RULES, self._data[const.DATA_QUEST_LAST_EVENT_COUNT]
        )
        credits += QuestEngine.evaluate_threshold_rules(
            catalog.SCHEDULED_EVENT_RULES,
            self._data[const.DATA_QUEST_LAST_SCHEDULED_COUNT],
        )
        if (
            self._data.get(const.DATA_STREAK_CURRENT, 0) >= catalog.STREAK_QUEST_DAYS
        ):
            credits.append(
                QuestCredit(
                    catalog.STREAK_QUEST_NAME, catalog.STREAK_QUEST_BATCH, 1, True
                )
            )
        self._apply_all(
            [credit for credit in credits if credit.batch == self.current_batch]
        )

    def _announce_rewards(self, events: PendingEvents) -> None:
        """Flag and queue rewards for completed, unpaid quests."""
        for quest in QuestEngine.batch_quests(self.quests, self.current_batch):
            if not QuestEngine.needs_reward(quest):
                continue
            quest["rewarded"] = True
            self._data[const.DATA_QUEST_PENDING_REWARDS].append(quest["name"])
            self._data[const.DATA_QUEST_SHOW_GLOW_ICON] = True
            events.append(
                (
                    const.SIGNAL_SUFFIX_QUEST_COMPLETED,
                    {
                        "quest_name": quest["name"],
                        "batch": quest["batch"],
                        "xp": quest["xp"],
                        "coins": quest["coins"],
                    },
                )
            )
            const.LOGGER.info(
                "INFO: Quest '%s' (batch %s) completed", quest["name"], quest["batch"]
            )

    async def _commit(self, events: PendingEvents) -> None:
        """Persist, then emit queued events in order."""
        await self._coordinator.async_persist()
        for suffix, payload in events:
            self.emit(suffix, **payload)
