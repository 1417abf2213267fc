"""Quest Engine - Pure logic for the quest/batch state machine.

Handles:
- Counter arithmetic (step, increment, static force) with clamping
- Completion and reward eligibility checks
- Batch completion and advancement decisions
- Threshold rule evaluation against running totals
- Graph rule evaluation against the per-batch graph set
- Rule table validation

Per-quest state machine: Active → Completed (terminal). A quest is
completed when completed_count == required_count.

ARCHITECTURE: Stateless, pure functions with NO Home Assistant dependencies.
QuestManager owns the persisted quest list and calls these helpers.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, NamedTuple

import voluptuous as vol

from ..utils.math_utils import calculate_percentage, clamp_count

if TYPE_CHECKING:
    from ..type_defs import GraphRule, QuestData, QuestDefinition, ThresholdRule


class QuestCredit(NamedTuple):
    """A counter update produced by a rule."""

    quest_name: str
    batch: int
    value: int
    static_force: bool


_THRESHOLD_RULE_SCHEMA = vol.Schema(
    vol.ExactSequence(
        [
            vol.All(int, vol.Range(min=0)),
            vol.All(int, vol.Range(min=0)),
            vol.All(str, vol.Length(min=1)),
            vol.All(int, vol.Range(min=1)),
        ]
    )
)


class QuestEngine:
    """Stateless quest counter and rule logic.

    All methods are static.
    """

    GRAPH_MODE_ANY = "any"
    GRAPH_MODE_DISTINCT = "distinct"

    _GRAPH_RULE_SCHEMA = vol.Schema(
        vol.ExactSequence(
            [
                vol.All(str, vol.Length(min=1)),
                vol.All(int, vol.Range(min=1)),
                vol.In([GRAPH_MODE_ANY, GRAPH_MODE_DISTINCT]),
                frozenset,
            ]
        )
    )

    # =========================================================================
    # Lookup
    # =========================================================================

    @staticmethod
    def find_quest(
        quests: Iterable[QuestData], name: str, batch: int
    ) -> QuestData | None:
        """Return the quest addressed by (name, batch), or None."""
        for quest in quests:
            if quest["name"] == name and quest["batch"] == batch:
                return quest
        return None

    @staticmethod
    def batch_quests(quests: Iterable[QuestData], batch: int) -> list[QuestData]:
        """Return the quests of one batch in catalog order."""
        return [quest for quest in quests if quest["batch"] == batch]

    # =========================================================================
    # Counter arithmetic
    # =========================================================================

    @staticmethod
    def is_completed(quest: QuestData) -> bool:
        """Return True when the counter has reached the requirement."""
        return quest["completed_count"] >= quest["required_count"]

    @staticmethod
    def needs_reward(quest: QuestData) -> bool:
        """Return True for a completed quest whose reward is still unpaid."""
        return QuestEngine.is_completed(quest) and not quest["rewarded"]

    @staticmethod
    def apply_increment(quest: QuestData, num: int) -> bool:
        """Advance the counter by ``num``, clamped to [0, required].

        Returns:
            True when the stored counter changed.
        """
        if num <= 0:
            return False
        before = quest["completed_count"]
        quest["completed_count"] = clamp_count(
            before + num, quest["required_count"]
        )
        return quest["completed_count"] != before

    @staticmethod
    def apply_static_force(quest: QuestData, num: int) -> bool:
        """Set the counter to max(current, clamp(num)).

        Idempotent: replaying the same value never changes the result, and a
        counter never moves backwards.

        Returns:
            True when the stored counter changed.
        """
        before = quest["completed_count"]
        target = clamp_count(num, quest["required_count"])
        quest["completed_count"] = max(before, target)
        return quest["completed_count"] != before

    # =========================================================================
    # Batch level
    # =========================================================================

    @staticmethod
    def is_batch_complete(quests: Iterable[QuestData], batch: int) -> bool:
        """Return True when the batch has quests and all are completed."""
        members = QuestEngine.batch_quests(quests, batch)
        return bool(members) and all(QuestEngine.is_completed(q) for q in members)

    @staticmethod
    def completion_percentage(quests: Iterable[QuestData], batch: int) -> float:
        """Return the share of completed quests in the batch as a percentage."""
        members = QuestEngine.batch_quests(quests, batch)
        done = sum(1 for quest in members if QuestEngine.is_completed(quest))
        return calculate_percentage(done, len(members))

    @staticmethod
    def next_batch(current_batch: int, max_batch: int) -> int:
        """Return the batch after ``current_batch``.

        The cursor never passes ``max_batch + 1`` (catalog exhausted).
        """
        return min(current_batch + 1, max_batch + 1)

    # =========================================================================
    # Rules
    # =========================================================================

    @staticmethod
    def evaluate_threshold_rules(
        table: Sequence[ThresholdRule], count: int
    ) -> list[QuestCredit]:
        """Return the static-force credits implied by a running total.

        Every rule with ``count > threshold`` yields ``count - offset``
        (never below zero). Rules are independent; batch isolation is applied
        by the caller.
        """
        if count < 0:
            return []
        return [
            QuestCredit(
                rule.quest_name, rule.batch, max(0, count - rule.offset), True
            )
            for rule in table
            if count > rule.threshold
        ]

    @staticmethod
    def graph_matches(rule: GraphRule, graph: str) -> bool:
        """Return True when the rule accepts updates of ``graph``."""
        return not rule.graphs or graph in rule.graphs

    @staticmethod
    def evaluate_graph_rules(
        rules: Sequence[GraphRule],
        graph: str,
        batch: int,
        batch_graphs: Iterable[str],
    ) -> list[QuestCredit]:
        """Return the credits for a graph update inside the current batch.

        ``batch_graphs`` must already include ``graph``.
        """
        seen = set(batch_graphs)
        credits: list[QuestCredit] = []
        for rule in rules:
            if rule.batch != batch or not QuestEngine.graph_matches(rule, graph):
                continue
            if rule.mode == QuestEngine.GRAPH_MODE_DISTINCT:
                distinct = sum(
                    1 for name in seen if QuestEngine.graph_matches(rule, name)
                )
                credits.append(QuestCredit(rule.quest_name, rule.batch, distinct, True))
            else:
                credits.append(QuestCredit(rule.quest_name, rule.batch, 1, False))
        return credits

    # =========================================================================
    # Validation
    # =========================================================================

    @staticmethod
    def validate_rule_table(table: Sequence[ThresholdRule]) -> None:
        """Validate a threshold rule table.

        Each record must be (threshold>=0, offset>=0, name, batch>=1);
        thresholds must be strictly increasing and each batch may appear only
        once.

        Raises:
            vol.Invalid: On the first misaligned record.
        """
        previous: int | None = None
        batches: set[int] = set()
        for index, rule in enumerate(table):
            try:
                _THRESHOLD_RULE_SCHEMA(tuple(rule))
            except vol.Invalid as err:
                raise vol.Invalid(
                    f"Malformed threshold rule at index {index}: {err}"
                ) from err
            if previous is not None and rule.threshold <= previous:
                raise vol.Invalid(
                    f"Threshold {rule.threshold} at index {index} is not greater "
                    f"than the previous threshold {previous}"
                )
            if rule.batch in batches:
                raise vol.Invalid(
                    f"Batch {rule.batch} appears more than once (index {index})"
                )
            previous = rule.threshold
            batches.add(rule.batch)

    @staticmethod
    def validate_graph_rules(rules: Sequence[GraphRule]) -> None:
        """Validate graph rules; (quest, batch) pairs must be unique.

        Raises:
            vol.Invalid: On the first malformed rule.
        """
        targets: set[tuple[str, int]] = set()
        for index, rule in enumerate(rules):
            try:
                QuestEngine._GRAPH_RULE_SCHEMA(tuple(rule))
            except vol.Invalid as err:
                raise vol.Invalid(
                    f"Malformed graph rule at index {index}: {err}"
                ) from err
            key = (rule.quest_name, rule.batch)
            if key in targets:
                raise vol.Invalid(f"Duplicate graph rule for {key}")
            targets.add(key)

    @staticmethod
    def validate_rule_targets(
        targets: Iterable[tuple[str, int]],
        catalog: Iterable[QuestDefinition],
    ) -> None:
        """Ensure every rule target names a catalogued (quest, batch).

        Raises:
            vol.Invalid: Naming the first unknown target.
        """
        known = {(quest.name, quest.batch) for quest in catalog}
        for name, batch in targets:
            if (name, batch) not in known:
                raise vol.Invalid(
                    f"Rule targets unknown quest '{name}' in batch {batch}"
                )
