"""Streak Engine - Pure logic for the daily login streak.

Day rules (calendar dates in the configured time zone):
- First activity ever: streak 1, longest 1, total 1
- Same day (or a clock that moved backwards): no change
- Gap of 1 day: streak +1
- Gap of 2 days: the one-time freeze keeps the streak alive; once the freeze
  is used a purchased saver does the same and is consumed
- Any other gap: streak resets to 1

Extras:
- Saver offers at day 7 and day 30, each shown once
- Welcome-back gift after a gap of more than 3 days, once per return cycle

ARCHITECTURE: Stateless, pure functions with NO Home Assistant dependencies.
StreakManager owns the persisted record and the transient popup flags.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from .. import const
from ..type_defs import StreakOutcome, StreakPopups, StreakRecord
from ..utils.dt_utils import days_between, dt_parse_date


class StreakEngine:
    """Stateless streak evaluation."""

    @staticmethod
    def default_record() -> StreakRecord:
        """Return a record for a user that has never logged activity."""
        return {
            "currentStreak": 0,
            "longestStreak": 0,
            "totalDaysLogged": 0,
            "lastLoginDate": None,
            # The freeze starts available; using it flips this to True
            "hasUsedFreeze": False,
            "hasSaverAvailable": False,
            "hasSeenDay7Offer": False,
            "hasSeenDay30Offer": False,
            "hasReceivedWelcomeBackGift": False,
            "lastWelcomeBackGiftDate": None,
            "dailySummaryStreak": 0,
            "dailySummaryLongestStreak": 0,
            "dailySummaryLastDate": None,
        }

    @staticmethod
    def no_popups() -> StreakPopups:
        """Return a cleared popup flag set."""
        return {
            const.STREAK_POPUP_STREAK: False,
            const.STREAK_POPUP_FREEZE: False,
            const.STREAK_POPUP_SAVER_OFFER: False,
            const.STREAK_POPUP_WELCOME_BACK: False,
        }  # type: ignore[return-value]

    @staticmethod
    def record_from_data(data: dict[str, Any]) -> StreakRecord:
        """Extract a streak record from the top-level document keys.

        Missing keys fall back to the defaults so older documents load.
        """
        record = StreakEngine.default_record()
        for key in const.STREAK_KEYS:
            if key in data and data[key] is not None:
                record[key] = data[key]  # type: ignore[literal-required]
        return record

    @staticmethod
    def evaluate_day(record: StreakRecord, today: date) -> StreakOutcome:
        """Apply one day of activity to a streak record.

        The input record is not modified.

        Args:
            record: Current streak state
            today: Local calendar date of the activity

        Returns:
            StreakOutcome with the new record, whether anything changed, the
            popups to raise and which protection (if any) was consumed.
        """
        new: StreakRecord = dict(record)  # type: ignore[assignment]
        popups = StreakEngine.no_popups()
        today_iso = today.isoformat()

        last = dt_parse_date(record.get("lastLoginDate"))
        if last is None:
            new["currentStreak"] = 1
            new["longestStreak"] = max(1, record.get("longestStreak", 0))
            new["totalDaysLogged"] = 1
            new["lastLoginDate"] = today_iso
            popups[const.STREAK_POPUP_STREAK] = True
            return StreakOutcome(new, True, popups, False, False)

        gap = days_between(last, today)
        if gap <= 0:
            return StreakOutcome(new, False, popups, False, False)

        StreakEngine._apply_welcome_back(new, popups, gap, today)

        freeze_used = False
        saver_used = False
        if gap == 1:
            new["currentStreak"] = record["currentStreak"] + 1
            popups[const.STREAK_POPUP_STREAK] = True
        elif gap == const.STREAK_FREEZE_GAP_DAYS and not record["hasUsedFreeze"]:
            new["currentStreak"] = record["currentStreak"] + 1
            new["hasUsedFreeze"] = True
            popups[const.STREAK_POPUP_FREEZE] = True
            freeze_used = True
        elif gap == const.STREAK_FREEZE_GAP_DAYS and record["hasSaverAvailable"]:
            new["currentStreak"] = record["currentStreak"] + 1
            new["hasSaverAvailable"] = False
            popups[const.STREAK_POPUP_FREEZE] = True
            saver_used = True
        else:
            new["currentStreak"] = 1
            popups[const.STREAK_POPUP_STREAK] = True

        # Saver offers, each shown once
        day7, day30 = const.STREAK_SAVER_OFFER_DAYS
        if new["currentStreak"] == day7 and not new["hasSeenDay7Offer"]:
            new["hasSeenDay7Offer"] = True
            popups[const.STREAK_POPUP_SAVER_OFFER] = True
        elif new["currentStreak"] == day30 and not new["hasSeenDay30Offer"]:
            new["hasSeenDay30Offer"] = True
            popups[const.STREAK_POPUP_SAVER_OFFER] = True

        new["longestStreak"] = max(new["longestStreak"], new["currentStreak"])
        new["totalDaysLogged"] = record["totalDaysLogged"] + 1
        new["lastLoginDate"] = today_iso
        return StreakOutcome(new, True, popups, freeze_used, saver_used)

    @staticmethod
    def _apply_welcome_back(
        record: StreakRecord, popups: StreakPopups, gap: int, today: date
    ) -> None:
        """Grant the welcome-back gift once per return cycle."""
        if gap > const.STREAK_WELCOME_BACK_GAP_DAYS:
            if not record["hasReceivedWelcomeBackGift"]:
                record["hasReceivedWelcomeBackGift"] = True
                record["lastWelcomeBackGiftDate"] = today.isoformat()
                popups[const.STREAK_POPUP_WELCOME_BACK] = True
            return

        last_gift = dt_parse_date(record.get("lastWelcomeBackGiftDate"))
        if (
            last_gift is not None
            and days_between(last_gift, today) <= const.STREAK_WELCOME_BACK_GAP_DAYS
        ):
            record["hasReceivedWelcomeBackGift"] = False

    @staticmethod
    def evaluate_summary_day(record: StreakRecord, today: date) -> StreakOutcome:
        """Apply a daily-summary view to the separate summary streak.

        Same day is a no-op, a 1-day gap extends the streak and anything else
        restarts it at 1. No freeze or saver applies here.
        """
        new: StreakRecord = dict(record)  # type: ignore[assignment]
        popups = StreakEngine.no_popups()

        last = dt_parse_date(record.get("dailySummaryLastDate"))
        gap = None if last is None else days_between(last, today)
        if gap is not None and gap <= 0:
            return StreakOutcome(new, False, popups, False, False)

        if gap == 1:
            new["dailySummaryStreak"] = record["dailySummaryStreak"] + 1
        else:
            new["dailySummaryStreak"] = 1
        new["dailySummaryLongestStreak"] = max(
            record["dailySummaryLongestStreak"], new["dailySummaryStreak"]
        )
        new["dailySummaryLastDate"] = today.isoformat()
        return StreakOutcome(new, True, popups, False, False)
