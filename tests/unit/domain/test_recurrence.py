"""Unit tests for delivery recurrence rules

Reference dates: 2024-01-01 is a Monday, 2024 is a leap year.
"""

import pytest
from datetime import date, datetime
from types import SimpleNamespace

from src.domain.recurrence import (
    InvalidRecurrenceError,
    RecurrenceRule,
    add_months,
    compute_next_delivery,
    effective_delivery_days,
    next_delivery_for,
    weekday_numbers,
)
from src.domain.subscription import DeliveryFrequency

MONDAY = date(2024, 1, 1)
TUESDAY = date(2024, 1, 2)
WEDNESDAY = date(2024, 1, 3)
FRIDAY = date(2024, 1, 5)


def rule(frequency, days=(), day_of_month=None):
    return RecurrenceRule(
        frequency=frequency,
        delivery_days=tuple(days),
        delivery_day_of_month=day_of_month,
    )


class TestFixedIntervals:

    def test_daily_adds_one_day(self):
        assert compute_next_delivery(rule(DeliveryFrequency.DAILY), MONDAY, MONDAY) == TUESDAY

    def test_alternate_days_adds_two_days(self):
        assert compute_next_delivery(
            rule(DeliveryFrequency.ALTERNATE_DAYS), MONDAY, MONDAY
        ) == WEDNESDAY

    def test_fortnightly_without_days_adds_fourteen(self):
        assert compute_next_delivery(
            rule(DeliveryFrequency.FORTNIGHTLY), MONDAY, MONDAY
        ) == date(2024, 1, 15)

    def test_fortnightly_snaps_to_configured_weekday(self):
        """2024-01-15 is a Monday; the next Wednesday is 2024-01-17"""
        assert compute_next_delivery(
            rule(DeliveryFrequency.FORTNIGHTLY, ["wednesday"]), MONDAY, MONDAY
        ) == date(2024, 1, 17)


class TestWeekly:

    def test_weekly_same_weekday_moves_one_week(self):
        assert compute_next_delivery(
            rule(DeliveryFrequency.WEEKLY, ["monday"]), MONDAY, MONDAY
        ) == date(2024, 1, 8)

    def test_weekly_wraps_around_weekend(self):
        """
        Given: Weekly on Monday, anchor on a Friday
        When: Next delivery is computed
        Then: Following Monday (+3 days)
        """
        assert compute_next_delivery(
            rule(DeliveryFrequency.WEEKLY, ["monday"]), FRIDAY, FRIDAY
        ) == date(2024, 1, 8)

    def test_twice_week_picks_nearest_configured_day(self):
        """Tuesday anchor with tuesday/thursday delivery -> Thursday (+2)"""
        assert compute_next_delivery(
            rule(DeliveryFrequency.TWICE_WEEK, ["tuesday", "thursday"]), TUESDAY, TUESDAY
        ) == date(2024, 1, 4)

    def test_twice_week_with_single_day_uses_defaults(self):
        """Fewer than two days falls back to monday/thursday"""
        assert compute_next_delivery(
            rule(DeliveryFrequency.TWICE_WEEK, ["monday"]), MONDAY, MONDAY
        ) == date(2024, 1, 4)

    def test_weekly_without_days_defaults_to_monday(self):
        assert compute_next_delivery(
            rule(DeliveryFrequency.WEEKLY), WEDNESDAY, WEDNESDAY
        ) == date(2024, 1, 8)

    def test_day_names_are_case_insensitive(self):
        assert compute_next_delivery(
            rule(DeliveryFrequency.WEEKLY, ["Friday"]), MONDAY, MONDAY
        ) == FRIDAY

    def test_unknown_weekday_is_rejected(self):
        with pytest.raises(InvalidRecurrenceError):
            compute_next_delivery(rule(DeliveryFrequency.WEEKLY, ["funday"]), MONDAY, MONDAY)


class TestMonthly:

    def test_month_end_is_clamped(self):
        """2024-03-31 + 1 month -> 2024-04-30"""
        anchor = date(2024, 3, 31)
        assert compute_next_delivery(rule(DeliveryFrequency.MONTHLY), anchor, anchor) == date(2024, 4, 30)

    def test_leap_february(self):
        anchor = date(2024, 1, 31)
        assert compute_next_delivery(rule(DeliveryFrequency.MONTHLY), anchor, anchor) == date(2024, 2, 29)

    def test_day_of_month_override(self):
        anchor = date(2024, 1, 20)
        assert compute_next_delivery(
            rule(DeliveryFrequency.MONTHLY, day_of_month=15), anchor, anchor
        ) == date(2024, 2, 15)

    def test_day_of_month_out_of_range_is_rejected(self):
        with pytest.raises(InvalidRecurrenceError):
            compute_next_delivery(
                rule(DeliveryFrequency.MONTHLY, day_of_month=31), MONDAY, MONDAY
            )

    def test_snaps_to_first_configured_weekday(self):
        """2024-02-10 is a Saturday; the next Monday is 2024-02-12"""
        anchor = date(2024, 1, 10)
        assert compute_next_delivery(
            rule(DeliveryFrequency.MONTHLY, ["monday"]), anchor, anchor
        ) == date(2024, 2, 12)

    def test_weekday_snap_stays_in_target_month(self):
        """2024-02-29 is a Thursday; the next Monday is in March, so clamp to Feb 29"""
        anchor = date(2024, 1, 30)
        assert compute_next_delivery(
            rule(DeliveryFrequency.MONTHLY, ["monday"]), anchor, anchor
        ) == date(2024, 2, 29)


class TestBaseline:

    def test_stale_anchor_restarts_from_today(self):
        """
        Given: Anchor ten days in the past
        When: Next daily delivery is computed
        Then: Result is tomorrow, missed days are not replayed
        """
        now = datetime(2024, 1, 10, 6, 30)
        assert compute_next_delivery(rule(DeliveryFrequency.DAILY), MONDAY, now) == date(2024, 1, 11)

    def test_future_anchor_is_kept(self):
        anchor = date(2024, 1, 20)
        assert compute_next_delivery(
            rule(DeliveryFrequency.DAILY), anchor, date(2024, 1, 10)
        ) == date(2024, 1, 21)

    def test_result_is_always_after_anchor(self):
        for frequency in DeliveryFrequency:
            for anchor in (MONDAY, FRIDAY, date(2024, 1, 31), date(2024, 12, 31)):
                result = compute_next_delivery(rule(frequency, ["monday", "thursday"]), anchor, anchor)
                assert result > anchor, frequency

    def test_same_inputs_same_result(self):
        r = rule(DeliveryFrequency.TWICE_WEEK, ["tuesday", "saturday"])
        now = datetime(2024, 1, 3, 12, 0)
        assert compute_next_delivery(r, MONDAY, now) == compute_next_delivery(r, MONDAY, now)


class TestHelpers:

    def test_add_months_rolls_year(self):
        assert add_months(date(2024, 12, 15), 1) == date(2025, 1, 15)

    def test_add_months_clamps(self):
        assert add_months(date(2023, 12, 31), 2) == date(2024, 2, 29)

    def test_weekday_numbers_sorted_and_unique(self):
        assert weekday_numbers(["thursday", "monday", "monday"]) == [0, 3]

    def test_effective_days_keeps_explicit_days(self):
        r = rule(DeliveryFrequency.TWICE_WEEK, ["wednesday", "saturday"])
        assert effective_delivery_days(r) == ("wednesday", "saturday")

    def test_from_subscription_rejects_unknown_frequency(self):
        subscription = SimpleNamespace(
            frequency="hourly", delivery_days=None, delivery_day_of_month=None
        )
        with pytest.raises(InvalidRecurrenceError):
            RecurrenceRule.from_subscription(subscription)

    def test_next_delivery_for_falls_back_to_start_date(self):
        subscription = SimpleNamespace(
            frequency="daily",
            delivery_days=None,
            delivery_day_of_month=None,
            next_delivery_date=None,
            start_date=MONDAY,
        )
        assert next_delivery_for(subscription, MONDAY) == TUESDAY
