"""Delivery recurrence rules

Pure date arithmetic for subscription schedules. Nothing here touches the
database or the clock; callers pass the reference time in.
"""

import calendar as cal
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple, Union

from src.domain.subscription import DeliveryFrequency, Weekday

WEEKDAY_NUMBERS = {day.value: number for number, day in enumerate(Weekday)}

DEFAULT_DELIVERY_DAYS = {
    DeliveryFrequency.WEEKLY: ("monday",),
    DeliveryFrequency.TWICE_WEEK: ("monday", "thursday"),
}


class InvalidRecurrenceError(ValueError):
    """Raised when a recurrence rule cannot produce a delivery date"""


@dataclass(frozen=True)
class RecurrenceRule:
    """Recurrence fields of a subscription, detached from the entity"""

    frequency: DeliveryFrequency
    delivery_days: Tuple[str, ...] = ()
    delivery_day_of_month: Optional[int] = None

    @classmethod
    def from_subscription(cls, subscription) -> "RecurrenceRule":
        try:
            frequency = DeliveryFrequency(subscription.frequency)
        except ValueError as e:
            raise InvalidRecurrenceError(
                f"Unknown frequency: {subscription.frequency}"
            ) from e
        return cls(
            frequency=frequency,
            delivery_days=tuple(subscription.delivery_days or ()),
            delivery_day_of_month=subscription.delivery_day_of_month,
        )


def weekday_numbers(days: Iterable[str]) -> List[int]:
    """Map weekday names to sorted, de-duplicated date.weekday() numbers"""
    numbers = set()
    for day in days:
        key = str(day).strip().lower()
        if key not in WEEKDAY_NUMBERS:
            raise InvalidRecurrenceError(f"Unknown weekday: {day}")
        numbers.add(WEEKDAY_NUMBERS[key])
    return sorted(numbers)


def effective_delivery_days(rule: RecurrenceRule) -> Tuple[str, ...]:
    """
    Delivery days after defaults are applied

    weekly needs at least one day and twice_week at least two; anything
    less falls back to DEFAULT_DELIVERY_DAYS.
    """
    days = tuple(str(d).strip().lower() for d in rule.delivery_days)
    if rule.frequency == DeliveryFrequency.WEEKLY and not days:
        return DEFAULT_DELIVERY_DAYS[DeliveryFrequency.WEEKLY]
    if rule.frequency == DeliveryFrequency.TWICE_WEEK and len(set(days)) < 2:
        return DEFAULT_DELIVERY_DAYS[DeliveryFrequency.TWICE_WEEK]
    return days


def add_months(d: date, months: int) -> date:
    """Add months to a date, clamping to the last day of the target month"""
    month = d.month - 1 + months
    year = d.year + month // 12
    month = month % 12 + 1
    max_day = cal.monthrange(year, month)[1]
    return d.replace(year=year, month=month, day=min(d.day, max_day))


def next_weekday_after(d: date, numbers: List[int]) -> date:
    """First date strictly after d whose weekday is in numbers (1 to 7 days later)"""
    current = d.weekday()
    return d + timedelta(days=min((n - current - 1) % 7 + 1 for n in numbers))


def snap_forward(d: date, numbers: List[int]) -> date:
    """d itself if its weekday is in numbers, otherwise the next matching date"""
    current = d.weekday()
    return d + timedelta(days=min((n - current) % 7 for n in numbers))


def _monthly(baseline: date, rule: RecurrenceRule) -> date:
    target = add_months(baseline, 1)

    if rule.delivery_day_of_month is not None:
        if not 1 <= rule.delivery_day_of_month <= 28:
            raise InvalidRecurrenceError(
                f"delivery_day_of_month must be between 1 and 28, "
                f"got {rule.delivery_day_of_month}"
            )
        target = target.replace(day=rule.delivery_day_of_month)

    if rule.delivery_days:
        first_weekday = weekday_numbers(rule.delivery_days)[0]
        candidate = snap_forward(target, [first_weekday])
        if candidate.month != target.month:
            # Stay inside the target month
            candidate = target.replace(day=cal.monthrange(target.year, target.month)[1])
        target = candidate

    return target


def compute_next_delivery(
    rule: RecurrenceRule,
    anchor: date,
    reference_now: Union[date, datetime],
) -> date:
    """
    Compute the delivery date following anchor

    If anchor is already in the past relative to reference_now, the
    calculation starts from reference_now instead, so a stalled schedule
    resumes from today rather than replaying every missed interval.

    Args:
        rule: Recurrence rule of the subscription
        anchor: Current next_delivery_date (or start_date when unset)
        reference_now: Current time

    Returns:
        Date strictly after the baseline (and therefore after anchor)

    Raises:
        InvalidRecurrenceError: The rule cannot produce a date
    """
    if isinstance(anchor, datetime):
        anchor = anchor.date()
    today = reference_now.date() if isinstance(reference_now, datetime) else reference_now
    baseline = today if anchor < today else anchor

    frequency = rule.frequency

    if frequency == DeliveryFrequency.DAILY:
        return baseline + timedelta(days=1)

    if frequency == DeliveryFrequency.ALTERNATE_DAYS:
        return baseline + timedelta(days=2)

    if frequency in (DeliveryFrequency.WEEKLY, DeliveryFrequency.TWICE_WEEK):
        numbers = weekday_numbers(effective_delivery_days(rule))
        return next_weekday_after(baseline, numbers)

    if frequency == DeliveryFrequency.FORTNIGHTLY:
        next_date = baseline + timedelta(days=14)
        if rule.delivery_days:
            next_date = snap_forward(next_date, weekday_numbers(rule.delivery_days))
        return next_date

    if frequency == DeliveryFrequency.MONTHLY:
        return _monthly(baseline, rule)

    raise InvalidRecurrenceError(f"Unsupported frequency: {frequency}")


def next_delivery_for(subscription, reference_now: Union[date, datetime]) -> date:
    """compute_next_delivery() anchored on the subscription's current progress"""
    anchor = subscription.next_delivery_date or subscription.start_date
    return compute_next_delivery(
        RecurrenceRule.from_subscription(subscription), anchor, reference_now
    )
