"""Availability arithmetic over reservation date spans.

Pure functions: nothing here touches the database. Callers pass the open
reservations for one equipment type (model instances or Span values, any
object with start_date, end_date and quantity) and get back counts.

Spans are inclusive on both ends. Two spans [a1, a2] and [b1, b2] overlap
iff a1 <= b2 and b1 <= a2, so a span ending the day before another starts
does not overlap it.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

from django_rentals.exceptions import InvalidRangeError


@dataclass(frozen=True)
class Span:
    """An inclusive date span holding a quantity of units."""

    start_date: date
    end_date: date
    quantity: int = 1


def validate_span(start_date: date, end_date: date, quantity: int | None = None) -> None:
    """Validate a requested span and, if given, a requested quantity.

    Raises:
        InvalidRangeError: If end_date is before start_date or quantity < 1
    """
    if start_date is None or end_date is None:
        raise InvalidRangeError(
            "start_date and end_date are required",
            start_date=start_date,
            end_date=end_date,
            quantity=quantity,
        )
    if end_date < start_date:
        raise InvalidRangeError(
            f"end_date {end_date} is before start_date {start_date}",
            start_date=start_date,
            end_date=end_date,
            quantity=quantity,
        )
    if quantity is not None and quantity < 1:
        raise InvalidRangeError(
            f"quantity must be at least 1, got {quantity}",
            start_date=start_date,
            end_date=end_date,
            quantity=quantity,
        )


def spans_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Check if two inclusive date spans share at least one day."""
    return a_start <= b_end and b_start <= a_end


def booked_quantity(spans: Iterable, start_date: date, end_date: date) -> int:
    """Sum the quantity of every span overlapping [start_date, end_date].

    The sum is taken over the whole window, not per day: two spans that
    overlap the window but not each other are still added together.
    """
    return sum(
        span.quantity
        for span in spans
        if spans_overlap(span.start_date, span.end_date, start_date, end_date)
    )


def free_capacity(total_quantity: int, spans: Iterable, start_date: date, end_date: date) -> int:
    """Return units left for [start_date, end_date] after the given spans.

    With no overlapping spans this is total_quantity. The result can be
    negative when the stored spans already overrun capacity.
    """
    validate_span(start_date, end_date)
    return total_quantity - booked_quantity(spans, start_date, end_date)


def daily_usage(spans: Iterable) -> Counter:
    """Count units held on each calendar day covered by the spans."""
    usage: Counter = Counter()
    for span in spans:
        day = span.start_date
        while day <= span.end_date:
            usage[day] += span.quantity
            day += timedelta(days=1)
    return usage


def capacity_overruns(total_quantity: int, spans: Iterable) -> list[tuple[date, int]]:
    """Return (day, units held) for every day where the spans exceed capacity."""
    usage = daily_usage(spans)
    return sorted(
        (day, held) for day, held in usage.items() if held > total_quantity
    )
