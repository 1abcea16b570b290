"""Rental pricing.

price = daily_rate x inclusive day count x quantity, computed in Decimal.
Binary floats never enter the calculation: float inputs are converted via
str() first, the same normalization the Money value object uses.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Union

from django_rentals.availability import validate_span

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Normalize a numeric value to Decimal without float drift."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def rental_days(start_date: date, end_date: date) -> int:
    """Return the number of days in an inclusive span.

    Raises:
        InvalidRangeError: If end_date is before start_date
    """
    validate_span(start_date, end_date)
    return end_date.toordinal() - start_date.toordinal() + 1


def price(daily_rate: Number, start_date: date, end_date: date, quantity: int) -> Decimal:
    """Compute the rental price for quantity units over an inclusive span.

    Usage:
        price(Decimal("10.00"), date(2026, 1, 1), date(2026, 1, 5), 2)
        # Decimal("100.00")

    Raises:
        InvalidRangeError: If end_date is before start_date or quantity < 1
    """
    validate_span(start_date, end_date, quantity)
    return to_decimal(daily_rate) * rental_days(start_date, end_date) * quantity


def quantize(amount: Decimal, decimals: int = 2) -> Decimal:
    """Quantize to a currency's decimals using banker's rounding."""
    return amount.quantize(Decimal(10) ** -decimals, rounding=ROUND_HALF_EVEN)


@dataclass(frozen=True)
class RentalQuote:
    """Price breakdown for a prospective reservation."""

    daily_rate: Decimal
    days: int
    quantity: int
    total: Decimal
    currency: str


def build_quote(
    daily_rate: Number,
    start_date: date,
    end_date: date,
    quantity: int,
    currency: str = 'USD',
    decimals: int = 2,
) -> RentalQuote:
    """Build a RentalQuote with the total quantized for display."""
    total = price(daily_rate, start_date, end_date, quantity)
    return RentalQuote(
        daily_rate=to_decimal(daily_rate),
        days=rental_days(start_date, end_date),
        quantity=quantity,
        total=quantize(total, decimals),
        currency=currency,
    )
