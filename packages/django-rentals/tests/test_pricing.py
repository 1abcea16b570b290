"""Tests for rental pricing."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from django_rentals.exceptions import InvalidRangeError
from django_rentals.pricing import build_quote, price, quantize, rental_days


DAY0 = date(2026, 1, 1)


class TestPrice:
    """price = daily rate x inclusive days x quantity."""

    def test_single_day_single_unit(self):
        assert price(Decimal("10.00"), DAY0, DAY0, 1) == Decimal("10.00")

    def test_five_days_two_units(self):
        assert price(Decimal("10.00"), DAY0, DAY0 + timedelta(days=4), 2) == Decimal("100.00")

    def test_exact_decimal_result(self):
        """No binary float drift on awkward rates."""
        total = price(Decimal("0.10"), DAY0, DAY0 + timedelta(days=2), 1)
        assert total == Decimal("0.30")
        assert isinstance(total, Decimal)

    def test_float_rate_is_normalized_through_str(self):
        assert price(0.1, DAY0, DAY0 + timedelta(days=2), 1) == Decimal("0.3")

    def test_spans_month_boundary(self):
        assert rental_days(date(2026, 1, 30), date(2026, 2, 2)) == 4

    def test_reversed_span_raises(self):
        with pytest.raises(InvalidRangeError):
            price(Decimal("10.00"), DAY0, DAY0 - timedelta(days=1), 1)

    def test_zero_quantity_raises(self):
        with pytest.raises(InvalidRangeError):
            price(Decimal("10.00"), DAY0, DAY0, 0)


class TestQuote:
    """Quote breakdown and quantization."""

    def test_build_quote_breakdown(self):
        quote = build_quote(Decimal("12.50"), DAY0, DAY0 + timedelta(days=2), 2, currency="EUR")

        assert quote.daily_rate == Decimal("12.50")
        assert quote.days == 3
        assert quote.quantity == 2
        assert quote.total == Decimal("75.00")
        assert quote.currency == "EUR"

    def test_quantize_uses_bankers_rounding(self):
        assert quantize(Decimal("2.125")) == Decimal("2.12")
        assert quantize(Decimal("2.135")) == Decimal("2.14")
        assert quantize(Decimal("7.5"), decimals=0) == Decimal("8")
