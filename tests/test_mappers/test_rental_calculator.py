"""Tests for the tiered rental amount calculator."""

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from srm_portal.mappers.rental_calculator import (
    build_quote,
    calculate_rental_amount,
)
from srm_portal.schemas.rates import RateTier, RateTierSet
from srm_portal.schemas.results import CalculationError
from srm_portal.schemas.srm import PaymentDetails, Quote, SecurityDeposit

START = datetime(2024, 1, 1, 0, 0)


def _tier(price: str, min_units: str | None = None) -> RateTier:
    return RateTier(
        enabled=True,
        price_amount=price,
        unlimited_mileage=True,
        min_booking_units=min_units,
    )


def test_no_enabled_tier_is_calculation_error():
    result = calculate_rental_amount(RateTierSet(), START, START + timedelta(days=2))
    assert isinstance(result, CalculationError)
    assert "no rental period" in result.message


def test_end_before_start_is_calculation_error():
    tiers = RateTierSet(day=_tier("100"))
    result = calculate_rental_amount(tiers, START, START - timedelta(hours=1))
    assert isinstance(result, CalculationError)


def test_end_equal_start_is_calculation_error():
    tiers = RateTierSet(day=_tier("100"))
    assert isinstance(calculate_rental_amount(tiers, START, START), CalculationError)


@pytest.mark.parametrize("hours", [1, 23, 24, 25, 47, 48, 49, 100, 240])
def test_day_only_charges_started_days(hours):
    tiers = RateTierSet(day=_tier("100"))
    result = calculate_rental_amount(tiers, START, START + timedelta(hours=hours))
    assert result == Decimal(math.ceil(hours / 24) * 100).quantize(Decimal("0.01"))


def test_calculator_is_idempotent():
    tiers = RateTierSet(day=_tier("99.99"), hour=_tier("12.5", "2"))
    end = START + timedelta(hours=53, minutes=20)
    first = calculate_rental_amount(tiers, START, end)
    second = calculate_rental_amount(tiers, START, end)
    assert first == second
    assert tiers == RateTierSet(day=_tier("99.99"), hour=_tier("12.5", "2"))


def test_month_only_with_unpriceable_remainder():
    tiers = RateTierSet(month=_tier("3000"))
    result = calculate_rental_amount(tiers, START, datetime(2024, 2, 15, 0, 0))
    assert isinstance(result, CalculationError)
    assert "remaining" in result.message


def test_month_only_exact_months():
    tiers = RateTierSet(month=_tier("3000"))
    result = calculate_rental_amount(tiers, START, START + timedelta(days=60))
    assert result == Decimal("6000.00")


def test_day_plus_hour_with_minimum():
    tiers = RateTierSet(day=_tier("100"), hour=_tier("20", "2"))
    result = calculate_rental_amount(tiers, START, START + timedelta(hours=26))
    assert result == Decimal("140.00")


def test_hour_minimum_applies_to_short_remainder():
    tiers = RateTierSet(day=_tier("100"), hour=_tier("20", "3"))
    result = calculate_rental_amount(tiers, START, START + timedelta(hours=25))
    assert result == Decimal("160.00")


def test_partial_hour_rounds_up():
    tiers = RateTierSet(hour=_tier("20", "1"))
    result = calculate_rental_amount(tiers, START, START + timedelta(hours=2, minutes=1))
    assert result == Decimal("60.00")


def test_exact_day_does_not_charge_hour_minimum():
    tiers = RateTierSet(day=_tier("100"), hour=_tier("20", "5"))
    result = calculate_rental_amount(tiers, START, START + timedelta(days=2))
    assert result == Decimal("200.00")


def test_greedy_month_week_day_hour():
    tiers = RateTierSet(
        month=_tier("2000"),
        week=_tier("600"),
        day=_tier("100"),
        hour=_tier("10", "1"),
    )
    # 30d + 7d + 2d + 5h
    end = START + timedelta(days=39, hours=5)
    assert calculate_rental_amount(tiers, START, end) == Decimal("2850.00")


def test_week_only_remainder_is_error():
    tiers = RateTierSet(week=_tier("600"))
    result = calculate_rental_amount(tiers, START, START + timedelta(days=10))
    assert isinstance(result, CalculationError)


def test_week_and_day_fallback_rounds_up_to_day():
    tiers = RateTierSet(week=_tier("600"), day=_tier("100"))
    end = START + timedelta(days=8, hours=3)
    assert calculate_rental_amount(tiers, START, end) == Decimal("800.00")


def test_enabled_tier_without_price_is_error_when_used():
    tiers = RateTierSet(day=RateTier(enabled=True, price_amount="", unlimited_mileage=True))
    result = calculate_rental_amount(tiers, START, START + timedelta(days=1))
    assert isinstance(result, CalculationError)


def test_rounding_half_up():
    tiers = RateTierSet(hour=_tier("0.125", "1"))
    result = calculate_rental_amount(tiers, START, START + timedelta(hours=1))
    assert result == Decimal("0.13")


# --- build_quote ---


def _payment(**overrides) -> PaymentDetails:
    values = {
        "currency": "AED",
        "advance_amount": "50",
        "booking_start_date": START,
        "booking_end_date": START + timedelta(hours=26),
    }
    values.update(overrides)
    return PaymentDetails(**values)


def test_build_quote_remaining_amount():
    tiers = RateTierSet(day=_tier("100"), hour=_tier("20", "2"))
    quote = build_quote(tiers, _payment())
    assert isinstance(quote, Quote)
    assert quote.base_rental_amount == Decimal("140.00")
    assert quote.advance_amount == Decimal("50.00")
    assert quote.remaining_amount == Decimal("90.00")
    assert quote.currency == "AED"


def test_build_quote_recomputes_on_advance_change():
    tiers = RateTierSet(day=_tier("100"))
    assert build_quote(tiers, _payment(advance_amount="10")).remaining_amount == Decimal("190.00")
    assert build_quote(tiers, _payment(advance_amount="")).remaining_amount == Decimal("200.00")


def test_build_quote_security_deposit():
    tiers = RateTierSet(day=_tier("100"))
    quote = build_quote(
        tiers,
        _payment(security_deposit=SecurityDeposit(enabled=True, amount="500")),
    )
    assert quote.security_deposit.enabled is True
    assert quote.security_deposit.amount == Decimal("500")


def test_build_quote_missing_dates():
    tiers = RateTierSet(day=_tier("100"))
    result = build_quote(tiers, _payment(booking_end_date=None))
    assert isinstance(result, CalculationError)


def test_build_quote_bad_advance():
    tiers = RateTierSet(day=_tier("100"))
    assert isinstance(build_quote(tiers, _payment(advance_amount="abc")), CalculationError)


def test_build_quote_propagates_calculation_error():
    result = build_quote(RateTierSet(), _payment())
    assert isinstance(result, CalculationError)


def test_mixed_naive_and_aware_dates():
    # The naive start is read as UTC
    tiers = RateTierSet(day=_tier("100"))
    end = datetime(2024, 1, 2, tzinfo=timezone.utc)
    assert calculate_rental_amount(tiers, START, end) == Decimal("100.00")
    assert isinstance(
        calculate_rental_amount(tiers, datetime(2024, 1, 3), end), CalculationError
    )
