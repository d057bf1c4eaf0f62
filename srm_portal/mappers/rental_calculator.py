import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from srm_portal.mappers.booking_window import as_utc
from srm_portal.schemas.rates import PERIOD_HOURS, RateTierSet, RentalPeriod, parse_decimal
from srm_portal.schemas.results import CalculationError
from srm_portal.schemas.srm import PaymentDetails, Quote, QuoteDeposit

CENT = Decimal("0.01")

# Consumed largest unit first; the hour tier only ever prices the remainder
GREEDY_ORDER = (RentalPeriod.month, RentalPeriod.week, RentalPeriod.day)


def _round(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _elapsed_hours(start: datetime, end: datetime) -> Decimal:
    return Decimal(str((end - start).total_seconds())) / Decimal(3600)


def calculate_rental_amount(
    tiers: RateTierSet,
    start: datetime,
    end: datetime,
) -> Decimal | CalculationError:
    """Price a booking from tiered rates, largest enabled unit first.

    Whole months, then weeks, then days are consumed from the duration as
    far as their tiers are enabled. What is left is priced by the hour tier
    (rounded up to whole hours, never below its minimum booking hours).
    Without an hour tier the leftover is charged as one more day when the day
    tier is enabled, otherwise the quote is unavailable.
    """
    start, end = as_utc(start), as_utc(end)
    if end <= start:
        return CalculationError(message="booking end must be after booking start")

    enabled = tiers.enabled_periods()
    if not enabled:
        return CalculationError(message="no rental period is enabled")

    remaining = _elapsed_hours(start, end)
    total = Decimal("0")

    for period in GREEDY_ORDER:
        if period not in enabled:
            continue
        unit_hours = PERIOD_HOURS[period]
        units = int(remaining // unit_hours)
        if units == 0:
            continue
        price = tiers.get(period).price
        if price is None:
            return CalculationError(message=f"{period.value} rate has no price")
        total += units * price
        remaining -= units * unit_hours

    if remaining > 0:
        if RentalPeriod.hour in enabled:
            tier = tiers.hour
            if tier.price is None:
                return CalculationError(message="hour rate has no price")
            hours = max(math.ceil(remaining), tier.min_units or 0)
            total += hours * tier.price
        elif RentalPeriod.day in enabled:
            price = tiers.day.price
            if price is None:
                return CalculationError(message="day rate has no price")
            total += math.ceil(remaining / PERIOD_HOURS[RentalPeriod.day]) * price
        else:
            return CalculationError(
                message=(
                    f"no enabled rate can price the remaining "
                    f"{math.ceil(remaining)} hours"
                ),
            )

    return _round(total)


def build_quote(tiers: RateTierSet, payment: PaymentDetails) -> Quote | CalculationError:
    start = payment.booking_start_date
    end = payment.booking_end_date
    if start is None or end is None:
        return CalculationError(message="booking start and end dates are required")

    base = calculate_rental_amount(tiers, start, end)
    if isinstance(base, CalculationError):
        return base

    # Empty advance means nothing paid yet
    advance = parse_decimal(payment.advance_amount or "0")
    if advance is None:
        return CalculationError(message="advance amount must be a number")

    deposit = payment.security_deposit
    return Quote(
        base_rental_amount=base,
        advance_amount=_round(advance),
        remaining_amount=_round(base - advance),
        security_deposit=QuoteDeposit(
            enabled=deposit.enabled,
            amount=parse_decimal(deposit.amount) if deposit.enabled else None,
        ),
        currency=payment.currency,
        booking_start_date=start,
        booking_end_date=end,
    )
