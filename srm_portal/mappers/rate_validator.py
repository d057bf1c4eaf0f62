from srm_portal.schemas.rates import RateTierSet, RentalPeriod, parse_int
from srm_portal.schemas.results import FieldError

MIN_HOURLY_BOOKING = 1
MAX_HOURLY_BOOKING = 10

PERIOD_LABELS = {
    RentalPeriod.hour: "hourly",
    RentalPeriod.day: "daily",
    RentalPeriod.week: "weekly",
    RentalPeriod.month: "monthly",
}


def _field(period: RentalPeriod, name: str) -> str:
    return f"rental_details.{period.value}.{name}"


def validate_rate_tiers(tiers: RateTierSet) -> list[FieldError]:
    """Check a vehicle's rental tiers before it can be saved.

    Returns every problem found, not just the first one, so the form can
    highlight all offending fields at once.
    """
    if not tiers.any_enabled():
        return [FieldError(
            field="rental_details",
            message="at least one rental period must be selected.",
        )]

    errors: list[FieldError] = []
    for period in tiers.enabled_periods():
        tier = tiers.get(period)

        price = tier.price
        if price is None or price < 0:
            errors.append(FieldError(
                field=_field(period, "price_amount"),
                message=f"a valid {PERIOD_LABELS[period]} price is required",
            ))

        if not tier.unlimited_mileage and parse_int(tier.mileage_limit_km) is None:
            errors.append(FieldError(
                field=_field(period, "mileage_limit_km"),
                message="mileage limit is required unless mileage is unlimited",
            ))

        if period == RentalPeriod.hour:
            units = tier.min_units
            if units is None or not MIN_HOURLY_BOOKING <= units <= MAX_HOURLY_BOOKING:
                errors.append(FieldError(
                    field=_field(period, "min_booking_units"),
                    message=(
                        f"minimum booking hours must be between "
                        f"{MIN_HOURLY_BOOKING} and {MAX_HOURLY_BOOKING}"
                    ),
                ))

    return errors

