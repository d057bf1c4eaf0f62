from srm_portal.mappers.rate_validator import validate_rate_tiers
from srm_portal.schemas.rates import RateTier, RateTierSet


def _fields(errors):
    return {e.field for e in errors}


def test_no_tier_enabled():
    errors = validate_rate_tiers(RateTierSet())
    assert len(errors) == 1
    assert errors[0].field == "rental_details"
    assert errors[0].message == "at least one rental period must be selected."


def test_valid_day_tier():
    tiers = RateTierSet(day=RateTier(enabled=True, price_amount="150", mileage_limit_km="250"))
    assert validate_rate_tiers(tiers) == []


def test_disabled_tiers_are_not_checked():
    tiers = RateTierSet(
        day=RateTier(enabled=True, price_amount="150", unlimited_mileage=True),
        week=RateTier(enabled=False, price_amount="", mileage_limit_km=""),
    )
    assert validate_rate_tiers(tiers) == []


def test_missing_price():
    tiers = RateTierSet(week=RateTier(enabled=True, price_amount="", mileage_limit_km="1000"))
    assert _fields(validate_rate_tiers(tiers)) == {"rental_details.week.price_amount"}


def test_non_numeric_price():
    tiers = RateTierSet(month=RateTier(enabled=True, price_amount="abc", mileage_limit_km="3000"))
    errors = validate_rate_tiers(tiers)
    assert _fields(errors) == {"rental_details.month.price_amount"}
    assert "monthly" in errors[0].message


def test_negative_price():
    tiers = RateTierSet(day=RateTier(enabled=True, price_amount="-5", mileage_limit_km="100"))
    assert _fields(validate_rate_tiers(tiers)) == {"rental_details.day.price_amount"}


def test_missing_mileage_when_limited():
    tiers = RateTierSet(day=RateTier(enabled=True, price_amount="100", mileage_limit_km=""))
    assert _fields(validate_rate_tiers(tiers)) == {"rental_details.day.mileage_limit_km"}


def test_unlimited_mileage_skips_limit_and_clears_it():
    tier = RateTier(enabled=True, price_amount="100", mileage_limit_km="250", unlimited_mileage=True)
    assert tier.mileage_limit_km is None
    assert validate_rate_tiers(RateTierSet(day=tier)) == []


def test_hour_min_booking_units_range():
    for value, ok in [("1", True), ("10", True), ("0", False), ("11", False), ("", False), ("2.5", False)]:
        tiers = RateTierSet(hour=RateTier(
            enabled=True, price_amount="20", unlimited_mileage=True, min_booking_units=value,
        ))
        fields = _fields(validate_rate_tiers(tiers))
        assert ("rental_details.hour.min_booking_units" not in fields) is ok, value


def test_reports_all_errors_at_once():
    tiers = RateTierSet(
        day=RateTier(enabled=True),
        hour=RateTier(enabled=True, price_amount="20", mileage_limit_km="50"),
    )
    assert _fields(validate_rate_tiers(tiers)) == {
        "rental_details.day.price_amount",
        "rental_details.day.mileage_limit_km",
        "rental_details.hour.min_booking_units",
    }


def test_numeric_json_values_are_accepted():
    tiers = RateTierSet.model_validate({
        "hour": {"enabled": True, "price_amount": 20, "mileage_limit_km": 40, "min_booking_units": 2},
    })
    assert tiers.hour.price_amount == "20"
    assert validate_rate_tiers(tiers) == []


def test_superscript_digits_are_field_errors():
    tiers = RateTierSet(
        day=RateTier(enabled=True, price_amount="100", mileage_limit_km="²"),
        hour=RateTier(enabled=True, price_amount="20", unlimited_mileage=True, min_booking_units="³"),
    )
    assert _fields(validate_rate_tiers(tiers)) == {
        "rental_details.day.mileage_limit_km",
        "rental_details.hour.min_booking_units",
    }
