from datetime import datetime, timezone

from srm_portal.mappers.form_validator import (
    validate_customer_details,
    validate_payment_details,
    validate_security_deposit,
    validate_vehicle_details,
)
from srm_portal.schemas.srm import (
    CustomerDetails,
    PaymentDetails,
    SecurityDeposit,
    VehicleDetails,
)


def test_customer_required_fields():
    errors = validate_customer_details(CustomerDetails(customer_name="Jane"))
    assert {e.field for e in errors} == {
        "nationality",
        "passport_number",
        "driving_license_number",
        "phone_number",
    }


def test_complete_customer():
    details = CustomerDetails(
        customer_name="Jane",
        nationality="IE",
        passport_number="P123",
        driving_license_number="DL9",
        phone_number="+971 50 123 4567",
    )
    assert validate_customer_details(details) == []


def test_vehicle_required_fields():
    errors = validate_vehicle_details(VehicleDetails(vehicle_registration_number="  "))
    assert {e.field for e in errors} == {
        "vehicle_registration_number",
        "vehicle_category_id",
        "vehicle_brand_id",
    }


def test_security_deposit_disabled_is_valid():
    assert validate_security_deposit(SecurityDeposit(enabled=False)) == []


def test_security_deposit_enabled_needs_amount():
    errors = validate_security_deposit(SecurityDeposit(enabled=True, amount=""))
    assert errors[0].field == "security_deposit.amount"
    assert validate_security_deposit(SecurityDeposit(enabled=True, amount="0")) != []
    assert validate_security_deposit(SecurityDeposit(enabled=True, amount="1000")) == []


def test_payment_missing_dates():
    errors = validate_payment_details(PaymentDetails(advance_amount="10"))
    assert {e.field for e in errors} == {"booking_start_date", "booking_end_date"}


def test_payment_end_before_start():
    payment = PaymentDetails(
        booking_start_date=datetime(2024, 1, 2),
        booking_end_date=datetime(2024, 1, 1),
    )
    errors = validate_payment_details(payment)
    assert [e.field for e in errors] == ["booking_end_date"]


def test_payment_negative_advance():
    payment = PaymentDetails(
        advance_amount="-1",
        booking_start_date=datetime(2024, 1, 1),
        booking_end_date=datetime(2024, 1, 2),
    )
    assert [e.field for e in validate_payment_details(payment)] == ["advance_amount"]


def test_payment_mixed_naive_and_aware_dates():
    valid = PaymentDetails(
        booking_start_date=datetime(2024, 1, 1),
        booking_end_date=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )
    assert validate_payment_details(valid) == []

    reversed_dates = PaymentDetails(
        booking_start_date=datetime(2024, 1, 3),
        booking_end_date=datetime(2024, 1, 2, tzinfo=timezone.utc),
    )
    assert [e.field for e in validate_payment_details(reversed_dates)] == ["booking_end_date"]
