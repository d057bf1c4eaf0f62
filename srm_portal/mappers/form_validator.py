from srm_portal.mappers.booking_window import as_utc
from srm_portal.schemas.rates import parse_decimal
from srm_portal.schemas.results import FieldError
from srm_portal.schemas.srm import (
    CustomerDetails,
    PaymentDetails,
    SecurityDeposit,
    VehicleDetails,
)

REQUIRED_CUSTOMER_FIELDS = {
    "customer_name": "Customer name is required",
    "nationality": "Nationality is required",
    "passport_number": "Passport number is required",
    "driving_license_number": "Driving license number is required",
    "phone_number": "Phone number is required",
}

REQUIRED_VEHICLE_FIELDS = {
    "vehicle_registration_number": "Registration number is required",
    "vehicle_category_id": "Vehicle category is required",
    "vehicle_brand_id": "Vehicle brand is required",
}


def _missing(model, required: dict[str, str]) -> list[FieldError]:
    return [
        FieldError(field=field, message=message)
        for field, message in required.items()
        if not str(getattr(model, field) or "").strip()
    ]


def validate_customer_details(details: CustomerDetails) -> list[FieldError]:
    return _missing(details, REQUIRED_CUSTOMER_FIELDS)


def validate_vehicle_details(details: VehicleDetails) -> list[FieldError]:
    return _missing(details, REQUIRED_VEHICLE_FIELDS)


def validate_security_deposit(deposit: SecurityDeposit) -> list[FieldError]:
    if not deposit.enabled:
        return []
    amount = parse_decimal(deposit.amount)
    if amount is None or amount <= 0:
        return [FieldError(
            field="security_deposit.amount",
            message="Please enter a valid deposit amount.",
        )]
    return []


def validate_payment_details(payment: PaymentDetails) -> list[FieldError]:
    errors: list[FieldError] = []
    if payment.booking_start_date is None:
        errors.append(FieldError(
            field="booking_start_date", message="Booking start date is required",
        ))
    if payment.booking_end_date is None:
        errors.append(FieldError(
            field="booking_end_date", message="Booking end date is required",
        ))
    if (
        payment.booking_start_date is not None
        and payment.booking_end_date is not None
        and as_utc(payment.booking_end_date) <= as_utc(payment.booking_start_date)
    ):
        errors.append(FieldError(
            field="booking_end_date",
            message="Booking end date must be after the start date",
        ))

    advance = parse_decimal(payment.advance_amount or "0")
    if advance is None or advance < 0:
        errors.append(FieldError(
            field="advance_amount", message="Advance amount must be a positive number",
        ))

    errors.extend(validate_security_deposit(payment.security_deposit))
    return errors
