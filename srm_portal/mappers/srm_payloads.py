"""Translation between local models and the SRM backend's camelCase JSON."""

from srm_portal.exceptions.custom import RemoteCallError
from srm_portal.schemas.rates import RateTier, RateTierSet, RentalPeriod
from srm_portal.schemas.srm import (
    BookingWindow,
    CustomerDetails,
    CustomerRecord,
    Quote,
    SpamStatus,
    VehicleDetails,
    VehicleRecord,
)


def _strip_country_code(phone: str, country_code: str) -> str:
    if country_code:
        phone = phone.replace(f"+{country_code}", "", 1)
    return phone.strip()


def customer_payload(details: CustomerDetails) -> dict:
    return {
        "countryCode": details.country_code,
        "customerName": details.customer_name,
        "nationality": details.nationality,
        "passportNumber": details.passport_number,
        "drivingLicenseNumber": details.driving_license_number,
        "phoneNumber": _strip_country_code(details.phone_number, details.country_code),
        "email": details.email or None,
        "customerProfilePic": details.customer_profile_pic or None,
    }


def rental_details_payload(tiers: RateTierSet) -> dict:
    payload: dict[str, dict] = {}
    for period in RentalPeriod:
        tier = tiers.get(period)
        entry = {
            "enabled": tier.enabled,
            "rentInAED": tier.price_amount or "",
            "mileageLimit": tier.mileage_limit_km or "",
            "unlimitedMileage": tier.unlimited_mileage,
        }
        if period == RentalPeriod.hour:
            entry["minBookingHours"] = tier.min_booking_units or ""
        payload[period.value] = entry
    return payload


def vehicle_payload(details: VehicleDetails) -> dict:
    return {
        "vehicleCategoryId": details.vehicle_category_id,
        "vehicleBrandId": details.vehicle_brand_id,
        "vehicleRegistrationNumber": details.vehicle_registration_number,
        "vehiclePhoto": details.vehicle_photo,
        "rentalDetails": rental_details_payload(details.rental_details),
    }


def payment_payload(quote: Quote) -> dict:
    deposit = quote.security_deposit
    return {
        "advanceAmount": str(quote.advance_amount),
        "remainingAmount": str(quote.remaining_amount),
        "securityDeposit": {
            "enabled": deposit.enabled,
            "amountInAED": str(deposit.amount) if deposit.amount is not None else "",
        },
        "currency": quote.currency,
    }


def parse_rental_details(raw: dict | None) -> RateTierSet:
    if not isinstance(raw, dict):
        raw = {}
    tiers: dict[str, RateTier] = {}
    for period in RentalPeriod:
        entry = raw.get(period.value)
        if not isinstance(entry, dict):
            entry = {}
        tiers[period.value] = RateTier(
            enabled=bool(entry.get("enabled", False)),
            price_amount=entry.get("rentInAED") or None,
            mileage_limit_km=entry.get("mileageLimit") or None,
            unlimited_mileage=bool(entry.get("unlimitedMileage", False)),
            min_booking_units=entry.get("minBookingHours") or None,
        )
    return RateTierSet(**tiers)


def parse_customer(raw: dict) -> CustomerRecord:
    return CustomerRecord(
        id=raw.get("customerId") or raw.get("id") or "",
        customer_name=raw.get("customerName") or "",
        nationality=raw.get("nationality"),
        passport_number=raw.get("passportNumber"),
        driving_license_number=raw.get("drivingLicenseNumber"),
        phone_number=raw.get("phoneNumber"),
        country_code=raw.get("countryCode"),
        email=raw.get("email"),
        customer_profile_pic=raw.get("customerProfilePic"),
    )


def parse_vehicle(raw: dict) -> VehicleRecord:
    category = raw.get("vehicleCategory") or {}
    brand = raw.get("vehicleBrand") or {}
    return VehicleRecord(
        id=raw.get("vehicleId") or raw.get("id") or "",
        vehicle_registration_number=raw.get("vehicleRegistrationNumber") or "",
        vehicle_category_id=raw.get("vehicleCategoryId") or category.get("categoryId"),
        vehicle_brand_id=raw.get("vehicleBrandId") or brand.get("id"),
        vehicle_photo=raw.get("vehiclePhoto"),
        rental_details=parse_rental_details(raw.get("rentalDetails")),
    )


def parse_spam_status(raw: dict) -> SpamStatus:
    return SpamStatus(
        is_spammed=bool(raw.get("isSpammed", False)),
        reason=raw.get("reason"),
        vehicle_registration_number=raw.get("vehicleRegistrationNumber"),
        company_name=raw.get("companyName"),
    )


def parse_booking_window(raw: dict) -> BookingWindow:
    try:
        start, end = raw["bookingStartDate"], raw["bookingEndDate"]
    except KeyError as exc:
        raise RemoteCallError(f"Upcoming booking is missing {exc.args[0]}") from exc
    return BookingWindow(booking_start_date=start, booking_end_date=end)
