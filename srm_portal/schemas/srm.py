from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, Field

from srm_portal.schemas.rates import RateTierSet


class CustomerRecord(BaseModel):
    id: str
    customer_name: str
    nationality: str | None = None
    passport_number: str | None = None
    driving_license_number: str | None = None
    phone_number: str | None = None
    country_code: str | None = None
    email: str | None = None
    customer_profile_pic: str | None = None


class VehicleRecord(BaseModel):
    id: str
    vehicle_registration_number: str
    vehicle_category_id: str | None = None
    vehicle_brand_id: str | None = None
    vehicle_photo: str | None = None
    rental_details: RateTierSet = Field(default_factory=RateTierSet)


class CustomerDetails(BaseModel):
    customer_name: str = ""
    nationality: str = ""
    passport_number: str = ""
    driving_license_number: str = ""
    phone_number: str = ""
    country_code: str = ""
    email: str = ""
    customer_profile_pic: str = ""


class VehicleDetails(BaseModel):
    vehicle_registration_number: str = ""
    vehicle_category_id: str = ""
    vehicle_brand_id: str = ""
    vehicle_photo: str = ""
    rental_details: RateTierSet = Field(default_factory=RateTierSet)


class SecurityDeposit(BaseModel):
    enabled: bool = False
    amount: str | None = None


class PaymentDetails(BaseModel):
    currency: str = ""
    advance_amount: str = ""
    security_deposit: SecurityDeposit = Field(default_factory=SecurityDeposit)
    booking_start_date: datetime | None = None
    booking_end_date: datetime | None = None


class QuoteDeposit(BaseModel):
    enabled: bool = False
    amount: Decimal | None = None


class Quote(BaseModel):
    base_rental_amount: Decimal
    advance_amount: Decimal
    remaining_amount: Decimal
    security_deposit: QuoteDeposit = Field(default_factory=QuoteDeposit)
    currency: str = ""
    booking_start_date: datetime
    booking_end_date: datetime


class BookingWindow(BaseModel):
    booking_start_date: datetime
    booking_end_date: datetime


class ResolutionMode(StrEnum):
    existing = "existing"
    new = "new"
    blank = "blank"


class Resolution(BaseModel):
    mode: ResolutionMode
    entity_id: str | None = None

    @property
    def usable(self) -> bool:
        return self.mode != ResolutionMode.blank


class SpamStatus(BaseModel):
    is_spammed: bool = False
    reason: str | None = None
    vehicle_registration_number: str | None = None
    company_name: str | None = None
