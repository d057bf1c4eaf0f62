from __future__ import annotations

from decimal import Decimal, InvalidOperation
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator


class RentalPeriod(StrEnum):
    hour = "hour"
    day = "day"
    week = "week"
    month = "month"


# Length of one unit of each period, in hours
PERIOD_HOURS: dict[RentalPeriod, int] = {
    RentalPeriod.hour: 1,
    RentalPeriod.day: 24,
    RentalPeriod.week: 7 * 24,
    RentalPeriod.month: 30 * 24,
}


def parse_decimal(raw: str | None) -> Decimal | None:
    """Parse a form amount like "120.50". Returns None for empty or junk."""
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def parse_int(raw: str | None) -> int | None:
    if raw is None:
        return None
    text = str(raw).strip()
    if not text.isdecimal():
        return None
    return int(text)


class RateTier(BaseModel):
    enabled: bool = False
    price_amount: str | None = None
    mileage_limit_km: str | None = None
    unlimited_mileage: bool = False
    min_booking_units: str | None = None

    @model_validator(mode="after")
    def _drop_limit_when_unlimited(self) -> RateTier:
        if self.unlimited_mileage:
            self.mileage_limit_km = None
        return self

    @field_validator(
        "price_amount", "mileage_limit_km", "min_booking_units", mode="before"
    )
    @classmethod
    def _coerce_numbers(cls, value):
        # JSON clients may send 120 instead of "120"
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def price(self) -> Decimal | None:
        return parse_decimal(self.price_amount)

    @property
    def min_units(self) -> int | None:
        return parse_int(self.min_booking_units)


class RateTierSet(BaseModel):
    hour: RateTier = Field(default_factory=RateTier)
    day: RateTier = Field(default_factory=RateTier)
    week: RateTier = Field(default_factory=RateTier)
    month: RateTier = Field(default_factory=RateTier)

    def get(self, period: RentalPeriod) -> RateTier:
        return getattr(self, period.value)

    def enabled_periods(self) -> list[RentalPeriod]:
        return [p for p in RentalPeriod if self.get(p).enabled]

    def any_enabled(self) -> bool:
        return bool(self.enabled_periods())
