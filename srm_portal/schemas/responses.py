from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel

from srm_portal.schemas.rates import RateTierSet
from srm_portal.schemas.results import CalculationError, FieldError
from srm_portal.schemas.srm import (
    CustomerDetails,
    CustomerRecord,
    Quote,
    Resolution,
    VehicleDetails,
    VehicleRecord,
)


class FlowStep(StrEnum):
    customer = "customer"
    vehicle = "vehicle"
    payment = "payment"
    completed = "completed"


class StepStatus(StrEnum):
    advanced = "advanced"
    invalid = "invalid"
    blocked = "blocked"
    remote_error = "remote_error"
    restart_required = "restart_required"


class StepResult(BaseModel):
    flow_id: str
    step: FlowStep  # state after the submit
    status: StepStatus
    message: str | None = None
    errors: list[FieldError] = []
    booking_id: str | None = None
    customer_id: str | None = None
    vehicle_id: str | None = None
    quote: Quote | None = None


class QuotePreview(BaseModel):
    quote: Quote | None = None
    error: CalculationError | None = None


class CustomerSelection(BaseModel):
    resolution: Resolution
    draft: CustomerDetails


class VehicleSelection(BaseModel):
    resolution: Resolution
    draft: VehicleDetails


class FlowSnapshot(BaseModel):
    flow_id: str
    step: FlowStep
    furthest_step: FlowStep
    created_at: datetime
    updated_at: datetime
    booking_id: str | None = None
    customer_id: str | None = None
    vehicle_id: str | None = None
    rate_tier_snapshot: RateTierSet | None = None
    pending_file_deletions: list[str] = []


class FlowCreatedResponse(BaseModel):
    flow_id: str
    step: FlowStep


class CustomerSearchResponse(BaseModel):
    results: list[CustomerRecord]


class VehicleSearchResponse(BaseModel):
    results: list[VehicleRecord]
