import asyncio
import logging
import uuid
from datetime import datetime, timezone

from srm_portal.context import BookingSessionContext
from srm_portal.exceptions.custom import (
    FlowStateError,
    MissingContextError,
    RateLimitError,
    RemoteCallError,
)
from srm_portal.mappers.booking_window import find_overlap
from srm_portal.mappers.entity_resolver import (
    apply_customer_selection,
    apply_vehicle_selection,
    resolve,
)
from srm_portal.mappers.form_validator import (
    validate_customer_details,
    validate_payment_details,
    validate_vehicle_details,
)
from srm_portal.mappers.rate_validator import validate_rate_tiers
from srm_portal.mappers.rental_calculator import build_quote
from srm_portal.schemas.responses import (
    CustomerSelection,
    FlowSnapshot,
    FlowStep,
    QuotePreview,
    StepResult,
    StepStatus,
    VehicleSelection,
)
from srm_portal.schemas.results import CalculationError, FieldError
from srm_portal.schemas.srm import (
    CustomerDetails,
    CustomerRecord,
    PaymentDetails,
    Resolution,
    ResolutionMode,
    VehicleDetails,
    VehicleRecord,
)
from srm_portal.services.srm_api import SRMApiService

logger = logging.getLogger(__name__)

STEP_ORDER = [FlowStep.customer, FlowStep.vehicle, FlowStep.payment, FlowStep.completed]


class PendingDeletions:
    """Stored files the user removed while editing the current step.

    They are only deleted once the step's create/attach call succeeds; a
    failed step throws the list away instead.
    """

    def __init__(self) -> None:
        self._paths: list[str] = []

    @property
    def paths(self) -> list[str]:
        return list(self._paths)

    def add(self, path: str) -> None:
        if path and path not in self._paths:
            self._paths.append(path)

    def take(self) -> list[str]:
        paths, self._paths = self._paths, []
        return paths


class BookingFlow:
    """Drives one SRM booking through customer, vehicle and payment steps."""

    def __init__(
        self,
        api: SRMApiService,
        flow_id: str | None = None,
        context: BookingSessionContext | None = None,
        default_currency: str = "",
    ) -> None:
        self._api = api
        self.flow_id = flow_id or uuid.uuid4().hex[:12]
        self.context = context or BookingSessionContext()
        self.default_currency = default_currency
        self.step = FlowStep.customer
        self.furthest_step = FlowStep.customer
        self.customer_draft = CustomerDetails()
        self.customer_resolution = Resolution(mode=ResolutionMode.blank)
        self.vehicle_draft = VehicleDetails()
        self.vehicle_resolution = Resolution(mode=ResolutionMode.blank)
        # Details last known to be stored remotely; edits against them are sent as updates
        self._customer_baseline: CustomerDetails | None = None
        self._vehicle_baseline: VehicleDetails | None = None
        self._payment_id: str | None = None
        self.created_at = datetime.now(timezone.utc)
        self.updated_at = self.created_at
        self._pending = PendingDeletions()
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        """True while a step submission holds the flow."""
        return self._lock.locked()

    # --- state helpers ---

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    def _ensure_open(self) -> None:
        if self.step == FlowStep.completed:
            raise FlowStateError(f"Booking flow {self.flow_id} is already completed")

    def _advance(self, to: FlowStep) -> None:
        logger.info("Flow %s: %s -> %s", self.flow_id, self.step, to)
        self.step = to
        if STEP_ORDER.index(to) > STEP_ORDER.index(self.furthest_step):
            self.furthest_step = to
        self._touch()

    def _result(self, status: StepStatus, **kwargs) -> StepResult:
        fields = {
            "booking_id": self.context.booking_id,
            "customer_id": self.context.customer_id,
            "vehicle_id": self.context.vehicle_id,
        }
        fields.update(kwargs)
        return StepResult(flow_id=self.flow_id, step=self.step, status=status, **fields)

    def _invalid(self, errors: list[FieldError], message: str | None = None) -> StepResult:
        return self._result(
            StepStatus.invalid,
            errors=errors,
            message=message or "Please correct the highlighted fields",
        )

    def _remote_failure(self, exc: RemoteCallError | RateLimitError) -> StepResult:
        discarded = self._pending.take()
        if discarded:
            logger.info(
                "Flow %s: dropped %d pending file deletions after failed step",
                self.flow_id, len(discarded),
            )
        if isinstance(exc, RateLimitError):
            message = "The booking service is busy, please try again"
        else:
            message = f"Booking service error: {exc.message}"
        return self._result(StepStatus.remote_error, message=message)

    def _restart_required(self, exc: MissingContextError) -> StepResult:
        self._pending.take()
        self._payment_id = None
        self.step = FlowStep.customer
        self.furthest_step = FlowStep.customer
        self._touch()
        return self._result(StepStatus.restart_required, message=exc.message)

    @staticmethod
    def _baseline(resolution: Resolution, draft):
        if resolution.mode != ResolutionMode.existing:
            return None
        return draft.model_copy(deep=True)

    @staticmethod
    def _edited(resolution: Resolution, draft, baseline) -> bool:
        return (
            resolution.mode == ResolutionMode.existing
            and baseline is not None
            and draft != baseline
        )

    async def _flush_deletions(self) -> None:
        for path in self._pending.take():
            try:
                await self._api.delete_stored_file(path)
            except (RemoteCallError, RateLimitError):
                logger.warning("Flow %s: failed to delete stored file %s", self.flow_id, path)

    # --- search / selection ---

    async def search_customers(self, query: str) -> list[CustomerRecord]:
        return await self._api.search_customers(query)

    async def search_vehicles(self, query: str) -> list[VehicleRecord]:
        return await self._api.search_vehicles(query)

    def select_customer(
        self, selection: CustomerRecord | None, typed_value: str
    ) -> CustomerSelection:
        self._ensure_open()
        self.customer_resolution, self.customer_draft = apply_customer_selection(
            self.customer_draft, selection, typed_value
        )
        self._customer_baseline = self._baseline(self.customer_resolution, self.customer_draft)
        self._touch()
        return CustomerSelection(
            resolution=self.customer_resolution, draft=self.customer_draft
        )

    def select_vehicle(
        self, selection: VehicleRecord | None, typed_value: str
    ) -> VehicleSelection:
        self._ensure_open()
        self.vehicle_resolution, self.vehicle_draft = apply_vehicle_selection(
            self.vehicle_draft, selection, typed_value
        )
        self._vehicle_baseline = self._baseline(self.vehicle_resolution, self.vehicle_draft)
        self._touch()
        return VehicleSelection(
            resolution=self.vehicle_resolution, draft=self.vehicle_draft
        )

    def mark_file_for_deletion(self, path: str) -> list[str]:
        self._ensure_open()
        self._pending.add(path)
        return self._pending.paths

    # --- customer step ---

    async def submit_customer(self, details: CustomerDetails | None = None) -> StepResult:
        async with self._lock:
            self._ensure_open()
            if details is not None:
                self.customer_draft = details
            draft = self.customer_draft

            resolution = self.customer_resolution
            if resolution.mode != ResolutionMode.existing:
                resolution = resolve(None, draft.customer_name)

            if resolution.mode == ResolutionMode.blank:
                return self._invalid([FieldError(
                    field="customer_name",
                    message="Enter a customer name or select an existing customer",
                )])

            edited = self._edited(resolution, draft, self._customer_baseline)
            if resolution.mode == ResolutionMode.new or edited:
                errors = validate_customer_details(draft)
                if errors:
                    return self._invalid(errors)

            try:
                if resolution.mode == ResolutionMode.existing:
                    customer_id = resolution.entity_id
                    spam = await self._api.is_customer_spammed(customer_id)
                    if spam.is_spammed:
                        self._pending.take()
                        logger.warning(
                            "Flow %s: customer %s is flagged (%s)",
                            self.flow_id, customer_id, spam.reason,
                        )
                        return self._result(
                            StepStatus.blocked,
                            message=f"Customer is flagged: {spam.reason or 'no reason given'}",
                        )
                    if edited:
                        await self._api.update_customer(customer_id, draft)
                else:
                    customer_id = await self._api.create_customer(draft)

                if self.context.active:
                    await self._api.attach_customer_to_booking(
                        customer_id, self.context.booking_id
                    )
                    self.context.record_customer(customer_id)
                else:
                    booking_id = await self._api.create_booking_for_customer(customer_id)
                    self.context.begin_booking(booking_id, customer_id)
            except (RemoteCallError, RateLimitError) as exc:
                logger.exception("Flow %s: customer step failed", self.flow_id)
                return self._remote_failure(exc)

            # Later edits of the customer step update and attach the same record
            self.customer_resolution = Resolution(
                mode=ResolutionMode.existing, entity_id=customer_id
            )
            self._customer_baseline = draft.model_copy(deep=True)
            await self._flush_deletions()
            self._advance(FlowStep.vehicle)
            return self._result(StepStatus.advanced)

    # --- vehicle step ---

    async def submit_vehicle(self, details: VehicleDetails | None = None) -> StepResult:
        async with self._lock:
            self._ensure_open()
            try:
                booking_id = self.context.require_booking()
            except MissingContextError as exc:
                return self._restart_required(exc)

            if details is not None:
                self.vehicle_draft = details
            draft = self.vehicle_draft

            resolution = self.vehicle_resolution
            if resolution.mode != ResolutionMode.existing:
                resolution = resolve(None, draft.vehicle_registration_number)

            if resolution.mode == ResolutionMode.blank:
                return self._invalid([FieldError(
                    field="vehicle_registration_number",
                    message="Enter a registration number or select an existing vehicle",
                )])

            edited = self._edited(resolution, draft, self._vehicle_baseline)
            errors: list[FieldError] = []
            if resolution.mode == ResolutionMode.new or edited:
                errors.extend(validate_vehicle_details(draft))
            errors.extend(validate_rate_tiers(draft.rental_details))
            if errors:
                return self._invalid(errors)

            try:
                if resolution.mode == ResolutionMode.existing:
                    vehicle_id = resolution.entity_id
                    if edited:
                        await self._api.update_vehicle(vehicle_id, draft)
                else:
                    vehicle_id = await self._api.create_vehicle(draft)
                await self._api.attach_vehicle_to_booking(vehicle_id, booking_id)
            except (RemoteCallError, RateLimitError) as exc:
                logger.exception("Flow %s: vehicle step failed", self.flow_id)
                return self._remote_failure(exc)

            self.context.record_vehicle(vehicle_id, draft.rental_details)
            self.vehicle_resolution = Resolution(
                mode=ResolutionMode.existing, entity_id=vehicle_id
            )
            self._vehicle_baseline = draft.model_copy(deep=True)
            await self._flush_deletions()
            self._advance(FlowStep.payment)
            return self._result(StepStatus.advanced)

    # --- payment step ---

    def preview_quote(self, payment: PaymentDetails) -> QuotePreview:
        """Recompute the quote as dates or advance change. Raises MissingContextError."""
        _, tiers = self.context.read_for_payment()
        quote = build_quote(tiers, self._with_currency(payment))
        if isinstance(quote, CalculationError):
            return QuotePreview(error=quote)
        return QuotePreview(quote=quote)

    def _with_currency(self, payment: PaymentDetails) -> PaymentDetails:
        if payment.currency or not self.default_currency:
            return payment
        return payment.model_copy(update={"currency": self.default_currency})

    async def submit_payment(self, payment: PaymentDetails) -> StepResult:
        async with self._lock:
            self._ensure_open()
            try:
                booking_id, tiers = self.context.read_for_payment()
            except MissingContextError as exc:
                return self._restart_required(exc)

            errors = validate_payment_details(payment)
            if errors:
                return self._invalid(errors)

            quote = build_quote(tiers, self._with_currency(payment))
            if isinstance(quote, CalculationError):
                return self._invalid([], message=f"Quote unavailable: {quote.message}")

            if quote.advance_amount > quote.base_rental_amount:
                return self._invalid([FieldError(
                    field="advance_amount",
                    message="Advance amount cannot exceed the rental amount",
                )])

            try:
                if self.context.vehicle_id:
                    upcoming = await self._api.fetch_upcoming_booking_dates(
                        self.context.vehicle_id
                    )
                    clash = find_overlap(
                        upcoming, quote.booking_start_date, quote.booking_end_date
                    )
                    if clash is not None:
                        return self._invalid([FieldError(
                            field="booking_start_date",
                            message=(
                                "Vehicle is already booked from "
                                f"{clash.booking_start_date.isoformat()} to "
                                f"{clash.booking_end_date.isoformat()}"
                            ),
                        )])
                # A payment stored by an earlier failed attempt is updated, not duplicated
                self._payment_id = await self._api.save_payment(quote, self._payment_id)
                await self._api.link_payment_to_booking(booking_id, self._payment_id, quote)
            except (RemoteCallError, RateLimitError) as exc:
                logger.exception("Flow %s: payment step failed", self.flow_id)
                return self._remote_failure(exc)

            customer_id = self.context.customer_id
            vehicle_id = self.context.vehicle_id
            await self._flush_deletions()
            self.context.clear()
            self._advance(FlowStep.completed)
            return self._result(
                StepStatus.advanced,
                booking_id=booking_id,
                customer_id=customer_id,
                vehicle_id=vehicle_id,
                quote=quote,
                message="Booking finalized",
            )

    # --- navigation ---

    def reenter(self, step: FlowStep) -> FlowStep:
        self._ensure_open()
        if step == FlowStep.completed:
            raise FlowStateError("Only the payment step can complete a booking")
        if STEP_ORDER.index(step) > STEP_ORDER.index(self.furthest_step):
            raise FlowStateError(f"Step {step} has not been reached yet")
        # Unsaved deletions belong to the step being left
        self._pending.take()
        self.step = step
        self._touch()
        return self.step

    def abandon(self) -> None:
        dropped = self._pending.take()
        logger.info(
            "Flow %s abandoned at %s (%d pending deletions dropped)",
            self.flow_id, self.step, len(dropped),
        )
        self.context.clear()
        self.step = FlowStep.customer
        self.furthest_step = FlowStep.customer
        self.customer_draft = CustomerDetails()
        self.customer_resolution = Resolution(mode=ResolutionMode.blank)
        self.vehicle_draft = VehicleDetails()
        self.vehicle_resolution = Resolution(mode=ResolutionMode.blank)
        self._customer_baseline = None
        self._vehicle_baseline = None
        self._payment_id = None
        self._touch()

    def snapshot(self) -> FlowSnapshot:
        return FlowSnapshot(
            flow_id=self.flow_id,
            step=self.step,
            furthest_step=self.furthest_step,
            created_at=self.created_at,
            updated_at=self.updated_at,
            booking_id=self.context.booking_id,
            customer_id=self.context.customer_id,
            vehicle_id=self.context.vehicle_id,
            rate_tier_snapshot=self.context.rate_tier_snapshot,
            pending_file_deletions=self._pending.paths,
        )
