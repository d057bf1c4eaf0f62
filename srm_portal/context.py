from __future__ import annotations

import logging

from srm_portal.exceptions.custom import MissingContextError
from srm_portal.schemas.rates import RateTierSet

logger = logging.getLogger(__name__)


class BookingSessionContext:
    """Identifiers threaded between the independently submitted SRM steps.

    One instance belongs to exactly one booking flow and is written only by
    the step currently being submitted. Nothing here is durable: losing the
    instance means the flow restarts from the customer step.
    """

    def __init__(self) -> None:
        self.booking_id: str | None = None
        self.customer_id: str | None = None
        self.vehicle_id: str | None = None
        self.rate_tier_snapshot: RateTierSet | None = None

    @property
    def active(self) -> bool:
        return self.booking_id is not None

    def begin_booking(self, booking_id: str, customer_id: str | None = None) -> None:
        if self.booking_id == booking_id:
            logger.info("Booking %s already active, nothing to do", booking_id)
            if customer_id:
                self.customer_id = customer_id
            return

        if self.active:
            # A restarted flow replaces the unfinished booking
            logger.warning(
                "Booking %s still active, overwriting with %s",
                self.booking_id, booking_id,
            )
            self.vehicle_id = None
            self.rate_tier_snapshot = None

        self.booking_id = booking_id
        self.customer_id = customer_id
        logger.info("Began booking %s (customer=%s)", booking_id, customer_id)

    def record_customer(self, customer_id: str) -> None:
        self.customer_id = customer_id

    def record_vehicle(self, vehicle_id: str, rate_tier_snapshot: RateTierSet) -> None:
        self.vehicle_id = vehicle_id
        self.rate_tier_snapshot = rate_tier_snapshot.model_copy(deep=True)
        logger.info("Recorded vehicle %s for booking %s", vehicle_id, self.booking_id)

    def require_booking(self) -> str:
        if self.booking_id is None:
            raise MissingContextError()
        return self.booking_id

    def read_for_payment(self) -> tuple[str, RateTierSet]:
        booking_id = self.require_booking()
        if self.rate_tier_snapshot is None:
            raise MissingContextError("Complete the vehicle step first")
        return booking_id, self.rate_tier_snapshot

    def clear(self) -> None:
        if self.booking_id:
            logger.info("Cleared context for booking %s", self.booking_id)
        self.booking_id = None
        self.customer_id = None
        self.vehicle_id = None
        self.rate_tier_snapshot = None
