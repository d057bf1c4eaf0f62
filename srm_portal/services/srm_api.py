import logging
from collections.abc import Callable
from typing import TypeVar

import httpx
from pydantic import ValidationError

from srm_portal.exceptions.custom import RateLimitError, RemoteCallError
from srm_portal.mappers.srm_payloads import (
    customer_payload,
    parse_booking_window,
    parse_customer,
    parse_spam_status,
    parse_vehicle,
    payment_payload,
    vehicle_payload,
)
from srm_portal.schemas.srm import (
    BookingWindow,
    CustomerDetails,
    CustomerRecord,
    Quote,
    SpamStatus,
    VehicleDetails,
    VehicleRecord,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CUSTOMERS_PATH = "/srm-customers"
CUSTOMER_SEARCH_PATH = "/srm-customers/search"
BOOKING_CUSTOMER_PATH = "/srm-bookings/customer"
BOOKING_CUSTOMER_ATTACH_PATH = "/srm-bookings/customer/v2"
CUSTOMER_SPAM_PATH = "/srm-bookings/customer/is-spammed-customer"
VEHICLES_PATH = "/srm-vehicle"
VEHICLE_SEARCH_PATH = "/srm-vehicle/search"
BOOKING_VEHICLE_PATH = "/srm-bookings/vehicle"
UPCOMING_BOOKINGS_PATH = "/srm-bookings/vehicle/upcoming-booking-dates"
PAYMENTS_PATH = "/srm-payment"
BOOKING_PAYMENT_PATH = "/srm-bookings/payment"
DELETE_FILE_PATH = "/file/delete-single-file"


class SRMApiService:
    def __init__(self, client: httpx.AsyncClient, base_url: str, access_token: str):
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
    ) -> dict:
        url = f"{self._base_url}{path}"
        try:
            resp = await self._client.request(
                method, url, json=json, params=params, headers=self._headers
            )
        except httpx.HTTPError as exc:
            raise RemoteCallError(f"{method} {path} failed: {exc!r}") from exc

        if resp.status_code == 429:
            raise RateLimitError("SRM")
        if resp.status_code >= 400:
            raise RemoteCallError(resp.text, status_code=resp.status_code)

        if not resp.content:
            return {}
        try:
            data = resp.json()
        except ValueError as exc:
            raise RemoteCallError(
                f"{method} {path} returned a non-JSON body", status_code=resp.status_code
            ) from exc
        if not isinstance(data, dict):
            raise RemoteCallError(
                f"{method} {path} returned {type(data).__name__}, expected an object",
                status_code=resp.status_code,
            )
        return data

    @staticmethod
    def _result_object(data: dict, path: str) -> dict:
        result = data.get("result") or {}
        if not isinstance(result, dict):
            raise RemoteCallError(f"{path} result is not an object")
        return result

    @classmethod
    def _result(cls, data: dict, key: str, path: str) -> str:
        value = cls._result_object(data, path).get(key)
        if not value:
            raise RemoteCallError(f"{path} response is missing result.{key}")
        return str(value)

    @staticmethod
    def _result_rows(data: dict, path: str, parse: Callable[[dict], T]) -> list[T]:
        rows = data.get("result") or []
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise RemoteCallError(f"{path} result is not a list of objects")
        try:
            return [parse(r) for r in rows]
        except ValidationError as exc:
            raise RemoteCallError(f"{path} returned malformed rows: {exc}") from exc

    # --- customers ---

    async def create_customer(self, details: CustomerDetails) -> str:
        data = await self._request("POST", CUSTOMERS_PATH, json=customer_payload(details))
        customer_id = self._result(data, "customerId", CUSTOMERS_PATH)
        logger.info("Created customer %s", customer_id)
        return customer_id

    async def update_customer(self, customer_id: str, details: CustomerDetails) -> None:
        await self._request(
            "PUT",
            CUSTOMERS_PATH,
            json={"customerId": customer_id, **customer_payload(details)},
        )
        logger.info("Updated customer %s", customer_id)

    async def create_booking_for_customer(self, customer_id: str) -> str:
        data = await self._request(
            "POST", BOOKING_CUSTOMER_PATH, json={"customerId": customer_id}
        )
        booking_id = self._result(data, "bookingId", BOOKING_CUSTOMER_PATH)
        logger.info("Created booking %s for customer %s", booking_id, customer_id)
        return booking_id

    async def attach_customer_to_booking(self, customer_id: str, booking_id: str) -> None:
        await self._request(
            "PUT",
            BOOKING_CUSTOMER_ATTACH_PATH,
            json={"customerId": customer_id, "bookingId": booking_id},
        )
        logger.info("Attached customer %s to booking %s", customer_id, booking_id)

    async def is_customer_spammed(self, customer_id: str) -> SpamStatus:
        data = await self._request(
            "GET", CUSTOMER_SPAM_PATH, params={"customerId": customer_id}
        )
        return parse_spam_status(self._result_object(data, CUSTOMER_SPAM_PATH))

    # --- vehicles ---

    async def create_vehicle(self, details: VehicleDetails) -> str:
        data = await self._request("POST", VEHICLES_PATH, json=vehicle_payload(details))
        vehicle_id = self._result(data, "vehicleId", VEHICLES_PATH)
        logger.info("Created vehicle %s", vehicle_id)
        return vehicle_id

    async def update_vehicle(self, vehicle_id: str, details: VehicleDetails) -> None:
        await self._request(
            "PUT",
            VEHICLES_PATH,
            json={"vehicleId": vehicle_id, **vehicle_payload(details)},
        )
        logger.info("Updated vehicle %s", vehicle_id)

    async def attach_vehicle_to_booking(self, vehicle_id: str, booking_id: str) -> None:
        await self._request(
            "PUT",
            BOOKING_VEHICLE_PATH,
            json={"vehicleId": vehicle_id, "bookingId": booking_id},
        )
        logger.info("Attached vehicle %s to booking %s", vehicle_id, booking_id)

    async def fetch_upcoming_booking_dates(self, vehicle_id: str) -> list[BookingWindow]:
        data = await self._request(
            "GET", UPCOMING_BOOKINGS_PATH, params={"vehicleId": vehicle_id}
        )
        return self._result_rows(data, UPCOMING_BOOKINGS_PATH, parse_booking_window)

    # --- payment ---

    async def save_payment(self, quote: Quote, payment_id: str | None = None) -> str:
        """Store the quote as a payment record, or overwrite the one already stored."""
        if payment_id is None:
            data = await self._request("POST", PAYMENTS_PATH, json=payment_payload(quote))
            payment_id = self._result(data, "id", PAYMENTS_PATH)
            logger.info("Created payment %s", payment_id)
            return payment_id

        await self._request(
            "PUT",
            PAYMENTS_PATH,
            json={"paymentId": payment_id, **payment_payload(quote)},
        )
        logger.info("Updated payment %s", payment_id)
        return payment_id

    async def link_payment_to_booking(
        self, booking_id: str, payment_id: str, quote: Quote
    ) -> None:
        await self._request(
            "PUT",
            BOOKING_PAYMENT_PATH,
            json={
                "bookingId": booking_id,
                "paymentId": payment_id,
                "bookingStartDate": quote.booking_start_date.isoformat(),
                "bookingEndDate": quote.booking_end_date.isoformat(),
            },
        )
        logger.info("Finalized booking %s with payment %s", booking_id, payment_id)

    # --- search / files ---

    async def search_customers(self, query: str) -> list[CustomerRecord]:
        data = await self._request("GET", CUSTOMER_SEARCH_PATH, params={"search": query})
        customers = self._result_rows(data, CUSTOMER_SEARCH_PATH, parse_customer)
        logger.info("Found %d customers for %r", len(customers), query)
        return customers

    async def search_vehicles(self, query: str) -> list[VehicleRecord]:
        data = await self._request("GET", VEHICLE_SEARCH_PATH, params={"search": query})
        vehicles = self._result_rows(data, VEHICLE_SEARCH_PATH, parse_vehicle)
        logger.info("Found %d vehicles for %r", len(vehicles), query)
        return vehicles

    async def delete_stored_file(self, path: str) -> None:
        await self._request("DELETE", DELETE_FILE_PATH, params={"path": path})
        logger.info("Deleted stored file %s", path)
