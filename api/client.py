"""
HTTP client for the booking API.

Wraps the three endpoints the checkout flow depends on: pricing calculation,
booking creation with payment, and payment status. Every failure surfaces as
a ``BookingApiError`` subclass so callers only have one exception family to
handle.
"""

import asyncio
import json
from datetime import date
from typing import Any, Dict, Optional, Tuple, Type

import aiohttp
from pydantic import BaseModel, ValidationError as PydanticValidationError

from config import settings
from models.booking import BookingRequest, CheckoutSession
from models.payment import PaymentStatusResponse
from models.pricing import PricingBreakdown
from utils.constants import (
    CREATE_BOOKING_ENDPOINT,
    PAYMENT_STATUS_ENDPOINT,
    PRICING_ENDPOINT,
)
from utils.datetime_utils import to_iso_timestamp
from utils.exceptions import (
    ApiConnectionError,
    ApiResponseError,
    MalformedResponseError,
)
from utils.logging_config import setup_logging

logger = setup_logging(
    name=__name__, log_level="INFO", log_file="booking_api.log", log_dir="logs"
)


class BookingApiClient:
    """
    Async client for the booking API.

    The underlying ``aiohttp.ClientSession`` is created lazily on first use
    and must be released with ``close()`` (or by using the client as an
    async context manager).
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 15.0,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "BookingApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    # ========== Transport ==========

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Perform a request and return the decoded JSON object.

        Raises:
            ApiConnectionError: Network failure or timeout
            ApiResponseError: Non-2xx status
            MalformedResponseError: Body is not a JSON object
        """
        url = f"{self.base_url}{path}"
        session = self._get_session()

        try:
            async with session.request(
                method, url, params=params, json=payload
            ) as response:
                text = await response.text()
                status = response.status
        except asyncio.TimeoutError as e:
            raise ApiConnectionError(f"{method} {path} timed out") from e
        except aiohttp.ClientError as e:
            raise ApiConnectionError(f"{method} {path} failed: {e}") from e

        if not 200 <= status < 300:
            message, details = _extract_error(text)
            logger.warning(f"{method} {path} returned {status}: {message}")
            raise ApiResponseError(status, message, details)

        try:
            data = json.loads(text)
        except ValueError as e:
            raise MalformedResponseError(
                f"{method} {path} returned invalid JSON: {e}"
            ) from e

        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"{method} {path} returned {type(data).__name__}, expected object"
            )
        return data

    # ========== Endpoints ==========

    async def calculate_pricing(
        self,
        business_unit_id: str,
        room_type_id: str,
        check_in_date: date,
        check_out_date: date,
    ) -> PricingBreakdown:
        """Request the priced breakdown of a stay."""
        data = await self._request(
            "GET",
            PRICING_ENDPOINT,
            params={
                "businessUnitId": business_unit_id,
                "roomTypeId": room_type_id,
                "checkInDate": to_iso_timestamp(check_in_date),
                "checkOutDate": to_iso_timestamp(check_out_date),
            },
        )
        return _parse(PricingBreakdown, data, "pricing")

    async def create_booking_with_payment(
        self, booking: BookingRequest
    ) -> CheckoutSession:
        """Create the reservation and its payment checkout session."""
        data = await self._request(
            "POST",
            CREATE_BOOKING_ENDPOINT,
            payload=booking.model_dump(by_alias=True),
        )
        checkout = _parse(CheckoutSession, data, "booking creation")
        logger.info(
            f"Created checkout session {checkout.payment_session_id} "
            f"for room type {booking.room_type_id}"
        )
        return checkout

    async def get_payment_status(self, session_id: str) -> PaymentStatusResponse:
        """Get the current payment status of a checkout session."""
        if not session_id:
            raise ValueError("Payment session ID is required")

        data = await self._request(
            "GET", PAYMENT_STATUS_ENDPOINT, params={"sessionId": session_id}
        )
        return _parse(PaymentStatusResponse, data, "payment status")


def _extract_error(text: str) -> Tuple[str, Optional[str]]:
    """Pull ``error``/``details`` out of an error body, if it is JSON."""
    try:
        body = json.loads(text)
    except ValueError:
        return (text[:200] or "Unknown error", None)
    if isinstance(body, dict):
        return (str(body.get("error") or "Unknown error"), body.get("details"))
    return ("Unknown error", None)


def _parse(model: Type[BaseModel], data: Dict[str, Any], what: str):
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise MalformedResponseError(f"Invalid {what} response: {e}") from e


_api_client: Optional[BookingApiClient] = None


def get_api_client() -> BookingApiClient:
    """Get or create booking API client instance."""
    global _api_client
    if _api_client is None:
        _api_client = BookingApiClient(
            settings.booking_api_base_url,
            timeout_seconds=settings.http_timeout_seconds,
        )
    return _api_client


async def close_api_client() -> None:
    """Close the shared booking API client."""
    global _api_client
    if _api_client is not None:
        await _api_client.close()
        _api_client = None
