"""
Stay pricing with a flat-rate fallback.

The pricing service is authoritative; when it cannot be reached the
calculator falls back to ``base_rate * nights`` so the guest still sees a
plausible price.
"""

import logging
import math
from datetime import date
from typing import Optional

from api.client import BookingApiClient
from models.pricing import PricingBreakdown
from models.room import Property, RoomType
from utils.datetime_utils import MS_PER_DAY, date_to_timestamp
from utils.exceptions import BookingApiError

logger = logging.getLogger(__name__)


def count_nights(check_in_date: date, check_out_date: date) -> int:
    """Nights between two stay dates, rounded up to whole days."""
    delta = date_to_timestamp(check_out_date) - date_to_timestamp(check_in_date)
    return math.ceil(delta.total_seconds() * 1000 / MS_PER_DAY)


class PricingCalculator:
    """
    Keeps the current breakdown of one booking session up to date.

    Every call to ``calculate`` takes a sequence number; only the result of
    the most recently issued call may replace the breakdown.
    """

    def __init__(
        self, api: BookingApiClient, property_: Property, room_type: RoomType
    ):
        self.api = api
        self.property = property_
        self.room_type = room_type
        self.breakdown = PricingBreakdown.zero()
        self._sequence = 0
        self._in_flight = 0

    @property
    def is_calculating(self) -> bool:
        return self._in_flight > 0

    def reset(self) -> PricingBreakdown:
        """Zero the breakdown and invalidate any calculation in flight."""
        self._sequence += 1
        self.breakdown = PricingBreakdown.zero()
        return self.breakdown

    async def calculate(
        self, check_in_date: Optional[date], check_out_date: Optional[date]
    ) -> PricingBreakdown:
        """
        Price the stay, falling back to the flat rate on service errors.

        Returns the breakdown in effect after the call, which is unchanged if
        this call was superseded by a newer one.
        """
        if check_in_date is None or check_out_date is None:
            return self.breakdown

        self._sequence += 1
        sequence = self._sequence
        self._in_flight += 1

        try:
            try:
                result: Optional[PricingBreakdown] = await self.api.calculate_pricing(
                    self.property.id,
                    self.room_type.id,
                    check_in_date,
                    check_out_date,
                )
            except BookingApiError as e:
                logger.warning(
                    f"Pricing service failed for room type {self.room_type.id}, "
                    f"using flat rate: {e}"
                )
                result = self._fallback(check_in_date, check_out_date)

            if sequence != self._sequence:
                logger.debug(f"Discarding stale pricing result #{sequence}")
            elif result is not None:
                self.breakdown = result
        finally:
            self._in_flight -= 1

        return self.breakdown

    def _fallback(
        self, check_in_date: date, check_out_date: date
    ) -> Optional[PricingBreakdown]:
        nights = count_nights(check_in_date, check_out_date)
        if nights <= 0:
            # Leave the previous breakdown in place
            return None
        return PricingBreakdown.flat_rate(self.room_type.base_rate, nights)
