"""
Unit tests for stay pricing.
"""

import asyncio
from datetime import date

import pytest

from booking.pricing import PricingCalculator, count_nights
from models.pricing import PricingBreakdown
from utils.exceptions import ApiConnectionError, ApiResponseError

CHECK_IN = date(2025, 6, 10)
CHECK_OUT = date(2025, 6, 13)


@pytest.fixture
def calculator(mock_api, property_, room_type):
    return PricingCalculator(mock_api, property_, room_type)


def test_count_nights():
    assert count_nights(CHECK_IN, CHECK_OUT) == 3
    assert count_nights(CHECK_IN, CHECK_IN) == 0
    assert count_nights(CHECK_OUT, CHECK_IN) == -3


class TestCalculate:
    """Test pricing calculation."""

    @pytest.mark.asyncio
    async def test_uses_service_result_verbatim(self, calculator, mock_api):
        """Totals are shown as returned even when they do not add up."""
        mock_api.calculate_pricing.return_value = PricingBreakdown(
            subtotal=100, nights=1, taxes=10, service_fee=5, total_amount=999
        )

        breakdown = await calculator.calculate(CHECK_IN, CHECK_OUT)

        assert breakdown.total_amount == 999
        assert calculator.breakdown.total_amount == 999
        mock_api.calculate_pricing.assert_called_once_with(
            "bu-seaside", "room-deluxe", CHECK_IN, CHECK_OUT
        )

    @pytest.mark.asyncio
    async def test_missing_date_is_noop(self, calculator, mock_api):
        breakdown = await calculator.calculate(CHECK_IN, None)

        assert breakdown == PricingBreakdown.zero()
        mock_api.calculate_pricing.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [ApiConnectionError("down"), ApiResponseError(500, "Internal error")],
    )
    async def test_falls_back_to_flat_rate(self, calculator, mock_api, error):
        mock_api.calculate_pricing.side_effect = error

        breakdown = await calculator.calculate(CHECK_IN, CHECK_OUT)

        assert breakdown.nights == 3
        assert breakdown.subtotal == 15000
        assert breakdown.total_amount == 15000
        assert breakdown.taxes == 0
        assert breakdown.service_fee == 0
        assert not calculator.is_calculating

    @pytest.mark.asyncio
    async def test_fallback_with_no_nights_keeps_previous(self, calculator, mock_api):
        await calculator.calculate(CHECK_IN, CHECK_OUT)
        previous = calculator.breakdown
        mock_api.calculate_pricing.side_effect = ApiConnectionError("down")

        breakdown = await calculator.calculate(CHECK_OUT, CHECK_IN)

        assert breakdown == previous

    @pytest.mark.asyncio
    async def test_busy_flag_while_in_flight(self, calculator, mock_api):
        release = asyncio.Event()
        seen_busy = []

        async def slow_pricing(*args):
            seen_busy.append(calculator.is_calculating)
            await release.wait()
            return PricingBreakdown.flat_rate(5000, 3)

        mock_api.calculate_pricing.side_effect = slow_pricing

        task = asyncio.create_task(calculator.calculate(CHECK_IN, CHECK_OUT))
        await asyncio.sleep(0)
        assert calculator.is_calculating

        release.set()
        await task

        assert seen_busy == [True]
        assert not calculator.is_calculating

    @pytest.mark.asyncio
    async def test_stale_result_is_discarded(self, calculator, mock_api):
        """An older response finishing last does not overwrite the newer one."""
        first_release = asyncio.Event()
        older = PricingBreakdown(subtotal=1, nights=1, total_amount=1)
        newer = PricingBreakdown(subtotal=2, nights=2, total_amount=2)

        async def pricing(property_id, room_type_id, check_in, check_out):
            if check_out == CHECK_OUT:
                await first_release.wait()
                return older
            return newer

        mock_api.calculate_pricing.side_effect = pricing

        first = asyncio.create_task(calculator.calculate(CHECK_IN, CHECK_OUT))
        await asyncio.sleep(0)
        await calculator.calculate(CHECK_IN, date(2025, 6, 12))
        first_release.set()
        await first

        assert calculator.breakdown == newer
        assert not calculator.is_calculating

    @pytest.mark.asyncio
    async def test_reset_invalidates_in_flight(self, calculator, mock_api):
        release = asyncio.Event()

        async def slow_pricing(*args):
            await release.wait()
            return PricingBreakdown.flat_rate(5000, 3)

        mock_api.calculate_pricing.side_effect = slow_pricing

        task = asyncio.create_task(calculator.calculate(CHECK_IN, CHECK_OUT))
        await asyncio.sleep(0)
        calculator.reset()
        release.set()
        await task

        assert calculator.breakdown == PricingBreakdown.zero()
