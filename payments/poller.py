"""
Payment status polling for checkout sessions.

One poller belongs to one booking session and owns at most one running
asyncio task. Starting a new poll cancels the previous one; ``aclose()``
cancels and awaits whatever is running.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional

from api.client import BookingApiClient
from models.payment import (
    ModalStatus,
    PaymentStatus,
    PaymentStatusResponse,
    PollOutcome,
)
from utils.exceptions import BookingApiError
from utils.logging_config import setup_logging

logger = setup_logging(
    name=__name__, log_level="INFO", log_file="payments.log", log_dir="logs"
)

OutcomeHandler = Callable[[PollOutcome], Awaitable[None]]


class PollerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    FINISHED = "finished"
    CANCELLED = "cancelled"


class PaymentStatusPoller:
    """
    Poll the payment-status endpoint until a definitive status arrives.

    ``pending`` keeps the loop going until ``max_attempts`` ticks have been
    spent, after which the poll ends in the ``pending`` modal state. Transport
    errors are retried ``max_retries`` times with exponential backoff before
    the poll is reported as failed.
    """

    def __init__(
        self,
        api: BookingApiClient,
        on_outcome: OutcomeHandler,
        interval: float = 3.0,
        max_attempts: Optional[int] = None,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        retry_backoff: float = 2.0,
    ):
        if interval <= 0:
            raise ValueError(f"Invalid poll interval: {interval}")
        self.api = api
        self.on_outcome = on_outcome
        self.interval = interval
        self.max_attempts = max_attempts
        self.max_retries = max(0, max_retries)
        self.retry_delay = retry_delay
        self.retry_backoff = retry_backoff

        self.state = PollerState.IDLE
        self.session_id: Optional[str] = None
        self.attempts = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, session_id: str) -> None:
        """Start polling ``session_id``, replacing any running poll."""
        if not session_id:
            raise ValueError("Payment session ID is required")

        self.stop()
        self.session_id = session_id
        self.attempts = 0
        self.state = PollerState.POLLING
        self._task = asyncio.create_task(
            self._run(session_id), name=f"payment-poll:{session_id}"
        )
        logger.info(f"Started polling payment session {session_id}")

    def stop(self) -> None:
        """Cancel the running poll, if any."""
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            self.state = PollerState.CANCELLED
            logger.info(f"Stopped polling payment session {self.session_id}")

    async def aclose(self) -> None:
        """Cancel the running poll and wait until it has unwound."""
        task = self._task
        self.stop()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _run(self, session_id: str) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval)
                self.attempts += 1

                try:
                    response = await self._fetch_status(session_id)
                except BookingApiError as e:
                    logger.error(
                        f"Payment status unavailable for session {session_id}: {e}",
                        exc_info=True,
                    )
                    await self._finish(
                        PollOutcome(status=ModalStatus.FAILED, error=str(e))
                    )
                    return

                logger.debug(
                    f"Polling for session {session_id}, current status: "
                    f"{response.status.value} (attempt {self.attempts})"
                )

                if response.status.is_terminal:
                    await self._finish(_outcome_from(response))
                    return

                if self.max_attempts is not None and self.attempts >= self.max_attempts:
                    logger.warning(
                        f"Payment session {session_id} still pending after "
                        f"{self.attempts} attempts, giving up"
                    )
                    await self._finish(
                        PollOutcome(status=ModalStatus.PENDING, response=response)
                    )
                    return
        except asyncio.CancelledError:
            logger.debug(f"Polling task for session {session_id} cancelled")
            raise

    async def _finish(self, outcome: PollOutcome) -> None:
        self.state = PollerState.FINISHED
        # Drop our own handle so is_active turns false even before the task returns
        if self._task is asyncio.current_task():
            self._task = None
        try:
            await self.on_outcome(outcome)
        except Exception as e:
            logger.error(
                f"Outcome handler failed for session {self.session_id}: {e}",
                exc_info=True,
            )

    async def _fetch_status(self, session_id: str) -> PaymentStatusResponse:
        """
        Fetch the payment status with bounded retry.

        Raises:
            BookingApiError: If every attempt failed
        """
        delay = self.retry_delay
        attempts = self.max_retries + 1

        for attempt in range(attempts):
            try:
                return await self.api.get_payment_status(session_id)
            except BookingApiError as e:
                if attempt < attempts - 1:
                    logger.warning(
                        f"Payment status error (attempt {attempt + 1}/{attempts}) "
                        f"for session {session_id}: {e}. Retrying in {delay}s..."
                    )
                    await asyncio.sleep(delay)
                    delay *= self.retry_backoff
                else:
                    raise

        # Unreachable: the last attempt either returns or raises
        raise BookingApiError(f"Payment status unavailable for session {session_id}")


def _outcome_from(response: PaymentStatusResponse) -> PollOutcome:
    status = {
        PaymentStatus.PAID: ModalStatus.PAID,
        PaymentStatus.FAILED: ModalStatus.FAILED,
        PaymentStatus.CANCELLED: ModalStatus.CANCELLED,
    }[response.status]
    return PollOutcome(
        status=status,
        confirmation_number=response.confirmation_number,
        response=response,
    )
