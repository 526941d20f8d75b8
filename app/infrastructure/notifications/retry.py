"""Retry policy for notification delivery."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence, Tuple

from infrastructure.notifications.models import DeliveryState


@dataclass(frozen=True)
class RetryDecision:
    """Outcome of a failed dispatch attempt.

    Attributes:
        status: RETRY or FAILED
        retry_count: Failed attempts so far, including this one
        next_retry_at: When the record becomes due again (RETRY only)
        failure_reason: Stored on the record
    """

    status: DeliveryState
    retry_count: int
    next_retry_at: Optional[datetime]
    failure_reason: str


@dataclass(frozen=True)
class RetryPolicy:
    """Literal backoff sequence with a retry limit.

    After the n-th failed attempt the record is retried after ``delays[n-1]``
    hours while n <= max_retries, otherwise it fails for good:

        attempt 1 fails -> RETRY in 2h
        attempt 2 fails -> RETRY in 4h
        attempt 3 fails -> RETRY in 8h
        attempt 4 fails -> FAILED ("max retries exceeded: <cause>")
    """

    delays_hours: Tuple[int, ...] = (2, 4, 8)
    max_retries: int = 3

    def __post_init__(self) -> None:
        # Any sequence is accepted; a tuple is stored
        delays: Sequence[int] = self.delays_hours
        if not delays:
            raise ValueError("delays_hours must not be empty")
        object.__setattr__(self, "delays_hours", tuple(delays))

    def delay_for(self, failures: int) -> timedelta:
        """Delay after the given number of failed attempts (1-based)."""
        index = min(max(failures, 1), len(self.delays_hours)) - 1
        return timedelta(hours=self.delays_hours[index])

    def on_failure(
        self, previous_failures: int, cause: str, now: datetime
    ) -> RetryDecision:
        failures = previous_failures + 1
        if failures <= self.max_retries:
            return RetryDecision(
                status=DeliveryState.RETRY,
                retry_count=failures,
                next_retry_at=now + self.delay_for(failures),
                failure_reason=cause,
            )
        return RetryDecision(
            status=DeliveryState.FAILED,
            retry_count=failures,
            next_retry_at=None,
            failure_reason=f"max retries exceeded: {cause}",
        )
