"""Unit tests for the delivery retry policy."""

from datetime import timedelta

import dataclasses

import pytest

from infrastructure.notifications.models import DeliveryState
from infrastructure.notifications.retry import RetryPolicy


@pytest.mark.unit
class TestRetryPolicy:
    """Backoff is the literal sequence 2h, 4h, 8h, then FAILED."""

    @pytest.mark.parametrize(
        "previous_failures,expected_hours",
        [(0, 2), (1, 4), (2, 8)],
    )
    def test_retry_delays(self, clock, previous_failures, expected_hours):
        decision = RetryPolicy().on_failure(previous_failures, "timeout", clock())

        assert decision.status == DeliveryState.RETRY
        assert decision.retry_count == previous_failures + 1
        assert decision.next_retry_at == clock() + timedelta(hours=expected_hours)
        assert decision.failure_reason == "timeout"

    def test_fourth_failure_is_terminal(self, clock):
        decision = RetryPolicy().on_failure(3, "gateway down", clock())

        assert decision.status == DeliveryState.FAILED
        assert decision.retry_count == 4
        assert decision.next_retry_at is None
        assert decision.failure_reason == "max retries exceeded: gateway down"

    def test_custom_limits(self, clock):
        policy = RetryPolicy(delays_hours=[1], max_retries=1)

        first = policy.on_failure(0, "x", clock())
        second = policy.on_failure(1, "x", clock())

        assert first.next_retry_at == clock() + timedelta(hours=1)
        assert second.status == DeliveryState.FAILED

    def test_delay_for_clamps_to_last_delay(self):
        policy = RetryPolicy(delays_hours=[2, 4], max_retries=5)
        assert policy.delay_for(5) == timedelta(hours=4)
        assert policy.delay_for(0) == timedelta(hours=2)

    def test_policy_is_immutable(self):
        policy = RetryPolicy(delays_hours=[1, 2], max_retries=2)

        assert policy.delays_hours == (1, 2)
        assert hash(policy) == hash(RetryPolicy(delays_hours=(1, 2), max_retries=2))
        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.max_retries = 5

    def test_empty_delays_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(delays_hours=())
