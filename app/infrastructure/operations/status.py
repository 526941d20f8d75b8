"""Outcome categories of gateway and storage calls."""

from enum import Enum


class OperationStatus(Enum):
    """How a Telegram, Resend or DynamoDB call ended.

    Only TRANSIENT_ERROR is worth repeating unchanged. The other failures
    need an operator or a data fix (bad token, unknown chat, rejected
    payload) but the delivery worker still routes them through the retry
    policy, so a fixed configuration is picked up by the next attempt.
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"

    @property
    def is_failure(self) -> bool:
        return self is not OperationStatus.SUCCESS

    @property
    def is_retryable(self) -> bool:
        return self is OperationStatus.TRANSIENT_ERROR
