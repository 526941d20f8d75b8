"""Uniform results for Telegram, Resend and DynamoDB calls."""

from infrastructure.operations.classifiers import (
    CONDITION_FAILED,
    classify_aws_error,
    classify_http_error,
    classify_http_response,
)
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    "CONDITION_FAILED",
    "OperationResult",
    "OperationStatus",
    "classify_aws_error",
    "classify_http_error",
    "classify_http_response",
]
