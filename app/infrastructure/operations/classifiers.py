"""Turn gateway failures into OperationResult.

The Telegram and Resend clients call classify_http_error() for exceptions
raised by requests and classify_http_response() for non-2xx replies; the
DynamoDB client calls classify_aws_error(). Delivery then only has to ask
``result.is_retryable``.
"""

from typing import Any, Dict, Optional, Tuple

import requests
from botocore.exceptions import ClientError

from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

DEFAULT_RETRY_AFTER = 60

# Kept as the error_code so stores can tell a lost conditional write apart
CONDITION_FAILED = "ConditionalCheckFailedException"

# AWS error code -> (status, our error_code, message)
_AWS_ERRORS: Dict[str, Tuple[OperationStatus, str, str]] = {
    "ThrottlingException": (
        OperationStatus.TRANSIENT_ERROR,
        "RATE_LIMITED",
        "AWS API throttled",
    ),
    "ProvisionedThroughputExceededException": (
        OperationStatus.TRANSIENT_ERROR,
        "RATE_LIMITED",
        "DynamoDB throughput exceeded",
    ),
    CONDITION_FAILED: (
        OperationStatus.PERMANENT_ERROR,
        CONDITION_FAILED,
        "DynamoDB condition not met",
    ),
    "AccessDeniedException": (
        OperationStatus.UNAUTHORIZED,
        "FORBIDDEN",
        "AWS API access denied",
    ),
    "ResourceNotFoundException": (
        OperationStatus.NOT_FOUND,
        "NOT_FOUND",
        "DynamoDB table not found",
    ),
    "ValidationException": (
        OperationStatus.PERMANENT_ERROR,
        "INVALID_REQUEST",
        "DynamoDB rejected the request",
    ),
}


def _json_body(response: requests.Response) -> Optional[Any]:
    try:
        return response.json()
    except ValueError:
        return None


def _retry_after(response: requests.Response, body: Optional[Any]) -> int:
    # Telegram sends {"parameters": {"retry_after": N}}, Resend a header
    header = response.headers.get("retry-after")
    if header and str(header).isdigit():
        return int(header)
    if isinstance(body, dict):
        parameters = body.get("parameters")
        if isinstance(parameters, dict) and parameters.get("retry_after"):
            return int(parameters["retry_after"])
    return DEFAULT_RETRY_AFTER


def _describe(response: requests.Response, body: Optional[Any]) -> str:
    if body is None:
        return response.text[:200]
    if isinstance(body, dict):
        return str(body.get("description") or body.get("message") or body)
    return str(body)


def classify_http_response(
    response: requests.Response, provider: str
) -> OperationResult:
    """Map a failed gateway reply onto a status.

    429 and 5xx are transient (429 carries ``retry_after``), 401/403 are
    UNAUTHORIZED, 404 NOT_FOUND, anything else in 4xx is permanent.
    """
    code = response.status_code
    body = _json_body(response)
    description = _describe(response, body)

    if code == 429:
        return OperationResult.error(
            OperationStatus.TRANSIENT_ERROR,
            f"{provider} rate limited: {description}",
            error_code="RATE_LIMITED",
            retry_after=_retry_after(response, body),
        )
    if code in (401, 403):
        return OperationResult.error(
            OperationStatus.UNAUTHORIZED,
            f"{provider} rejected credentials: {description}",
            error_code="UNAUTHORIZED",
        )
    if code == 404:
        return OperationResult.error(
            OperationStatus.NOT_FOUND,
            f"{provider} resource not found: {description}",
            error_code="NOT_FOUND",
        )
    if 500 <= code < 600:
        return OperationResult.transient_error(
            f"{provider} server error ({code}): {description}",
            error_code="SERVER_ERROR",
        )
    return OperationResult.permanent_error(
        f"{provider} client error ({code}): {description}",
        error_code="HTTP_ERROR",
    )


def classify_http_error(exc: Exception, provider: str) -> OperationResult:
    """Timeouts and connection failures are transient."""
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return classify_http_response(exc.response, provider)
    if isinstance(exc, requests.Timeout):
        return OperationResult.transient_error(
            f"{provider} request timed out: {exc}", error_code="TIMEOUT"
        )
    return OperationResult.transient_error(
        f"{provider} connection error: {type(exc).__name__}: {exc}",
        error_code="CONNECTION_ERROR",
    )


def classify_aws_error(exc: Exception) -> OperationResult:
    """Map a boto3/botocore exception onto a status.

    Codes not listed in the table are treated as transient.
    """
    if not isinstance(exc, ClientError):
        return OperationResult.transient_error(
            f"AWS connection error: {type(exc).__name__}: {exc}",
            error_code="CONNECTION_ERROR",
        )

    aws_code = exc.response.get("Error", {}).get("Code", "Unknown")
    known = _AWS_ERRORS.get(aws_code)
    if known is None:
        return OperationResult.transient_error(
            f"AWS client error: {aws_code}", error_code="AWS_CLIENT_ERROR"
        )

    status, error_code, message = known
    retry_after = DEFAULT_RETRY_AFTER if error_code == "RATE_LIMITED" else None
    return OperationResult.error(
        status, message, error_code=error_code, retry_after=retry_after
    )
