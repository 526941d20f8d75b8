"""Result type returned by gateway clients and the DynamoDB wrapper.

Provider exceptions never leave ``integrations``: every call returns an
OperationResult and the channel or store decides what a failure means for
the notification record.
"""

from dataclasses import dataclass
from typing import Any, Optional

from infrastructure.operations.status import OperationStatus


@dataclass(frozen=True)
class OperationResult:
    """Outcome of one provider call.

    Attributes:
        status: Outcome category
        message: Text for logs and ``failure_reason``
        data: Provider payload (Bot API ``result``, Resend body, DynamoDB items)
        error_code: Provider or classifier code (``RATE_LIMITED``, ``TIMEOUT``)
        retry_after: Seconds the provider asked us to wait
    """

    status: OperationStatus
    message: str = ""
    data: Optional[Any] = None
    error_code: Optional[str] = None
    retry_after: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.status is OperationStatus.SUCCESS

    @property
    def is_transient(self) -> bool:
        return self.status.is_retryable

    def get(self, key: str, default: Any = None) -> Any:
        """Read a field of a dict payload; ``default`` for any other payload."""
        if isinstance(self.data, dict):
            return self.data.get(key, default)
        return default

    def describe(self) -> str:
        """``message`` with the error code appended, for failure reasons."""
        if self.error_code and self.error_code not in self.message:
            return f"{self.message} [{self.error_code}]"
        return self.message

    @classmethod
    def success(cls, data: Optional[Any] = None, message: str = "ok") -> "OperationResult":
        return cls(OperationStatus.SUCCESS, message, data=data)

    @classmethod
    def error(
        cls,
        status: OperationStatus,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
        data: Optional[Any] = None,
    ) -> "OperationResult":
        return cls(
            status,
            message,
            data=data,
            error_code=error_code,
            retry_after=retry_after,
        )

    @classmethod
    def transient_error(
        cls,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> "OperationResult":
        """Timeouts, connection failures, throttling and provider 5xx."""
        return cls.error(OperationStatus.TRANSIENT_ERROR, message, error_code, retry_after)

    @classmethod
    def permanent_error(
        cls, message: str, error_code: Optional[str] = None
    ) -> "OperationResult":
        """Rejected payloads, ``ok=false`` answers and failed conditions."""
        return cls.error(OperationStatus.PERMANENT_ERROR, message, error_code)
