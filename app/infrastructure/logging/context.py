"""Correlation ids for admin requests, Telegram updates and scheduler jobs."""

import uuid
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog


@contextmanager
def bind_request_context(
    correlation_id: Optional[str] = None,
    request_path: Optional[str] = None,
    request_method: Optional[str] = None,
    **extra_context: Any,
) -> Iterator[str]:
    """Bind a correlation id, plus any extra fields, for the enclosed block.

    A nested block shadows the outer values and restores them on exit.

    Example:
        with bind_request_context(job="daily_cycle") as correlation_id:
            logger.info("job_started")

    Yields:
        The correlation id in effect, generated when none was given.
    """
    fields: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}
    if request_path is not None:
        fields["request_path"] = request_path
    if request_method is not None:
        fields["request_method"] = request_method
    fields.update(extra_context)

    with structlog.contextvars.bound_contextvars(**fields):
        yield fields["correlation_id"]


def get_correlation_id() -> Optional[str]:
    return structlog.contextvars.get_contextvars().get("correlation_id")
