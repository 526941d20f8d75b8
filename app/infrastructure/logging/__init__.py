"""structlog setup shared by the API, the scheduler and the Telegram poller.

configure_logging() runs once from the lifespan; modules take a logger with
get_module_logger(). Scheduled jobs and webhook updates wrap their work in
bind_request_context() so every line they emit carries one correlation id.
"""

from infrastructure.logging.context import (
    bind_request_context,
    get_correlation_id,
)
from infrastructure.logging.formatters import (
    SENSITIVE_PATTERNS,
    add_app_info,
    mask_sensitive_data,
    scrub_text,
    truncate_large_values,
)
from infrastructure.logging.setup import (
    configure_logging,
    get_module_logger,
)

__all__ = [
    "configure_logging",
    "get_module_logger",
    "bind_request_context",
    "get_correlation_id",
    "add_app_info",
    "mask_sensitive_data",
    "scrub_text",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
