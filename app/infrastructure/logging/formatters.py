"""structlog processors used by configure_logging().

Secrets reach log events two ways: as keyword values (``token=...``) and
embedded in text. The Bot API puts the token in every request path, so a
``requests`` error message or traceback contains ``/bot<token>/``. Both
forms are masked.
"""

import re
from typing import Any, Callable, Iterable

EventDict = dict[str, Any]
Processor = Callable[[Any, str, EventDict], EventDict]

# Substrings of keyword names whose values are always masked
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "credential",
    }
)

BOT_TOKEN_IN_TEXT = re.compile(r"bot\d{5,}:[A-Za-z0-9_-]{20,}")
BEARER_IN_TEXT = re.compile(r"Bearer\s+[A-Za-z0-9._-]+")


def add_app_info(app_name: str, app_version: str = "unknown") -> Processor:
    """Stamp every event with the service name and deployed git SHA."""

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app_name", app_name)
        event_dict.setdefault("app_version", app_version)
        return event_dict

    return processor


def scrub_text(value: str, mask_value: str = "***") -> str:
    """Replace bot tokens and bearer credentials embedded in free text."""
    value = BOT_TOKEN_IN_TEXT.sub(f"bot{mask_value}", value)
    return BEARER_IN_TEXT.sub(f"Bearer {mask_value}", value)


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
) -> Processor:
    """Mask secret keyword values and scrub secrets out of string values.

    Args:
        mask_value: Replacement for the value of a sensitive key
        additional_patterns: Extra key substrings treated as sensitive
    """
    patterns = SENSITIVE_PATTERNS | (additional_patterns or frozenset())

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        masked: EventDict = {}
        for key, value in event_dict.items():
            if value is not None and any(p in key.lower() for p in patterns):
                masked[key] = mask_value
            elif isinstance(value, str):
                masked[key] = scrub_text(value)
            else:
                masked[key] = value
        return masked

    return processor


def truncate_large_values(
    max_length: int = 500, exempt: Iterable[str] = ("exception",)
) -> Processor:
    """Bound string values; rendered report and email bodies can be long.

    Formatted tracebacks under ``exempt`` keys are kept whole.
    """
    exempt_keys = frozenset(exempt)

    def processor(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in event_dict.items():
            if key in exempt_keys or not isinstance(value, str):
                continue
            if len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
