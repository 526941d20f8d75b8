"""Send time and timezone resolution for the daily trigger.

Send time: ``notify.telegram.sendTime`` then ``notify.sendTime``, hotel
scope before system scope. Timezone: hotel then system
``locale.timezone``/``display.timezone``, then the host timezone, then a
fallback.
"""

import os
import re
from pathlib import Path
from typing import Mapping, Optional

import pytz

from infrastructure.logging import get_module_logger
from infrastructure.notifications.errors import ValidationError
from infrastructure.persistence.repositories import SettingsRepository
from infrastructure.persistence.setting_values import decode_value

logger = get_module_logger()

SEND_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
SEND_TIME_KEYS = ("notify.telegram.sendTime", "notify.sendTime")
TIMEZONE_KEYS = ("locale.timezone", "display.timezone")
DEFAULT_SEND_TIME = "09:00"
FALLBACK_TIMEZONE = "Asia/Almaty"
TIMEZONE_FILE = "/etc/timezone"


def is_valid_send_time(value: object) -> bool:
    return isinstance(value, str) and bool(SEND_TIME_PATTERN.match(value))


def is_valid_timezone(value: object) -> bool:
    if not isinstance(value, str) or not value:
        return False
    try:
        pytz.timezone(value)
    except pytz.UnknownTimeZoneError:
        return False
    return True


def validate_send_time(value: str) -> str:
    if not is_valid_send_time(value):
        raise ValidationError(f"Invalid time format: {value}. Expected HH:MM")
    return value


def validate_timezone(value: str) -> str:
    if not is_valid_timezone(value):
        raise ValidationError(f"Unknown timezone: {value}")
    return value


def _scopes(hotel_id: Optional[str]):
    return (hotel_id, None) if hotel_id is not None else (None,)


def resolve_send_time(
    settings: SettingsRepository,
    hotel_id: Optional[str] = None,
    default: str = DEFAULT_SEND_TIME,
) -> str:
    """First valid configured send time, or the default.

    Invalid stored values are skipped with a warning.
    """
    for scope in _scopes(hotel_id):
        for key in SEND_TIME_KEYS:
            raw = settings.get_setting(key, scope)
            if raw is None:
                continue
            value = decode_value(raw)
            if is_valid_send_time(value):
                logger.debug("send_time_resolved", key=key, hotel_id=scope, value=value)
                return value
            logger.warning(
                "send_time_invalid", key=key, hotel_id=scope, value=str(raw)
            )
    return default


def host_timezone(
    environ: Optional[Mapping[str, str]] = None,
    timezone_file: str = TIMEZONE_FILE,
) -> Optional[str]:
    """Timezone of the host from ``TZ`` or ``/etc/timezone``."""
    environ = os.environ if environ is None else environ
    candidate = environ.get("TZ", "").lstrip(":").strip()
    if is_valid_timezone(candidate):
        return candidate

    path = Path(timezone_file)
    if path.is_file():
        candidate = path.read_text(encoding="utf-8").strip()
        if is_valid_timezone(candidate):
            return candidate
    return None


def resolve_timezone(
    settings: SettingsRepository,
    hotel_id: Optional[str] = None,
    fallback: str = FALLBACK_TIMEZONE,
    environ: Optional[Mapping[str, str]] = None,
    timezone_file: str = TIMEZONE_FILE,
) -> str:
    for scope in _scopes(hotel_id):
        for key in TIMEZONE_KEYS:
            raw = settings.get_setting(key, scope)
            if raw is None:
                continue
            value = decode_value(raw)
            if is_valid_timezone(value):
                return value
            logger.warning("timezone_invalid", key=key, hotel_id=scope, value=str(raw))

    host = host_timezone(environ, timezone_file)
    if host:
        return host

    logger.warning("timezone_fallback", timezone=fallback)
    return fallback
