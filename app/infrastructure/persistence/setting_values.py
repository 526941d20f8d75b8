"""Typed reads of stored configuration values.

Settings rows hold raw values or JSON-encoded strings (``"\\"09:00\\""``,
``"false"``). Values are decoded here, with hotel scope taking precedence
over system scope.
"""

import json
from typing import Any, Dict, Optional

from infrastructure.persistence.repositories import SettingsRepository

NOTIFY_CHANNEL_KEY = "notify.channels.{channel}"
NOTIFY_TEMPLATES_KEY = "notify.templates"

FALSY_STRINGS = {"false", "0", "no", "off", "disabled"}


def decode_value(raw: Any) -> Any:
    """Decode a JSON-encoded string; other values are returned as-is."""
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return raw
    return raw


def get_value(
    settings: SettingsRepository, key: str, hotel_id: Optional[str] = None
) -> Any:
    """Decoded value at hotel scope, falling back to system scope."""
    if hotel_id is not None:
        raw = settings.get_setting(key, hotel_id)
        if raw is not None:
            return decode_value(raw)
    raw = settings.get_setting(key, None)
    return decode_value(raw) if raw is not None else None


def is_channel_enabled(
    settings: SettingsRepository, channel: str, hotel_id: Optional[str] = None
) -> bool:
    """False only when ``notify.channels.<channel>`` is explicitly disabled."""
    value = get_value(settings, NOTIFY_CHANNEL_KEY.format(channel=channel), hotel_id)
    if value is None:
        return True
    if isinstance(value, dict):
        value = value.get("enabled", True)
    if isinstance(value, str):
        return value.strip().lower() not in FALSY_STRINGS
    return bool(value)


def get_templates(
    settings: SettingsRepository, hotel_id: Optional[str] = None
) -> Dict[str, str]:
    value = get_value(settings, NOTIFY_TEMPLATES_KEY, hotel_id)
    return value if isinstance(value, dict) else {}
