"""Deduplication fingerprint builder for consistent key generation."""

import hashlib
from datetime import date
from typing import Optional


class FingerprintBuilder:
    """Build deterministic deduplication fingerprints.

    A fingerprint identifies one alert condition for one recipient on one
    channel on one calendar day. The hash input is
    ``"{batch_id}:{recipient_id}:{channel}:{YYYY-MM-DD}"``.

    Example:
        >>> builder = FingerprintBuilder()
        >>> builder.build("batch-1", "user-7", "app", date(2024, 3, 1))
        '5f0c2c4d...'
    """

    def build(
        self,
        batch_id: Optional[str],
        recipient_id: Optional[str],
        channel: str,
        day: date,
    ) -> str:
        """Build the fingerprint for a (batch, recipient, channel, day).

        Args:
            batch_id: Batch the alert is about
            recipient_id: User receiving the alert
            channel: Channel value (app, chat, email)
            day: Calendar date the alert is created on

        Returns:
            md5 hex digest
        """
        key_string = f"{batch_id}:{recipient_id}:{channel}:{day.isoformat()}"
        return hashlib.md5(key_string.encode("utf-8")).hexdigest()
