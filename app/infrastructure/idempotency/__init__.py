"""Deduplication fingerprints.

Notification records carry a fingerprint of (batch, recipient, channel, day).
The notification store refuses a second live record with the same fingerprint
inside the dedup window.

Usage:

    from infrastructure.idempotency import FingerprintBuilder

    fingerprint = FingerprintBuilder().build(batch_id, user_id, "app", today)
"""

from infrastructure.idempotency.key_builder import FingerprintBuilder

__all__ = ["FingerprintBuilder"]
