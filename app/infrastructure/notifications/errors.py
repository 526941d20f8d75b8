"""Notification engine exception taxonomy.

Gateways report failures as OperationResult; channels and the engine turn
them into these exceptions, which drive the delivery state machine.
"""

from typing import Optional


class NotificationEngineError(Exception):
    """Base class for notification engine errors."""


class ValidationError(NotificationEngineError):
    """Malformed send time, timezone or rule input."""


class NoChannelAddress(NotificationEngineError):
    """Recipient has no usable address for the channel.

    Fails the dispatch attempt and counts towards the retry limit.
    """

    def __init__(self, channel: str, message: str):
        self.channel = channel
        super().__init__(message)


class AlreadyResolved(NotificationEngineError):
    """The batch was collected or written off before delivery."""


class TransientDeliveryError(NotificationEngineError):
    """Network or provider failure; the attempt should be retried."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ):
        self.error_code = error_code
        self.retry_after = retry_after
        super().__init__(message)


class ConfigurationError(NotificationEngineError):
    """A channel is disabled or its gateway is not configured."""


class InvalidTransition(NotificationEngineError):
    """A delivery state change not allowed by the state machine."""

    def __init__(self, notification_id: str, current: str, target: str):
        self.notification_id = notification_id
        self.current = current
        self.target = target
        super().__init__(
            f"notification {notification_id}: cannot move from {current} to {target}"
        )
