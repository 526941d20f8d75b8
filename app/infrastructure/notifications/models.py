"""Notification engine core models.

Typed domain values for rules, notification records and chat bindings.
Storage data arrives loosely typed (JSON strings for channel and role lists,
the legacy ``telegram`` channel name); it is decoded once here, at the model
boundary, and rejected with a ValidationError when malformed.

Uses Pydantic BaseModel for:
- Runtime input validation of storage and API payloads
- Enum coercion with clear error messages
- Consistency with the admin API schemas
"""

import json
import uuid
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Annotated, Any, Dict, FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, BeforeValidator, Field, model_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Channel(str, Enum):
    """Delivery channel.

    The storage name ``telegram`` is accepted as an alias for ``chat``.
    """

    APP = "app"
    CHAT = "chat"
    EMAIL = "email"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Channel"]:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "telegram":
                return cls.CHAT
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class Role(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    HOTEL_ADMIN = "HOTEL_ADMIN"
    DEPARTMENT_MANAGER = "DEPARTMENT_MANAGER"
    STAFF = "STAFF"


HOTEL_WIDE_ROLES: FrozenSet[Role] = frozenset({Role.HOTEL_ADMIN, Role.SUPER_ADMIN})


def _decode_list(value: Any) -> Any:
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"expected a JSON array, got {value!r}") from e
    if value is None:
        return []
    if not isinstance(value, (list, tuple, set, frozenset)):
        raise ValueError(f"expected a list, got {type(value).__name__}")
    return value


def decode_channels(value: Any) -> Tuple[Channel, ...]:
    """Decode a channel list into an ordered, de-duplicated tuple.

    Args:
        value: list of channel names or a JSON-encoded array

    Returns:
        Tuple of Channel in first-seen order

    Raises:
        ValueError: If the value or one of its members is not a channel
    """
    channels: List[Channel] = []
    for item in _decode_list(value):
        channel = Channel(item)
        if channel not in channels:
            channels.append(channel)
    return tuple(channels)


def decode_roles(value: Any) -> FrozenSet[Role]:
    """Decode a role list (or JSON array) into a frozenset of Role."""
    return frozenset(Role(item) for item in _decode_list(value))


ChannelSet = Annotated[Tuple[Channel, ...], BeforeValidator(decode_channels)]
RoleSet = Annotated[FrozenSet[Role], BeforeValidator(decode_roles)]


class RuleType(str, Enum):
    EXPIRY = "expiry"
    LOW_STOCK = "low_stock"
    COLLECTION_REMINDER = "collection_reminder"
    CUSTOM = "custom"


class NotificationType(str, Enum):
    EXPIRY_WARNING = "expiry_warning"
    EXPIRY_CRITICAL = "expiry_critical"
    EXPIRED = "expired"
    LOW_STOCK = "low_stock"
    COLLECTION_REMINDER = "collection_reminder"
    SYSTEM_ALERT = "system_alert"


class Priority(IntEnum):
    """Ordinal priority. Higher values are delivered first."""

    LOW = 1
    NORMAL = 2
    HIGH = 3
    URGENT = 4


class DeliveryState(str, Enum):
    """Delivery state of a notification record.

    Allowed transitions:

        PENDING -> SENDING | FAILED
        SENDING -> DELIVERED | RETRY | FAILED
        RETRY   -> SENDING | FAILED

    DELIVERED and FAILED are terminal.
    """

    PENDING = "pending"
    SENDING = "sending"
    RETRY = "retry"
    DELIVERED = "delivered"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (DeliveryState.DELIVERED, DeliveryState.FAILED)

    def can_transition_to(self, target: "DeliveryState") -> bool:
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: Dict[DeliveryState, FrozenSet[DeliveryState]] = {
    DeliveryState.PENDING: frozenset({DeliveryState.SENDING, DeliveryState.FAILED}),
    DeliveryState.SENDING: frozenset(
        {DeliveryState.DELIVERED, DeliveryState.RETRY, DeliveryState.FAILED}
    ),
    DeliveryState.RETRY: frozenset({DeliveryState.SENDING, DeliveryState.FAILED}),
    DeliveryState.DELIVERED: frozenset(),
    DeliveryState.FAILED: frozenset(),
}


class NotificationRule(BaseModel):
    """Administrator-configured expiry policy.

    Scope is system-wide (no hotel), hotel-wide (hotel only) or a single
    department. The most specific enabled rule for a location wins.

    Attributes:
        warning_days: Batches expiring within this many days are reported
        critical_days: Batches expiring within this many days are critical
        channels: Channels a matching batch is announced on
        recipient_roles: Roles of the users who receive the notification
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    hotel_id: Optional[str] = None
    department_id: Optional[str] = None
    type: RuleType = RuleType.EXPIRY
    name: str = "Expiry rule"
    description: Optional[str] = None
    warning_days: int = Field(default=7, ge=0)
    critical_days: int = Field(default=3, ge=0)
    channels: ChannelSet = (Channel.APP,)
    recipient_roles: RoleSet = frozenset({Role.HOTEL_ADMIN, Role.DEPARTMENT_MANAGER})
    enabled: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def validate_thresholds(self) -> "NotificationRule":
        if self.critical_days > self.warning_days:
            raise ValueError("critical_days must not exceed warning_days")
        if self.department_id and not self.hotel_id:
            raise ValueError("a department rule requires hotel_id")
        return self

    @property
    def scope_key(self) -> Tuple[Optional[str], Optional[str], str]:
        return (self.hotel_id, self.department_id, self.type.value)

    @property
    def specificity(self) -> int:
        """0 for system rules, 1 for hotel rules, 2 for department rules."""
        if self.department_id:
            return 2
        if self.hotel_id:
            return 1
        return 0

    def applies_to(self, hotel_id: Optional[str], department_id: Optional[str]) -> bool:
        if self.hotel_id and self.hotel_id != hotel_id:
            return False
        if self.department_id and self.department_id != department_id:
            return False
        return True


class Notification(BaseModel):
    """One physical notification record.

    Created PENDING by the rule evaluator, then only transitioned by the
    delivery worker. Records are never deleted.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    hotel_id: Optional[str] = None
    user_id: Optional[str] = None
    batch_id: Optional[str] = None
    rule_id: Optional[str] = None
    type: NotificationType
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    channels: ChannelSet = (Channel.APP,)
    delivered_channels: ChannelSet = ()
    priority: Priority = Priority.NORMAL
    status: DeliveryState = DeliveryState.PENDING
    fingerprint: Optional[str] = None
    retry_count: int = 0
    next_retry_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    chat_id: Optional[str] = None
    provider_message_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    delivered_at: Optional[datetime] = None

    @property
    def pending_channels(self) -> Tuple[Channel, ...]:
        return tuple(c for c in self.channels if c not in self.delivered_channels)

    def is_due(self, now: datetime) -> bool:
        if self.status not in (DeliveryState.PENDING, DeliveryState.RETRY):
            return False
        return self.next_retry_at is None or self.next_retry_at <= now


class ChatBinding(BaseModel):
    """Link between a chat-bot conversation and a hotel or department."""

    chat_id: int
    chat_type: str = "group"
    chat_title: Optional[str] = None
    hotel_id: Optional[str] = None
    department_id: Optional[str] = None
    notification_types: List[str] = Field(
        default_factory=lambda: ["expiry", "low_stock"]
    )
    is_active: bool = True
    bot_removed: bool = False
    silent_mode: bool = False
    language: str = "ru"
    warning_days: int = 7
    critical_days: int = 3
    added_at: datetime = Field(default_factory=utcnow)
    last_message_at: Optional[datetime] = None

    @property
    def is_bound(self) -> bool:
        return self.hotel_id is not None

    def matches_location(self, hotel_id: Optional[str], department_id: Optional[str]) -> bool:
        """True if this active binding should receive pushes for the location."""
        if not self.is_active or self.bot_removed or not self.is_bound:
            return False
        if self.hotel_id != hotel_id:
            return False
        return self.department_id is None or self.department_id == department_id
