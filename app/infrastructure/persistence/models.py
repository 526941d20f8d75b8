"""Collaborator entities read by the notification engine.

These mirror rows owned by the inventory system. The engine never writes
them.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from infrastructure.notifications.models import Role


class Hotel(BaseModel):
    id: str
    code: Optional[str] = None
    name: str
    timezone: Optional[str] = None
    is_active: bool = True


class Department(BaseModel):
    id: str
    hotel_id: str
    code: Optional[str] = None
    name: str
    email: Optional[str] = None
    is_active: bool = True


class Recipient(BaseModel):
    """A user who may receive notifications.

    Attributes:
        email_valid: False once the address bounced or failed verification
        email_blocked: True when the user opted out or was blocked by support
        telegram_chat_id: Private chat with the bot, if the user linked one
    """

    id: str
    name: str
    email: Optional[str] = None
    email_valid: bool = True
    email_blocked: bool = False
    telegram_chat_id: Optional[str] = None
    role: Role = Role.STAFF
    hotel_id: Optional[str] = None
    department_id: Optional[str] = None
    is_active: bool = True

    @property
    def has_deliverable_email(self) -> bool:
        return bool(self.email) and self.email_valid and not self.email_blocked


class BatchStatus(str, Enum):
    ACTIVE = "active"
    COLLECTED = "collected"
    WRITTEN_OFF = "written_off"
    EXPIRED = "expired"

    @property
    def is_resolved(self) -> bool:
        return self in (BatchStatus.COLLECTED, BatchStatus.WRITTEN_OFF)


class Batch(BaseModel):
    """A tracked quantity of one product with a single expiry date."""

    id: str
    hotel_id: str
    department_id: Optional[str] = None
    product_name: str
    unit: Optional[str] = None
    category_name: Optional[str] = None
    department_name: Optional[str] = None
    quantity: float = 0
    expiry_date: Optional[date] = None
    status: BatchStatus = BatchStatus.ACTIVE

    def days_left(self, today: date) -> Optional[int]:
        """Whole days until expiry; negative once expired."""
        if self.expiry_date is None:
            return None
        return (self.expiry_date - today).days


class Setting(BaseModel):
    """A configuration value. ``hotel_id`` None means system scope."""

    key: str
    value: Any
    hotel_id: Optional[str] = None


class Collection(BaseModel):
    department_id: str
    batch_id: Optional[str] = None
    collected_at: datetime
