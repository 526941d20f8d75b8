"""Read-only data access protocols for collaborator entities."""

from datetime import date
from typing import Any, List, Optional, Protocol

from infrastructure.persistence.models import Batch, Department, Hotel, Recipient


class HotelRepository(Protocol):
    def get_hotel(self, hotel_id: str) -> Optional[Hotel]: ...

    def list_active_hotels(self) -> List[Hotel]: ...

    def find_hotel(self, code_or_name: str) -> Optional[Hotel]:
        """Match by code (case-insensitive) or by a name substring."""
        ...


class DepartmentRepository(Protocol):
    def get_department(self, department_id: str) -> Optional[Department]: ...

    def list_departments(self, hotel_id: Optional[str] = None) -> List[Department]:
        """Active departments, optionally for one hotel."""
        ...

    def find_department(self, hotel_id: str, code_or_name: str) -> Optional[Department]: ...


class UserRepository(Protocol):
    def get_user(self, user_id: str) -> Optional[Recipient]: ...

    def list_active_users(self, hotel_id: Optional[str] = None) -> List[Recipient]: ...


class BatchRepository(Protocol):
    def get_batch(self, batch_id: str) -> Optional[Batch]: ...

    def list_active_batches(
        self,
        hotel_id: Optional[str] = None,
        department_id: Optional[str] = None,
    ) -> List[Batch]:
        """Active batches, optionally scoped to a hotel and department."""
        ...


class SettingsRepository(Protocol):
    def get_setting(self, key: str, hotel_id: Optional[str] = None) -> Optional[Any]:
        """Raw stored value at exactly this scope (None hotel = system)."""
        ...


class CollectionRepository(Protocol):
    def count_collections(self, department_id: str, day: date) -> int: ...


class Catalog(
    HotelRepository,
    DepartmentRepository,
    UserRepository,
    BatchRepository,
    SettingsRepository,
    CollectionRepository,
    Protocol,
):
    """Every collaborator read the engine performs."""
