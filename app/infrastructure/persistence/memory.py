"""In-memory catalog of collaborator data.

Backs development and tests. A JSON seed file (``CATALOG_SEED_FILE``) with
the keys ``hotels``, ``departments``, ``users``, ``batches``, ``settings``
and ``collections`` can populate it at startup.
"""

import json
import threading
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from infrastructure.logging import get_module_logger
from infrastructure.persistence.models import (
    Batch,
    BatchStatus,
    Collection,
    Department,
    Hotel,
    Recipient,
    Setting,
)

logger = get_module_logger()


class InMemoryCatalog:
    """Thread-safe in-memory implementation of the Catalog protocol."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hotels: Dict[str, Hotel] = {}
        self._departments: Dict[str, Department] = {}
        self._users: Dict[str, Recipient] = {}
        self._batches: Dict[str, Batch] = {}
        self._settings: Dict[Tuple[str, Optional[str]], Any] = {}
        self._collections: List[Collection] = []

    @classmethod
    def from_seed_file(cls, path: str) -> "InMemoryCatalog":
        """Build a catalog from a JSON seed file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not valid JSON or a record is malformed
        """
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        catalog = cls()
        for item in payload.get("hotels", []):
            catalog.add_hotel(Hotel.model_validate(item))
        for item in payload.get("departments", []):
            catalog.add_department(Department.model_validate(item))
        for item in payload.get("users", []):
            catalog.add_user(Recipient.model_validate(item))
        for item in payload.get("batches", []):
            catalog.add_batch(Batch.model_validate(item))
        for item in payload.get("settings", []):
            setting = Setting.model_validate(item)
            catalog.set_setting(setting.key, setting.value, setting.hotel_id)
        for item in payload.get("collections", []):
            catalog.add_collection(Collection.model_validate(item))

        logger.info(
            "catalog_seeded",
            path=path,
            hotels=len(catalog._hotels),
            users=len(catalog._users),
            batches=len(catalog._batches),
        )
        return catalog

    # Seeding

    def add_hotel(self, hotel: Hotel) -> None:
        with self._lock:
            self._hotels[hotel.id] = hotel

    def add_department(self, department: Department) -> None:
        with self._lock:
            self._departments[department.id] = department

    def add_user(self, user: Recipient) -> None:
        with self._lock:
            self._users[user.id] = user

    def add_batch(self, batch: Batch) -> None:
        with self._lock:
            self._batches[batch.id] = batch

    def set_batch_status(self, batch_id: str, status: BatchStatus) -> None:
        with self._lock:
            batch = self._batches[batch_id]
            self._batches[batch_id] = batch.model_copy(update={"status": status})

    def set_setting(self, key: str, value: Any, hotel_id: Optional[str] = None) -> None:
        with self._lock:
            self._settings[(key, hotel_id)] = value

    def add_collection(self, collection: Collection) -> None:
        with self._lock:
            self._collections.append(collection)

    # HotelRepository

    def get_hotel(self, hotel_id: str) -> Optional[Hotel]:
        with self._lock:
            return self._hotels.get(hotel_id)

    def list_active_hotels(self) -> List[Hotel]:
        with self._lock:
            return [h for h in self._hotels.values() if h.is_active]

    def find_hotel(self, code_or_name: str) -> Optional[Hotel]:
        needle = code_or_name.strip().lower()
        with self._lock:
            hotels = [h for h in self._hotels.values() if h.is_active]
        for hotel in hotels:
            if hotel.code and hotel.code.lower() == needle:
                return hotel
        for hotel in hotels:
            if needle in hotel.name.lower():
                return hotel
        return None

    # DepartmentRepository

    def get_department(self, department_id: str) -> Optional[Department]:
        with self._lock:
            return self._departments.get(department_id)

    def list_departments(self, hotel_id: Optional[str] = None) -> List[Department]:
        with self._lock:
            return [
                d
                for d in self._departments.values()
                if d.is_active and (hotel_id is None or d.hotel_id == hotel_id)
            ]

    def find_department(self, hotel_id: str, code_or_name: str) -> Optional[Department]:
        needle = code_or_name.strip().lower()
        departments = self.list_departments(hotel_id)
        for department in departments:
            if department.code and department.code.lower() == needle:
                return department
        for department in departments:
            if needle in department.name.lower():
                return department
        return None

    # UserRepository

    def get_user(self, user_id: str) -> Optional[Recipient]:
        with self._lock:
            return self._users.get(user_id)

    def list_active_users(self, hotel_id: Optional[str] = None) -> List[Recipient]:
        with self._lock:
            return [
                u
                for u in self._users.values()
                if u.is_active and (hotel_id is None or u.hotel_id == hotel_id)
            ]

    # BatchRepository

    def get_batch(self, batch_id: str) -> Optional[Batch]:
        with self._lock:
            return self._batches.get(batch_id)

    def list_active_batches(
        self,
        hotel_id: Optional[str] = None,
        department_id: Optional[str] = None,
    ) -> List[Batch]:
        with self._lock:
            batches = [
                b
                for b in self._batches.values()
                if b.status == BatchStatus.ACTIVE
                and (hotel_id is None or b.hotel_id == hotel_id)
                and (department_id is None or b.department_id == department_id)
            ]
        return sorted(batches, key=lambda b: (b.expiry_date or date.max, b.id))

    # SettingsRepository

    def get_setting(self, key: str, hotel_id: Optional[str] = None) -> Optional[Any]:
        with self._lock:
            return self._settings.get((key, hotel_id))

    # CollectionRepository

    def count_collections(self, department_id: str, day: date) -> int:
        with self._lock:
            return sum(
                1
                for c in self._collections
                if c.department_id == department_id and c.collected_at.date() == day
            )
