"""Chat binding storage.

A chat binding links a chat-bot conversation to a hotel (and optionally a
department). Bindings are created when the bot joins a chat and updated by
the ``/link`` and ``/unlink`` commands.
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional, Protocol

from infrastructure.configuration import Settings
from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import ChatBinding
from integrations.aws.dynamodb import DynamoDBClient

logger = get_module_logger()


class ChatBindingStore(Protocol):
    def get(self, chat_id: int) -> Optional[ChatBinding]: ...

    def upsert(self, binding: ChatBinding) -> ChatBinding: ...

    def list_all(self) -> List[ChatBinding]: ...

    def touch(self, chat_id: int, at: datetime) -> None:
        """Record the time of the last message pushed to the chat."""
        ...


def list_active_bound(store: ChatBindingStore) -> List[ChatBinding]:
    """Bindings that are active, not removed and linked to a hotel."""
    return [
        b
        for b in store.list_all()
        if b.is_active and not b.bot_removed and b.is_bound
    ]


class InMemoryChatBindingStore:
    """Thread-safe in-memory chat binding store."""

    def __init__(self) -> None:
        self._bindings: Dict[int, ChatBinding] = {}
        self._lock = threading.Lock()

    def get(self, chat_id: int) -> Optional[ChatBinding]:
        with self._lock:
            binding = self._bindings.get(chat_id)
            return binding.model_copy() if binding else None

    def upsert(self, binding: ChatBinding) -> ChatBinding:
        with self._lock:
            self._bindings[binding.chat_id] = binding.model_copy()
        logger.info(
            "chat_binding_saved",
            chat_id=binding.chat_id,
            hotel_id=binding.hotel_id,
            department_id=binding.department_id,
            is_active=binding.is_active,
        )
        return binding

    def list_all(self) -> List[ChatBinding]:
        with self._lock:
            return [b.model_copy() for b in self._bindings.values()]

    def touch(self, chat_id: int, at: datetime) -> None:
        with self._lock:
            binding = self._bindings.get(chat_id)
            if binding:
                self._bindings[chat_id] = binding.model_copy(
                    update={"last_message_at": at}
                )


class ChatBindingStoreError(RuntimeError):
    """Raised when DynamoDB rejects a chat binding operation."""


class DynamoDBChatBindingStore:
    """DynamoDB-backed chat binding store.

    Table Schema:
        PK: pk (String) ``chat#<chat_id>``
        Attributes: body (model JSON), is_active, hotel_id
    """

    def __init__(self, client: DynamoDBClient, table_name: str):
        self.client = client
        self.table_name = table_name

    @staticmethod
    def _key(chat_id: int) -> dict:
        return {"pk": {"S": f"chat#{chat_id}"}}

    def get(self, chat_id: int) -> Optional[ChatBinding]:
        result = self.client.get_item(
            table_name=self.table_name, Key=self._key(chat_id), ConsistentRead=True
        )
        if not result.is_success:
            raise ChatBindingStoreError(f"Failed to load chat binding: {result.message}")
        item = (result.data or {}).get("Item")
        return ChatBinding.model_validate_json(item["body"]["S"]) if item else None

    def upsert(self, binding: ChatBinding) -> ChatBinding:
        item = {
            **self._key(binding.chat_id),
            "body": {"S": binding.model_dump_json()},
            "is_active": {"BOOL": binding.is_active},
        }
        if binding.hotel_id:
            item["hotel_id"] = {"S": binding.hotel_id}

        result = self.client.put_item(table_name=self.table_name, Item=item)
        if not result.is_success:
            raise ChatBindingStoreError(f"Failed to save chat binding: {result.message}")

        logger.info(
            "chat_binding_saved",
            chat_id=binding.chat_id,
            hotel_id=binding.hotel_id,
            department_id=binding.department_id,
            is_active=binding.is_active,
        )
        return binding

    def list_all(self) -> List[ChatBinding]:
        result = self.client.scan(table_name=self.table_name)
        if not result.is_success:
            raise ChatBindingStoreError(f"Failed to list chat bindings: {result.message}")
        return [
            ChatBinding.model_validate_json(item["body"]["S"])
            for item in result.data or []
        ]

    def touch(self, chat_id: int, at: datetime) -> None:
        binding = self.get(chat_id)
        if binding:
            self.upsert(binding.model_copy(update={"last_message_at": at}))


def create_chat_binding_store(
    settings: Settings, backend: str | None = None
) -> ChatBindingStore:
    """Factory to create the configured chat binding store.

    Raises:
        ValueError: If unknown backend specified
    """
    backend = backend or settings.notifications.chat_bindings_backend

    if backend == "memory":
        logger.info("creating_in_memory_chat_binding_store")
        return InMemoryChatBindingStore()

    elif backend == "dynamodb":
        logger.info(
            "creating_dynamodb_chat_binding_store",
            table_name=settings.notifications.chat_bindings_table_name,
        )
        return DynamoDBChatBindingStore(
            client=DynamoDBClient.from_settings(settings.aws),
            table_name=settings.notifications.chat_bindings_table_name,
        )

    else:
        raise ValueError(
            f"Unknown chat bindings backend: {backend}. Supported: memory, dynamodb"
        )
