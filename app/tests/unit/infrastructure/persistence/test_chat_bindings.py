"""Unit tests for chat binding stores."""

from unittest.mock import MagicMock

import pytest

from infrastructure.configuration import Settings
from infrastructure.operations import OperationResult
from infrastructure.persistence.chat_bindings import (
    ChatBindingStoreError,
    DynamoDBChatBindingStore,
    InMemoryChatBindingStore,
    create_chat_binding_store,
    list_active_bound,
)
from integrations.aws.dynamodb import DynamoDBClient


@pytest.mark.unit
class TestInMemoryChatBindingStore:
    def test_upsert_and_get(self, chat_binding_store, chat_binding_factory):
        binding = chat_binding_factory()

        chat_binding_store.upsert(binding)

        assert chat_binding_store.get(binding.chat_id) == binding
        assert chat_binding_store.get(12345) is None

    def test_upsert_replaces(self, chat_binding_store, chat_binding_factory):
        chat_binding_store.upsert(chat_binding_factory())
        chat_binding_store.upsert(chat_binding_factory(department_id="dept-1"))

        assert len(chat_binding_store.list_all()) == 1
        assert chat_binding_store.get(-100500).department_id == "dept-1"

    def test_touch_sets_last_message(self, chat_binding_store, chat_binding_factory, clock):
        chat_binding_store.upsert(chat_binding_factory())

        chat_binding_store.touch(-100500, clock())

        assert chat_binding_store.get(-100500).last_message_at == clock()

    def test_touch_unknown_chat_is_ignored(self, chat_binding_store, clock):
        chat_binding_store.touch(1, clock())
        assert chat_binding_store.list_all() == []


@pytest.mark.unit
def test_list_active_bound(chat_binding_store, chat_binding_factory):
    chat_binding_store.upsert(chat_binding_factory(chat_id=1))
    chat_binding_store.upsert(chat_binding_factory(chat_id=2, hotel_id=None))
    chat_binding_store.upsert(chat_binding_factory(chat_id=3, is_active=False))
    chat_binding_store.upsert(chat_binding_factory(chat_id=4, bot_removed=True))

    assert [b.chat_id for b in list_active_bound(chat_binding_store)] == [1]


@pytest.mark.unit
class TestDynamoDBChatBindingStore:
    @pytest.fixture
    def client(self):
        client = MagicMock(spec=DynamoDBClient)
        client.put_item.return_value = OperationResult.success(data={})
        return client

    def test_upsert_writes_body(self, client, chat_binding_factory):
        store = DynamoDBChatBindingStore(client, "chats")
        binding = chat_binding_factory()

        store.upsert(binding)

        item = client.put_item.call_args.kwargs["Item"]
        assert item["pk"] == {"S": "chat#-100500"}
        assert item["hotel_id"] == {"S": "hotel-1"}
        assert item["is_active"] == {"BOOL": True}

    def test_get_reads_body(self, client, chat_binding_factory):
        binding = chat_binding_factory()
        client.get_item.return_value = OperationResult.success(
            data={"Item": {"body": {"S": binding.model_dump_json()}}}
        )

        assert DynamoDBChatBindingStore(client, "chats").get(-100500) == binding

    def test_list_all(self, client, chat_binding_factory):
        binding = chat_binding_factory()
        client.scan.return_value = OperationResult.success(
            data=[{"body": {"S": binding.model_dump_json()}}]
        )

        assert DynamoDBChatBindingStore(client, "chats").list_all() == [binding]

    def test_errors_raise(self, client, chat_binding_factory):
        client.put_item.return_value = OperationResult.transient_error("down")

        with pytest.raises(ChatBindingStoreError):
            DynamoDBChatBindingStore(client, "chats").upsert(chat_binding_factory())


@pytest.mark.unit
class TestCreateChatBindingStore:
    def test_memory_backend(self):
        assert isinstance(
            create_chat_binding_store(Settings(), backend="memory"),
            InMemoryChatBindingStore,
        )

    def test_dynamodb_backend(self):
        store = create_chat_binding_store(Settings(), backend="dynamodb")
        assert isinstance(store, DynamoDBChatBindingStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_chat_binding_store(Settings(), backend="redis")
