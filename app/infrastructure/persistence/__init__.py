"""Persistence layer for collaborator data and chat bindings.

The notification engine reads hotels, departments, users, batches, settings
and collections through small repository protocols. The in-memory catalog
backs development and tests; chat bindings have in-memory and DynamoDB
stores.
"""

from infrastructure.persistence.chat_bindings import (
    ChatBindingStore,
    DynamoDBChatBindingStore,
    InMemoryChatBindingStore,
    create_chat_binding_store,
)
from infrastructure.persistence.memory import InMemoryCatalog
from infrastructure.persistence.models import (
    Batch,
    BatchStatus,
    Collection,
    Department,
    Hotel,
    Recipient,
    Setting,
)
from infrastructure.persistence.repositories import Catalog
from infrastructure.persistence.rules import InMemoryRuleStore, RuleStore

__all__ = [
    "Batch",
    "BatchStatus",
    "Catalog",
    "ChatBindingStore",
    "Collection",
    "Department",
    "DynamoDBChatBindingStore",
    "Hotel",
    "InMemoryCatalog",
    "InMemoryChatBindingStore",
    "InMemoryRuleStore",
    "Recipient",
    "RuleStore",
    "Setting",
    "create_chat_binding_store",
]
