"""Conversation and message persistence."""

from synergi.config.schema import StorageConfig
from synergi.storage.base import ChatStore
from synergi.storage.memory import InMemoryChatStore
from synergi.storage.models import DEFAULT_TITLE, Conversation, ConversationSummary, Message, Page, Role
from synergi.storage.sqlite import SQLiteChatStore


def create_store(config: StorageConfig) -> ChatStore:
    if config.backend == "memory":
        return InMemoryChatStore()
    return SQLiteChatStore(config.path)


__all__ = [
    "DEFAULT_TITLE",
    "ChatStore",
    "Conversation",
    "ConversationSummary",
    "InMemoryChatStore",
    "Message",
    "Page",
    "Role",
    "SQLiteChatStore",
    "create_store",
]
