"""Chat store interface."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from synergi.errors import InvalidRequestError
from synergi.storage.models import Conversation, ConversationSummary, Message, Page, Role

MAX_PAGE_SIZE = 100


def check_page(page: int, limit: int) -> None:
    if page < 1:
        raise InvalidRequestError("page must be >= 1")
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidRequestError(f"limit must be between 1 and {MAX_PAGE_SIZE}")


class ChatStore(ABC):
    """
    Conversations and their messages.

    Ownership is enforced here: any lookup by (conversation_id, user_id)
    for a missing or foreign conversation raises ConversationNotFoundError.
    """

    @abstractmethod
    async def create_conversation(self, user_id: str, title: Optional[str] = None) -> Conversation:
        pass

    @abstractmethod
    async def get_conversation(self, conversation_id: str, user_id: str) -> Conversation:
        pass

    @abstractmethod
    async def update_conversation(self, conversation_id: str, title: Optional[str] = None) -> Conversation:
        """Refresh updated_at and, if given, set the title, in one write."""
        pass

    @abstractmethod
    async def create_message(
        self,
        conversation_id: str,
        user_id: str,
        role: Role,
        content: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Message:
        pass

    @abstractmethod
    async def list_conversations(
        self, user_id: str, page: int = 1, limit: int = 20
    ) -> Page[ConversationSummary]:
        """Owner's conversations, most recently updated first."""
        pass

    @abstractmethod
    async def list_messages(
        self, conversation_id: str, user_id: str, page: int = 1, limit: int = 50
    ) -> Page[Message]:
        """
        One page of messages. Page 1 holds the newest messages; items
        within a page are in chronological order.
        """
        pass

    @abstractmethod
    async def history(self, conversation_id: str) -> list[dict[str, str]]:
        """All messages of a conversation as chronological role/content dicts."""
        pass

    @abstractmethod
    async def delete_conversation(self, conversation_id: str, user_id: str) -> None:
        """Delete a conversation and all of its messages."""
        pass

    async def close(self) -> None:
        pass
