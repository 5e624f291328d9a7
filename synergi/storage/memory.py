"""In-process chat store, used for tests and `storage.backend = "memory"`."""

import itertools
import uuid
from datetime import datetime
from typing import Any, Callable, Optional

from synergi.errors import ConversationNotFoundError
from synergi.storage.base import ChatStore, check_page
from synergi.storage.models import Conversation, ConversationSummary, Message, Page, Role, utcnow


class InMemoryChatStore(ChatStore):
    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock
        self._conversations: dict[str, Conversation] = {}
        # conversation id -> messages in insertion order
        self._messages: dict[str, list[Message]] = {}
        # tie-break for equal timestamps
        self._seq = itertools.count()
        self._touched: dict[str, int] = {}

    def _owned(self, conversation_id: str, user_id: str) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None or conversation.user_id != user_id:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def create_conversation(self, user_id: str, title: Optional[str] = None) -> Conversation:
        now = self._clock()
        conversation = Conversation(
            id=uuid.uuid4().hex,
            user_id=user_id,
            title=title,
            created_at=now,
            updated_at=now,
        )
        self._conversations[conversation.id] = conversation
        self._messages[conversation.id] = []
        self._touched[conversation.id] = next(self._seq)
        return conversation

    async def get_conversation(self, conversation_id: str, user_id: str) -> Conversation:
        return self._owned(conversation_id, user_id)

    async def update_conversation(self, conversation_id: str, title: Optional[str] = None) -> Conversation:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        if title is not None:
            conversation.title = title
        conversation.updated_at = self._clock()
        self._touched[conversation_id] = next(self._seq)
        return conversation

    async def create_message(
        self,
        conversation_id: str,
        user_id: str,
        role: Role,
        content: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> Message:
        if conversation_id not in self._conversations:
            raise ConversationNotFoundError(conversation_id)
        message = Message(
            id=uuid.uuid4().hex,
            conversation_id=conversation_id,
            user_id=user_id,
            role=role,
            content=content,
            created_at=self._clock(),
            metadata=metadata,
        )
        self._messages[conversation_id].append(message)
        return message

    async def list_conversations(
        self, user_id: str, page: int = 1, limit: int = 20
    ) -> Page[ConversationSummary]:
        check_page(page, limit)
        owned = [c for c in self._conversations.values() if c.user_id == user_id]
        owned.sort(key=lambda c: (c.updated_at, self._touched[c.id]), reverse=True)
        start = (page - 1) * limit
        items = [
            ConversationSummary(
                conversation=c,
                message_count=len(self._messages[c.id]),
                last_message=self._messages[c.id][-1] if self._messages[c.id] else None,
            )
            for c in owned[start:start + limit]
        ]
        return Page(items=items, page=page, limit=limit, total=len(owned))

    async def list_messages(
        self, conversation_id: str, user_id: str, page: int = 1, limit: int = 50
    ) -> Page[Message]:
        check_page(page, limit)
        self._owned(conversation_id, user_id)
        messages = self._messages[conversation_id]
        end = len(messages) - (page - 1) * limit
        start = max(0, end - limit)
        items = messages[start:end] if end > 0 else []
        return Page(items=list(items), page=page, limit=limit, total=len(messages))

    async def history(self, conversation_id: str) -> list[dict[str, str]]:
        return [
            {"role": m.role.value, "content": m.content}
            for m in self._messages.get(conversation_id, [])
        ]

    async def delete_conversation(self, conversation_id: str, user_id: str) -> None:
        self._owned(conversation_id, user_id)
        del self._conversations[conversation_id]
        self._messages.pop(conversation_id, None)
        self._touched.pop(conversation_id, None)
