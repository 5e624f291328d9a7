"""Persisted chat records."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

DEFAULT_TITLE = "New Conversation"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass
class Conversation:
    id: str
    user_id: str
    title: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class Message:
    id: str
    conversation_id: str
    user_id: str
    role: Role
    content: str
    created_at: datetime = field(default_factory=utcnow)
    metadata: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "conversationId": self.conversation_id,
            "userId": self.user_id,
            "role": self.role.value,
            "content": self.content,
            "createdAt": _iso(self.created_at),
            "metadata": self.metadata,
        }


@dataclass
class ConversationSummary:
    """A conversation as shown in the sidebar list."""
    conversation: Conversation
    message_count: int = 0
    last_message: Optional[Message] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.conversation.id,
            "title": self.conversation.title or DEFAULT_TITLE,
            "createdAt": _iso(self.conversation.created_at),
            "updatedAt": _iso(self.conversation.updated_at),
            "messageCount": self.message_count,
            "lastMessage": self.last_message.to_dict() if self.last_message else None,
        }


T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: list[T]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }
