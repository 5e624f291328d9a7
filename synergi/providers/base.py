"""Model provider contract used by the routers and the agent adapters.

The LLM router makes one short `chat` call per message. Adapters consume
`stream_chat`: text deltas first, then exactly one final chunk that
carries the finish reason and any fully assembled tool calls.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator


@dataclass
class ToolCallRequest:
    """A tool invocation requested by the model."""
    id: str
    name: str
    arguments: dict[str, Any]

    def to_message(self) -> dict[str, Any]:
        """Entry for the `tool_calls` list of an assistant message."""
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": json.dumps(self.arguments)},
        }


@dataclass
class StreamChunk:
    """One piece of a streamed generation; `content` is this chunk's delta only."""
    content: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    finish_reason: str | None = None
    is_final: bool = False


@dataclass
class LLMResponse:
    """A complete, non-streamed reply."""
    content: str = ""
    tool_calls: list[ToolCallRequest] = field(default_factory=list)
    finish_reason: str = "stop"


class LLMProviderError(Exception):
    """Transport-level failure talking to the model provider."""


class LLMProvider(ABC):
    """
    Chat completion backend.

    Implementations raise LLMProviderError on transport failures. The
    router turns that into a fallback decision and adapters turn it into
    an ErrorEvent.
    """

    def __init__(self, default_model: str):
        self.default_model = default_model

    def get_default_model(self) -> str:
        return self.default_model

    @abstractmethod
    async def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> LLMResponse:
        pass

    @abstractmethod
    def stream_chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> AsyncGenerator[StreamChunk, None]:
        pass
