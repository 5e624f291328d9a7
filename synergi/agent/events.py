"""Events produced by agent adapters during one turn."""

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from pydantic import BaseModel


@dataclass
class TextDelta:
    """A piece of generated prose, in emission order."""
    text: str


@dataclass
class ToolCall:
    """A model-initiated tool invocation.

    `args` is the raw argument dict as sent by the model; `parsed` is the
    validated argument model when validation succeeded.
    """
    call_id: str
    name: str
    args: dict[str, Any] = field(default_factory=dict)
    parsed: Optional[BaseModel] = None


@dataclass
class ToolResult:
    """Outcome of a tool invocation; always preceded by its ToolCall."""
    call_id: str
    name: str
    result: BaseModel

    @property
    def success(self) -> bool:
        return bool(getattr(self.result, "success", False))


@dataclass
class ErrorEvent:
    """Transport-level failure; the adapter stream ends after it."""
    detail: str
    # Safe to show the user, if set
    user_message: Optional[str] = None


AgentEvent = Union[TextDelta, ToolCall, ToolResult, ErrorEvent]
