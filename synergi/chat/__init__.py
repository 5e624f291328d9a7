"""Chat turn orchestration and streaming."""

from synergi.chat.orchestrator import ChatOrchestrator
from synergi.chat.sse import SSEEvent
from synergi.chat.titles import derive_title

__all__ = ["ChatOrchestrator", "SSEEvent", "derive_title"]
