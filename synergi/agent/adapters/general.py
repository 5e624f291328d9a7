"""General conversation adapter."""

from typing import AsyncIterator, Optional

from synergi.agent.adapters.base import BaseAdapter
from synergi.agent.events import AgentEvent
from synergi.agent.router.models import AgentType, RoutingDecision

IDENTITY_PROMPT = """You are Synergi, a Multi-Agent AI assistant designed to help users with various tasks through intelligent collaboration. You embody the synergy of multiple AI capabilities working together seamlessly.

Key characteristics:
- You are collaborative, intelligent, and adaptive
- You can break down complex problems into manageable components
- You provide clear, helpful, and contextually relevant responses
- You maintain continuity throughout conversations
- You are designed to work as a unified system of specialized agents

Always identify yourself as Synergi when introducing yourself, and maintain this identity throughout the conversation."""


class GeneralAdapter(BaseAdapter):
    """Plain text generation over the turn history. No tools."""

    agent = AgentType.GENERAL
    system_prompt = IDENTITY_PROMPT

    async def stream(
        self,
        message: str,
        history: Optional[list[dict[str, str]]] = None,
        decision: Optional[RoutingDecision] = None,
    ) -> AsyncIterator[AgentEvent]:
        async for event in self._stream_text(self.build_messages(message, history)):
            yield event
