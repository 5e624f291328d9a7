"""Adapter base classes: plain generation and the bounded tool loop."""

import json
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, ClassVar, Optional

from loguru import logger

from synergi.agent.events import AgentEvent, ErrorEvent, TextDelta, ToolCall, ToolResult
from synergi.agent.router.models import AgentType, RoutingDecision
from synergi.agent.tools.registry import ToolRegistry
from synergi.providers.base import LLMProvider, ToolCallRequest


class BaseAdapter(ABC):
    """
    Turns (message, history) into an ordered stream of AgentEvents.

    A transport failure talking to the model becomes a single ErrorEvent,
    after which the stream ends.
    """

    agent: ClassVar[AgentType]
    system_prompt: ClassVar[str] = ""

    def __init__(
        self,
        provider: LLMProvider,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ):
        self.provider = provider
        self.model = model or provider.get_default_model()
        self.temperature = temperature
        self.max_tokens = max_tokens

    @abstractmethod
    def stream(
        self,
        message: str,
        history: Optional[list[dict[str, str]]] = None,
        decision: Optional[RoutingDecision] = None,
    ) -> AsyncIterator[AgentEvent]:
        pass

    def build_messages(
        self,
        message: str,
        history: Optional[list[dict[str, str]]] = None,
        system_prompt: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """System prompt, prior user/assistant turns, then the new user message."""
        messages: list[dict[str, Any]] = []
        prompt = system_prompt if system_prompt is not None else self.system_prompt
        if prompt:
            messages.append({"role": "system", "content": prompt})
        for item in history or []:
            role = str(item.get("role", "")).lower()
            if role in ("user", "assistant"):
                messages.append({"role": role, "content": item.get("content", "")})
        messages.append({"role": "user", "content": message})
        return messages

    async def _stream_text(self, messages: list[dict[str, Any]]) -> AsyncIterator[AgentEvent]:
        try:
            async for chunk in self.provider.stream_chat(
                messages=messages,
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            ):
                if chunk.content:
                    yield TextDelta(chunk.content)
        except Exception as e:
            logger.error(f"{self.agent.value} adapter: generation failed: {e}")
            yield ErrorEvent(detail=str(e))


class ToolLoopAdapter(BaseAdapter):
    """
    Bounded generate -> tool call -> tool result loop.

    Each step is one streamed generation. If it requests tools, every call
    is emitted, executed and emitted again as a result, and the results
    are fed back for the next step. The loop ends on a step without tool
    calls or after `max_steps` generations.
    """

    def __init__(
        self,
        provider: LLMProvider,
        tools: ToolRegistry,
        model: Optional[str] = None,
        max_steps: int = 5,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ):
        super().__init__(provider, model=model, temperature=temperature, max_tokens=max_tokens)
        if max_steps < 1:
            raise ValueError("max_steps must be >= 1")
        self.tools = tools
        self.max_steps = max_steps

    async def stream(
        self,
        message: str,
        history: Optional[list[dict[str, str]]] = None,
        decision: Optional[RoutingDecision] = None,
    ) -> AsyncIterator[AgentEvent]:
        messages = self.build_messages(message, history)
        definitions = self.tools.get_definitions()

        for step in range(1, self.max_steps + 1):
            content = ""
            tool_calls: list[ToolCallRequest] = []
            try:
                async for chunk in self.provider.stream_chat(
                    messages=messages,
                    tools=definitions,
                    model=self.model,
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                ):
                    if chunk.content:
                        content += chunk.content
                        yield TextDelta(chunk.content)
                    if chunk.is_final:
                        tool_calls = chunk.tool_calls
            except Exception as e:
                logger.error(f"{self.agent.value} adapter: generation failed at step {step}: {e}")
                yield ErrorEvent(detail=str(e))
                return

            if not tool_calls:
                return

            messages.append({
                "role": "assistant",
                "content": content,
                "tool_calls": [tc.to_message() for tc in tool_calls],
            })

            for tc in tool_calls:
                yield ToolCall(
                    call_id=tc.id,
                    name=tc.name,
                    args=tc.arguments,
                    parsed=self.tools.parse_args(tc.name, tc.arguments),
                )
                result = await self.tools.execute(tc.name, tc.arguments)
                yield ToolResult(call_id=tc.id, name=tc.name, result=result)
                messages.append({
                    "role": "tool",
                    "tool_call_id": tc.id,
                    "name": tc.name,
                    "content": json.dumps(result.model_dump(by_alias=True, exclude_none=True)),
                })

        logger.warning(f"{self.agent.value} adapter reached {self.max_steps} steps without a final answer")
