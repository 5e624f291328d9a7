"""Shared fixtures: a scripted LLM provider and a fake code sandbox."""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from synergi.agent.tools.code import Execution
from synergi.providers.base import LLMProvider, LLMResponse, StreamChunk, ToolCallRequest


class ScriptedProvider(LLMProvider):
    """
    Replays canned responses.

    `steps` feeds stream_chat: each entry is a list of StreamChunks (one
    generation) or an Exception to raise. `replies` feeds chat the same way
    with strings or Exceptions.
    """

    def __init__(self, steps=None, replies=None):
        super().__init__("test/model")
        self.steps = list(steps or [])
        self.replies = list(replies or [])
        self.stream_calls: list[dict[str, Any]] = []
        self.chat_calls: list[list[dict[str, Any]]] = []

    async def chat(self, messages, tools=None, model=None, max_tokens=4096, temperature=0.7):
        self.chat_calls.append([dict(m) for m in messages])
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply)

    async def stream_chat(self, messages, tools=None, model=None, max_tokens=4096, temperature=0.7):
        self.stream_calls.append({"messages": [dict(m) for m in messages], "tools": tools})
        step = self.steps.pop(0) if self.steps else [StreamChunk(is_final=True)]
        if isinstance(step, Exception):
            raise step
        for chunk in step:
            yield chunk


def text_step(*parts: str) -> list[StreamChunk]:
    return [StreamChunk(content=p) for p in parts] + [StreamChunk(is_final=True, finish_reason="stop")]


def tool_step(*calls: tuple[str, str, dict], text: str = "") -> list[StreamChunk]:
    chunks = [StreamChunk(content=text)] if text else []
    chunks.append(StreamChunk(
        tool_calls=[ToolCallRequest(id=call_id, name=name, arguments=args) for call_id, name, args in calls],
        finish_reason="tool_calls",
        is_final=True,
    ))
    return chunks


class FakeSandbox:
    def __init__(self, execution: Execution | None = None, error: Exception | None = None):
        self.execution = execution
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def run(self, language: str, code: str) -> Execution:
        self.calls.append((language, code))
        if self.error is not None:
            raise self.error
        return self.execution


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 2, 26, 14, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def scripted():
    """Factory: scripted(steps=[...], replies=[...]) -> ScriptedProvider."""
    return ScriptedProvider


@pytest.fixture
def steps():
    """Chunk builders for scripted generations."""
    class Steps:
        text = staticmethod(text_step)
        tools = staticmethod(tool_step)
    return Steps


@pytest.fixture
def fake_sandbox():
    return FakeSandbox


@pytest.fixture
def clock():
    return StepClock()
