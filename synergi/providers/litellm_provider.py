"""LiteLLM provider implementation for multi-provider support."""

import uuid
from typing import Any, AsyncGenerator

import json_repair
import litellm
from litellm import acompletion
from loguru import logger

from synergi.providers.base import (
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    StreamChunk,
    ToolCallRequest,
)


class LiteLLMProvider(LLMProvider):
    """
    LLM provider using LiteLLM.

    Defaults to OpenRouter; any LiteLLM model string works
    (e.g. 'openrouter/auto', 'anthropic/claude-sonnet-4-5').
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        default_model: str = "openrouter/auto",
        extra_headers: dict[str, str] | None = None,
    ):
        super().__init__(default_model)
        self.api_key = api_key
        self.api_base = api_base
        self.extra_headers = extra_headers or {}

        # Disable LiteLLM logging noise
        litellm.suppress_debug_info = True
        # Drop unsupported parameters for providers
        litellm.drop_params = True

    def _build_kwargs(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None,
        model: str | None,
        max_tokens: int,
        temperature: float,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": model or self.default_model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if self.extra_headers:
            kwargs["extra_headers"] = self.extra_headers
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"
        return kwargs

    async def chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> LLMResponse:
        """
        Send a chat completion request via LiteLLM.

        Raises:
            LLMProviderError: If the request fails.
        """
        kwargs = self._build_kwargs(messages, tools, model, max_tokens, temperature)
        try:
            response = await acompletion(**kwargs)
        except Exception as e:
            raise LLMProviderError(f"Error calling LLM: {e}") from e
        return self._parse_response(response)

    async def stream_chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        model: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> AsyncGenerator[StreamChunk, None]:
        """
        Stream a chat completion request via LiteLLM.

        Text deltas are yielded as they arrive. Tool call fragments are
        buffered by index and yielded, assembled, on the final chunk.

        Raises:
            LLMProviderError: If the request or the stream fails.
        """
        kwargs = self._build_kwargs(messages, tools, model, max_tokens, temperature)
        kwargs["stream"] = True

        # index -> {"id", "name", "arguments"}
        tool_buffer: dict[int, dict[str, str]] = {}
        finish_reason = None

        try:
            response = await acompletion(**kwargs)
            async for chunk in response:
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                delta = choice.delta

                for tc in getattr(delta, "tool_calls", None) or []:
                    index = getattr(tc, "index", None) or 0
                    slot = tool_buffer.setdefault(index, {"id": "", "name": "", "arguments": ""})
                    if tc.id:
                        slot["id"] = tc.id
                    if tc.function is not None:
                        if tc.function.name:
                            slot["name"] += tc.function.name
                        if tc.function.arguments:
                            slot["arguments"] += tc.function.arguments

                if choice.finish_reason:
                    finish_reason = choice.finish_reason

                if delta.content:
                    yield StreamChunk(content=delta.content)
        except Exception as e:
            raise LLMProviderError(f"Error streaming from LLM: {e}") from e

        yield StreamChunk(
            tool_calls=[
                self._assemble_tool_call(slot)
                for _, slot in sorted(tool_buffer.items())
            ],
            finish_reason=finish_reason or "stop",
            is_final=True,
        )

    @staticmethod
    def _assemble_tool_call(slot: dict[str, str]) -> ToolCallRequest:
        raw = slot["arguments"]
        try:
            args = json_repair.loads(raw) if raw else {}
        except Exception:
            logger.warning(f"Unparseable tool arguments for {slot['name']}: {raw[:100]}")
            args = {"_raw": raw}
        if not isinstance(args, dict):
            args = {"_raw": raw}
        return ToolCallRequest(
            id=slot["id"] or f"call_{uuid.uuid4().hex}",
            name=slot["name"],
            arguments=args,
        )

    def _parse_response(self, response: Any) -> LLMResponse:
        """Parse LiteLLM response into our standard format."""
        choice = response.choices[0]
        message = choice.message

        tool_calls = []
        if getattr(message, "tool_calls", None):
            for tc in message.tool_calls:
                args = tc.function.arguments
                if isinstance(args, str):
                    args = json_repair.loads(args) if args else {}
                tool_calls.append(ToolCallRequest(
                    id=tc.id or f"call_{uuid.uuid4().hex}",
                    name=tc.function.name,
                    arguments=args if isinstance(args, dict) else {},
                ))

        usage = getattr(response, "usage", None)
        if usage:
            logger.debug(f"LLM usage: {usage.prompt_tokens} prompt + {usage.completion_tokens} completion tokens")

        return LLMResponse(
            content=message.content or "",
            tool_calls=tool_calls,
            finish_reason=choice.finish_reason or "stop",
        )
