"""LLM provider abstraction module."""

from synergi.providers.base import LLMProvider, LLMProviderError, LLMResponse, StreamChunk, ToolCallRequest
from synergi.providers.litellm_provider import LiteLLMProvider

__all__ = [
    "LLMProvider",
    "LLMProviderError",
    "LLMResponse",
    "StreamChunk",
    "ToolCallRequest",
    "LiteLLMProvider",
]
