"""
Per-turn streaming orchestration.

One turn runs strictly in sequence: resolve the conversation, persist the
user message, route, run exactly one adapter while forwarding its events,
persist the assistant message, then title and touch the conversation.
"""

import asyncio
import contextlib
import time
import weakref
from typing import AsyncIterator, Mapping, Optional

from loguru import logger

from synergi.agent.adapters.base import BaseAdapter
from synergi.agent.events import ErrorEvent, TextDelta, ToolCall, ToolResult
from synergi.agent.router.agent_router import AgentRouter, IntentClassifier
from synergi.agent.router.classifier import LexicalClassifier
from synergi.agent.router.llm_router import LLMRouter
from synergi.agent.router.models import AgentType, RoutingDecision
from synergi.agent.tools.models import WeatherResult
from synergi.chat.metadata import MetadataAccumulator
from synergi.chat.sse import SSEEvent
from synergi.chat.titles import derive_title
from synergi.config.schema import Config
from synergi.errors import ConversationNotFoundError, InvalidRequestError
from synergi.providers.base import LLMProvider
from synergi.storage.base import ChatStore
from synergi.storage.models import Conversation, Role

APOLOGY = "I'm sorry, I ran into a problem while generating a response. Please try again."
MAX_MESSAGE_LENGTH = 20000


def create_classifier(config: Config, provider: LLMProvider) -> IntentClassifier:
    if config.routing.strategy == "lexical":
        return LexicalClassifier()
    return LLMRouter(provider, model=config.router_model, timeout_ms=config.routing.timeout_ms)


class ChatOrchestrator:
    """Drives one chat turn and yields its outbound events."""

    def __init__(
        self,
        store: ChatStore,
        router: AgentRouter,
        adapters: Mapping[AgentType, BaseAdapter],
        title_max_words: int = 6,
        title_max_chars: int = 60,
        serialize_turns: bool = True,
    ):
        if AgentType.GENERAL not in adapters:
            raise ValueError("A general adapter is required")
        self.store = store
        self.router = router
        self.adapters = dict(adapters)
        self.title_max_words = title_max_words
        self.title_max_chars = title_max_chars
        self.serialize_turns = serialize_turns
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    @classmethod
    def from_config(cls, config: Config, store: ChatStore, provider: LLMProvider) -> "ChatOrchestrator":
        from synergi.agent.adapters import build_adapters

        return cls(
            store=store,
            router=AgentRouter(create_classifier(config, provider)),
            adapters=build_adapters(config, provider),
            title_max_words=config.chat.title_max_words,
            title_max_chars=config.chat.title_max_chars,
            serialize_turns=config.chat.serialize_turns,
        )

    def _turn_lock(self, conversation_id: str):
        if not self.serialize_turns:
            return contextlib.nullcontext()
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock

    async def run_turn(
        self,
        user_id: str,
        message: str,
        conversation_id: Optional[str] = None,
    ) -> AsyncIterator[SSEEvent]:
        """
        Run one turn and yield its events.

        Validation failures yield a single `error` event. Adapter failures
        degrade the answer but the turn still completes with `done`.
        """
        try:
            text = (message or "").strip()
            if not text:
                raise InvalidRequestError("Message must not be empty")
            if len(text) > MAX_MESSAGE_LENGTH:
                raise InvalidRequestError(f"Message exceeds {MAX_MESSAGE_LENGTH} characters")

            if conversation_id:
                conversation = await self.store.get_conversation(conversation_id, user_id)
            else:
                conversation = await self.store.create_conversation(user_id)
        except ConversationNotFoundError:
            yield SSEEvent("error", {"error": "Conversation not found"})
            return
        except InvalidRequestError as e:
            yield SSEEvent("error", {"error": "Invalid request data", "details": str(e)})
            return
        except Exception as e:
            logger.exception(f"Error resolving conversation: {e}")
            yield SSEEvent("error", {"error": "Internal server error"})
            return

        lock = self._turn_lock(conversation.id)
        async with lock:
            try:
                async for event in self._run(conversation, user_id, text):
                    yield event
            except Exception as e:
                logger.exception(f"Error in chat turn for conversation {conversation.id}: {e}")
                yield SSEEvent("error", {"error": "Internal server error"})

    async def _run(self, conversation: Conversation, user_id: str, text: str) -> AsyncIterator[SSEEvent]:
        started = time.monotonic()

        yield SSEEvent("conversation", {
            "conversationId": conversation.id,
            "conversationTitle": conversation.title,
        })

        # Prior turns only; the adapter appends the new message itself
        history = await self.store.history(conversation.id)
        user_message = await self.store.create_message(conversation.id, user_id, Role.USER, text)
        yield SSEEvent("user_message", user_message.to_dict())

        decision = await self.router.route(text, history)
        yield SSEEvent("agent_selected", decision.to_dict())
        yield SSEEvent("ai_start", {"message": "AI is thinking...", "agent": decision.agent.value})

        adapter = self.adapters.get(decision.agent) or self.adapters[AgentType.GENERAL]
        metadata = MetadataAccumulator()
        content = ""
        failure: Optional[ErrorEvent] = None

        async for event in adapter.stream(text, history, decision):
            if isinstance(event, TextDelta):
                content += event.text
                yield SSEEvent("ai_chunk", {"chunk": event.text})
            elif isinstance(event, ToolCall):
                metadata.record_call(event)
                yield SSEEvent("tool_call", {"id": event.call_id, "name": event.name, "args": event.args})
            elif isinstance(event, ToolResult):
                metadata.record_result(event)
                yield SSEEvent("tool_result", {
                    "id": event.call_id,
                    "name": event.name,
                    "success": event.success,
                    "result": event.result.model_dump(by_alias=True, exclude_none=True),
                })
                for structured in self._structured_events(event):
                    yield structured
            elif isinstance(event, ErrorEvent):
                failure = event
                break

        if failure is not None:
            logger.warning(f"{decision.agent.value} adapter failed: {failure.detail}")
            apology = failure.user_message or APOLOGY
            addition = f"\n\n{apology}" if content else apology
            content += addition
            yield SSEEvent("ai_chunk", {"chunk": addition})

        assistant_message = await self.store.create_message(
            conversation.id,
            user_id,
            Role.ASSISTANT,
            content,
            metadata=metadata.build(decision, failed=failure is not None),
        )
        yield SSEEvent("ai_complete", assistant_message.to_dict())

        title = None
        if conversation.title is None:
            title = derive_title(
                self._first_user_message(history, text),
                max_words=self.title_max_words,
                max_chars=self.title_max_chars,
            )

        # Title and updated_at are the last writes of the turn
        await self.store.update_conversation(conversation.id, title=title)
        if title is not None:
            yield SSEEvent("title_generated", {"title": title})

        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            f"Turn complete: conversation={conversation.id} agent={decision.agent.value} "
            f"chars={len(content)} elapsed={elapsed_ms}ms"
        )
        yield SSEEvent("done", {"message": "Stream complete"})

    @staticmethod
    def _structured_events(event: ToolResult) -> list[SSEEvent]:
        result = event.result
        if isinstance(result, WeatherResult) and result.success and result.data is not None:
            return [SSEEvent("weather_data", result.data.to_wire())]
        return []

    @staticmethod
    def _first_user_message(history: list[dict[str, str]], current: str) -> str:
        for item in history:
            if item.get("role") == Role.USER.value:
                return item.get("content", "")
        return current


def describe_decision(decision: RoutingDecision) -> str:
    """One-line human summary of a routing decision."""
    city = f", city={decision.extracted_city}" if decision.extracted_city else ""
    return (
        f"{decision.agent_name or decision.agent.value} "
        f"({decision.agent.value}, confidence {decision.confidence:.2f}{city}) - {decision.reason}"
    )
