"""Tests for the per-turn chat orchestrator."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from synergi.agent.adapters.code_assistant import CodeAssistantAdapter
from synergi.agent.adapters.general import GeneralAdapter
from synergi.agent.adapters.weather import WeatherAdapter
from synergi.agent.router.agent_router import AgentRouter
from synergi.agent.router.classifier import LexicalClassifier
from synergi.agent.router.llm_router import LLMRouter
from synergi.agent.router.models import AgentType, RoutingDecision
from synergi.agent.tools.models import WeatherData
from synergi.agent.tools.weather import WeatherTool
from synergi.chat.orchestrator import (
    APOLOGY,
    ChatOrchestrator,
    create_classifier,
    describe_decision,
)
from synergi.config.schema import Config
from synergi.storage.memory import InMemoryChatStore

MUMBAI = WeatherData(
    city="Mumbai", country="India", temp="31", feels_like="35", description="Partly cloudy",
    weather_code=116, humidity="64", windspeed="12", high="33", low="24",
    sunrise="6:58 AM", sunset="6:41 PM", datetime="Feb 26, 2:00 PM",
)


def fixed_router(agent: AgentType, city: str | None = None) -> AgentRouter:
    classifier = Mock()
    classifier.classify = AsyncMock(side_effect=lambda message, history=None: RoutingDecision(
        agent=agent, confidence=0.9, reason="test", extracted_city=city,
    ))
    return AgentRouter(classifier)


def orchestrator(store, router, provider, **adapters) -> ChatOrchestrator:
    mapping = {AgentType.GENERAL: GeneralAdapter(provider)}
    mapping.update({AgentType(name): adapter for name, adapter in adapters.items()})
    return ChatOrchestrator(store, router, mapping)


async def run(orch: ChatOrchestrator, message: str, conversation_id=None, user_id="u1"):
    return [event async for event in orch.run_turn(user_id, message, conversation_id)]


def names(events) -> list[str]:
    return [e.event for e in events]


def chunks(events) -> str:
    return "".join(e.data["chunk"] for e in events if e.event == "ai_chunk")


class TestTurnFlow:
    """Test event ordering and persistence for a full turn."""

    @pytest.mark.asyncio
    async def test_general_turn(self, scripted, steps, clock):
        store = InMemoryChatStore(clock=clock)
        provider = scripted(steps=[steps.text("Hi", " there!")])
        events = await run(orchestrator(store, fixed_router(AgentType.GENERAL), provider), "hello synergi")

        assert names(events) == [
            "conversation", "user_message", "agent_selected", "ai_start",
            "ai_chunk", "ai_chunk", "ai_complete", "title_generated", "done",
        ]
        assert events[0].data["conversationTitle"] is None
        assert events[2].data["agentName"] == "General Assistant"

        complete = events[6].data
        assert complete["role"] == "assistant"
        assert complete["content"] == chunks(events) == "Hi there!"
        assert complete["metadata"] == {"agent": "general", "agentName": "General Assistant"}

        conversation_id = events[0].data["conversationId"]
        assert await store.history(conversation_id) == [
            {"role": "user", "content": "hello synergi"},
            {"role": "assistant", "content": "Hi there!"},
        ]

    @pytest.mark.asyncio
    async def test_weather_card_precedes_prose(self, scripted, steps):
        provider = scripted(steps=[steps.text("Warm and humid in Mumbai.")])
        tool = WeatherTool(Mock(get_weather=AsyncMock(return_value=MUMBAI)))
        orch = orchestrator(
            InMemoryChatStore(), fixed_router(AgentType.WEATHER, city="Mumbai"), provider,
            weather=WeatherAdapter(provider, weather_tool=tool),
        )
        events = await run(orch, "What's the weather in Mumbai?")
        sequence = names(events)

        assert sequence.index("tool_call") < sequence.index("tool_result") < sequence.index("weather_data")
        assert sequence.index("weather_data") < sequence.index("ai_chunk")

        card = next(e for e in events if e.event == "weather_data").data
        assert card["city"] == "Mumbai"
        assert card["feelsLike"] == "35"

        complete = next(e for e in events if e.event == "ai_complete").data
        assert complete["metadata"]["weatherData"]["city"] == "Mumbai"
        assert complete["metadata"]["agent"] == "weather"

    @pytest.mark.asyncio
    async def test_sandbox_error_still_completes(self, scripted, steps, fake_sandbox):
        provider = scripted(steps=[
            steps.tools(("call_1", "executeCode", {"language": "python", "code": "print(sum(range(10)))"})),
            steps.text("The sandbox is unavailable right now."),
        ])
        orch = orchestrator(
            InMemoryChatStore(), fixed_router(AgentType.CODE_ASSISTANT), provider,
            code_assistant=CodeAssistantAdapter(provider, sandbox=fake_sandbox(error=RuntimeError("offline"))),
        )
        events = await run(orch, "run sum of 0..9 in python")

        result = next(e for e in events if e.event == "tool_result").data
        assert result["success"] is False
        assert result["result"]["error"] == "Sandbox error: offline"
        assert names(events)[-1] == "done"

        metadata = next(e for e in events if e.event == "ai_complete").data["metadata"]
        assert metadata["code"] == "print(sum(range(10)))"
        assert metadata["language"] == "python"
        assert metadata["executionResult"]["success"] is False

    @pytest.mark.asyncio
    async def test_adapter_failure_apologizes(self, scripted, steps):
        provider = scripted(steps=[ConnectionError("model down")])
        events = await run(orchestrator(InMemoryChatStore(), fixed_router(AgentType.GENERAL), provider), "hi")

        complete = next(e for e in events if e.event == "ai_complete").data
        assert complete["content"] == APOLOGY == chunks(events)
        assert complete["metadata"]["failed"] is True
        assert names(events)[-1] == "done"

    @pytest.mark.asyncio
    async def test_partial_text_then_failure(self, scripted, steps, fake_sandbox):
        provider = scripted(steps=[
            steps.tools(("call_1", "generateUI", {"code": "<p/>"}), text="Building it."),
            RuntimeError("dropped"),
        ])
        orch = orchestrator(
            InMemoryChatStore(), fixed_router(AgentType.CODE_ASSISTANT), provider,
            code_assistant=CodeAssistantAdapter(provider, sandbox=fake_sandbox()),
        )
        events = await run(orch, "make a page")
        complete = next(e for e in events if e.event == "ai_complete").data

        assert complete["content"] == chunks(events) == f"Building it.\n\n{APOLOGY}"
        assert complete["metadata"]["uiCode"] == "<p/>"
        assert complete["metadata"]["framework"] == "html"

    @pytest.mark.asyncio
    async def test_unroutable_agent_uses_general(self, scripted, steps):
        provider = scripted(steps=[steps.text("ok")])
        orch = orchestrator(InMemoryChatStore(), fixed_router(AgentType.WEB_SEARCH), provider)
        events = await run(orch, "latest news")
        assert chunks(events) == "ok"


class TestTitles:
    """Test title generation across turns."""

    @pytest.mark.asyncio
    async def test_title_once(self, scripted, steps):
        store = InMemoryChatStore()
        provider = scripted(steps=[steps.text("a"), steps.text("b")])
        orch = orchestrator(store, fixed_router(AgentType.GENERAL), provider)

        first = await run(orch, "Explain how **photosynthesis** works in simple plant cells please")
        conversation_id = first[0].data["conversationId"]
        titles = [e.data["title"] for e in first if e.event == "title_generated"]

        assert titles == ["Explain how photosynthesis works in simple"]
        assert len(titles[0]) <= 60

        second = await run(orch, "and in algae?", conversation_id)
        assert "title_generated" not in names(second)
        assert second[0].data["conversationTitle"] == titles[0]
        assert (await store.get_conversation(conversation_id, "u1")).title == titles[0]

    @pytest.mark.asyncio
    async def test_history_passed_to_second_turn(self, scripted, steps):
        store = InMemoryChatStore()
        provider = scripted(steps=[steps.text("first answer"), steps.text("second answer")])
        orch = orchestrator(store, fixed_router(AgentType.GENERAL), provider)

        first = await run(orch, "question one")
        await run(orch, "question two", first[0].data["conversationId"])

        sent = provider.stream_calls[1]["messages"]
        assert [m["content"] for m in sent[1:]] == ["question one", "first answer", "question two"]

    @pytest.mark.asyncio
    async def test_conversation_touched_last(self, scripted, steps, clock):
        store = InMemoryChatStore(clock=clock)
        orch = orchestrator(store, fixed_router(AgentType.GENERAL), scripted(steps=[steps.text("x")]))
        events = await run(orch, "hello")

        conversation = await store.get_conversation(events[0].data["conversationId"], "u1")
        complete = events[names(events).index("ai_complete")].data
        assert conversation.updated_at.isoformat().replace("+00:00", "Z") > complete["createdAt"]


class TestValidation:
    """Test early failures."""

    @pytest.mark.asyncio
    async def test_unknown_conversation(self, scripted):
        events = await run(orchestrator(InMemoryChatStore(), fixed_router(AgentType.GENERAL), scripted()),
                           "hi", conversation_id="nope")
        assert names(events) == ["error"]
        assert events[0].data == {"error": "Conversation not found"}

    @pytest.mark.asyncio
    async def test_foreign_conversation(self, scripted, steps):
        store = InMemoryChatStore()
        orch = orchestrator(store, fixed_router(AgentType.GENERAL), scripted(steps=[steps.text("x")]))
        owned = await run(orch, "hi", user_id="alice")

        events = await run(orch, "hi", owned[0].data["conversationId"], user_id="mallory")
        assert events[0].data["error"] == "Conversation not found"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", ["", "   ", "x" * 20001])
    async def test_invalid_message(self, scripted, message):
        store = InMemoryChatStore()
        events = await run(orchestrator(store, fixed_router(AgentType.GENERAL), scripted()), message)

        assert names(events) == ["error"]
        assert events[0].data["error"] == "Invalid request data"
        assert (await store.list_conversations("u1")).total == 0

    def test_general_adapter_required(self):
        with pytest.raises(ValueError):
            ChatOrchestrator(InMemoryChatStore(), fixed_router(AgentType.GENERAL), {})


class TestConcurrency:
    """Turns on one conversation run one at a time."""

    @pytest.mark.asyncio
    async def test_turns_serialized(self, scripted, steps):
        store = InMemoryChatStore()
        provider = scripted(steps=[steps.text("one"), steps.text("two"), steps.text("three")])
        orch = orchestrator(store, fixed_router(AgentType.GENERAL), provider)
        first = await run(orch, "start")
        conversation_id = first[0].data["conversationId"]

        await asyncio.gather(
            run(orch, "a", conversation_id),
            run(orch, "b", conversation_id),
        )

        roles = [m["role"] for m in await store.history(conversation_id)]
        assert roles == ["user", "assistant"] * 3


class TestWiring:
    """Test construction from configuration."""

    def test_create_classifier(self, scripted):
        config = Config()
        assert isinstance(create_classifier(config, scripted()), LLMRouter)
        config.routing.strategy = "lexical"
        assert isinstance(create_classifier(config, scripted()), LexicalClassifier)

    def test_from_config(self, scripted):
        orch = ChatOrchestrator.from_config(Config(), InMemoryChatStore(), scripted())
        assert set(orch.adapters) == set(AgentType)
        assert orch.title_max_chars == 60

    def test_describe_decision(self):
        decision = RoutingDecision(
            agent=AgentType.WEATHER, confidence=0.92, reason="rain", extracted_city="Pune",
            agent_name="Weather Agent",
        )
        assert describe_decision(decision) == "Weather Agent (weather, confidence 0.92, city=Pune) - rain"
