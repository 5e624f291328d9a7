"""Tests for the LLM-delegated router."""

import asyncio

import pytest

from synergi.agent.router.agent_router import AVAILABLE_AGENTS, AgentRouter, get_available_agents
from synergi.agent.router.llm_router import (
    LLMRouter,
    RoutingParseError,
    extract_json_object,
    parse_routing_reply,
    strip_code_fences,
)
from synergi.agent.router.models import AgentType, RoutingDecision


class TestParsing:
    """Test reply parsing helpers."""

    def test_strip_code_fences(self):
        text = '```json\n{"agent": "weather"}\n```'
        assert strip_code_fences(text) == '{"agent": "weather"}'

    def test_extract_ignores_braces_in_strings(self):
        text = 'Sure! {"agent": "general", "reason": "user typed } and {"} trailing'
        assert extract_json_object(text) == '{"agent": "general", "reason": "user typed } and {"}'

    def test_extract_without_json(self):
        with pytest.raises(RoutingParseError):
            extract_json_object("I think weather")

    def test_extract_unterminated(self):
        with pytest.raises(RoutingParseError):
            extract_json_object('{"agent": "weather"')

    def test_parse_fenced_reply(self):
        result = parse_routing_reply(
            '```json\n{"agent":"weather","confidence":0.93,"reason":"asks about rain",'
            '"extractedCity":" Mumbai "}\n```'
        )
        assert result["agent"] == AgentType.WEATHER
        assert result["confidence"] == 0.93
        assert result["extracted_city"] == "Mumbai"

    def test_unknown_agent_rejected(self):
        with pytest.raises(RoutingParseError):
            parse_routing_reply('{"agent": "translator"}')

    @pytest.mark.parametrize("raw,expected", [
        ("1.7", 1.0),
        ("-0.2", 0.0),
        ('"high"', 0.8),
        ("true", 0.8),
    ])
    def test_confidence_normalized(self, raw, expected):
        result = parse_routing_reply(f'{{"agent": "general", "confidence": {raw}}}')
        assert result["confidence"] == expected

    def test_missing_confidence_defaults(self):
        result = parse_routing_reply('{"agent": "web_search"}')
        assert result["confidence"] == 0.8
        assert result["reason"] == "LLM classification"
        assert result["extracted_city"] is None

    @pytest.mark.parametrize("raw,expected", [
        ("42", "42"),
        ('["rain", "city"]', "['rain', 'city']"),
        ('"  asks about rain  "', "asks about rain"),
        ('""', "LLM classification"),
        ("null", "LLM classification"),
    ])
    def test_reason_is_always_text(self, raw, expected):
        result = parse_routing_reply(f'{{"agent": "weather", "reason": {raw}}}')
        assert result["reason"] == expected


class TestLLMRouter:
    """Test LLMRouter.classify."""

    @pytest.mark.asyncio
    async def test_successful_classification(self, scripted):
        provider = scripted(replies=['{"agent":"code_assistant","confidence":0.95,"reason":"landing page"}'])
        decision = await LLMRouter(provider, model="router/model").classify("build me a landing page")

        assert decision.agent == AgentType.CODE_ASSISTANT
        assert decision.confidence == 0.95
        assert decision.layer == "llm"
        assert decision.metadata["llm_model"] == "router/model"
        assert not decision.is_fallback

        sent = provider.chat_calls[0]
        assert sent[0]["role"] == "system"
        assert "build me a landing page" in sent[1]["content"]

    @pytest.mark.asyncio
    async def test_no_json_falls_back(self, scripted):
        decision = await LLMRouter(scripted(replies=["weather, probably"])).classify("hi")
        assert decision.agent == AgentType.GENERAL
        assert decision.confidence == 0.5
        assert decision.reason.startswith("Fallback: ")

    @pytest.mark.asyncio
    async def test_invalid_agent_falls_back(self, scripted):
        decision = await LLMRouter(scripted(replies=['{"agent": "poet"}'])).classify("hi")
        assert decision.agent == AgentType.GENERAL
        assert decision.is_fallback

    @pytest.mark.asyncio
    async def test_provider_error_falls_back(self, scripted):
        provider = scripted(replies=[RuntimeError("upstream 503")])
        decision = await LLMRouter(provider).classify("latest news")
        assert decision.agent == AgentType.GENERAL
        assert decision.confidence == 0.5
        assert "upstream 503" in decision.reason

    @pytest.mark.asyncio
    async def test_timeout_falls_back(self, scripted):
        class SlowProvider(scripted):
            async def chat(self, *args, **kwargs):
                await asyncio.sleep(1)

        decision = await LLMRouter(SlowProvider(), timeout_ms=10).classify("weather in Paris")
        assert decision.is_fallback
        assert "timed out" in decision.reason


class TestAgentRouter:
    """Test AgentRouter."""

    def test_registry_lists_four_agents(self):
        ids = {info.id for info in get_available_agents()}
        assert ids == set(AgentType)
        assert all(info.is_active for info in get_available_agents())

    def test_agent_info_wire_shape(self):
        data = AVAILABLE_AGENTS[AgentType.WEATHER].to_dict()
        assert data == {
            "id": "weather",
            "name": "Weather Agent",
            "description": AVAILABLE_AGENTS[AgentType.WEATHER].description,
            "isActive": True,
        }

    @pytest.mark.asyncio
    async def test_fills_agent_name(self, scripted):
        provider = scripted(replies=['{"agent":"weather","confidence":0.9,"reason":"rain","extractedCity":"Pune"}'])
        decision = await AgentRouter(LLMRouter(provider)).route("rain in pune?")

        assert decision.agent_name == "Weather Agent"
        assert decision.to_dict() == {
            "agent": "weather",
            "agentName": "Weather Agent",
            "confidence": 0.9,
            "reason": "rain",
            "extractedCity": "Pune",
        }

    @pytest.mark.asyncio
    async def test_fallback_gets_general_name(self, scripted):
        decision = await AgentRouter(LLMRouter(scripted(replies=["nope"]))).route("?")
        assert decision.agent == AgentType.GENERAL
        assert decision.agent_name == "General Assistant"

    @pytest.mark.asyncio
    async def test_history_is_forwarded(self):
        seen = {}

        class Recorder:
            async def classify(self, message, history=None):
                seen["history"] = history
                return RoutingDecision(agent=AgentType.GENERAL, confidence=1.0, reason="ok")

        history = [{"role": "user", "content": "earlier"}]
        await AgentRouter(Recorder()).route("now", history)
        assert seen["history"] == history
