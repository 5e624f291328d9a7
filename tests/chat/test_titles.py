"""Tests for title derivation, SSE framing and metadata folding."""

import pytest

from synergi.agent.events import ToolCall, ToolResult
from synergi.agent.router.models import AgentType, RoutingDecision
from synergi.agent.tools.models import (
    CodeExecArgs,
    CodeExecResult,
    SearchResult,
    UIGenArgs,
    UIGenResult,
    WeatherResult,
)
from synergi.chat.metadata import MetadataAccumulator
from synergi.chat.sse import SSEEvent, parse_stream
from synergi.chat.titles import clean_text, derive_title
from synergi.storage.models import DEFAULT_TITLE


class TestCleanText:
    """Test markup stripping."""

    def test_strips_code_and_links(self):
        text = "Fix `foo()` in ```python\nprint(1)\n``` see [the docs](https://x.dev) or https://y.dev now"
        assert clean_text(text) == "Fix in see the docs or now"

    def test_images_keep_alt_text(self):
        assert clean_text("![a cat](cat.png) ## heading") == "a cat heading"


class TestDeriveTitle:
    """Test derive_title."""

    def test_first_words(self):
        assert derive_title("what's the weather in mumbai today and tomorrow") == "What's the weather in mumbai today"

    def test_deterministic(self):
        text = "Write a **haiku** about autumn leaves falling slowly"
        assert derive_title(text) == derive_title(text)

    def test_idempotent(self):
        title = derive_title("tell me about the history of the roman empire")
        assert derive_title(title) == title

    @pytest.mark.parametrize("text", ["", "   ", "```\ncode only\n```", "https://example.com"])
    def test_empty_falls_back(self, text):
        assert derive_title(text) == DEFAULT_TITLE

    def test_truncates_long_words(self):
        title = derive_title("Supercalifragilisticexpialidocious " * 4, max_words=6, max_chars=30)
        assert len(title) <= 30
        assert title.endswith("...")

    def test_trailing_punctuation_removed(self):
        assert derive_title("hello, world -", max_words=6) == "Hello, world"

    def test_never_exceeds_limit(self):
        for limit in (5, 12, 60):
            assert len(derive_title("a" * 200, max_chars=limit)) <= limit


class TestSSE:
    """Test event framing."""

    def test_encode(self):
        assert SSEEvent("done", {"message": "Stream complete"}).encode() == (
            'event: done\ndata: {"message": "Stream complete"}\n\n'
        )

    def test_parse_round_trip(self):
        stream = "".join(e.encode() for e in [
            SSEEvent("ai_chunk", {"chunk": "Hé\nllo"}),
            SSEEvent("done", {"message": "Stream complete"}),
        ])
        events = parse_stream(stream)
        assert [e.event for e in events] == ["ai_chunk", "done"]
        assert events[0].data["chunk"] == "Hé\nllo"


class TestMetadataAccumulator:
    """Test folding tool traffic into message metadata."""

    def test_code_execution(self):
        acc = MetadataAccumulator()
        args = CodeExecArgs(language="javascript", code="console.log(1)")
        acc.record_call(ToolCall(call_id="c1", name="executeCode", args=args.to_wire(), parsed=args))
        acc.record_result(ToolResult(call_id="c1", name="executeCode",
                                     result=CodeExecResult(success=True, output="1")))

        decision = RoutingDecision(agent=AgentType.CODE_ASSISTANT, confidence=1.0, reason="r",
                                   agent_name="Code Assistant")
        assert acc.build(decision) == {
            "code": "console.log(1)",
            "language": "javascript",
            "executionResult": {"success": True, "output": "1"},
            "agent": "code_assistant",
            "agentName": "Code Assistant",
        }

    def test_ui_generation(self):
        acc = MetadataAccumulator()
        args = UIGenArgs(code="<div/>", framework="react")
        acc.record_call(ToolCall(call_id="c1", name="generateUI", parsed=args))
        acc.record_result(ToolResult(call_id="c1", name="generateUI",
                                     result=UIGenResult(code="<div/>", framework="react", message="ok")))
        assert acc.build() == {"uiCode": "<div/>", "framework": "react"}

    def test_unparsed_and_unrelated_results_ignored(self):
        acc = MetadataAccumulator()
        acc.record_call(ToolCall(call_id="c1", name="executeCode", args={"language": "cobol"}))
        acc.record_result(ToolResult(call_id="c1", name="search", result=SearchResult(results=[])))
        acc.record_result(ToolResult(call_id="c2", name="get_weather",
                                     result=WeatherResult(success=False, error="City not found: X")))
        assert acc.build(failed=True) == {"failed": True}
