"""Folds tool traffic into the metadata stored on the assistant message."""

from typing import Any, Optional

from synergi.agent.events import ToolCall, ToolResult
from synergi.agent.router.models import RoutingDecision
from synergi.agent.tools.models import (
    CodeExecArgs,
    CodeExecResult,
    UIGenArgs,
    UIGenResult,
    WeatherResult,
)


class MetadataAccumulator:
    """
    Collects structured values from one turn.

    Matches on the typed argument/result models, never on tool names:
    weather payload, executed code with its language and outcome, and
    generated UI markup with its framework.
    """

    def __init__(self):
        self._data: dict[str, Any] = {}

    def record_call(self, call: ToolCall) -> None:
        args = call.parsed
        if isinstance(args, CodeExecArgs):
            self._data["code"] = args.code
            self._data["language"] = args.language
        elif isinstance(args, UIGenArgs):
            self._data["uiCode"] = args.code
            self._data["framework"] = args.framework

    def record_result(self, result: ToolResult) -> None:
        value = result.result
        if isinstance(value, WeatherResult):
            if value.success and value.data is not None:
                self._data["weatherData"] = value.data.to_wire()
        elif isinstance(value, CodeExecResult):
            self._data["executionResult"] = value.to_wire()
        elif isinstance(value, UIGenResult):
            if value.success:
                self._data["uiCode"] = value.code
                self._data["framework"] = value.framework

    def build(self, decision: Optional[RoutingDecision] = None, failed: bool = False) -> dict[str, Any]:
        data = dict(self._data)
        if decision is not None:
            data["agent"] = decision.agent.value
            data["agentName"] = decision.agent_name
        if failed:
            data["failed"] = True
        return data
