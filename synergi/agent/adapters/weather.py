"""Weather adapter: one live fetch, then prose grounded on the result."""

import json
import re
import uuid
from typing import AsyncIterator, Optional

from synergi.agent.adapters.base import BaseAdapter
from synergi.agent.adapters.general import IDENTITY_PROMPT
from synergi.agent.events import AgentEvent, ErrorEvent, ToolCall, ToolResult
from synergi.agent.router.models import AgentType, RoutingDecision
from synergi.agent.tools.models import WeatherArgs, WeatherResult
from synergi.agent.tools.registry import ToolRegistry
from synergi.agent.tools.weather import WeatherTool
from synergi.providers.base import LLMProvider

GROUNDING_PROMPT = """

You are answering a weather question. Live data for the requested location is given below as JSON.
Base every figure in your answer on this data; do not invent values. Temperatures are in °C, wind speed in km/h, humidity in %.
Keep the answer short and practical (what it feels like, whether to carry an umbrella or jacket, how the next hours look).

Live weather data:
{payload}"""

NO_LOCATION_MESSAGE = (
    "I couldn't tell which location you're asking about. "
    "Try something like \"weather in Mumbai\"."
)

# "in Paris", "for New York", "at San Francisco?"
_CAPITALIZED_PLACE = re.compile(r"\b(?:in|at|for)\s+([A-Z][\w'.-]*(?:\s+[A-Z][\w'.-]*){0,3})")
# lowercase fallback, only at the end of the message: "weather in delhi today"
_TRAILING_PLACE = re.compile(
    r"\b(?:in|at|for)\s+([a-zA-Z][\w'.-]*(?:\s+[a-zA-Z][\w'.-]*){0,2}?)"
    r"(?:\s+(?:today|tomorrow|tonight|now|right now|this week|this weekend))?\s*[?.!]*\s*$",
    re.IGNORECASE,
)


def extract_city(message: str) -> Optional[str]:
    """Best-effort location extraction when the router supplied none."""
    match = _CAPITALIZED_PLACE.search(message) or _TRAILING_PLACE.search(message.strip())
    if not match:
        return None
    city = match.group(1).strip(" .'-")
    return city or None


class WeatherAdapter(BaseAdapter):
    """
    Fetches live conditions for the resolved city and emits them as one
    structured result before any text is generated.
    """

    agent = AgentType.WEATHER

    def __init__(
        self,
        provider: LLMProvider,
        weather_tool: Optional[WeatherTool] = None,
        **kwargs,
    ):
        super().__init__(provider, **kwargs)
        self.tools = ToolRegistry([weather_tool or WeatherTool()])

    async def stream(
        self,
        message: str,
        history: Optional[list[dict[str, str]]] = None,
        decision: Optional[RoutingDecision] = None,
    ) -> AsyncIterator[AgentEvent]:
        city = (decision.extracted_city if decision else None) or extract_city(message)
        if not city:
            yield ErrorEvent(detail="No location in message", user_message=NO_LOCATION_MESSAGE)
            return

        args = WeatherArgs(city=city)
        call_id = f"call_{uuid.uuid4().hex[:12]}"
        yield ToolCall(call_id=call_id, name="get_weather", args={"city": city}, parsed=args)

        result = await self.tools.execute("get_weather", {"city": city})
        yield ToolResult(call_id=call_id, name="get_weather", result=result)

        if not isinstance(result, WeatherResult) or not result.success or result.data is None:
            error = getattr(result, "error", None) or "unknown error"
            yield ErrorEvent(
                detail=f"Weather lookup failed for {city}: {error}",
                user_message=f"Sorry, I couldn't fetch the weather for {city}. {error}",
            )
            return

        payload = json.dumps(result.data.to_wire(), ensure_ascii=False)
        prompt = IDENTITY_PROMPT + GROUNDING_PROMPT.format(payload=payload)
        async for event in self._stream_text(self.build_messages(message, history, system_prompt=prompt)):
            yield event
