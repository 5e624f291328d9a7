"""LLM-delegated router: one model round-trip per message."""

import asyncio
import json
from typing import Any, Optional

from loguru import logger

from synergi.providers.base import LLMProvider

from .models import AgentType, RoutingDecision


ROUTING_SYSTEM_PROMPT = """You are an intelligent query router for a multi-agent AI system. Analyze the user's message and decide which agent should handle it.

Available agents:
1. "weather" - ANY weather-related query: temperature, forecast, rain, snow, humidity, wind, sunrise/sunset, "should I carry an umbrella", "how hot/cold is it", climate conditions for a location, etc.
2. "web_search" - Queries needing current/real-time information: latest news, stock prices, sports scores, "who won", current events, product releases, trending topics, people lookup.
3. "code_assistant" - ANY request involving code, programming, scripts, algorithms, data processing, OR building UI/webpages/landing pages/components. This includes: "write a script", "create a landing page", "build a form", "make a calculator", "Fibonacci", "sorting algorithm", "create a dashboard", "build a website", "generate a UI", etc.
4. "general" - Everything else: creative writing, explanations, translations, general knowledge, greetings, casual conversation, math questions that don't need code.

Rules:
- Users often make typos. Understand the intended meaning despite misspellings.
- If the query mentions ANY weather condition or asks about carrying weather gear for a location, ALWAYS route to "weather".
- If the query needs information that changes over time (news, prices, scores, events), route to "web_search".
- If the query asks to CREATE, BUILD, GENERATE, or WRITE any code, script, webpage, landing page, UI component, form, dashboard, or application, ALWAYS route to "code_assistant".
- If the query asks to run code, execute a script, or see output of an algorithm, ALWAYS route to "code_assistant".
- When routing to "weather", extract the city/location name into extractedCity.

You MUST respond with ONLY a valid JSON object in this exact format, nothing else:
{"agent":"code_assistant","confidence":0.95,"reason":"User asked to create a landing page"}"""

USER_PROMPT_TEMPLATE = (
    "Route this user message to the correct agent. "
    "Respond with ONLY valid JSON, no other text.\n\n"
    'User message: "{message}"'
)

FALLBACK_CONFIDENCE = 0.5
DEFAULT_CONFIDENCE = 0.8


class RoutingParseError(ValueError):
    """The model's reply did not contain a usable routing object."""


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json ... ```) around a reply."""
    lines = [
        line for line in text.strip().splitlines()
        if not line.strip().startswith("```")
    ]
    return "\n".join(lines).strip()


def extract_json_object(text: str) -> str:
    """
    Return the first balanced `{...}` object in `text`.

    Braces inside JSON strings are ignored.

    Raises:
        RoutingParseError: If no complete object is present.
    """
    start = text.find("{")
    if start == -1:
        raise RoutingParseError("No JSON in LLM response")

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]

    raise RoutingParseError("Unterminated JSON in LLM response")


def parse_routing_reply(text: str) -> dict[str, Any]:
    """
    Parse and validate a routing reply.

    Returns:
        Dict with `agent` (AgentType), `confidence`, `reason`, `extracted_city`

    Raises:
        RoutingParseError: For missing/malformed JSON or an unknown agent.
    """
    payload = extract_json_object(strip_code_fences(text))
    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as e:
        raise RoutingParseError(f"Malformed JSON in LLM response: {e.msg}") from e

    if not isinstance(parsed, dict):
        raise RoutingParseError("LLM response is not a JSON object")

    agent = parsed.get("agent")
    try:
        agent = AgentType(agent)
    except ValueError:
        raise RoutingParseError(f"Invalid agent in response: {agent!r}")

    confidence = parsed.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
        confidence = DEFAULT_CONFIDENCE
    confidence = max(0.0, min(1.0, float(confidence)))

    reason = parsed.get("reason")
    reason = str(reason).strip() if reason is not None else ""

    city = parsed.get("extractedCity")
    if not isinstance(city, str) or not city.strip():
        city = None

    return {
        "agent": agent,
        "confidence": confidence,
        "reason": reason or "LLM classification",
        "extracted_city": city.strip() if city else None,
    }


def fallback_decision(cause: str) -> RoutingDecision:
    """Safe default used whenever delegated classification fails."""
    return RoutingDecision(
        agent=AgentType.GENERAL,
        confidence=FALLBACK_CONFIDENCE,
        reason=f"Fallback: {cause}",
        layer="llm",
    )


class LLMRouter:
    """Delegates the routing decision to a language model."""

    layer = "llm"

    def __init__(
        self,
        provider: LLMProvider,
        model: str | None = None,
        timeout_ms: int = 8000,
    ):
        self.provider = provider
        self.model = model
        self.timeout_ms = timeout_ms

    async def classify(
        self,
        message: str,
        history: Optional[list[dict[str, str]]] = None,
    ) -> RoutingDecision:
        """
        Classify a message with one model call.

        Never raises: any failure produces a `general` fallback decision
        whose reason starts with "Fallback: ".
        """
        messages = [
            {"role": "system", "content": ROUTING_SYSTEM_PROMPT},
            {"role": "user", "content": USER_PROMPT_TEMPLATE.format(message=message)},
        ]

        try:
            reply = await self._call_llm(messages)
        except Exception as e:
            logger.warning(f"LLM routing failed, falling back to general: {e}")
            return fallback_decision(f"LLM routing error ({e})")

        try:
            result = parse_routing_reply(reply)
        except RoutingParseError as e:
            logger.warning(f"LLM router: {e}; raw reply: {reply[:200]!r}")
            return fallback_decision(str(e))

        return RoutingDecision(
            agent=result["agent"],
            confidence=result["confidence"],
            reason=result["reason"],
            extracted_city=result["extracted_city"],
            layer=self.layer,
            metadata={"llm_model": self.model or self.provider.get_default_model()},
        )

    async def _call_llm(self, messages: list[dict[str, Any]]) -> str:
        """Call the LLM with timeout."""
        try:
            response = await asyncio.wait_for(
                self.provider.chat(
                    messages=messages,
                    model=self.model,
                    max_tokens=200,  # Short response needed
                    temperature=0.1,  # Low temperature for consistency
                ),
                timeout=self.timeout_ms / 1000.0,
            )
        except asyncio.TimeoutError:
            raise TimeoutError(f"LLM classification timed out after {self.timeout_ms}ms")
        return response.content or ""
