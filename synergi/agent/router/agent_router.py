"""Agent router: the single routing entry point used by the chat orchestrator."""

from typing import Optional, Protocol

from loguru import logger

from .models import AgentInfo, AgentType, RoutingDecision


class IntentClassifier(Protocol):
    """Anything that can turn a message into a routing decision."""

    async def classify(
        self,
        message: str,
        history: Optional[list[dict[str, str]]] = None,
    ) -> RoutingDecision:
        ...


AVAILABLE_AGENTS: dict[AgentType, AgentInfo] = {
    AgentType.WEB_SEARCH: AgentInfo(
        id=AgentType.WEB_SEARCH,
        name="Web Search Agent",
        description=(
            "Searches the web for current, real-time information, latest news, live data, "
            "recent events, and up-to-date facts"
        ),
    ),
    AgentType.WEATHER: AgentInfo(
        id=AgentType.WEATHER,
        name="Weather Agent",
        description=(
            "Provides instant, accurate weather data including current conditions, "
            "hourly forecasts, sunrise/sunset, and more"
        ),
    ),
    AgentType.CODE_ASSISTANT: AgentInfo(
        id=AgentType.CODE_ASSISTANT,
        name="Code Assistant",
        description=(
            "Executes code (Python/JS) in a sandbox and generates UI components, "
            "landing pages, and webpages with live preview"
        ),
    ),
    AgentType.GENERAL: AgentInfo(
        id=AgentType.GENERAL,
        name="General Assistant",
        description=(
            "Handles general conversation, coding help, creative writing, analysis, "
            "math, and knowledge-based questions"
        ),
    ),
}


def get_available_agents() -> list[AgentInfo]:
    """All registered agents, for UI population."""
    return list(AVAILABLE_AGENTS.values())


class AgentRouter:
    """Wraps an IntentClassifier and attaches agent display metadata."""

    def __init__(self, classifier: IntentClassifier):
        self.classifier = classifier

    async def route(
        self,
        message: str,
        history: Optional[list[dict[str, str]]] = None,
    ) -> RoutingDecision:
        """
        Route a message to exactly one agent.

        Returns:
            RoutingDecision whose `agent` is always a canonical AgentType
            and whose `agent_name` is filled from the registry.
        """
        decision = await self.classifier.classify(message, history)

        agent = decision.agent if decision.agent in AVAILABLE_AGENTS else AgentType.GENERAL
        if agent is not decision.agent:
            logger.warning(f"Classifier returned unregistered agent {decision.agent!r}, using general")
            decision.agent = agent
        decision.agent_name = AVAILABLE_AGENTS[agent].name

        logger.info(
            f"Routing: {decision.agent.value} "
            f"(confidence: {decision.confidence:.2f}, layer: {decision.layer})"
        )
        return decision
