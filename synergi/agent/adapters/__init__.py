"""Agent adapters, one per capability."""

from synergi.agent.adapters.base import BaseAdapter, ToolLoopAdapter
from synergi.agent.adapters.code_assistant import CodeAssistantAdapter
from synergi.agent.adapters.general import GeneralAdapter
from synergi.agent.adapters.weather import WeatherAdapter
from synergi.agent.adapters.web_search import WebSearchAdapter
from synergi.agent.router.models import AgentType
from synergi.agent.tools.code import SubprocessSandbox
from synergi.agent.tools.weather import WeatherTool
from synergi.agent.tools.web import WebSearchTool
from synergi.config.schema import Config
from synergi.providers.base import LLMProvider
from synergi.weather.open_meteo import OpenMeteoClient


def build_adapters(config: Config, provider: LLMProvider) -> dict[AgentType, BaseAdapter]:
    """Wire one adapter per agent from configuration."""
    agents = config.agents
    generation = {"temperature": agents.temperature, "max_tokens": agents.max_tokens}
    search = config.tools.web_search
    sandbox = config.tools.sandbox
    weather = config.weather

    return {
        AgentType.GENERAL: GeneralAdapter(provider, model=agents.general_model, **generation),
        AgentType.WEATHER: WeatherAdapter(
            provider,
            weather_tool=WeatherTool(OpenMeteoClient(
                geocode_url=weather.geocode_url,
                forecast_url=weather.forecast_url,
                hourly_slots=weather.hourly_slots,
                timeout=weather.timeout,
            )),
            model=agents.weather_model,
            **generation,
        ),
        AgentType.WEB_SEARCH: WebSearchAdapter(
            provider,
            search_tool=WebSearchTool(
                api_key=search.api_key,
                max_results=agents.max_search_results,
                endpoint=search.endpoint,
                timeout=search.timeout,
            ),
            model=agents.web_search_model,
            max_steps=agents.max_tool_steps,
            **generation,
        ),
        AgentType.CODE_ASSISTANT: CodeAssistantAdapter(
            provider,
            sandbox=SubprocessSandbox(timeout=sandbox.timeout, interpreters=sandbox.interpreters()),
            model=agents.code_assistant_model,
            max_steps=agents.max_tool_steps,
            **generation,
        ),
    }


__all__ = [
    "BaseAdapter",
    "CodeAssistantAdapter",
    "GeneralAdapter",
    "ToolLoopAdapter",
    "WeatherAdapter",
    "WebSearchAdapter",
    "build_adapters",
]
