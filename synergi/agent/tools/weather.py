"""Weather lookup tool."""

from typing import Any, Optional

from synergi.agent.tools.base import Tool
from synergi.agent.tools.models import WeatherArgs, WeatherResult
from synergi.errors import LocationNotFoundError, ToolError
from synergi.weather.open_meteo import OpenMeteoClient


class WeatherTool(Tool):
    """Current conditions plus a short hourly outlook for a city."""

    args_model = WeatherArgs

    def __init__(self, client: Optional[OpenMeteoClient] = None):
        self.client = client or OpenMeteoClient()

    @property
    def name(self) -> str:
        return "get_weather"

    @property
    def description(self) -> str:
        return "Get the current weather and today's hourly forecast for a city."

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "city": {"type": "string", "description": "City name, e.g. 'Mumbai'"},
            },
            "required": ["city"],
        }

    async def execute(self, args: WeatherArgs) -> WeatherResult:
        try:
            data = await self.client.get_weather(args.city)
        except (LocationNotFoundError, ToolError) as e:
            return WeatherResult(success=False, error=str(e))
        return WeatherResult(data=data)
