"""
Open-Meteo weather source.

Two keyless HTTP calls per lookup: geocode the city name, then fetch
current conditions, today's hourly series and the daily summary in one
forecast request. The response is reshaped into WeatherData for the
weather card.
"""

from datetime import datetime
from typing import Any, Optional

import httpx
from loguru import logger

from synergi.agent.tools.models import HourlySlot, WeatherData
from synergi.errors import LocationNotFoundError, ToolError

GEOCODE_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

WMO_DESCRIPTIONS: dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snow fall",
    73: "Moderate snow fall",
    75: "Heavy snow fall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


def describe(wmo: int) -> str:
    return WMO_DESCRIPTIONS.get(wmo, "Unknown")


def to_card_code(wmo: int) -> int:
    """Map a WMO weather code onto the icon codes the weather card understands."""
    if wmo == 0:
        return 113  # clear
    if wmo <= 2:
        return 116  # partly cloudy
    if wmo == 3:
        return 119  # overcast
    if wmo <= 48:
        return 143  # fog
    if wmo <= 57:
        return 266  # drizzle
    if wmo <= 65:
        return 296  # rain
    if wmo <= 67:
        return 311  # freezing rain
    if wmo <= 77:
        return 326  # snow
    if wmo <= 82:
        return 299  # rain showers
    if wmo <= 86:
        return 335  # snow showers
    if wmo >= 95:
        return 200  # thunderstorm
    return 116


def hour_label(hour: int) -> str:
    if hour == 0:
        return "12AM"
    if hour == 12:
        return "12PM"
    if hour < 12:
        return f"{hour}AM"
    return f"{hour - 12}PM"


def format_clock(moment: datetime) -> str:
    """6:45 AM style, no leading zero on the hour."""
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {suffix}"


def format_datetime(moment: datetime) -> str:
    """Feb 26, 2:00 PM style."""
    return f"{moment.strftime('%b')} {moment.day}, {format_clock(moment)}"


def _rounded(value: Any) -> str:
    return str(round(float(value)))


def build_weather_data(
    location: dict[str, Any],
    forecast: dict[str, Any],
    hourly_slots: int = 6,
) -> WeatherData:
    """
    Reshape a geocoding hit and a forecast response into WeatherData.

    Pure function of its inputs. Times are the location's local times as
    returned by the API (`timezone=auto`).
    """
    current = forecast["current"]
    daily = forecast["daily"]
    hourly = forecast["hourly"]

    times: list[str] = hourly.get("time", [])
    now_iso = current.get("time")
    start = times.index(now_iso) if now_iso in times else 0

    slots = []
    for i, idx in enumerate(range(start, min(start + hourly_slots, len(times)))):
        wmo = int(hourly["weather_code"][idx])
        hour = datetime.fromisoformat(times[idx]).hour
        slots.append(HourlySlot(
            label="Now" if i == 0 else hour_label(hour),
            temp=_rounded(hourly["temperature_2m"][idx]),
            weather_code=to_card_code(wmo),
            description=describe(wmo),
        ))

    wmo = int(current["weather_code"])
    moment = datetime.fromisoformat(now_iso) if now_iso else datetime.now()

    return WeatherData(
        city=location.get("name", ""),
        country=location.get("country", ""),
        temp=_rounded(current["temperature_2m"]),
        feels_like=_rounded(current["apparent_temperature"]),
        description=describe(wmo),
        weather_code=to_card_code(wmo),
        humidity=_rounded(current["relative_humidity_2m"]),
        windspeed=_rounded(current["wind_speed_10m"]),
        high=_rounded(daily["temperature_2m_max"][0]),
        low=_rounded(daily["temperature_2m_min"][0]),
        sunrise=format_clock(datetime.fromisoformat(daily["sunrise"][0])),
        sunset=format_clock(datetime.fromisoformat(daily["sunset"][0])),
        datetime=format_datetime(moment),
        hourly=slots,
    )


class OpenMeteoClient:
    """Async client for the Open-Meteo geocoding and forecast endpoints."""

    def __init__(
        self,
        geocode_url: str = GEOCODE_URL,
        forecast_url: str = FORECAST_URL,
        hourly_slots: int = 6,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.geocode_url = geocode_url
        self.forecast_url = forecast_url
        self.hourly_slots = hourly_slots
        self.timeout = timeout
        self._client = client

    async def geocode(self, city: str) -> dict[str, Any]:
        data = await self._get(self.geocode_url, {
            "name": city,
            "count": 1,
            "language": "en",
            "format": "json",
        })
        results = data.get("results") or []
        if not results:
            raise LocationNotFoundError(f"City not found: {city}")
        return results[0]

    async def forecast(self, latitude: float, longitude: float) -> dict[str, Any]:
        return await self._get(self.forecast_url, {
            "latitude": latitude,
            "longitude": longitude,
            "current": "temperature_2m,relative_humidity_2m,apparent_temperature,weather_code,wind_speed_10m",
            "hourly": "temperature_2m,weather_code",
            "daily": "temperature_2m_max,temperature_2m_min,sunrise,sunset",
            "timezone": "auto",
            "forecast_days": 1,
        })

    async def get_weather(self, city: str) -> WeatherData:
        location = await self.geocode(city)
        forecast = await self.forecast(location["latitude"], location["longitude"])
        try:
            data = build_weather_data(location, forecast, self.hourly_slots)
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ToolError(f"Unexpected forecast response: {e}") from e
        logger.debug(f"Weather for {data.city}, {data.country}: {data.temp}° {data.description}")
        return data

    async def _get(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ToolError(f"Open-Meteo API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise ToolError(f"Open-Meteo request failed: {type(e).__name__}") from e
        return response.json()
