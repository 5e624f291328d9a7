"""Weather data source."""

from synergi.weather.open_meteo import OpenMeteoClient, build_weather_data, describe, to_card_code

__all__ = ["OpenMeteoClient", "build_weather_data", "describe", "to_card_code"]
