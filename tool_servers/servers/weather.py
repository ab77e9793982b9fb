"""
Weather tool server backed by OpenWeatherMap.

Requires WEATHER_API_KEY (free key: https://openweathermap.org/api).

Launch:
    WEATHER_API_KEY=... python -m tool_servers.servers.weather

Test manually:
    echo '{"jsonrpc":"2.0","method":"tools/call","params":{"name":"get_current_weather","arguments":{"location":"London, UK"}},"id":1}' | python -m tool_servers.servers.weather
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import date, datetime, timezone

from tool_servers.schema import Field
from tool_servers.server import StdioToolServer, ToolHandler, configure_logging
from tool_servers.weather import MAX_FORECAST_DAYS, UNITS, WeatherClient

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-weather-server"
SERVER_VERSION = "1.0.0"
API_KEY_ENV = "WEATHER_API_KEY"

LOCATION = Field(
    "location", "string", required=True,
    description="City name, state/country (e.g., 'New York, NY' or 'London, UK')",
)
UNITS_FIELD = Field(
    "units", "enum", choices=tuple(UNITS), default="metric",
    description="Temperature units: metric (Celsius), imperial (Fahrenheit), or kelvin",
)


def unit_symbols(units: str) -> tuple[str, str]:
    """(temperature symbol, wind speed unit) for a unit system."""
    temperature = {"metric": "°C", "imperial": "°F"}.get(units, "K")
    wind = "m/s" if units == "metric" else "mph"
    return temperature, wind


def _format_time(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")


class CurrentWeatherTool(ToolHandler):
    name = "get_current_weather"
    description = "Get current weather conditions for a location"
    failure_message = "Error getting current weather"
    parameters = (LOCATION, UNITS_FIELD)

    def __init__(self, client: WeatherClient):
        self.client = client

    def handle(self, args: dict) -> str:
        units = args["units"]
        weather = self.client.current(args["location"], units)
        temp, wind = unit_symbols(units)
        return (
            f"🌤️ **Current Weather in {weather.location}**\n\n"
            f"🌡️  **Temperature:** {weather.temperature}{temp} "
            f"(feels like {weather.feels_like}{temp})\n"
            f"🌤️  **Condition:** {weather.condition} - {weather.description}\n"
            f"💧 **Humidity:** {weather.humidity}%\n"
            f"🌬️  **Wind:** {weather.wind_speed} {wind} from {weather.wind_direction}°\n"
            f"🔍 **Visibility:** {weather.visibility} km\n"
            f"📊 **Pressure:** {weather.pressure} hPa\n\n"
            f"*Last updated: {_format_time(weather.timestamp)}*"
        )


class ForecastTool(ToolHandler):
    name = "get_weather_forecast"
    description = "Get weather forecast for upcoming days"
    failure_message = "Error getting weather forecast"
    parameters = (
        LOCATION,
        Field("days", "integer", default=MAX_FORECAST_DAYS, minimum=1, maximum=MAX_FORECAST_DAYS,
              description="Number of days to forecast (1-5)"),
        UNITS_FIELD,
    )

    def __init__(self, client: WeatherClient):
        self.client = client

    def handle(self, args: dict) -> str:
        units, days = args["units"], args["days"]
        forecast = self.client.forecast(args["location"], days, units)
        temp, wind = unit_symbols(units)

        sections = [f"📅 **{days}-Day Weather Forecast for {forecast.location}**"]
        for day in forecast.days:
            label = date.fromisoformat(day.date)
            sections.append(
                f"**{label:%A}, {label:%b} {label.day}**\n"
                f"🌡️  High: {day.high}{temp} | Low: {day.low}{temp}\n"
                f"🌤️  {day.condition} - {day.description}\n"
                f"🌧️  Rain: {day.precipitation_probability}%\n"
                f"💧 Humidity: {day.humidity}%\n"
                f"🌬️  Wind: {day.wind_speed} {wind}"
            )
        return "\n\n".join(sections)


class AlertsTool(ToolHandler):
    name = "get_weather_alerts"
    description = "Get current weather alerts and warnings for a location"
    failure_message = "Error getting weather alerts"
    parameters = (LOCATION,)

    def __init__(self, client: WeatherClient):
        self.client = client

    def handle(self, args: dict) -> str:
        report = self.client.alerts(args["location"])
        text = f"🚨 **Weather Alerts for {report.location}**\n\n"

        if not report.has_alerts:
            text += "✅ No active weather alerts or warnings.\n"
            if report.note:
                text += f"\n💡 *{report.note}*"
            return text.strip()

        for index, alert in enumerate(report.alerts, start=1):
            start = datetime.fromtimestamp(alert.start, tz=timezone.utc)
            end = datetime.fromtimestamp(alert.end, tz=timezone.utc)
            text += f"🚨 **Alert {index}:** {alert.event}\n"
            text += f"📅 **Valid:** {_format_time(start)} - {_format_time(end)}\n"
            text += f"📝 **Description:** {alert.description}\n\n"
        return text.strip()


def build_server(client: WeatherClient) -> StdioToolServer:
    server = StdioToolServer(SERVER_NAME, SERVER_VERSION)
    server.register(CurrentWeatherTool(client))
    server.register(ForecastTool(client))
    server.register(AlertsTool(client))
    return server


def main() -> int:
    configure_logging()

    api_key = os.environ.get(API_KEY_ENV)
    if not api_key:
        print(f"❌ {API_KEY_ENV} environment variable is required", file=sys.stderr)
        print("Get your free API key from: https://openweathermap.org/api", file=sys.stderr)
        return 1

    try:
        return build_server(WeatherClient(api_key)).run()
    except OSError as e:
        logger.error(f"Failed to start server: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
