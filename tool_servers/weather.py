"""
OpenWeatherMap client.

Fetches current conditions, a daily forecast summary and alerts, and
reshapes the provider payloads into WeatherSnapshot / Forecast / AlertReport.
Provider failures are mapped onto the WeatherError family:

    401            → Unauthorized
    404            → LocationNotFound (names the queried location)
    other non-2xx  → ExternalServiceError(status, reason)
    no response    → ExternalServiceError(0, <cause>)
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import requests

from tool_servers.errors import (
    ExternalServiceError,
    LocationNotFound,
    Unauthorized,
    WeatherError,
)

logger = logging.getLogger(__name__)

BASE_URL = "https://api.openweathermap.org/data/2.5"
GEO_URL = "https://api.openweathermap.org/geo/1.0"
ONECALL_URL = "https://api.openweathermap.org/data/3.0/onecall"

SAMPLES_PER_DAY = 8  # 3-hour intervals
MAX_SAMPLES = 40
MAX_FORECAST_DAYS = MAX_SAMPLES // SAMPLES_PER_DAY

DEFAULT_VISIBILITY_M = 10000

ALERTS_UNAVAILABLE_NOTE = (
    "Weather alerts require One Call API subscription "
    "(free tier doesn't include alerts)"
)

# Provider name for each supported unit system
UNITS = {"metric": "metric", "imperial": "imperial", "kelvin": "standard"}


def round_half_up(value: float, digits: int = 0) -> float | int:
    """Round .5 toward +infinity, the way the provider's reference clients do."""
    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5) / scale
    return int(rounded) if digits == 0 else rounded


@dataclass
class WeatherSnapshot:
    location: str
    temperature: int
    feels_like: int
    humidity: int
    pressure: int
    visibility: int  # km
    wind_speed: float
    wind_direction: int
    condition: str
    description: str
    icon: str
    timestamp: datetime


@dataclass
class ForecastDay:
    date: str  # YYYY-MM-DD
    high: int
    low: int
    condition: str
    description: str
    humidity: int
    wind_speed: float
    precipitation_probability: int
    icon: str


@dataclass
class Forecast:
    location: str
    days: list[ForecastDay] = field(default_factory=list)


@dataclass
class Alert:
    event: str
    start: int  # epoch seconds
    end: int
    description: str
    sender: str | None = None


@dataclass
class AlertReport:
    location: str
    alerts: list[Alert] = field(default_factory=list)
    note: str | None = None

    @property
    def has_alerts(self) -> bool:
        return bool(self.alerts)


class WeatherClient:
    """Thin wrapper over the OpenWeatherMap REST endpoints."""

    def __init__(
        self,
        api_key: str,
        session: requests.Session | None = None,
        *,
        base_url: str = BASE_URL,
        geo_url: str = GEO_URL,
        onecall_url: str = ONECALL_URL,
    ):
        self._api_key = api_key
        self._session = session or requests.Session()
        self._base_url = base_url.rstrip("/")
        self._geo_url = geo_url.rstrip("/")
        self._onecall_url = onecall_url

    def _get(self, url: str, params: dict[str, Any], location: str) -> Any:
        query = {**params, "appid": self._api_key}
        try:
            response = self._session.get(url, params=query)
        except requests.RequestException as err:
            raise ExternalServiceError(0, f"request failed: {err}") from err

        if response.status_code == 401:
            raise Unauthorized(
                "Invalid API key. Please check your WEATHER_API_KEY environment variable."
            )
        if response.status_code == 404:
            raise LocationNotFound(location, "Please check the location name and try again.")
        if not response.ok:
            raise ExternalServiceError(response.status_code, response.reason or "")
        return response.json()

    def current(self, location: str, units: str = "metric") -> WeatherSnapshot:
        data = self._get(
            f"{self._base_url}/weather",
            {"q": location, "units": UNITS[units]},
            location,
        )
        main = data["main"]
        wind = data.get("wind", {})
        weather = data["weather"][0]
        return WeatherSnapshot(
            location=f"{data['name']}, {data['sys']['country']}",
            temperature=round_half_up(main["temp"]),
            feels_like=round_half_up(main["feels_like"]),
            humidity=main["humidity"],
            pressure=main["pressure"],
            visibility=round_half_up((data.get("visibility") or DEFAULT_VISIBILITY_M) / 1000),
            wind_speed=round_half_up(wind.get("speed", 0), 1),
            wind_direction=wind.get("deg") or 0,
            condition=weather["main"],
            description=weather["description"],
            icon=weather["icon"],
            timestamp=datetime.now(timezone.utc),
        )

    def forecast(self, location: str, days: int = MAX_FORECAST_DAYS, units: str = "metric") -> Forecast:
        """
        Daily summaries built from the 3-hourly forecast.

        Samples are grouped by calendar date in arrival order. Per date:
        high/low are the max/min temperature, humidity and wind the mean,
        precipitation the mean probability as a percentage, and the
        condition comes from the middle sample (index len // 2).
        """
        days = max(1, min(days, MAX_FORECAST_DAYS))
        data = self._get(
            f"{self._base_url}/forecast",
            {
                "q": location,
                "units": UNITS[units],
                "cnt": min(days * SAMPLES_PER_DAY, MAX_SAMPLES),
            },
            location,
        )

        by_date: dict[str, list[dict]] = {}
        for sample in data["list"]:
            date = sample["dt_txt"].split(" ")[0]
            by_date.setdefault(date, []).append(sample)

        summaries = [
            _summarize_day(date, samples)
            for date, samples in list(by_date.items())[:days]
        ]
        city = data["city"]
        return Forecast(location=f"{city['name']}, {city['country']}", days=summaries)

    def coordinates(self, location: str) -> tuple[float, float]:
        data = self._get(f"{self._geo_url}/direct", {"q": location, "limit": 1}, location)
        if not data:
            raise LocationNotFound(
                location, 'Try using format: "City, Country" (e.g., "New York, US")'
            )
        return data[0]["lat"], data[0]["lon"]

    def alerts(self, location: str) -> AlertReport:
        """
        Active alerts for a location.

        The One Call endpoint needs a paid subscription, so any provider
        failure on this path yields an empty report with an explanatory
        note instead of an error. A network failure looks the same as a
        missing subscription here.
        """
        try:
            lat, lon = self.coordinates(location)
            data = self._get(
                self._onecall_url,
                {"lat": lat, "lon": lon, "exclude": "minutely,hourly,daily"},
                location,
            )
        except WeatherError as err:
            logger.warning(f"Alerts unavailable for {location!r}: {err}")
            return AlertReport(location=location, note=ALERTS_UNAVAILABLE_NOTE)

        alerts = [
            Alert(
                event=item.get("event", "Weather alert"),
                start=item.get("start", 0),
                end=item.get("end", 0),
                description=item.get("description", ""),
                sender=item.get("sender_name"),
            )
            for item in data.get("alerts") or []
        ]
        return AlertReport(location=location, alerts=alerts)


def _summarize_day(date: str, samples: list[dict]) -> ForecastDay:
    count = len(samples)
    temps = [s["main"]["temp"] for s in samples]
    middle = samples[count // 2]["weather"][0]
    return ForecastDay(
        date=date,
        high=round_half_up(max(temps)),
        low=round_half_up(min(temps)),
        condition=middle["main"],
        description=middle["description"],
        humidity=round_half_up(sum(s["main"]["humidity"] for s in samples) / count),
        wind_speed=round_half_up(sum(s["wind"]["speed"] for s in samples) / count, 1),
        precipitation_probability=round_half_up(
            sum(s.get("pop") or 0 for s in samples) / count * 100
        ),
        icon=middle["icon"],
    )
