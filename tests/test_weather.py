"""Tests for the OpenWeatherMap client."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from tool_servers.errors import ExternalServiceError, LocationNotFound, NotFound, Unauthorized
from tool_servers.weather import (
    ALERTS_UNAVAILABLE_NOTE,
    WeatherClient,
    round_half_up,
)

from .conftest import create_mock_response, current_payload, forecast_payload, forecast_sample


@pytest.fixture
def client(mock_session: MagicMock) -> WeatherClient:
    return WeatherClient("test-key", session=mock_session)


class TestRounding:
    """Half-up rounding used for all reshaped numbers."""

    def test_half_rounds_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(-2.5) == -2

    def test_one_decimal(self) -> None:
        assert round_half_up(4.12, 1) == 4.1
        assert round_half_up(4.25, 1) == 4.3

    def test_whole_units_are_ints(self) -> None:
        assert isinstance(round_half_up(15.4), int)


class TestCurrent:
    """Current conditions."""

    def test_reshapes_payload(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.return_value = create_mock_response(json_data=current_payload())

        weather = client.current("London, UK")

        assert weather.location == "London, GB"
        assert weather.temperature == 16
        assert weather.feels_like == 14
        assert weather.humidity == 72
        assert weather.pressure == 1012
        assert weather.visibility == 8
        assert weather.wind_speed == 4.1
        assert weather.wind_direction == 250
        assert weather.condition == "Clouds"
        assert weather.description == "broken clouds"

    def test_request_parameters(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.return_value = create_mock_response(json_data=current_payload())

        client.current("London, UK", "kelvin")

        call_args = mock_session.get.call_args
        assert call_args.args[0] == "https://api.openweathermap.org/data/2.5/weather"
        assert call_args.kwargs["params"] == {
            "q": "London, UK", "units": "standard", "appid": "test-key",
        }

    def test_visibility_defaults_to_ten_km(self, client: WeatherClient, mock_session: MagicMock) -> None:
        payload = current_payload()
        del payload["visibility"]
        mock_session.get.return_value = create_mock_response(json_data=payload)

        assert client.current("London").visibility == 10

    def test_wind_direction_defaults_to_zero(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.return_value = create_mock_response(
            json_data=current_payload(wind={"speed": 1.0})
        )
        assert client.current("London").wind_direction == 0


class TestStatusMapping:
    """Provider status codes map onto the error family."""

    def test_401_is_unauthorized(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.return_value = create_mock_response(status=401, reason="Unauthorized")
        with pytest.raises(Unauthorized, match="Invalid API key"):
            client.current("London")

    def test_404_is_not_found_naming_location(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.return_value = create_mock_response(status=404, reason="Not Found")
        with pytest.raises(NotFound, match="Atlantis"):
            client.forecast("Atlantis", 3)

    def test_other_status_is_provider_error(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.return_value = create_mock_response(status=503, reason="Service Unavailable")
        with pytest.raises(ExternalServiceError) as exc_info:
            client.current("London")
        assert exc_info.value.status == 503
        assert str(exc_info.value) == "Weather API error: 503 Service Unavailable"

    def test_network_failure(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(ExternalServiceError) as exc_info:
            client.current("London")
        assert exc_info.value.status == 0


class TestForecast:
    """Daily summaries from 3-hourly samples."""

    def test_daily_aggregates(self, client: WeatherClient, mock_session: MagicMock) -> None:
        samples = [
            forecast_sample("2024-06-01 09:00:00", 10, humidity=60, wind=2.0, pop=0.2,
                            condition="Clear", description="clear sky", icon="01d"),
            forecast_sample("2024-06-01 12:00:00", 15, humidity=70, wind=3.0, pop=0.4,
                            condition="Clouds", description="few clouds", icon="02d"),
            forecast_sample("2024-06-01 15:00:00", 20, humidity=80, wind=4.1, pop=0.6,
                            condition="Rain", description="light rain", icon="10d"),
            forecast_sample("2024-06-02 00:00:00", 5, pop=None),
            forecast_sample("2024-06-02 03:00:00", 8, pop=None),
        ]
        mock_session.get.return_value = create_mock_response(json_data=forecast_payload(samples))

        forecast = client.forecast("London", 2)

        assert forecast.location == "London, GB"
        first, second = forecast.days
        assert first.date == "2024-06-01"
        assert (first.high, first.low) == (20, 10)
        assert first.humidity == 70
        assert first.wind_speed == 3.0
        assert first.precipitation_probability == 40
        assert (first.condition, first.description, first.icon) == ("Clouds", "few clouds", "02d")
        assert (second.high, second.low) == (8, 5)
        assert second.precipitation_probability == 0

    def test_middle_sample_of_even_count(self, client: WeatherClient, mock_session: MagicMock) -> None:
        """With two samples the condition comes from index 1."""
        samples = [
            forecast_sample("2024-06-01 18:00:00", 10, condition="Clear"),
            forecast_sample("2024-06-01 21:00:00", 12, condition="Snow"),
        ]
        mock_session.get.return_value = create_mock_response(json_data=forecast_payload(samples))
        assert client.forecast("London", 1).days[0].condition == "Snow"

    def test_limits_to_requested_days(self, client: WeatherClient, mock_session: MagicMock) -> None:
        samples = [forecast_sample(f"2024-06-0{d} 12:00:00", 10) for d in range(1, 4)]
        mock_session.get.return_value = create_mock_response(json_data=forecast_payload(samples))

        forecast = client.forecast("London", 2)

        assert [d.date for d in forecast.days] == ["2024-06-01", "2024-06-02"]
        assert mock_session.get.call_args.kwargs["params"]["cnt"] == 16

    def test_days_clamped_to_provider_maximum(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.return_value = create_mock_response(json_data=forecast_payload([]))
        client.forecast("London", 9)
        assert mock_session.get.call_args.kwargs["params"]["cnt"] == 40


class TestAlerts:
    """Alerts degrade to an empty report when unavailable."""

    def test_alerts_reported(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.side_effect = [
            create_mock_response(json_data=[{"lat": 51.5, "lon": -0.12}]),
            create_mock_response(json_data={"alerts": [{
                "event": "Flood Warning", "start": 1717200000, "end": 1717286400,
                "description": "River levels rising", "sender_name": "Met Office",
            }]}),
        ]

        report = client.alerts("London")

        assert report.has_alerts
        assert report.alerts[0].event == "Flood Warning"
        assert report.alerts[0].sender == "Met Office"
        assert report.note is None
        onecall_params = mock_session.get.call_args.kwargs["params"]
        assert (onecall_params["lat"], onecall_params["lon"]) == (51.5, -0.12)
        assert onecall_params["exclude"] == "minutely,hourly,daily"

    def test_no_alerts_key(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.side_effect = [
            create_mock_response(json_data=[{"lat": 1.0, "lon": 2.0}]),
            create_mock_response(json_data={"current": {}}),
        ]
        report = client.alerts("London")
        assert not report.has_alerts
        assert report.note is None

    def test_subscription_missing_degrades(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.side_effect = [
            create_mock_response(json_data=[{"lat": 1.0, "lon": 2.0}]),
            create_mock_response(status=401, reason="Unauthorized"),
        ]
        report = client.alerts("London")
        assert report.alerts == []
        assert report.note == ALERTS_UNAVAILABLE_NOTE

    def test_unknown_location_degrades(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.return_value = create_mock_response(json_data=[])
        report = client.alerts("Atlantis")
        assert report.location == "Atlantis"
        assert report.note == ALERTS_UNAVAILABLE_NOTE

    def test_coordinates_unknown_location(self, client: WeatherClient, mock_session: MagicMock) -> None:
        mock_session.get.return_value = create_mock_response(json_data=[])
        with pytest.raises(LocationNotFound, match="Location not found: Atlantis"):
            client.coordinates("Atlantis")
