"""Proxy calls to the OpenWeatherMap forecast API."""

import logging
from typing import Any, Dict, Optional

import requests

from .exceptions import WeatherError

logger = logging.getLogger(__name__)

FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"
DEFAULT_TIMEOUT = 20


def fetch_forecast(
    city: str,
    api_key: Optional[str],
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Dict[str, Any]:
    """
    Fetch the raw 5-day forecast for a city.

    Raises WeatherError with the upstream status and message when the
    provider rejects the request, or 500 when it can't be reached.
    """
    if not api_key:
        raise WeatherError(500, "OpenWeatherMap API key is not configured.")
    if not city:
        raise WeatherError(400, "City name is required.")

    params = {"q": city, "appid": api_key, "units": "metric", "lang": "pt_br"}
    http = session or requests
    logger.info("Fetching forecast for: %s", city)
    try:
        r = http.get(FORECAST_URL, params=params, timeout=timeout)
        r.raise_for_status()
        return r.json()
    except requests.HTTPError as e:
        response = e.response
        status = response.status_code if response is not None else 500
        message = "Error fetching weather forecast."
        try:
            message = response.json().get("message") or message
        except (ValueError, AttributeError):
            pass
        logger.error("Forecast request failed (%s): %s", status, message)
        raise WeatherError(status, message) from e
    except requests.RequestException as e:
        logger.error("Forecast request failed: %s", e)
        raise WeatherError(500, "Error fetching weather forecast.") from e
