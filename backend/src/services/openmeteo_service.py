"""Open-Meteo forecast client for multi-point, elevation-aware hourly data."""

import logging
import time
from collections.abc import Sequence
from typing import Any

import requests

from models.provider import HourlySeries, PointResponse
from utils.constants import OPENMETEO_URL, REQUEST_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


# Retry configuration for API calls
MAX_RETRIES = 3
RETRY_DELAYS = [1, 2, 4]  # Exponential backoff: 1s, 2s, 4s
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
DEFAULT_INTERVAL_SECONDS = 3600


def _is_retryable_error(exception: Exception) -> bool:
    """Check if an exception is retryable."""
    if isinstance(exception, requests.exceptions.Timeout):
        return True
    if isinstance(exception, requests.exceptions.ConnectionError):
        return True
    if isinstance(exception, requests.exceptions.HTTPError):
        response = exception.response
        if response is not None and response.status_code in RETRYABLE_STATUS_CODES:
            return True
    return False


def _request_with_retry(
    method: str,
    url: str,
    **kwargs,
) -> requests.Response:
    """Make an HTTP request with retry logic and exponential backoff.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: Request URL
        **kwargs: Additional arguments passed to requests

    Returns:
        Response object

    Raises:
        requests.exceptions.RequestException: If all retries fail
    """
    for attempt in range(MAX_RETRIES):
        try:
            response = requests.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            if not _is_retryable_error(e) or attempt == MAX_RETRIES - 1:
                raise

            delay = RETRY_DELAYS[attempt]
            logger.warning(
                f"Request to {url} failed (attempt {attempt + 1}/{MAX_RETRIES}): {e}. "
                f"Retrying in {delay}s..."
            )
            time.sleep(delay)

    raise requests.exceptions.RetryError(f"No attempts made for {url}")


def _join(values: Sequence[float]) -> str:
    return ",".join(str(v) for v in values)


def parse_point_response(
    raw: dict[str, Any], hourly_variables: Sequence[str]
) -> PointResponse:
    """Convert one location object of the JSON response into a PointResponse.

    Value lists are ordered like the requested hourly variables.
    """
    hourly_raw = raw.get("hourly") or {}
    times = hourly_raw.get("time") or []

    hourly = None
    if times:
        interval = (
            int(times[1]) - int(times[0]) if len(times) > 1 else DEFAULT_INTERVAL_SECONDS
        )
        hourly = HourlySeries(
            time=int(times[0]),
            time_end=int(times[-1]) + interval,
            interval=interval,
            variables=[list(hourly_raw.get(name) or []) for name in hourly_variables],
        )

    return PointResponse(
        latitude=raw.get("latitude", 0.0),
        longitude=raw.get("longitude", 0.0),
        elevation=raw.get("elevation"),
        utc_offset_seconds=raw.get("utc_offset_seconds", 0),
        hourly=hourly,
    )


class OpenMeteoService:
    """Client for the Open-Meteo forecast API.

    One call fetches hourly series for many points at once. Points are
    returned in request order.
    """

    def __init__(
        self,
        base_url: str = OPENMETEO_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self.base_url = base_url
        self.timeout = timeout

    def fetch_points(
        self,
        latitudes: Sequence[float],
        longitudes: Sequence[float],
        hourly: Sequence[str],
        model: str,
        forecast_days: int,
        elevations: Sequence[float] | None = None,
    ) -> list[PointResponse]:
        """Fetch hourly forecasts for a list of points.

        Args:
            latitudes: Point latitudes
            longitudes: Point longitudes, same length as latitudes
            hourly: Hourly variable names; value lists come back in this order
            model: Forecast model (e.g. 'gfs_seamless', 'best_match')
            forecast_days: Forecast horizon in days
            elevations: Optional per-point elevation in meters for downscaling

        Returns:
            One PointResponse per requested point, in request order.

        Raises:
            requests.exceptions.RequestException: On transport or HTTP failure
            ValueError: If the response does not match the request
        """
        if len(latitudes) != len(longitudes):
            raise ValueError("latitudes and longitudes must have the same length")
        if elevations is not None and len(elevations) != len(latitudes):
            raise ValueError("elevations must match the number of points")
        if not latitudes:
            return []

        params = {
            "latitude": _join(latitudes),
            "longitude": _join(longitudes),
            "hourly": ",".join(hourly),
            "models": model,
            "forecast_days": forecast_days,
            "timezone": "auto",
            "timeformat": "unixtime",
        }
        if elevations is not None:
            params["elevation"] = _join(elevations)

        response = _request_with_retry(
            "GET", self.base_url, params=params, timeout=self.timeout
        )
        data = response.json()

        # A single point comes back as an object, several as a list
        if isinstance(data, dict):
            if data.get("error"):
                raise ValueError(f"Open-Meteo error: {data.get('reason', data)}")
            data = [data]

        if len(data) != len(latitudes):
            raise ValueError(
                f"Open-Meteo returned {len(data)} points for {len(latitudes)} requested"
            )

        return [parse_point_response(item, hourly) for item in data]
