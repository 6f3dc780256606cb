"""Current weather client using the Open-Meteo forecast API"""

from datetime import datetime, timezone
from typing import Optional

import httpx

from .exceptions import UpstreamDecodeError
from .log import get_structured_logger
from .upstream import DEFAULT_TIMEOUT, HTTPUpstreamClient, Reading

logger = get_structured_logger(__name__, component="weather")

OPEN_METEO_URL = "https://api.open-meteo.com/v1/forecast"


class WeatherClient(HTTPUpstreamClient):
    """
    Fetches the current temperature for a fixed location.

    Open-Meteo needs no API key; the location is given as latitude/longitude.
    """

    source_id = "weather"

    def __init__(
        self,
        latitude: float,
        longitude: float,
        base_url: str = OPEN_METEO_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(timeout=timeout, client=client, transport=transport)
        self.latitude = latitude
        self.longitude = longitude
        self.base_url = base_url
        logger.info("Initialized weather client", latitude=latitude, longitude=longitude)

    def fetch_current(self) -> Reading:
        """
        Fetch the current temperature.

        Returns:
            Reading with the temperature in degrees Celsius

        Raises:
            UpstreamError: If the request fails or the body has no temperature
        """
        data = self._get_json(
            self.base_url,
            params={
                "latitude": self.latitude,
                "longitude": self.longitude,
                "current_weather": "true",
            },
        )

        current = data.get("current_weather") if isinstance(data, dict) else None
        if not isinstance(current, dict):
            raise UpstreamDecodeError(self.source_id, "response has no current_weather object")

        temperature = current.get("temperature")
        if isinstance(temperature, bool) or not isinstance(temperature, (int, float)):
            raise UpstreamDecodeError(self.source_id, f"invalid temperature: {temperature!r}")

        metadata = {}
        if isinstance(current.get("windspeed"), (int, float)):
            metadata["windspeed"] = float(current["windspeed"])
        if isinstance(current.get("time"), str):
            metadata["time"] = current["time"]

        return Reading(
            sensor_id="current",
            name=f"{self.latitude},{self.longitude}",
            value=float(temperature),
            unit="°C",
            timestamp=_parse_time(current.get("time")),
            metadata=metadata,
        )


def _parse_time(value: object) -> Optional[datetime]:
    # Open-Meteo returns GMT times like "2024-01-31T18:00" unless a timezone is requested
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)
    except ValueError:
        return None
