"""Hue bridge sensor API client"""

from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from .exceptions import ConfigError, UpstreamDecodeError
from .log import get_structured_logger
from .upstream import DEFAULT_TIMEOUT, HTTPUpstreamClient, Reading

logger = get_structured_logger(__name__, component="hue")

TEMPERATURE_SENSOR_TYPE = "ZLLTemperature"
CENTI_CELSIUS = "cC"


def parse_last_updated(value: Any) -> Optional[datetime]:
    """
    Parse the bridge's ``state.lastupdated`` field.

    The bridge reports UTC times without an offset (``2024-01-31T18:04:11``)
    and the literal string ``"none"`` for sensors that never reported.
    """
    if not isinstance(value, str) or value.lower() == "none":
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class HueClient(HTTPUpstreamClient):
    """
    Fetches temperature sensors from a Hue bridge.

    The ``/sensors`` endpoint returns a mapping of bridge ids to heterogeneous
    records (switches, motion, light level, temperature...). Only records with
    the ``ZLLTemperature`` type are turned into readings.
    """

    source_id = "hue"

    def __init__(
        self,
        bridge_ip: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if not bridge_ip or not api_key:
            raise ConfigError("HUE_BRIDGE_IP and HUE_API_KEY must both be set")
        super().__init__(timeout=timeout, client=client, transport=transport)
        self.bridge_ip = bridge_ip.rstrip("/")
        self._api_key = api_key
        logger.info("Initialized Hue client", bridge=self.bridge_ip)

    @property
    def sensors_url(self) -> str:
        host = self.bridge_ip
        if "://" not in host:
            host = f"http://{host}"
        return f"{host}/api/{self._api_key}/sensors"

    def fetch_temperatures(self) -> tuple[Reading, ...]:
        """
        Fetch all temperature sensors from the bridge.

        Returns:
            Readings with the raw temperature in hundredths of a degree Celsius

        Raises:
            UpstreamError: If the request fails or the body is not a sensor mapping
        """
        data = self._get_json(self.sensors_url)

        if isinstance(data, list):
            # The bridge reports errors (e.g. unauthorized user) as a 200 with an error array
            description = "unexpected list body"
            if data and isinstance(data[0], dict) and isinstance(data[0].get("error"), dict):
                description = data[0]["error"].get("description", "bridge error")
            raise UpstreamDecodeError(self.source_id, description)
        if not isinstance(data, dict):
            raise UpstreamDecodeError(self.source_id, "sensor response is not a mapping")

        readings = []
        for sensor_id, record in data.items():
            if not isinstance(record, dict) or record.get("type") != TEMPERATURE_SENSOR_TYPE:
                continue

            state = record.get("state")
            if not isinstance(state, dict):
                logger.debug("Skipping sensor without state object", sensor_id=sensor_id)
                continue
            temperature = state.get("temperature")
            if isinstance(temperature, bool) or not isinstance(temperature, int):
                logger.debug("Skipping sensor without integer temperature", sensor_id=sensor_id)
                continue

            readings.append(
                Reading(
                    sensor_id=str(sensor_id),
                    name=str(record.get("name", "")),
                    value=temperature,
                    unit=CENTI_CELSIUS,
                    kind=TEMPERATURE_SENSOR_TYPE,
                    timestamp=parse_last_updated(state.get("lastupdated")),
                )
            )

        logger.debug("Fetched Hue temperature sensors", count=len(readings))
        return tuple(readings)
