"""Hue temperature collector"""

from collections.abc import Iterable
from typing import Optional

from prometheus_client.metrics_core import Metric

from ..cache import MetricCache
from ..hue import HueClient
from ..labels import LabelMapping
from ..upstream import Reading
from .base import GaugeSpec, MetricCollector

CENTI_DEGREES_PER_DEGREE = 100.0


def centi_to_celsius(raw: float) -> float:
    """Convert a raw bridge reading (hundredths of a degree) to degrees Celsius."""
    return raw / CENTI_DEGREES_PER_DEGREE


class HueTemperatureCollector(MetricCollector):
    """
    Exposes Hue temperature sensors, one series per sensor.

    Works in two modes:
    - direct (``client``): fetches from the bridge on every scrape; a failed
      fetch only drops the Hue series from that scrape
    - cached (``cache``): renders whatever the refresh loop stored last
    """

    source_id = "hue"

    TEMPERATURE = GaugeSpec(
        "hue_temperature",
        "Current temperature readings from Hue sensors in degrees Celsius",
        ("sensor_name", "room"),
    )
    LAST_UPDATED = GaugeSpec(
        "hue_temperature_last_updated_timestamp_seconds",
        "Time the Hue bridge last received a temperature from the sensor",
        ("sensor_name", "room"),
    )
    gauges = (TEMPERATURE, LAST_UPDATED)

    def __init__(
        self,
        labels: LabelMapping,
        client: Optional[HueClient] = None,
        cache: Optional[MetricCache[tuple[Reading, ...]]] = None,
    ):
        if (client is None) == (cache is None):
            raise ValueError("Exactly one of client or cache must be given")
        self._labels = labels
        self._client = client
        self._cache = cache

    @property
    def is_direct(self) -> bool:
        return self._client is not None

    def _collect(self) -> list[Metric]:
        if self._client is not None:
            readings = self._client.fetch_temperatures()
        else:
            readings = self._cache.read() or ()
        return self.render(readings)

    def render(self, readings: Iterable[Reading]) -> list[Metric]:
        temperature = self.TEMPERATURE.family()
        last_updated = self.LAST_UPDATED.family()

        # Sensors sharing a name and room would collide; the highest bridge id wins
        series: dict[tuple[str, str], Reading] = {}
        for reading in sorted(readings, key=_bridge_order):
            room = self._labels.resolve(reading.name, reading.sensor_id)
            series[(reading.name, room)] = reading

        for label_values, reading in series.items():
            temperature.add_metric(list(label_values), centi_to_celsius(reading.value))
            if reading.timestamp is not None:
                last_updated.add_metric(list(label_values), reading.timestamp.timestamp())

        return [temperature, last_updated]


def _bridge_order(reading: Reading) -> tuple[int, str]:
    # Bridge ids are numeric strings; order "10" after "9"
    sensor_id = reading.sensor_id
    return (int(sensor_id), "") if sensor_id.isdigit() else (-1, sensor_id)
