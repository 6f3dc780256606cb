"""Current weather collector"""

from prometheus_client.metrics_core import Metric

from ..cache import MetricCache
from ..upstream import Reading
from .base import GaugeSpec, MetricCollector


class WeatherCollector(MetricCollector):
    """Exposes the cached current temperature; nothing until the first refresh."""

    source_id = "weather"

    TEMPERATURE = GaugeSpec(
        "weather_temperature",
        "Current outside temperature from Open-Meteo in degrees Celsius",
        ("latitude", "longitude"),
    )
    WIND_SPEED = GaugeSpec(
        "weather_windspeed",
        "Current wind speed from Open-Meteo in km/h",
        ("latitude", "longitude"),
    )
    gauges = (TEMPERATURE, WIND_SPEED)

    def __init__(self, cache: MetricCache[Reading], latitude: float, longitude: float):
        self._cache = cache
        self._label_values = [str(latitude), str(longitude)]

    def _collect(self) -> list[Metric]:
        temperature = self.TEMPERATURE.family()
        wind_speed = self.WIND_SPEED.family()

        reading = self._cache.read()
        if reading is not None:
            temperature.add_metric(self._label_values, reading.value)
            if "windspeed" in reading.metadata:
                wind_speed.add_metric(self._label_values, reading.metadata["windspeed"])

        return [temperature, wind_speed]
