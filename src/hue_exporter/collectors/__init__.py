"""
Metric collectors for hue-exporter.

Each collector renders one data source into Prometheus gauges, either from
its MetricCache or, for direct sources, by fetching on the scrape path.
"""

from .base import GaugeSpec, MetricCollector
from .hue import HueTemperatureCollector, centi_to_celsius
from .quote import QuoteCollector
from .status import RefreshStatusCollector
from .weather import WeatherCollector

__all__ = [
    "GaugeSpec",
    "MetricCollector",
    "HueTemperatureCollector",
    "QuoteCollector",
    "RefreshStatusCollector",
    "WeatherCollector",
    "centi_to_celsius",
]
