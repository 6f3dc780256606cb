"""Index quote collector"""

from prometheus_client.metrics_core import Metric

from ..cache import MetricCache
from ..upstream import Reading
from .base import GaugeSpec, MetricCollector


class QuoteCollector(MetricCollector):
    source_id = "quote"

    LAST_PRICE = GaugeSpec(
        "msci_world_last_price",
        "The last recorded price of MSCI World Index from CNBC",
    )
    gauges = (LAST_PRICE,)

    def __init__(self, cache: MetricCache[Reading]):
        self._cache = cache

    def _collect(self) -> list[Metric]:
        last_price = self.LAST_PRICE.family()
        reading = self._cache.read()
        if reading is not None:
            last_price.add_metric([], reading.value)
        return [last_price]
