"""
Base interface for all metric collectors.

A collector implements the prometheus_client collector protocol:
describe() enumerates the metric families it exposes without any I/O, and
collect() produces the current observations on every scrape. A collector
that fails contributes nothing to the scrape; the other collectors and the
response itself are unaffected.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from prometheus_client.metrics_core import GaugeMetricFamily, Metric

from ..exceptions import UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GaugeSpec:
    """Name, help text and label names of one gauge family."""

    name: str
    documentation: str
    labels: tuple[str, ...] = ()

    def family(self) -> GaugeMetricFamily:
        """Create an empty family for this gauge."""
        return GaugeMetricFamily(self.name, self.documentation, labels=list(self.labels))


class MetricCollector(ABC):
    """
    Abstract base class for all collectors.

    Subclasses list their gauges in ``gauges`` and implement _collect().
    """

    source_id: str = "collector"
    gauges: Sequence[GaugeSpec] = ()

    def describe(self) -> list[Metric]:
        """Enumerate metric descriptors. Never touches the network."""
        return [gauge.family() for gauge in self.gauges]

    def collect(self) -> list[Metric]:
        """Produce current observations, or nothing if this collector fails."""
        try:
            return list(self._collect())
        except UpstreamError as e:
            logger.warning(f"Collector {self.source_id} skipped for this scrape: {e}")
        except Exception as e:
            logger.error(f"Unexpected error in collector {self.source_id}: {e}", exc_info=True)
        return []

    @abstractmethod
    def _collect(self) -> Sequence[Metric]:
        """
        Build populated metric families.

        Raises:
            UpstreamError: If a synchronous fetch fails
        """
