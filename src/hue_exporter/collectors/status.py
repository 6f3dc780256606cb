"""Exporter self-metrics: health of each background refresh loop"""

from collections.abc import Sequence

from prometheus_client.metrics_core import Metric

from ..refresh import RefreshLoop
from .base import GaugeSpec, MetricCollector


class RefreshStatusCollector(MetricCollector):
    source_id = "exporter"

    UP = GaugeSpec(
        "exporter_source_up",
        "Whether the last refresh of the source succeeded (1) or failed (0)",
        ("source",),
    )
    LAST_SUCCESS = GaugeSpec(
        "exporter_source_last_success_timestamp_seconds",
        "Time of the last successful refresh of the source",
        ("source",),
    )
    CONSECUTIVE_FAILURES = GaugeSpec(
        "exporter_source_consecutive_failures",
        "Number of refreshes of the source that failed since the last success",
        ("source",),
    )
    gauges = (UP, LAST_SUCCESS, CONSECUTIVE_FAILURES)

    def __init__(self, loops: Sequence[RefreshLoop]):
        self._loops = list(loops)

    def _collect(self) -> list[Metric]:
        up = self.UP.family()
        last_success = self.LAST_SUCCESS.family()
        consecutive_failures = self.CONSECUTIVE_FAILURES.family()

        for loop in self._loops:
            status = loop.status()
            if status.up is None:
                continue
            up.add_metric([status.name], 1.0 if status.up else 0.0)
            consecutive_failures.add_metric([status.name], status.consecutive_failures)
            if status.last_success is not None:
                last_success.add_metric([status.name], status.last_success)

        return [up, last_success, consecutive_failures]
