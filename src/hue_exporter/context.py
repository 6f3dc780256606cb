"""
Application context for dependency injection.

The context owns every long-lived component: the configuration, the
upstream clients, one MetricCache and RefreshLoop per cached source, the
collectors and the CollectorRegistry they are registered with. The registry
is created here rather than using prometheus_client's global default, and is
handed to the web app explicitly.

Usage:
    config = load_config()
    context = AppContext.create(config)
    await context.start()
    app = create_app(context)
    ...
    await context.shutdown()
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx
from prometheus_client import CollectorRegistry

from .cache import MetricCache
from .collectors import (
    HueTemperatureCollector,
    MetricCollector,
    QuoteCollector,
    RefreshStatusCollector,
    WeatherCollector,
)
from .config import Config, validate_config
from .hue import HueClient
from .quote import QuoteScraper
from .refresh import RefreshLoop
from .upstream import HTTPUpstreamClient
from .weather import WeatherClient

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """
    Application context containing all shared dependencies.

    Attributes:
        config: Application configuration
        registry: Registry serialised by the /metrics endpoint
        clients: Upstream clients, closed on shutdown
        caches: MetricCache per cached source, keyed by source id
        loops: RefreshLoop per cached source
        collectors: Collectors registered with ``registry``
    """

    config: Config
    registry: CollectorRegistry
    clients: list[HTTPUpstreamClient] = field(default_factory=list)
    caches: dict[str, MetricCache] = field(default_factory=dict)
    loops: list[RefreshLoop] = field(default_factory=list)
    collectors: list[MetricCollector] = field(default_factory=list)
    _started: bool = field(default=False, repr=False)

    @classmethod
    def create(
        cls,
        config: Config,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "AppContext":
        """
        Wire clients, caches, loops and collectors for every enabled source.

        Nothing is started and no request is made.

        Args:
            config: Validated application configuration
            transport: Optional httpx transport shared by all upstream clients

        Raises:
            ConfigError: If an enabled source is missing required settings
        """
        validate_config(config)
        context = cls(config=config, registry=CollectorRegistry(auto_describe=True))
        timeout = config.upstream_timeout

        if config.hue.enabled:
            client = HueClient(
                config.hue.bridge_ip,
                config.hue.api_key,
                timeout=timeout,
                transport=transport,
            )
            context.clients.append(client)
            labels = config.label_mapping()
            if config.hue.mode == "cached":
                cache = context._add_loop("hue", client.fetch_temperatures, config.interval_for(config.hue))
                context._add_collector(HueTemperatureCollector(labels, cache=cache))
            else:
                context._add_collector(HueTemperatureCollector(labels, client=client))

        if config.weather.enabled:
            client = WeatherClient(
                config.weather.latitude,
                config.weather.longitude,
                base_url=config.weather.url,
                timeout=timeout,
                transport=transport,
            )
            context.clients.append(client)
            cache = context._add_loop("weather", client.fetch_current, config.interval_for(config.weather))
            context._add_collector(
                WeatherCollector(cache, config.weather.latitude, config.weather.longitude)
            )

        if config.quote.enabled:
            client = QuoteScraper(
                config.quote.url,
                tag=config.quote.tag,
                css_class=config.quote.css_class,
                timeout=timeout,
                transport=transport,
            )
            context.clients.append(client)
            cache = context._add_loop("quote", client.fetch_price, config.interval_for(config.quote))
            context._add_collector(QuoteCollector(cache))

        context._add_collector(RefreshStatusCollector(context.loops))

        logger.debug(
            f"Created AppContext with {len(context.collectors)} collector(s) "
            f"and {len(context.loops)} refresh loop(s)"
        )
        return context

    def _add_loop(self, name, fetch, interval: float) -> MetricCache:
        cache = MetricCache(name)
        self.caches[name] = cache
        self.loops.append(RefreshLoop(name, fetch, cache, interval))
        return cache

    def _add_collector(self, collector: MetricCollector) -> None:
        self.registry.register(collector)
        self.collectors.append(collector)

    async def start(self) -> None:
        """Start every refresh loop. Each loop fetches once immediately."""
        if self._started:
            logger.warning("AppContext already started, ignoring start() call")
            return

        for loop in self.loops:
            loop.start()
        self._started = True
        logger.info(f"AppContext started: {len(self.loops)} refresh loop(s) running")

    async def shutdown(self) -> None:
        """
        Stop the refresh loops and close the upstream clients.

        Safe to call multiple times or before start().
        """
        for loop in self.loops:
            await loop.stop()

        for client in self.clients:
            try:
                client.close()
            except Exception as e:
                logger.error(f"Error closing {client.source_id} client: {e}")

        if self._started:
            logger.info("AppContext shutdown complete")
        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    def get_loop(self, name: str) -> Optional[RefreshLoop]:
        for loop in self.loops:
            if loop.name == name:
                return loop
        return None

    def __repr__(self) -> str:
        return (
            f"AppContext(started={self._started}, "
            f"collectors={[c.source_id for c in self.collectors]}, "
            f"loops={[loop.name for loop in self.loops]})"
        )
