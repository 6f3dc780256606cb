"""Configuration loading and validation"""

import logging
import math
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from .exceptions import ConfigError
from .labels import LabelMapping
from .quote import CNBC_MSCI_WORLD_URL, LAST_PRICE_CLASS
from .weather import OPEN_METEO_URL

logger = logging.getLogger(__name__)

# Default config search paths (in order)
CONFIG_PATHS = [
    Path("config.yaml"),
    Path.home() / ".config" / "hue-exporter" / "config.yaml",
    Path("/etc/hue-exporter/config.yaml"),
]

DEFAULT_REFRESH_INTERVAL = 300.0
DEFAULT_UPSTREAM_TIMEOUT = 10.0

HUE_MODES = ("direct", "cached")
# Levels accepted by both setup_logging and uvicorn
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"(?:{_DURATION_PART})+")
_DURATION_PART_RE = re.compile(_DURATION_PART)


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Parse a duration into seconds.

    Accepts Go-style duration strings ("300ms", "1.5h", "1h30m", "45s")
    and bare numbers, which are taken as seconds.

    Raises:
        ConfigError: If the value is not a duration
    """
    if isinstance(value, bool):
        raise ConfigError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = str(value).strip()
        sign = 1.0
        if text[:1] in ("+", "-"):
            sign = -1.0 if text[0] == "-" else 1.0
            text = text[1:]
        if text == "0":
            return 0.0
        if _DURATION_RE.fullmatch(text):
            seconds = sign * sum(
                float(amount) * _DURATION_UNITS[unit]
                for amount, unit in _DURATION_PART_RE.findall(text)
            )
        else:
            try:
                seconds = sign * float(text)
            except ValueError:
                raise ConfigError(f"Invalid duration: {value!r}") from None

    if not math.isfinite(seconds):
        raise ConfigError(f"Invalid duration: {value!r}")
    return seconds


@dataclass
class HueConfig:
    enabled: bool = True
    bridge_ip: str = ""
    api_key: str = ""
    labels: dict = field(default_factory=dict)  # sensor name or bridge id -> room
    mode: str = "direct"  # "direct" fetches on every scrape, "cached" refreshes in background
    refresh_interval: Optional[float] = None  # cached mode only; defaults to Config.refresh_interval


@dataclass
class WeatherConfig:
    enabled: bool = True
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    url: str = OPEN_METEO_URL
    refresh_interval: Optional[float] = None


@dataclass
class QuoteConfig:
    enabled: bool = True
    url: str = CNBC_MSCI_WORLD_URL
    tag: str = "span"
    css_class: str = LAST_PRICE_CLASS
    refresh_interval: Optional[float] = None


@dataclass
class WebConfig:
    host: str = "0.0.0.0"
    port: int = 8000


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str = ""


@dataclass
class Config:
    hue: HueConfig = field(default_factory=HueConfig)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    quote: QuoteConfig = field(default_factory=QuoteConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    upstream_timeout: float = DEFAULT_UPSTREAM_TIMEOUT

    def interval_for(self, source: Union[HueConfig, WeatherConfig, QuoteConfig]) -> float:
        """Refresh interval of a source, falling back to the global interval"""
        if source.refresh_interval is None:
            return self.refresh_interval
        return source.refresh_interval

    def label_mapping(self) -> LabelMapping:
        return LabelMapping.from_dict(self.hue.labels)


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations"""
    for path in CONFIG_PATHS:
        if path.exists():
            return path
    return None


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def _to_float(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None


def _to_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def _optional_duration(value: Any) -> Optional[float]:
    return None if value is None else parse_duration(value)


def _from_mapping(data: Mapping[str, Any]) -> Config:
    """Build a Config from a parsed YAML document"""
    try:
        hue_data = dict(data.get("hue") or {})
        weather_data = dict(data.get("weather") or {})
        quote_data = dict(data.get("quote") or {})

        hue_data["refresh_interval"] = _optional_duration(hue_data.get("refresh_interval"))
        hue_data["labels"] = LabelMapping.from_dict(hue_data.get("labels") or {}).as_dict()
        weather_data["refresh_interval"] = _optional_duration(weather_data.get("refresh_interval"))
        quote_data["refresh_interval"] = _optional_duration(quote_data.get("refresh_interval"))
        for key in ("latitude", "longitude"):
            if weather_data.get(key) is not None:
                weather_data[key] = _to_float(f"weather.{key}", weather_data[key])

        return Config(
            hue=HueConfig(**hue_data),
            weather=WeatherConfig(**weather_data),
            quote=QuoteConfig(**quote_data),
            web=WebConfig(**(data.get("web") or {})),
            logging=LoggingConfig(**(data.get("logging") or {})),
            refresh_interval=parse_duration(data.get("refresh_interval", DEFAULT_REFRESH_INTERVAL)),
            upstream_timeout=parse_duration(data.get("upstream_timeout", DEFAULT_UPSTREAM_TIMEOUT)),
        )
    except TypeError as e:
        # Unknown keys in a section
        raise ConfigError(f"Invalid config file: {e}") from e


def apply_environment(config: Config, environ: Mapping[str, str]) -> Config:
    """Override config values with environment variables (set and non-empty only)"""

    def get(key: str) -> Optional[str]:
        value = environ.get(key)
        return value if value not in (None, "") else None

    if (value := get("HUE_ENABLED")) is not None:
        config.hue.enabled = _env_bool(value)
    if (value := get("HUE_BRIDGE_IP")) is not None:
        config.hue.bridge_ip = value
    if (value := get("HUE_API_KEY")) is not None:
        config.hue.api_key = value
    if (value := get("HUE_LABELS")) is not None:
        config.hue.labels = LabelMapping.from_json(value).as_dict()
    if (value := get("HUE_MODE")) is not None:
        config.hue.mode = value.strip().lower()
    if (value := get("HUE_REFRESH_INTERVAL")) is not None:
        config.hue.refresh_interval = parse_duration(value)

    if (value := get("WEATHER_ENABLED")) is not None:
        config.weather.enabled = _env_bool(value)
    if (value := get("WEATHER_LATITUDE")) is not None:
        config.weather.latitude = _to_float("WEATHER_LATITUDE", value)
    if (value := get("WEATHER_LONGITUDE")) is not None:
        config.weather.longitude = _to_float("WEATHER_LONGITUDE", value)
    if (value := get("WEATHER_URL")) is not None:
        config.weather.url = value
    if (value := get("WEATHER_REFRESH_INTERVAL")) is not None:
        config.weather.refresh_interval = parse_duration(value)

    if (value := get("QUOTE_ENABLED")) is not None:
        config.quote.enabled = _env_bool(value)
    if (value := get("QUOTE_URL")) is not None:
        config.quote.url = value
    if (value := get("QUOTE_REFRESH_INTERVAL")) is not None:
        config.quote.refresh_interval = parse_duration(value)

    if (value := get("REFRESH_INTERVAL")) is not None:
        config.refresh_interval = parse_duration(value)
    if (value := get("UPSTREAM_TIMEOUT")) is not None:
        config.upstream_timeout = parse_duration(value)
    if (value := get("EXPORTER_HOST")) is not None:
        config.web.host = value
    if (value := get("EXPORTER_PORT")) is not None:
        config.web.port = _to_int("EXPORTER_PORT", value)
    if (value := get("LOG_LEVEL")) is not None:
        config.logging.level = value.upper()
    if (value := get("LOG_FILE")) is not None:
        config.logging.file = value

    return config


def validate_config(config: Config) -> None:
    """
    Check the configuration for every problem at once.

    Raises:
        ConfigError: Listing all problems found
    """
    errors: list[str] = []

    if config.hue.enabled:
        if not config.hue.bridge_ip:
            errors.append("HUE_BRIDGE_IP must be set when the Hue source is enabled")
        if not config.hue.api_key:
            errors.append("HUE_API_KEY must be set when the Hue source is enabled")
        if config.hue.mode not in HUE_MODES:
            errors.append(f"HUE_MODE must be one of {', '.join(HUE_MODES)}, got {config.hue.mode!r}")

    if config.weather.enabled:
        latitude, longitude = config.weather.latitude, config.weather.longitude
        if latitude is None or longitude is None:
            errors.append(
                "WEATHER_LATITUDE and WEATHER_LONGITUDE must be set when weather is enabled"
                " (set WEATHER_ENABLED=false to disable it)"
            )
        else:
            if not -90 <= latitude <= 90:
                errors.append(f"WEATHER_LATITUDE must be between -90 and 90, got {latitude}")
            if not -180 <= longitude <= 180:
                errors.append(f"WEATHER_LONGITUDE must be between -180 and 180, got {longitude}")

    intervals = {
        "REFRESH_INTERVAL": config.refresh_interval,
        "HUE_REFRESH_INTERVAL": config.hue.refresh_interval,
        "WEATHER_REFRESH_INTERVAL": config.weather.refresh_interval,
        "QUOTE_REFRESH_INTERVAL": config.quote.refresh_interval,
        "UPSTREAM_TIMEOUT": config.upstream_timeout,
    }
    for name, seconds in intervals.items():
        if seconds is not None and seconds <= 0:
            errors.append(f"{name} must be > 0, got {seconds}")

    if not 1 <= config.web.port <= 65535:
        errors.append(f"EXPORTER_PORT must be between 1 and 65535, got {config.web.port}")

    if str(config.logging.level).upper() not in LOG_LEVELS:
        errors.append(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {config.logging.level!r}")

    if errors:
        raise ConfigError("Configuration errors:\n  " + "\n  ".join(errors))


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """
    Load configuration from an optional YAML file plus environment overrides.

    Args:
        config_path: Explicit config file (default: search CONFIG_PATHS)
        environ: Environment to read overrides from (default: os.environ)

    Raises:
        ConfigError: If a value cannot be parsed or a required value is missing
    """
    path = Path(config_path) if config_path else find_config_file()

    if path is None or not path.exists():
        logger.info("No config file found, using defaults and environment")
        config = Config()
    else:
        logger.info(f"Loading config from: {path}")
        with open(path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Cannot parse {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a YAML mapping")
        config = _from_mapping(data)

    config = apply_environment(config, os.environ if environ is None else environ)
    validate_config(config)
    return config
