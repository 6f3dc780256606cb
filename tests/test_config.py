"""Tests for config module"""

import pytest
import yaml

from hue_exporter.config import (
    DEFAULT_REFRESH_INTERVAL,
    Config,
    HueConfig,
    QuoteConfig,
    WeatherConfig,
    apply_environment,
    load_config,
    parse_duration,
    validate_config,
)
from hue_exporter.exceptions import ConfigError

VALID_ENV = {
    "HUE_BRIDGE_IP": "192.168.1.20",
    "HUE_API_KEY": "abcdef",
    "WEATHER_LATITUDE": "52.52",
    "WEATHER_LONGITUDE": "13.41",
}


class TestParseDuration:
    """Test Go-style duration parsing"""

    @pytest.mark.parametrize(
        "text, seconds",
        [
            ("10s", 10.0),
            ("5m", 300.0),
            ("1h30m", 5400.0),
            ("1.5h", 5400.0),
            ("300ms", 0.3),
            ("2m30s", 150.0),
            ("0", 0.0),
            ("45", 45.0),
            (" 15s ", 15.0),
        ],
    )
    def test_valid(self, text, seconds):
        assert parse_duration(text) == pytest.approx(seconds)

    def test_numbers_are_seconds(self):
        assert parse_duration(30) == 30.0
        assert parse_duration(2.5) == 2.5

    def test_negative(self):
        assert parse_duration("-5s") == -5.0

    @pytest.mark.parametrize("text", ["", "abc", "5 minutes", "10x", "m5", "nan", "inf"])
    def test_invalid(self, text):
        with pytest.raises(ConfigError, match="Invalid duration"):
            parse_duration(text)

    def test_bool_rejected(self):
        with pytest.raises(ConfigError):
            parse_duration(True)


class TestConfigDataclasses:
    """Test configuration defaults"""

    def test_defaults(self):
        config = Config()
        assert config.refresh_interval == DEFAULT_REFRESH_INTERVAL
        assert config.upstream_timeout == 10.0
        assert config.web.port == 8000
        assert config.hue.mode == "direct"
        assert config.quote.css_class == "QuoteStrip-lastPrice"

    def test_interval_for_falls_back_to_global(self):
        config = Config(refresh_interval=120.0, weather=WeatherConfig(refresh_interval=30.0))
        assert config.interval_for(config.weather) == 30.0
        assert config.interval_for(config.quote) == 120.0


class TestEnvironment:
    """Test environment overrides"""

    def test_all_values(self):
        env = {
            **VALID_ENV,
            "HUE_LABELS": '{"Kitchen": "Living Room", "7": "Attic"}',
            "HUE_MODE": "Cached",
            "REFRESH_INTERVAL": "1m",
            "WEATHER_REFRESH_INTERVAL": "15m",
            "UPSTREAM_TIMEOUT": "5s",
            "EXPORTER_PORT": "9123",
            "QUOTE_ENABLED": "false",
            "LOG_LEVEL": "debug",
        }
        config = apply_environment(Config(), env)

        assert config.hue.bridge_ip == "192.168.1.20"
        assert config.hue.api_key == "abcdef"
        assert config.hue.labels == {"Kitchen": "Living Room", "7": "Attic"}
        assert config.hue.mode == "cached"
        assert config.weather.latitude == 52.52
        assert config.weather.longitude == 13.41
        assert config.refresh_interval == 60.0
        assert config.weather.refresh_interval == 900.0
        assert config.upstream_timeout == 5.0
        assert config.web.port == 9123
        assert config.quote.enabled is False
        assert config.logging.level == "DEBUG"

    def test_empty_values_are_ignored(self):
        config = apply_environment(Config(), {"HUE_BRIDGE_IP": "", "EXPORTER_PORT": ""})
        assert config.hue.bridge_ip == ""
        assert config.web.port == 8000

    def test_invalid_labels_json(self):
        with pytest.raises(ConfigError, match="not valid JSON"):
            apply_environment(Config(), {"HUE_LABELS": "{Kitchen: Living Room}"})

    def test_invalid_number(self):
        with pytest.raises(ConfigError, match="WEATHER_LATITUDE"):
            apply_environment(Config(), {"WEATHER_LATITUDE": "north"})

    def test_invalid_duration(self):
        with pytest.raises(ConfigError, match="Invalid duration"):
            apply_environment(Config(), {"REFRESH_INTERVAL": "often"})


class TestValidation:
    """Test configuration validation"""

    def test_valid(self):
        validate_config(apply_environment(Config(), VALID_ENV))

    def test_missing_hue_credentials(self):
        config = apply_environment(Config(), {"WEATHER_LATITUDE": "1", "WEATHER_LONGITUDE": "2"})
        with pytest.raises(ConfigError) as exc_info:
            validate_config(config)
        assert "HUE_BRIDGE_IP" in str(exc_info.value)
        assert "HUE_API_KEY" in str(exc_info.value)

    def test_disabled_sources_need_nothing(self):
        config = Config(
            hue=HueConfig(enabled=False),
            weather=WeatherConfig(enabled=False),
            quote=QuoteConfig(enabled=False),
        )
        validate_config(config)

    def test_missing_coordinates(self):
        config = Config(hue=HueConfig(enabled=False))
        with pytest.raises(ConfigError, match="WEATHER_LATITUDE and WEATHER_LONGITUDE") as exc_info:
            validate_config(config)
        assert "WEATHER_ENABLED=false" in str(exc_info.value)

    def test_out_of_range_coordinates(self):
        config = Config(
            hue=HueConfig(enabled=False),
            weather=WeatherConfig(latitude=91.0, longitude=-181.0),
        )
        with pytest.raises(ConfigError) as exc_info:
            validate_config(config)
        assert "between -90 and 90" in str(exc_info.value)
        assert "between -180 and 180" in str(exc_info.value)

    def test_non_positive_interval(self):
        config = apply_environment(Config(), {**VALID_ENV, "REFRESH_INTERVAL": "0s"})
        with pytest.raises(ConfigError, match="REFRESH_INTERVAL must be > 0"):
            validate_config(config)

    def test_bad_mode_and_port(self):
        config = apply_environment(Config(), {**VALID_ENV, "HUE_MODE": "sometimes"})
        config.web.port = 70000
        with pytest.raises(ConfigError) as exc_info:
            validate_config(config)
        assert "HUE_MODE" in str(exc_info.value)
        assert "EXPORTER_PORT" in str(exc_info.value)

    @pytest.mark.parametrize("level", ["WARN", "verbose", "trace"])
    def test_unknown_log_level(self, level):
        config = apply_environment(Config(), {**VALID_ENV, "LOG_LEVEL": level})
        with pytest.raises(ConfigError, match="LOG_LEVEL must be one of"):
            validate_config(config)

    def test_lowercase_log_level_from_yaml(self):
        config = apply_environment(Config(), VALID_ENV)
        config.logging.level = "warning"
        validate_config(config)


class TestConfigLoading:
    """Test configuration loading"""

    def test_load_from_environment_only(self, tmp_path):
        config = load_config(str(tmp_path / "missing.yaml"), environ=VALID_ENV)
        assert config.hue.bridge_ip == "192.168.1.20"
        assert config.weather.latitude == 52.52

    def test_load_missing_required_is_fatal(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "missing.yaml"), environ={})

    def test_load_from_yaml(self, tmp_path):
        config_data = {
            "hue": {
                "bridge_ip": "10.0.0.2",
                "api_key": "yaml-key",
                "labels": {"Kitchen": "Living Room"},
                "mode": "cached",
                "refresh_interval": "30s",
            },
            "weather": {"latitude": "48.85", "longitude": 2.35},
            "quote": {"enabled": False},
            "refresh_interval": "10m",
            "web": {"port": 9200},
        }
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump(config_data))

        config = load_config(str(path), environ={})

        assert config.hue.bridge_ip == "10.0.0.2"
        assert config.hue.labels == {"Kitchen": "Living Room"}
        assert config.hue.refresh_interval == 30.0
        assert config.weather.latitude == 48.85
        assert config.quote.enabled is False
        assert config.refresh_interval == 600.0
        assert config.web.port == 9200

    def test_environment_overrides_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"hue": {"bridge_ip": "10.0.0.2", "api_key": "k"}}))

        config = load_config(str(path), environ={**VALID_ENV, "HUE_BRIDGE_IP": "10.0.0.3"})
        assert config.hue.bridge_ip == "10.0.0.3"

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"hue": {"bridge": "10.0.0.2"}}))
        with pytest.raises(ConfigError, match="Invalid config file"):
            load_config(str(path), environ=VALID_ENV)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="YAML mapping"):
            load_config(str(path), environ=VALID_ENV)
