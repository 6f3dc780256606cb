"""Tests for the command-line entry point"""

import pytest

from hue_exporter import __version__
from hue_exporter.cli import async_main, build_parser

ENV_VARS = [
    "HUE_BRIDGE_IP",
    "HUE_API_KEY",
    "HUE_LABELS",
    "WEATHER_LATITUDE",
    "WEATHER_LONGITUDE",
    "REFRESH_INTERVAL",
    "LOG_LEVEL",
    "WEATHER_ENABLED",
    "QUOTE_ENABLED",
    "HUE_ENABLED",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    # Keep pytest's capture handler on the root logger
    monkeypatch.setattr("hue_exporter.log.setup_logging", lambda *args, **kwargs: None)
    return tmp_path


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.config is None
        assert args.port is None
        assert args.verbose is False

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_help_explains_source_toggles(self):
        help_text = build_parser().format_help()
        for toggle in ("HUE_ENABLED=false", "WEATHER_ENABLED=false", "QUOTE_ENABLED=false"):
            assert toggle in help_text


class TestStartup:
    async def test_missing_configuration_exits_non_zero(self, clean_env, caplog):
        exit_code = await async_main(["-c", str(clean_env / "missing.yaml")])

        assert exit_code == 1
        assert "HUE_BRIDGE_IP" in caplog.text

    async def test_invalid_duration_exits_non_zero(self, clean_env, monkeypatch):
        monkeypatch.setenv("REFRESH_INTERVAL", "every now and then")
        assert await async_main(["-c", str(clean_env / "missing.yaml")]) == 1

    async def test_log_level_unknown_to_server_exits_non_zero(self, clean_env, monkeypatch, caplog):
        for source in ("HUE", "WEATHER", "QUOTE"):
            monkeypatch.setenv(f"{source}_ENABLED", "false")
        monkeypatch.setenv("LOG_LEVEL", "WARN")

        assert await async_main(["-c", str(clean_env / "missing.yaml")]) == 1
        assert "LOG_LEVEL" in caplog.text
