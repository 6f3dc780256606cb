"""Command-line interface for hue-exporter"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from hue_exporter import __version__

logger = logging.getLogger(__name__)

SOURCES_HELP = """\
sources:
  All three sources are enabled by default and each needs its own settings:
    hue      HUE_BRIDGE_IP, HUE_API_KEY (optional HUE_LABELS, HUE_MODE)
    weather  WEATHER_LATITUDE, WEATHER_LONGITUDE
    quote    none (scrapes QUOTE_URL, default the CNBC MSCI World page)
  Disable a source with HUE_ENABLED=false, WEATHER_ENABLED=false or
  QUOTE_ENABLED=false. A Hue-only exporter needs WEATHER_ENABLED=false and
  QUOTE_ENABLED=false.
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hue-exporter",
        description="Export Hue temperature sensors, current weather and the MSCI World quote to Prometheus",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=SOURCES_HELP,
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        help="Path to config file (default: auto-detect)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--host",
        type=str,
        help="Host for the metrics server (default: EXPORTER_HOST or 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port for the metrics server (default: EXPORTER_PORT or 8000)",
    )
    return parser


async def async_main(argv: Optional[list[str]] = None) -> int:
    """Async main entry point"""
    args = build_parser().parse_args(argv)

    import uvicorn

    from hue_exporter.config import load_config
    from hue_exporter.context import AppContext
    from hue_exporter.exceptions import ConfigError
    from hue_exporter.log import setup_logging
    from hue_exporter.web.app import create_app

    # Log config errors even before the configured handlers exist
    setup_logging("DEBUG" if args.verbose else "INFO")

    try:
        config = load_config(args.config)
        if args.host:
            config.web.host = args.host
        if args.port:
            config.web.port = args.port
        log_level = "DEBUG" if args.verbose else config.logging.level
        setup_logging(log_level, config.logging.file or None)
        context = AppContext.create(config)
    except ConfigError as e:
        logger.critical(str(e))
        return 1

    logger.info(f"Starting hue-exporter {__version__}")
    await context.start()

    app = create_app(context)
    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.web.host,
            port=config.web.port,
            log_level=log_level.lower(),
            log_config=None,  # Prevent uvicorn from reconfiguring logging
        )
    )

    logger.info(f"Serving metrics on http://{config.web.host}:{config.web.port}/metrics")
    try:
        await server.serve()
    except (OSError, SystemExit) as e:
        # uvicorn exits when it cannot bind the listening socket
        logger.critical(f"Metrics server failed: {e}")
        return 1
    finally:
        logger.info("Shutting down...")
        await context.shutdown()

    if not server.started:
        logger.critical(f"Metrics server could not listen on {config.web.host}:{config.web.port}")
        return 1
    return 0


def main() -> int:
    """Main entry point - wraps async_main()"""
    return asyncio.run(async_main())


if __name__ == "__main__":
    sys.exit(main())
