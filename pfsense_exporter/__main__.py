from __future__ import annotations

import argparse
import logging
from pathlib import Path

import uvicorn

from pfsense_exporter import __version__
from pfsense_exporter.app import create_app
from pfsense_exporter.collectors.factory import build_registry
from pfsense_exporter.config import DEFAULT_CONFIG_PATH, ConfigError, load_config
from pfsense_exporter.logging import configure_logging

logger = logging.getLogger("pfsense_exporter")


def cmd_run(args: argparse.Namespace) -> int:
    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        logger.critical("error loading configuration: %s", exc)
        return 1

    registry = build_registry()
    app = create_app(config, registry)
    logger.info("starting pfsense_exporter on %s:%d", config.address, config.port)
    uvicorn.run(
        app,
        host=config.address,
        port=config.port,
        log_level="debug" if args.verbose else "info",
        log_config=None,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pfsense-exporter")
    parser.add_argument("--config", type=str, default=str(DEFAULT_CONFIG_PATH), help="path to the YAML config file")
    parser.add_argument("--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--version", action="version", version=__version__)
    parser.set_defaults(func=cmd_run)
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=bool(args.verbose))
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
