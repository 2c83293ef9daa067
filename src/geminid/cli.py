"""
Command line entry point.

Run:
  geminid /var/gemini/config.json

The config path may also come from GEMINID_CONFIG_FILE; GEMINID_LOG_LEVEL
sets the console log level.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

import anyio

from .config import ConfigError, ServerConfig, get_settings
from .log import ROOT_LOGGER_NAME, setup_logging
from .server import serve


logger = logging.getLogger(ROOT_LOGGER_NAME)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="geminid", description="Serve static Gemini capsules for one or more virtual hosts.")
    parser.add_argument("config", nargs="?", help="JSON configuration file")
    parser.add_argument("--log-level", help="console log level (default: $GEMINID_LOG_LEVEL or DEBUG)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    settings = get_settings()
    parser = build_parser()
    args = parser.parse_args(argv)

    config_path = args.config or settings.config_file
    if not config_path:
        parser.error("must supply a config file")

    setup_logging(args.log_level or settings.log_level)

    try:
        config = ServerConfig.from_file(config_path)
    except ConfigError as e:
        print(e, file=sys.stderr)
        return 1

    try:
        anyio.run(serve, config)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
