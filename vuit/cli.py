"""Command-line front door for vuit.

Parses CLI options, sets up logging and configuration, then hands the
terminal to the interactive session runtime.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from loguru import logger

from . import __version__
from .errors import ConfigError
from .log import configure_logging
from .runtime.config import load_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vuit",
        description="Fuzzy-find, preview, search and edit project files without leaving the terminal.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"vuit version {__version__}",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    build_parser().parse_args(argv)
    configure_logging()

    try:
        config = load_config()
    except ConfigError as exc:
        logger.error(str(exc))
        print(exc, file=sys.stderr)
        raise SystemExit(1) from exc

    from .runtime.app import run_app

    run_app(config)


if __name__ == "__main__":
    main()
