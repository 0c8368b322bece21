"""
Command line entry point.

    browser-inventory --config /etc/browser-inventory/config.yaml
    browser-inventory --host PC527 --host PC528 --log-level INFO
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .config import InventoryConfig, config_from_hosts, load_config
from .inventory import BrowserInventory
from .utils import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Report the default web browser for users on remote Windows hosts"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--host",
        action="append",
        dest="hosts",
        metavar="NAME",
        help="Host to inventory (repeatable, replaces configured hosts)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides config)"
    )
    return parser


def resolve_config(args: argparse.Namespace) -> InventoryConfig:
    """Combine config file, --host overrides and defaults."""
    if args.hosts and not args.config:
        return config_from_hosts(args.hosts)

    config = load_config(Path(args.config) if args.config else None)

    if args.hosts:
        config = InventoryConfig(**{**config.model_dump(), "hosts": args.hosts})

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the browser inventory."""
    args = build_parser().parse_args(argv)

    try:
        config = resolve_config(args)
    except (OSError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(args.log_level or config.log_level)

    inventory = BrowserInventory.from_config(config)
    asyncio.run(inventory.run())
    return 0


if __name__ == "__main__":
    sys.exit(main())
