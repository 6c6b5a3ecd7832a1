"""
Command-line interface for the statsbot polling service.

This module provides the main CLI entry point, handling command-line
arguments, logging setup, configuration validation and running the
supervisor until it is signalled to stop.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..config import get_config, load_configuration, reload_config, set_config_path
from ..metrics import MetricsStore
from ..models.config import Configuration
from ..orchestration import SignalHandler, Supervisor
from ..validation import ConfigError, ListenError, handle_cli_error

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging on stdout with the project's log format."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stdout,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="statsbot",
        description="Poll IRC servers for /stats z memory reports and export them as metrics.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging level (default: INFO).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser(
        "run", help="Run the poller and the metrics exporter."
    )
    run_parser.add_argument("config", type=Path, help="Path to the TOML configuration file.")

    validate_parser = subparsers.add_parser(
        "validate-configuration", help="Check a configuration file and exit."
    )
    validate_parser.add_argument("config", type=Path, help="Path to the TOML configuration file.")

    return parser


def validate_configuration_command(config_path: Path) -> None:
    """Load `config_path`, report the result and exit 0 when valid, 1 otherwise."""
    try:
        config = load_configuration(config_path)
    except ConfigError as e:
        print(f"Invalid configuration {config_path}: {e}", file=sys.stderr)
        handle_cli_error(
            error=e,
            context="configuration validation",
            exit_code=1,
            logger=logger,
        )

    print(
        f"Configuration {config_path} is valid: "
        f"{len(config.servers)} servers, exporter on {config.exporter.address}"
    )
    sys.exit(0)


async def run_supervisor(config: Configuration, store: MetricsStore) -> None:
    """Run the supervisor with process signals routed to it."""
    supervisor = Supervisor(reload_config, store, config=config)
    signal_handler = SignalHandler(supervisor.reload_trigger, supervisor.request_shutdown)
    signal_handler.setup_signal_handlers()
    try:
        await supervisor.run()
    finally:
        signal_handler.cleanup_signal_handlers()


def run_command(config_path: Path) -> None:
    """Load the configuration and serve until SIGINT/SIGTERM."""
    set_config_path(config_path)
    try:
        config = get_config()
    except ConfigError as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            logger=logger,
        )

    store = MetricsStore(metric_prefix=config.exporter.metric_prefix)
    logger.info(f"Starting statsbot {__version__}")
    try:
        asyncio.run(run_supervisor(config, store))
    except ListenError as e:
        handle_cli_error(
            error=e,
            context="exporter startup",
            exit_code=1,
            logger=logger,
        )
    except KeyboardInterrupt:
        logger.info("Interrupted")
    logger.info("statsbot stopped")


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for statsbot.

    Subcommands:
    - run <config>: poll and export until SIGINT/SIGTERM; SIGHUP reloads
    - validate-configuration <config>: exit 0 if the file is valid, 1 otherwise

    Raises:
        SystemExit: With code 1 on configuration or listen errors
    """
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    if args.command == "validate-configuration":
        validate_configuration_command(args.config)
    elif args.command == "run":
        run_command(args.config)


if __name__ == "__main__":
    main_cli()
