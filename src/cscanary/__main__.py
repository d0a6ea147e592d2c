"""CLI entry point for CSCanary.

Usage:
    python -m cscanary [options]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.config
import sys
from typing import NoReturn

from pydantic import ValidationError

from cscanary import __version__
from cscanary.canary import Canary
from cscanary.config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    Settings,
    clear_settings_cache,
    get_settings,
)
from cscanary.shutdown import GracefulShutdown

# Application info
APP_NAME = "Code Sign Canary"
APP_VERSION = __version__

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="cscanary",
        description="Ping and HTTP-check internal and external endpoints, alert on failure.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cscanary                         Run with ./config.xml
  python -m cscanary --config /etc/canary.xml
  python -m cscanary --config-check          Validate config and exit
  python -m cscanary --once --dry-run        One check of each protocol, no email
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {APP_VERSION}",
    )

    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the XML configuration file (default: {DEFAULT_CONFIG_PATH})",
    )

    parser.add_argument(
        "--config-check",
        action="store_true",
        help="Validate configuration and exit without running checks",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Override logging level (default: from settings)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log failures but don't send alert emails",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run one ping cycle and one HTTP cycle, then exit",
    )

    return parser


def configure_logging(level: str) -> None:
    """Configure logging for the application.

    Args:
        level: Logging level string (DEBUG, INFO, etc.)
    """
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "detailed" if level == "DEBUG" else "standard",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }
    logging.config.dictConfig(config)


def print_banner(settings: Settings) -> None:
    """Print the startup banner and what is being monitored."""
    print(f"{APP_NAME} - Cheep Cheep.")
    print(
        f"Monitoring {settings.internal_url}, {settings.external_url}, "
        f"{settings.internal_ip}, {settings.external_ip}"
    )
    print(
        f"Every {settings.ping_check_interval} (PING) and "
        f"{settings.http_check_interval} (HTTP) seconds."
    )


def print_config_summary(settings: Settings, dry_run: bool) -> None:
    """Print a summary of the configuration.

    Args:
        settings: Application settings.
        dry_run: Whether dry-run mode is enabled.
    """
    summary = settings.redacted_summary()
    print("Configuration:")
    print(f"  SMTP: {summary['smtp']} (SSL: {summary['smtp_use_ssl']})")
    print(f"  SMTP Username: {summary['smtp_username']}")
    print(f"  SMTP Password: {summary['smtp_password']}")
    print(f"  Alerts: {summary['smtp_sender']} -> {summary['smtp_destination']}")
    print(f"  Alert Interval: {summary['email_minimum_interval']} minutes")
    print(f"  Log File: {summary['log_path']}")
    print(f"  Log Level: {summary['log_level']}")
    print(f"  Dry Run: {dry_run}")
    print()


def validate_config(path: str = DEFAULT_CONFIG_PATH) -> Settings | None:
    """Validate and load configuration.

    Returns:
        Settings instance if valid, None if invalid.
    """
    try:
        clear_settings_cache()
        return get_settings(path)
    except ConfigError as e:
        print(f"{e}. Exiting...", file=sys.stderr)
        return None
    except ValidationError as e:
        print("Configuration validation failed:", file=sys.stderr)
        for error in e.errors():
            field = ".".join(str(loc) for loc in error["loc"])
            msg = error["msg"]
            print(f"  {field}: {msg}", file=sys.stderr)
        return None


def run_config_check(settings: Settings) -> int:
    """Run configuration check and exit.

    Returns:
        Exit code (0 for success).
    """
    print("Configuration is valid!")
    print()
    print_config_summary(settings, dry_run=settings.dry_run)
    print("Ready to run.")
    return EXIT_SUCCESS


async def run_canary(settings: Settings, dry_run: bool, once: bool = False) -> int:
    """Run the checks until a shutdown signal arrives.

    Args:
        settings: Application settings.
        dry_run: Whether to skip sending alerts.
        once: Run a single cycle of each protocol and return.

    Returns:
        Exit code.
    """
    logger = logging.getLogger(__name__)

    try:
        canary = Canary(settings, dry_run=dry_run)

        if once:
            await canary.run_once()
            return EXIT_SUCCESS

        async with GracefulShutdown() as shutdown:
            shutdown.register_cleanup(canary.stop)
            await canary.start()
            logger.info("Canary running. Press Ctrl+C to stop.")
            await shutdown.wait()

        return EXIT_SUCCESS
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.exception("Canary failed: %s", e)
        return EXIT_ERROR


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    settings = validate_config(args.config)
    if settings is None:
        sys.exit(EXIT_CONFIG_ERROR)

    log_level = args.log_level or settings.log_level
    configure_logging(log_level)

    if args.config_check:
        sys.exit(run_config_check(settings))

    dry_run = args.dry_run or settings.dry_run

    print_banner(settings)

    exit_code = asyncio.run(run_canary(settings, dry_run, once=args.once))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
