"""Entry point for running the Sentry Autopilot MCP server.

This module provides the main entry point for Sentry Autopilot.
It handles:
- Configuration loading
- Logging setup with secret sanitization
- Server assembly and transport selection
- Closing the HTTP clients on shutdown
"""

import argparse
import asyncio
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from sentry_autopilot._version import __version__

log = structlog.get_logger()


def setup_logging(
    debug: bool = False,
    log_format: str = "console",
    file_path: Path | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
        file_path: Path to log file (if file logging enabled)
        file_enabled: Whether to enable file logging
    """
    from sentry_autopilot.utils.logging import LogFormat, LogLevel, configure_logging

    level = LogLevel.DEBUG if debug else LogLevel.INFO

    configure_logging(
        level=level,
        log_format=LogFormat(log_format.lower()),
        file_path=file_path,
        file_enabled=file_enabled,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="sentry-autopilot",
        description="Sentry Autopilot - MCP server that traces Sentry crashes to GitHub source",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: environment variables and .env)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default="console",
        help="Log output format (default: console)",
    )

    parser.add_argument(
        "--transport",
        choices=["stdio", "sse", "streamable-http"],
        default=None,
        help="MCP transport (overrides server.transport from configuration)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load and validate configuration without starting the server",
    )

    parser.add_argument(
        "--check-config",
        action="store_true",
        help="Like --dry-run, but also require every credential and identifier",
    )

    return parser.parse_args(argv)


async def run_server(
    config_path: Path | None,
    transport: str | None = None,
    dry_run: bool = False,
    check_config: bool = False,
) -> int:
    """Run the Sentry Autopilot MCP server.

    Args:
        config_path: Path to configuration file, or None for environment only
        transport: Transport overriding the configured one
        dry_run: If True, only validate config without starting
        check_config: If True, validate strictly and exit

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    log.info(
        "starting_sentry_autopilot",
        version=__version__,
        config_path=str(config_path) if config_path else None,
    )

    try:
        from sentry_autopilot.config.loader import load_config

        config = load_config(config_path, strict=check_config)
        log.info(
            "configuration_loaded",
            sentry_auth_token=_mask("auth_token", config.sentry.auth_token),
            github_token=_mask("token", config.github.token),
        )

        # Reconfigure logging from config file settings
        from sentry_autopilot.utils.logging import configure_logging

        configure_logging(
            level=config.logging.level,
            log_format=config.logging.format,
            file_path=config.logging.file.path if config.logging.file.enabled else None,
            file_enabled=config.logging.file.enabled,
        )

        if dry_run or check_config:
            log.info("dry_run_mode_config_valid", strict=check_config)
            return 0

        if transport:
            config.server = config.server.model_copy(update={"transport": transport})

        from sentry_autopilot.server import create_server

        server = create_server(config)
        try:
            await server.run()
        finally:
            await server.close()

        return 0

    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=str(config_path), error=str(e))
        return 1
    except ValidationError as e:
        log.error("configuration_invalid", error=str(e))
        return 1
    except ValueError as e:
        log.error("configuration_invalid", error=str(e))
        return 1
    except KeyboardInterrupt:
        log.info("keyboard_interrupt_received")
        return 0
    except Exception as e:
        log.exception("fatal_error", error=str(e))
        return 1


def _mask(key: str, value: str | None) -> str:
    from sentry_autopilot.utils.security import mask_config_value

    return mask_config_value(key, value or "")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(
        debug=args.debug,
        log_format=args.format,
    )

    try:
        return asyncio.run(
            run_server(args.config, args.transport, args.dry_run, args.check_config)
        )
    except KeyboardInterrupt:
        log.info("shutting_down_gracefully")
        return 0


if __name__ == "__main__":
    sys.exit(main())
