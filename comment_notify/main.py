"""Main entry point for the Comment Notify service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import sys
from pathlib import Path
from typing import Optional, Tuple

import uvicorn

from comment_notify import __version__
from comment_notify.api.server import create_app
from comment_notify.config.environment import EnvironmentConfig
from comment_notify.config.exceptions import ConfigurationError
from comment_notify.config.loader import load_config
from comment_notify.config.models import ServiceConfig
from comment_notify.logging import get_logger
from comment_notify.logging.config import configure_logging

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path],
    log_level_override: Optional[str] = None,
    host_override: Optional[str] = None,
    port_override: Optional[int] = None,
) -> Tuple[ServiceConfig, EnvironmentConfig]:
    """
    Load and prepare runtime configuration.

    Priority for every overridable setting: CLI > environment > config file.

    Args:
        config_path: Path to configuration file (None searches default locations)
        log_level_override: Log level from CLI
        host_override: Bind address from CLI
        port_override: Bind port from CLI

    Returns:
        Tuple of (ServiceConfig, EnvironmentConfig) with effective values
        resolved onto the EnvironmentConfig

    Raises:
        ConfigurationError: If configuration is invalid
    """
    service_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = service_config.logging.level

    if not env_config.log_format:
        env_config.log_format = service_config.logging.format

    if host_override:
        env_config.host = host_override
    elif not env_config.host:
        env_config.host = service_config.server.host

    if port_override:
        env_config.port = port_override
    elif not env_config.port:
        env_config.port = service_config.server.port

    return service_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Comment Notify - spam checks, avatars and notifications for new comments"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml if present)",
    )
    parser.add_argument("--host", default=None, help="Bind address (overrides config and environment)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (overrides config and environment)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def main(argv=None) -> int:
    """
    Main entry point for the Comment Notify service.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    args = build_parser().parse_args(argv)

    try:
        # Step 1: Load configuration (before logging for format detection)
        service_config, env_config = load_runtime_config(
            args.config, args.log_level, args.host, args.port
        )

        # Step 2: Configure logging
        configure_logging(
            level=env_config.log_level,
            format_type=env_config.log_format,
            environment=env_config.environment,
        )

        logger.info(
            "Comment Notify starting",
            extra={
                "event": "service.starting",
                "version": __version__,
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "host": env_config.host,
                "port": env_config.port,
            },
        )

        # Step 3: Build the application and serve until interrupted
        app = create_app(service_config)
        uvicorn.run(app, host=env_config.host, port=env_config.port, log_config=None)

        logger.info("Comment Notify stopped", extra={"event": "service.stopping"})
        return 0

    except ConfigurationError as e:
        # Configuration errors are already formatted nicely
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
