"""Command-line entry point: fire one lifecycle notification for a build."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from build_notifier.config.environment import EnvironmentConfig
from build_notifier.config.exceptions import ConfigurationError
from build_notifier.config.loader import load_config
from build_notifier.config.models import NotifierConfig
from build_notifier.domain.host import StreamLogSink, load_build_descriptor
from build_notifier.domain.models import Phase
from build_notifier.logging import get_logger
from build_notifier.logging.config import configure_logging
from build_notifier.notifications.service import NotificationService

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Path, log_level_override: Optional[str]
) -> Tuple[NotifierConfig, EnvironmentConfig]:
    """
    Load configuration and settle the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build Notifier - notify HTTP/TCP/UDP endpoints about a build lifecycle phase"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: notifier.yaml or config/notifier.yaml)",
    )
    parser.add_argument(
        "--build",
        type=Path,
        required=True,
        help="Path to a YAML or JSON build descriptor",
    )
    parser.add_argument(
        "--phase",
        required=True,
        type=str.upper,
        choices=[phase.value for phase in Phase],
        help="Lifecycle phase to report",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run one notification.

    Notification failures are reported but never change the exit code, the
    same way they never fail a build.

    Returns:
        0 on completion, 1 on configuration or descriptor errors.
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)
        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        build = load_build_descriptor(args.build)
    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except (OSError, KeyError, ValueError) as e:
        print(f"Invalid build descriptor {args.build}: {e}", file=sys.stderr)
        logger.error(
            f"Invalid build descriptor: {e}",
            extra={"event": "cli.build_descriptor.invalid", "error_type": type(e).__name__},
        )
        return 1

    logger.info(
        "Dispatching notifications",
        extra={
            "event": "cli.dispatch.starting",
            "phase": args.phase,
            "job": build.job.name,
            "build_number": build.number,
            "job_count": len(app_config.jobs),
        },
    )

    service = NotificationService.from_config(app_config)
    results = service.handle(Phase(args.phase), build, StreamLogSink(sys.stdout))

    logger.info(
        "Dispatch finished",
        extra={
            "event": "cli.dispatch.completed",
            "endpoints": len(results),
            "failed": sum(1 for r in results if r.status == "failed"),
            "duration_seconds": round(time.time() - start_time, 3),
        },
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
