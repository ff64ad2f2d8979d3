import logging
import os
import sys

import structlog


def configure_logging(log_level: str = "") -> None:
    """Configure stdlib logging and structlog for the CLI.

    Level comes from the argument, then LOG_LEVEL (default WARNING so that
    user-facing output stays readable). JSON output is used when APP_ENV is
    production, human-friendly console output otherwise.
    """
    level_name = (log_level or os.getenv("LOG_LEVEL", "WARNING")).upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.WARNING), stream=sys.stderr)

    use_json_logs = os.getenv("APP_ENV", os.getenv("ENVIRONMENT", "development")).lower() == "production"

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if use_json_logs else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
