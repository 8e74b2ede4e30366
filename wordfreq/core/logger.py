"""
Logging setup for wordfreq runs.

Word counts are the program's only stdout output, so human-readable log lines
go to stderr. A rotating JSON log file keeps the full DEBUG trail of every
run, including per-source worker events.
"""

import logging
import logging.handlers
import os
import sys

import structlog

from wordfreq.core.config import AppSettings

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# HTTP and rate-limit libraries log every request at DEBUG/INFO.
NOISY_LOGGERS = (
    "urllib3",
    "requests",
    "charset_normalizer",
    "pyrate_limiter",
)


def _stderr_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        )
    )
    return handler


def _json_file_handler(path: str) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
        )
    )
    return handler


def setup_logging(settings: AppSettings) -> None:
    """
    Routes structlog through the stdlib root logger.

    The stderr handler honours `settings.console_log_level` (LOG_LEVEL); an
    unknown level name falls back to INFO. The file handler always records
    DEBUG so worker threads can be traced after a run.
    """
    os.makedirs(settings.paths.log_dir, exist_ok=True)
    console_level = getattr(logging, settings.console_log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(_stderr_handler(console_level))
    root_logger.addHandler(_json_file_handler(settings.paths.log_file))

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    structlog.get_logger(__name__).debug(
        f"Logging to stderr at {logging.getLevelName(console_level)} "
        f"and to {settings.paths.log_file}"
    )
