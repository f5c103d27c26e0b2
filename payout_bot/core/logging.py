"""
Structured logging setup using structlog.
"""

import logging
import sys

import structlog
from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Configure structured logging for the process.

    Args:
        level: Standard logging level name
        fmt: "json" for one JSON object per line, "console" for rich output
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
        handler: logging.Handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter('%(message)s'))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
        handler = RichHandler(
            console=Console(file=sys.stderr),
            show_time=False,
            show_path=False,
            rich_tracebacks=True
        )
    handler.setLevel(log_level)

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=log_level, handlers=[handler], force=True)

    # Connection pool chatter from every outbound call
    logging.getLogger("urllib3").setLevel(logging.WARNING)
