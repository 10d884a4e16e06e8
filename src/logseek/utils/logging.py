"""Structured logging setup for Logseek."""

import structlog
from pathlib import Path
from typing import Any, Optional
import os


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def configure_logging(log_dir: Optional[Path] = None) -> Path:
    """
    Send logseek's structlog events to a JSON-lines file.

    Every CLI invocation appends to the same file, one JSON object per event
    (``search_started``, ``block_appended``, ``graph_file_skipped`` and so on),
    each with its level and an ISO timestamp. Nothing is printed to the
    terminal, so command output stays clean for piping.

    The threshold comes from LOGSEEK_LOG_LEVEL (DEBUG, INFO, WARNING or
    ERROR). Unset or unrecognized values fall back to INFO. At DEBUG the log
    also records every page read.

    The logseq_blocks library logs through the stdlib ``logging`` module and
    is not routed here.

    Args:
        log_dir: Directory for logseek.log, created if missing
                 (defaults to ~/.cache/logseek/logs)

    Returns:
        Path of the log file events are appended to

    Example:
        LOGSEEK_LOG_LEVEL=DEBUG logseek read-page "pages/Project X.md"
        jq 'select(.event == "page_read")' ~/.cache/logseek/logs/logseek.log
    """
    if log_dir is None:
        log_dir = Path.home() / ".cache" / "logseek" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "logseek.log"

    log_level = os.environ.get("LOGSEEK_LOG_LEVEL", "INFO").upper()
    if log_level not in VALID_LOG_LEVELS:
        log_level = "INFO"

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file, "a")),
        cache_logger_on_first_use=True,
    )

    return log_file


def get_logger(name: str) -> Any:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of calling module)

    Returns:
        Structured logger instance

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("search_started", query="release", limit=5)
    """
    return structlog.get_logger(name)
