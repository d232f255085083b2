"""Structured logging for Craft Studio.

Console output goes through Rich and is gated by ``-v``. With ``--log``,
every event (DEBUG and up) is also appended as one JSON object per line
to ``<output>/logs/debug.jsonl``. A generation run binds its ``run_id``
so the events of concurrent variants can be told apart.
"""

from __future__ import annotations

import json
import logging
import uuid
from contextlib import AbstractContextManager
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 - Used at runtime for path operations
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import Processor

LOG_FILENAME = "debug.jsonl"

# Dependencies whose DEBUG output drowns out pipeline events
_NOISY_LOGGERS = (
    "asyncio",
    "google_genai",
    "httpcore",
    "httpx",
    "langchain",
    "langchain_core",
    "openai",
    "urllib3",
)

_configured = False
_file_handler: logging.FileHandler | None = None
_logs_dir: Path | None = None


def _record_to_entry(record: logging.LogRecord) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "level": record.levelname,
        "logger": record.name,
    }
    if not isinstance(record.msg, dict):
        entry["message"] = record.getMessage()
        return entry

    # structlog hands over its event dict as record.msg (wrap_for_formatter)
    fields = {k: v for k, v in record.msg.items() if k not in ("level", "timestamp")}
    entry["message"] = fields.pop("event", "")
    entry.update(fields)
    return entry


class JSONLFileHandler(logging.FileHandler):
    """Append each record to the file as a single JSON line."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if self.stream:
                self.stream.write(json.dumps(_record_to_entry(record), default=str) + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


def _console_level(verbosity: int) -> int:
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def _console_handler(verbosity: int) -> RichHandler:
    return RichHandler(
        console=Console(stderr=True),
        level=_console_level(verbosity),
        rich_tracebacks=True,
        tracebacks_show_locals=verbosity >= 2,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        markup=False,
    )


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    log_dir: Path | None = None,
) -> None:
    """Configure stdlib logging and structlog.

    Safe to call again: a previously opened log file is closed first.

    Args:
        verbosity: 0=WARNING (default), 1=INFO, 2+=DEBUG on the console.
        log_to_file: Also write every event to ``log_dir/debug.jsonl``.
        log_dir: Directory for the JSONL file. Required if log_to_file=True.

    Raises:
        ValueError: If log_to_file=True but log_dir is not provided.
    """
    global _configured, _file_handler, _logs_dir

    if log_to_file and log_dir is None:
        raise ValueError("log_dir is required when log_to_file=True")

    close_file_logging()

    handlers: list[logging.Handler] = [_console_handler(verbosity)]
    if log_to_file and log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        _logs_dir = log_dir
        _file_handler = JSONLFileHandler(str(log_dir / LOG_FILENAME), mode="a")
        _file_handler.setLevel(logging.DEBUG)
        handlers.append(_file_handler)

    # The root logger passes everything the most permissive handler wants
    root_level = logging.DEBUG if (verbosity > 0 or log_to_file) else logging.WARNING
    logging.basicConfig(level=root_level, format="%(message)s", handlers=handlers, force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a structlog logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()

    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


def generate_run_id() -> str:
    """Generate a short correlation ID for one generation request."""
    return uuid.uuid4().hex[:12]


def bound_run_id(run_id: str) -> AbstractContextManager[None]:
    """Bind ``run_id`` to every log event emitted inside the ``with`` block.

    Uses structlog contextvars, so concurrent variant runs (each in its own
    asyncio task) keep their own IDs.
    """
    return structlog.contextvars.bound_contextvars(run_id=run_id)


def get_logs_dir() -> Path | None:
    """Directory receiving the JSONL log, or None when file logging is off."""
    return _logs_dir


def close_file_logging() -> None:
    """Flush and close the JSONL log file, if one is open."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
