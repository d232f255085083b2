"""Observability module for Craft Studio.

Provides structured logging and per-run correlation IDs.
"""

from craftstudio.observability.logging import (
    bound_run_id,
    close_file_logging,
    configure_logging,
    generate_run_id,
    get_logger,
    get_logs_dir,
)

__all__ = [
    "bound_run_id",
    "close_file_logging",
    "configure_logging",
    "generate_run_id",
    "get_logger",
    "get_logs_dir",
]
