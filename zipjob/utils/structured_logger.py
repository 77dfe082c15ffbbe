"""
Structured logging system for job lifecycle events.
Provides JSON-formatted logs with context and metadata.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Enhanced logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("zipjob", log_dir=Path("logs"))
        logger.info("job_completed",
                    job_id="3f2a...",
                    fetched=2,
                    failed=1,
                    duration_s=3.2)
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Enable console output
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        self.json_log_path: Path | None = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.json_log_path = log_dir / f"zipjob_{timestamp}.jsonl"
            self._json_file = open(self.json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Service context (added to all log entries)
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def set_session_context(self, **kwargs) -> None:
        """Set service-level context that appears in all logs."""
        self._session_context.update(kwargs)

    def _format_message(self, event: str, **context) -> str:
        """Format message for console output."""
        parts = [f"[{event}]"]
        for key, value in context.items():
            if key not in ("level", "timestamp"):
                parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        """Write structured log entry to JSON file."""
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, ValueError) as e:
            # Fallback to stderr if JSON logging fails
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _emit(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            self._logger.log(level, self._format_message(event, **context))
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        """Log debug event."""
        self._emit(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        """Log info event."""
        self._emit(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        """Log warning event."""
        self._emit(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        """Log error event."""
        self._emit(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class JobEventLogger:
    """Specialized logger for job lifecycle events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def job_created(self, job_id: str, total_jobs: int):
        self.logger.debug("job_created", job_id=job_id, total_jobs=total_jobs)

    def item_added(self, job_id: str, url: str, added: int):
        self.logger.debug("job_item_added", job_id=job_id, url=url, added=added)

    def admission_rejected(self, job_id: str, in_use: int, capacity: int):
        """Log a run request turned away because every slot is taken."""
        self.logger.warning(
            "job_admission_rejected", job_id=job_id, in_use=in_use, capacity=capacity
        )

    def job_started(self, job_id: str, items: int, in_use: int, capacity: int):
        self.logger.info(
            "job_started", job_id=job_id, items=items, in_use=in_use, capacity=capacity
        )

    def item_fetched(self, job_id: str, url: str, size_bytes: int):
        self.logger.debug(
            "job_item_fetched",
            job_id=job_id,
            url=url,
            size_bytes=size_bytes,
            size_mb=round(size_bytes / (1024 * 1024), 2),
        )

    def item_failed(self, job_id: str, url: str, error: str):
        self.logger.warning("job_item_failed", job_id=job_id, url=url, error=error)

    def job_completed(
        self, job_id: str, fetched: int, failed: int, archive: str, duration_s: float
    ):
        """Log a job that produced an archive, possibly with some failed items."""
        self.logger.info(
            "job_completed",
            job_id=job_id,
            fetched=fetched,
            failed=failed,
            archive=archive,
            duration_s=round(duration_s, 2),
        )

    def job_failed(self, job_id: str, error: str, duration_s: float):
        self.logger.error(
            "job_failed", job_id=job_id, error=error, duration_s=round(duration_s, 2)
        )


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = False
) -> tuple[StructuredLogger, JobEventLogger]:
    """
    Create the structured loggers.

    Returns:
        Tuple of (base_logger, job_logger)
    """
    base = StructuredLogger("zipjob.events", log_dir=log_dir, enable_json=enable_json)
    return base, JobEventLogger(base)
