"""
Append-only audit log for security review.

Each entry is one line: ``[<ISO timestamp>] LEVEL: message``. Writing is
best-effort: a failure is reported on the diagnostic logger and counted in
``failed_writes``, but never raised into the operation being audited.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """UTC timestamp with millisecond precision and a trailing Z."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class AuditLogger:
    """Writes audit records to a single append-only file."""

    def __init__(self, log_path: Path, source: Optional[str] = None):
        """
        Args:
            log_path: File to append to. Parent directories are created on
                each write.
            source: Optional prefix placed before the level (e.g. ``"AUTH"``).
        """
        self.log_path = Path(log_path)
        self.source = source
        self.failed_writes = 0

    def log(self, level: str, message: str) -> None:
        level = f"{self.source} {level}" if self.source else level
        entry = f"[{utc_timestamp()}] {level}: {message}\n"
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with self.log_path.open("a", encoding="utf-8") as fh:
                fh.write(entry)
        except OSError as exc:
            self.failed_writes += 1
            logger.error("Failed to write audit log %s: %s", self.log_path, exc)

    def info(self, message: str) -> None:
        self.log("INFO", message)

    def warn(self, message: str) -> None:
        self.log("WARN", message)

    def error(self, message: str) -> None:
        self.log("ERROR", message)
