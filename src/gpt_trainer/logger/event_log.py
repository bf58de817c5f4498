"""Structured event logging for client operations.

Records ERROR/WARNING/INFO/DEBUG/CRITICAL events as JSON lines with
rotation, filtered reads and a retention policy. Records at ERROR and
above are forwarded to an optional notifier.
"""

from __future__ import annotations

import json
import os
import re
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Protocol

from gpt_trainer.utils.time import parse_timestamp

LOG_LEVELS = ("ERROR", "WARNING", "INFO", "DEBUG", "CRITICAL")
NOTIFY_LEVELS = {"ERROR", "CRITICAL"}

LOG_MAX_SIZE_MB = 10
LOG_MAX_FILES = 5

# Whole word or trailing segment: "token", "api_token", "x-api-key"; not "token_length"
_SENSITIVE_KEY_RE = re.compile(r"(^|[_\-])(token|key|password|secret|authorization)$")


class ErrorSink(Protocol):
    """Anything the client can report events to."""

    def log(self, level: str, message: str, context: dict | None = None) -> None: ...


class Notifier(Protocol):
    def send_notification(self, level: str, message: str, context: dict | None = None) -> bool: ...


class NullLog:
    """Sink that discards every event."""

    def log(self, level: str, message: str, context: dict | None = None) -> None:
        return None


def sanitize_context(context: dict) -> dict:
    """Mask values whose keys look like credentials.

    Args:
        context: Raw context dictionary.

    Returns:
        Sanitized copy with tokens/keys masked.
    """
    sanitized = {}
    for key, value in context.items():
        lower_key = str(key).lower()
        if _SENSITIVE_KEY_RE.search(lower_key):
            if isinstance(value, str) and len(value) > 8:
                sanitized[key] = f"{value[:4]}...{value[-4:]}"
            else:
                sanitized[key] = "***"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_context(value)
        else:
            sanitized[key] = value
    return sanitized


class EventLog:
    """Leveled event log backed by a JSON-lines file or memory.

    Args:
        log_path: File to append records to. None keeps records in memory.
        debug: Record DEBUG events. Other levels are always recorded.
        notifier: Receives ERROR/CRITICAL events.
        clock: Returns the current UTC datetime; injectable for tests.
    """

    def __init__(
        self,
        log_path: Path | None = None,
        debug: bool = False,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.log_path = Path(log_path) if log_path else None
        self.debug_enabled = debug
        self.notifier = notifier
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._records: list[dict[str, Any]] = []
        self._lock = threading.Lock()

        if self.log_path is not None and not self.log_path.parent.exists():
            self.log_path.parent.mkdir(parents=True, mode=0o700)

    def log(self, level: str, message: str, context: dict | None = None) -> None:
        """Record an event.

        Args:
            level: One of LOG_LEVELS (case-insensitive). Unknown levels are ignored.
            message: Human-readable description.
            context: Optional structured data; secrets are masked before writing.
        """
        level = str(level).upper()
        if level not in LOG_LEVELS:
            return
        if level == "DEBUG" and not self.debug_enabled:
            return

        record = {
            "timestamp": self._clock().isoformat(),
            "level": level,
            "message": message,
            "context": sanitize_context(context or {}),
            "pid": os.getpid(),
        }

        with self._lock:
            if self.log_path is None:
                self._records.append(record)
            else:
                self._rotate_logs()
                try:
                    with open(self.log_path, "a", encoding="utf-8") as f:
                        f.write(json.dumps(record, default=str) + "\n")
                    os.chmod(self.log_path, 0o600)
                except OSError:
                    pass  # Best effort logging

        if level in NOTIFY_LEVELS and self.notifier is not None:
            self.notifier.send_notification(level, message, record["context"])

    def error(self, message: str, context: dict | None = None) -> None:
        self.log("ERROR", message, context)

    def warning(self, message: str, context: dict | None = None) -> None:
        self.log("WARNING", message, context)

    def info(self, message: str, context: dict | None = None) -> None:
        self.log("INFO", message, context)

    def debug(self, message: str, context: dict | None = None) -> None:
        self.log("DEBUG", message, context)

    def critical(self, message: str, context: dict | None = None) -> None:
        self.log("CRITICAL", message, context)

    def _rotate_logs(self) -> None:
        """Rotate the log file if it exceeds the size limit."""
        if self.log_path is None or not self.log_path.exists():
            return

        try:
            size_mb = self.log_path.stat().st_size / (1024 * 1024)
            if size_mb < LOG_MAX_SIZE_MB:
                return

            for i in range(LOG_MAX_FILES - 1, 0, -1):
                old_path = self.log_path.with_suffix(f".log.{i}")
                new_path = self.log_path.with_suffix(f".log.{i + 1}")
                if old_path.exists():
                    if i + 1 >= LOG_MAX_FILES:
                        old_path.unlink()
                    else:
                        old_path.rename(new_path)

            self.log_path.rename(self.log_path.with_suffix(".log.1"))
        except OSError:
            pass  # Best effort rotation

    def _read_all(self) -> list[dict[str, Any]]:
        if self.log_path is None:
            return list(self._records)
        if not self.log_path.exists():
            return []

        entries = []
        try:
            with open(self.log_path, encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(json.loads(line))
                    except json.JSONDecodeError:
                        continue
        except OSError:
            return []
        return entries

    def get_logs(
        self,
        level: str = "",
        date_from: str = "",
        date_to: str = "",
        limit: int = 100,
        offset: int = 0,
        order: str = "DESC",
    ) -> list[dict[str, Any]]:
        """Read recorded events with filtering.

        Args:
            level: Only return this level (case-insensitive). Empty for all.
            date_from: ISO timestamp; only events at or after it.
            date_to: ISO timestamp; only events at or before it.
            limit: Maximum number of entries to return.
            offset: Number of matching entries to skip.
            order: "DESC" for newest first, "ASC" for oldest first.

        Returns:
            List of event records.
        """
        with self._lock:
            entries = self._read_all()

        start = parse_timestamp(date_from) if date_from else None
        end = parse_timestamp(date_to) if date_to else None

        matched = []
        for entry in entries:
            if level and entry.get("level") != level.upper():
                continue
            if start or end:
                try:
                    stamp = parse_timestamp(entry.get("timestamp", ""))
                except ValueError:
                    continue
                if start and stamp < start:
                    continue
                if end and stamp > end:
                    continue
            matched.append(entry)

        if order.upper() == "DESC":
            matched.reverse()
        return matched[offset : offset + limit]

    def clear_old_logs(self, days: int = 30) -> int:
        """Delete events older than the retention period.

        Args:
            days: Number of days of events to keep.

        Returns:
            Number of events removed.
        """
        cutoff = self._clock() - timedelta(days=days)

        def keep(entry: dict) -> bool:
            try:
                return parse_timestamp(entry.get("timestamp", "")) >= cutoff
            except ValueError:
                return False

        with self._lock:
            entries = self._read_all()
            kept = [e for e in entries if keep(e)]
            removed = len(entries) - len(kept)
            if not removed:
                return 0
            if self.log_path is None:
                self._records = kept
            else:
                with open(self.log_path, "w", encoding="utf-8") as f:
                    for entry in kept:
                        f.write(json.dumps(entry, default=str) + "\n")
            return removed


__all__ = [
    "LOG_LEVELS",
    "NOTIFY_LEVELS",
    "ErrorSink",
    "NullLog",
    "EventLog",
    "sanitize_context",
]
