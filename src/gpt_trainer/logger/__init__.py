"""Event logging.

Modules:
    event_log: Leveled JSON-lines event log with rotation and retention
"""

from gpt_trainer.logger.event_log import (
    LOG_LEVELS,
    NOTIFY_LEVELS,
    ErrorSink,
    EventLog,
    NullLog,
    sanitize_context,
)

__all__ = [
    "LOG_LEVELS",
    "NOTIFY_LEVELS",
    "ErrorSink",
    "EventLog",
    "NullLog",
    "sanitize_context",
]
