"""Shared utilities.

Modules:
    time: Timestamp formatting and parsing
    sanitize: Input sanitization and validation helpers
"""

from gpt_trainer.utils.sanitize import (
    sanitize_file_name,
    sanitize_html,
    sanitize_key,
    sanitize_text_field,
    sanitize_textarea_field,
    validate_url,
)
from gpt_trainer.utils.time import (
    TIMESTAMP_FORMAT,
    format_timestamp,
    parse_timestamp,
    timestamp_ago,
    utc_now,
)

__all__ = [
    # Time
    "TIMESTAMP_FORMAT",
    "utc_now",
    "format_timestamp",
    "timestamp_ago",
    "parse_timestamp",
    # Sanitize
    "sanitize_text_field",
    "sanitize_textarea_field",
    "sanitize_file_name",
    "sanitize_key",
    "sanitize_html",
    "validate_url",
]
