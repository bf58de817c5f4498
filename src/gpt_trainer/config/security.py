"""Security utilities for credential display and protection."""

from __future__ import annotations

import re
import stat
from pathlib import Path
from typing import Mapping

# Bearer tokens are opaque; reject only whitespace and control characters
API_TOKEN_PATTERN = re.compile(r"^[\x21-\x7e]+$")

SENSITIVE_HEADERS = {"authorization", "x-api-key", "cookie"}


def validate_api_token(token: str) -> tuple[bool, str | None]:
    """Validate API token format.

    Args:
        token: Token string to validate.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not token:
        return False, "Token is empty"

    if not API_TOKEN_PATTERN.match(token):
        return False, "Token contains whitespace or control characters"

    return True, None


def mask_token(token: str | None, prefix_len: int = 8, suffix_len: int = 4) -> str:
    """Mask a token for safe logging/display.

    Args:
        token: Token to mask.
        prefix_len: Number of prefix characters to show.
        suffix_len: Number of suffix characters to show.

    Returns:
        Masked token string (e.g., "abcd1234...wxyz").
    """
    if not token:
        return "<empty>"

    if len(token) <= prefix_len + suffix_len:
        return "*" * len(token)

    suffix = token[-suffix_len:] if suffix_len else ""
    return f"{token[:prefix_len]}...{suffix}"


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of request headers safe to print in debug output."""
    redacted = {}
    for name, value in headers.items():
        if name.lower() in SENSITIVE_HEADERS:
            scheme, _, credential = value.partition(" ")
            if credential:
                redacted[name] = f"{scheme} {mask_token(credential, 4, 0)}"
            else:
                redacted[name] = mask_token(value, 4, 0)
        else:
            redacted[name] = value
    return redacted


def check_file_permissions(path: Path) -> tuple[bool, str | None]:
    """Check if file has secure permissions (0600 or stricter).

    Args:
        path: Path to the file.

    Returns:
        Tuple of (is_secure, warning_message).
    """
    if not path.exists():
        return True, None

    try:
        mode = path.stat().st_mode
        if mode & (stat.S_IRWXG | stat.S_IRWXO):
            current_perms = oct(mode)[-3:]
            return False, f"File {path} has insecure permissions ({current_perms}), should be 600"
        return True, None
    except OSError as e:
        return False, f"Cannot check permissions for {path}: {e}"


__all__ = [
    "API_TOKEN_PATTERN",
    "SENSITIVE_HEADERS",
    "validate_api_token",
    "mask_token",
    "redact_headers",
    "check_file_permissions",
]
