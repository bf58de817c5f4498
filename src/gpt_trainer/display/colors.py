"""Terminal color handling and detection."""

import os
import platform
import sys


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    CYAN = "\033[96m"
    MAGENTA = "\033[95m"


LEVEL_COLORS = {
    "CRITICAL": "RED",
    "ERROR": "RED",
    "WARNING": "YELLOW",
    "INFO": "CYAN",
    "DEBUG": "DIM",
}


def supports_color() -> bool:
    """Check if the terminal supports color output.

    Returns:
        True if colors should be displayed, False otherwise.
    """
    # GPT_TRAINER_NO_COLOR (any non-empty value) disables color
    if os.environ.get("GPT_TRAINER_NO_COLOR"):
        return False
    if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
        return False
    if platform.system() == "Windows":
        return bool(os.environ.get("TERM") or os.environ.get("WT_SESSION"))
    return True


def disable_colors() -> None:
    for attr in dir(Colors):
        if not attr.startswith("_"):
            setattr(Colors, attr, "")


def init_colors() -> None:
    """Disable all color codes if the terminal doesn't support colors."""
    if not supports_color():
        disable_colors()


def level_color(level: str) -> str:
    return getattr(Colors, LEVEL_COLORS.get(level.upper(), "RESET"))


init_colors()


__all__ = [
    "Colors",
    "supports_color",
    "disable_colors",
    "init_colors",
    "level_color",
]
