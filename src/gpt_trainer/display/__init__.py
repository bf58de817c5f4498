"""Terminal output helpers.

Modules:
    colors: ANSI color codes with terminal detection
"""

from gpt_trainer.display.colors import Colors, disable_colors, init_colors, level_color, supports_color

__all__ = [
    "Colors",
    "supports_color",
    "disable_colors",
    "init_colors",
    "level_color",
]
