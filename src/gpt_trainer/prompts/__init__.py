"""Prompt templates.

Modules:
    library: Categorized prompt storage with per-field pins
"""

from gpt_trainer.prompts.library import (
    CATEGORIES,
    LIBRARY_FILE,
    PromptLibrary,
    extract_variables,
)

__all__ = [
    "CATEGORIES",
    "LIBRARY_FILE",
    "PromptLibrary",
    "extract_variables",
]
