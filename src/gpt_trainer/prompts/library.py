"""Prompt library storage.

Saved prompt templates grouped by category, plus one pinned prompt per
field, persisted to a JSON file.
"""

from __future__ import annotations

import json
import re
import secrets
import string
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from gpt_trainer.utils.sanitize import sanitize_key, sanitize_text_field, sanitize_textarea_field
from gpt_trainer.utils.time import format_timestamp

LIBRARY_FILE = Path.home() / ".config" / "gpt-trainer" / "prompts.json"

CATEGORIES = {
    "title": "Title Generation",
    "content": "Content Analysis",
    "excerpt": "Excerpt Creation",
    "meta": "Metadata Generation",
}

_VARIABLE_RE = re.compile(r"\{([^}]+)\}")
_ID_ALPHABET = string.ascii_letters + string.digits


def extract_variables(text: str) -> list[str]:
    """Unique "{name}" placeholders in order of first appearance."""
    return list(dict.fromkeys(_VARIABLE_RE.findall(text)))


class PromptLibrary:
    """Prompt templates stored in a JSON file.

    Args:
        library_file: Storage path. Defaults to LIBRARY_FILE.
        clock: Returns the current UTC datetime; injectable for tests.
    """

    def __init__(
        self,
        library_file: Optional[Path] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.library_file = Path(library_file) if library_file else LIBRARY_FILE
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _load(self) -> dict[str, Any]:
        if not self.library_file.exists():
            return {"prompts": {}, "pinned": {}}
        try:
            with open(self.library_file) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return {"prompts": {}, "pinned": {}}
        if not isinstance(data, dict):
            return {"prompts": {}, "pinned": {}}
        return {
            "prompts": data.get("prompts") if isinstance(data.get("prompts"), dict) else {},
            "pinned": data.get("pinned") if isinstance(data.get("pinned"), dict) else {},
        }

    def _save(self, data: dict[str, Any]) -> None:
        self.library_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.library_file, "w") as f:
            json.dump(data, f, indent=2)

    def _new_id(self) -> str:
        suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(6))
        return f"{int(self._clock().timestamp())}_{suffix}"

    def get_prompts(self) -> dict[str, dict[str, Any]]:
        return self._load()["prompts"]

    def get_prompt(self, prompt_id: str) -> Optional[dict[str, Any]]:
        return self.get_prompts().get(prompt_id)

    def get_pinned_prompts(self) -> dict[str, str]:
        return self._load()["pinned"]

    def get_prompts_by_category(self, category: str) -> list[dict[str, Any]]:
        return [p for p in self.get_prompts().values() if p.get("category") == category]

    def save_prompt(self, prompt: dict[str, Any]) -> Optional[str]:
        """Store a new prompt.

        Args:
            prompt: Mapping with "content" and "category", optionally
                "title" and "description".

        Returns:
            The new prompt id, or None if content or category is missing
            or the category is unknown.
        """
        content = sanitize_textarea_field(prompt.get("content"))
        category = sanitize_key(str(prompt.get("category") or ""))
        if not content or category not in CATEGORIES:
            return None

        data = self._load()
        prompt_id = self._new_id()
        data["prompts"][prompt_id] = {
            "id": prompt_id,
            "content": content,
            "category": category,
            "title": sanitize_text_field(prompt.get("title", "")),
            "description": sanitize_textarea_field(prompt.get("description", "")),
            "created_at": format_timestamp(self._clock()),
            "variables": extract_variables(content),
        }
        self._save(data)
        return prompt_id

    def toggle_pin(self, prompt_id: str, field: str) -> bool:
        """Pin prompt_id for field, or unpin it if it is already pinned there.

        Returns:
            False if the prompt does not exist.
        """
        data = self._load()
        if prompt_id not in data["prompts"]:
            return False
        if data["pinned"].get(field) == prompt_id:
            del data["pinned"][field]
        else:
            data["pinned"][field] = prompt_id
        self._save(data)
        return True

    def delete_prompt(self, prompt_id: str) -> bool:
        """Delete a prompt and any pins pointing at it."""
        data = self._load()
        if prompt_id not in data["prompts"]:
            return False
        del data["prompts"][prompt_id]
        data["pinned"] = {f: pid for f, pid in data["pinned"].items() if pid != prompt_id}
        self._save(data)
        return True


__all__ = [
    "LIBRARY_FILE",
    "CATEGORIES",
    "extract_variables",
    "PromptLibrary",
]
