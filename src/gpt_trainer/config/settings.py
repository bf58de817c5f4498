"""Configuration management for gpt-trainer.

Provides functions for loading, saving, validating and sanitizing the
configuration file, and for building a client from it.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple, Union

from gpt_trainer.analysis import DEFAULT_CONTENT_PROMPTS
from gpt_trainer.api.cache import CACHE_MAX_AGE
from gpt_trainer.api.transport import DEFAULT_API_URL, DEFAULT_TIMEOUT
from gpt_trainer.config.security import check_file_permissions
from gpt_trainer.models import ALLOWED_FILE_TYPES
from gpt_trainer.utils.sanitize import sanitize_text_field, sanitize_textarea_field, validate_url

if TYPE_CHECKING:
    from gpt_trainer.api.client import GptTrainerClient
    from gpt_trainer.hooks import EventHooks
    from gpt_trainer.logger.event_log import ErrorSink

# File paths
CONFIG_FILE = Path.home() / ".config" / "gpt-trainer" / "config.json"


# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "api_base_url": DEFAULT_API_URL,
    "api_token": None,
    "cache_ttl": CACHE_MAX_AGE,
    "timeout": DEFAULT_TIMEOUT,
    "debug": False,
    "log_file": None,
    "notification_webhook": None,
    "notification_secret": None,
    "enable_error_notifications": False,
    "allowed_file_types": list(ALLOWED_FILE_TYPES),
    "content_prompts": dict(DEFAULT_CONTENT_PROMPTS),
    "auto_analyze": False,
}

BOOLEAN_KEYS = ("debug", "enable_error_notifications", "auto_analyze")

# Environment variable -> (config key, converter)
ENV_OVERRIDES: dict[str, tuple[str, Callable[[str], Any]]] = {
    "GPT_TRAINER_API_TOKEN": ("api_token", str.strip),
    "GPT_TRAINER_API_URL": ("api_base_url", str.strip),
    "GPT_TRAINER_CACHE_TTL": ("cache_ttl", int),
    "GPT_TRAINER_DEBUG": ("debug", lambda v: v.strip().lower() in ("1", "true", "yes", "on")),
}


def _validate_prompts(value: dict) -> Tuple[bool, str]:
    for content_type, prompt in value.items():
        if not isinstance(prompt, str) or "{content}" not in prompt:
            return False, f"prompt for '{content_type}' must contain {{content}}"
    return True, ""


# Config schema for validation
# Format: key -> (expected_types, required, validator_func or None)
# validator_func takes value and returns (is_valid, error_message)
ValidatorFunc = Callable[[Union[str, int, float, bool, list, dict, None]], Tuple[bool, str]]

CONFIG_SCHEMA: dict[str, tuple[tuple, bool, Optional[ValidatorFunc]]] = {
    "api_base_url": (
        (str,),
        False,
        lambda v: (True, "") if validate_url(v) else (False, "must be a valid HTTP/HTTPS URL"),
    ),
    "api_token": (
        (str, type(None)),
        False,
        lambda v: (True, "")
        if isinstance(v, str) and len(v.strip()) > 0
        else (False, "must be a non-empty string or null"),
    ),
    "cache_ttl": (
        (int, float),
        False,
        lambda v: (True, "") if v >= 0 else (False, "must be zero or greater"),
    ),
    "timeout": (
        (int, float),
        False,
        lambda v: (True, "") if v > 0 else (False, "must be greater than zero"),
    ),
    "debug": ((bool,), False, None),
    "log_file": ((str, type(None)), False, None),
    "notification_webhook": (
        (str, type(None)),
        False,
        lambda v: (True, "") if validate_url(v) else (False, "must be a valid HTTP/HTTPS URL"),
    ),
    "notification_secret": ((str, type(None)), False, None),
    "enable_error_notifications": ((bool,), False, None),
    "allowed_file_types": (
        (list,),
        False,
        lambda v: (True, "")
        if all(isinstance(t, str) and "/" in t for t in v)
        else (False, "must be a list of MIME types"),
    ),
    "content_prompts": ((dict,), False, _validate_prompts),
    "auto_analyze": ((bool,), False, None),
}


def validate_config(config: dict) -> List[str]:
    """Validate configuration against schema.

    Args:
        config: Configuration dictionary to validate.

    Returns:
        List of validation error messages. Empty list if valid.
    """
    errors = []

    for key in config:
        if key not in CONFIG_SCHEMA:
            errors.append(f"Unknown config key: '{key}'")

    for key, (expected_types, required, validator) in CONFIG_SCHEMA.items():
        if required and key not in config:
            errors.append(f"Missing required key: '{key}'")
            continue

        if key not in config:
            continue

        value = config[key]

        # bool is an int subclass; keep numeric keys strictly numeric
        if isinstance(value, bool) and bool not in expected_types:
            errors.append(f"'{key}' has invalid type: expected number, got bool")
            continue

        if not isinstance(value, expected_types):
            type_names = " or ".join(t.__name__ for t in expected_types)
            errors.append(
                f"'{key}' has invalid type: expected {type_names}, got {type(value).__name__}"
            )
            continue

        if validator and value is not None:
            is_valid, error_msg = validator(value)
            if not is_valid:
                errors.append(f"'{key}' {error_msg}")

    return errors


def sanitize_settings(raw: dict) -> dict:
    """Normalize user-supplied settings before they are stored.

    The token is trimmed plain text, boolean flags are coerced and only
    prompts for known content types are kept.

    Args:
        raw: Settings as submitted.

    Returns:
        Sanitized settings dictionary.
    """
    sanitized: dict[str, Any] = {}

    if "api_token" in raw:
        token = sanitize_text_field(raw.get("api_token"))
        sanitized["api_token"] = token or None

    for key in BOOLEAN_KEYS:
        if key in raw:
            value = raw[key]
            if isinstance(value, str):
                value = value.strip().lower() in ("1", "true", "yes", "on")
            sanitized[key] = bool(value)

    prompts = raw.get("content_prompts")
    if isinstance(prompts, dict):
        sanitized["content_prompts"] = {
            content_type: sanitize_textarea_field(prompts[content_type])
            for content_type in DEFAULT_CONTENT_PROMPTS
            if content_type in prompts
        }

    for key, value in raw.items():
        if key not in sanitized and key in CONFIG_SCHEMA:
            sanitized[key] = value

    return sanitized


def apply_env_overrides(config: dict) -> dict:
    """Return a copy of config with GPT_TRAINER_* environment values applied.

    Malformed values are ignored.
    """
    result = config.copy()
    for env_name, (key, convert) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if not value:
            continue
        try:
            result[key] = convert(value)
        except ValueError:
            continue
    return result


def load_config(
    validate: bool = True,
    config_file: Optional[Path] = None,
    silent: bool = False,
    use_env: bool = True,
) -> dict:
    """Load configuration from file.

    Args:
        validate: Whether to validate config and warn on errors. Default True.
        config_file: Optional path to config file. Defaults to CONFIG_FILE.
        silent: If True, suppress warning output. Default False.
        use_env: Apply GPT_TRAINER_* environment overrides. Default True.

    Returns:
        Configuration dictionary merged with defaults.
    """
    if config_file is None:
        config_file = CONFIG_FILE

    config = DEFAULT_CONFIG.copy()

    if config_file.exists():
        try:
            with open(config_file) as f:
                stored = json.load(f)

            if validate and not silent:
                errors = validate_config(stored)
                if errors:
                    print("Warning: Config validation errors:", file=sys.stderr)
                    for error in errors:
                        print(f"  - {error}", file=sys.stderr)

                is_secure, warning = check_file_permissions(config_file)
                if not is_secure:
                    print(f"Warning: {warning}", file=sys.stderr)

            if isinstance(stored, dict):
                config.update(stored)
        except (OSError, json.JSONDecodeError):
            config = DEFAULT_CONFIG.copy()

    if use_env:
        config = apply_env_overrides(config)
    return config


def save_config(config: dict, config_file: Optional[Path] = None) -> None:
    """Save configuration to file.

    Args:
        config: Configuration dictionary to save.
        config_file: Optional path to config file. Defaults to CONFIG_FILE.
    """
    if config_file is None:
        config_file = CONFIG_FILE

    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w") as f:
        json.dump(config, f, indent=2)

    # Secure the file (contains API token)
    os.chmod(config_file, 0o600)


def reset_config(config_file: Optional[Path] = None) -> None:
    """Reset configuration to default values.

    Args:
        config_file: Optional path to config file. Defaults to CONFIG_FILE.
    """
    save_config(DEFAULT_CONFIG.copy(), config_file=config_file)


def build_client(
    config: Optional[dict] = None,
    sink: Optional["ErrorSink"] = None,
    hooks: Optional["EventHooks"] = None,
    transport: Any = None,
) -> "GptTrainerClient":
    """Create a client wired to an event log and optional error notifier.

    Args:
        config: Configuration dictionary. Loaded from CONFIG_FILE if omitted.
        sink: Event sink. Defaults to an EventLog built from config.
        hooks: Event hooks shared with the client.
        transport: Transport override, mainly for tests.

    Returns:
        Configured GptTrainerClient.

    Raises:
        ConfigurationError: If no API token is configured.
    """
    # Imported here: the client module depends on this package
    from gpt_trainer.api.cache import ResponseCache
    from gpt_trainer.api.client import GptTrainerClient
    from gpt_trainer.logger.event_log import EventLog
    from gpt_trainer.notify.notifier import ErrorNotifier

    if config is None:
        config = load_config(silent=True)
    settings = {**DEFAULT_CONFIG, **config}

    if sink is None:
        notifier = None
        if settings.get("enable_error_notifications") and settings.get("notification_webhook"):
            notifier = ErrorNotifier(
                settings["notification_webhook"],
                secret=settings.get("notification_secret"),
            )
        log_file = settings.get("log_file")
        sink = EventLog(
            log_path=Path(log_file).expanduser() if log_file else None,
            debug=bool(settings.get("debug")),
            notifier=notifier,
        )

    return GptTrainerClient(
        settings.get("api_token"),
        api_base_url=settings.get("api_base_url") or DEFAULT_API_URL,
        timeout=settings.get("timeout") or DEFAULT_TIMEOUT,
        cache=ResponseCache(ttl=settings.get("cache_ttl")),
        sink=sink,
        hooks=hooks,
        transport=transport,
        allowed_file_types=settings.get("allowed_file_types"),
    )


__all__ = [
    "CONFIG_FILE",
    "DEFAULT_CONFIG",
    "ENV_OVERRIDES",
    "CONFIG_SCHEMA",
    "validate_config",
    "sanitize_settings",
    "apply_env_overrides",
    "load_config",
    "save_config",
    "reset_config",
    "build_client",
]
