"""Configuration management.

Modules:
    settings: Config loading, saving, validation and client construction
    security: Token masking and file permission checks
"""

from gpt_trainer.config.security import (
    check_file_permissions,
    mask_token,
    redact_headers,
    validate_api_token,
)
from gpt_trainer.config.settings import (
    CONFIG_FILE,
    CONFIG_SCHEMA,
    DEFAULT_CONFIG,
    ENV_OVERRIDES,
    apply_env_overrides,
    build_client,
    load_config,
    reset_config,
    sanitize_settings,
    save_config,
    validate_config,
)

__all__ = [
    # Settings
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
    # Security
    "validate_api_token",
    "mask_token",
    "redact_headers",
    "check_file_permissions",
]
