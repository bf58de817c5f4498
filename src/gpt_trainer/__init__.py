"""GPT Trainer client - Python client for the GPT Trainer REST API.

This package provides a cached API client with an offline test mode,
structured error reporting, content analysis and a command-line tool.
"""

from gpt_trainer._version import __version__
from gpt_trainer.api.client import GptTrainerClient
from gpt_trainer.config.settings import build_client
from gpt_trainer.errors import ApiOperationError, GptTrainerError

__all__ = [
    "__version__",
    "GptTrainerClient",
    "build_client",
    "GptTrainerError",
    "ApiOperationError",
]
