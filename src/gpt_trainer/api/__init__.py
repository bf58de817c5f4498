"""API client and caching.

Modules:
    client: GPT Trainer API client with test mode
    cache: Response caching with TTL support
    transport: Authenticated JSON requests over HTTP
    fixtures: Sample responses served in test mode
"""

from gpt_trainer.api.cache import (
    CACHE_MAX_AGE,
    MISS,
    ResponseCache,
    agents_key,
)
from gpt_trainer.api.client import (
    ALLOWED_FILE_TYPES,
    TEST_TOKEN,
    GptTrainerClient,
)
from gpt_trainer.api.transport import (
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    HttpTransport,
)

__all__ = [
    # Cache
    "CACHE_MAX_AGE",
    "MISS",
    "ResponseCache",
    "agents_key",
    # Client
    "ALLOWED_FILE_TYPES",
    "TEST_TOKEN",
    "GptTrainerClient",
    # Transport
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT",
    "HttpTransport",
]
