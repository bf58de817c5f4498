"""
Pytest fixtures for gpt-trainer tests.

Test imports use the src/gpt_trainer/ package via --import-mode=importlib (see pyproject.toml).
"""

import copy
import json
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from gpt_trainer.api.cache import ResponseCache
from gpt_trainer.api.client import TEST_TOKEN, GptTrainerClient
from gpt_trainer.hooks import EventHooks
from gpt_trainer.logger.event_log import EventLog


# ═══════════════════════════════════════════════════════════════════════════════
# Path Constants
# ═══════════════════════════════════════════════════════════════════════════════

PROJECT_ROOT = Path(__file__).parent.parent
SRC_DIR = PROJECT_ROOT / "src"

# Load fixtures data
FIXTURES_DIR = Path(__file__).parent / "fixtures"
with open(FIXTURES_DIR / "api_responses.json") as f:
    FIXTURES = json.load(f)


# ═══════════════════════════════════════════════════════════════════════════════
# API Response Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def data_sources_response():
    """Two live data sources (url and qa)."""
    return copy.deepcopy(FIXTURES["data_sources"])


@pytest.fixture
def chatbots_response():
    """Chatbots with valid, invalid and missing visibility."""
    return copy.deepcopy(FIXTURES["chatbots"])


@pytest.fixture
def chatbot_response():
    """Single public chatbot."""
    return copy.deepcopy(FIXTURES["chatbot"])


@pytest.fixture
def agents_response():
    return copy.deepcopy(FIXTURES["agents"])


@pytest.fixture
def tags_response():
    return copy.deepcopy(FIXTURES["tags"])


@pytest.fixture
def analysis_response():
    return copy.deepcopy(FIXTURES["analysis"])


@pytest.fixture
def config_default():
    """Stored configuration with a token."""
    return FIXTURES["config_default"].copy()


# ═══════════════════════════════════════════════════════════════════════════════
# Client Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def response_cache(clock):
    return ResponseCache(ttl=300, clock=clock)


@pytest.fixture
def event_log():
    """In-memory event log recording DEBUG too."""
    return EventLog(debug=True)


@pytest.fixture
def hooks():
    return EventHooks()


@pytest.fixture
def transport():
    """Transport mock; set transport.request.return_value / side_effect per test."""
    mock = MagicMock()
    mock.request.return_value = {}
    return mock


@pytest.fixture
def client(transport, response_cache, event_log, hooks):
    """Live-mode client wired to a mock transport."""
    return GptTrainerClient(
        "live-token-1234567890",
        transport=transport,
        cache=response_cache,
        sink=event_log,
        hooks=hooks,
    )


@pytest.fixture
def offline_client(transport, event_log, hooks):
    """Test-mode client; the transport must never be called."""
    return GptTrainerClient(TEST_TOKEN, transport=transport, sink=event_log, hooks=hooks)


# ═══════════════════════════════════════════════════════════════════════════════
# Temporary File Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def tmp_config_file(tmp_path, config_default):
    """Create temporary config file."""
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(config_default))
    return config_file


@pytest.fixture
def uploaded_file(tmp_path):
    """Plain-text upload waiting on disk."""
    path = tmp_path / "upload-tmp-123"
    path.write_bytes(b"hello world")
    return {"tmp_name": str(path), "name": "My Notes.txt", "type": "text/plain"}


# ═══════════════════════════════════════════════════════════════════════════════
# Time Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def fixed_now():
    """Fixed datetime for reproducible tests."""
    return datetime(2024, 12, 19, 14, 30, 0, tzinfo=timezone.utc)
