"""
Tests for the event log.

Tests cover:
- Level filtering and DEBUG gating
- File-backed and in-memory storage
- get_logs() filters, ordering and paging
- clear_old_logs() retention
- Rotation and notifier forwarding
"""

import json
import stat
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest

import gpt_trainer.logger.event_log as event_log_module
from gpt_trainer.logger.event_log import EventLog, NullLog, sanitize_context


class SteppingClock:
    """Returns a datetime that moves forward one minute per call."""

    def __init__(self, start):
        self.now = start

    def __call__(self):
        current = self.now
        self.now += timedelta(minutes=1)
        return current


class TestLog:
    """Tests for log() and the level helpers."""

    def test_debug_dropped_unless_enabled(self):
        log = EventLog()
        log.debug("quiet")
        log.info("loud")
        assert [e["message"] for e in log.get_logs()] == ["loud"]

    def test_debug_recorded_when_enabled(self):
        log = EventLog(debug=True)
        log.debug("details", {"uuid": "cb-1"})
        entry = log.get_logs()[0]
        assert entry["level"] == "DEBUG"
        assert entry["context"] == {"uuid": "cb-1"}

    def test_unknown_level_ignored(self):
        log = EventLog()
        log.log("TRACE", "nope")
        log.log("warning", "lowercase ok")
        assert [e["level"] for e in log.get_logs()] == ["WARNING"]

    def test_secrets_masked(self):
        log = EventLog()
        log.error("failed", {"api_token": "abcdefgh12345678", "nested": {"secret": "x"}})
        context = log.get_logs()[0]["context"]
        assert context["api_token"] == "abcd...5678"
        assert context["nested"]["secret"] == "***"

    def test_writes_json_lines(self, tmp_path):
        path = tmp_path / "logs" / "events.log"
        log = EventLog(log_path=path)

        log.warning("first")
        log.error("second")

        lines = path.read_text().splitlines()
        assert [json.loads(line)["message"] for line in lines] == ["first", "second"]
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_null_log_discards(self):
        assert NullLog().log("ERROR", "gone") is None


class TestNotifier:
    """Tests for ERROR/CRITICAL forwarding."""

    def test_error_and_critical_forwarded(self):
        notifier = MagicMock()
        log = EventLog(notifier=notifier)

        log.warning("not forwarded")
        log.error("API get_tag failed", {"operation": "get_tag"})
        log.critical("down")

        assert notifier.send_notification.call_count == 2
        level, message, context = notifier.send_notification.call_args_list[0].args
        assert (level, message, context) == ("ERROR", "API get_tag failed", {"operation": "get_tag"})


class TestGetLogs:
    """Tests for get_logs() filtering."""

    def make_log(self, fixed_now):
        log = EventLog(debug=True, clock=SteppingClock(fixed_now))
        for i, level in enumerate(["INFO", "ERROR", "WARNING", "ERROR", "DEBUG"]):
            log.log(level, f"event {i}")
        return log

    def test_newest_first_by_default(self, fixed_now):
        log = self.make_log(fixed_now)
        assert [e["message"] for e in log.get_logs()] == [f"event {i}" for i in range(4, -1, -1)]

    def test_level_filter_and_ascending(self, fixed_now):
        log = self.make_log(fixed_now)
        messages = [e["message"] for e in log.get_logs(level="error", order="ASC")]
        assert messages == ["event 1", "event 3"]

    def test_date_range(self, fixed_now):
        log = self.make_log(fixed_now)
        entries = log.get_logs(
            date_from=(fixed_now + timedelta(minutes=1)).isoformat(),
            date_to="2024-12-19 14:33:00",
            order="ASC",
        )
        assert [e["message"] for e in entries] == ["event 1", "event 2", "event 3"]

    def test_limit_and_offset(self, fixed_now):
        log = self.make_log(fixed_now)
        entries = log.get_logs(limit=2, offset=1, order="ASC")
        assert [e["message"] for e in entries] == ["event 1", "event 2"]

    def test_missing_file_is_empty(self, tmp_path):
        assert EventLog(log_path=tmp_path / "none.log").get_logs() == []


class TestClearOldLogs:
    """Tests for clear_old_logs() retention."""

    def test_removes_entries_older_than_cutoff(self, tmp_path, fixed_now):
        path = tmp_path / "events.log"
        old = EventLog(log_path=path, clock=lambda: fixed_now - timedelta(days=40))
        old.error("ancient")
        current = EventLog(log_path=path, clock=lambda: fixed_now)
        current.error("recent")

        removed = current.clear_old_logs(days=30)

        assert removed == 1
        assert [e["message"] for e in current.get_logs()] == ["recent"]

    def test_nothing_to_remove(self, fixed_now):
        log = EventLog(clock=lambda: fixed_now)
        log.info("fresh")
        assert log.clear_old_logs(days=1) == 0


class TestRotation:
    """Tests for size-based rotation."""

    def test_rotates_when_over_limit(self, tmp_path):
        path = tmp_path / "events.log"
        path.write_text("x" * 2048)

        with patch.object(event_log_module, "LOG_MAX_SIZE_MB", 0.001):
            EventLog(log_path=path).error("after rotation")

        assert (tmp_path / "events.log.1").read_text() == "x" * 2048
        assert json.loads(path.read_text())["message"] == "after rotation"

    def test_clock_default_is_utc(self):
        log = EventLog()
        log.info("now")
        stamp = datetime.fromisoformat(log.get_logs()[0]["timestamp"])
        assert stamp.tzinfo is not None
        assert abs(stamp - datetime.now(timezone.utc)) < timedelta(minutes=1)

    def test_sanitize_context_short_secret(self):
        assert sanitize_context({"password": "pw"}) == {"password": "***"}

    @pytest.mark.parametrize(
        "key,masked",
        [
            ("token", True),
            ("api_token", True),
            ("X-Api-Key", True),
            ("notification_secret", True),
            ("Authorization", True),
            ("token_length", False),
            ("token_preview", False),
            ("keywords", False),
            ("monkey", False),
        ],
    )
    def test_sanitize_context_key_matching(self, key, masked):
        result = sanitize_context({key: "abcdefgh12345678"})[key]
        assert (result != "abcdefgh12345678") is masked
