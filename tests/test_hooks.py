"""
Tests for event hooks.
"""

import pytest

from gpt_trainer.hooks import API_ERROR, EventHooks


def test_emit_calls_listeners_in_order():
    hooks = EventHooks()
    calls = []
    hooks.add_listener(API_ERROR, lambda *args: calls.append(("first", args)))
    hooks.add_listener(API_ERROR, lambda *args: calls.append(("second", args)))

    assert hooks.emit(API_ERROR, "get_tag", "boom", {}) == 2
    assert [name for name, _ in calls] == ["first", "second"]
    assert calls[0][1] == ("get_tag", "boom", {})


def test_emit_without_listeners():
    assert EventHooks().emit("nothing") == 0


def test_remove_listener():
    hooks = EventHooks()

    def listener(*args):
        pass

    hooks.add_listener(API_ERROR, listener)
    assert hooks.remove_listener(API_ERROR, listener) is True
    assert hooks.remove_listener(API_ERROR, listener) is False
    assert hooks.listeners(API_ERROR) == []


def test_listener_errors_propagate():
    hooks = EventHooks()

    def broken(*args):
        raise RuntimeError("listener failed")

    hooks.add_listener(API_ERROR, broken)
    with pytest.raises(RuntimeError):
        hooks.emit(API_ERROR)
