"""Test-mode fixture data.

Generates realistic sample responses in the same shape as the live API so
the client can run without network access. Nothing here keeps state between
calls.
"""

from __future__ import annotations

import uuid as uuid_lib
from typing import Any, Mapping

from gpt_trainer.utils.time import format_timestamp, timestamp_ago, utc_now

TEST_TOKEN = "test_token"


def fixture_uuid(kind: str) -> str:
    """Fixture uuid such as "test-tag-3f2a9c...".

    Args:
        kind: Resource kind slug ("data-source", "chatbot", "agent", "tag").
    """
    return f"test-{kind}-{uuid_lib.uuid4().hex}"


def _now() -> str:
    return format_timestamp(utc_now())


def data_sources() -> list[dict[str, Any]]:
    return [
        {
            "uuid": "test-data-source-1",
            "name": "Test Data Source 1",
            "type": "url",
            "url": "https://example.com/handbook",
            "description": "A test data source for development",
            "created_at": timestamp_ago(days=5),
            "tags": ["test", "development"],
        },
        {
            "uuid": "test-data-source-2",
            "name": "Test Data Source 2",
            "type": "file",
            "filename": "faq.pdf",
            "mime_type": "application/pdf",
            "description": "Another test data source",
            "created_at": timestamp_ago(days=2),
            "tags": ["test"],
        },
    ]


def data_source(uuid: str) -> dict[str, Any]:
    return {
        "uuid": uuid,
        "name": "Test Data Source",
        "type": "qa",
        "description": "A test data source for development",
        "qa_pairs": [{"question": "What is this?", "answer": "Test content"}],
        "created_at": timestamp_ago(days=5),
        "tags": ["test", "development"],
    }


def created_data_source(data: Mapping[str, Any]) -> dict[str, Any]:
    result = {k: v for k, v in data.items() if k != "content"}
    result.update({"uuid": fixture_uuid("data-source"), "created_at": _now()})
    return result


def chatbots() -> list[dict[str, Any]]:
    return [
        {
            "uuid": "test-1",
            "name": "Test Chatbot 1",
            "description": "A test chatbot for development",
            "data_sources_count": 2,
            "meta": {"visibility": "public"},
            "created_at": timestamp_ago(days=1),
            "updated_at": _now(),
        },
        {
            "uuid": "test-2",
            "name": "Test Chatbot 2",
            "description": "Another test chatbot",
            "data_sources_count": 1,
            "meta": {"visibility": "private"},
            "created_at": timestamp_ago(days=2),
            "updated_at": timestamp_ago(days=1),
        },
    ]


def find_chatbot(uuid: str) -> dict[str, Any] | None:
    for chatbot in chatbots():
        if chatbot["uuid"] == uuid:
            return chatbot
    return None


def agents() -> list[dict[str, Any]]:
    return [
        {
            "uuid": "test-agent-1",
            "name": "Test Agent 1",
            "description": "A test agent for development",
            "created_at": timestamp_ago(days=5),
        },
        {
            "uuid": "test-agent-2",
            "name": "Test Agent 2",
            "description": "Another test agent for development",
            "created_at": timestamp_ago(days=2),
        },
    ]


def tags() -> list[dict[str, Any]]:
    return [
        {
            "uuid": "test-tag-1",
            "name": "Test Tag 1",
            "description": "A test tag for development",
            "created_at": timestamp_ago(days=5),
        },
        {
            "uuid": "test-tag-2",
            "name": "Test Tag 2",
            "description": "Another test tag for development",
            "created_at": timestamp_ago(days=2),
        },
    ]


def single(kind: str, uuid: str) -> dict[str, Any]:
    """Sample object returned by get_agent / get_tag in test mode."""
    label = {"agent": "Agent", "tag": "Tag"}[kind]
    return {
        "uuid": uuid,
        "name": f"Test {label}",
        "description": f"A test {kind} for development",
        "created_at": timestamp_ago(days=5),
    }


def created(kind: str, data: Mapping[str, Any], base: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Echo of a create call with a fresh uuid and created_at."""
    result = dict(base or {})
    result.update(data)
    result.update({"uuid": fixture_uuid(kind), "created_at": _now()})
    result.setdefault("description", "")
    return result


def updated(uuid: str, data: Mapping[str, Any], base: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Echo of an update call with updated_at set to now."""
    result = dict(base or {})
    result.update(data)
    result.update({"uuid": uuid, "updated_at": _now()})
    result.setdefault("description", "")
    return result


def acknowledgment(message: str) -> dict[str, Any]:
    return {"success": True, "message": message}


def analysis(prompt: str, content: Mapping[str, Any]) -> dict[str, Any]:
    title = content.get("title") or "Untitled"
    body = str(content.get("content") or "")
    return {
        "summary": f"Test analysis of '{title}'",
        "key_points": [
            "Content is clearly structured",
            "Main topic is introduced early",
        ],
        "suggestions": [
            "Add a short excerpt for listings",
            "Link related content",
        ],
        "metadata": {
            "word_count": len(body.split()),
            "prompt_length": len(prompt),
            "test_mode": True,
        },
    }


__all__ = [
    "TEST_TOKEN",
    "fixture_uuid",
    "data_sources",
    "data_source",
    "created_data_source",
    "chatbots",
    "find_chatbot",
    "agents",
    "tags",
    "single",
    "created",
    "updated",
    "acknowledgment",
    "analysis",
]
