"""Typed resource models for GPT Trainer API payloads.

Each model maps the JSON object the API returns. Fields the client does not
know about are preserved in ``extra`` so they survive a
``from_dict`` / ``to_dict`` round trip.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, ClassVar, Mapping, Optional

VISIBILITY_PUBLIC = "public"
VISIBILITY_PRIVATE = "private"
VISIBILITIES = frozenset({VISIBILITY_PUBLIC, VISIBILITY_PRIVATE})

DATA_SOURCE_TYPES = frozenset({"file", "url", "qa"})

# MIME types accepted for file data sources unless configured otherwise
ALLOWED_FILE_TYPES = ("text/plain", "application/pdf", "application/json")


def _split_known(cls, data: Mapping[str, Any], skip: tuple = ()) -> tuple[dict, dict]:
    names = {f.name for f in fields(cls)} - {"extra"}
    known = {k: v for k, v in data.items() if k in names and k not in skip}
    extra = {k: v for k, v in data.items() if k not in names}
    return known, extra


def _compact(data: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
    result = {**extra}
    result.update({k: v for k, v in data.items() if v is not None})
    return result


@dataclass
class Resource:
    """Fields shared by every resource kind."""

    kind: ClassVar[str] = "resource"

    uuid: str = ""
    name: str = ""
    description: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        known, extra = _split_known(cls, data)
        return cls(**known, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        return _compact(data, self.extra)


@dataclass
class QAPair:
    question: str
    answer: str

    def to_dict(self) -> dict[str, str]:
        return {"question": self.question, "answer": self.answer}


@dataclass
class DataSource(Resource):
    """Knowledge source attached to chatbots: a file, a URL or Q&A pairs."""

    kind: ClassVar[str] = "data_source"

    type: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    content: Optional[str] = None
    filename: Optional[str] = None
    mime_type: Optional[str] = None
    url: Optional[str] = None
    qa_pairs: Optional[list[QAPair]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DataSource":
        known, extra = _split_known(cls, data, skip=("qa_pairs", "tags"))
        pairs = data.get("qa_pairs")
        qa_pairs = None
        if isinstance(pairs, list):
            qa_pairs = [
                QAPair(str(p.get("question", "")), str(p.get("answer", "")))
                for p in pairs
                if isinstance(p, Mapping)
            ]
        tags = data.get("tags") or []
        return cls(**known, tags=[str(t) for t in tags], qa_pairs=qa_pairs, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.qa_pairs is not None:
            data["qa_pairs"] = [p.to_dict() for p in self.qa_pairs]
        return data


@dataclass
class ChatbotMeta:
    visibility: str = VISIBILITY_PRIVATE
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatbotMeta":
        extra = {k: v for k, v in data.items() if k != "visibility"}
        visibility = data.get("visibility")
        if visibility not in VISIBILITIES:
            visibility = VISIBILITY_PRIVATE
        return cls(visibility=visibility, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "visibility": self.visibility}


@dataclass
class Chatbot(Resource):
    """Chatbot hosted by GPT Trainer."""

    kind: ClassVar[str] = "chatbot"

    meta: ChatbotMeta = field(default_factory=ChatbotMeta)
    data_sources_count: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Chatbot":
        known, extra = _split_known(cls, data, skip=("meta",))
        meta = data.get("meta")
        return cls(
            **known,
            meta=ChatbotMeta.from_dict(meta if isinstance(meta, Mapping) else {}),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["meta"] = self.meta.to_dict()
        return data


@dataclass
class Agent(Resource):
    """Agent configured inside a chatbot."""

    kind: ClassVar[str] = "agent"


@dataclass
class Tag(Resource):
    """Label used to group data sources."""

    kind: ClassVar[str] = "tag"


@dataclass
class Acknowledgment:
    """Result of a side-effecting call with no resource body (delete, retrain)."""

    success: bool = True
    message: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Any) -> "Acknowledgment":
        if not isinstance(data, Mapping):
            return cls(success=True)
        extra = {k: v for k, v in data.items() if k not in ("success", "message")}
        return cls(
            success=bool(data.get("success", True)),
            message=str(data.get("message", "") or ""),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        return {**self.extra, "success": self.success, "message": self.message}


@dataclass
class DeleteOutcome:
    """Per-uuid result of a bulk delete."""

    success: bool
    message: str = ""
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.message:
            data["message"] = self.message
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class AnalysisContent:
    """Content submitted for analysis."""

    title: str = ""
    content: str = ""
    excerpt: str = ""
    meta: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisContent":
        meta = data.get("meta")
        return cls(
            title=str(data.get("title", "") or ""),
            content=str(data.get("content", "") or ""),
            excerpt=str(data.get("excerpt", "") or ""),
            meta=dict(meta) if isinstance(meta, Mapping) else {},
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "excerpt": self.excerpt,
            "meta": self.meta,
        }

    def render(self) -> str:
        """Text substituted for the ``{content}`` prompt placeholder."""
        return "\n\n".join(part for part in (self.title, self.excerpt, self.content) if part)


@dataclass
class AnalysisResult:
    """Structured output of a content analysis."""

    summary: Optional[str] = None
    key_points: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisResult":
        metadata = data.get("metadata")
        summary = data.get("summary")
        return cls(
            summary=str(summary) if summary is not None else None,
            key_points=[str(p) for p in data.get("key_points") or []],
            suggestions=[str(s) for s in data.get("suggestions") or []],
            metadata=dict(metadata) if isinstance(metadata, Mapping) else {},
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "key_points": list(self.key_points),
            "suggestions": list(self.suggestions),
            "metadata": dict(self.metadata),
        }
        if self.summary is not None:
            data["summary"] = self.summary
        return data


@dataclass
class UploadedFile:
    """Handle to an uploaded file waiting on local disk.

    Attributes:
        tmp_name: Path of the temporary file holding the upload.
        name: Original client-side file name.
        type: MIME type reported for the upload.
    """

    tmp_name: Path
    name: str
    type: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UploadedFile":
        return cls(
            tmp_name=Path(str(data.get("tmp_name", ""))),
            name=str(data.get("name", "")),
            type=str(data.get("type", "")),
        )

    def is_genuine(self) -> bool:
        """True if the upload points at an existing regular file, not a link."""
        path = Path(self.tmp_name)
        return bool(str(self.tmp_name)) and path.is_file() and not path.is_symlink()


__all__ = [
    "VISIBILITY_PUBLIC",
    "VISIBILITY_PRIVATE",
    "VISIBILITIES",
    "DATA_SOURCE_TYPES",
    "ALLOWED_FILE_TYPES",
    "Resource",
    "QAPair",
    "DataSource",
    "ChatbotMeta",
    "Chatbot",
    "Agent",
    "Tag",
    "Acknowledgment",
    "DeleteOutcome",
    "AnalysisContent",
    "AnalysisResult",
    "UploadedFile",
]
