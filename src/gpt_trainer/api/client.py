"""API client for the GPT Trainer service.

Provides CRUD access to data sources, chatbots, agents and tags plus
content analysis, with collection caching and an offline test mode.
"""

from __future__ import annotations

import base64
import functools
import traceback
from dataclasses import is_dataclass
from typing import Any, Callable, Iterable, Mapping, NoReturn, Sequence, TypeVar, Union

from gpt_trainer.api import fixtures
from gpt_trainer.api.cache import (
    AGENTS_KEY_PREFIX,
    CHATBOTS_KEY,
    DATA_SOURCES_KEY,
    MISS,
    TAGS_KEY,
    ResponseCache,
    agents_key,
)
from gpt_trainer.api.transport import DEFAULT_API_URL, DEFAULT_TIMEOUT, HttpTransport
from gpt_trainer.config.security import mask_token
from gpt_trainer.errors import (
    ApiOperationError,
    ConfigurationError,
    DecodeError,
    GptTrainerError,
    HttpError,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from gpt_trainer.hooks import API_ERROR, EventHooks
from gpt_trainer.logger.event_log import ErrorSink, NullLog
from gpt_trainer.models import (
    ALLOWED_FILE_TYPES,
    DATA_SOURCE_TYPES,
    VISIBILITIES,
    VISIBILITY_PRIVATE,
    Acknowledgment,
    Agent,
    AnalysisContent,
    AnalysisResult,
    Chatbot,
    DataSource,
    DeleteOutcome,
    Resource,
    Tag,
    UploadedFile,
)
from gpt_trainer.utils.sanitize import (
    sanitize_file_name,
    sanitize_html,
    sanitize_text_field,
    validate_url,
)

TEST_TOKEN = fixtures.TEST_TOKEN

CONTENT_PLACEHOLDER = "{content}"

# Errors the generic handler reports and wraps; everything else propagates as-is
API_FAILURES = (NetworkError, HttpError, DecodeError)

Payload = Union[Mapping[str, Any], Resource]
R = TypeVar("R", bound=Resource)


def api_operation(name: str) -> Callable:
    """Route transport failures of a client method through _handle_api_error."""

    def decorator(method: Callable) -> Callable:
        @functools.wraps(method)
        def wrapper(self: "GptTrainerClient", *args: Any, **kwargs: Any) -> Any:
            try:
                return method(self, *args, **kwargs)
            except API_FAILURES as e:
                self._handle_api_error(e, name)

        return wrapper

    return decorator


class GptTrainerClient:
    """Client for the GPT Trainer REST API.

    Test mode is enabled for the lifetime of the client when the token is
    the sentinel "test_token"; every operation then returns fixture data
    without network access.

    Args:
        api_token: Bearer token. Required.
        api_base_url: API root URL.
        timeout: Per-request timeout in seconds.
        cache: Collection cache; a fresh ResponseCache by default.
        sink: Receives error, warning and debug events.
        hooks: Observers notified of API errors.
        transport: Object with request(method, path, body); defaults to HttpTransport.
        allowed_file_types: MIME types accepted for file data sources.

    Raises:
        ConfigurationError: If the token is missing or empty.
    """

    def __init__(
        self,
        api_token: str | None,
        api_base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        cache: ResponseCache | None = None,
        sink: ErrorSink | None = None,
        hooks: EventHooks | None = None,
        transport: Any = None,
        allowed_file_types: Iterable[str] | None = None,
    ):
        token = (api_token or "").strip()
        if not token:
            raise ConfigurationError("API token is not configured")

        self._token = token
        self._is_test_mode = token == TEST_TOKEN
        self.base_url = (api_base_url or DEFAULT_API_URL).rstrip("/")
        self.cache = cache if cache is not None else ResponseCache()
        self.sink: ErrorSink = sink if sink is not None else NullLog()
        self.hooks = hooks if hooks is not None else EventHooks()
        self.transport = transport or HttpTransport(self.base_url, token, timeout=timeout)
        self.allowed_file_types = tuple(allowed_file_types or ALLOWED_FILE_TYPES)

        self._debug(
            "API token configured",
            {
                "token_length": len(token),
                "token_preview": mask_token(token, prefix_len=4, suffix_len=0),
                "base_url": self.base_url,
                "test_mode": self._is_test_mode,
            },
        )

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def is_test_mode(self) -> bool:
        return self._is_test_mode

    def is_api_in_test_mode(self) -> bool:
        """Check if the client serves fixture data instead of calling the API."""
        return self._is_test_mode

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    def _debug(self, message: str, context: dict | None = None) -> None:
        self.sink.log("DEBUG", message, context)

    def _request(self, method: str, path: str, body: Any = None) -> Any:
        self._debug(f"API call: {method} {path}", {"method": method, "endpoint": path})
        return self.transport.request(method, path, body)

    def _handle_api_error(self, error: Exception, operation: str) -> NoReturn:
        """Report a failed operation and re-raise it with context.

        Logs to the sink, notifies API_ERROR listeners, then raises
        ApiOperationError chained to the original error. A listener that
        raises is logged as a WARNING and does not change what is raised.
        """
        message = getattr(error, "message", None) or str(error)
        context: dict[str, Any] = {
            "operation": operation,
            "exception": type(error).__name__,
            "message": message,
            "code": getattr(error, "status_code", None) or int(getattr(error, "code", 0)),
        }
        frames = traceback.extract_tb(error.__traceback__)
        if frames:
            context["file"] = frames[-1].filename
            context["line"] = frames[-1].lineno
            context["traceback"] = [f"{f.filename}:{f.lineno} in {f.name}" for f in frames]

        self.sink.log("ERROR", f"API {operation} failed", context)
        try:
            self.hooks.emit(API_ERROR, operation, message, context)
        except Exception as hook_error:
            # A broken listener must not replace the API failure
            self.sink.log(
                "WARNING",
                "api_error listener failed",
                {"operation": operation, "exception": type(hook_error).__name__, "message": str(hook_error)},
            )
        raise ApiOperationError(operation, error) from error

    @staticmethod
    def _payload(data: Payload) -> dict[str, Any]:
        if is_dataclass(data) and isinstance(data, Resource):
            payload = data.to_dict()
            for server_field in ("uuid", "created_at", "updated_at"):
                payload.pop(server_field, None)
            return payload
        if isinstance(data, Mapping):
            return dict(data)
        raise ValidationError(f"Expected a mapping or resource, got {type(data).__name__}")

    def _prepare(self, data: Payload, require_name: bool) -> dict[str, Any]:
        payload = self._payload(data)
        if "name" in payload:
            payload["name"] = sanitize_text_field(payload["name"])
        if require_name and not payload.get("name"):
            raise ValidationError("A name is required")
        return payload

    @staticmethod
    def _items(response: Any, what: str) -> list:
        if isinstance(response, Mapping) and isinstance(response.get("data"), list):
            response = response["data"]
        if not isinstance(response, list):
            raise DecodeError(f"Invalid response format from API: expected list of {what}")
        return response

    @staticmethod
    def _object(response: Any, what: str) -> Mapping[str, Any]:
        if isinstance(response, Mapping) and isinstance(response.get("data"), Mapping):
            response = response["data"]
        if not isinstance(response, Mapping):
            raise DecodeError(
                f"Invalid response format from API: expected {what} object, "
                f"got {type(response).__name__}"
            )
        return response

    def _cached_list(self, key: str, path: str, build: Callable[[Any], list]) -> list:
        cached = self.cache.get(key)
        if cached is not MISS:
            self._debug("Cache hit", {"key": key})
            return cached
        generation = self.cache.generation(key)
        result = build(self._request("GET", path))
        if not self.cache.set(key, result, generation=generation) and self.cache.ttl > 0:
            self._debug("Cache store skipped, invalidated during fetch", {"key": key})
        return result

    def _normalize_chatbot(self, raw: Any) -> Chatbot:
        """Build a Chatbot, defaulting missing or invalid visibility to private."""
        if not isinstance(raw, Mapping) or not raw.get("uuid"):
            raise DecodeError("Invalid chatbot data: missing UUID")
        data = dict(raw)
        meta = data.get("meta")
        meta = dict(meta) if isinstance(meta, Mapping) else {}
        if meta.get("visibility") not in VISIBILITIES:
            self.sink.log(
                "WARNING",
                "Invalid or missing visibility, defaulting to private",
                {"uuid": data["uuid"], "current_visibility": meta.get("visibility", "undefined")},
            )
            meta["visibility"] = VISIBILITY_PRIVATE
        data["meta"] = meta
        return Chatbot.from_dict(data)

    @staticmethod
    def _build(model: type[R], response: Any, what: str) -> R:
        return model.from_dict(GptTrainerClient._object(response, what))

    # ------------------------------------------------------------------
    # Data sources
    # ------------------------------------------------------------------

    def _sanitize_tags(self, tags: Iterable[str]) -> list[str]:
        return [t for t in (sanitize_text_field(tag) for tag in tags or ()) if t]

    def create_file_data_source(
        self, name: str, file: UploadedFile | Mapping[str, Any], tags: Iterable[str] = ()
    ) -> DataSource:
        """Upload a local file as a data source.

        Args:
            name: Data source name.
            file: Upload handle (UploadedFile or mapping with tmp_name/name/type).
            tags: Optional tags.

        Raises:
            ValidationError: Invalid upload handle, disallowed MIME type, or unreadable file.
        """
        if isinstance(file, UploadedFile):
            upload = file
        elif isinstance(file, Mapping):
            upload = UploadedFile.from_dict(file)
        else:
            raise ValidationError("Invalid file upload")
        if not upload.is_genuine():
            raise ValidationError("Invalid file upload")
        if upload.type not in self.allowed_file_types:
            raise ValidationError(f"Invalid file type: {sanitize_text_field(upload.type)}")
        try:
            raw = upload.tmp_name.read_bytes()
        except OSError as e:
            raise ValidationError("Failed to read uploaded file", details=str(e)) from e

        return self.create_data_source(
            {
                "name": name,
                "type": "file",
                "content": base64.b64encode(raw).decode("ascii"),
                "filename": sanitize_file_name(upload.name),
                "mime_type": sanitize_text_field(upload.type),
                "tags": self._sanitize_tags(tags),
            }
        )

    def create_url_data_source(self, name: str, url: str, tags: Iterable[str] = ()) -> DataSource:
        """Register a web page as a data source.

        Raises:
            ValidationError: If the URL is malformed.
        """
        if not validate_url(url):
            raise ValidationError("Invalid URL provided", details=str(url)[:200])
        return self.create_data_source(
            {"name": name, "type": "url", "url": url.strip(), "tags": self._sanitize_tags(tags)}
        )

    def create_qa_data_source(
        self, name: str, qa_pairs: Sequence[Mapping[str, Any]], tags: Iterable[str] = ()
    ) -> DataSource:
        """Create a data source from question/answer pairs.

        Questions are reduced to plain text; answers keep a safe HTML subset.

        Raises:
            ValidationError: If any pair lacks a question or an answer.
        """
        sanitized = []
        for pair in qa_pairs:
            if not isinstance(pair, Mapping) or "question" not in pair or "answer" not in pair:
                raise ValidationError("Invalid Q&A pair format")
            if pair["question"] is None or pair["answer"] is None:
                raise ValidationError("Invalid Q&A pair format")
            sanitized.append(
                {
                    "question": sanitize_text_field(pair["question"]),
                    "answer": sanitize_html(pair["answer"]),
                }
            )
        return self.create_data_source(
            {"name": name, "type": "qa", "qa_pairs": sanitized, "tags": self._sanitize_tags(tags)}
        )

    @api_operation("create_data_source")
    def create_data_source(self, data: Payload) -> DataSource:
        payload = self._prepare(data, require_name=True)
        if payload.get("type") not in DATA_SOURCE_TYPES:
            raise ValidationError(f"Invalid data source type: {payload.get('type')}")
        self._debug("Creating data source", {"type": payload["type"]})

        if self._is_test_mode:
            return DataSource.from_dict(fixtures.created_data_source(payload))

        response = self._request("POST", "/data-sources", payload)
        self.cache.invalidate(DATA_SOURCES_KEY)
        return self._build(DataSource, response, "data source")

    @api_operation("get_all_data_sources")
    def get_all_data_sources(self) -> list[DataSource]:
        self._debug("Getting all data sources")
        if self._is_test_mode:
            return [DataSource.from_dict(d) for d in fixtures.data_sources()]
        return self._cached_list(
            DATA_SOURCES_KEY,
            "/data-sources",
            lambda r: [DataSource.from_dict(d) for d in self._items(r, "data sources")],
        )

    @api_operation("get_data_source")
    def get_data_source(self, uuid: str) -> DataSource:
        self._debug("Getting data source", {"uuid": uuid})
        if self._is_test_mode:
            return DataSource.from_dict(fixtures.data_source(uuid))
        return self._build(DataSource, self._request("GET", f"/data-sources/{uuid}"), "data source")

    @api_operation("update_data_source")
    def update_data_source(self, uuid: str, data: Payload) -> DataSource:
        payload = self._prepare(data, require_name=False)
        self._debug("Updating data source", {"uuid": uuid})
        if self._is_test_mode:
            return DataSource.from_dict(fixtures.updated(uuid, payload))

        response = self._request("PUT", f"/data-sources/{uuid}", payload)
        self.cache.invalidate(DATA_SOURCES_KEY)
        return self._build(DataSource, response, "data source")

    @api_operation("delete_data_source")
    def delete_data_source(self, uuid: str) -> Acknowledgment:
        self._debug("Deleting data source", {"uuid": uuid})
        if self._is_test_mode:
            return Acknowledgment.from_dict(fixtures.acknowledgment("Test data source deleted"))

        response = self._request("DELETE", f"/data-sources/{uuid}")
        self.cache.invalidate(DATA_SOURCES_KEY)
        return Acknowledgment.from_dict(response)

    @api_operation("retrain_data_source")
    def retrain_data_source(self, uuid: str) -> Acknowledgment:
        self._debug("Retraining data source", {"uuid": uuid})
        if self._is_test_mode:
            return Acknowledgment.from_dict(fixtures.acknowledgment("Test data source retrained"))
        return Acknowledgment.from_dict(self._request("POST", f"/data-sources/{uuid}/retrain"))

    def delete_multiple_data_sources(self, uuids: Iterable[str]) -> dict[str, DeleteOutcome]:
        """Delete several data sources, continuing past individual failures.

        Returns:
            Mapping of uuid to its outcome, in input order.
        """
        results: dict[str, DeleteOutcome] = {}
        for uuid in uuids:
            try:
                ack = self.delete_data_source(uuid)
                results[uuid] = DeleteOutcome(success=ack.success, message=ack.message)
            except GptTrainerError as e:
                results[uuid] = DeleteOutcome(success=False, error=e.message)
        return results

    # ------------------------------------------------------------------
    # Chatbots
    # ------------------------------------------------------------------

    @api_operation("create_chatbot")
    def create_chatbot(self, data: Payload) -> Chatbot:
        payload = self._prepare(data, require_name=True)
        self._debug("Creating chatbot")
        if self._is_test_mode:
            return self._normalize_chatbot(
                fixtures.created("chatbot", payload, base=fixtures.chatbots()[0])
            )

        response = self._request("POST", "/chatbot/create", payload)
        self.cache.invalidate(CHATBOTS_KEY)
        return self._normalize_chatbot(self._object(response, "chatbot"))

    @api_operation("get_all_chatbots")
    def get_all_chatbots(self) -> list[Chatbot]:
        self._debug("Getting all chatbots")
        if self._is_test_mode:
            return [self._normalize_chatbot(c) for c in fixtures.chatbots()]
        return self._cached_list(
            CHATBOTS_KEY,
            "/chatbots",
            lambda r: [self._normalize_chatbot(c) for c in self._items(r, "chatbots")],
        )

    @api_operation("get_chatbot")
    def get_chatbot(self, uuid: str) -> Chatbot | None:
        """Fetch one chatbot.

        Returns:
            The chatbot, or None if the API answers 404.

        Raises:
            NotFoundError: In test mode, when uuid is not a fixture chatbot.
        """
        self._debug("Getting chatbot", {"uuid": uuid, "test_mode": self._is_test_mode})
        if self._is_test_mode:
            found = fixtures.find_chatbot(uuid)
            if found is None:
                raise NotFoundError(f"Chatbot not found: {uuid}")
            return self._normalize_chatbot(found)

        try:
            response = self._request("GET", f"/chatbot/{uuid}")
        except HttpError as e:
            if e.status_code == 404:
                self._debug("Chatbot not found", {"uuid": uuid})
                return None
            raise
        chatbot = self._normalize_chatbot(self._object(response, "chatbot"))
        self._debug(
            "Chatbot retrieved successfully",
            {"uuid": uuid, "name": chatbot.name or "Unknown", "visibility": chatbot.meta.visibility},
        )
        return chatbot

    @api_operation("update_chatbot")
    def update_chatbot(self, uuid: str, data: Payload) -> Chatbot:
        payload = self._prepare(data, require_name=False)
        self._debug("Updating chatbot", {"uuid": uuid})
        if self._is_test_mode:
            return self._normalize_chatbot(
                fixtures.updated(uuid, payload, base=fixtures.chatbots()[0])
            )

        response = self._request("POST", f"/chatbot/{uuid}/update", payload)
        self.cache.invalidate(CHATBOTS_KEY)
        return self._normalize_chatbot(self._object(response, "chatbot"))

    @api_operation("delete_chatbot")
    def delete_chatbot(self, uuid: str) -> Acknowledgment:
        self._debug("Deleting chatbot", {"uuid": uuid})
        if self._is_test_mode:
            return Acknowledgment.from_dict(fixtures.acknowledgment("Test chatbot deleted"))

        response = self._request("DELETE", f"/chatbot/{uuid}/delete")
        self.cache.invalidate(CHATBOTS_KEY)
        self.cache.invalidate(agents_key(uuid))
        return Acknowledgment.from_dict(response)

    # ------------------------------------------------------------------
    # Agents
    # ------------------------------------------------------------------

    def _invalidate_agents(self, chatbot_uuid: str | None) -> None:
        if chatbot_uuid:
            self.cache.invalidate(agents_key(chatbot_uuid))
        else:
            # Owner unknown: drop every agent scope
            self.cache.invalidate_prefix(AGENTS_KEY_PREFIX)

    @api_operation("create_agent")
    def create_agent(self, chatbot_uuid: str, data: Payload) -> Agent:
        payload = self._prepare(data, require_name=True)
        self._debug("Creating agent", {"chatbot_uuid": chatbot_uuid})
        if self._is_test_mode:
            return Agent.from_dict(fixtures.created("agent", payload))

        response = self._request("POST", f"/chatbot/{chatbot_uuid}/agent/create", payload)
        self.cache.invalidate(agents_key(chatbot_uuid))
        return self._build(Agent, response, "agent")

    @api_operation("get_all_agents")
    def get_all_agents(self, chatbot_uuid: str) -> list[Agent]:
        self._debug("Getting all agents", {"chatbot_uuid": chatbot_uuid})
        if self._is_test_mode:
            return [Agent.from_dict(a) for a in fixtures.agents()]
        return self._cached_list(
            agents_key(chatbot_uuid),
            f"/chatbot/{chatbot_uuid}/agents",
            lambda r: [Agent.from_dict(a) for a in self._items(r, "agents")],
        )

    @api_operation("get_agent")
    def get_agent(self, uuid: str) -> Agent:
        self._debug("Getting agent", {"uuid": uuid})
        if self._is_test_mode:
            return Agent.from_dict(fixtures.single("agent", uuid))
        return self._build(Agent, self._request("GET", f"/agent/{uuid}"), "agent")

    @api_operation("update_agent")
    def update_agent(self, uuid: str, data: Payload, chatbot_uuid: str | None = None) -> Agent:
        payload = self._prepare(data, require_name=False)
        self._debug("Updating agent", {"uuid": uuid})
        if self._is_test_mode:
            return Agent.from_dict(fixtures.updated(uuid, payload))

        response = self._request("PUT", f"/agent/{uuid}/update", payload)
        self._invalidate_agents(chatbot_uuid)
        return self._build(Agent, response, "agent")

    @api_operation("delete_agent")
    def delete_agent(self, uuid: str, chatbot_uuid: str | None = None) -> Acknowledgment:
        self._debug("Deleting agent", {"uuid": uuid})
        if self._is_test_mode:
            return Acknowledgment.from_dict(fixtures.acknowledgment("Test agent deleted"))

        response = self._request("DELETE", f"/agent/{uuid}/delete")
        self._invalidate_agents(chatbot_uuid)
        return Acknowledgment.from_dict(response)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    @api_operation("create_tag")
    def create_tag(self, data: Payload) -> Tag:
        payload = self._prepare(data, require_name=True)
        self._debug("Creating tag")
        if self._is_test_mode:
            return Tag.from_dict(fixtures.created("tag", payload))

        response = self._request("POST", "/tag/create", payload)
        self.cache.invalidate(TAGS_KEY)
        return self._build(Tag, response, "tag")

    @api_operation("get_all_tags")
    def get_all_tags(self) -> list[Tag]:
        self._debug("Getting all tags")
        if self._is_test_mode:
            return [Tag.from_dict(t) for t in fixtures.tags()]
        return self._cached_list(
            TAGS_KEY,
            "/tag/list",
            lambda r: [Tag.from_dict(t) for t in self._items(r, "tags")],
        )

    @api_operation("get_tag")
    def get_tag(self, uuid: str) -> Tag:
        self._debug("Getting tag", {"uuid": uuid})
        if self._is_test_mode:
            return Tag.from_dict(fixtures.single("tag", uuid))
        return self._build(Tag, self._request("GET", f"/tag/{uuid}"), "tag")

    @api_operation("update_tag")
    def update_tag(self, uuid: str, data: Payload) -> Tag:
        payload = self._prepare(data, require_name=False)
        self._debug("Updating tag", {"uuid": uuid})
        if self._is_test_mode:
            return Tag.from_dict(fixtures.updated(uuid, payload))

        response = self._request("PUT", f"/tag/{uuid}/update", payload)
        self.cache.invalidate(TAGS_KEY)
        return self._build(Tag, response, "tag")

    @api_operation("delete_tag")
    def delete_tag(self, uuid: str) -> Acknowledgment:
        self._debug("Deleting tag", {"uuid": uuid})
        if self._is_test_mode:
            return Acknowledgment.from_dict(fixtures.acknowledgment("Test tag deleted"))

        response = self._request("DELETE", f"/tag/{uuid}/delete")
        self.cache.invalidate(TAGS_KEY)
        return Acknowledgment.from_dict(response)

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    @api_operation("analyze_content")
    def analyze_content(
        self, prompt: str, content: AnalysisContent | Mapping[str, Any]
    ) -> AnalysisResult:
        """Submit content for analysis with a prompt template.

        Args:
            prompt: Template containing a "{content}" placeholder.
            content: Title, body, excerpt and metadata to analyze.

        Returns:
            Structured analysis result.

        Raises:
            ValidationError: If the prompt has no "{content}" placeholder.
        """
        if not prompt or CONTENT_PLACEHOLDER not in prompt:
            raise ValidationError(f"Prompt must contain the {CONTENT_PLACEHOLDER} placeholder")
        if not isinstance(content, AnalysisContent):
            content = AnalysisContent.from_dict(content)

        rendered = prompt.replace(CONTENT_PLACEHOLDER, content.render())
        self._debug("Analyzing content", {"title": content.title, "prompt_length": len(rendered)})

        if self._is_test_mode:
            return AnalysisResult.from_dict(fixtures.analysis(rendered, content.to_dict()))

        response = self._request(
            "POST",
            "/analyze",
            {"prompt": rendered, "prompt_template": prompt, "content": content.to_dict()},
        )
        return AnalysisResult.from_dict(self._object(response, "analysis"))


__all__ = [
    "TEST_TOKEN",
    "ALLOWED_FILE_TYPES",
    "CONTENT_PLACEHOLDER",
    "GptTrainerClient",
    "api_operation",
]
