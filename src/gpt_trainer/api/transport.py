"""HTTP transport for the GPT Trainer API.

One authenticated JSON request per call: no retries, fixed timeout.
"""

from __future__ import annotations

import json
import socket
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from gpt_trainer._version import __version__
from gpt_trainer.errors import (
    DecodeError,
    categorize_http_error,
    categorize_network_error,
)

DEFAULT_API_URL = "https://app.gpt-trainer.com/api/v1"
DEFAULT_TIMEOUT = 30  # seconds
USER_AGENT = f"gpt-trainer-client/{__version__}"


class HttpTransport:
    """Performs single JSON request/response cycles against the API.

    Args:
        base_url: API root, e.g. "https://app.gpt-trainer.com/api/v1".
        token: Bearer token sent with every request.
        timeout: Request timeout in seconds.
        opener: Callable with urlopen's signature; injectable for tests.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        opener: Callable[..., Any] | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._token = token
        self.timeout = timeout
        self._opener = opener

    def headers(self) -> dict[str, str]:
        """Request headers with authentication."""
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def request(self, method: str, path: str, body: Any = None) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Endpoint path relative to the base URL.
            body: Optional JSON-serializable request body.

        Returns:
            Decoded JSON value (object or array). An empty body decodes to {}.

        Raises:
            HttpError: Status >= 400; carries status code and raw body.
            DecodeError: Body is not valid JSON.
            NetworkError: DNS, connection or timeout failure.
        """
        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = Request(
            self.url_for(path),
            data=data,
            headers=self.headers(),
            method=method.upper(),
        )
        opener = self._opener or urlopen

        try:
            with opener(req, timeout=self.timeout) as response:
                status = getattr(response, "status", 200)
                raw = response.read().decode("utf-8", errors="replace")
        except HTTPError as e:
            raw_error = ""
            try:
                raw_error = e.read().decode("utf-8", errors="replace") if e.fp else ""
            except OSError:
                pass
            raise categorize_http_error(e.code, raw_error) from e
        except URLError as e:
            raise categorize_network_error(str(e.reason)) from e
        except (socket.timeout, TimeoutError) as e:
            raise categorize_network_error(f"timed out: {e}") from e
        except OSError as e:
            raise categorize_network_error(str(e)) from e

        if isinstance(status, int) and status >= 400:
            raise categorize_http_error(status, raw)

        if not raw.strip():
            return {}
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Invalid JSON response: {e.msg}") from e


__all__ = [
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
    "HttpTransport",
]
