"""Input sanitization and validation helpers.

Plain-text fields have markup and control whitespace stripped; rich answers
keep a small allow-listed HTML subset. All helpers are pure functions.
"""

from __future__ import annotations

import html
import ipaddress
import re
from html.parser import HTMLParser
from urllib.parse import urlparse

_TAG_RE = re.compile(r"<[^>]*>")
_SCRIPT_RE = re.compile(r"<(script|style)[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_WHITESPACE_RE = re.compile(r"[\r\n\t ]+")
_LINE_WHITESPACE_RE = re.compile(r"[\t ]+")
_HOST_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")

# Tag -> allowed attributes for rich text fields
ALLOWED_HTML: dict[str, set[str]] = {
    "a": {"href", "title", "target", "rel"},
    "abbr": {"title"},
    "b": set(),
    "blockquote": {"cite"},
    "br": set(),
    "code": set(),
    "em": set(),
    "h1": set(),
    "h2": set(),
    "h3": set(),
    "h4": set(),
    "h5": set(),
    "h6": set(),
    "hr": set(),
    "i": set(),
    "img": {"src", "alt", "title", "width", "height"},
    "li": set(),
    "ol": set(),
    "p": set(),
    "pre": set(),
    "span": set(),
    "strong": set(),
    "table": set(),
    "tbody": set(),
    "td": {"colspan", "rowspan"},
    "th": {"colspan", "rowspan"},
    "thead": set(),
    "tr": set(),
    "u": set(),
    "ul": set(),
}

VOID_TAGS = {"br", "hr", "img"}
DROP_CONTENT_TAGS = {"script", "style", "iframe", "object", "embed"}
URL_ATTRIBUTES = {"href", "src", "cite"}
SAFE_URL_SCHEMES = {"http", "https", "mailto", ""}


def sanitize_text_field(value: object) -> str:
    """Reduce a value to a single line of plain text.

    Strips tags (and script/style bodies), collapses whitespace and trims.

    Args:
        value: Any value; non-strings are converted with str().

    Returns:
        Sanitized string.
    """
    text = "" if value is None else str(value)
    text = _SCRIPT_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def sanitize_textarea_field(value: object) -> str:
    """Like sanitize_text_field but keeps line breaks."""
    text = "" if value is None else str(value)
    text = _SCRIPT_RE.sub("", text)
    text = _TAG_RE.sub("", text)
    lines = [_LINE_WHITESPACE_RE.sub(" ", line).strip() for line in text.splitlines()]
    return "\n".join(lines).strip()


def sanitize_file_name(name: str) -> str:
    """Make an uploaded file name safe to send and store.

    Drops any directory part, replaces whitespace with dashes and removes
    characters outside ``[A-Za-z0-9._-]``.
    """
    name = re.split(r"[\\/]", name or "")[-1]
    name = _WHITESPACE_RE.sub("-", name.strip())
    name = re.sub(r"[^A-Za-z0-9._-]", "", name)
    name = re.sub(r"-{2,}", "-", name).strip(".-_")
    return name or "upload"


def sanitize_key(value: str) -> str:
    """Lowercase identifier containing only a-z, 0-9, dash and underscore."""
    return re.sub(r"[^a-z0-9_-]", "", (value or "").lower())


def _is_safe_url(url: str) -> bool:
    scheme = urlparse(url.strip()).scheme.lower()
    return scheme in SAFE_URL_SCHEMES


class _AllowListParser(HTMLParser):
    """Re-emits only allow-listed tags and attributes."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.parts: list[str] = []
        self._open: list[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in DROP_CONTENT_TAGS:
            self._skip_depth += 1
            return
        if self._skip_depth or tag not in ALLOWED_HTML:
            return
        rendered = []
        for attr, value in attrs:
            if attr not in ALLOWED_HTML[tag]:
                continue
            value = value or ""
            if attr in URL_ATTRIBUTES and not _is_safe_url(value):
                continue
            rendered.append(f' {attr}="{html.escape(value, quote=True)}"')
        if tag in VOID_TAGS:
            self.parts.append(f"<{tag}{''.join(rendered)} />")
        else:
            self.parts.append(f"<{tag}{''.join(rendered)}>")
            self._open.append(tag)

    def handle_startendtag(self, tag, attrs):
        if tag in DROP_CONTENT_TAGS:
            return
        if tag in VOID_TAGS:
            self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag):
        if tag in DROP_CONTENT_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
            return
        if self._skip_depth or tag not in self._open:
            return
        # Close anything left open inside this tag
        while self._open:
            current = self._open.pop()
            self.parts.append(f"</{current}>")
            if current == tag:
                break

    def handle_data(self, data):
        if not self._skip_depth:
            self.parts.append(html.escape(data, quote=False))

    def result(self) -> str:
        while self._open:
            self.parts.append(f"</{self._open.pop()}>")
        return "".join(self.parts)


def sanitize_html(value: object) -> str:
    """Keep a safe HTML subset suitable for rich answer text.

    Unknown tags are removed but their text is kept; script-like tags are
    removed with their content. Event handler attributes and unsafe URL
    schemes (e.g. ``javascript:``) are dropped.

    Args:
        value: Untrusted HTML.

    Returns:
        Sanitized HTML string.
    """
    parser = _AllowListParser()
    parser.feed("" if value is None else str(value))
    parser.close()
    return parser.result().strip()


def validate_url(url: str) -> bool:
    """Check that a URL is well-formed and its host looks resolvable.

    Accepts http/https URLs whose host is ``localhost``, an IP literal, or a
    dotted hostname with valid labels and an alphabetic top-level label.

    Args:
        url: URL to check.

    Returns:
        True if the URL can be used as a data source.
    """
    if not url or not isinstance(url, str) or any(c.isspace() for c in url):
        return False
    try:
        parsed = urlparse(url)
        host = parsed.hostname
        parsed.port  # raises ValueError on a malformed port
    except ValueError:
        return False
    if parsed.scheme.lower() not in ("http", "https") or not host:
        return False
    if host == "localhost":
        return True
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass
    labels = host.rstrip(".").split(".")
    if len(labels) < 2 or not labels[-1].isalpha():
        return False
    return all(_HOST_LABEL_RE.match(label) for label in labels)


__all__ = [
    "ALLOWED_HTML",
    "sanitize_text_field",
    "sanitize_textarea_field",
    "sanitize_file_name",
    "sanitize_key",
    "sanitize_html",
    "validate_url",
]
