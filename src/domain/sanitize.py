import re
from urllib.parse import urlparse

_TAG = re.compile(r"<[^>]*>")

# Elements removed together with their body.
_PAIRED = ("script", "iframe", "object", "form", "button", "textarea", "select", "style")
# Elements removed on their own (void or self-contained).
_VOID = ("embed", "input", "link", "meta", "base")

_DANGEROUS = [
    re.compile(rf"<{name}\b[^<]*(?:(?!</{name}>)<[^<]*)*</{name}>", re.IGNORECASE)
    for name in _PAIRED
] + [re.compile(rf"<{name}\b[^>]*>", re.IGNORECASE) for name in _VOID]

_EVENT_HANDLER_QUOTED = re.compile(r"""\s*on\w+\s*=\s*["'][^"']*["']""", re.IGNORECASE)
_EVENT_HANDLER_BARE = re.compile(r"\s*on\w+\s*=\s*[^\s>]*", re.IGNORECASE)
_SCRIPT_URLS = [
    re.compile(r"javascript\s*:", re.IGNORECASE),
    re.compile(r"data\s*:\s*text/html", re.IGNORECASE),
    re.compile(r"vbscript\s*:", re.IGNORECASE),
]


def strip_html(text: str) -> str:
    return _TAG.sub("", text)


def sanitize_text(text: str) -> str:
    """Plain text fields (titles, excerpts, tag names): no markup at all."""
    return strip_html(text).strip()


def sanitize_markdown(text: str) -> str:
    """
    Markdown bodies keep harmless inline HTML but lose active content:
    script-capable elements, inline event handlers and script URLs.
    """
    sanitized = text
    for pattern in _DANGEROUS:
        sanitized = pattern.sub("", sanitized)

    sanitized = _EVENT_HANDLER_QUOTED.sub("", sanitized)
    sanitized = _EVENT_HANDLER_BARE.sub("", sanitized)

    for pattern in _SCRIPT_URLS:
        sanitized = pattern.sub("", sanitized)

    return sanitized


def sanitize_url(url: str, allowed_schemes: list[str]) -> str | None:
    """Return the URL if it is absolute and uses an allowed scheme, else None."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    if parsed.scheme.lower() not in allowed_schemes or not parsed.netloc:
        return None

    lowered = url.lower()
    if "javascript:" in lowered or "data:text/html" in lowered:
        return None

    return url.strip()
