"""Plain-text helpers for snippet extraction."""

import re
from typing import Iterable, List

_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[\s\S]*?</style>", re.IGNORECASE)
_HTML_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")
_NEEDLE_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9-]{2,}")

# Query-language operators and collection names that never make useful needles.
NEEDLE_STOPWORDS = frozenset(
    {"and", "or", "not", "collection", "crec", "docclass", "house", "senate"}
)
MAX_NEEDLES = 8
ELLIPSIS = "…"


def collapse_whitespace(value: str | None) -> str:
    return _WHITESPACE_RE.sub(" ", value or "").strip()


def strip_html(value: str | None) -> str:
    """Convert potentially HTML-rich text to readable plain text."""
    if not value:
        return ""
    text = _SCRIPT_RE.sub(" ", str(value))
    text = _STYLE_RE.sub(" ", text)
    text = _HTML_TAG_RE.sub(" ", text)
    return collapse_whitespace(text)


def extract_needles(query: str, limit: int = MAX_NEEDLES) -> List[str]:
    """
    Derive search needles from a free-text query.

    Tokens of three or more word characters, lower-cased and de-duplicated in
    first-seen order, with boolean/field operators removed.
    """
    needles: List[str] = []
    seen = set()
    for token in _NEEDLE_RE.findall(query or ""):
        low = token.lower()
        if low in NEEDLE_STOPWORDS or low in seen:
            continue
        seen.add(low)
        needles.append(low)
    return needles[:limit]


def make_snippet(text: str, needles: Iterable[str], width: int = 240) -> str:
    """
    Window of ``width`` characters centred on the first needle found.

    Falls back to the first ``width`` characters when no needle matches.
    Ellipsis markers flag each truncated side.
    """
    cleaned = collapse_whitespace(text)
    if not cleaned:
        return ""
    lower = cleaned.lower()
    idx = -1
    for needle in needles:
        found = lower.find(needle)
        if found >= 0:
            idx = found
            break
    if idx < 0:
        return cleaned[:width]
    start = max(0, idx - width // 2)
    end = min(len(cleaned), start + width)
    prefix = ELLIPSIS if start > 0 else ""
    suffix = ELLIPSIS if end < len(cleaned) else ""
    return f"{prefix}{cleaned[start:end]}{suffix}"
