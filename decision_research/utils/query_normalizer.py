"""Query normalization utilities for search operations.

Provides whitespace canonicalization, deterministic head/tail truncation,
FNV-1a query hashing and frequency-based keyword extraction.
"""

from __future__ import annotations

import re
from collections import Counter

from decision_research.models.pipeline import QueryTrace

DEFAULT_QUERY_MAX_LENGTH = 400
TRUNCATION_MARKER = " … "
HEAD_SHARE = 0.72

_FNV_OFFSET_BASIS = 0x811C9DC5
_FNV_PRIME = 0x01000193

_WHITESPACE_RE = re.compile(r"\s+")
_KEYWORD_STRIP_RE = re.compile(r"[^a-z0-9\s-]")

STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "and", "for", "with", "from", "that", "this", "are", "was", "were",
        "you", "your", "their", "about", "into", "over", "under", "more", "less",
        "than", "then", "also", "how", "what", "why", "when", "where", "which",
        "who", "whom", "can", "could", "should", "would", "may", "might",
        "evidence", "analysis", "research", "study", "studies", "report", "reports",
    }
)


def normalize_query(query: str | None) -> str:
    """Normalize a query for search operations.

    Collapses whitespace runs (spaces, tabs, newlines) to a single space,
    removes NUL characters and trims both ends.

    Example:
        >>> normalize_query("  python\\n\\n asyncio\\t tips ")
        'python asyncio tips'
    """
    if not query:
        return ""
    return _WHITESPACE_RE.sub(" ", query).replace("\x00", "").strip()


def fnv1a_hash(text: str) -> str:
    """32-bit FNV-1a over the UTF-16 code units of ``text``.

    Example:
        >>> fnv1a_hash("")
        'fnv1a32:811c9dc5'
    """
    data = text.encode("utf-16-le", "surrogatepass")
    h = _FNV_OFFSET_BASIS
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * _FNV_PRIME) & 0xFFFFFFFF
    return f"fnv1a32:{h:08x}"


def truncate_query(query: str, max_length: int = DEFAULT_QUERY_MAX_LENGTH) -> QueryTrace:
    """Normalize and, if needed, shorten a query to ``max_length`` characters.

    Long queries keep their head (72% of the budget) and tail, joined by
    ``TRUNCATION_MARKER``. The hash is always taken from the normalized,
    untruncated text.

    Args:
        query: Raw query text
        max_length: Hard ceiling accepted by the search provider

    Returns:
        QueryTrace with the query to send and its truncation metadata
    """
    normalized = normalize_query(query)
    original_length = len(normalized)
    query_hash = fnv1a_hash(normalized)

    if original_length <= max_length:
        return QueryTrace(
            q=normalized,
            truncated=False,
            original_length=original_length,
            used_length=original_length,
            hash=query_hash,
        )

    keep = max_length - len(TRUNCATION_MARKER)
    head_length = int(keep * HEAD_SHARE)
    tail_length = keep - head_length

    head = normalized[:head_length].rstrip()
    tail = normalized[original_length - tail_length :].lstrip()
    shortened = (head + TRUNCATION_MARKER + tail)[:max_length]

    return QueryTrace(
        q=shortened,
        truncated=True,
        original_length=original_length,
        used_length=len(shortened),
        hash=query_hash,
    )


def extract_keywords(text: str, max_keywords: int) -> list[str]:
    """Extract the most frequent content words from ``text``.

    Tokens shorter than 4 characters and stop words are ignored. Ties in
    frequency are broken alphabetically so the result is deterministic.

    Example:
        >>> extract_keywords("Solar panels: solar costs vs. wind costs", 3)
        ['costs', 'solar', 'panels']
    """
    cleaned = _KEYWORD_STRIP_RE.sub(" ", (text or "").lower())
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    if not cleaned or max_keywords <= 0:
        return []

    counts = Counter(
        token for token in cleaned.split(" ") if len(token) >= 4 and token not in STOP_WORDS
    )
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return [token for token, _ in ranked[:max_keywords]]
