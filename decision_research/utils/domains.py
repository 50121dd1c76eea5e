"""URL identity and domain accounting helpers.

Every domain count that feeds a gating decision goes through
``unique_domain_count`` so thresholds stay comparable across call sites.
"""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

from decision_research.models.source import Source


def safe_domain(url: str) -> str:
    """Return the hostname of ``url`` without a leading ``www.``.

    Malformed URLs (no scheme, no host, unparsable) yield ``""``.

    Example:
        >>> safe_domain("https://www.Example.org/a?b=1")
        'example.org'
        >>> safe_domain("not a url")
        ''
    """
    if not url:
        return ""
    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
    except ValueError:
        return ""
    if not parts.scheme or not host:
        return ""
    return host[4:] if host.startswith("www.") else host


def unique_domain_count(urls: Iterable[str]) -> int:
    """Count distinct domains, skipping malformed URLs."""
    return len({domain for domain in map(safe_domain, urls) if domain})


def domains_in_order(sources: Iterable[Source]) -> list[str]:
    """Distinct domains in order of first appearance."""
    seen: dict[str, None] = {}
    for source in sources:
        domain = safe_domain(source.url)
        if domain:
            seen.setdefault(domain, None)
    return list(seen)


def dedupe_by_url(sources: Iterable[Source]) -> list[Source]:
    """Deduplicate sources by exact URL, keeping the first occurrence.

    Sources without a URL are dropped. Later duplicates are discarded as-is;
    their fields are never merged into the kept source.
    """
    seen: set[str] = set()
    result: list[Source] = []
    for source in sources:
        if not source.url or source.url in seen:
            continue
        seen.add(source.url)
        result.append(source)
    return result
