"""Query construction for the seed, expand and authority passes."""

from __future__ import annotations

from decision_research.models.pipeline import PipelineInput
from decision_research.models.source import Source
from decision_research.utils.domains import domains_in_order
from decision_research.utils.query_normalizer import extract_keywords, normalize_query

EXPAND_SOURCE_WINDOW = 6
EXPAND_KEYWORDS = 10
MAX_DOMAIN_HINTS = 8
AUTHORITY_SITE_QUERIES = 3

# Priority order matters: the first AUTHORITY_SITE_QUERIES entries get site: queries.
AUTHORITY_DOMAINS: tuple[str, ...] = (
    "wikipedia.org",
    "gov",
    "europa.eu",
    "who.int",
    "oecd.org",
    "imf.org",
    "worldbank.org",
    "nature.com",
    "science.org",
    "sciencedirect.com",
    "jamanetwork.com",
    "nejm.org",
    "harvard.edu",
    "mit.edu",
)


def _clean(queries: list[str]) -> list[str]:
    return [q for q in map(normalize_query, queries) if q]


def pick_authority_domains(n: int) -> list[str]:
    return list(AUTHORITY_DOMAINS[:n])


def build_seed_queries(request: PipelineInput) -> list[str]:
    """Context framing, decision criteria and risk queries."""
    return _clean(
        [
            f"{request.goal}. Context: {request.decision}.",
            f"{request.decision} evidence benchmarks and decision criteria",
            f"{request.decision} risks edge cases trade-offs",
        ]
    )


def build_expand_queries(request: PipelineInput, seed_sources: list[Source]) -> list[str]:
    """Decision queries widened with keywords mined from the first seed results.

    Keywords come from the title and snippet of the first six seed sources
    (pass order) and are split into disjoint slices, one per query.
    """
    texts = [
        f"{s.title or ''} {s.snippet or ''}".strip() for s in seed_sources[:EXPAND_SOURCE_WINDOW]
    ]
    keywords = extract_keywords(" ".join(t for t in texts if t), EXPAND_KEYWORDS)

    base = request.decision
    return _clean(
        [
            f"{base} {' '.join(keywords[0:3])} comparative analysis",
            f"{base} {' '.join(keywords[3:6])} latest evidence",
            f"{base} {' '.join(keywords[6:10])} failure modes",
        ]
    )


def build_authority_queries(request: PipelineInput, sources_so_far: list[Source]) -> list[str]:
    """One consensus query with domain hints plus site: queries on authority domains."""
    domains = domains_in_order(sources_so_far)[:MAX_DOMAIN_HINTS]
    domain_hints = f" Already-seen domains: {', '.join(domains)}." if domains else ""

    base = f"{request.decision} authoritative sources guidelines consensus{domain_hints}"
    site_queries = [
        f"{request.decision} site:{domain} evidence"
        for domain in pick_authority_domains(AUTHORITY_SITE_QUERIES)
    ]
    return _clean([base, *site_queries])
