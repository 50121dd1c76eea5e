"""Sequential execution of one search pass."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from decision_research.core.telemetry import NoopTelemetry, Telemetry, safe_emit
from decision_research.models.pipeline import DebugPass, PassName, QueryTrace
from decision_research.models.source import Source
from decision_research.utils.domains import dedupe_by_url, unique_domain_count
from decision_research.utils.query_normalizer import DEFAULT_QUERY_MAX_LENGTH, truncate_query

Searcher = Callable[[str], Awaitable[list[Source]]]

QUERY_PREVIEW_CHARS = 120


@dataclass(frozen=True)
class PassResult:
    """Deduplicated sources of one pass and its debug record."""

    sources: list[Source]
    debug: DebugPass


async def run_pass(
    pass_name: PassName,
    queries: list[str],
    searcher: Searcher,
    telemetry: Telemetry | None = None,
    max_query_length: int = DEFAULT_QUERY_MAX_LENGTH,
) -> PassResult:
    """Run ``queries`` one after another through ``searcher``.

    Queries are awaited strictly in order, so telemetry order and the
    first-seen-wins URL dedup are deterministic. A searcher error propagates
    and aborts the pass; retries belong inside the searcher.

    Args:
        pass_name: seed, expand or authority
        queries: Queries to issue (normalized and truncated here)
        searcher: Async search function
        telemetry: Event sink (no-op when omitted)
        max_query_length: Provider query ceiling

    Returns:
        PassResult with this pass's URL-deduplicated sources
    """
    telemetry = telemetry or NoopTelemetry()
    traces: list[QueryTrace] = []
    collected: list[Source] = []

    for raw in queries:
        trace = truncate_query(raw, max_query_length)
        traces.append(trace)

        safe_emit(
            telemetry,
            "search.query",
            {
                "pass": pass_name,
                "truncated": trace.truncated,
                "original_length": trace.original_length,
                "used_length": trace.used_length,
                "hash": trace.hash,
                "q_preview": trace.q[:QUERY_PREVIEW_CHARS],
            },
        )

        results = await searcher(trace.q)
        collected.extend(results)

    deduped = dedupe_by_url(collected)
    domains = unique_domain_count(s.url for s in deduped)

    safe_emit(
        telemetry,
        "search.pass.complete",
        {
            "pass": pass_name,
            "queries": len(queries),
            "sources": len(deduped),
            "unique_domains": domains,
        },
    )

    return PassResult(
        sources=deduped,
        debug=DebugPass(
            pass_name=pass_name, queries=traces, sources=len(deduped), unique_domains=domains
        ),
    )
