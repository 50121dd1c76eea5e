"""Tavily search client.

Provides the async searcher used by the research pipeline.

Design goals:
    - ``search(query)`` returns ``Source`` models, ready for the pipeline
    - Transient failures (transport errors, 429, 5xx) are retried under a
      shared circuit breaker; other 4xx responses fail on the first attempt
    - Failures that survive the retries propagate as ``SearchProviderError``
      (no silent empty results: the pipeline must see provider errors)
    - Results without a URL are dropped
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from decision_research.core.circuit_breaker import CircuitBreaker
from decision_research.core.config import settings
from decision_research.core.exceptions import SearchProviderError
from decision_research.models.source import Source

logger = structlog.get_logger(__name__)


def is_retryable(error: Exception) -> bool:
    """Retry policy for Tavily calls: rejected requests are not retried."""
    if isinstance(error, SearchProviderError):
        return error.retryable
    return True


_search_circuit_breaker: CircuitBreaker | None = None


def get_search_circuit_breaker() -> CircuitBreaker:
    """Get or create the circuit breaker shared by search clients."""
    global _search_circuit_breaker
    if _search_circuit_breaker is None:
        _search_circuit_breaker = CircuitBreaker(
            failure_threshold=settings.SEARCH_CIRCUIT_BREAKER_THRESHOLD,
            timeout=float(settings.SEARCH_CIRCUIT_BREAKER_TIMEOUT),
            name="tavily",
        )
    return _search_circuit_breaker


class TavilyClient:
    """Async client for the Tavily ``/search`` endpoint.

    Args:
        api_key: Tavily API key (defaults to settings.TAVILY_API_KEY)
        base_url: API base URL
        timeout: Per-request timeout in seconds
        max_results: Results requested per query
        search_depth: "basic" or "advanced"
        include_raw_content: Request extracted page text as ``raw_content``
        max_retries: Retries per query before the error propagates

    Example:
        >>> async with TavilyClient() as client:
        ...     sources = await client.search("heat pump vs gas boiler running costs")
        >>> sources[0].provider
        'tavily'

    Raises:
        ValueError: If no API key is configured
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_results: int | None = None,
        search_depth: str | None = None,
        include_raw_content: bool | None = None,
        max_retries: int | None = None,
    ) -> None:
        self.api_key = (api_key or settings.TAVILY_API_KEY or "").strip()
        if not self.api_key:
            raise ValueError("API key is required. Set TAVILY_API_KEY or pass api_key parameter.")

        self.base_url = (base_url or settings.TAVILY_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.TAVILY_TIMEOUT
        self.max_results = max_results if max_results is not None else settings.TAVILY_MAX_RESULTS
        self.search_depth = search_depth or settings.TAVILY_SEARCH_DEPTH
        self.include_raw_content = (
            include_raw_content
            if include_raw_content is not None
            else settings.TAVILY_INCLUDE_RAW_CONTENT
        )
        self.max_retries = max_retries if max_retries is not None else settings.SEARCH_MAX_RETRIES
        self._client = httpx.AsyncClient(timeout=self.timeout)

    async def __aenter__(self) -> TavilyClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close underlying HTTP resources."""
        await self._client.aclose()

    async def _post(self, url: str, payload: dict[str, Any]) -> httpx.Response:
        """Internal POST wrapper (patched in tests)."""
        return await self._client.post(
            url,
            json=payload,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            timeout=self.timeout,
        )

    def build_payload(self, query: str) -> dict[str, Any]:
        return {
            "query": query,
            "search_depth": self.search_depth,
            "include_answer": False,
            "include_raw_content": "text" if self.include_raw_content else False,
            "max_results": self.max_results,
        }

    async def _search_once(self, query: str) -> list[Source]:
        try:
            response = await self._post(f"{self.base_url}/search", self.build_payload(query))
        except httpx.HTTPError as e:
            logger.warning("tavily_transport_error", error=str(e), error_type=type(e).__name__)
            raise SearchProviderError(f"Tavily request failed: {e}") from e

        if not response.is_success:
            body = response.text
            logger.warning("tavily_non_2xx", status=response.status_code)
            raise SearchProviderError(
                f"Tavily error: {response.status_code} {response.reason_phrase} {body}".strip(),
                status_code=response.status_code,
                body=body,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SearchProviderError(f"Tavily returned malformed JSON: {e}") from e

        return self.parse_results(data)

    def parse_results(self, data: Any) -> list[Source]:
        """Map a Tavily response body to ``Source`` models."""
        raw_results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(raw_results, list):
            return []

        sources: list[Source] = []
        for item in raw_results:
            if not isinstance(item, dict) or not item.get("url"):
                continue
            sources.append(
                Source(
                    url=str(item["url"]),
                    title=item.get("title") or "",
                    snippet=item.get("snippet") or "",
                    content=item.get("content") or "",
                    raw_content=(item.get("raw_content") or None) if self.include_raw_content else None,
                    published_date=item.get("published_date"),
                    provider="tavily",
                )
            )
        return sources

    async def search(self, query: str) -> list[Source]:
        """Search Tavily for ``query``.

        Args:
            query: Query text (already truncated by the pipeline)

        Returns:
            Sources in provider order

        Raises:
            SearchProviderError: Provider failure after retries
            CircuitOpenError: Circuit open after repeated failures
        """
        logger.debug("tavily_search", query_preview=query[:120], max_results=self.max_results)
        breaker = get_search_circuit_breaker()
        return await breaker.call_with_retries(
            self._search_once,
            query,
            retries=self.max_retries,
            backoff_base=0.5,
            backoff_factor=2.0,
            retry_on=is_retryable,
        )


__all__ = ["TavilyClient", "get_search_circuit_breaker", "is_retryable"]
