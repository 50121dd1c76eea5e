"""Unit tests for TavilyClient request building, mapping and error handling."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from decision_research.core.exceptions import CircuitOpenError, SearchProviderError
from decision_research.services.search.tavily_client import (
    TavilyClient,
    get_search_circuit_breaker,
    is_retryable,
)

TAVILY_BODY = {
    "query": "heat pump costs",
    "results": [
        {
            "title": "Heat pump running costs",
            "url": "https://www.energysavingtrust.org.uk/heat-pumps",
            "content": "Typical annual running costs for air source heat pumps...",
            "score": 0.91,
            "raw_content": "Full page text",
            "published_date": "2024-03-01",
        },
        {"title": "No URL here", "content": "dropped"},
        {
            "title": "",
            "url": "https://example.com/gas-boilers",
            "content": "Gas boiler comparison",
        },
    ],
}


@pytest.fixture
def fast_breaker(monkeypatch: pytest.MonkeyPatch):
    breaker = get_search_circuit_breaker()
    monkeypatch.setattr(breaker, "_sleep", AsyncMock())
    return breaker


class TestTavilyClientInit:
    def test_requires_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from decision_research.core import config as cfg

        monkeypatch.setattr(cfg.settings, "TAVILY_API_KEY", None)

        with pytest.raises(ValueError, match="API key is required"):
            TavilyClient()

    def test_blank_api_key_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            TavilyClient(api_key="   ")

    def test_build_payload(self) -> None:
        client = TavilyClient(api_key="tvly-test", max_results=8, search_depth="advanced")

        payload = client.build_payload("heat pump costs")

        assert payload == {
            "query": "heat pump costs",
            "search_depth": "advanced",
            "include_answer": False,
            "include_raw_content": False,
            "max_results": 8,
        }

    def test_build_payload_with_raw_content(self) -> None:
        client = TavilyClient(api_key="tvly-test", include_raw_content=True)

        assert client.build_payload("q")["include_raw_content"] == "text"


class TestTavilySearch:
    @pytest.mark.asyncio
    async def test_maps_results_to_sources(self, fast_breaker) -> None:
        """
        Given: A Tavily response with one result lacking a URL
        When: search() is called
        Then: Results with a URL are mapped to Sources in provider order
        """
        client = TavilyClient(api_key="tvly-test", base_url="https://api.tavily.com/")
        client._post = AsyncMock(return_value=httpx.Response(200, json=TAVILY_BODY))

        sources = await client.search("heat pump costs")

        assert [s.url for s in sources] == [
            "https://www.energysavingtrust.org.uk/heat-pumps",
            "https://example.com/gas-boilers",
        ]
        first = sources[0]
        assert first.provider == "tavily"
        assert first.title == "Heat pump running costs"
        assert first.content.startswith("Typical annual running costs")
        assert first.published_date == "2024-03-01"
        assert first.raw_content is None
        assert sources[1].title == ""

        url, payload = client._post.await_args.args
        assert url == "https://api.tavily.com/search"
        assert payload["query"] == "heat pump costs"
        await client.close()

    @pytest.mark.asyncio
    async def test_keeps_raw_content_when_requested(self, fast_breaker) -> None:
        client = TavilyClient(api_key="tvly-test", include_raw_content=True)
        client._post = AsyncMock(return_value=httpx.Response(200, json=TAVILY_BODY))

        sources = await client.search("heat pump costs")

        assert sources[0].raw_content == "Full page text"
        assert sources[1].raw_content is None
        await client.close()

    @pytest.mark.asyncio
    async def test_missing_results_yields_empty_list(self, fast_breaker) -> None:
        client = TavilyClient(api_key="tvly-test")
        client._post = AsyncMock(return_value=httpx.Response(200, json={"answer": None}))

        assert await client.search("anything") == []
        await client.close()

    @pytest.mark.asyncio
    async def test_rejected_request_is_not_retried(self, fast_breaker) -> None:
        """
        Given: Tavily answers 401 for an invalid key
        When: search() is called with retries enabled
        Then: It is attempted once and the breaker does not count it
        """
        client = TavilyClient(api_key="tvly-test", max_retries=2)
        client._post = AsyncMock(return_value=httpx.Response(401, text="invalid api key"))

        with pytest.raises(SearchProviderError) as exc_info:
            await client.search("heat pump costs")

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "invalid api key"
        assert "401" in str(exc_info.value)
        assert client._post.await_count == 1
        assert fast_breaker.failure_count == 0
        fast_breaker._sleep.assert_not_awaited()
        await client.close()

    @pytest.mark.asyncio
    async def test_rejected_requests_never_open_the_circuit(self, fast_breaker) -> None:
        fast_breaker.failure_threshold = 2
        client = TavilyClient(api_key="tvly-test", max_retries=2)
        client._post = AsyncMock(return_value=httpx.Response(400, text="query too long"))

        for _ in range(4):
            with pytest.raises(SearchProviderError) as exc_info:
                await client.search("q")
            assert exc_info.value.status_code == 400

        assert client._post.await_count == 4
        await client.close()

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self, fast_breaker) -> None:
        client = TavilyClient(api_key="tvly-test", max_retries=2)
        client._post = AsyncMock(return_value=httpx.Response(429, text="slow down"))

        with pytest.raises(SearchProviderError) as exc_info:
            await client.search("heat pump costs")

        assert exc_info.value.status_code == 429
        assert client._post.await_count == 3
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_error_is_wrapped(self, fast_breaker) -> None:
        client = TavilyClient(api_key="tvly-test", max_retries=0)
        client._post = AsyncMock(side_effect=httpx.ConnectTimeout("timed out"))

        with pytest.raises(SearchProviderError) as exc_info:
            await client.search("heat pump costs")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectTimeout)
        await client.close()

    @pytest.mark.asyncio
    async def test_recovers_from_transient_failure(self, fast_breaker) -> None:
        client = TavilyClient(api_key="tvly-test", max_retries=2)
        client._post = AsyncMock(
            side_effect=[
                httpx.Response(503, text="busy"),
                httpx.Response(200, json=TAVILY_BODY),
            ]
        )

        sources = await client.search("heat pump costs")

        assert len(sources) == 2
        assert client._post.await_count == 2
        await client.close()

    @pytest.mark.asyncio
    async def test_repeated_failures_open_the_circuit(self, fast_breaker) -> None:
        fast_breaker.failure_threshold = 2
        client = TavilyClient(api_key="tvly-test", max_retries=0)
        client._post = AsyncMock(return_value=httpx.Response(500, text="error"))

        for _ in range(2):
            with pytest.raises(SearchProviderError):
                await client.search("q")

        with pytest.raises(CircuitOpenError):
            await client.search("q")
        assert client._post.await_count == 2
        await client.close()


class TestRetryPolicy:
    @pytest.mark.parametrize(
        ("status_code", "expected"),
        [
            (None, True),
            (429, True),
            (500, True),
            (503, True),
            (400, False),
            (401, False),
            (403, False),
        ],
    )
    def test_provider_status(self, status_code: int | None, expected: bool) -> None:
        error = SearchProviderError("Tavily error", status_code=status_code)

        assert is_retryable(error) is expected

    def test_other_errors_are_retried(self) -> None:
        assert is_retryable(RuntimeError("connection reset")) is True
