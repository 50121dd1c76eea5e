"""Pytest configuration for tests."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from unittest.mock import MagicMock, patch

import pytest

from decision_research.models.pipeline import PipelineInput
from decision_research.models.source import Source
from decision_research.services.search import tavily_client

SearcherFn = Callable[[str], Awaitable[list[Source]]]


def make_source(
    url: str,
    title: str = "",
    snippet: str = "",
    content: str = "",
) -> Source:
    """Build a Source with defaults suitable for tests."""
    return Source(url=url, title=title or f"Title for {url}", snippet=snippet, content=content)


def make_searcher(results: list[Source]) -> tuple[SearcherFn, list[str]]:
    """Searcher that returns ``results`` for every query and records the queries."""
    calls: list[str] = []

    async def searcher(query: str) -> list[Source]:
        calls.append(query)
        return list(results)

    return searcher, calls


@pytest.fixture(autouse=True)
def prevent_real_api_calls():
    """Prevent any real HTTP calls during tests."""
    mock_response = MagicMock()
    mock_response.is_success = True
    mock_response.status_code = 200
    mock_response.json.return_value = {"results": []}

    async def mock_post(*args, **kwargs):
        return mock_response

    with patch("httpx.AsyncClient.post", side_effect=mock_post):
        yield


@pytest.fixture(autouse=True)
def reset_search_circuit_breaker():
    """Give every test a fresh shared circuit breaker."""
    tavily_client._search_circuit_breaker = None
    yield
    tavily_client._search_circuit_breaker = None


@pytest.fixture
def pipeline_input() -> PipelineInput:
    return PipelineInput(
        goal="Reduce our monthly cloud hosting bill",
        decision="Should we move our workloads from AWS to Hetzner?",
    )


@pytest.fixture
def diverse_sources() -> list[Source]:
    """Six sources across six distinct domains."""
    return [
        make_source(
            "https://www.hetzner.com/cloud",
            title="Hetzner Cloud pricing",
            snippet="Dedicated vCPU servers in Germany and Finland",
        ),
        make_source(
            "https://aws.amazon.com/ec2/pricing/",
            title="Amazon EC2 pricing",
            snippet="On-demand and reserved instance pricing",
        ),
        make_source(
            "https://news.ycombinator.com/item?id=1",
            title="Migrating from AWS to Hetzner",
            snippet="Migration costs and egress bandwidth savings",
        ),
        make_source(
            "https://en.wikipedia.org/wiki/Cloud_computing",
            title="Cloud computing",
            snippet="Cloud computing overview",
        ),
        make_source(
            "https://blog.example.com/hetzner-migration",
            title="Our Hetzner migration",
            snippet="Egress bandwidth costs dropped sharply",
        ),
        make_source(
            "https://europa.eu/gdpr",
            title="Data protection in the EU",
            snippet="GDPR hosting requirements",
        ),
    ]


@pytest.fixture
def rich_sources() -> list[Source]:
    """Twelve high-information sources across twelve domains."""
    return [
        make_source(
            f"https://site{i}.example{i}.org/article",
            title=f"In-depth article {i}",
            snippet="s" * 300,
            content="c" * 2500,
        )
        for i in range(12)
    ]


@pytest.fixture
def source_factory() -> Callable[..., Source]:
    return make_source


@pytest.fixture
def searcher_factory() -> Callable[[list[Source]], tuple[SearcherFn, list[str]]]:
    return make_searcher
