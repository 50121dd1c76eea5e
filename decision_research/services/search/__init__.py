"""Web search clients."""

from .tavily_client import TavilyClient, get_search_circuit_breaker

__all__ = ["TavilyClient", "get_search_circuit_breaker"]
