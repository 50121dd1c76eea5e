"""Exception hierarchy for the decision research service."""

from __future__ import annotations


class ResearchError(Exception):
    """Base error for research pipeline failures."""


class SearchProviderError(ResearchError):
    """Search provider rejected or failed a request.

    Attributes:
        status_code: HTTP status returned by the provider (None for transport errors)
        body: Response body text, if any
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def retryable(self) -> bool:
        """Transport errors, 429 and 5xx may succeed on retry; other statuses will not."""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class CircuitOpenError(ResearchError):
    """Raised when a circuit breaker rejects a call without attempting it."""


class DecisionGenerationError(ResearchError):
    """LLM decision output was missing, not JSON, or did not match the expected shape."""
