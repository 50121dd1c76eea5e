"""Pipeline request/response models.

Every model serializes with camelCase aliases (``decisionStatus``,
``originalLength``...) so the HTTP layer can return them unchanged.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from decision_research.models.source import Source

PassName = Literal["seed", "expand", "authority"]
OutputLanguage = Literal["nl", "en"]


class DecisionStatus(str, Enum):
    """Outcome of the evidence gate."""

    EVIDENCE_SUFFICIENT = "EVIDENCE_SUFFICIENT"
    INSUFFICIENT_EVIDENCE = "INSUFFICIENT_EVIDENCE"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class PipelineInput(_CamelModel):
    """Immutable per-invocation research request.

    ``goal`` and ``decision`` are expected in the working research language
    already; ``output_language`` only affects generated prose.
    """

    goal: str = Field(..., min_length=1)
    decision: str = Field(..., min_length=1)
    output_format: str = "structured"
    output_language: OutputLanguage | None = None
    constraints: str | None = None

    @field_validator("goal", "decision")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject whitespace-only goal/decision."""
        if not v.strip():
            raise ValueError("must not be empty or whitespace-only")
        return v


class QueryTrace(_CamelModel):
    """Truncation metadata for one issued query."""

    q: str
    truncated: bool
    original_length: int = Field(..., ge=0)
    used_length: int = Field(..., ge=0)
    hash: str


class DebugPass(_CamelModel):
    """Telemetry record for one search pass."""

    pass_name: PassName = Field(..., alias="pass")
    queries: list[QueryTrace]
    sources: int = Field(..., ge=0)
    unique_domains: int = Field(..., ge=0)


class DebugInfo(_CamelModel):
    passes: list[DebugPass]


class GateMetrics(_CamelModel):
    """Derived summary of a merged source set."""

    sources: int
    unique_domains: int
    avg_score: float
    top_source_score: float
    top3_avg_score: float
    low_info_ratio: float


class ConfidenceOverview(_CamelModel):
    overall: float = Field(..., ge=0.0, le=1.0)
    rationale: str


class PipelineOutput(_CamelModel):
    """Terminal pipeline result.

    Attributes:
        decision_status: Gate outcome
        recommendation_or_safe_default: Templated recommendation or safe default text
        confidence_overview: Gate confidence and rationale
        sources: Merged, URL-deduplicated sources in gate order
        debug: Per-pass records, only when the caller asked for them
    """

    decision_status: DecisionStatus
    recommendation_or_safe_default: str
    confidence_overview: ConfidenceOverview
    sources: list[Source]
    debug: DebugInfo | None = None

    def to_response(self) -> dict[str, Any]:
        """JSON-ready dict; ``debug`` is left out entirely when absent."""
        payload = self.model_dump(mode="json", by_alias=True)
        if self.debug is None:
            payload.pop("debug", None)
        return payload
