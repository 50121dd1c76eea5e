"""API request/response schemas for the research endpoint.

Request and response bodies use camelCase keys; snake_case names are also
accepted on input.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from decision_research.models.pipeline import PipelineInput


class ResearchRequest(BaseModel):
    """Request model for /v1/research endpoint.

    ``goal`` and ``decision`` default to empty strings so the endpoint can
    answer a missing field with 400 instead of a validation error.

    Attributes:
        goal: What the caller wants to achieve
        decision: The decision under consideration
        output_format: Opaque format hint, passed through
        output_language: Language of generated prose ("nl" or "en")
        constraints: Optional free-text constraints
        debug: Attach per-pass query telemetry to the response
        include_decision: Also draft a structured decision with the LLM
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    goal: str = Field("", max_length=5000, examples=["Reduce our monthly cloud bill"])
    decision: str = Field(
        "", max_length=5000, examples=["Should we move our workloads from AWS to Hetzner?"]
    )
    output_format: str = Field("structured", description="Output format hint")
    output_language: Literal["nl", "en"] | None = Field(
        None, description="Language of generated prose (server default when omitted)"
    )
    constraints: str | None = Field(None, max_length=5000)
    debug: bool = Field(False, description="Include per-pass query telemetry")
    include_decision: bool = Field(
        False, description="Draft a structured decision with the configured LLM"
    )

    def is_complete(self) -> bool:
        return bool(self.goal.strip()) and bool(self.decision.strip())

    def to_pipeline_input(self) -> PipelineInput:
        return PipelineInput(
            goal=self.goal,
            decision=self.decision,
            output_format=self.output_format,
            output_language=self.output_language,
            constraints=self.constraints,
        )


class ErrorResponse(BaseModel):
    """Error body returned with non-2xx responses."""

    error: str
    message: str
    details: dict[str, Any] | None = None
