"""Structured decision drafting through an OpenAI-compatible endpoint.

The LLM receives the decision question plus a plain-text summary of the
evidence the pipeline collected and must answer with a JSON object matching
``RESEARCH_DECISION_SCHEMA``.
"""

from __future__ import annotations

import json
from typing import Any, Literal

import structlog
from openai import APIError, AsyncOpenAI
from pydantic import BaseModel, Field, ValidationError

from decision_research.core.config import settings
from decision_research.core.exceptions import DecisionGenerationError
from decision_research.models.pipeline import PipelineOutput

logger = structlog.get_logger(__name__)

SUMMARY_TOP_SOURCES = 8
SUMMARY_SNIPPET_CHARS = 280

RESEARCH_DECISION_SCHEMA: dict[str, Any] = {
    "name": "research_decision",
    "schema": {
        "type": "object",
        "additionalProperties": False,
        "required": ["recommendation", "rationale", "risks", "unknowns", "confidence"],
        "properties": {
            "recommendation": {"type": "string"},
            "rationale": {"type": "string"},
            "risks": {"type": "array", "items": {"type": "string"}},
            "unknowns": {"type": "array", "items": {"type": "string"}},
            "confidence": {"type": "string", "enum": ["low", "medium", "high"]},
        },
    },
}


class LLMDecision(BaseModel):
    """Decision drafted by the LLM."""

    recommendation: str = Field(..., min_length=1)
    rationale: str = Field(..., min_length=1)
    risks: list[str]
    unknowns: list[str]
    confidence: Literal["low", "medium", "high"]


def safe_json_parse(text: str) -> Any:
    """Parse JSON, falling back to the span between the first '{' and the last '}'.

    Raises:
        DecisionGenerationError: If no JSON object can be recovered
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        start = text.find("{")
        end = text.rfind("}")
        if start >= 0 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except json.JSONDecodeError as e:
                raise DecisionGenerationError("LLM returned non-JSON output.") from e
        raise DecisionGenerationError("LLM returned non-JSON output.") from None


def build_evidence_summary(output: PipelineOutput, max_sources: int = SUMMARY_TOP_SOURCES) -> str:
    """Render gate outcome, confidence and numbered top sources as plain text.

    Example:
        >>> print(build_evidence_summary(output))
        Gate status: EVIDENCE_SUFFICIENT
        Confidence: 0.78
        ...
    """
    lines = [
        f"Gate status: {output.decision_status.value}",
        f"Confidence: {output.confidence_overview.overall:.2f}",
        f"Rationale: {output.confidence_overview.rationale}",
        "",
        "Sources:",
    ]
    for i, source in enumerate(output.sources[:max_sources], 1):
        lines.append(f"[{i}] {source.title or source.url} ({source.url})")
        excerpt = (source.snippet or source.content).strip()
        if excerpt:
            lines.append(f"    {excerpt[:SUMMARY_SNIPPET_CHARS]}")
    if not output.sources:
        lines.append("(none)")
    return "\n".join(lines)


def build_decision_prompt(question: str, evidence_summary: str) -> str:
    return "\n".join(
        [
            "You are a decision support analyst.",
            "Return ONLY valid JSON that matches the provided schema. No prose.",
            "",
            f"Decision question: {question}",
            "",
            "Evidence summary (scored sources + key takeaways):",
            evidence_summary,
        ]
    )


class DecisionClient:
    """Drafts a structured decision with an OpenAI-compatible chat model.

    Args:
        api_key: API key (defaults to settings.OPENROUTER_API_KEY)
        base_url: OpenAI-compatible base URL
        model: Model identifier (defaults to settings.DECISION_LLM_MODEL)
        timeout: Request timeout (seconds)

    Raises:
        ValueError: If API key is not provided

    Example:
        >>> client = DecisionClient()
        >>> decision = await client.decide(
        ...     "Move from AWS to Hetzner?", build_evidence_summary(output)
        ... )
        >>> decision.confidence
        'medium'
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key or settings.OPENROUTER_API_KEY
        if not self.api_key:
            raise ValueError(
                "API key is required. Set OPENROUTER_API_KEY or pass api_key parameter."
            )
        self.base_url = base_url or settings.OPENROUTER_BASE_URL
        self.model = model if model is not None else settings.DECISION_LLM_MODEL
        self.timeout = timeout if timeout is not None else settings.DECISION_LLM_TIMEOUT

        self.client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)

    async def decide(self, question: str, evidence_summary: str) -> LLMDecision:
        """Ask the model for a decision on ``question``.

        Raises:
            DecisionGenerationError: Request failed, output was empty, not JSON,
                or did not match the decision shape
        """
        logger.info("decision_llm_request", model=self.model, summary_chars=len(evidence_summary))

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "user", "content": build_decision_prompt(question, evidence_summary)}
                ],
                temperature=0.2,
                response_format={
                    "type": "json_schema",
                    "json_schema": {**RESEARCH_DECISION_SCHEMA, "strict": True},
                },
            )
        except APIError as e:
            logger.error("decision_llm_failed", error=str(e), error_type=type(e).__name__)
            raise DecisionGenerationError(f"Decision LLM request failed: {e}") from e

        content = (response.choices[0].message.content or "").strip() if response.choices else ""
        if not content:
            raise DecisionGenerationError("LLM response had no content.")

        parsed = safe_json_parse(content)
        try:
            decision = LLMDecision.model_validate(parsed)
        except ValidationError as e:
            raise DecisionGenerationError("LLM JSON did not match expected shape.") from e

        logger.info("decision_llm_complete", confidence=decision.confidence, risks=len(decision.risks))
        return decision


__all__ = [
    "DecisionClient",
    "LLMDecision",
    "RESEARCH_DECISION_SCHEMA",
    "build_evidence_summary",
    "safe_json_parse",
]
