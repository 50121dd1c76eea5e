"""Research endpoint: multi-pass web research with an evidence gate.

This module provides the /v1/research endpoint. It wires a Tavily searcher,
telemetry and the configured evidence gate into ``ResearchPipeline`` and
optionally asks the decision LLM for a structured decision.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from typing import Any

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from decision_research.agents.pass_runner import Searcher
from decision_research.agents.research_pipeline import ResearchPipeline, ResearchPipelineDeps
from decision_research.api.v1.schemas import ErrorResponse, ResearchRequest
from decision_research.core.config import settings
from decision_research.core.exceptions import (
    CircuitOpenError,
    DecisionGenerationError,
    SearchProviderError,
)
from decision_research.core.telemetry import Telemetry, build_telemetry
from decision_research.services.gates.evidence_gate import EvidenceGate, get_gate
from decision_research.services.llm.decision_client import DecisionClient, build_evidence_summary
from decision_research.services.search.tavily_client import TavilyClient

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["research"])


async def get_searcher() -> AsyncGenerator[Searcher | None, None]:
    """Yield a Tavily-backed searcher for one request, or None when no key is configured."""
    try:
        client = TavilyClient()
    except ValueError as e:
        logger.warning("search_provider_not_configured", error=str(e))
        yield None
        return
    try:
        yield client.search
    finally:
        await client.close()


def get_telemetry() -> Telemetry:
    return build_telemetry(settings)


def get_evidence_gate() -> EvidenceGate:
    return get_gate(settings.RESEARCH_GATE_STRATEGY)


def get_decision_client() -> DecisionClient | None:
    """Decision LLM client, or None when no key is configured."""
    if not settings.decision_llm_enabled:
        return None
    return DecisionClient()


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message).model_dump(exclude_none=True),
    )


@router.post(
    "/research",
    status_code=status.HTTP_200_OK,
    summary="Run decision research",
    description="Seed, expand and authority search passes followed by an evidence gate",
    responses={
        200: {"description": "Research completed"},
        400: {"description": "Missing goal or decision", "model": ErrorResponse},
        502: {"description": "Search provider failure", "model": ErrorResponse},
        503: {"description": "Search provider disabled or not configured", "model": ErrorResponse},
        504: {"description": "Research timeout", "model": ErrorResponse},
        500: {"description": "Internal server error", "model": ErrorResponse},
    },
)
async def research(
    request: ResearchRequest,
    searcher: Searcher | None = Depends(get_searcher),
    telemetry: Telemetry = Depends(get_telemetry),
    gate: EvidenceGate = Depends(get_evidence_gate),
    decision_client: DecisionClient | None = Depends(get_decision_client),
) -> Any:
    """Run the research pipeline for one decision.

    Args:
        request: Goal, decision and output options
        searcher: Search function (Tavily by default), None when not configured
        telemetry: Event sink for query/pass events
        gate: Evidence gate selected by RESEARCH_GATE_STRATEGY
        decision_client: Decision LLM client, None when not configured

    Returns:
        camelCase pipeline output, plus ``llmDecision`` when requested and available
    """
    if not request.is_complete():
        return _error(
            status.HTTP_400_BAD_REQUEST,
            "missing_fields",
            "Missing required fields: goal, decision",
        )
    if searcher is None:
        return _error(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "search_unavailable",
            "Search provider is not configured. Set TAVILY_API_KEY.",
        )

    pipeline = ResearchPipeline(
        ResearchPipelineDeps(
            searcher=searcher,
            telemetry=telemetry,
            gate=gate,
            include_debug=request.debug,
            max_query_length=settings.RESEARCH_QUERY_MAX_LENGTH,
            default_language=settings.DEFAULT_OUTPUT_LANGUAGE,
        )
    )
    timeout = float(settings.RESEARCH_TIMEOUT_SECONDS)

    try:
        output = await asyncio.wait_for(pipeline.run(request.to_pipeline_input()), timeout=timeout)
    except TimeoutError:
        logger.warning("research_timeout", timeout=timeout)
        return _error(
            status.HTTP_504_GATEWAY_TIMEOUT,
            "research_timeout",
            f"Research exceeded timeout of {timeout}s",
        )
    except CircuitOpenError as e:
        logger.warning("research_circuit_open", error=str(e))
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "search_unavailable", str(e))
    except SearchProviderError as e:
        logger.error("research_search_failed", error=str(e), provider_status=e.status_code)
        return _error(status.HTTP_502_BAD_GATEWAY, "search_provider_error", str(e))
    except Exception as e:
        logger.exception("research_failed", error=str(e), error_type=type(e).__name__)
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "research_failed",
            f"Research execution failed: {e}",
        )

    body = output.to_response()

    if request.include_decision:
        if decision_client is None:
            logger.info("decision_llm_not_configured")
        else:
            try:
                decision = await decision_client.decide(
                    f"{request.decision} (goal: {request.goal})", build_evidence_summary(output)
                )
                body["llmDecision"] = decision.model_dump()
            except DecisionGenerationError as e:
                logger.warning("decision_llm_unusable", error=str(e))
                body["llmDecisionError"] = str(e)

    return JSONResponse(status_code=status.HTTP_200_OK, content=body)
