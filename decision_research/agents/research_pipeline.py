"""Multi-pass research pipeline.

The pipeline runs a small search campaign for one decision question:

    SEED -> EXPAND -> AUTHORITY -> GATE -> DONE

Each pass builds its queries from the previous pass's results, so passes run
strictly one after another. All pass results are merged, deduplicated by URL
and handed to an evidence gate, which decides between an evidence-based
recommendation and a templated safe default.

Architecture:
    - Searcher, telemetry and gate are injected through ``ResearchPipelineDeps``
    - No state is shared between invocations
    - Any searcher failure aborts the whole run (no partial output)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import structlog

from decision_research.agents.pass_runner import PassResult, Searcher, run_pass
from decision_research.agents.query_builder import (
    build_authority_queries,
    build_expand_queries,
    build_seed_queries,
)
from decision_research.agents.templates import (
    build_recommendation_from_evidence,
    build_safe_default,
    resolve_language,
)
from decision_research.core.telemetry import NoopTelemetry, Telemetry
from decision_research.models.pipeline import (
    ConfidenceOverview,
    DebugInfo,
    OutputLanguage,
    PipelineInput,
    PipelineOutput,
)
from decision_research.services.gates.evidence_gate import BreadthGate, EvidenceGate
from decision_research.utils.domains import dedupe_by_url
from decision_research.utils.query_normalizer import DEFAULT_QUERY_MAX_LENGTH

logger = structlog.get_logger(__name__)


class PipelineStage(str, Enum):
    SEED = "seed"
    EXPAND = "expand"
    AUTHORITY = "authority"
    GATE = "gate"
    DONE = "done"


@dataclass
class ResearchPipelineDeps:
    """ResearchPipeline dependencies for dependency injection.

    Attributes:
        searcher: Async search function (query -> sources)
        telemetry: Event sink for per-query / per-pass events
        gate: Evidence gate deciding sufficiency (default: BreadthGate)
        include_debug: Attach per-pass debug records to the output
        max_query_length: Provider query length ceiling
        default_language: Prose language when the request has none
    """

    searcher: Searcher
    telemetry: Telemetry = field(default_factory=NoopTelemetry)
    gate: EvidenceGate = field(default_factory=BreadthGate)
    include_debug: bool = False
    max_query_length: int = DEFAULT_QUERY_MAX_LENGTH
    default_language: OutputLanguage = "nl"


class ResearchPipeline:
    """Seed, expand and authority search passes followed by an evidence gate.

    Example:
        >>> pipeline = ResearchPipeline(ResearchPipelineDeps(searcher=tavily.search))
        >>> output = await pipeline.run(
        ...     PipelineInput(goal="Cut hosting costs", decision="Move from AWS to Hetzner?")
        ... )
        >>> print(output.decision_status.value, output.confidence_overview.overall)
    """

    def __init__(self, deps: ResearchPipelineDeps) -> None:
        self.deps = deps

    async def _pass(self, stage: PipelineStage, queries: list[str]) -> PassResult:
        logger.debug("pipeline_stage", stage=stage.value, queries=len(queries))
        return await run_pass(
            stage.value,  # type: ignore[arg-type]
            queries,
            self.deps.searcher,
            telemetry=self.deps.telemetry,
            max_query_length=self.deps.max_query_length,
        )

    async def run(self, request: PipelineInput) -> PipelineOutput:
        """Execute the full pipeline for one request.

        Args:
            request: Validated research request

        Returns:
            PipelineOutput with gate outcome, text, confidence and sources

        Raises:
            Exception: Whatever the injected searcher raises
        """
        language = resolve_language(request, self.deps.default_language)

        seed = await self._pass(PipelineStage.SEED, build_seed_queries(request))

        expand = await self._pass(
            PipelineStage.EXPAND, build_expand_queries(request, seed.sources)
        )

        authority = await self._pass(
            PipelineStage.AUTHORITY,
            build_authority_queries(request, [*seed.sources, *expand.sources]),
        )

        merged = dedupe_by_url([*seed.sources, *expand.sources, *authority.sources])

        logger.debug("pipeline_stage", stage=PipelineStage.GATE.value, sources=len(merged))
        decision = self.deps.gate.evaluate(merged, language)

        if decision.sufficient:
            text = build_recommendation_from_evidence(
                request, decision.sources, self.deps.default_language
            )
        else:
            text = build_safe_default(request, self.deps.default_language)

        output = PipelineOutput(
            decision_status=decision.decision_status,
            recommendation_or_safe_default=text,
            confidence_overview=ConfidenceOverview(
                overall=decision.confidence, rationale=decision.rationale
            ),
            sources=decision.sources,
            debug=(
                DebugInfo(passes=[seed.debug, expand.debug, authority.debug])
                if self.deps.include_debug
                else None
            ),
        )

        logger.info(
            "research_pipeline_complete",
            stage=PipelineStage.DONE.value,
            gate=getattr(self.deps.gate, "name", type(self.deps.gate).__name__),
            decision_status=decision.decision_status.value,
            sources=len(merged),
        )
        return output


async def run_research_pipeline(
    request: PipelineInput,
    searcher: Searcher,
    *,
    include_debug: bool = False,
    telemetry: Telemetry | None = None,
    gate: EvidenceGate | None = None,
) -> PipelineOutput:
    """Functional entry point around ``ResearchPipeline``."""
    deps = ResearchPipelineDeps(
        searcher=searcher,
        telemetry=telemetry or NoopTelemetry(),
        gate=gate or BreadthGate(),
        include_debug=include_debug,
    )
    return await ResearchPipeline(deps).run(request)
