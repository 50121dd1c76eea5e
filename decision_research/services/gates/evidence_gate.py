"""Evidence gates deciding whether a merged source set supports a recommendation.

Two strategies share the ``EvidenceGate`` protocol:

- ``BreadthGate`` (default): source count and domain breadth only.
- ``ScoredGate``: per-source quality scoring plus thresholds on the score
  distribution and the share of low-information sources.

Neither gate silently replaces the other; ``get_gate`` picks one by name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

import structlog

from decision_research.models.pipeline import DecisionStatus, GateMetrics, OutputLanguage
from decision_research.models.source import Source
from decision_research.utils.domains import unique_domain_count

logger = structlog.get_logger(__name__)

# Per-source scoring
SNIPPET_SATURATION = 300
CONTENT_SATURATION = 2500
SNIPPET_WEIGHT = 0.45
CONTENT_WEIGHT = 0.55

# Low-information floors
LOW_INFO_MIN_CONTENT = 400
LOW_INFO_MIN_SNIPPET = 80


@dataclass(frozen=True)
class ScoredThresholds:
    min_sources: int = 12
    min_unique_domains: int = 6
    min_avg_score: float = 0.45
    min_top_score: float = 0.65
    min_top3_avg_score: float = 0.55
    max_low_info_ratio: float = 0.5


@dataclass(frozen=True)
class BreadthThresholds:
    min_sources: int = 6
    min_unique_domains: int = 4
    sufficient_confidence: float = 0.78
    insufficient_confidence: float = 0.32


@dataclass(frozen=True)
class GateResult:
    """Raw outcome of ``score_sources_and_gate``."""

    passed: bool
    metrics: GateMetrics
    scored: list[Source]


@dataclass(frozen=True)
class GateDecision:
    """What the orchestrator needs from a gate.

    Attributes:
        decision_status: Sufficient or insufficient
        confidence: Overall confidence in [0, 1]
        rationale: Human-readable explanation in the requested language
        sources: Sources in the order the gate leaves them
        metrics: Score metrics, when the gate computed them
    """

    decision_status: DecisionStatus
    confidence: float
    rationale: str
    sources: list[Source] = field(default_factory=list)
    metrics: GateMetrics | None = None

    @property
    def sufficient(self) -> bool:
        return self.decision_status is DecisionStatus.EVIDENCE_SUFFICIENT


class EvidenceGate(Protocol):
    name: str

    def evaluate(
        self, sources: list[Source], language: OutputLanguage | None = None
    ) -> GateDecision: ...


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def score_source(source: Source) -> tuple[float, dict[str, float]]:
    """Score one source from its snippet and content length.

    Both signals saturate (300 / 2500 characters) so very long pages do not
    dominate.

    Returns:
        (composite score, {"snippet": ..., "content": ...})
    """
    snippet_score = clamp(len((source.snippet or "").strip()) / SNIPPET_SATURATION)
    content_score = clamp(len((source.content or "").strip()) / CONTENT_SATURATION)
    score = SNIPPET_WEIGHT * snippet_score + CONTENT_WEIGHT * content_score
    return score, {"snippet": snippet_score, "content": content_score}


def is_low_information(source: Source) -> bool:
    content_length = len((source.content or "").strip())
    snippet_length = len((source.snippet or "").strip())
    return content_length < LOW_INFO_MIN_CONTENT or snippet_length < LOW_INFO_MIN_SNIPPET


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def score_sources_and_gate(
    sources: list[Source], thresholds: ScoredThresholds | None = None
) -> GateResult:
    """Score every source and apply the quality thresholds.

    Scored copies are returned sorted by score, highest first (stable for
    equal scores). An empty set has ``low_info_ratio == 1`` and never passes.
    """
    thresholds = thresholds or ScoredThresholds()

    scored: list[Source] = []
    for source in sources:
        score, breakdown = score_source(source)
        scored.append(source.model_copy(update={"score": score, "score_breakdown": breakdown}))
    scored.sort(key=lambda s: s.score or 0.0, reverse=True)

    scores = [s.score or 0.0 for s in scored]
    count = len(scored)
    low_info_count = sum(1 for s in scored if is_low_information(s))

    metrics = GateMetrics(
        sources=count,
        unique_domains=unique_domain_count(s.url for s in scored),
        avg_score=_mean(scores),
        top_source_score=scores[0] if scores else 0.0,
        top3_avg_score=_mean(scores[:3]),
        low_info_ratio=low_info_count / count if count else 1.0,
    )

    passed = (
        metrics.sources >= thresholds.min_sources
        and metrics.unique_domains >= thresholds.min_unique_domains
        and metrics.avg_score >= thresholds.min_avg_score
        and metrics.top_source_score >= thresholds.min_top_score
        and metrics.top3_avg_score >= thresholds.min_top3_avg_score
        and metrics.low_info_ratio <= thresholds.max_low_info_ratio
    )
    return GateResult(passed=passed, metrics=metrics, scored=scored)


class BreadthGate:
    """Sufficiency from source count and domain breadth.

    Confidence is fixed (0.78 / 0.32) and does not depend on content quality.
    """

    name = "breadth"

    def __init__(self, thresholds: BreadthThresholds | None = None) -> None:
        self.thresholds = thresholds or BreadthThresholds()

    def is_sufficient(self, source_count: int, domain_count: int) -> bool:
        return (
            source_count >= self.thresholds.min_sources
            and domain_count >= self.thresholds.min_unique_domains
        )

    def evaluate(
        self, sources: list[Source], language: OutputLanguage | None = None
    ) -> GateDecision:
        count = len(sources)
        domains = unique_domain_count(s.url for s in sources)
        enough = self.is_sufficient(count, domains)

        if enough:
            rationale = (
                f"Sufficient breadth: {count} sources across {domains} domains."
                if language == "en"
                else f"Voldoende breedte: {count} bronnen over {domains} domeinen."
            )
        else:
            rationale = (
                f"Insufficient breadth: {count} sources across {domains} domains."
                if language == "en"
                else f"Onvoldoende breedte: {count} bronnen over {domains} domeinen."
            )

        logger.debug("breadth_gate_evaluated", sources=count, unique_domains=domains, passed=enough)
        return GateDecision(
            decision_status=(
                DecisionStatus.EVIDENCE_SUFFICIENT if enough else DecisionStatus.INSUFFICIENT_EVIDENCE
            ),
            confidence=(
                self.thresholds.sufficient_confidence
                if enough
                else self.thresholds.insufficient_confidence
            ),
            rationale=rationale,
            sources=list(sources),
        )


class ScoredGate:
    """Sufficiency from per-source quality scores.

    Stricter than ``BreadthGate``. Sources come back scored and sorted by
    score. Confidence blends the score metrics and stays below 0.5 whenever
    the gate fails.
    """

    name = "scored"

    def __init__(self, thresholds: ScoredThresholds | None = None) -> None:
        self.thresholds = thresholds or ScoredThresholds()

    @staticmethod
    def confidence_from_metrics(metrics: GateMetrics, passed: bool) -> float:
        quality = clamp(
            0.4 * metrics.avg_score
            + 0.3 * metrics.top3_avg_score
            + 0.3 * (1.0 - metrics.low_info_ratio)
        )
        if passed:
            return round(max(quality, 0.5), 4)
        return round(min(quality, 0.49), 4)

    def evaluate(
        self, sources: list[Source], language: OutputLanguage | None = None
    ) -> GateDecision:
        result = score_sources_and_gate(sources, self.thresholds)
        m = result.metrics

        if language == "en":
            head = "Sufficient evidence quality" if result.passed else "Insufficient evidence quality"
            rationale = (
                f"{head}: {m.sources} sources across {m.unique_domains} domains, "
                f"avg score {m.avg_score:.2f}, top score {m.top_source_score:.2f}, "
                f"top-3 avg {m.top3_avg_score:.2f}, low-info ratio {m.low_info_ratio:.2f}."
            )
        else:
            head = "Voldoende bewijskwaliteit" if result.passed else "Onvoldoende bewijskwaliteit"
            rationale = (
                f"{head}: {m.sources} bronnen over {m.unique_domains} domeinen, "
                f"gem. score {m.avg_score:.2f}, topscore {m.top_source_score:.2f}, "
                f"top-3 gem. {m.top3_avg_score:.2f}, aandeel weinig-informatief {m.low_info_ratio:.2f}."
            )

        logger.debug("scored_gate_evaluated", passed=result.passed, **m.model_dump())
        return GateDecision(
            decision_status=(
                DecisionStatus.EVIDENCE_SUFFICIENT
                if result.passed
                else DecisionStatus.INSUFFICIENT_EVIDENCE
            ),
            confidence=self.confidence_from_metrics(m, result.passed),
            rationale=rationale,
            sources=result.scored,
            metrics=m,
        )


def get_gate(name: str) -> EvidenceGate:
    """Return the gate registered under ``name`` ("breadth" or "scored").

    Raises:
        ValueError: For unknown gate names
    """
    if name == BreadthGate.name:
        return BreadthGate()
    if name == ScoredGate.name:
        return ScoredGate()
    raise ValueError(f"Unknown evidence gate: {name!r}")
