"""Fixed bilingual output templates (Dutch default, English on request)."""

from __future__ import annotations

from decision_research.models.pipeline import OutputLanguage, PipelineInput
from decision_research.models.source import Source

RECOMMENDATION_TOP_SOURCES = 5


def resolve_language(
    request: PipelineInput, default: OutputLanguage = "nl"
) -> OutputLanguage:
    return request.output_language or default


def build_recommendation_from_evidence(
    request: PipelineInput, sources: list[Source], default_language: OutputLanguage = "nl"
) -> str:
    top = "\n".join(
        f"- {s.title or s.url}" for s in sources[:RECOMMENDATION_TOP_SOURCES]
    )

    if resolve_language(request, default_language) == "en":
        return (
            "Recommendation (based on collected evidence):\n\n"
            f"Goal: {request.goal}\n"
            f"Decision: {request.decision}\n\n"
            f"Top sources:\n{top}"
        )

    return (
        "Aanbeveling (op basis van gevonden evidence):\n\n"
        f"Doel: {request.goal}\n"
        f"Beslissing: {request.decision}\n\n"
        f"Top bronnen:\n{top}"
    )


def build_safe_default(request: PipelineInput, default_language: OutputLanguage = "nl") -> str:
    if resolve_language(request, default_language) == "en":
        return (
            "Insufficient evidence to make a robust recommendation.\n\n"
            "Safe default:\n"
            "- Define explicit decision criteria (must-haves / nice-to-haves).\n"
            "- Collect 3–5 additional primary/authoritative sources.\n"
            "- Re-run the research with a tighter scope.\n\n"
            "Context:\n"
            f"Goal: {request.goal}\n"
            f"Decision: {request.decision}"
        )

    return (
        "Onvoldoende bewijs om een robuuste aanbeveling te doen.\n\n"
        "Safe default:\n"
        "- Formuleer expliciete besliscriteria (must-haves / nice-to-haves).\n"
        "- Verzamel 3–5 extra primaire/autoritatieve bronnen.\n"
        "- Herhaal het onderzoek met aangescherpte scope.\n\n"
        "Context:\n"
        f"Doel: {request.goal}\n"
        f"Beslissing: {request.decision}"
    )
