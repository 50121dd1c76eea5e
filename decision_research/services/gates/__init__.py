"""Evidence sufficiency gates."""

from .evidence_gate import (
    BreadthGate,
    EvidenceGate,
    GateDecision,
    ScoredGate,
    get_gate,
    score_sources_and_gate,
)

__all__ = [
    "BreadthGate",
    "EvidenceGate",
    "GateDecision",
    "ScoredGate",
    "get_gate",
    "score_sources_and_gate",
]
