"""Pipeline data models."""

from .pipeline import (
    ConfidenceOverview,
    DebugInfo,
    DebugPass,
    DecisionStatus,
    GateMetrics,
    PipelineInput,
    PipelineOutput,
    QueryTrace,
)
from .source import Source

__all__ = [
    "ConfidenceOverview",
    "DebugInfo",
    "DebugPass",
    "DecisionStatus",
    "GateMetrics",
    "PipelineInput",
    "PipelineOutput",
    "QueryTrace",
    "Source",
]
