"""Research pipeline agents package."""

from decision_research.agents.pass_runner import PassResult, Searcher, run_pass
from decision_research.agents.research_pipeline import (
    PipelineStage,
    ResearchPipeline,
    ResearchPipelineDeps,
    run_research_pipeline,
)

__all__ = [
    # Pipeline
    "PipelineStage",
    "ResearchPipeline",
    "ResearchPipelineDeps",
    "run_research_pipeline",
    # Passes
    "PassResult",
    "Searcher",
    "run_pass",
]
