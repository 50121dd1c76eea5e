"""Source model shared by searchers, the pipeline and the gates."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Source(BaseModel):
    """One retrieved document reference.

    Attributes:
        url: Identity key within a merged result set
        title: Result title
        snippet: Short excerpt returned by the provider
        content: Longer body text (may be empty)
        raw_content: Extracted page text, when the provider was asked for it
        published_date: Publication date as reported by the provider
        provider: Which searcher produced the result
        score: Composite quality score (set by the scored gate)
        score_breakdown: Sub-scores behind ``score``
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    url: str
    title: str = ""
    snippet: str = ""
    content: str = ""
    raw_content: str | None = None
    published_date: str | None = None
    provider: Literal["tavily", "unknown"] = "unknown"

    score: float | None = Field(default=None, ge=0.0, le=1.0)
    score_breakdown: dict[str, float] | None = None
