"""LLM decision client."""

from .decision_client import DecisionClient, LLMDecision, build_evidence_summary

__all__ = ["DecisionClient", "LLMDecision", "build_evidence_summary"]
