"""
Search Insight Engine - Analysis

Heuristic analysis and the model round trip:
- Analyzer: period-over-period deltas and keyword annotations
- Prompt Builder: bounded prompt plus the expected JSON shape
- ClaudeClient: sends the prompt and returns the reply envelope
"""

from .annotations import KeywordAnnotation, annotate_keywords, classify_intent
from .deltas import PeriodDeltas, PeriodTotals, compute_deltas
from .engine import AnalysisResult, Analyzer
from .prompt import PromptBundle, build_prompt
from .client import ClaudeClient, TokenUsage

__all__ = [
    # Analyzer
    "Analyzer",
    "AnalysisResult",
    "KeywordAnnotation",
    "annotate_keywords",
    "classify_intent",
    "PeriodDeltas",
    "PeriodTotals",
    "compute_deltas",

    # Prompt
    "PromptBundle",
    "build_prompt",

    # Client
    "ClaudeClient",
    "TokenUsage",
]
