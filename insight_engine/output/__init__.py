"""
Output Processing Module

Handles the model side of a run: the expected reply schema and the
reconciliation of free-form replies into typed insight records.

Components:
- InsightReconciler: JSON -> brace scan -> text -> unavailable fallback chain
- ModelReply: reply envelope from the LLM call layer
- Schemas: wire schema, example and validator
"""

from .schemas import (
    INSIGHT_EXAMPLE,
    INSIGHT_SCHEMA,
    InsightRecord,
    QuickWinAction,
    Recommendation,
    validate_insight,
)

from .parser import (
    InsightReconciler,
    ModelReply,
    UNAVAILABLE_SUMMARY,
)

__all__ = [
    # Schemas
    "INSIGHT_EXAMPLE",
    "INSIGHT_SCHEMA",
    "InsightRecord",
    "QuickWinAction",
    "Recommendation",
    "validate_insight",
    # Reconciler
    "InsightReconciler",
    "ModelReply",
    "UNAVAILABLE_SUMMARY",
]
