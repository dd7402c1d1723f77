"""
Search Insight Engine - Source Collection Package

Turns already-fetched provider payloads into one merged dataset:
- Normalizers: keywords, pages, audience, trend, sitemaps, appearance,
  external trends/competitors
- Orchestrator: concurrent fan-out with a join barrier
- Merger: fan-in with keyword -> page fallback
"""

from .models import (
    AudienceBatchKind,
    ProcessedSource,
    RawPayload,
    SearchPerformanceSource,
    SearchStats,
    SourceKind,
    TrendDirection,
)
from .search import compute_stats, normalize_keywords, normalize_pages
from .audience import classify_audience_batch, normalize_audience
from .trend import classify_direction, normalize_trend
from .context import normalize_appearance, normalize_sitemaps
from .external import normalize_external
from .merger import MergedDataset, merge_sources
from .orchestrator import (
    CollectionInput,
    SourceCollectionOrchestrator,
    normalize_all,
)

__all__ = [
    # Models
    "AudienceBatchKind",
    "ProcessedSource",
    "RawPayload",
    "SearchPerformanceSource",
    "SearchStats",
    "SourceKind",
    "TrendDirection",

    # Normalizers
    "compute_stats",
    "normalize_keywords",
    "normalize_pages",
    "classify_audience_batch",
    "normalize_audience",
    "classify_direction",
    "normalize_trend",
    "normalize_appearance",
    "normalize_sitemaps",
    "normalize_external",

    # Fan-in
    "MergedDataset",
    "merge_sources",
    "CollectionInput",
    "SourceCollectionOrchestrator",
    "normalize_all",
]
