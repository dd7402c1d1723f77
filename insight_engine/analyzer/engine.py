"""
Analysis Engine - Derives cross-cutting metrics from the merged dataset.

This engine computes:
1. Trend classification (carried from the trend source)
2. Period-over-period deltas (computed or estimated)
3. Per-keyword contextual annotations
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from insight_engine.collector.merger import MergedDataset
from insight_engine.collector.models import TrendDirection

from .annotations import KeywordAnnotation, annotate_keywords
from .deltas import PeriodDeltas, compute_deltas

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Analyzer output for one run."""
    trend_direction: TrendDirection = TrendDirection.STABLE
    deltas: PeriodDeltas = field(default_factory=PeriodDeltas)
    annotations: List[KeywordAnnotation] = field(default_factory=list)
    quick_win_count: int = 0


class Analyzer:
    """
    Heuristic analyzer over a MergedDataset.

    Pure and deterministic: the same dataset always yields the same result.
    """

    def __init__(self, brand_terms: Optional[Sequence[str]] = None):
        """
        Initialize analyzer.

        Args:
            brand_terms: Lower-case brand names used for intent labelling
        """
        self.brand_terms = list(brand_terms or [])

    def analyze(self, dataset: MergedDataset) -> AnalysisResult:
        """
        Run all heuristics over the dataset.

        Args:
            dataset: Merged dataset

        Returns:
            AnalysisResult
        """
        series = dataset.trend.series
        deltas = compute_deltas(series)
        annotations = annotate_keywords(dataset.top_keywords, self.brand_terms)

        logger.info(
            f"Analysis: trend={series.direction.value}, "
            f"clicks change={deltas.clicks_change}%"
            f"{' (estimated)' if deltas.estimated else ''}, "
            f"{len(dataset.quick_wins)} quick wins"
        )

        return AnalysisResult(
            trend_direction=series.direction,
            deltas=deltas,
            annotations=annotations,
            quick_win_count=len(dataset.quick_wins),
        )
