"""
Report Model Assembler

Combines the merged dataset, analyzer output and insight record into the
read-only ReportModel handed to rendering. No new metrics are derived here;
the assembler only joins values and records which sections are degraded.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from insight_engine.analyzer.engine import AnalysisResult
from insight_engine.collector.merger import MergedDataset
from insight_engine.output.parser import InsightReconciler
from insight_engine.output.schemas import InsightRecord
from insight_engine.utils.serialization import to_json, to_plain

from .confidence import ReportConfidence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordRow:
    """A top keyword joined with its annotation, ready for display."""
    rank: int
    keyword: str
    clicks: int
    impressions: int
    ctr: float
    position: float
    intent: str = "Informational"
    peak_window: str = ""
    ctr_label: str = ""


@dataclass(frozen=True)
class ReportModel:
    """Final, presentation-ready report data."""
    site_url: str
    period_label: str
    dataset: MergedDataset
    insight: InsightRecord
    analysis: AnalysisResult
    keyword_rows: List[KeywordRow] = field(default_factory=list)
    degraded_sections: List[str] = field(default_factory=list)
    confidence_score: float = 0.0
    confidence_level: str = "VERY LOW"

    def to_dict(self) -> Dict[str, Any]:
        return to_plain(self)

    def to_json(self, indent: int = 2) -> str:
        """Deterministic JSON rendering (sorted keys, no timestamps)."""
        return to_json(self, indent=indent)


def _period_label(dataset: MergedDataset) -> str:
    points = dataset.trend.series.points
    if not points:
        return ""
    return f"{points[0].date} to {points[-1].date}"


def _keyword_rows(dataset: MergedDataset, analysis: AnalysisResult) -> List[KeywordRow]:
    annotations = {a.keyword: a for a in analysis.annotations}
    rows = []
    for record in dataset.top_keywords:
        annotation = annotations.get(record.keyword)
        rows.append(KeywordRow(
            rank=record.rank,
            keyword=record.keyword,
            clicks=record.clicks,
            impressions=record.impressions,
            ctr=record.ctr,
            position=record.position,
            intent=annotation.intent if annotation else "Informational",
            peak_window=annotation.peak_window if annotation else "",
            ctr_label=annotation.ctr_label if annotation else "",
        ))
    return rows


def assemble_report(
    dataset: MergedDataset,
    insight: Optional[InsightRecord] = None,
    analysis: Optional[AnalysisResult] = None,
) -> ReportModel:
    """
    Assemble the final ReportModel.

    Args:
        dataset: Merged dataset
        insight: Reconciled insight; None is replaced by the unavailable record
        analysis: Analyzer output; None is replaced by an empty result

    Returns:
        ReportModel with every field populated
    """
    insight = insight or InsightReconciler().unavailable()
    analysis = analysis or AnalysisResult(trend_direction=dataset.trend.series.direction)

    confidence = ReportConfidence()
    for name, source in dataset.slots().items():
        confidence.track(name, source.has_data, source.error_message or "")
    confidence.track_value("top_keywords", dataset.top_keywords, f"source={dataset.keyword_source}")
    confidence.track("ai_insight", not insight.parse_degraded, insight.parse_method)

    report = ReportModel(
        site_url=dataset.site_url,
        period_label=_period_label(dataset),
        dataset=dataset,
        insight=insight,
        analysis=analysis,
        keyword_rows=_keyword_rows(dataset, analysis),
        degraded_sections=confidence.degraded_sections,
        confidence_score=confidence.confidence_score,
        confidence_level=confidence.confidence_level,
    )

    logger.info(
        f"Report model assembled for {dataset.site_url or 'site'}: "
        f"confidence {report.confidence_score:.0f}% ({report.confidence_level}), "
        f"{len(report.degraded_sections)} degraded sections"
    )
    return report
