"""
Prompt Builder

Serializes the merged dataset into a bounded analysis prompt plus the
literal JSON shape the model must reply with.

Every list section is truncated to its cap regardless of dataset size so
prompt length stays bounded.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from insight_engine.collector.merger import MergedDataset
from insight_engine.output.schemas import INSIGHT_EXAMPLE, INSIGHT_SCHEMA
from insight_engine.utils.serialization import to_plain

from .engine import AnalysisResult

logger = logging.getLogger(__name__)

TOP_KEYWORDS_CAP = 10
QUICK_WINS_CAP = 5
RISING_QUERIES_CAP = 5
COMPETITORS_CAP = 10

NO_DATA = "- No data available"


SYSTEM_PROMPT = """You are a senior SEO analyst reviewing Google Search Console performance for a client report. Your task is to interpret the data and produce prioritized, actionable insight.

## CRITICAL RULES

1. **Use the exact data provided.** Do not invent queries, numbers or competitors.
2. **Quantify impact.** Tie every recommendation to clicks, CTR or position.
3. **Be honest about gaps.** If a section has no data, say so briefly.
4. **Reply with JSON only.** No prose before or after the object."""


USER_PROMPT_TEMPLATE = """# INPUT DATA

## Site
- **Property:** {site_url}
- **Keyword data source:** {keyword_source}

## Performance Summary
- **Total queries:** {total_rows}
- **Total clicks:** {total_clicks}
- **Total impressions:** {total_impressions}
- **Average CTR:** {avg_ctr}%
- **Average position:** {avg_position}
- **Trend:** {trend}
- **Clicks change:** {clicks_change}%{estimated_note}

## Top {keyword_cap} Keywords
{top_keywords}

## Device Breakdown
{devices}

## Top {quick_win_cap} Quick Wins (impressions > 20, CTR < 3%, position 5-20)
{quick_wins}

## Top {rising_cap} Rising Search Trends
{rising_queries}

## Competitor Rankings
{competitors}

---

# ANALYSIS TASKS

1. **Executive summary** - 3-4 sentences on overall performance and trend.
2. **Keyword clustering** - group the listed queries by search intent (Brand, Commercial, Product, Informational).
3. **Quick wins** - the top 3 quick wins, prioritized, each with a specific action and expected impact.
4. **Competitive gap** - where competitors or rising trends expose gaps in the site's coverage.
5. **Recommendations** - 3-5 recommendations, ordered by priority (1 = highest).

---

# OUTPUT FORMAT

Reply with a single JSON object following this schema:
```json
{schema}
```

Example of the required response shape:
```json
{example}
```"""


@dataclass(frozen=True)
class PromptBundle:
    """Prompt text plus the context that must travel with it to the reconciler."""
    system: str
    prompt: str
    output_schema: Dict[str, Any] = field(default_factory=dict)
    raw_data: Dict[str, Any] = field(default_factory=dict)


def _format_keywords(dataset: MergedDataset) -> str:
    lines = [
        f"{k.rank}. \"{k.keyword}\" - {k.clicks:,} clicks, {k.impressions:,} impressions, "
        f"CTR {k.ctr:.2f}%, position {k.position:.1f}"
        for k in dataset.top_keywords[:TOP_KEYWORDS_CAP]
    ]
    return "\n".join(lines) or NO_DATA


def _format_devices(dataset: MergedDataset) -> str:
    lines = [
        f"- {d.device}: {d.clicks:,} clicks, {d.impressions:,} impressions, "
        f"CTR {d.ctr:.2f}%, position {d.position:.1f}"
        for d in dataset.audience.breakdown.devices
    ]
    return "\n".join(lines) or NO_DATA


def _format_quick_wins(dataset: MergedDataset) -> str:
    lines = [
        f"- \"{q.keyword}\" - position {q.position:.1f}, {q.impressions:,} impressions, "
        f"CTR {q.ctr:.2f}%"
        for q in dataset.quick_wins[:QUICK_WINS_CAP]
    ]
    return "\n".join(lines) or NO_DATA


def _format_rising(dataset: MergedDataset) -> str:
    lines = []
    for query in dataset.external.rising_queries[:RISING_QUERIES_CAP]:
        growth = f" ({query.growth})" if query.growth else ""
        lines.append(f"- {query.query}{growth}")
    return "\n".join(lines) or NO_DATA


def _format_competitors(dataset: MergedDataset) -> str:
    lines = [
        f"{c.rank}. {c.domain}"
        for c in dataset.external.competitors[:COMPETITORS_CAP]
    ]
    return "\n".join(lines) or NO_DATA


def build_raw_data(dataset: MergedDataset, analysis: AnalysisResult) -> Dict[str, Any]:
    """Plain-data snapshot of what the prompt was built from."""
    return to_plain({
        "site_url": dataset.site_url,
        "keyword_source": dataset.keyword_source,
        "stats": dataset.keyword_stats,
        "trend_direction": analysis.trend_direction,
        "deltas": analysis.deltas,
        "top_keywords": dataset.top_keywords[:TOP_KEYWORDS_CAP],
        "devices": dataset.audience.breakdown.devices,
        "quick_wins": dataset.quick_wins[:QUICK_WINS_CAP],
        "rising_queries": dataset.external.rising_queries[:RISING_QUERIES_CAP],
        "competitors": dataset.external.competitors[:COMPETITORS_CAP],
        "missing_sources": dataset.missing_sources(),
    })


def build_prompt(dataset: MergedDataset, analysis: Optional[AnalysisResult] = None) -> PromptBundle:
    """
    Build the analysis prompt for a dataset.

    Args:
        dataset: Merged dataset
        analysis: Analyzer output (deltas, trend); defaults to an empty result

    Returns:
        PromptBundle with system prompt, user prompt, schema and raw data
    """
    analysis = analysis or AnalysisResult(trend_direction=dataset.trend.series.direction)
    stats = dataset.keyword_stats
    deltas = analysis.deltas

    prompt = USER_PROMPT_TEMPLATE.format(
        site_url=dataset.site_url or "Unknown",
        keyword_source=dataset.keyword_source,
        total_rows=f"{stats.total_rows:,}",
        total_clicks=f"{stats.total_clicks:,}",
        total_impressions=f"{stats.total_impressions:,}",
        avg_ctr=f"{stats.avg_ctr:.2f}",
        avg_position=f"{stats.avg_position:.1f}",
        trend=analysis.trend_direction.value,
        clicks_change=deltas.clicks_change,
        estimated_note=" (estimated from trend, short history)" if deltas.estimated else "",
        keyword_cap=TOP_KEYWORDS_CAP,
        top_keywords=_format_keywords(dataset),
        devices=_format_devices(dataset),
        quick_win_cap=QUICK_WINS_CAP,
        quick_wins=_format_quick_wins(dataset),
        rising_cap=RISING_QUERIES_CAP,
        rising_queries=_format_rising(dataset),
        competitors=_format_competitors(dataset),
        schema=json.dumps(INSIGHT_SCHEMA, indent=2),
        example=json.dumps(INSIGHT_EXAMPLE, indent=2),
    )

    logger.debug(f"Built prompt: {len(prompt)} chars")

    return PromptBundle(
        system=SYSTEM_PROMPT,
        prompt=prompt,
        output_schema=INSIGHT_SCHEMA,
        raw_data=build_raw_data(dataset, analysis),
    )
