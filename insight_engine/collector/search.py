"""
Search Performance Normalizers

Converts Search Console query and page reports into SearchPerformanceSource:
- Aggregate totals (rows, clicks, impressions, CTR, position)
- Top 50 rows in the order received
- Quick-win candidates (query report; pages use the same rule)

The page report is shaped identically so the merger can use it as a
stand-in when the query report comes back empty.
"""

import logging
from typing import Any, Iterable, List, Optional, Tuple

from insight_engine.scoring import find_quick_wins

from .models import (
    KeywordRecord,
    RawPayload,
    SearchPerformanceSource,
    SearchStats,
    SourceKind,
    row_key,
    to_float,
    to_int,
)

logger = logging.getLogger(__name__)

TOP_KEYWORD_LIMIT = 50


def compute_stats(records: Iterable[KeywordRecord]) -> SearchStats:
    """
    Aggregate totals over a list of records.

    Average CTR is derived from summed clicks and impressions (not a mean of
    per-row CTRs); average position is the plain mean.
    """
    records = list(records)
    if not records:
        return SearchStats()

    clicks = sum(r.clicks for r in records)
    impressions = sum(r.impressions for r in records)
    avg_ctr = round(clicks / impressions * 100, 2) if impressions else 0.0
    avg_position = round(sum(r.position for r in records) / len(records), 1)

    return SearchStats(
        total_rows=len(records),
        total_clicks=clicks,
        total_impressions=impressions,
        avg_ctr=avg_ctr,
        avg_position=avg_position,
    )


def _parse_row(row: Any, rank: int) -> Optional[Tuple[KeywordRecord, float, float]]:
    """Parse one provider row into (record, raw ctr fraction, raw position)."""
    key = row_key(row).strip()
    if not key:
        return None

    clicks = to_int(row.get("clicks"))
    impressions = to_int(row.get("impressions"))
    if row.get("ctr") is not None:
        raw_ctr = to_float(row.get("ctr"))
    else:
        raw_ctr = clicks / impressions if impressions else 0.0

    raw_position = to_float(row.get("position"))
    record = KeywordRecord(
        rank=rank,
        keyword=key,
        clicks=clicks,
        impressions=impressions,
        ctr=min(round(raw_ctr * 100, 2), 100.0),
        position=round(raw_position, 1),
    )
    return record, raw_ctr, raw_position


def _normalize_search_rows(payload: RawPayload, kind: SourceKind) -> SearchPerformanceSource:
    if not payload.succeeded:
        logger.warning(f"{kind.value} source unavailable: {payload.error_message}")
        return SearchPerformanceSource(
            source_kind=kind,
            error_message=payload.error_message or "Request failed",
        )

    parsed: List[Tuple[KeywordRecord, float, float]] = []
    for row in payload.rows():
        entry = _parse_row(row, rank=len(parsed) + 1)
        if entry is not None:
            parsed.append(entry)

    if not parsed:
        logger.info(f"{kind.value} source returned no usable rows")
        return SearchPerformanceSource(
            source_kind=kind,
            error_message="No rows returned",
        )

    records = [record for record, _, _ in parsed]
    stats = compute_stats(records)
    top_keywords = records[:TOP_KEYWORD_LIMIT]
    quick_wins = find_quick_wins(parsed)

    logger.debug(
        f"{kind.value}: {stats.total_rows} rows, {stats.total_clicks} clicks, "
        f"{len(quick_wins)} quick wins"
    )

    return SearchPerformanceSource(
        source_kind=kind,
        has_data=True,
        stats=stats,
        top_keywords=top_keywords,
        quick_wins=quick_wins,
    )


def normalize_keywords(payload: RawPayload) -> SearchPerformanceSource:
    """Normalize the query-dimension report."""
    return _normalize_search_rows(payload, SourceKind.KEYWORDS)


def normalize_pages(payload: RawPayload) -> SearchPerformanceSource:
    """Normalize the page-dimension report."""
    return _normalize_search_rows(payload, SourceKind.PAGES)
