"""
Trend Normalizer

Builds the daily clicks/impressions series from the date-dimension report
and labels its direction by comparing the last 7 entries with the first 7
(entry based, not calendar aligned).

A 10% deadband keeps single-day noise from flipping the label.
"""

import logging
from typing import Any, List, Sequence

from .models import (
    RawPayload,
    SourceKind,
    TrendDirection,
    TrendPoint,
    TrendSeries,
    TrendSource,
    row_key,
    to_float,
    to_int,
)

logger = logging.getLogger(__name__)

WINDOW = 7
DEADBAND = 0.10


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def classify_direction(clicks: Sequence[float]) -> TrendDirection:
    """
    Label a click series as up, down or stable.

    recent = last 7 entries, older = first 7 entries. Up when the recent
    average is at least 10% above the older one, down when at least 10%
    below.
    """
    if not clicks:
        return TrendDirection.STABLE

    recent_avg = _mean(clicks[-WINDOW:])
    older_avg = _mean(clicks[:WINDOW])

    if older_avg == 0:
        return TrendDirection.UP if recent_avg > 0 else TrendDirection.STABLE

    # Rounded so that exactly +/-10% lands on the boundary despite float error
    change = round((recent_avg - older_avg) / older_avg, 6)
    if change >= DEADBAND:
        return TrendDirection.UP
    if change <= -DEADBAND:
        return TrendDirection.DOWN
    return TrendDirection.STABLE


def _parse_points(rows: Sequence[Any]) -> List[TrendPoint]:
    points = []
    for row in rows:
        date = row_key(row).strip() or (str(row.get("date", "")).strip() if isinstance(row, dict) else "")
        if not date:
            continue
        points.append(TrendPoint(
            date=date,
            clicks=to_int(row.get("clicks")),
            impressions=to_int(row.get("impressions")),
            ctr=min(round(to_float(row.get("ctr")) * 100, 2), 100.0),
            position=round(to_float(row.get("position")), 1),
        ))
    # ISO dates sort chronologically as strings
    return sorted(points, key=lambda p: p.date)


def normalize_trend(payload: RawPayload) -> TrendSource:
    """Normalize the daily time-series report."""
    if not payload.succeeded:
        logger.warning(f"Trend source unavailable: {payload.error_message}")
        return TrendSource(
            source_kind=SourceKind.TREND_TIMESERIES,
            error_message=payload.error_message or "Request failed",
        )

    points = _parse_points(payload.rows())
    if not points:
        logger.info("Trend source returned no usable rows")
        return TrendSource(
            source_kind=SourceKind.TREND_TIMESERIES,
            error_message="No rows returned",
        )

    direction = classify_direction([p.clicks for p in points])
    logger.debug(f"Trend: {len(points)} days, direction={direction.value}")

    return TrendSource(
        source_kind=SourceKind.TREND_TIMESERIES,
        has_data=True,
        series=TrendSeries(points=points, direction=direction),
    )
