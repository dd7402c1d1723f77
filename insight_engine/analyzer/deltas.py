"""
Period-over-Period Deltas

With at least 28 daily points the series is split at its midpoint and the
two halves are compared. Shorter histories get fixed estimates derived from
the coarse trend label instead of computed values.
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from insight_engine.collector.models import TrendDirection, TrendPoint, TrendSeries

logger = logging.getLogger(__name__)

MIN_POINTS_FOR_DELTAS = 28

# Placeholder percentages for short histories
ESTIMATED_CHANGE = {
    TrendDirection.UP: "5.2",
    TrendDirection.DOWN: "-4.5",
    TrendDirection.STABLE: "0",
}


@dataclass(frozen=True)
class PeriodTotals:
    """Summed metrics over one half of the series."""
    days: int = 0
    clicks: int = 0
    impressions: int = 0
    ctr: float = 0.0  # Sum of daily CTR percentages
    position: float = 0.0  # Sum of daily positions


@dataclass(frozen=True)
class PeriodDeltas:
    """Percent changes, formatted for display ("5.2", "-4.5", "0")."""
    clicks_change: str = "0"
    impressions_change: str = "0"
    ctr_change: str = "0"
    position_change: str = "0"
    estimated: bool = True
    previous: PeriodTotals = field(default_factory=PeriodTotals)
    current: PeriodTotals = field(default_factory=PeriodTotals)


def pct_change(first: float, second: float) -> str:
    """Percent change from first to second; "0" when first is zero."""
    if not first:
        return "0"
    return f"{(second - first) / first * 100:.1f}"


def _totals(points: Sequence[TrendPoint]) -> PeriodTotals:
    return PeriodTotals(
        days=len(points),
        clicks=sum(p.clicks for p in points),
        impressions=sum(p.impressions for p in points),
        ctr=round(sum(p.ctr for p in points), 4),
        position=round(sum(p.position for p in points), 4),
    )


def compute_deltas(series: TrendSeries) -> PeriodDeltas:
    """
    Compute period-over-period deltas for a daily series.

    Args:
        series: Daily trend series with its direction label

    Returns:
        PeriodDeltas; ``estimated`` is True for histories under 28 points
    """
    points = series.points
    if len(points) < MIN_POINTS_FOR_DELTAS:
        change = ESTIMATED_CHANGE[series.direction]
        logger.debug(
            f"Only {len(points)} daily points; estimating deltas from "
            f"direction={series.direction.value}"
        )
        return PeriodDeltas(
            clicks_change=change,
            impressions_change=change,
            estimated=True,
        )

    midpoint = len(points) // 2
    previous = _totals(points[:midpoint])
    current = _totals(points[midpoint:])

    return PeriodDeltas(
        clicks_change=pct_change(previous.clicks, current.clicks),
        impressions_change=pct_change(previous.impressions, current.impressions),
        ctr_change=pct_change(previous.ctr, current.ctr),
        position_change=pct_change(previous.position, current.position),
        estimated=False,
        previous=previous,
        current=current,
    )
