"""
Quick-Win Opportunity Detection

A quick win is a query with real visibility, weak click-through and a
position that is rankable but not yet top tier:

    impressions > 20
    ctr < 0.03            (provider fraction, i.e. under 3%)
    5 <= position <= 20

Matches are kept in source order and capped at 10. These thresholds are a
fixed business rule, not a fitted model.
"""

import logging
from typing import Any, Iterable, List, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from insight_engine.collector.models import KeywordRecord, QuickWinCandidate

logger = logging.getLogger(__name__)

MIN_IMPRESSIONS = 20
MAX_CTR = 0.03
MIN_POSITION = 5
MAX_POSITION = 20
MAX_QUICK_WINS = 10


def is_quick_win(impressions: Any, ctr: Any, position: Any) -> bool:
    """
    Check a row against the quick-win predicate.

    Args:
        impressions: Impression count
        ctr: Click-through rate as a fraction (0.02 == 2%)
        position: Average position

    Returns:
        True if the row qualifies
    """
    try:
        impressions = float(impressions)
        ctr = float(ctr)
        position = float(position)
    except (TypeError, ValueError):
        return False

    return (
        impressions > MIN_IMPRESSIONS
        and ctr < MAX_CTR
        and MIN_POSITION <= position <= MAX_POSITION
    )


def opportunity_note(record: "KeywordRecord") -> str:
    """Short explanation of why the row is an opportunity."""
    return (
        f"Position {record.position:.1f} with {record.ctr:.2f}% CTR on "
        f"{record.impressions:,} impressions - improve title/meta and "
        f"on-page relevance to push into the top 5"
    )


def find_quick_wins(
    rows: Iterable[Tuple["KeywordRecord", float, float]],
    limit: int = MAX_QUICK_WINS,
) -> List["QuickWinCandidate"]:
    """
    Select quick-win candidates in source order.

    Args:
        rows: (record, raw_ctr_fraction, raw_position) triples in the order
            received; the predicate sees the unrounded provider values
        limit: Maximum candidates to return

    Returns:
        Up to ``limit`` QuickWinCandidate entries
    """
    from insight_engine.collector.models import QuickWinCandidate

    candidates: List[QuickWinCandidate] = []

    for record, raw_ctr, raw_position in rows:
        if len(candidates) >= limit:
            break
        if not is_quick_win(record.impressions, raw_ctr, raw_position):
            continue
        candidates.append(QuickWinCandidate(
            rank=record.rank,
            keyword=record.keyword,
            clicks=record.clicks,
            impressions=record.impressions,
            ctr=record.ctr,
            position=record.position,
            opportunity_note=opportunity_note(record),
        ))

    logger.debug(f"Quick wins found: {len(candidates)}")
    return candidates
