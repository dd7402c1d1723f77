"""
Scoring Module

Business rules that flag opportunities in search performance data.

Example Usage:
    from insight_engine.scoring import is_quick_win

    is_quick_win(impressions=50, ctr=0.02, position=10)   # True
    is_quick_win(impressions=10, ctr=0.02, position=10)   # False
"""

from .opportunity import (
    MAX_QUICK_WINS,
    find_quick_wins,
    is_quick_win,
    opportunity_note,
)

__all__ = [
    "MAX_QUICK_WINS",
    "find_quick_wins",
    "is_quick_win",
    "opportunity_note",
]
