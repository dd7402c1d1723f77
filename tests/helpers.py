"""Row builders shared by the test modules."""

from typing import Any, Dict, List


def gsc_row(key: str, clicks: int, impressions: int, ctr: float, position: float) -> Dict[str, Any]:
    """A Search Analytics row with a single dimension."""
    return {
        "keys": [key],
        "clicks": clicks,
        "impressions": impressions,
        "ctr": ctr,
        "position": position,
    }


def daily_rows(clicks: List[int]) -> List[Dict[str, Any]]:
    """Date-dimension rows for consecutive days starting 2025-01-01."""
    rows = []
    for offset, value in enumerate(clicks):
        day = offset + 1
        month, day_of_month = (1, day) if day <= 31 else (2, day - 31)
        rows.append(gsc_row(
            f"2025-{month:02d}-{day_of_month:02d}",
            clicks=value,
            impressions=value * 20,
            ctr=0.05,
            position=8.0,
        ))
    return rows
