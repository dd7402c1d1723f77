"""
Insight Output Schema

Defines the JSON structure the model must reply with, the typed
InsightRecord it is reconciled into, and a light validator.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


# ============================================================================
# TYPED RECORD
# ============================================================================

@dataclass(frozen=True)
class QuickWinAction:
    keyword: str
    action: str = ""
    expected_impact: str = ""


@dataclass(frozen=True)
class Recommendation:
    priority: int
    action: str
    impact: str = ""


@dataclass(frozen=True)
class InsightRecord:
    """
    Model insight for one run.

    Every field is always populated; degraded records carry empty
    collections and parse_degraded=True.
    """
    executive_summary: str = ""
    keyword_clusters: Dict[str, List[str]] = field(default_factory=dict)
    quick_wins: List[QuickWinAction] = field(default_factory=list)
    competitive_gap: str = ""
    recommendations: List[Recommendation] = field(default_factory=list)
    parse_degraded: bool = False
    parse_method: str = "json"  # "json", "json_scan", "text", "unavailable"


# ============================================================================
# WIRE SCHEMA
# ============================================================================

QUICK_WIN_SCHEMA = {
    "keyword": "str - Query exactly as listed in the data",
    "action": "str - Specific on-page or snippet change",
    "expectedImpact": "str - Expected effect with numbers where possible",
}

RECOMMENDATION_SCHEMA = {
    "priority": "int - 1 (highest) to 5",
    "action": "str - Specific action to take",
    "impact": "str - Expected business impact",
}

INSIGHT_SCHEMA = {
    "executiveSummary": "str - 3-4 sentences on overall performance and trend",
    "keywordClusters": "Dict[str, List[str]] - intent cluster name -> queries",
    "quickWins": [QUICK_WIN_SCHEMA],
    "competitiveGap": "str - Where competitors outrank or out-trend the site",
    "recommendations": [RECOMMENDATION_SCHEMA],
}

INSIGHT_EXAMPLE = {
    "executiveSummary": "Clicks grew 5.2% period over period while average position held at 8.4...",
    "keywordClusters": {
        "Commercial": ["best running shoes", "running shoes price"],
        "Informational": ["how to choose running shoes"],
    },
    "quickWins": [
        {
            "keyword": "trail running shoes",
            "action": "Rewrite the title tag to lead with the query and add a comparison table",
            "expectedImpact": "CTR from 1.2% to 3%, roughly +150 clicks/month",
        },
    ],
    "competitiveGap": "competitor.com ranks above the site for 4 of the top 10 rising queries...",
    "recommendations": [
        {"priority": 1, "action": "Refresh the top 5 quick-win pages", "impact": "High"},
        {"priority": 2, "action": "Publish a guide for the rising query cluster", "impact": "Medium"},
    ],
}

REQUIRED_FIELDS = tuple(INSIGHT_SCHEMA.keys())


def validate_insight(data: Dict[str, Any]) -> tuple[bool, List[str]]:
    """
    Validate a parsed reply against the wire schema.

    Args:
        data: Parsed JSON object

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    if not isinstance(data, dict):
        return False, ["Reply is not a JSON object"]

    errors = []
    for name in REQUIRED_FIELDS:
        if name not in data:
            errors.append(f"Missing field: {name}")

    if "keywordClusters" in data and not isinstance(data["keywordClusters"], dict):
        errors.append("keywordClusters must be an object")
    for name in ("quickWins", "recommendations"):
        if name in data and not isinstance(data[name], list):
            errors.append(f"{name} must be a list")

    return len(errors) == 0, errors
