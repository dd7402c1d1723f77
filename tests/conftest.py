"""
Pytest Configuration and Shared Fixtures

Provides provider payload envelopes and model replies shared by all test
modules.
"""

import json
import pytest
from typing import Any, Dict, List

from helpers import daily_rows, gsc_row


# ============================================================================
# Payload Fixtures
# ============================================================================

@pytest.fixture
def keyword_rows() -> List[Dict[str, Any]]:
    """Query rows: two quick wins, one top performer, one brand query."""
    return [
        gsc_row("running shoes", 120, 2400, 0.05, 3.2),
        gsc_row("trail running shoes", 1, 50, 0.02, 10.0),
        gsc_row("best running shoes 2024", 4, 400, 0.01, 12.5),
        gsc_row("acme shoes", 75, 300, 0.25, 1.1),
    ]


@pytest.fixture
def page_rows() -> List[Dict[str, Any]]:
    return [
        gsc_row("https://example.com/running", 300, 6000, 0.05, 4.0),
        gsc_row("https://example.com/trail", 10, 900, 0.011, 9.0),
    ]


@pytest.fixture
def device_rows() -> List[Dict[str, Any]]:
    return [
        gsc_row("MOBILE", 150, 2500, 0.06, 6.1),
        gsc_row("DESKTOP", 45, 600, 0.075, 5.2),
        gsc_row("TABLET", 5, 50, 0.1, 7.0),
    ]


@pytest.fixture
def country_rows() -> List[Dict[str, Any]]:
    return [
        gsc_row("usa", 120, 2000, 0.06, 5.5),
        gsc_row("gbr", 50, 800, 0.0625, 6.0),
        gsc_row("can", 30, 350, 0.0857, 7.5),
    ]


@pytest.fixture
def external_trend_body() -> Dict[str, Any]:
    return {
        "interest_over_time": {
            "timeline_data": [
                {"date": f"2024-{month:02d}", "values": [{"query": "running shoes", "extracted_value": 40 + month}]}
                for month in range(1, 13)
            ],
        },
        "related_queries": {
            "rising": [
                {"query": "carbon plate running shoes", "value": "+250%"},
                {"query": "zero drop shoes", "value": "Breakout"},
            ],
        },
    }


@pytest.fixture
def competitor_body() -> Dict[str, Any]:
    return {
        "competitors": [
            {"domain": "runnersworld.com", "rank": 2},
            {"domain": "Nike.com", "rank": 1},
            {"domain": "", "rank": 3},
        ],
    }


@pytest.fixture
def envelopes(
    keyword_rows,
    page_rows,
    device_rows,
    country_rows,
    external_trend_body,
    competitor_body,
) -> Dict[str, Any]:
    """A complete set of successful envelopes for one run."""
    return {
        "keywords": {"succeeded": True, "rows": keyword_rows},
        "pages": {"succeeded": True, "rows": page_rows},
        # Deliberately mislabelled: content decides, not the key
        "audience-device": {"succeeded": True, "rows": country_rows},
        "audience-country": {"succeeded": True, "rows": device_rows},
        "trend-timeseries": {"succeeded": True, "rows": daily_rows([100] * 7 + [120] * 7)},
        "sitemap": {
            "succeeded": True,
            "sitemap": [
                {
                    "path": "https://example.com/sitemap.xml",
                    "lastSubmitted": "2025-01-10T08:00:00Z",
                    "isPending": False,
                    "errors": "0",
                    "warnings": "1",
                    "contents": [{"type": "web", "submitted": "120", "indexed": "98"}],
                },
            ],
        },
        "appearance": {
            "succeeded": True,
            "rows": [gsc_row("VIDEO", 12, 400, 0.03, 6.5)],
        },
        "external-trend": {"succeeded": True, **external_trend_body},
        "external-competitor": {"succeeded": True, **competitor_body},
    }


# ============================================================================
# Model Reply Fixtures
# ============================================================================

@pytest.fixture
def insight_payload() -> Dict[str, Any]:
    return {
        "executiveSummary": "Clicks grew 20% while average position held steady.",
        "keywordClusters": {
            "Commercial": ["best running shoes 2024"],
            "Informational": ["trail running shoes"],
        },
        "quickWins": [
            {
                "keyword": "trail running shoes",
                "action": "Rewrite the title tag",
                "expectedImpact": "CTR from 2% to 4%",
            },
        ],
        "competitiveGap": "nike.com outranks the site on rising carbon plate queries.",
        "recommendations": [
            {"priority": 2, "action": "Publish a carbon plate guide", "impact": "Medium"},
            {"priority": 1, "action": "Refresh quick-win titles", "impact": "High"},
        ],
    }


@pytest.fixture
def insight_json(insight_payload) -> str:
    return json.dumps(insight_payload)


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as end-to-end pipeline tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
