"""
Test Suite for the Analyzer

Tests period-over-period deltas, keyword annotations and the Analyzer
facade over a merged dataset.
"""

import pytest

from insight_engine.analyzer import Analyzer, classify_intent, compute_deltas
from insight_engine.analyzer.annotations import annotate_keywords, ctr_label, peak_traffic_window
from insight_engine.analyzer.deltas import pct_change
from insight_engine.collector import (
    CollectionInput,
    RawPayload,
    SourceKind,
    TrendDirection,
    merge_sources,
    normalize_all,
    normalize_trend,
)
from insight_engine.collector.models import KeywordRecord, TrendSeries

from helpers import daily_rows


def trend_series(clicks):
    raw = RawPayload.from_envelope(
        SourceKind.TREND_TIMESERIES, {"succeeded": True, "rows": daily_rows(clicks)}
    )
    return normalize_trend(raw).series


# ============================================================================
# Delta Tests
# ============================================================================

class TestPeriodDeltas:
    """Test midpoint split and short-history estimates."""

    def test_computed_for_28_points(self):
        deltas = compute_deltas(trend_series([100] * 14 + [110] * 14))

        assert deltas.estimated is False
        assert deltas.clicks_change == "10.0"
        assert deltas.impressions_change == "10.0"
        assert deltas.ctr_change == "0.0"
        assert deltas.position_change == "0.0"
        assert deltas.previous.days == 14
        assert deltas.previous.clicks == 1400
        assert deltas.current.clicks == 1540

    def test_odd_length_split_at_floor_midpoint(self):
        deltas = compute_deltas(trend_series([10] * 29))

        assert deltas.previous.days == 14
        assert deltas.current.days == 15

    def test_decline(self):
        deltas = compute_deltas(trend_series([200] * 14 + [150] * 14))
        assert deltas.clicks_change == "-25.0"

    def test_zero_previous_period(self):
        deltas = compute_deltas(trend_series([0] * 14 + [50] * 14))

        assert deltas.estimated is False
        assert deltas.clicks_change == "0"

    @pytest.mark.parametrize("clicks,expected", [
        ([100] * 7 + [120] * 7, "5.2"),
        ([100] * 7 + [80] * 7, "-4.5"),
        ([100] * 14, "0"),
    ])
    def test_estimated_for_short_history(self, clicks, expected):
        deltas = compute_deltas(trend_series(clicks))

        assert deltas.estimated is True
        assert deltas.clicks_change == expected
        assert deltas.impressions_change == expected
        assert deltas.ctr_change == "0"

    def test_empty_series(self):
        deltas = compute_deltas(TrendSeries())

        assert deltas.estimated is True
        assert deltas.clicks_change == "0"

    def test_pct_change_format(self):
        assert pct_change(3, 4) == "33.3"
        assert pct_change(0, 4) == "0"


# ============================================================================
# Annotation Tests
# ============================================================================

class TestIntentClassification:
    """Test Brand > Commercial > Product > Informational precedence."""

    @pytest.mark.parametrize("keyword,expected", [
        ("acme shoes", "Brand"),
        ("best acme shoes", "Brand"),
        ("best running shoes 2024", "Commercial"),
        ("nike vs adidas", "Commercial"),
        ("running shoes price", "Commercial"),
        ("shoe store near me", "Product"),
        ("how to lace running shoes", "Informational"),
        ("buyer guide", "Informational"),
    ])
    def test_intent(self, keyword, expected):
        assert classify_intent(keyword, ["acme"]) == expected

    def test_case_insensitive(self):
        assert classify_intent("BUY Trail Shoes") == "Commercial"

    def test_no_brand_terms(self):
        assert classify_intent("acme shoes") == "Informational"


class TestContextLabels:
    """Test peak window and CTR buckets."""

    @pytest.mark.parametrize("position,expected", [
        (1.0, "Weekdays 9:00-12:00"),
        (3.0, "Weekdays 9:00-12:00"),
        (7.5, "Weekdays 12:00-17:00"),
        (15.0, "Evenings 18:00-22:00"),
        (35.0, "Weekends"),
    ])
    def test_peak_window(self, position, expected):
        assert peak_traffic_window(position) == expected

    @pytest.mark.parametrize("ctr,expected", [
        (25.0, "Strong"),
        (5.0, "Healthy"),
        (2.5, "Average"),
        (0.4, "Weak"),
        (0.0, "No clicks"),
    ])
    def test_ctr_label(self, ctr, expected):
        assert ctr_label(ctr) == expected

    def test_annotations_keep_order(self):
        records = [
            KeywordRecord(rank=1, keyword="acme shoes", ctr=25.0, position=1.1),
            KeywordRecord(rank=2, keyword="cheap shoes", ctr=1.0, position=12.0),
        ]

        annotations = annotate_keywords(records, ["ACME"])

        assert [a.keyword for a in annotations] == ["acme shoes", "cheap shoes"]
        assert [a.intent for a in annotations] == ["Brand", "Commercial"]
        assert annotations[1].peak_window == "Evenings 18:00-22:00"


# ============================================================================
# Analyzer Tests
# ============================================================================

class TestAnalyzer:
    """Test the analyzer over merged datasets."""

    def test_full_dataset(self, envelopes):
        dataset = normalize_all(CollectionInput.from_envelopes(envelopes))

        result = Analyzer(brand_terms=["acme"]).analyze(dataset)

        assert result.trend_direction == TrendDirection.UP
        assert result.deltas.estimated is True
        assert result.deltas.clicks_change == "5.2"
        assert result.quick_win_count == 2
        assert len(result.annotations) == 4
        assert result.annotations[3].intent == "Brand"

    def test_empty_dataset(self):
        result = Analyzer().analyze(merge_sources())

        assert result.trend_direction == TrendDirection.STABLE
        assert result.annotations == []
        assert result.quick_win_count == 0

    def test_deterministic(self, envelopes):
        dataset = normalize_all(CollectionInput.from_envelopes(envelopes))
        analyzer = Analyzer(brand_terms=["acme"])

        assert analyzer.analyze(dataset) == analyzer.analyze(dataset)
