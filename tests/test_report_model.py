"""
Test Suite for Report Model Assembly

Tests confidence tracking, keyword row joins and deterministic
serialization of the final report model.
"""

import json

import pytest

from insight_engine.analyzer import Analyzer
from insight_engine.collector import CollectionInput, merge_sources, normalize_all
from insight_engine.output import InsightReconciler, ModelReply, UNAVAILABLE_SUMMARY
from insight_engine.reporter import ReportConfidence, assemble_report


@pytest.fixture
def dataset(envelopes):
    return normalize_all(CollectionInput.from_envelopes(envelopes), site_url="https://example.com")


@pytest.fixture
def insight(insight_json):
    return InsightReconciler().reconcile(ModelReply(succeeded=True, message_text=insight_json))


class TestReportConfidence:
    """Test section tracking and scoring."""

    def test_all_present(self):
        confidence = ReportConfidence()
        confidence.track("keywords", True)
        confidence.track("trend", True)

        assert confidence.confidence_score == 100.0
        assert confidence.confidence_level == "HIGH"
        assert confidence.degraded_sections == []
        assert confidence.warnings == []

    def test_degraded_section_recorded(self):
        confidence = ReportConfidence()
        confidence.track("keywords", True)
        confidence.track("trend", False, "No rows returned")
        confidence.track_value("top_keywords", [])

        assert confidence.degraded_sections == ["trend", "top_keywords"]
        assert "MISSING: trend (No rows returned)" in confidence.warnings
        assert confidence.confidence_score == pytest.approx(33.3)
        assert confidence.confidence_level == "LOW"

    @pytest.mark.parametrize("value,present", [
        (None, False),
        ("  ", False),
        ([], False),
        ({}, False),
        (0, True),
        ("text", True),
        (["x"], True),
    ])
    def test_track_value(self, value, present):
        confidence = ReportConfidence()
        confidence.track_value("section", value)
        assert (confidence.degraded_sections == []) is present

    def test_nothing_tracked(self):
        confidence = ReportConfidence()

        assert confidence.confidence_score == 0.0
        assert confidence.confidence_level == "VERY LOW"


class TestAssembleReport:
    """Test assembly of the report model."""

    def test_complete_report(self, dataset, insight):
        analysis = Analyzer(brand_terms=["acme"]).analyze(dataset)

        report = assemble_report(dataset, insight, analysis)

        assert report.site_url == "https://example.com"
        assert report.period_label == "2025-01-01 to 2025-01-14"
        assert report.degraded_sections == []
        assert report.confidence_score == 100.0
        assert report.confidence_level == "HIGH"
        assert report.insight.parse_method == "json"

    def test_keyword_rows_joined_with_annotations(self, dataset, insight):
        analysis = Analyzer(brand_terms=["acme"]).analyze(dataset)

        report = assemble_report(dataset, insight, analysis)

        rows = {row.keyword: row for row in report.keyword_rows}
        assert [row.rank for row in report.keyword_rows] == [1, 2, 3, 4]
        assert rows["acme shoes"].intent == "Brand"
        assert rows["acme shoes"].ctr_label == "Strong"
        assert rows["best running shoes 2024"].intent == "Commercial"
        assert rows["running shoes"].peak_window == "Weekdays 12:00-17:00"

    def test_defaults_when_insight_and_analysis_missing(self, dataset):
        report = assemble_report(dataset)

        assert report.insight.executive_summary == UNAVAILABLE_SUMMARY
        assert report.degraded_sections == ["ai_insight"]
        assert report.analysis.trend_direction == dataset.trend.series.direction
        # Rows still listed, with neutral labels
        assert len(report.keyword_rows) == 4
        assert report.keyword_rows[0].intent == "Informational"

    def test_empty_dataset(self):
        report = assemble_report(merge_sources())

        assert report.keyword_rows == []
        assert report.period_label == ""
        assert set(report.degraded_sections) == {
            "keywords", "pages", "audience", "trend", "sitemaps",
            "appearance", "external", "top_keywords", "ai_insight",
        }
        assert report.confidence_score == 0.0
        assert report.confidence_level == "VERY LOW"

    def test_empty_slot_reason_serialized(self):
        report = assemble_report(merge_sources())

        data = json.loads(report.to_json())

        assert data["dataset"]["trend"]["error_message"] == "Source not supplied"

    def test_text_fallback_marks_insight_degraded(self, dataset):
        insight = InsightReconciler().reconcile(ModelReply(succeeded=True, message_text="Prose only."))

        report = assemble_report(dataset, insight)

        assert report.degraded_sections == ["ai_insight"]
        assert report.insight.executive_summary == "Prose only."


class TestSerialization:
    """Test deterministic JSON output."""

    def test_to_json_idempotent(self, dataset, insight):
        report = assemble_report(dataset, insight, Analyzer().analyze(dataset))

        assert report.to_json() == report.to_json()

    def test_same_input_same_bytes(self, envelopes, insight):
        def build():
            dataset = normalize_all(CollectionInput.from_envelopes(envelopes), site_url="s")
            return assemble_report(dataset, insight, Analyzer().analyze(dataset)).to_json()

        assert build() == build()

    def test_plain_json_values(self, dataset, insight):
        report = assemble_report(dataset, insight, Analyzer().analyze(dataset))

        data = json.loads(report.to_json())

        assert data["analysis"]["trend_direction"] == "up"
        assert data["dataset"]["keywords"]["source_kind"] == "keywords"
        assert data["dataset"]["keyword_stats"]["total_clicks"] == 200
        assert data["insight"]["recommendations"][0]["priority"] == 1
        assert data == report.to_dict()
