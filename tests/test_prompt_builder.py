"""
Test Suite for the Prompt Builder

Tests that prompts carry the dataset summary, honour section caps, mark
empty sections and embed the required reply shape.
"""

import json

from insight_engine.analyzer import Analyzer, build_prompt
from insight_engine.analyzer.prompt import NO_DATA, SYSTEM_PROMPT
from insight_engine.collector import (
    CollectionInput,
    RawPayload,
    SourceKind,
    merge_sources,
    normalize_all,
    normalize_external,
    normalize_keywords,
)
from insight_engine.output.schemas import INSIGHT_EXAMPLE, REQUIRED_FIELDS

from helpers import gsc_row


def full_dataset(envelopes):
    return normalize_all(CollectionInput.from_envelopes(envelopes), site_url="https://example.com")


class TestPromptContent:
    """Test the rendered prompt text."""

    def test_summary_section(self, envelopes):
        dataset = full_dataset(envelopes)
        bundle = build_prompt(dataset, Analyzer().analyze(dataset))

        assert bundle.system == SYSTEM_PROMPT
        assert "**Property:** https://example.com" in bundle.prompt
        assert "**Total clicks:** 200" in bundle.prompt
        assert "**Total impressions:** 3,150" in bundle.prompt
        assert "**Average CTR:** 6.35%" in bundle.prompt
        assert "**Trend:** up" in bundle.prompt
        assert "(estimated from trend, short history)" in bundle.prompt

    def test_sections_listed(self, envelopes):
        bundle = build_prompt(full_dataset(envelopes))

        assert '1. "running shoes" - 120 clicks' in bundle.prompt
        assert "- MOBILE: 150 clicks" in bundle.prompt
        assert '- "trail running shoes" - position 10.0' in bundle.prompt
        assert "- carbon plate running shoes (+250%)" in bundle.prompt
        assert "1. nike.com" in bundle.prompt

    def test_empty_sections_marked(self):
        bundle = build_prompt(merge_sources())

        # Keywords, devices, quick wins, rising, competitors
        assert bundle.prompt.count(NO_DATA) == 5
        assert "**Property:** Unknown" in bundle.prompt
        assert "**Keyword data source:** none" in bundle.prompt

    def test_reply_shape_embedded(self, envelopes):
        bundle = build_prompt(full_dataset(envelopes))

        assert json.dumps(INSIGHT_EXAMPLE, indent=2) in bundle.prompt
        for name in REQUIRED_FIELDS:
            assert f'"{name}"' in bundle.prompt
        assert set(REQUIRED_FIELDS) == set(bundle.output_schema)


class TestPromptBounds:
    """Test per-section caps."""

    def test_caps_applied(self):
        rows = [gsc_row(f"query {i}", 1, 500, 0.002, 9.0) for i in range(40)]
        keywords = normalize_keywords(
            RawPayload.from_envelope(SourceKind.KEYWORDS, {"succeeded": True, "rows": rows})
        )
        external = normalize_external(
            RawPayload.from_envelope(SourceKind.EXTERNAL_TREND, {
                "succeeded": True,
                "rising_queries": [f"rising {i}" for i in range(20)],
                "competitors": [{"domain": f"site{i}.com", "rank": i + 1} for i in range(20)],
            }),
            None,
        )
        bundle = build_prompt(merge_sources(keywords=keywords, external=external))

        assert '10. "query 9"' in bundle.prompt
        assert '"query 10"' not in bundle.prompt
        assert '- "query 4" - position' in bundle.prompt
        assert '- "query 5" - position' not in bundle.prompt
        assert "- rising 4" in bundle.prompt
        assert "- rising 5" not in bundle.prompt
        assert "10. site9.com" in bundle.prompt
        assert "site10.com" not in bundle.prompt

        raw = bundle.raw_data
        assert len(raw["top_keywords"]) == 10
        assert len(raw["quick_wins"]) == 5
        assert len(raw["rising_queries"]) == 5
        assert len(raw["competitors"]) == 10

    def test_prompt_length_independent_of_row_count(self):
        def prompt_for(count):
            rows = [gsc_row(f"query {i:04d}", 1, 500, 0.002, 9.0) for i in range(count)]
            keywords = normalize_keywords(
                RawPayload.from_envelope(SourceKind.KEYWORDS, {"succeeded": True, "rows": rows})
            )
            return build_prompt(merge_sources(keywords=keywords)).prompt

        small = prompt_for(20)
        large = prompt_for(2000)

        # Only the summary totals differ
        assert abs(len(large) - len(small)) < 20


class TestRawData:
    """Test the plain-data snapshot travelling with the prompt."""

    def test_plain_and_serializable(self, envelopes):
        dataset = full_dataset(envelopes)
        bundle = build_prompt(dataset, Analyzer().analyze(dataset))

        raw = bundle.raw_data
        assert raw["site_url"] == "https://example.com"
        assert raw["trend_direction"] == "up"
        assert raw["stats"]["total_clicks"] == 200
        assert raw["missing_sources"] == []
        json.dumps(raw)

    def test_missing_sources_reported(self):
        bundle = build_prompt(merge_sources())
        assert "trend" in bundle.raw_data["missing_sources"]
