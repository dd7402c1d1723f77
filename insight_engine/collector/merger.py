"""
Source Merger

Fans in all ProcessedSource records into one MergedDataset. Any source may
be missing or flagged has_data=False; every slot is still populated with a
zeroed default so the analyzer and prompt builder never find a key absent.

Keyword fallback chain:
1. Query report top rows and stats
2. Page report top rows and stats (wholesale substitution)
3. Stats recomputed from the chosen list if they are still empty
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from .models import (
    AppearanceSource,
    AudienceSource,
    ExternalSignalsSource,
    KeywordRecord,
    ProcessedSource,
    QuickWinCandidate,
    SearchPerformanceSource,
    SearchStats,
    SitemapSource,
    SourceKind,
    TrendSource,
)
from .search import compute_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MergedDataset:
    """All normalized sources for one run, plus the effective keyword view."""
    site_url: str = ""

    # One slot per source, always present
    keywords: SearchPerformanceSource = field(
        default_factory=lambda: SearchPerformanceSource(source_kind=SourceKind.KEYWORDS)
    )
    pages: SearchPerformanceSource = field(
        default_factory=lambda: SearchPerformanceSource(source_kind=SourceKind.PAGES)
    )
    audience: AudienceSource = field(
        default_factory=lambda: AudienceSource(source_kind=SourceKind.AUDIENCE_DEVICE)
    )
    trend: TrendSource = field(
        default_factory=lambda: TrendSource(source_kind=SourceKind.TREND_TIMESERIES)
    )
    sitemaps: SitemapSource = field(
        default_factory=lambda: SitemapSource(source_kind=SourceKind.SITEMAP)
    )
    appearance: AppearanceSource = field(
        default_factory=lambda: AppearanceSource(source_kind=SourceKind.APPEARANCE)
    )
    external: ExternalSignalsSource = field(
        default_factory=lambda: ExternalSignalsSource(source_kind=SourceKind.EXTERNAL_TREND)
    )

    # Effective keyword view after fallback
    keyword_stats: SearchStats = field(default_factory=SearchStats)
    top_keywords: List[KeywordRecord] = field(default_factory=list)
    quick_wins: List[QuickWinCandidate] = field(default_factory=list)
    keyword_source: str = "none"  # "keywords" | "pages" | "none"

    SLOT_NAMES = ("keywords", "pages", "audience", "trend", "sitemaps", "appearance", "external")

    def slots(self) -> Dict[str, Any]:
        """Return every source slot keyed by its stable name."""
        return {name: getattr(self, name) for name in self.SLOT_NAMES}

    def missing_sources(self) -> List[str]:
        """Names of slots without usable data."""
        return [name for name, source in self.slots().items() if not source.has_data]


NOT_SUPPLIED = "Source not supplied"


def empty_source(slot: str, error_message: str = NOT_SUPPLIED) -> ProcessedSource:
    """Zeroed default for a slot, carrying the reason it is empty."""
    return replace(getattr(MergedDataset(), slot), error_message=error_message)


def merge_sources(
    keywords: Optional[SearchPerformanceSource] = None,
    pages: Optional[SearchPerformanceSource] = None,
    audience: Optional[AudienceSource] = None,
    trend: Optional[TrendSource] = None,
    sitemaps: Optional[SitemapSource] = None,
    appearance: Optional[AppearanceSource] = None,
    external: Optional[ExternalSignalsSource] = None,
    site_url: str = "",
) -> MergedDataset:
    """
    Merge normalized sources into a MergedDataset.

    Args:
        keywords..external: Normalized sources; None means the slot never
            arrived and is replaced by its empty default with a
            "Source not supplied" error message
        site_url: Property the data belongs to

    Returns:
        MergedDataset with every slot populated
    """
    keywords = keywords or empty_source("keywords")
    pages = pages or empty_source("pages")

    if keywords.top_keywords:
        stats = keywords.stats
        top_keywords = keywords.top_keywords
        quick_wins = keywords.quick_wins
        keyword_source = "keywords"
    elif pages.top_keywords:
        logger.info("Keyword source empty; using page data as fallback")
        stats = pages.stats
        top_keywords = pages.top_keywords
        quick_wins = pages.quick_wins
        keyword_source = "pages"
    else:
        logger.warning("No keyword or page data available")
        stats = SearchStats()
        top_keywords = []
        quick_wins = []
        keyword_source = "none"

    if stats.is_empty and top_keywords:
        logger.info("Keyword stats missing; recomputing from keyword list")
        stats = compute_stats(top_keywords)

    dataset = MergedDataset(
        site_url=site_url,
        keywords=keywords,
        pages=pages,
        audience=audience or empty_source("audience"),
        trend=trend or empty_source("trend"),
        sitemaps=sitemaps or empty_source("sitemaps"),
        appearance=appearance or empty_source("appearance"),
        external=external or empty_source("external"),
        keyword_stats=stats,
        top_keywords=list(top_keywords),
        quick_wins=list(quick_wins),
        keyword_source=keyword_source,
    )

    missing = dataset.missing_sources()
    if missing:
        logger.info(f"Merged dataset missing sources: {', '.join(missing)}")
    return dataset
