"""
Report Context Normalizers

Sitemaps and search appearance are carried into the report as context only;
no analytics are derived from them beyond simple totals.
"""

import logging
from typing import Any, List

from .models import (
    AppearanceRecord,
    AppearanceSource,
    RawPayload,
    SitemapEntry,
    SitemapSource,
    SourceKind,
    row_key,
    to_float,
    to_int,
)

logger = logging.getLogger(__name__)


def _sitemap_entry(item: Any) -> SitemapEntry:
    contents = item.get("contents")
    submitted = indexed = 0
    if isinstance(contents, list):
        for content in contents:
            if isinstance(content, dict):
                submitted += to_int(content.get("submitted"))
                indexed += to_int(content.get("indexed"))

    return SitemapEntry(
        path=str(item.get("path", "")),
        last_submitted=str(item.get("lastSubmitted", "") or ""),
        is_pending=bool(item.get("isPending", False)),
        errors=to_int(item.get("errors")),
        warnings=to_int(item.get("warnings")),
        submitted=submitted,
        indexed=indexed,
    )


def normalize_sitemaps(payload: RawPayload) -> SitemapSource:
    """Normalize the sitemap listing."""
    if not payload.succeeded:
        logger.warning(f"Sitemap source unavailable: {payload.error_message}")
        return SitemapSource(
            source_kind=SourceKind.SITEMAP,
            error_message=payload.error_message or "Request failed",
        )

    items = payload.body.get("sitemap") or payload.body.get("sitemaps") or []
    if not isinstance(items, list):
        items = []

    sitemaps: List[SitemapEntry] = [
        _sitemap_entry(item) for item in items
        if isinstance(item, dict) and item.get("path")
    ]
    if not sitemaps:
        return SitemapSource(
            source_kind=SourceKind.SITEMAP,
            error_message="No sitemaps submitted",
        )

    return SitemapSource(
        source_kind=SourceKind.SITEMAP,
        has_data=True,
        sitemaps=sitemaps,
        total_submitted=sum(s.submitted for s in sitemaps),
        total_indexed=sum(s.indexed for s in sitemaps),
    )


def normalize_appearance(payload: RawPayload) -> AppearanceSource:
    """Normalize the search-appearance report."""
    if not payload.succeeded:
        logger.warning(f"Appearance source unavailable: {payload.error_message}")
        return AppearanceSource(
            source_kind=SourceKind.APPEARANCE,
            error_message=payload.error_message or "Request failed",
        )

    appearances = []
    for row in payload.rows():
        label = row_key(row).strip()
        if not label:
            continue
        appearances.append(AppearanceRecord(
            appearance=label,
            clicks=to_int(row.get("clicks")),
            impressions=to_int(row.get("impressions")),
            ctr=min(round(to_float(row.get("ctr")) * 100, 2), 100.0),
            position=round(to_float(row.get("position")), 1),
        ))

    if not appearances:
        return AppearanceSource(
            source_kind=SourceKind.APPEARANCE,
            error_message="No rows returned",
        )

    return AppearanceSource(
        source_kind=SourceKind.APPEARANCE,
        has_data=True,
        appearances=appearances,
    )
