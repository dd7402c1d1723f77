"""
Collector Data Models

Defines the typed records produced by the source normalizers:
- RawPayload: uniform envelope around one provider response
- ProcessedSource and its per-kind subclasses
- Row-level records (keywords, devices, countries, trend points, ...)

Every ProcessedSource is structurally complete even when has_data is False:
collections default to empty and numbers to zero, so consumers never need
to check deeper than the top-level flag.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


# =============================================================================
# ENUMS
# =============================================================================


class SourceKind(str, Enum):
    """Kind of upstream provider payload."""
    KEYWORDS = "keywords"
    PAGES = "pages"
    AUDIENCE_DEVICE = "audience-device"
    AUDIENCE_COUNTRY = "audience-country"
    TREND_TIMESERIES = "trend-timeseries"
    SITEMAP = "sitemap"
    APPEARANCE = "appearance"
    EXTERNAL_TREND = "external-trend"
    EXTERNAL_COMPETITOR = "external-competitor"


class TrendDirection(str, Enum):
    """Coarse click trend label."""
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class AudienceBatchKind(str, Enum):
    """Result of classifying an untagged audience row batch."""
    DEVICE = "device"
    COUNTRY = "country"
    UNKNOWN = "unknown"  # Empty batch, nothing to classify


DEVICE_LABELS = frozenset({"MOBILE", "DESKTOP", "TABLET"})


# =============================================================================
# COERCION HELPERS
# =============================================================================


def to_int(value: Any) -> int:
    """Coerce to a non-negative int, 0 on anything unusable."""
    try:
        result = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(result, 0)


def to_float(value: Any) -> float:
    """Coerce to a non-negative finite float, 0.0 on anything unusable."""
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if result != result or result in (float("inf"), float("-inf")):
        return 0.0
    return max(result, 0.0)


def row_key(row: Any, index: int = 0) -> str:
    """
    Return a dimension value from a provider row.

    Search Console rows carry their dimensions in a "keys" list; rows that
    were flattened upstream may carry a single "key" field instead.
    """
    if not isinstance(row, dict):
        return ""
    keys = row.get("keys")
    if isinstance(keys, list) and len(keys) > index:
        return str(keys[index]) if keys[index] is not None else ""
    if index == 0 and row.get("key") is not None:
        return str(row.get("key"))
    return ""


# =============================================================================
# RAW PAYLOAD
# =============================================================================


@dataclass(frozen=True)
class RawPayload:
    """One provider response as handed over by the collection layer."""
    source_kind: SourceKind
    body: Dict[str, Any] = field(default_factory=dict)
    succeeded: bool = True
    error_message: Optional[str] = None

    @classmethod
    def from_envelope(cls, source_kind: SourceKind, envelope: Any) -> "RawPayload":
        """
        Build a payload from the inbound envelope.

        The envelope is ``{"succeeded": bool, "errorMessage": str?, ...}``
        with the kind-specific rows/fields alongside. Never raises: anything
        that is not a dict becomes a failed payload.
        """
        if not isinstance(envelope, dict):
            return cls(
                source_kind=source_kind,
                body={},
                succeeded=False,
                error_message=f"Malformed envelope: expected object, got {type(envelope).__name__}",
            )

        body = {
            k: v for k, v in envelope.items()
            if k not in ("succeeded", "errorMessage", "error_message")
        }
        error = envelope.get("errorMessage") or envelope.get("error_message")
        # Provider error bodies ({"error": {...}}) count as failures too
        if not error and isinstance(body.get("error"), dict):
            error = body["error"].get("message") or "Provider returned an error"
        elif not error and isinstance(body.get("error"), str):
            error = body["error"]

        succeeded = bool(envelope.get("succeeded", True)) and not error
        return cls(
            source_kind=source_kind,
            body=body,
            succeeded=succeeded,
            error_message=str(error) if error else None,
        )

    def rows(self) -> List[Any]:
        """Return the "rows" list of the body, or an empty list."""
        rows = self.body.get("rows")
        return rows if isinstance(rows, list) else []


# =============================================================================
# ROW RECORDS
# =============================================================================


@dataclass(frozen=True)
class SearchStats:
    """Aggregate totals over a query or page row set."""
    total_rows: int = 0
    total_clicks: int = 0
    total_impressions: int = 0
    avg_ctr: float = 0.0  # Percent, 2dp
    avg_position: float = 0.0  # 1dp

    @property
    def is_empty(self) -> bool:
        return self.total_rows == 0


@dataclass(frozen=True)
class KeywordRecord:
    """A ranked query (or page) row."""
    rank: int
    keyword: str
    clicks: int = 0
    impressions: int = 0
    ctr: float = 0.0  # Percent in [0, 100]
    position: float = 0.0


@dataclass(frozen=True)
class QuickWinCandidate:
    """A keyword row that satisfies the quick-win predicate."""
    rank: int
    keyword: str
    clicks: int
    impressions: int
    ctr: float
    position: float
    opportunity_note: str = ""


@dataclass(frozen=True)
class DeviceRow:
    device: str  # MOBILE / DESKTOP / TABLET
    clicks: int = 0
    impressions: int = 0
    ctr: float = 0.0
    position: float = 0.0


@dataclass(frozen=True)
class CountryRow:
    country_code: str
    clicks: int = 0
    impressions: int = 0
    ctr: float = 0.0
    position: float = 0.0


@dataclass(frozen=True)
class AudienceBreakdown:
    devices: List[DeviceRow] = field(default_factory=list)
    countries: List[CountryRow] = field(default_factory=list)  # Top 15


@dataclass(frozen=True)
class TrendPoint:
    date: str
    clicks: int = 0
    impressions: int = 0
    ctr: float = 0.0  # Percent
    position: float = 0.0


@dataclass(frozen=True)
class TrendSeries:
    points: List[TrendPoint] = field(default_factory=list)  # Ordered by date
    direction: TrendDirection = TrendDirection.STABLE


@dataclass(frozen=True)
class SitemapEntry:
    path: str
    last_submitted: str = ""
    is_pending: bool = False
    errors: int = 0
    warnings: int = 0
    submitted: int = 0
    indexed: int = 0


@dataclass(frozen=True)
class AppearanceRecord:
    appearance: str
    clicks: int = 0
    impressions: int = 0
    ctr: float = 0.0
    position: float = 0.0


@dataclass(frozen=True)
class InterestPoint:
    date: str
    value: int = 0  # 0-100 relative interest


@dataclass(frozen=True)
class RisingQuery:
    query: str
    growth: str = ""  # e.g. "+250%" or "Breakout"


@dataclass(frozen=True)
class CompetitorRank:
    domain: str
    rank: int = 0


# =============================================================================
# PROCESSED SOURCES
# =============================================================================


@dataclass(frozen=True)
class ProcessedSource:
    """Normalized output of one source normalizer."""
    source_kind: SourceKind
    has_data: bool = False
    error_message: Optional[str] = None


@dataclass(frozen=True)
class SearchPerformanceSource(ProcessedSource):
    """Keywords or pages: aggregate stats, top rows, quick wins."""
    stats: SearchStats = field(default_factory=SearchStats)
    top_keywords: List[KeywordRecord] = field(default_factory=list)
    quick_wins: List[QuickWinCandidate] = field(default_factory=list)


@dataclass(frozen=True)
class AudienceSource(ProcessedSource):
    breakdown: AudienceBreakdown = field(default_factory=AudienceBreakdown)
    device_has_data: bool = False
    country_has_data: bool = False


@dataclass(frozen=True)
class TrendSource(ProcessedSource):
    series: TrendSeries = field(default_factory=TrendSeries)


@dataclass(frozen=True)
class SitemapSource(ProcessedSource):
    sitemaps: List[SitemapEntry] = field(default_factory=list)
    total_submitted: int = 0
    total_indexed: int = 0


@dataclass(frozen=True)
class AppearanceSource(ProcessedSource):
    appearances: List[AppearanceRecord] = field(default_factory=list)


@dataclass(frozen=True)
class ExternalSignalsSource(ProcessedSource):
    """Trend interest, rising queries and competitor rankings."""
    interest: List[InterestPoint] = field(default_factory=list)
    rising_queries: List[RisingQuery] = field(default_factory=list)
    competitors: List[CompetitorRank] = field(default_factory=list)
    has_interest: bool = False
    has_rising: bool = False
    has_competitors: bool = False
