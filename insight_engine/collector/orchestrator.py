"""
Source Collection Orchestrator

Runs the source normalizers concurrently over already-fetched payloads and
joins their results into one MergedDataset.

The join is a fixed-arity barrier: every normalizer task is awaited (or
times out) before the merger runs. A slot whose task fails or times out is
filled with its empty default rather than blocking the run.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .audience import normalize_audience
from .context import normalize_appearance, normalize_sitemaps
from .external import normalize_external
from .merger import MergedDataset, empty_source, merge_sources
from .models import ProcessedSource, RawPayload, SourceKind
from .search import normalize_keywords, normalize_pages
from .trend import normalize_trend

logger = logging.getLogger(__name__)

AUDIENCE_KEYS = ("audience", SourceKind.AUDIENCE_DEVICE.value, SourceKind.AUDIENCE_COUNTRY.value)


@dataclass
class CollectionInput:
    """Raw payloads for one run, one per source kind."""
    keywords: Optional[RawPayload] = None
    pages: Optional[RawPayload] = None
    # Device and country batches, untagged and in any order
    audience: List[RawPayload] = field(default_factory=list)
    trend: Optional[RawPayload] = None
    sitemaps: Optional[RawPayload] = None
    appearance: Optional[RawPayload] = None
    external_trend: Optional[RawPayload] = None
    external_competitor: Optional[RawPayload] = None

    @classmethod
    def from_envelopes(cls, envelopes: Dict[str, Any]) -> "CollectionInput":
        """
        Build input from inbound envelopes keyed by source kind.

        Audience batches may be given as a list under "audience" or under the
        device/country kind names; the names are not trusted, the batches are
        classified by content later.
        """
        def payload(kind: SourceKind) -> Optional[RawPayload]:
            if kind.value not in envelopes:
                return None
            return RawPayload.from_envelope(kind, envelopes[kind.value])

        audience: List[RawPayload] = []
        for key in AUDIENCE_KEYS:
            value = envelopes.get(key)
            if value is None:
                continue
            batches = value if isinstance(value, list) else [value]
            for batch in batches:
                audience.append(RawPayload.from_envelope(SourceKind.AUDIENCE_DEVICE, batch))

        return cls(
            keywords=payload(SourceKind.KEYWORDS),
            pages=payload(SourceKind.PAGES),
            audience=audience[:2],
            trend=payload(SourceKind.TREND_TIMESERIES),
            sitemaps=payload(SourceKind.SITEMAP),
            appearance=payload(SourceKind.APPEARANCE),
            external_trend=payload(SourceKind.EXTERNAL_TREND),
            external_competitor=payload(SourceKind.EXTERNAL_COMPETITOR),
        )

    def normalizer_calls(self) -> Dict[str, tuple]:
        """Map each merged slot to (normalizer, args)."""
        audience = list(self.audience) + [None, None]
        calls: Dict[str, tuple] = {
            "audience": (normalize_audience, (audience[0], audience[1])),
            "external": (normalize_external, (self.external_trend, self.external_competitor)),
        }
        single = {
            "keywords": (normalize_keywords, self.keywords),
            "pages": (normalize_pages, self.pages),
            "trend": (normalize_trend, self.trend),
            "sitemaps": (normalize_sitemaps, self.sitemaps),
            "appearance": (normalize_appearance, self.appearance),
        }
        for slot, (fn, payload) in single.items():
            # Absent payloads keep the merger's empty default
            if payload is not None:
                calls[slot] = (fn, (payload,))
        return calls


class SourceCollectionOrchestrator:
    """
    Fan-out/fan-in over the source normalizers.

    Normalizers are pure functions, so running them in worker threads or
    sequentially gives identical results.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize orchestrator.

        Args:
            timeout: Bounded wait in seconds for each normalizer; None waits
                until all complete
        """
        self.timeout = timeout

    async def collect_all(self, inputs: CollectionInput, site_url: str = "") -> MergedDataset:
        """
        Normalize every payload concurrently and merge the results.

        Args:
            inputs: CollectionInput with the raw payloads
            site_url: Property being reported on

        Returns:
            MergedDataset with every slot populated
        """
        calls = inputs.normalizer_calls()
        slots = list(calls)

        logger.info(f"Normalizing {len(slots)} sources for {site_url or 'site'}")

        results = await asyncio.gather(
            *(self._run_normalizer(slot, fn, args) for slot, (fn, args) in calls.items()),
            return_exceptions=True,
        )

        sources: Dict[str, ProcessedSource] = {}
        for slot, result in zip(slots, results):
            if isinstance(result, asyncio.TimeoutError):
                sources[slot] = empty_source(slot, f"Normalizer timed out after {self.timeout}s")
                continue
            if isinstance(result, BaseException):
                logger.error(f"Normalizer for {slot} failed: {result!r}")
                sources[slot] = empty_source(slot, f"Normalizer failed: {result!r}")
                continue
            sources[slot] = result

        return merge_sources(site_url=site_url, **sources)

    async def _run_normalizer(self, slot: str, fn: Callable, args: tuple) -> ProcessedSource:
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Normalizer for {slot} timed out after {self.timeout}s; using empty default")
            raise


def normalize_all(inputs: CollectionInput, site_url: str = "") -> MergedDataset:
    """Sequential equivalent of SourceCollectionOrchestrator.collect_all."""
    sources = {slot: fn(*args) for slot, (fn, args) in inputs.normalizer_calls().items()}
    return merge_sources(site_url=site_url, **sources)
