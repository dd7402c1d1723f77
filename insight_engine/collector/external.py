"""
External Signals Normalizer

Normalizes the trends provider (12-month interest series, rising related
queries) and the competitor ranking provider. One call can supply any of
the three sub-signals, so each is flagged independently.

Accepted shapes:
- interest:     {"interest_over_time": {"timeline_data": [{"date", "values": [{"extracted_value"}]}]}}
                or {"interest": [{"date", "value"}]}
- rising:       {"related_queries": {"rising": [{"query", "value"}]}}
                or {"rising_queries": [...]}
- competitors:  {"competitors": [{"domain", "rank"}]} or {"items": [...]}
"""

import logging
from typing import Any, Dict, List, Optional

from .models import (
    CompetitorRank,
    ExternalSignalsSource,
    InterestPoint,
    RawPayload,
    RisingQuery,
    SourceKind,
    to_int,
)

logger = logging.getLogger(__name__)

MAX_RISING_QUERIES = 25
MAX_COMPETITORS = 20


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _extract_interest(body: Dict[str, Any]) -> List[InterestPoint]:
    points = []

    timeline = body.get("interest_over_time")
    if isinstance(timeline, dict):
        for item in _as_list(timeline.get("timeline_data")):
            if not isinstance(item, dict) or not item.get("date"):
                continue
            values = _as_list(item.get("values"))
            first = values[0] if values and isinstance(values[0], dict) else {}
            value = first.get("extracted_value", first.get("value"))
            points.append(InterestPoint(date=str(item["date"]), value=to_int(value)))

    if not points:
        for item in _as_list(body.get("interest")):
            if isinstance(item, dict) and item.get("date"):
                points.append(InterestPoint(date=str(item["date"]), value=to_int(item.get("value"))))

    return points


def _extract_rising(body: Dict[str, Any]) -> List[RisingQuery]:
    related = body.get("related_queries")
    items = _as_list(related.get("rising")) if isinstance(related, dict) else []
    if not items:
        items = _as_list(body.get("rising_queries"))

    rising = []
    for item in items:
        if isinstance(item, str) and item.strip():
            rising.append(RisingQuery(query=item.strip()))
        elif isinstance(item, dict) and str(item.get("query", "")).strip():
            rising.append(RisingQuery(
                query=str(item["query"]).strip(),
                growth=str(item.get("value", "") or ""),
            ))
        if len(rising) >= MAX_RISING_QUERIES:
            break
    return rising


def _extract_competitors(body: Dict[str, Any]) -> List[CompetitorRank]:
    items = _as_list(body.get("competitors")) or _as_list(body.get("items"))

    competitors = []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            continue
        domain = str(item.get("domain", "") or "").strip().lower()
        if not domain:
            continue
        rank = to_int(item.get("rank")) or index
        competitors.append(CompetitorRank(domain=domain, rank=rank))

    # Stable sort keeps provider order for ties
    competitors.sort(key=lambda c: c.rank)
    return competitors[:MAX_COMPETITORS]


def normalize_external(
    trend_payload: Optional[RawPayload],
    competitor_payload: Optional[RawPayload],
) -> ExternalSignalsSource:
    """
    Normalize trend and competitor provider payloads.

    Args:
        trend_payload: Trends provider response (may be None)
        competitor_payload: Competitor ranking response (may be None)

    Returns:
        ExternalSignalsSource with per-signal presence flags
    """
    interest: List[InterestPoint] = []
    rising: List[RisingQuery] = []
    competitors: List[CompetitorRank] = []
    errors: List[str] = []

    for payload in (trend_payload, competitor_payload):
        if payload is None:
            continue
        if not payload.succeeded:
            errors.append(f"{payload.source_kind.value}: {payload.error_message or 'Request failed'}")
            continue
        interest = interest or _extract_interest(payload.body)
        rising = rising or _extract_rising(payload.body)
        competitors = competitors or _extract_competitors(payload.body)

    has_data = bool(interest or rising or competitors)
    error_message = None
    if not has_data:
        error_message = "; ".join(errors) if errors else "No external signals returned"
        logger.warning(f"External signals unavailable: {error_message}")
    elif errors:
        # Partial data; keep the failure visible
        error_message = "; ".join(errors)

    return ExternalSignalsSource(
        source_kind=SourceKind.EXTERNAL_TREND,
        has_data=has_data,
        error_message=error_message,
        interest=interest,
        rising_queries=rising,
        competitors=competitors,
        has_interest=bool(interest),
        has_rising=bool(rising),
        has_competitors=bool(competitors),
    )
