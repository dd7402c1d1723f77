"""
Keyword Annotations

Heuristic, explainable labels for report narrative:
- Intent: Brand / Commercial / Product / Informational (substring match)
- Peak traffic window: guessed from the position bucket
- CTR label: qualitative bucket of the click-through rate

These are not statistically validated signals.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from insight_engine.collector.models import KeywordRecord

COMMERCIAL_TERMS = (
    "buy", "price", "pricing", "cost", "cheap", "deal", "discount",
    "best", "review", "reviews", "vs", "compare", "comparison", "coupon",
)

PRODUCT_TERMS = (
    "product", "shop", "store", "model", "size", "specs", "order",
    "sale", "online",
)

# (max position, window)
PEAK_WINDOWS = (
    (3.0, "Weekdays 9:00-12:00"),
    (10.0, "Weekdays 12:00-17:00"),
    (20.0, "Evenings 18:00-22:00"),
)
DEFAULT_PEAK_WINDOW = "Weekends"

# (min CTR percent, label)
CTR_LABELS = (
    (10.0, "Strong"),
    (5.0, "Healthy"),
    (2.0, "Average"),
)


@dataclass(frozen=True)
class KeywordAnnotation:
    keyword: str
    intent: str
    peak_window: str
    ctr_label: str


def _contains_term(text: str, terms: Iterable[str]) -> bool:
    words = text.split()
    for term in terms:
        # Short terms ("vs") match whole words only
        if len(term) <= 3:
            if term in words:
                return True
        elif term in text:
            return True
    return False


def classify_intent(keyword: str, brand_terms: Sequence[str] = ()) -> str:
    """Classify query intent by substring match; brand wins over others."""
    text = keyword.lower()
    if any(term and term in text for term in brand_terms):
        return "Brand"
    if _contains_term(text, COMMERCIAL_TERMS):
        return "Commercial"
    if _contains_term(text, PRODUCT_TERMS):
        return "Product"
    return "Informational"


def peak_traffic_window(position: float) -> str:
    for max_position, window in PEAK_WINDOWS:
        if position <= max_position:
            return window
    return DEFAULT_PEAK_WINDOW


def ctr_label(ctr: float) -> str:
    """Label a CTR given as a percentage."""
    for threshold, label in CTR_LABELS:
        if ctr >= threshold:
            return label
    return "Weak" if ctr > 0 else "No clicks"


def annotate_keywords(
    records: Iterable[KeywordRecord],
    brand_terms: Sequence[str] = (),
) -> List[KeywordAnnotation]:
    """Annotate each record, preserving order."""
    brand_terms = [t.lower() for t in brand_terms if t]
    return [
        KeywordAnnotation(
            keyword=record.keyword,
            intent=classify_intent(record.keyword, brand_terms),
            peak_window=peak_traffic_window(record.position),
            ctr_label=ctr_label(record.ctr),
        )
        for record in records
    ]
