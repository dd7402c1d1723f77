"""
Audience Normalizer

Device and country reports arrive as two untagged row batches, in no
guaranteed order. A batch is device data when its first row's dimension,
upper-cased, is one of MOBILE / DESKTOP / TABLET; any other non-empty batch
is treated as country data.
"""

import logging
from typing import Any, List, Optional, Sequence

from .models import (
    DEVICE_LABELS,
    AudienceBatchKind,
    AudienceBreakdown,
    AudienceSource,
    CountryRow,
    DeviceRow,
    RawPayload,
    SourceKind,
    row_key,
    to_float,
    to_int,
)

logger = logging.getLogger(__name__)

TOP_COUNTRY_LIMIT = 15


def classify_audience_batch(rows: Sequence[Any]) -> AudienceBatchKind:
    """
    Classify an untagged audience batch by its first row.

    Args:
        rows: Provider rows

    Returns:
        DEVICE if the first dimension value is a known device label,
        UNKNOWN for an empty batch, COUNTRY otherwise
    """
    if not rows:
        return AudienceBatchKind.UNKNOWN

    first_key = row_key(rows[0]).strip().upper()
    if first_key in DEVICE_LABELS:
        return AudienceBatchKind.DEVICE

    if not first_key:
        logger.warning("Audience batch has no dimension value; treating as country data")
    return AudienceBatchKind.COUNTRY


def _device_rows(rows: Sequence[Any]) -> List[DeviceRow]:
    devices = []
    for row in rows:
        label = row_key(row).strip().upper()
        if label not in DEVICE_LABELS:
            continue
        devices.append(DeviceRow(
            device=label,
            clicks=to_int(row.get("clicks")),
            impressions=to_int(row.get("impressions")),
            ctr=min(round(to_float(row.get("ctr")) * 100, 2), 100.0),
            position=round(to_float(row.get("position")), 1),
        ))
    return devices


def _country_rows(rows: Sequence[Any]) -> List[CountryRow]:
    countries = []
    for row in rows:
        code = row_key(row).strip().lower()
        if not code:
            continue
        countries.append(CountryRow(
            country_code=code,
            clicks=to_int(row.get("clicks")),
            impressions=to_int(row.get("impressions")),
            ctr=min(round(to_float(row.get("ctr")) * 100, 2), 100.0),
            position=round(to_float(row.get("position")), 1),
        ))
        if len(countries) >= TOP_COUNTRY_LIMIT:
            break
    return countries


def normalize_audience(
    first: Optional[RawPayload],
    second: Optional[RawPayload],
) -> AudienceSource:
    """
    Normalize the two audience batches into one breakdown.

    Args:
        first: One audience payload (device or country, untagged)
        second: The other audience payload

    Returns:
        AudienceSource with device and country rows
    """
    devices: List[DeviceRow] = []
    countries: List[CountryRow] = []
    errors: List[str] = []

    for payload in (first, second):
        if payload is None:
            continue
        if not payload.succeeded:
            errors.append(payload.error_message or "Request failed")
            continue

        rows = payload.rows()
        kind = classify_audience_batch(rows)
        if kind == AudienceBatchKind.DEVICE and not devices:
            devices = _device_rows(rows)
        elif kind == AudienceBatchKind.COUNTRY and not countries:
            countries = _country_rows(rows)
        elif kind != AudienceBatchKind.UNKNOWN:
            logger.warning(f"Second {kind.value} batch received; ignoring it")

    has_data = bool(devices or countries)
    error_message = None
    if not has_data:
        error_message = "; ".join(errors) if errors else "No audience rows returned"
        logger.warning(f"Audience source unavailable: {error_message}")

    return AudienceSource(
        source_kind=SourceKind.AUDIENCE_DEVICE,
        has_data=has_data,
        error_message=error_message,
        breakdown=AudienceBreakdown(devices=devices, countries=countries),
        device_has_data=bool(devices),
        country_has_data=bool(countries),
    )
