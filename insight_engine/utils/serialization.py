"""
Plain-data conversion for dataclass records.

Produces JSON-ready dicts (enums as their values, tuples as lists) so that
serialized output is deterministic across runs.
"""

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import Any


def to_plain(value: Any) -> Any:
    """Recursively convert dataclasses, enums and containers to plain data."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(to_plain(k)): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


def to_json(value: Any, indent: int = 2) -> str:
    """Serialize with sorted keys for byte-stable output."""
    return json.dumps(to_plain(value), indent=indent, sort_keys=True, ensure_ascii=False)
