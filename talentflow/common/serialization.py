"""
Serialization Utilities

Helpers shared by the assessment models for converting to and from the
JSON-compatible document shapes kept in the document store.
"""

import math
import datetime
from enum import Enum
from typing import Any, Dict, Optional


def serialize(obj: Any) -> Any:
    """
    Convert a value into something ``json.dumps`` accepts.

    Datetimes become ISO-8601 strings, enums their values, tuples lists, and
    objects exposing ``to_dict`` are converted through it.
    """
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    if isinstance(obj, datetime.datetime):
        return obj.isoformat()

    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, (list, tuple)):
        return [serialize(item) for item in obj]

    if isinstance(obj, dict):
        return {key: serialize(value) for key, value in obj.items()}

    if hasattr(obj, 'to_dict') and callable(getattr(obj, 'to_dict')):
        return obj.to_dict()

    return str(obj)


def parse_datetime(value: Any) -> Optional[datetime.datetime]:
    """
    Parse an ISO-8601 string (or pass through a datetime).

    A trailing ``Z`` is accepted since documents written by browsers use it.
    """
    if value is None or isinstance(value, datetime.datetime):
        return value
    if isinstance(value, str):
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.datetime.fromisoformat(value)
    raise ValueError(f"Cannot parse datetime from {value!r}")


def utcnow() -> datetime.datetime:
    """Timezone-aware current UTC time."""
    return datetime.datetime.now(datetime.timezone.utc)


def drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` without keys whose value is None."""
    return {key: value for key, value in data.items() if value is not None}


def parse_number(value: Any) -> Optional[float]:
    """Parse a finite number from a raw value, or None if it is not one."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
