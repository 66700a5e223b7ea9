import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Mapping, Tuple

from .schemas import PropertyValue, Record

# ConvertTo-Json de Windows PowerShell serializa DateTime como /Date(ms)/
_PS_DATE = re.compile(r"^/Date\((-?\d+)(?:[+-]\d{4})?\)/$")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Plumbing de CIM (CimClass, CimInstanceProperties, CimSystemProperties)
IGNORED_PROPERTY_PREFIXES = ("Cim",)

_SCALARS = (str, int, float, bool)


def _iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def normalize_value(value: Any) -> PropertyValue:
    """Reduce un valor arbitrario a str, int, float, bool o None."""
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, datetime):
        return _iso(value)
    if isinstance(value, str):
        match = _PS_DATE.match(value)
        if match:
            try:
                return _iso(_EPOCH + timedelta(milliseconds=int(match.group(1))))
            except OverflowError:
                return value
        return value
    if isinstance(value, (list, tuple)) and all(
        item is None or isinstance(item, _SCALARS) for item in value
    ):
        return ", ".join(str(normalize_value(item)) for item in value if item is not None)
    try:
        return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return str(value)


def reflect_properties(obj: Any, prefix: str = "") -> Record:
    """Aplana las propiedades de primer nivel de un objeto en un dict.

    Un objeto sin propiedades (o que no es un mapping) produce un dict vacio.
    """
    if not isinstance(obj, Mapping):
        return {}

    record: Dict[str, PropertyValue] = {}
    for name, value in obj.items():
        key = str(name)
        if key.startswith(IGNORED_PROPERTY_PREFIXES):
            continue
        record[f"{prefix}{key}"] = normalize_value(value)
    return record


def merge_prefixed(*sources: Tuple[str, Any]) -> Record:
    record: Dict[str, PropertyValue] = {}
    for prefix, obj in sources:
        record.update(reflect_properties(obj, prefix))
    return record
