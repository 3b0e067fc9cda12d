"""
Helpers for records in their wire form (capitalized keys, as served by
``/latest-webhook`` and ``/all-webhooks``).
"""

from typing import Any, Mapping


def as_wire_record(record: Any) -> Mapping[str, Any]:
    """Return the wire mapping of a record.

    Accepts plain mappings (decoded JSON) and objects with a ``to_dict()``
    method such as ``api.records.MeasurementRecord``.
    """
    if isinstance(record, Mapping):
        return record
    to_dict = getattr(record, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def is_number(value: Any) -> bool:
    """True for int and float values, excluding bools."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_sequence(value: Any) -> bool:
    """True for JSON arrays (lists, or tuples once frozen)."""
    return isinstance(value, (list, tuple))
