"""
Measurement record model for WebPlot.

A measurement record is one fitted EIS spectrum pushed by the external
fitting process. Records are normalized from arbitrary webhook payloads
with per-field defaults and are immutable once built.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

DEFAULT_CIRCUIT_TYPE = "Unknown"

# Wire key (as served by the query endpoints) -> record attribute
WIRE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("ID", "id"),
    ("Time", "time"),
    ("ChiSquare", "chi_square"),
    ("RealImpedance", "real_impedance"),
    ("ImaginaryImpedance", "imaginary_impedance"),
    ("Frequencies", "frequencies"),
    ("Parameters", "parameters"),
    ("ElementNames", "element_names"),
    ("ElementImpedances", "element_impedances"),
    ("CircuitType", "circuit_type"),
)

ARRAY_FIELDS: Tuple[str, ...] = (
    "real_impedance",
    "imaginary_impedance",
    "frequencies",
    "parameters",
    "element_names",
    "element_impedances",
)

# Inbound payload keys: the fitter sends snake_case, camelCase is accepted too
_PAYLOAD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id",),
    "time": ("time",),
    "chi_square": ("chi_square", "chiSquare"),
    "real_impedance": ("real_impedance", "realImpedance"),
    "imaginary_impedance": ("imaginary_impedance", "imaginaryImpedance"),
    "frequencies": ("frequencies",),
    "parameters": ("parameters",),
    "element_names": ("element_names", "elementNames"),
    "element_impedances": ("element_impedances", "elementImpedances"),
    "circuit_type": ("circuit_type", "circuitType"),
}


def _freeze(value: Any) -> Any:
    """Turn a top-level list into a tuple; other values pass through."""
    if isinstance(value, list):
        return tuple(value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def fallback_id(moment: datetime) -> str:
    """Generated record id: epoch milliseconds as a string."""
    return str(int(moment.timestamp() * 1000))


@dataclass(frozen=True)
class MeasurementRecord:
    """One fitted EIS spectrum."""

    id: Any
    time: Any
    chi_square: Any = 0
    real_impedance: Any = field(default_factory=tuple)
    imaginary_impedance: Any = field(default_factory=tuple)
    frequencies: Any = field(default_factory=tuple)
    parameters: Any = field(default_factory=tuple)
    element_names: Any = field(default_factory=tuple)
    element_impedances: Any = field(default_factory=tuple)
    circuit_type: Any = DEFAULT_CIRCUIT_TYPE

    @property
    def impedance_points(self) -> int:
        """Number of real-impedance samples; 0 when the value has no length."""
        try:
            return len(self.real_impedance)
        except TypeError:
            return 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the capitalized wire keys used by the query endpoints."""
        return {wire: _thaw(getattr(self, attr)) for wire, attr in WIRE_FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeasurementRecord":
        """Rebuild a record from its wire form."""
        values = {attr: _freeze(data.get(wire)) for wire, attr in WIRE_FIELDS}
        for attr in ARRAY_FIELDS:
            if values[attr] is None:
                values[attr] = ()
        if values["circuit_type"] is None:
            values["circuit_type"] = DEFAULT_CIRCUIT_TYPE
        return cls(**values)


def _pick(payload: Dict[str, Any], attr: str) -> Any:
    """First truthy value among the accepted payload keys for ``attr``."""
    for key in _PAYLOAD_ALIASES[attr]:
        value = payload.get(key)
        if value:
            return value
    return None


def normalize_payload(
    payload: Any,
    received_at: Optional[datetime] = None,
) -> MeasurementRecord:
    """Build a measurement record from an inbound webhook payload.

    Every field falls back to its default independently; nothing is ever
    rejected. Values of the wrong type are kept as sent.

    Args:
        payload: Decoded JSON body. Anything other than a dict counts as empty.
        received_at: Receipt time, defaults to now (UTC).

    Returns:
        The normalized, immutable record.
    """
    if not isinstance(payload, dict):
        payload = {}
    received_at = received_at or datetime.now(timezone.utc)

    values: Dict[str, Any] = {
        "id": _pick(payload, "id") or fallback_id(received_at),
        "time": _pick(payload, "time") or format_timestamp(received_at),
        "chi_square": _pick(payload, "chi_square") or 0,
        "circuit_type": _pick(payload, "circuit_type") or DEFAULT_CIRCUIT_TYPE,
    }
    for attr in ARRAY_FIELDS:
        values[attr] = _freeze(_pick(payload, attr) or [])

    return MeasurementRecord(**values)
