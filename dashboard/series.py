"""
Plot-ready series for the EIS dashboard.

Builds the data consumed by the dashboard's plots, as plain Python
structures (Plotly-style trace dicts where a trace is the natural shape):

- Nyquist: one 3D scatter trace per spectrum (Z', -Z'', spectrum count)
- Waterfall: a single point cloud (log10 f, spectrum index, -Z'')
- Element impedances: |Z| and phase vs frequency for each circuit element
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .parameters import element_color, element_display_name
from .wire import as_wire_record, is_sequence

# Log10 bounds of the default sweep: 100 kHz down to 10 mHz
LOG_FREQUENCY_START = 5.0
LOG_FREQUENCY_END = -2.0


def log_frequency_grid(n_points: int = 50) -> np.ndarray:
    """Log-spaced frequencies from 100 kHz down to 10 mHz."""
    if n_points <= 0:
        return np.empty(0, dtype=np.float64)
    if n_points == 1:
        return np.array([10.0 ** LOG_FREQUENCY_START])
    return np.logspace(LOG_FREQUENCY_START, LOG_FREQUENCY_END, n_points)


def _float_array(values: Any) -> np.ndarray:
    """1-D float array from a JSON array; empty when unusable. Nulls become NaN."""
    if not is_sequence(values):
        return np.empty(0, dtype=np.float64)
    try:
        array = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError):
        return np.empty(0, dtype=np.float64)
    if array.ndim != 1:
        return np.empty(0, dtype=np.float64)
    return array


def spectrum_color(index: int, total: int) -> str:
    """Evenly spaced hue per spectrum."""
    hue = (index * 360) / max(total, 1)
    return f"hsl({hue:.1f}, 70%, 50%)"


# ============= Nyquist =============


def nyquist_traces(records: Sequence[Any]) -> List[Dict[str, Any]]:
    """One 3D scatter trace per spectrum.

    ``x`` is Z', ``y`` is -Z'' and ``z`` the 1-based spectrum count. Arrays of
    different lengths are truncated to the shorter one.
    """
    traces = []
    total = len(records)
    for index, record in enumerate(records):
        wire = as_wire_record(record)
        real = _float_array(wire.get("RealImpedance"))
        imag = _float_array(wire.get("ImaginaryImpedance"))
        n = min(real.size, imag.size)
        traces.append({
            "x": real[:n].tolist(),
            "y": (-imag[:n]).tolist(),
            "z": [index + 1] * n,
            "mode": "markers",
            "type": "scatter3d",
            "marker": {"size": 3, "color": spectrum_color(index, total)},
            "name": f"Spectrum {index + 1}",
            "showlegend": True,
        })
    return traces


# ============= Waterfall =============


@dataclass
class WaterfallData:
    """Flattened waterfall point cloud."""

    x: np.ndarray  # log10(frequency / Hz)
    y: np.ndarray  # 0-based spectrum index
    z: np.ndarray  # -Z'' in ohms

    @property
    def point_count(self) -> int:
        return int(self.x.size)

    @property
    def frequency_range(self) -> Optional[Tuple[float, float]]:
        if not self.x.size:
            return None
        return float(self.x.min()), float(self.x.max())

    @property
    def z_range(self) -> Optional[Tuple[float, float]]:
        if not self.z.size:
            return None
        return float(self.z.min()), float(self.z.max())

    def to_trace(self) -> Dict[str, Any]:
        return {
            "x": self.x.tolist(),
            "y": self.y.tolist(),
            "z": self.z.tolist(),
            "mode": "markers",
            "type": "scatter3d",
            "marker": {
                "size": 2,
                "color": self.z.tolist(),
                "colorscale": "Viridis",
                "colorbar": {"title": "-Z'' [Ω]"},
            },
            "name": "Waterfall EIS",
        }


def waterfall_points(records: Sequence[Any]) -> WaterfallData:
    """Collect (log10 f, spectrum index, -Z'') points over all spectra.

    A spectrum's own frequencies are used when they match its impedance
    length and are all positive; otherwise the default log grid stands in.
    Samples that are not finite are dropped.
    """
    xs: List[np.ndarray] = []
    ys: List[np.ndarray] = []
    zs: List[np.ndarray] = []

    for index, record in enumerate(records):
        wire = as_wire_record(record)
        imag = _float_array(wire.get("ImaginaryImpedance"))
        if imag.size == 0:
            continue

        frequencies = _float_array(wire.get("Frequencies"))
        if frequencies.shape != imag.shape or not np.all(frequencies > 0):
            frequencies = log_frequency_grid(imag.size)

        valid = np.isfinite(frequencies) & np.isfinite(imag) & (frequencies > 0)
        xs.append(np.log10(frequencies[valid]))
        ys.append(np.full(int(valid.sum()), index, dtype=np.int64))
        zs.append(-imag[valid])

    if not xs:
        empty = np.empty(0, dtype=np.float64)
        return WaterfallData(x=empty, y=np.empty(0, dtype=np.int64), z=empty)

    return WaterfallData(x=np.concatenate(xs), y=np.concatenate(ys), z=np.concatenate(zs))


# ============= Element impedances =============


@dataclass
class ElementImpedanceCurve:
    """Impedance contribution of one circuit element across frequency."""

    name: str
    display_name: str
    color: str
    frequencies: np.ndarray
    magnitude: np.ndarray
    phase_deg: np.ndarray

    @property
    def point_count(self) -> int:
        return int(self.magnitude.size)


def _complex_components(points: Any) -> Tuple[np.ndarray, np.ndarray]:
    if not is_sequence(points):
        empty = np.empty(0, dtype=np.float64)
        return empty, empty
    real = [p.get("real") for p in points if isinstance(p, Mapping)]
    imag = [p.get("imag") for p in points if isinstance(p, Mapping)]
    return _float_array(real), _float_array(imag)


def element_impedance_curves(record: Any) -> List[ElementImpedanceCurve]:
    """|Z| and phase (degrees) per element of one spectrum.

    Returns an empty list when the record carries no element impedances or
    no frequencies. Each curve is truncated to the frequencies available.
    """
    wire = as_wire_record(record)
    elements = wire.get("ElementImpedances")
    frequencies = _float_array(wire.get("Frequencies"))
    if not is_sequence(elements) or not elements or frequencies.size == 0:
        return []

    curves = []
    for element in elements:
        if not isinstance(element, Mapping):
            continue
        name = str(element.get("name", ""))
        real, imag = _complex_components(element.get("impedances"))
        n = min(real.size, imag.size, frequencies.size)
        curves.append(
            ElementImpedanceCurve(
                name=name,
                display_name=element_display_name(name),
                color=element_color(name),
                frequencies=frequencies[:n],
                magnitude=np.hypot(real[:n], imag[:n]),
                phase_deg=np.degrees(np.arctan2(imag[:n], real[:n])),
            )
        )
    return curves
