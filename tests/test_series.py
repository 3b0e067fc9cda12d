"""
Tests for plot series builders (Nyquist, waterfall, element impedances).

Run with: pytest tests/test_series.py -v
"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from dashboard.series import (
    element_impedance_curves,
    log_frequency_grid,
    nyquist_traces,
    spectrum_color,
    waterfall_points,
)


class TestLogFrequencyGrid:

    def test_default_sweep_bounds(self):
        grid = log_frequency_grid(50)

        assert grid.shape == (50,)
        assert grid[0] == pytest.approx(1e5)
        assert grid[-1] == pytest.approx(1e-2)
        assert np.all(np.diff(grid) < 0)

    def test_degenerate_sizes(self):
        assert log_frequency_grid(0).size == 0
        assert log_frequency_grid(1).tolist() == [1e5]


class TestNyquistTraces:

    def test_one_trace_per_spectrum(self, wire_records):
        traces = nyquist_traces(wire_records)

        assert len(traces) == 3
        first = traces[0]
        assert first["x"] == [1.0, 2.0, 3.0]
        assert first["y"] == [1.0, 1.5, 0.5]
        assert first["z"] == [1, 1, 1]
        assert first["type"] == "scatter3d"
        assert first["name"] == "Spectrum 1"
        assert traces[2]["z"] == [3, 3, 3]

    def test_colors_spread_over_batch(self):
        assert spectrum_color(0, 4) == "hsl(0.0, 70%, 50%)"
        assert spectrum_color(1, 4) == "hsl(90.0, 70%, 50%)"

    def test_mismatched_lengths_are_truncated(self):
        traces = nyquist_traces([{"RealImpedance": [1.0, 2.0, 3.0], "ImaginaryImpedance": [-1.0]}])

        assert traces[0]["x"] == [1.0]
        assert traces[0]["y"] == [1.0]

    def test_missing_arrays(self):
        traces = nyquist_traces([{"ID": "empty"}])

        assert traces[0]["x"] == []
        assert traces[0]["z"] == []


class TestWaterfallPoints:

    def test_uses_record_frequencies(self):
        data = waterfall_points([
            {"ImaginaryImpedance": [-1.0, -2.0], "Frequencies": [1000.0, 10.0]},
            {"ImaginaryImpedance": [-3.0, -4.0], "Frequencies": [1000.0, 10.0]},
        ])

        assert data.x.tolist() == pytest.approx([3.0, 1.0, 3.0, 1.0])
        assert data.y.tolist() == [0, 0, 1, 1]
        assert data.z.tolist() == [1.0, 2.0, 3.0, 4.0]
        assert data.point_count == 4
        assert data.frequency_range == pytest.approx((1.0, 3.0))
        assert data.z_range == (1.0, 4.0)

    def test_falls_back_to_generated_grid(self):
        data = waterfall_points([{"ImaginaryImpedance": [-1.0, -2.0, -3.0], "Frequencies": []}])

        assert data.x.tolist() == pytest.approx([5.0, 1.5, -2.0])

    def test_drops_non_finite_samples(self):
        data = waterfall_points([
            {"ImaginaryImpedance": [-1.0, None, -3.0], "Frequencies": [100.0, 10.0, 1.0]},
        ])

        assert data.z.tolist() == [1.0, 3.0]
        assert data.y.tolist() == [0, 0]

    def test_skips_spectra_without_data(self):
        data = waterfall_points([{"ID": "a"}, {"ImaginaryImpedance": [-2.0], "Frequencies": [10.0]}])

        assert data.y.tolist() == [1]

    def test_empty(self):
        data = waterfall_points([])

        assert data.point_count == 0
        assert data.frequency_range is None
        assert data.z_range is None

    def test_to_trace(self):
        trace = waterfall_points([{"ImaginaryImpedance": [-2.0], "Frequencies": [10.0]}]).to_trace()

        assert trace["x"] == [1.0]
        assert trace["z"] == [2.0]
        assert trace["marker"]["color"] == [2.0]
        assert trace["marker"]["colorscale"] == "Viridis"


class TestElementImpedanceCurves:

    def test_magnitude_and_phase(self):
        record = {
            "Frequencies": [100.0, 10.0],
            "ElementImpedances": [
                {"name": "r", "impedances": [{"real": 3.0, "imag": 4.0}, {"real": 3.0, "imag": 0.0}]},
                {"name": "c", "impedances": [{"real": 0.0, "imag": -2.0}, {"real": 0.0, "imag": -20.0}]},
            ],
        }

        curves = element_impedance_curves(record)

        assert [c.name for c in curves] == ["r", "c"]
        assert curves[0].display_name == "Resistance"
        assert curves[0].magnitude.tolist() == pytest.approx([5.0, 3.0])
        assert curves[0].phase_deg.tolist() == pytest.approx([53.1301, 0.0], abs=1e-3)
        assert curves[1].color == "#007bff"
        assert curves[1].phase_deg.tolist() == pytest.approx([-90.0, -90.0])
        assert curves[1].frequencies.tolist() == [100.0, 10.0]

    def test_truncates_to_available_frequencies(self):
        record = {
            "Frequencies": [100.0],
            "ElementImpedances": [
                {"name": "l", "impedances": [{"real": 0.0, "imag": 1.0}, {"real": 0.0, "imag": 2.0}]},
            ],
        }

        curves = element_impedance_curves(record)

        assert curves[0].point_count == 1

    def test_no_element_data(self):
        assert element_impedance_curves({"Frequencies": [1.0], "ElementImpedances": []}) == []
        assert element_impedance_curves({"ElementImpedances": [{"name": "r", "impedances": []}]}) == []
