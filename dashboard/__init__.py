"""
Dashboard client for WebPlot.

Polls the webhook server and derives the data behind the dashboard plots:
iteration ordering, circuit parameter evolution, Nyquist and waterfall
series, element impedance curves, plus CSV import of raw spectra.
"""

from .csv_import import load_impedance_csv, parse_impedance_csv
from .parameters import (
    ParameterEvolution,
    build_parameter_evolution,
    extract_circuit_parameters,
    group_elements,
    parameter_info,
)
from .poller import DashboardState, WebhookPoller
from .series import element_impedance_curves, nyquist_traces, waterfall_points
from .sorting import extract_iteration, sort_by_iteration

__all__ = [
    "DashboardState",
    "WebhookPoller",
    "extract_iteration",
    "sort_by_iteration",
    "ParameterEvolution",
    "extract_circuit_parameters",
    "build_parameter_evolution",
    "group_elements",
    "parameter_info",
    "nyquist_traces",
    "waterfall_points",
    "element_impedance_curves",
    "parse_impedance_csv",
    "load_impedance_csv",
]
