"""
Text summary of the dashboard state, used by the headless dashboard runner.
"""

from typing import Any, Dict

from .parameters import build_parameter_evolution
from .poller import DashboardState
from .series import nyquist_traces, waterfall_points
from .wire import is_number


def summarize_state(state: DashboardState) -> Dict[str, Any]:
    """Key figures of what the dashboard plots would show."""
    records = state.sorted_history()
    evolution = build_parameter_evolution(records)
    waterfall = waterfall_points(records)
    latest = state.latest or {}

    chi_square = latest.get("ChiSquare")
    real = latest.get("RealImpedance")

    return {
        "has_data": state.has_data,
        "latest_id": latest.get("ID"),
        "latest_time": latest.get("Time"),
        "chi_square": f"{chi_square:.12f}" if is_number(chi_square) else "N/A",
        "impedance_points": len(real) if isinstance(real, (list, tuple)) else 0,
        "spectra": len(records),
        "nyquist_traces": len(nyquist_traces(records)),
        "waterfall_points": waterfall.point_count,
        "circuit_type": evolution.circuit_type if evolution else None,
        "plot_parameters": evolution.plot_parameters if evolution else [],
        "table_parameters": evolution.table_parameters if evolution else [],
    }


def format_summary(summary: Dict[str, Any]) -> str:
    if not summary["has_data"]:
        return f"Waiting for webhook data... ({summary['spectra']} spectra)"
    parameters = ", ".join(summary["plot_parameters"]) or "none"
    return (
        f"Latest {summary['latest_id']} at {summary['latest_time']} | "
        f"chi2={summary['chi_square']} | {summary['impedance_points']} points | "
        f"{summary['spectra']} spectra | circuit={summary['circuit_type'] or 'n/a'} | "
        f"parameters: {parameters}"
    )
