"""
Root conftest.py for WebPlot tests.

This file contains shared fixtures and pytest configuration
that applies to all test modules.
"""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "api: mark test as exercising the HTTP surface",
    )
    config.addinivalue_line(
        "markers",
        "poller: mark test as exercising the dashboard poller",
    )


def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their module.

    - Tests in test_*_api.py modules are marked with 'api'
    - Tests in test_poller.py are marked with 'poller'
    """
    for item in items:
        if str(item.fspath).endswith("_api.py"):
            item.add_marker(pytest.mark.api)
        if "poller" in str(item.fspath):
            item.add_marker(pytest.mark.poller)


# ============================================================================
# Shared Fixtures
# ============================================================================


@pytest.fixture
def store():
    """A fresh, empty ingestion store."""
    from api.store import IngestionStore

    return IngestionStore()


@pytest.fixture
def app_with_store(store):
    """The FastAPI app with the ingestion store swapped for ``store``."""
    from api.store import get_store
    from main import app

    app.dependency_overrides[get_store] = lambda: store
    try:
        yield app
    finally:
        app.dependency_overrides.pop(get_store, None)


@pytest.fixture
def client(app_with_store):
    """Test client bound to a fresh store."""
    from fastapi.testclient import TestClient

    with TestClient(app_with_store) as c:
        yield c


@pytest.fixture
def fitted_payload():
    """A webhook payload as sent by the fitting process."""
    return {
        "id": "run42_iter_007",
        "time": "2025-03-14T09:26:53.589Z",
        "chi_square": 1.25e-4,
        "real_impedance": [10.5, 12.0, 15.25, 21.0],
        "imaginary_impedance": [-0.5, -2.0, -4.75, -3.0],
        "frequencies": [1e5, 1e3, 10.0, 0.1],
        "parameters": [10.0, 1e-6, 20.0, 5e-5, 0.9],
        "element_names": ["r", "c", "r", "qy", "qn"],
        "element_impedances": [
            {
                "name": "r",
                "impedances": [
                    {"real": 10.0, "imag": 0.0},
                    {"real": 10.0, "imag": 0.0},
                    {"real": 10.0, "imag": 0.0},
                    {"real": 10.0, "imag": 0.0},
                ],
            }
        ],
        "circuit_type": "R-(RC)-Q",
    }


@pytest.fixture
def wire_records():
    """Records in wire form, deliberately out of iteration order."""

    def _make(record_id, parameters, element_names, chi=1e-3):
        return {
            "ID": record_id,
            "Time": "2025-03-14T09:00:00.000Z",
            "ChiSquare": chi,
            "RealImpedance": [1.0, 2.0, 3.0],
            "ImaginaryImpedance": [-1.0, -1.5, -0.5],
            "Frequencies": [100.0, 10.0, 1.0],
            "Parameters": parameters,
            "ElementNames": element_names,
            "ElementImpedances": [],
            "CircuitType": "R-RC",
        }

    return [
        _make("fit_iter_003", [12.0, 2e-6, 30.0], ["r", "c", "r"]),
        _make("fit_iter_001", [10.0, 1e-6, 20.0], ["r", "c", "r"]),
        _make("fit_iter_002", [11.0, 1.5e-6, 25.0, 7.0], ["r", "c", "r", "l"]),
    ]
