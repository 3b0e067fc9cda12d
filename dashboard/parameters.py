"""
Circuit parameter extraction for the dashboard.

The fitter reports each spectrum's fitted values as two index-aligned arrays:
``Parameters`` (values) and ``ElementNames`` (element identifiers such as
``r``, ``c``, ``qy``, ``qn``). This module turns them into display names
(``R1``, ``R2``, ``C1``, ``Q``, ``n``...), groups them across a batch of
spectra into per-parameter series, and assigns units and colors for plotting.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from api.records import DEFAULT_CIRCUIT_TYPE
from api.shared.logger import get_logger

from .wire import as_wire_record, is_number, is_sequence

logger = get_logger(__name__)

# Element types numbered per spectrum: R1, R2, C1...
COUNTED_ELEMENT_TYPES = ("r", "c", "l", "w")

# CPE parameters: Q is plotted, the exponent n only shows in the table
CPE_MAGNITUDE = "qy"
CPE_EXPONENT = "qn"

ELEMENT_DISPLAY_NAMES = {
    "r": "Resistance",
    "c": "Capacitance",
    "l": "Inductance",
    "w": "Warburg",
    "q": "CPE",
    "o": "Open Circuit",
    "t": "Transmission Line",
    "g": "Conductance",
}

ELEMENT_UNITS = {
    "r": "Ω",
    "c": "F",
    "l": "H",
    "w": "Ω⋅s^-0.5",
    "q": "S⋅s^n",
    "o": "Ω",
    "t": "Ω",
    "g": "S",
}

ELEMENT_COLORS = {
    "r": "#dc3545",
    "c": "#007bff",
    "l": "#28a745",
    "w": "#ffc107",
    "q": "#6f42c1",
    "o": "#fd7e14",
    "t": "#20c997",
    "g": "#6c757d",
}

LOG_SCALE_ELEMENT_TYPES = frozenset({"c", "q"})

PARAMETER_PALETTE = (
    "#dc3545",
    "#fd7e14",
    "#6f42c1",
    "#28a745",
    "#17a2b8",
    "#ffc107",
    "#e83e8c",
)

NEUTRAL_COLOR = "#495057"


def element_type(name: Any) -> str:
    """Element type key of an element or display name (its first letter)."""
    text = str(name)
    if text.upper().startswith("CPE"):
        return "q"
    return text[:1].lower()


def element_display_name(name: Any) -> str:
    """Readable element family name, e.g. ``Resistance`` for ``r``."""
    key = element_type(name)
    return ELEMENT_DISPLAY_NAMES.get(key, str(name).upper())


def element_color(name: Any) -> str:
    return ELEMENT_COLORS.get(element_type(name), NEUTRAL_COLOR)


# ============= Per-spectrum extraction =============


@dataclass
class CircuitElement:
    """A fitted parameter that gets its own evolution plot."""

    name: str
    original_name: str
    value: Any
    index: int


@dataclass
class CircuitParameters:
    """Named parameters of one spectrum."""

    parameters: Dict[str, Any]
    circuit_elements: List[CircuitElement]
    original_element_names: List[Any]
    original_parameters: List[Any]


def _display_name(element: str, counts: Dict[str, int]) -> Tuple[str, bool]:
    """Map a lower-cased element name to (display name, plotted)."""
    if element == CPE_MAGNITUDE:
        return "Q", True
    if element == CPE_EXPONENT:
        return "n", False
    if element in COUNTED_ELEMENT_TYPES:
        counts[element] = counts.get(element, 0) + 1
        return f"{element.upper()}{counts[element]}", True
    return element.upper(), True


def extract_circuit_parameters(
    parameters: Any,
    element_names: Any,
) -> Optional[CircuitParameters]:
    """Name the fitted parameters of one spectrum.

    Args:
        parameters: Fitted values.
        element_names: Element identifiers, index-aligned with ``parameters``.

    Returns:
        The table mapping (including ``n``) and the plottable elements
        (excluding ``n``), or None when the arrays are missing or their
        lengths differ.
    """
    if not is_sequence(parameters) or not is_sequence(element_names):
        return None
    if len(parameters) != len(element_names):
        return None

    table: Dict[str, Any] = {}
    elements: List[CircuitElement] = []
    counts: Dict[str, int] = {}

    for index, (raw_name, value) in enumerate(zip(element_names, parameters)):
        element = str(raw_name).lower()
        display_name, plotted = _display_name(element, counts)
        table[display_name] = value
        if plotted:
            elements.append(
                CircuitElement(
                    name=display_name,
                    original_name=element,
                    value=value,
                    index=index,
                )
            )

    return CircuitParameters(
        parameters=table,
        circuit_elements=elements,
        original_element_names=list(element_names),
        original_parameters=list(parameters),
    )


# ============= Units, colors and formatting =============


@dataclass(frozen=True)
class ParameterInfo:
    """Plot styling for one parameter."""

    unit: str
    color: str
    log_scale: bool


def parameter_info(name: str, plot_names: Sequence[str] = ()) -> ParameterInfo:
    """Unit and log scale by element type, color by position among plotted names."""
    key = element_type(name)
    if name in plot_names:
        color = PARAMETER_PALETTE[list(plot_names).index(name) % len(PARAMETER_PALETTE)]
    else:
        color = NEUTRAL_COLOR
    return ParameterInfo(
        unit=ELEMENT_UNITS.get(key, ""),
        color=color,
        log_scale=key in LOG_SCALE_ELEMENT_TYPES,
    )


def format_parameter_value(value: Any) -> str:
    """Format a parameter for the summary table ("-" when missing or zero)."""
    if not is_number(value) or value == 0:
        return "-"
    if 1e-3 < abs(value) < 1e3:
        return f"{value:.4f}"
    return f"{value:.3e}"


def format_chi_square(value: Any) -> str:
    if not is_number(value) or value == 0:
        return "N/A"
    return f"{value:.3e}"


# ============= Batch evolution =============


@dataclass
class SpectrumParameters:
    """Extracted parameters of one spectrum within a batch."""

    spectrum_number: int
    spectrum_id: Any
    circuit_type: Any
    parameters: Dict[str, Any]
    circuit_elements: List[CircuitElement]
    chi_square: Any
    original_element_names: List[Any]


@dataclass
class ParameterSeries:
    """Values of one parameter across spectra."""

    name: str
    info: ParameterInfo
    x: List[int] = field(default_factory=list)
    y: List[float] = field(default_factory=list)

    @property
    def axis_title(self) -> str:
        return f"{self.name} [{self.info.unit}]" if self.info.unit else self.name


@dataclass
class ParameterEvolution:
    """Circuit parameters of a batch of spectra, ready for plots and table."""

    spectra: List[SpectrumParameters]
    plot_parameters: List[str]
    table_parameters: List[str]

    @property
    def circuit_type(self) -> Any:
        return self.spectra[0].circuit_type if self.spectra else DEFAULT_CIRCUIT_TYPE

    @property
    def spectrum_numbers(self) -> List[int]:
        return [spectrum.spectrum_number for spectrum in self.spectra]

    def info(self, name: str) -> ParameterInfo:
        return parameter_info(name, self.plot_parameters)

    def series(self) -> Dict[str, ParameterSeries]:
        """One series per plotted parameter.

        Spectra that lack a parameter contribute no point to its series.
        """
        result: Dict[str, ParameterSeries] = {}
        for name in self.plot_parameters:
            series = ParameterSeries(name=name, info=self.info(name))
            for spectrum in self.spectra:
                value = spectrum.parameters.get(name)
                if is_number(value):
                    series.x.append(spectrum.spectrum_number)
                    series.y.append(value)
            result[name] = series
        return result

    def normalized_series(self) -> Dict[str, ParameterSeries]:
        """Series scaled by their maximum, for the combined overview plot."""
        result: Dict[str, ParameterSeries] = {}
        for name, series in self.series().items():
            peak = max(series.y) if series.y else 0
            y = [value / peak for value in series.y] if peak else list(series.y)
            result[name] = ParameterSeries(
                name=f"{name} (norm)",
                info=series.info,
                x=list(series.x),
                y=y,
            )
        return result

    def table_rows(self) -> List[Dict[str, Any]]:
        """Formatted summary table, one row per spectrum."""
        rows = []
        for spectrum in self.spectra:
            names = spectrum.original_element_names
            rows.append({
                "spectrum": spectrum.spectrum_number,
                "circuit_type": spectrum.circuit_type,
                "values": {
                    name: format_parameter_value(spectrum.parameters.get(name))
                    for name in self.table_parameters
                },
                "chi_square": format_chi_square(spectrum.chi_square),
                "elements": ", ".join(str(n) for n in names) if names else "N/A",
            })
        return rows


def build_parameter_evolution(records: Sequence[Any]) -> Optional[ParameterEvolution]:
    """Extract circuit parameters for a batch of records.

    Records are expected in plot order (see ``dashboard.sorting``). A record
    whose parameter arrays are missing or of different lengths is left out.
    A record with empty arrays is kept: it adds no plot points but still gets
    a table row. Kept records use their 1-based position in ``records`` as
    spectrum number.

    Returns:
        The evolution, or None when no record has usable parameter arrays.
    """
    spectra: List[SpectrumParameters] = []
    plot_names: List[str] = []
    table_names: List[str] = []

    for position, record in enumerate(records, start=1):
        wire = as_wire_record(record)
        extracted = extract_circuit_parameters(wire.get("Parameters"), wire.get("ElementNames"))
        if extracted is None:
            logger.debug("No usable parameters for spectrum %s (%s)", position, wire.get("ID"))
            continue

        spectra.append(
            SpectrumParameters(
                spectrum_number=position,
                spectrum_id=wire.get("ID"),
                circuit_type=wire.get("CircuitType") or DEFAULT_CIRCUIT_TYPE,
                parameters=extracted.parameters,
                circuit_elements=extracted.circuit_elements,
                chi_square=wire.get("ChiSquare"),
                original_element_names=extracted.original_element_names,
            )
        )

        for element in extracted.circuit_elements:
            if element.name not in plot_names:
                plot_names.append(element.name)
        for name in extracted.parameters:
            if name not in table_names:
                table_names.append(name)

    if not spectra:
        return None

    logger.debug(
        "Extracted parameters for %d/%d spectra, plots=%s",
        len(spectra),
        len(records),
        plot_names,
    )
    return ParameterEvolution(
        spectra=spectra,
        plot_parameters=plot_names,
        table_parameters=table_names,
    )


# ============= Per-spectrum grouping =============


@dataclass
class ElementGroup:
    """Parameters of one element type within a single spectrum."""

    element_type: str
    name: str
    unit: str
    color: str
    values: List[Any] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.values)

    @property
    def value_range(self) -> Optional[Tuple[float, float]]:
        numbers = [value for value in self.values if is_number(value)]
        if not numbers:
            return None
        return min(numbers), max(numbers)


def group_elements(record: Any) -> Dict[str, ElementGroup]:
    """Group one spectrum's parameters by element type, in first-seen order.

    Indices are 1-based positions in the record's arrays. Returns an empty
    mapping when the arrays are missing or their lengths differ.
    """
    wire = as_wire_record(record)
    parameters = wire.get("Parameters")
    element_names = wire.get("ElementNames")
    if not is_sequence(parameters) or not is_sequence(element_names):
        return {}
    if len(parameters) != len(element_names):
        return {}

    groups: Dict[str, ElementGroup] = {}
    for index, (name, value) in enumerate(zip(element_names, parameters), start=1):
        key = element_type(name)
        group = groups.get(key)
        if group is None:
            group = ElementGroup(
                element_type=key,
                name=ELEMENT_DISPLAY_NAMES.get(key, key.upper()),
                unit=ELEMENT_UNITS.get(key, ""),
                color=element_color(name),
            )
            groups[key] = group
        group.values.append(value)
        group.indices.append(index)
    return groups
