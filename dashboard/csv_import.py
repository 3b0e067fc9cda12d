"""
CSV import of raw impedance spectra.

Expected columns, in order: ``Frequency_Hz, Z_real, Z_imag[, Spectrum_Number]``.
The header row is optional. Rows are grouped by spectrum number into
measurement records in wire form, with no fit attached (``ChiSquare`` is
None and the parameter arrays are empty).
"""

import csv
import io
import math
import re
from datetime import datetime, timezone
from pathlib import Path, PurePath
from typing import Any, Dict, List, Optional, Union

import numpy as np
import pandas as pd

from api.records import MeasurementRecord, format_timestamp
from api.shared.logger import get_logger

logger = get_logger(__name__)

CSV_COLUMNS = ("Frequency_Hz", "Z_real", "Z_imag", "Spectrum_Number")
VALUE_COLUMNS = list(CSV_COLUMNS[:3])
DEFAULT_SPECTRUM_NUMBER = 1

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def _parse_number(text: str) -> Optional[float]:
    try:
        value = float(text.strip())
    except (AttributeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return value


def sanitize_file_name(file_name: str) -> str:
    """File name without directory or extension, safe for use in record ids."""
    stem = PurePath(file_name).stem
    return _UNSAFE_ID_CHARS.sub("_", stem) or "import"


def _has_header(first_line: str) -> bool:
    return _parse_number(first_line.split(",", 1)[0]) is None


def _read_frame(lines: List[str]) -> pd.DataFrame:
    """Read data lines as text columns, padding short rows with NaN.

    Quotes are not special, so a stray quote only spoils its own row.
    """
    width = max(max(line.count(",") + 1 for line in lines), len(CSV_COLUMNS))
    names = list(CSV_COLUMNS) + [f"extra_{i}" for i in range(width - len(CSV_COLUMNS))]
    frame = pd.read_csv(
        io.StringIO("\n".join(lines)),
        header=None,
        names=names,
        dtype=str,
        keep_default_na=False,
        quoting=csv.QUOTE_NONE,
    )
    return frame[list(CSV_COLUMNS)].apply(lambda column: column.str.strip())


def _usable_rows(frame: pd.DataFrame) -> pd.DataFrame:
    """Numeric rows with a resolved integer ``spectrum`` column."""
    values = frame[VALUE_COLUMNS].apply(pd.to_numeric, errors="coerce").astype(float)
    complete = values.notna().all(axis=1)

    spectrum_text = frame["Spectrum_Number"].fillna("")
    blank = spectrum_text == ""
    spectrum = pd.to_numeric(spectrum_text, errors="coerce").astype(float)
    spectrum_ok = blank | np.isfinite(spectrum)

    usable = values[complete & spectrum_ok].copy()
    usable["spectrum"] = (
        spectrum[complete & spectrum_ok]
        .where(~blank[complete & spectrum_ok], DEFAULT_SPECTRUM_NUMBER)
        .astype(int)
    )
    return usable


def parse_impedance_csv(
    text: str,
    file_name: str,
    received_at: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """Parse CSV text into one wire-form record per spectrum number.

    The first line is treated as a header when its first field does not
    parse as a number. Rows that fail to parse are skipped on their own.

    Args:
        text: CSV file content.
        file_name: Original file name, used to derive record ids.
        received_at: Timestamp stamped on the records, defaults to now.

    Returns:
        Records ordered by spectrum number, with ids
        ``<sanitizedFileName>_spectrum_<n>``.
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if lines and _has_header(lines[0]):
        lines = lines[1:]
    if not lines:
        logger.info("No data rows in %s", file_name)
        return []

    frame = _read_frame(lines)
    usable = _usable_rows(frame)
    skipped = len(frame) - len(usable)
    if skipped:
        logger.debug("Skipped %d unparseable rows in %s", skipped, file_name)

    base_name = sanitize_file_name(file_name)
    timestamp = format_timestamp(received_at or datetime.now(timezone.utc))
    records = []
    for spectrum, group in usable.groupby("spectrum", sort=True):
        record = MeasurementRecord(
            id=f"{base_name}_spectrum_{int(spectrum)}",
            time=timestamp,
            chi_square=None,
            real_impedance=tuple(group["Z_real"].tolist()),
            imaginary_impedance=tuple(group["Z_imag"].tolist()),
            frequencies=tuple(group["Frequency_Hz"].tolist()),
        )
        records.append(record.to_dict())

    logger.info("Imported %d spectra from %s", len(records), file_name)
    return records


def load_impedance_csv(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Read a CSV file and parse it with ``parse_impedance_csv``."""
    path = Path(path)
    return parse_impedance_csv(path.read_text(encoding="utf-8-sig"), path.name)
