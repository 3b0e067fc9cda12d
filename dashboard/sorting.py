"""
Iteration ordering for measurement records.

Record ids produced by the iterative fitter carry an ``_iter_<n>`` suffix.
Time-series plots order spectra by that number rather than by arrival.
"""

import re
from typing import Any, List, Optional, Sequence

from .wire import as_wire_record

ITERATION_PATTERN = re.compile(r"_iter_(\d+)")


def extract_iteration(record_id: Any) -> Optional[int]:
    """Return the iteration number embedded in a record id, if any."""
    if not isinstance(record_id, str):
        return None
    match = ITERATION_PATTERN.search(record_id)
    if match is None:
        return None
    return int(match.group(1))


def iteration_number(record: Any) -> int:
    """Iteration number of a record; 0 when the id has none."""
    iteration = extract_iteration(as_wire_record(record).get("ID"))
    return 0 if iteration is None else iteration


def sort_by_iteration(records: Sequence[Any]) -> List[Any]:
    """Return a new list ordered by iteration number.

    The sort is stable, so records with the same number keep their input order.
    """
    return sorted(records, key=iteration_number)
