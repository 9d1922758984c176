# travel_globe/api/diagnostics.py
"""Non-fatal sanity checks over a trip collection."""

import logging
from typing import Any, List, Optional

from travel_globe.api.models import find_violations


def check(trips: Any) -> List[str]:
    """Return one human-readable line per predicate violation.

    Never raises. An empty list means every trip passed.
    """
    if not isinstance(trips, list):
        return ["trips is not an array"]

    failures: List[str] = []
    for index, trip in enumerate(trips):
        for problem in find_violations(trip):
            failures.append(f"Trip #{index} {problem}")
    return failures


def report(trips: Any, violations: List[str], log: Optional[logging.Logger] = None) -> None:
    """Log the outcome of ``check``: INFO when clean, WARNING with the list otherwise."""
    log = log or logging.getLogger(__name__)
    if violations:
        log.warning("Sanity check failures:\n" + "\n".join(f" - {v}" for v in violations))
    else:
        count = len(trips) if isinstance(trips, list) else 0
        log.info(f"Sanity checks passed ({count} trips)")


__all__ = ["check", "report"]
