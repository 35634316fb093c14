"""
Shared compute infrastructure for pybootci.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
{domain}/backends/. This module contains shared execution utilities.

Submodules:
    timing: Execution timing utilities
    pool: Ordered, deadline-bounded parallel map
"""

from pybootci.core.compute.timing import Timer, timed
from pybootci.core.compute.pool import (
    check_deadline,
    deadline_from_timeout,
    parallel_map,
    resolve_n_jobs,
)

__all__ = [
    # Timing
    "Timer",
    "timed",
    # Pool
    "check_deadline",
    "deadline_from_timeout",
    "parallel_map",
    "resolve_n_jobs",
]
