"""
Generic result container for all pybootci computations.

The Result class provides a standardized envelope that bootstrap,
jackknife and nested-variance runs share. This enables shared tooling for
timing, warnings and reproducibility while allowing each run to define
its own parameter structure.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (n, B, seed, n_jobs, exclusions)
    - timing is optional (don't burden unit tests)
    - provenance for reproducibility (package and numpy versions)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, Any]:
    """Generate minimal provenance metadata."""
    import pybootci
    import numpy as np
    import scipy

    return {
        'pybootci_version': pybootci.__version__,
        'numpy_version': np.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for resampling computations.

    Type Parameters:
        P: The run-specific parameter payload type

    Attributes:
        params: Run-specific payload (replicates, jackknife values, ...)
        info: Structured metadata (n, B, seed, exclusion counts)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions used to produce the result

    Examples:
        >>> Result(
        ...     params=ReplicateParams(...),
        ...     info={'n': 15, 'B': 1000, 'seed': 42},
        ...     timing={'total_seconds': 0.2, 'bootstrap_replicates': 0.19},
        ...     backend_name='cpu_bootstrap'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, Any] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
