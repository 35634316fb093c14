"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def normal_sample(rng):
    """Continuous sample with no ties."""
    return rng.normal(10.0, 2.0, 40)


@pytest.fixture
def skewed_sample(rng):
    """Right-skewed sample (exponential)."""
    return rng.exponential(1.0, 30)
