"""
Monotone reparametrizations applied around interval construction.

A Transform maps the statistic to a scale where its bootstrap
distribution is better behaved (e.g. Fisher's z for correlations).
Intervals are computed on the transformed scale and their endpoints
are mapped back through hinv.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pybootci.core.exceptions import InvalidArgumentError


@dataclass(frozen=True)
class Transform:
    """
    Monotone increasing bijection h with inverse hinv.

    Attributes:
        h: Forward map, vectorized over numpy arrays.
        hinv: Inverse map.
        hdot: Derivative of h, used for delta-method variance rescaling
            by the normal and studentized methods. When None a
            central-difference derivative is used where one is needed.
        name: Label shown in summaries.
    """
    h: Callable
    hinv: Callable
    hdot: Callable | None = None
    name: str = "custom"

    def __post_init__(self):
        for attr in ("h", "hinv"):
            if not callable(getattr(self, attr)):
                raise InvalidArgumentError(f"Transform.{attr} must be callable")
        if self.hdot is not None and not callable(self.hdot):
            raise InvalidArgumentError("Transform.hdot must be callable or None")

    def forward(self, x: ArrayLike) -> NDArray:
        """h(x); values outside the domain come back non-finite."""
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.asarray(self.h(np.asarray(x, dtype=np.float64)), dtype=np.float64)

    def inverse(self, y: ArrayLike) -> NDArray:
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return np.asarray(self.hinv(np.asarray(y, dtype=np.float64)), dtype=np.float64)

    def derivative(self, x: ArrayLike) -> NDArray:
        """h'(x), from hdot if given, else by central differences."""
        x = np.asarray(x, dtype=np.float64)
        if self.hdot is not None:
            return np.asarray(self.hdot(x), dtype=np.float64)
        step = np.cbrt(np.finfo(np.float64).eps) * np.maximum(np.abs(x), 1.0)
        return (self.forward(x + step) - self.forward(x - step)) / (2.0 * step)

    def roundtrip(self, x: ArrayLike) -> NDArray:
        """hinv(h(x)); equals x up to floating precision inside the domain."""
        return self.inverse(self.forward(x))


def _logit(p):
    return np.log(p) - np.log1p(-p)


def _expit(z):
    return 1.0 / (1.0 + np.exp(-z))


identity = Transform(
    h=lambda x: x,
    hinv=lambda y: y,
    hdot=lambda x: np.ones_like(x),
    name="identity",
)

# Positive statistics: variances, ratios, rates
log_transform = Transform(
    h=np.log,
    hinv=np.exp,
    hdot=lambda x: 1.0 / x,
    name="log",
)

# Correlation coefficients in (-1, 1)
fisher_z = Transform(
    h=np.arctanh,
    hinv=np.tanh,
    hdot=lambda r: 1.0 / (1.0 - r ** 2),
    name="fisher_z",
)

# Proportions in (0, 1)
logit_transform = Transform(
    h=_logit,
    hinv=_expit,
    hdot=lambda p: 1.0 / (p * (1.0 - p)),
    name="logit",
)
