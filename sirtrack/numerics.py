"""sirtrack numeric helpers: angle wrapping, Gaussian densities, RNG ownership.

Author: sirtrack contributors
License: AGPL-3.0-or-later
"""

from __future__ import annotations

import numpy as np
from scipy.stats import norm
from typing import Union

TWO_PI = 2.0 * np.pi

SeedLike = Union[None, int, np.random.Generator]


def wrap_to_pi(angle):
    """Map an angle (scalar or array, radians) into (-pi, pi].

    Angles already in range are returned unchanged; others wrap in closed
    form, so arbitrarily large multiples of 2*pi wrap in one pass.
    Scalars come back as ``float``, arrays as ``np.ndarray``.
    """
    a = np.asarray(angle, dtype=float)
    wrapped = np.pi - np.mod(np.pi - a, TWO_PI)
    # np.mod can round up to exactly 2*pi for tiny negative inputs
    wrapped = np.where(wrapped <= -np.pi, wrapped + TWO_PI, wrapped)
    wrapped = np.where((a > -np.pi) & (a <= np.pi), a, wrapped)
    if wrapped.ndim == 0:
        return float(wrapped)
    return wrapped


def gaussian_pdf(x, sigma: float):
    """Zero-mean normal density N(x; 0, sigma^2)."""
    return norm.pdf(x, loc=0.0, scale=sigma)


def bearing_to(from_x, from_y, to_x, to_y):
    """Bearing atan2(dy, dx) from one point (or points) to another."""
    return np.arctan2(np.subtract(to_y, from_y), np.subtract(to_x, from_x))


def make_rng(seed: SeedLike = None) -> np.random.Generator:
    """Return a Generator; existing generators are passed through untouched."""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)
