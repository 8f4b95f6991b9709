"""sirtrack bearing sensor: detection gating, synthetic readings, likelihood.

A sensor reports the bearing from its own position to the target, plus a
noisy position fix. Only the bearing enters the likelihood: the filter is
bearing-only and the position fix is carried for export and diagnostics.

Author: sirtrack contributors
License: AGPL-3.0-or-later
"""

from __future__ import annotations

import logging
import numpy as np
from dataclasses import dataclass
from typing import NamedTuple, Optional, Sequence, Union

from .numerics import bearing_to, gaussian_pdf, wrap_to_pi
from .particle import Particle

logger = logging.getLogger(__name__)


class Observation(NamedTuple):
    """One bearing report: (sensor_id, bearing [rad], x [m], y [m])."""
    sensor_id: int
    bearing: float
    x: float
    y: float


ObservationLike = Union[Observation, Sequence[float], np.ndarray]


def as_observation(obs: ObservationLike) -> Optional[Observation]:
    """Coerce a 4-field tuple/array into an Observation.

    Returns None for under-length or non-numeric input instead of raising,
    so one bad report never aborts a batch.
    """
    if isinstance(obs, Observation):
        return obs
    try:
        if len(obs) < 4:
            return None
        return Observation(int(obs[0]), float(obs[1]), float(obs[2]), float(obs[3]))
    except (TypeError, ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class Sensor:
    """Fixed bearing sensor.

    Attributes:
        x, y: Sensor position [m]
        max_range: Detection range [m]
        bearing_std_deg: Bearing noise standard deviation [deg]
        position_std: Position-fix noise standard deviation [m]
    """
    x: float
    y: float
    max_range: float
    bearing_std_deg: float
    position_std: float

    def __post_init__(self):
        if self.max_range < 0:
            raise ValueError("max_range must be non-negative")
        if self.bearing_std_deg <= 0:
            raise ValueError("bearing_std_deg must be positive")
        if self.position_std < 0:
            raise ValueError("position_std must be non-negative")

    @property
    def bearing_std_rad(self) -> float:
        return np.radians(self.bearing_std_deg)

    def can_detect(self, target_x: float, target_y: float) -> bool:
        """True iff the target lies within max_range."""
        return bool(np.hypot(target_x - self.x, target_y - self.y) <= self.max_range)

    def observe(self, true_x: float, true_y: float, rng: np.random.Generator,
                sensor_id: int = 0) -> Optional[Observation]:
        """Synthesise a noisy report of the true target, or None if out of range."""
        if not self.can_detect(true_x, true_y):
            return None

        true_bearing = bearing_to(self.x, self.y, true_x, true_y)
        noisy_bearing = true_bearing + rng.normal() * self.bearing_std_rad
        noisy_x = true_x + rng.normal() * self.position_std
        noisy_y = true_y + rng.normal() * self.position_std
        return Observation(int(sensor_id), wrap_to_pi(noisy_bearing),
                           float(noisy_x), float(noisy_y))

    def likelihoods(self, observation: ObservationLike,
                    positions: np.ndarray) -> np.ndarray:
        """Bearing likelihood for every row of an (N, 2) position array.

        Gaussian density of the wrapped bearing residual with variance
        (bearing_std_deg * pi / 180)^2. Malformed observations give zeros.
        """
        positions = np.atleast_2d(np.asarray(positions, dtype=float))
        obs = as_observation(observation)
        if obs is None:
            logger.debug("Malformed observation %r, zero likelihood", observation)
            return np.zeros(len(positions))

        predicted = bearing_to(self.x, self.y, positions[:, 0], positions[:, 1])
        residual = wrap_to_pi(predicted - obs.bearing)
        return gaussian_pdf(residual, self.bearing_std_rad)

    def likelihood(self, observation: ObservationLike, particle: Particle) -> float:
        """Likelihood of one observation given one particle."""
        return float(self.likelihoods(observation, particle.position)[0])
