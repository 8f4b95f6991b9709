#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
sirtrack Particle Filter Module
═══════════════════════════════════════════════════════════════════════════════

Sequential Importance Resampling (SIR) filter for bearing-only tracking:
- Constant-velocity particles, one velocity hypothesis per particle
- Independent-sensor fusion via log-space likelihood accumulation
- Systematic (low-variance) resampling with roughening
- Weighted-centroid point estimate

License: AGPL-3.0-or-later
═══════════════════════════════════════════════════════════════════════════════
"""

from __future__ import annotations

import logging
import numpy as np
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .motion import MotionModel
from .numerics import SeedLike, make_rng
from .particle import Particle
from .sensor import ObservationLike, Sensor

logger = logging.getLogger(__name__)


class DegenerateWeightsError(ArithmeticError):
    """Total particle weight is zero: every hypothesis was rejected."""


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class ParticleFilterConfig:
    """Particle filter configuration."""
    dt: float = 1.0                       # Default motion_update time step [s]
    likelihood_floor: float = 1e-10       # Added before log() of each likelihood
    position_perturbation: float = 5.0    # Roughening std on position [m]
    velocity_perturbation: float = 0.5    # Roughening std on velocity [m/s]


# =============================================================================
# RESAMPLING
# =============================================================================

def systematic_resample(weights: np.ndarray, offset: float) -> np.ndarray:
    """Low-variance systematic resampling indices.

    Sample points are beta_i = offset + i/N for i = 0..N-1, with offset
    drawn from U(0, 1/N) by the caller. Each point selects the first index
    whose cumulative normalised weight reaches it. Because the points are
    increasing, the selected indices are non-decreasing.

    Args:
        weights: (N,) non-negative weights, not necessarily normalised
        offset: Shared offset u in [0, 1/N)

    Returns:
        (N,) integer source indices

    Raises:
        DegenerateWeightsError: if the weights sum to zero
    """
    weights = np.asarray(weights, dtype=float)
    n = len(weights)
    total = weights.sum()
    if total == 0.0:
        raise DegenerateWeightsError("Zero total weight for particles")

    cdf = np.cumsum(weights / total)
    beta = offset + np.arange(n) / n
    indices = np.searchsorted(cdf, beta, side='left')
    # cdf[-1] can land a hair below the last sample point
    return np.minimum(indices, n - 1)


# =============================================================================
# PARTICLE FILTER
# =============================================================================

class ParticleFilter:
    """
    SIR particle filter over 2D position with per-particle constant velocity.

    Population is stored as arrays: positions (N, 2), velocities (N, 2),
    weights (N,). N is fixed for the lifetime of the filter. Every accessor
    returns copies.

    Example::

        pf = ParticleFilter(500, 0.0, 0.0, 300.0, MotionModel(12, 20), rng=42)
        pf.motion_update()
        if observations:
            pf.update_weights(observations, sensors)
            pf.resample()
        x, y = pf.get_estimate()
    """

    def __init__(self, n_particles: int, init_x: float, init_y: float,
                 init_stddev: float, motion_model: MotionModel,
                 config: ParticleFilterConfig = None, rng: SeedLike = None):
        if n_particles < 1:
            raise ValueError(f"n_particles must be >= 1, got {n_particles}")
        if init_stddev < 0:
            raise ValueError("init_stddev must be non-negative")

        self.config = config or ParticleFilterConfig()
        self.motion_model = motion_model
        self.rng = make_rng(rng)
        self.n_particles = int(n_particles)

        # Gaussian positions around the guess, uniform speed/heading
        self._positions = (np.array([init_x, init_y], dtype=float)
                           + self.rng.normal(0.0, 1.0, (self.n_particles, 2)) * init_stddev)
        self._velocities = motion_model.sample_velocities(self.rng, self.n_particles)
        self._weights = np.full(self.n_particles, 1.0 / self.n_particles)

        self._estimate = np.array([init_x, init_y], dtype=float)

        logger.debug("Initialised %d particles around (%.1f, %.1f), std %.1f",
                     self.n_particles, init_x, init_y, init_stddev)

    @classmethod
    def from_particles(cls, particles: Sequence[Particle], motion_model: MotionModel,
                       config: ParticleFilterConfig = None,
                       rng: SeedLike = None) -> "ParticleFilter":
        """Build a filter around an explicit population.

        Weights are taken as given. The estimate starts at their weighted
        mean, or the plain mean if they sum to zero.
        """
        if len(particles) < 1:
            raise ValueError("At least one particle is required")
        weights = np.array([p.weight for p in particles], dtype=float)
        if np.any(weights < 0):
            raise ValueError("Particle weights must be non-negative")

        pf = cls.__new__(cls)
        pf.config = config or ParticleFilterConfig()
        pf.motion_model = motion_model
        pf.rng = make_rng(rng)
        pf.n_particles = len(particles)
        pf._positions = np.array([[p.x, p.y] for p in particles], dtype=float)
        pf._velocities = np.array([[p.vx, p.vy] for p in particles], dtype=float)
        pf._weights = weights
        pf._estimate = pf._positions.mean(axis=0)
        pf._update_estimate()
        return pf

    # -------------------------------------------------------------------------
    # Filter cycle
    # -------------------------------------------------------------------------

    def motion_update(self, dt: Optional[float] = None) -> None:
        """Propagate every particle by dt (default config.dt); weights untouched."""
        if dt is None:
            dt = self.config.dt
        self._positions = self.motion_model.propagate(self._positions, self._velocities, dt)
        self._update_estimate()

    def update_weights(self, observations: Sequence[ObservationLike],
                       sensors: Sequence[Sensor]) -> None:
        """
        Reweight particles by the product of per-observation likelihoods.

        log w_i = sum_obs log(L(obs | particle_i) + floor), w_i = exp(log w_i).
        The observation's sensor_id indexes ``sensors``; ids that are out of
        range or unreadable are skipped. An empty batch leaves the weights
        alone.

        Args:
            observations: Batch of Observation (or 4-field tuples)
            sensors: Sensor list the ids refer to
        """
        observations = list(observations)
        if not observations:
            return

        floor = self.config.likelihood_floor
        log_weights = np.zeros(self.n_particles)

        for obs in observations:
            sensor_id = _sensor_index(obs)
            if sensor_id is None or not 0 <= sensor_id < len(sensors):
                logger.debug("Skipping observation %r: no sensor for id", obs)
                continue
            likelihoods = sensors[sensor_id].likelihoods(obs, self._positions)
            log_weights += np.log(likelihoods + floor)

        self._weights = np.exp(log_weights)
        self._update_estimate()

    def resample(self) -> None:
        """
        Systematic resampling with roughening.

        Selected particles are copied with Gaussian perturbation on position
        and velocity, then the whole population is replaced and every weight
        set to 1/N.

        Raises:
            DegenerateWeightsError: if the total weight is zero
        """
        n = self.n_particles
        offset = self.rng.uniform(0.0, 1.0 / n)
        indices = systematic_resample(self._weights, offset)

        cfg = self.config
        new_positions = (self._positions[indices]
                         + self.rng.normal(0.0, 1.0, (n, 2)) * cfg.position_perturbation)
        new_velocities = (self._velocities[indices]
                          + self.rng.normal(0.0, 1.0, (n, 2)) * cfg.velocity_perturbation)

        self._positions = new_positions
        self._velocities = new_velocities
        self._weights = np.full(n, 1.0 / n)

        logger.debug("Resampled %d particles from %d distinct sources",
                     n, len(np.unique(indices)))

    def _update_estimate(self) -> None:
        total = self._weights.sum()
        if total > 0:
            self._estimate = (self._weights @ self._positions) / total

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def get_estimate(self) -> np.ndarray:
        """Weighted-mean position estimate [x, y]."""
        return self._estimate.copy()

    @property
    def positions(self) -> np.ndarray:
        return self._positions.copy()

    @property
    def velocities(self) -> np.ndarray:
        return self._velocities.copy()

    @property
    def weights(self) -> np.ndarray:
        return self._weights.copy()

    def get_particles(self) -> List[Particle]:
        """Snapshot of the population as independent Particle objects."""
        return [
            Particle(x=float(p[0]), y=float(p[1]), vx=float(v[0]), vy=float(v[1]),
                     weight=float(w))
            for p, v, w in zip(self._positions, self._velocities, self._weights)
        ]

    def __len__(self) -> int:
        return self.n_particles

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def effective_sample_size(self) -> float:
        """(sum w)^2 / sum w^2; equals N for uniform weights, 0 if all are zero."""
        sq = np.sum(self._weights ** 2)
        if sq == 0.0:
            return 0.0
        return float(self._weights.sum() ** 2 / sq)

    def get_covariance(self) -> np.ndarray:
        """Weighted 2x2 position covariance about the current estimate."""
        total = self._weights.sum()
        if total == 0.0:
            return np.zeros((2, 2))
        diff = self._positions - self._estimate
        return (diff * (self._weights / total)[:, np.newaxis]).T @ diff


def _sensor_index(obs: ObservationLike) -> Optional[int]:
    try:
        return int(obs[0])
    except (TypeError, ValueError, OverflowError, IndexError):
        return None
