"""sirtrack motion model: constant-velocity particle propagation.

Each particle carries its own velocity hypothesis; prediction is a pure
kinematic step without process noise. Diversity comes from roughening at
resample time, not from the motion model.
"""

from __future__ import annotations

import numpy as np

from .numerics import TWO_PI
from .particle import Particle


class MotionModel:
    """Constant-velocity 2D motion with bounded initial speeds.

    Args:
        min_speed: Lower bound for sampled initial speeds [m/s]
        max_speed: Upper bound for sampled initial speeds [m/s]

    The bounds only shape initialization. Resampling perturbs velocities
    freely afterwards.
    """

    def __init__(self, min_speed: float, max_speed: float):
        if min_speed < 0 or max_speed < 0:
            raise ValueError("Speed bounds must be non-negative")
        if min_speed > max_speed:
            raise ValueError(
                f"min_speed ({min_speed}) exceeds max_speed ({max_speed})")
        self.min_speed = float(min_speed)
        self.max_speed = float(max_speed)

    def predict(self, particle: Particle, dt: float = 1.0) -> None:
        """Advance one particle in place: position += velocity * dt."""
        particle.set_position(particle.x + particle.vx * dt,
                              particle.y + particle.vy * dt)

    def propagate(self, positions: np.ndarray, velocities: np.ndarray,
                  dt: float = 1.0) -> np.ndarray:
        """Vectorised predict over a population.

        Args:
            positions: (N, 2) positions
            velocities: (N, 2) velocities
            dt: Elapsed time [s]

        Returns:
            New (N, 2) positions; inputs are not modified.
        """
        return positions + velocities * dt

    def sample_velocities(self, rng: np.random.Generator, n: int) -> np.ndarray:
        """Draw n velocities: speed ~ U(min, max), heading ~ U(0, 2*pi)."""
        speed = rng.uniform(self.min_speed, self.max_speed, n)
        heading = rng.uniform(0.0, TWO_PI, n)
        return np.column_stack([speed * np.cos(heading), speed * np.sin(heading)])

    def __repr__(self) -> str:
        return f"MotionModel(min_speed={self.min_speed}, max_speed={self.max_speed})"
