"""Single weighted hypothesis of the target state."""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass, replace


@dataclass
class Particle:
    """One particle: position, constant velocity and importance weight.

    Attributes:
        x, y: Position [m]
        vx, vy: Velocity [m/s], fixed until resampling redraws it
        weight: Importance weight (>= 0, owned by the filter)
    """
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    weight: float = 1.0

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y])

    @property
    def velocity(self) -> np.ndarray:
        return np.array([self.vx, self.vy])

    def set_position(self, x: float, y: float) -> None:
        self.x = float(x)
        self.y = float(y)

    def copy(self) -> "Particle":
        return replace(self)
