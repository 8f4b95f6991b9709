"""sirtrack world simulator: ground truth target and synthetic sensor reports.

The target moves at constant speed and course. Sensors are indexed by the
order they are added; that index is the ``sensor_id`` carried by each
observation and the index the filter uses to look the sensor up again.
"""

from __future__ import annotations

import numpy as np
from typing import List

from .numerics import SeedLike, make_rng
from .sensor import Observation, Sensor


class Simulator:
    """Single constant-velocity target observed by a set of bearing sensors.

    Args:
        initial_x, initial_y: Initial true position [m]
        speed: Target speed [m/s]
        course_deg: Course, counter-clockwise from +x [deg]
        rng: Generator or seed for sensor noise
    """

    def __init__(self, initial_x: float, initial_y: float, speed: float,
                 course_deg: float, rng: SeedLike = None):
        self._true = np.array([initial_x, initial_y], dtype=float)
        self.speed = float(speed)
        self.course_deg = float(course_deg)
        self.rng = make_rng(rng)
        self._sensors: List[Sensor] = []

    def add_sensor(self, sensor: Sensor) -> int:
        """Register a sensor and return its id."""
        self._sensors.append(sensor)
        return len(self._sensors) - 1

    @property
    def sensors(self) -> List[Sensor]:
        return list(self._sensors)

    @property
    def true_position(self) -> np.ndarray:
        return self._true.copy()

    @property
    def true_velocity(self) -> np.ndarray:
        course = np.radians(self.course_deg)
        return self.speed * np.array([np.cos(course), np.sin(course)])

    def step(self, dt: float = 1.0) -> None:
        """Advance the true target by dt seconds."""
        self._true = self._true + self.true_velocity * dt

    def get_observations(self) -> List[Observation]:
        """One observation per sensor currently in range, in sensor order."""
        x, y = self._true
        observations = []
        for sensor_id, sensor in enumerate(self._sensors):
            if not sensor.can_detect(x, y):
                continue
            obs = sensor.observe(x, y, self.rng, sensor_id=sensor_id)
            if obs is not None:
                observations.append(obs)
        return observations
