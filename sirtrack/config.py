"""
config.py - Default tracking scenario and scenario file loading

Scenario files are JSON objects whose keys are ScenarioConfig field names.
Missing keys fall back to the defaults below.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple

from .motion import MotionModel
from .particle_filter import ParticleFilterConfig
from .sensor import Sensor


# ═══════════════════════════════════════════════════════════════════════════════
# FILTER
# ═══════════════════════════════════════════════════════════════════════════════
N_PARTICLES = 500
INIT_X = 0.0
INIT_Y = 0.0
INIT_STDDEV = 300.0
MIN_SPEED = 12.0
MAX_SPEED = 20.0

# ═══════════════════════════════════════════════════════════════════════════════
# TARGET
# ═══════════════════════════════════════════════════════════════════════════════
TARGET_X = 0.0
TARGET_Y = 0.0
TARGET_SPEED = 15.0
TARGET_COURSE_DEG = 45.0

# ═══════════════════════════════════════════════════════════════════════════════
# RUN
# ═══════════════════════════════════════════════════════════════════════════════
TIME_STEPS = 200
DT = 1.0
OBSERVATION_STEP = 10
CSV_NAME = "particle_states.csv"

# (x, y, max_range, bearing_std_deg, position_std)
SENSORS = [
    (1500.0, 3000.0, 2500.0, 15.0, 100.0),
    (0.0, 1500.0, 2500.0, 15.0, 100.0),
]


@dataclass
class ScenarioConfig:
    """Everything the driver needs to run one tracking scenario."""
    n_particles: int = N_PARTICLES
    init_x: float = INIT_X
    init_y: float = INIT_Y
    init_stddev: float = INIT_STDDEV
    min_speed: float = MIN_SPEED
    max_speed: float = MAX_SPEED
    target_x: float = TARGET_X
    target_y: float = TARGET_Y
    target_speed: float = TARGET_SPEED
    target_course_deg: float = TARGET_COURSE_DEG
    time_steps: int = TIME_STEPS
    dt: float = DT
    observation_step: int = OBSERVATION_STEP
    sensors: List[Tuple[float, float, float, float, float]] = field(
        default_factory=lambda: list(SENSORS))
    seed: Optional[int] = None
    csv_path: Optional[str] = CSV_NAME
    position_perturbation: float = 5.0
    velocity_perturbation: float = 0.5

    def __post_init__(self):
        if self.n_particles < 1:
            raise ValueError("n_particles must be >= 1")
        if self.observation_step < 1:
            raise ValueError("observation_step must be >= 1")
        if self.time_steps < 0:
            raise ValueError("time_steps must be non-negative")
        self.sensors = [tuple(float(v) for v in s) for s in self.sensors]
        for s in self.sensors:
            if len(s) != 5:
                raise ValueError(
                    f"Sensor entry needs (x, y, max_range, bearing_std_deg, position_std), got {s}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScenarioConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown scenario keys: {sorted(unknown)}")
        return cls(**data)

    @classmethod
    def from_json(cls, filepath: str) -> "ScenarioConfig":
        with open(filepath) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("Scenario file must contain a JSON object")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d['sensors'] = [list(s) for s in self.sensors]
        return d

    def build_sensors(self) -> List[Sensor]:
        return [Sensor(*s) for s in self.sensors]

    def build_motion_model(self) -> MotionModel:
        return MotionModel(self.min_speed, self.max_speed)

    def build_filter_config(self) -> ParticleFilterConfig:
        return ParticleFilterConfig(
            dt=self.dt,
            position_perturbation=self.position_perturbation,
            velocity_perturbation=self.velocity_perturbation,
        )
