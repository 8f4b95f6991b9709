"""sirtrack v1.0.0: Bearing-only target tracking with an SIR particle filter.

Quick Start::

    from sirtrack import ParticleFilter, MotionModel, Sensor, Simulator
    pf = ParticleFilter(500, 0.0, 0.0, 300.0, MotionModel(12, 20), rng=42)
    for step in range(n_steps):
        pf.motion_update()
        if observations:
            pf.update_weights(observations, sensors)
            pf.resample()
        x, y = pf.get_estimate()
"""

__version__ = "1.0.0"
__license__ = "AGPL-3.0-or-later"

# ---------------------------------------------------------------------------
# Estimation core
# ---------------------------------------------------------------------------
from .numerics import wrap_to_pi, gaussian_pdf, bearing_to, make_rng
from .particle import Particle
from .motion import MotionModel
from .sensor import Observation, Sensor, as_observation
from .particle_filter import (
    ParticleFilter,
    ParticleFilterConfig,
    DegenerateWeightsError,
    systematic_resample,
)

# ---------------------------------------------------------------------------
# Simulation, export, configuration
# ---------------------------------------------------------------------------
from .simulator import Simulator
from .export import (
    ParticleStateRecord,
    ParticleStateWriter,
    read_particle_states,
    records_to_arrays,
)
from .config import ScenarioConfig

__all__ = [
    "__version__",
    # Core
    "ParticleFilter", "ParticleFilterConfig", "DegenerateWeightsError",
    "systematic_resample", "Particle", "MotionModel",
    "Observation", "Sensor", "as_observation",
    # Numerics
    "wrap_to_pi", "gaussian_pdf", "bearing_to", "make_rng",
    # Collaborators
    "Simulator", "ParticleStateRecord", "ParticleStateWriter",
    "read_particle_states", "records_to_arrays", "ScenarioConfig",
]
