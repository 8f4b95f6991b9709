"""Tests for the bearing sensor, motion model and particle value type."""
import dataclasses
import numpy as np
import pytest
import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from sirtrack.particle import Particle
from sirtrack.motion import MotionModel
from sirtrack.sensor import Sensor, Observation, as_observation
from sirtrack.numerics import gaussian_pdf


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def sensor():
    """Sensor at the origin, 10 deg bearing noise."""
    return Sensor(x=0.0, y=0.0, max_range=1000.0, bearing_std_deg=10.0, position_std=50.0)


@pytest.fixture
def rng():
    return np.random.default_rng(2024)


# =============================================================================
# PARTICLE
# =============================================================================

class TestParticle:

    def test_copy_is_independent(self):
        """Copy has identical fields and shares no state."""
        p = Particle(1.0, 2.0, 3.0, 4.0, 0.25)
        q = p.copy()
        assert q == p
        q.set_position(10.0, 20.0)
        q.weight = 0.5
        assert (p.x, p.y, p.weight) == (1.0, 2.0, 0.25)

    def test_accessors_return_copies(self):
        p = Particle(1.0, 2.0, 3.0, 4.0)
        pos = p.position
        pos[0] = 99.0
        vel = p.velocity
        vel[1] = 99.0
        np.testing.assert_array_equal(p.position, [1.0, 2.0])
        np.testing.assert_array_equal(p.velocity, [3.0, 4.0])


# =============================================================================
# MOTION MODEL
# =============================================================================

class TestMotionModel:

    def test_predict_unit_step(self):
        """Default step integrates with dt = 1."""
        model = MotionModel(12.0, 20.0)
        p = Particle(0.0, 0.0, 3.0, 4.0)
        model.predict(p)
        np.testing.assert_allclose(p.position, [3.0, 4.0])
        np.testing.assert_allclose(p.velocity, [3.0, 4.0])

    def test_predict_explicit_dt(self):
        model = MotionModel(0.0, 5.0)
        p = Particle(1.0, 1.0, 2.0, -1.0)
        model.predict(p, dt=2.5)
        np.testing.assert_allclose(p.position, [6.0, -1.5])

    def test_propagate_does_not_modify_inputs(self):
        model = MotionModel(0.0, 5.0)
        pos = np.array([[0.0, 0.0], [1.0, 1.0]])
        vel = np.array([[1.0, 0.0], [0.0, -1.0]])
        new = model.propagate(pos, vel, 2.0)
        np.testing.assert_allclose(new, [[2.0, 0.0], [1.0, -1.0]])
        np.testing.assert_allclose(pos, [[0.0, 0.0], [1.0, 1.0]])

    def test_sample_velocities_within_speed_bounds(self, rng):
        model = MotionModel(12.0, 20.0)
        v = model.sample_velocities(rng, 5000)
        assert v.shape == (5000, 2)
        speeds = np.hypot(v[:, 0], v[:, 1])
        assert np.all(speeds >= 12.0 - 1e-9)
        assert np.all(speeds <= 20.0 + 1e-9)
        # Headings cover all four quadrants
        assert np.any((v[:, 0] > 0) & (v[:, 1] > 0))
        assert np.any((v[:, 0] < 0) & (v[:, 1] < 0))

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            MotionModel(20.0, 12.0)
        with pytest.raises(ValueError):
            MotionModel(-1.0, 12.0)


# =============================================================================
# SENSOR
# =============================================================================

class TestSensorDetection:

    def test_can_detect_inclusive_range(self):
        """Detection range is inclusive."""
        s = Sensor(0.0, 0.0, 100.0, 5.0, 10.0)
        assert s.can_detect(100.0, 0.0)
        assert s.can_detect(60.0, 80.0)
        assert not s.can_detect(100.1, 0.0)

    def test_observe_out_of_range_is_none(self, sensor, rng):
        assert sensor.observe(5000.0, 0.0, rng) is None

    def test_observe_in_range(self, sensor, rng):
        obs = sensor.observe(100.0, 100.0, rng, sensor_id=3)
        assert isinstance(obs, Observation)
        assert obs.sensor_id == 3
        assert -np.pi < obs.bearing <= np.pi

    def test_observe_noise_statistics(self, sensor, rng):
        """Bearing noise is centred on the true bearing with the configured spread."""
        obs = [sensor.observe(100.0, 100.0, rng) for _ in range(2000)]
        bearings = np.array([o.bearing for o in obs])
        xs = np.array([o.x for o in obs])
        assert np.mean(bearings) == pytest.approx(np.pi / 4, abs=0.02)
        assert np.std(bearings) == pytest.approx(np.radians(10.0), rel=0.1)
        assert np.mean(xs) == pytest.approx(100.0, abs=5.0)

    def test_observed_bearing_wraps(self, rng):
        """Target just across the -x axis still yields a bearing in (-pi, pi]."""
        s = Sensor(0.0, 0.0, 1000.0, 20.0, 1.0)
        for _ in range(200):
            obs = s.observe(-100.0, 0.0, rng)
            assert -np.pi < obs.bearing <= np.pi

    def test_sensor_is_immutable(self, sensor):
        with pytest.raises(dataclasses.FrozenInstanceError):
            sensor.x = 5.0

    def test_invalid_noise(self):
        with pytest.raises(ValueError):
            Sensor(0.0, 0.0, 100.0, 0.0, 1.0)


class TestSensorLikelihood:

    def test_peak_on_bearing_ray(self, sensor):
        """Particle exactly on the measured bearing gets 1/sqrt(2 pi sigma^2)."""
        obs = Observation(0, np.pi / 4, 0.0, 0.0)
        p = Particle(10.0, 10.0)
        sigma = np.radians(10.0)
        assert sensor.likelihood(obs, p) == pytest.approx(
            1.0 / np.sqrt(2 * np.pi * sigma ** 2), rel=1e-12)

    def test_strictly_decreasing_with_deviation(self, sensor):
        obs = Observation(0, np.pi / 4, 0.0, 0.0)
        offsets = [0.0, 0.05, 0.1, 0.2, 0.4, 0.8]
        values = [sensor.likelihood(obs, Particle(50 * np.cos(np.pi / 4 + d),
                                                  50 * np.sin(np.pi / 4 + d)))
                  for d in offsets]
        assert all(a > b for a, b in zip(values, values[1:]))

    def test_symmetric_about_bearing(self, sensor):
        obs = Observation(0, 0.3, 0.0, 0.0)
        left = sensor.likelihood(obs, Particle(100 * np.cos(0.5), 100 * np.sin(0.5)))
        right = sensor.likelihood(obs, Particle(100 * np.cos(0.1), 100 * np.sin(0.1)))
        assert left == pytest.approx(right, rel=1e-9)

    def test_residual_wraps_across_pi(self, sensor):
        """Bearings either side of the -x axis are close, not 2*pi apart."""
        obs = Observation(0, np.pi - 0.01, 0.0, 0.0)
        p = Particle(100 * np.cos(-np.pi + 0.01), 100 * np.sin(-np.pi + 0.01))
        expected = gaussian_pdf(0.02, np.radians(10.0))
        assert sensor.likelihood(obs, p) == pytest.approx(expected, rel=1e-6)

    def test_independent_of_range(self, sensor):
        """Bearing-only: distance along the ray does not matter."""
        obs = Observation(0, 0.2, 5.0, 5.0)
        near = sensor.likelihood(obs, Particle(10 * np.cos(0.25), 10 * np.sin(0.25)))
        far = sensor.likelihood(obs, Particle(900 * np.cos(0.25), 900 * np.sin(0.25)))
        assert near == pytest.approx(far, rel=1e-9)

    def test_plain_tuple_matches_observation(self, sensor):
        p = Particle(30.0, 40.0)
        a = sensor.likelihood(Observation(0, 0.9, 0.0, 0.0), p)
        b = sensor.likelihood((0, 0.9, 0.0, 0.0), p)
        assert a == b

    @pytest.mark.parametrize("bad", [(), (0,), (0, 0.5), (0, 0.5, 1.0), ("a", "b", "c", "d")])
    def test_malformed_observation_zero(self, sensor, bad):
        """Under-length or non-numeric reports give zero likelihood, no exception."""
        assert sensor.likelihood(bad, Particle(10.0, 10.0)) == 0.0
        np.testing.assert_array_equal(
            sensor.likelihoods(bad, np.ones((4, 2))), np.zeros(4))

    def test_vectorised_matches_scalar(self, sensor):
        obs = Observation(0, 1.0, 0.0, 0.0)
        positions = np.array([[10.0, 10.0], [-5.0, 3.0], [0.0, -8.0]])
        vec = sensor.likelihoods(obs, positions)
        scalar = [sensor.likelihood(obs, Particle(x, y)) for x, y in positions]
        np.testing.assert_allclose(vec, scalar)


class TestAsObservation:

    def test_array_input(self):
        obs = as_observation(np.array([1.0, 0.5, 2.0, 3.0]))
        assert obs == Observation(1, 0.5, 2.0, 3.0)

    def test_short_input(self):
        assert as_observation([1, 2]) is None

    @pytest.mark.parametrize("bad_id", [float('inf'), float('-inf')])
    def test_non_integer_sensor_id(self, sensor, bad_id):
        """Overflowing ids give None and a zero likelihood, not an exception."""
        assert as_observation((bad_id, 0.5, 0.0, 0.0)) is None
        assert sensor.likelihood((bad_id, 0.5, 0.0, 0.0), Particle(10.0, 10.0)) == 0.0
