#!/usr/bin/env python3
"""
sirtrack Demo - Bearing-Only Tracking Run
==========================================

Run with:
    python -m sirtrack.demo                      # Default two-sensor scenario
    python -m sirtrack.demo --seed 7 --quiet     # Reproducible, summary only
    python -m sirtrack.demo --config run.json    # Scenario from JSON file

A single target crosses the coverage of two bearing sensors. The filter
predicts every step and fuses bearings every ``observation_step`` steps
when at least one sensor sees the target. Particle states are exported to
CSV each step.
"""

from __future__ import annotations

import argparse
import logging
import sys
import numpy as np
from dataclasses import dataclass
from typing import List, Optional

from .config import ScenarioConfig
from .export import ParticleStateWriter
from .particle_filter import DegenerateWeightsError, ParticleFilter
from .simulator import Simulator

logger = logging.getLogger(__name__)


@dataclass
class StepResult:
    """Per-step outcome of a scenario run."""
    time_step: int
    true_position: np.ndarray
    estimate: np.ndarray
    n_observations: int
    error: float

    @property
    def observed(self) -> bool:
        return self.n_observations > 0


def relative_error(estimate, truth) -> float:
    """|estimate - truth| / (|truth| + 1e-6)."""
    estimate = np.asarray(estimate, dtype=float)
    truth = np.asarray(truth, dtype=float)
    return float(np.linalg.norm(estimate - truth) / (np.linalg.norm(truth) + 1e-6))


def build_scenario(config: ScenarioConfig):
    """Create (filter, simulator) with independent generators from one seed."""
    filter_seed, sim_seed = np.random.SeedSequence(config.seed).spawn(2)
    pf = ParticleFilter(
        config.n_particles, config.init_x, config.init_y, config.init_stddev,
        config.build_motion_model(),
        config=config.build_filter_config(),
        rng=np.random.default_rng(filter_seed),
    )
    sim = Simulator(config.target_x, config.target_y, config.target_speed,
                    config.target_course_deg, rng=np.random.default_rng(sim_seed))
    for sensor in config.build_sensors():
        sim.add_sensor(sensor)
    return pf, sim


def run_scenario(config: ScenarioConfig,
                 writer: Optional[ParticleStateWriter] = None,
                 verbose: bool = True) -> List[StepResult]:
    """Run the predict / weight / resample loop over the whole scenario.

    Raises:
        DegenerateWeightsError: if resampling finds all weights zero
    """
    pf, sim = build_scenario(config)
    results = []

    for t in range(config.time_steps):
        sim.step(config.dt)
        truth = sim.true_position

        observations = []
        if t % config.observation_step == 0:
            observations = sim.get_observations()

        pf.motion_update(config.dt)
        if observations:
            pf.update_weights(observations, sim.sensors)
        estimate = pf.get_estimate()
        if writer is not None:
            writer.write_step(t, pf, truth, estimate)
        if observations:
            logger.debug("t=%d ESS before resample: %.1f", t, pf.effective_sample_size())
            pf.resample()

        err = relative_error(estimate, truth)
        results.append(StepResult(t, truth, estimate, len(observations), err))

        if verbose:
            tag = "OBS" if observations else "PRED"
            obs_text = (f"{len(observations)} observations" if observations
                        else "No observations")
            print(f"Time {t} [{tag}] | True: ({truth[0]:.2f}, {truth[1]:.2f}) | "
                  f"{obs_text} | Estimate: ({estimate[0]:.2f}, {estimate[1]:.2f})")
            print(f"Error: {err:.4f}")

    return results


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='sirtrack Demo - bearing-only SIR particle filter',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m sirtrack.demo                       # Default scenario
  python -m sirtrack.demo --particles 2000      # Larger population
  python -m sirtrack.demo --csv none            # No CSV export
""")
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='JSON scenario file (keys = ScenarioConfig fields)')
    parser.add_argument('--particles', '-n', type=int, default=None,
                        help='Number of particles')
    parser.add_argument('--steps', type=int, default=None,
                        help='Number of time steps')
    parser.add_argument('--observation-step', type=int, default=None,
                        help='Fuse observations every k steps')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed (default: nondeterministic)')
    parser.add_argument('--csv', type=str, default=None,
                        help="CSV output path, or 'none' to disable")
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Only print the summary')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: WARNING)')
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s %(name)s %(levelname)s: %(message)s')

    try:
        config = ScenarioConfig.from_json(args.config) if args.config else ScenarioConfig()
        overrides = {
            'n_particles': args.particles,
            'time_steps': args.steps,
            'observation_step': args.observation_step,
            'seed': args.seed,
        }
        data = config.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        if args.csv is not None:
            data['csv_path'] = None if args.csv.lower() == 'none' else args.csv
        config = ScenarioConfig.from_dict(data)
    except (OSError, TypeError, ValueError) as e:
        print(f"Invalid scenario: {e}", file=sys.stderr)
        return 1

    logger.info("Running scenario: %d particles, %d steps, %d sensors",
                config.n_particles, config.time_steps, len(config.sensors))

    try:
        if config.csv_path:
            with ParticleStateWriter(config.csv_path) as writer:
                results = run_scenario(config, writer, verbose=not args.quiet)
        else:
            results = run_scenario(config, verbose=not args.quiet)
    except DegenerateWeightsError as e:
        print(f"Filter diverged: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error writing states to CSV, {e}", file=sys.stderr)
        return 1

    if results:
        errors = np.array([r.error for r in results])
        n_obs = sum(1 for r in results if r.observed)
        print(f"━━━ Steps: {len(results)} | Observation steps: {n_obs} | "
              f"Mean relative error: {errors.mean():.4f} | Final: {errors[-1]:.4f} ━━━")
    if config.csv_path:
        print(f"  Particle states saved to: {config.csv_path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
