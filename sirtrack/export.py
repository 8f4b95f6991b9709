"""sirtrack CSV export: per-step particle state dumps.

One row per particle per exported step::

    TimeStep,ParticleID,X,Y,Weight,TrueX,TrueY,EstimateX,EstimateY

Floats are written with six decimals.
"""

from __future__ import annotations

import csv
import os
import numpy as np
from dataclasses import dataclass
from typing import IO, List, Sequence, Union

from .particle_filter import ParticleFilter

HEADER = ['TimeStep', 'ParticleID', 'X', 'Y', 'Weight',
          'TrueX', 'TrueY', 'EstimateX', 'EstimateY']


@dataclass
class ParticleStateRecord:
    """One exported row."""
    time_step: int
    particle_id: int
    x: float
    y: float
    weight: float
    true_x: float
    true_y: float
    estimate_x: float
    estimate_y: float


class ParticleStateWriter:
    """Stream particle states to CSV.

    Accepts a path (opened and closed by the writer) or an open text file
    (left open). The header is written on construction.

    Usage::

        with ParticleStateWriter("particle_states.csv") as writer:
            writer.write_step(t, pf, sim.true_position, pf.get_estimate())
    """

    def __init__(self, target: Union[str, os.PathLike, IO[str]]):
        if isinstance(target, (str, os.PathLike)):
            self._file = open(target, 'w', newline='')
            self._owns_file = True
        else:
            self._file = target
            self._owns_file = False
        self._writer = csv.writer(self._file, lineterminator='\n')
        self._writer.writerow(HEADER)
        self.rows_written = 0

    def write_step(self, time_step: int, particle_filter: ParticleFilter,
                   true_position: Sequence[float], estimate: Sequence[float]) -> None:
        """Write one row per particle for this time step."""
        positions = particle_filter.positions
        weights = particle_filter.weights
        tx, ty = float(true_position[0]), float(true_position[1])
        ex, ey = float(estimate[0]), float(estimate[1])

        for i, ((x, y), w) in enumerate(zip(positions, weights)):
            self._writer.writerow([
                int(time_step), i,
                f"{x:.6f}", f"{y:.6f}", f"{w:.6f}",
                f"{tx:.6f}", f"{ty:.6f}", f"{ex:.6f}", f"{ey:.6f}",
            ])
        self._file.flush()
        self.rows_written += len(weights)

    def close(self) -> None:
        if self._owns_file and not self._file.closed:
            self._file.close()

    def __enter__(self) -> "ParticleStateWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def read_particle_states(filepath: str) -> List[ParticleStateRecord]:
    """Load an exported CSV back into records, in file order."""
    records = []
    with open(filepath, newline='') as f:
        reader = csv.DictReader(f)
        for row in reader:
            records.append(ParticleStateRecord(
                time_step=int(row['TimeStep']),
                particle_id=int(row['ParticleID']),
                x=float(row['X']),
                y=float(row['Y']),
                weight=float(row['Weight']),
                true_x=float(row['TrueX']),
                true_y=float(row['TrueY']),
                estimate_x=float(row['EstimateX']),
                estimate_y=float(row['EstimateY']),
            ))
    return records


def records_to_arrays(records: List[ParticleStateRecord]) -> dict:
    """Column arrays keyed by header name, for analysis."""
    return {
        'TimeStep': np.array([r.time_step for r in records], dtype=int),
        'ParticleID': np.array([r.particle_id for r in records], dtype=int),
        'X': np.array([r.x for r in records]),
        'Y': np.array([r.y for r in records]),
        'Weight': np.array([r.weight for r in records]),
        'TrueX': np.array([r.true_x for r in records]),
        'TrueY': np.array([r.true_y for r in records]),
        'EstimateX': np.array([r.estimate_x for r in records]),
        'EstimateY': np.array([r.estimate_y for r in records]),
    }
