# src/qecvector/experiments/snapshots.py
"""
Snapshot retention policy for simulator undo/redo.

Every snapshot is a full deep copy of the simulator state, O(2^n) memory.
Small systems keep all of them. Above ``qubit_threshold`` physical qubits
(the 10-qubit Shor register crosses the default of 8), phase-boundary
snapshots are kept and intermediate snapshots (one per custom gate) only
every ``interval``-th time. With ``keep_phase_boundaries=False`` boundary
snapshots share the intermediate counter. The simulator always keeps the
first snapshot of a run.
"""
from __future__ import annotations

from dataclasses import dataclass

from qecvector.exceptions import ConfigurationError


@dataclass(frozen=True)
class SnapshotPolicy:
    """Which snapshots the simulator retains.

    Attributes
    ----------
    qubit_threshold : int
        Systems with at most this many physical qubits keep every snapshot.
    interval : int
        Above the threshold, keep one in ``interval`` intermediate snapshots.
    keep_phase_boundaries : bool
        Always keep phase-transition snapshots. When False they are decimated
        like intermediate ones.
    """
    qubit_threshold: int = 8
    interval: int = 4
    keep_phase_boundaries: bool = True

    def __post_init__(self):
        if self.qubit_threshold < 0:
            raise ConfigurationError(
                f"qubit_threshold must be >= 0. Got {self.qubit_threshold}"
            )
        if self.interval < 1:
            raise ConfigurationError(f"interval must be >= 1. Got {self.interval}")

    def should_keep(self, num_qubits: int, boundary: bool, counter: int) -> bool:
        """Decide whether to store a snapshot.

        Parameters
        ----------
        num_qubits : int
            Physical qubit count of the system being snapshotted.
        boundary : bool
            True for phase-transition snapshots.
        counter : int
            1-based count of decimatable snapshot requests so far.
        """
        if num_qubits <= self.qubit_threshold:
            return True
        if boundary and self.keep_phase_boundaries:
            return True
        return counter % self.interval == 0
