"""Simulation control: phase state machine, snapshots, reconciliation, Monte Carlo."""

from .reconciliation import isolate_error_syndrome
from .snapshots import SnapshotPolicy
from .simulator import (
    CustomCircuitResult,
    CustomGateStep,
    QECSimulator,
    SimulationPhase,
    SimulationResult,
    SimulatorConfig,
    SimulatorState,
    requires_phase,
)
from .monte_carlo import (
    MonteCarloResult,
    QBERPoint,
    generate_qber_data,
    run_monte_carlo_simulation,
)

__all__ = [
    "isolate_error_syndrome",
    "SnapshotPolicy",
    "CustomCircuitResult",
    "CustomGateStep",
    "QECSimulator",
    "SimulationPhase",
    "SimulationResult",
    "SimulatorConfig",
    "SimulatorState",
    "requires_phase",
    "MonteCarloResult",
    "QBERPoint",
    "generate_qber_data",
    "run_monte_carlo_simulation",
]
