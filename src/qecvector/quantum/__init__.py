"""State-vector engine: amplitudes, gates and the QuantumSystem wrapper."""

from .state_vector import StateVector
from .gates import GateName, GateOperation, apply_gate
from .system import (
    GateErrorDetails,
    QuantumStep,
    QuantumSystem,
    QubitInfo,
    QubitRole,
    StepType,
)

__all__ = [
    "StateVector",
    "GateName",
    "GateOperation",
    "apply_gate",
    "GateErrorDetails",
    "QuantumStep",
    "QuantumSystem",
    "QubitInfo",
    "QubitRole",
    "StepType",
]
