"""qecvector: state-vector simulation of small quantum error-correcting codes.

The 3-qubit repetition code and the 9-qubit Shor code are driven through
encode -> noise -> syndrome -> correction -> decode on an exact amplitude
vector, with honest ancilla-based syndrome extraction.
"""
import logging

from qecvector.exceptions import (
    ConfigurationError,
    DimensionError,
    NormalizationError,
    QECSimulationError,
    SequenceError,
)
from qecvector.noise import (
    GateErrorConfig,
    GateErrorScope,
    GateErrorType,
    NoiseConfig,
    NoiseEvent,
    NoiseMode,
    NoiseType,
)
from qecvector.quantum import (
    GateName,
    GateOperation,
    QuantumStep,
    QuantumSystem,
    StateVector,
    StepType,
)
from qecvector.codes import (
    CodeType,
    LogicalState,
    RepetitionCode,
    ShorCode91,
    create_code,
)
from qecvector.experiments import (
    CustomCircuitResult,
    CustomGateStep,
    QECSimulator,
    SimulationPhase,
    SimulationResult,
    SimulatorConfig,
    SnapshotPolicy,
    isolate_error_syndrome,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DimensionError",
    "NormalizationError",
    "QECSimulationError",
    "SequenceError",
    "GateErrorConfig",
    "GateErrorScope",
    "GateErrorType",
    "NoiseConfig",
    "NoiseEvent",
    "NoiseMode",
    "NoiseType",
    "GateName",
    "GateOperation",
    "QuantumStep",
    "QuantumSystem",
    "StateVector",
    "StepType",
    "CodeType",
    "LogicalState",
    "RepetitionCode",
    "ShorCode91",
    "create_code",
    "CustomCircuitResult",
    "CustomGateStep",
    "QECSimulator",
    "SimulationPhase",
    "SimulationResult",
    "SimulatorConfig",
    "SnapshotPolicy",
    "isolate_error_syndrome",
]
