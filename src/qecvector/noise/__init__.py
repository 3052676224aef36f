"""Noise channels and gate-error settings for QuantumSystem."""

from .gate_errors import (
    GateErrorConfig,
    GateErrorScope,
    GateErrorType,
    pauli_for_gate_error,
)
from .models import (
    NoiseConfig,
    NoiseEvent,
    NoiseMode,
    NoiseType,
    apply_noise,
    describe_noise,
    inject_error,
    inject_errors,
    repetition_logical_error_rate,
    shor_logical_error_rate,
)

__all__ = [
    "GateErrorConfig",
    "GateErrorScope",
    "GateErrorType",
    "pauli_for_gate_error",
    "NoiseConfig",
    "NoiseEvent",
    "NoiseMode",
    "NoiseType",
    "apply_noise",
    "describe_noise",
    "inject_error",
    "inject_errors",
    "repetition_logical_error_rate",
    "shor_logical_error_rate",
]
