# src/qecvector/noise/gate_errors.py
"""
Gate-error configuration.

Gate errors model imperfect gate execution: after an intentional gate runs,
each of its target qubits may additionally receive a Pauli error. The
QuantumSystem performs the draw; this module only describes *what* to draw.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np

from qecvector.exceptions import ConfigurationError
from qecvector.utils import coerce_enum


class GateErrorType(Enum):
    """Pauli channel applied after a faulty gate."""
    BIT_FLIP = "bit-flip"
    PHASE_FLIP = "phase-flip"
    BIT_PHASE_FLIP = "bit-phase-flip"
    DEPOLARIZING = "depolarizing"
    NONE = "none"


class GateErrorScope(Enum):
    """Which gates are eligible for gate errors."""
    ALL = "all"
    SINGLE_QUBIT = "single-qubit"
    TWO_QUBIT = "two-qubit"

    def matches(self, arity: int) -> bool:
        if self is GateErrorScope.SINGLE_QUBIT:
            return arity == 1
        if self is GateErrorScope.TWO_QUBIT:
            return arity == 2
        return True


_FIXED_PAULI = {
    GateErrorType.BIT_FLIP: "X",
    GateErrorType.PHASE_FLIP: "Z",
    GateErrorType.BIT_PHASE_FLIP: "Y",
}


@dataclass
class GateErrorConfig:
    """Gate-error settings of a QuantumSystem.

    Attributes
    ----------
    enabled : bool
        Master switch.
    type : GateErrorType
        Channel applied when an error fires.
    probability : float
        Per-qubit probability for each eligible gate application.
    apply_to : GateErrorScope
        Restrict errors to single-qubit or two-qubit gates.
    """
    enabled: bool = False
    type: Union[GateErrorType, str] = GateErrorType.DEPOLARIZING
    probability: float = 0.0
    apply_to: Union[GateErrorScope, str] = GateErrorScope.ALL

    def __post_init__(self):
        self.type = coerce_enum(GateErrorType, self.type, "gate error type")
        self.apply_to = coerce_enum(GateErrorScope, self.apply_to, "gate error scope")
        self.probability = float(self.probability)
        if not 0.0 <= self.probability <= 1.0:
            raise ConfigurationError(
                f"Gate error probability must be in [0, 1]. Got {self.probability}"
            )

    @property
    def active(self) -> bool:
        return (
            self.enabled
            and self.probability > 0.0
            and self.type is not GateErrorType.NONE
        )

    def applies_to(self, arity: int) -> bool:
        return self.active and self.apply_to.matches(arity)


def pauli_for_gate_error(
    error_type: GateErrorType, rng: np.random.Generator
) -> Optional[str]:
    """Pauli label ("X", "Y" or "Z") to apply for a fired gate error.

    Depolarizing errors pick uniformly among the three Paulis; ``NONE``
    returns None.
    """
    if error_type is GateErrorType.DEPOLARIZING:
        return ("X", "Y", "Z")[int(rng.integers(3))]
    return _FIXED_PAULI.get(error_type)


__all__ = [
    "GateErrorType",
    "GateErrorScope",
    "GateErrorConfig",
    "pauli_for_gate_error",
]
