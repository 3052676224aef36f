# src/qecvector/quantum/gates.py
"""
Gate catalogue: names, matrices and the GateOperation record.

Matrices are numpy ``complex128`` arrays. For multi-qubit gates the first
listed qubit is the most significant bit of the row/column index, so
``GateOperation(GateName.CNOT, (control, target))`` applies ``CNOT_MATRIX``
with the control as the high bit.

Clifford gates have a stim counterpart (see ``STIM_NAMES``) and can be
exported to / imported from ``stim.Circuit``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional, Tuple

import numpy as np

from qecvector.utils import coerce_enum

if TYPE_CHECKING:
    from qecvector.quantum.state_vector import StateVector


class GateName(Enum):
    """Supported gates."""
    I = "I"
    X = "X"
    Y = "Y"
    Z = "Z"
    H = "H"
    S = "S"
    S_DAG = "S_DAG"
    T = "T"
    RX = "Rx"
    RY = "Ry"
    RZ = "Rz"
    CNOT = "CNOT"
    CZ = "CZ"
    SWAP = "SWAP"
    TOFFOLI = "Toffoli"


GATE_ARITY: Dict[GateName, int] = {
    GateName.CNOT: 2,
    GateName.CZ: 2,
    GateName.SWAP: 2,
    GateName.TOFFOLI: 3,
}

PARAMETERIZED_GATES = frozenset({GateName.RX, GateName.RY, GateName.RZ})

# =============================================================================
# Matrices
# =============================================================================

_SQRT1_2 = 1.0 / np.sqrt(2.0)

IDENTITY = np.eye(2, dtype=np.complex128)
PAULI_X = np.array([[0, 1], [1, 0]], dtype=np.complex128)
PAULI_Y = np.array([[0, -1j], [1j, 0]], dtype=np.complex128)
PAULI_Z = np.array([[1, 0], [0, -1]], dtype=np.complex128)
HADAMARD = np.array([[_SQRT1_2, _SQRT1_2], [_SQRT1_2, -_SQRT1_2]], dtype=np.complex128)
S_GATE = np.array([[1, 0], [0, 1j]], dtype=np.complex128)
S_DAG_GATE = np.array([[1, 0], [0, -1j]], dtype=np.complex128)
T_GATE = np.array([[1, 0], [0, np.exp(1j * np.pi / 4)]], dtype=np.complex128)

CNOT_MATRIX = np.array(
    [[1, 0, 0, 0],
     [0, 1, 0, 0],
     [0, 0, 0, 1],
     [0, 0, 1, 0]],
    dtype=np.complex128,
)
CZ_MATRIX = np.diag([1, 1, 1, -1]).astype(np.complex128)
SWAP_MATRIX = np.array(
    [[1, 0, 0, 0],
     [0, 0, 1, 0],
     [0, 1, 0, 0],
     [0, 0, 0, 1]],
    dtype=np.complex128,
)
TOFFOLI_MATRIX = np.eye(8, dtype=np.complex128)
TOFFOLI_MATRIX[[6, 7]] = TOFFOLI_MATRIX[[7, 6]]


def rx(theta: float) -> np.ndarray:
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -1j * s], [-1j * s, c]], dtype=np.complex128)


def ry(theta: float) -> np.ndarray:
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -s], [s, c]], dtype=np.complex128)


def rz(theta: float) -> np.ndarray:
    return np.array(
        [[np.exp(-0.5j * theta), 0], [0, np.exp(0.5j * theta)]], dtype=np.complex128
    )


_FIXED_MATRICES: Dict[GateName, np.ndarray] = {
    GateName.I: IDENTITY,
    GateName.X: PAULI_X,
    GateName.Y: PAULI_Y,
    GateName.Z: PAULI_Z,
    GateName.H: HADAMARD,
    GateName.S: S_GATE,
    GateName.S_DAG: S_DAG_GATE,
    GateName.T: T_GATE,
    GateName.CNOT: CNOT_MATRIX,
    GateName.CZ: CZ_MATRIX,
    GateName.SWAP: SWAP_MATRIX,
    GateName.TOFFOLI: TOFFOLI_MATRIX,
}

_ROTATIONS = {GateName.RX: rx, GateName.RY: ry, GateName.RZ: rz}

# stim instruction name for each Clifford gate
STIM_NAMES: Dict[GateName, str] = {
    GateName.I: "I",
    GateName.X: "X",
    GateName.Y: "Y",
    GateName.Z: "Z",
    GateName.H: "H",
    GateName.S: "S",
    GateName.S_DAG: "S_DAG",
    GateName.CNOT: "CX",
    GateName.CZ: "CZ",
    GateName.SWAP: "SWAP",
}

# stim accepts several aliases for the same gate
FROM_STIM_NAMES: Dict[str, GateName] = {v: k for k, v in STIM_NAMES.items()}
FROM_STIM_NAMES.update({
    "CNOT": GateName.CNOT,
    "ZCX": GateName.CNOT,
    "ZCZ": GateName.CZ,
    "SQRT_Z": GateName.S,
    "SQRT_Z_DAG": GateName.S_DAG,
    "H_XZ": GateName.H,
})


# =============================================================================
# Gate operation record
# =============================================================================

@dataclass(frozen=True)
class GateOperation:
    """One gate application.

    Attributes
    ----------
    name : GateName
        Gate to apply (a string value such as ``"CNOT"`` is coerced).
    qubits : Tuple[int, ...]
        Target qubits; for controlled gates the controls come first.
    params : Tuple[float, ...]
        Rotation angle for Rx / Ry / Rz (defaults to 0).
    label : str, optional
        Free-form annotation shown in history descriptions.
    """
    name: GateName
    qubits: Tuple[int, ...]
    params: Tuple[float, ...] = field(default_factory=tuple)
    label: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "name", coerce_enum(GateName, self.name, "gate"))
        object.__setattr__(self, "qubits", tuple(int(q) for q in self.qubits))
        object.__setattr__(self, "params", tuple(float(p) for p in self.params))
        expected = GATE_ARITY.get(self.name, 1)
        if len(self.qubits) != expected:
            raise ValueError(
                f"{self.name.value} acts on {expected} qubit(s). Got {self.qubits}"
            )
        if len(set(self.qubits)) != len(self.qubits):
            raise ValueError(f"{self.name.value} qubits must be distinct. Got {self.qubits}")

    @property
    def arity(self) -> int:
        return len(self.qubits)

    @property
    def is_clifford(self) -> bool:
        return self.name in STIM_NAMES

    @property
    def matrix(self) -> np.ndarray:
        if self.name in _ROTATIONS:
            theta = self.params[0] if self.params else 0.0
            return _ROTATIONS[self.name](theta)
        return _FIXED_MATRICES[self.name]

    def with_qubits(self, *qubits: int) -> "GateOperation":
        """Same gate on different qubits (used to resolve virtual ancillas)."""
        return GateOperation(self.name, tuple(qubits), self.params, self.label)

    def describe(self) -> str:
        args = ", ".join(f"q{q}" for q in self.qubits)
        if self.params:
            args += ", " + ", ".join(f"{p:.4g}" for p in self.params)
        text = f"{self.name.value}({args})"
        return f"{text} [{self.label}]" if self.label else text


def apply_gate(state: "StateVector", op: GateOperation) -> None:
    """Apply ``op`` to ``state`` in place."""
    if op.arity == 1:
        state.apply_single_qubit_gate(op.matrix, op.qubits[0])
    else:
        state.apply_matrix(op.matrix, op.qubits)


__all__ = [
    "GateName",
    "GateOperation",
    "GATE_ARITY",
    "PARAMETERIZED_GATES",
    "STIM_NAMES",
    "FROM_STIM_NAMES",
    "IDENTITY",
    "PAULI_X",
    "PAULI_Y",
    "PAULI_Z",
    "HADAMARD",
    "S_GATE",
    "S_DAG_GATE",
    "T_GATE",
    "CNOT_MATRIX",
    "CZ_MATRIX",
    "SWAP_MATRIX",
    "TOFFOLI_MATRIX",
    "rx",
    "ry",
    "rz",
    "apply_gate",
]
