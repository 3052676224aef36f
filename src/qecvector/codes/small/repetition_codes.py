"""
3-Qubit Repetition (Bit-Flip) Code

Encodes one logical qubit in three data qubits:

    |0⟩_L = |000⟩,  |1⟩_L = |111⟩,  |±⟩_L = (|000⟩ ± |111⟩)/√2

The implementation uses (matching Stim's repetition code structure):
- Hz: 2 adjacent-pair Z checks, Z0Z1 and Z1Z2 (detect X errors)
- Hx: empty (no X checks, so Z errors are invisible)

Syndromes are extracted honestly through two physical ancillas (qubits 3
and 4), giving a 5-qubit register with 32 amplitudes.

Failure modes (reproduced, not hidden):
- two X errors: the syndrome names the *third* qubit and the correction
  completes a logical X;
- three X errors: syndrome (0, 0), an undetected logical error;
- any Z error: syndrome (0, 0), undetectable by construction.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import numpy as np
import stim

from qecvector.codes.abstract_code import (
    CodeType,
    LogicalState,
    StateVectorCode,
    SyndromeTableEntry,
    pair_lookup_table,
    paulis_from_checks,
)
from qecvector.quantum.gates import GateName, GateOperation

_SQRT1_2 = 1.0 / np.sqrt(2.0)


class RepetitionCode(StateVectorCode):
    """[3,1,3] bit-flip repetition code.

    The distance counts X errors only; a single Z error is already a
    logical error.

    Parameters
    ----------
    metadata : dict, optional
        Additional metadata to store about the code.
    """

    def __init__(self, metadata: Optional[Dict[str, Any]] = None):
        # Z checks on adjacent pairs: rows are Z0Z1, Z1Z2
        self._hz = np.array([
            [1, 1, 0],
            [0, 1, 1],
        ], dtype=np.uint8)
        self._stabilizers = paulis_from_checks(self._hz, "Z")

        meta: Dict[str, Any] = metadata or {}
        meta.update({
            "name": "Repetition_3",
            "n": 3,
            "k": 1,
            "distance": 3,
            "code_type": CodeType.REPETITION.value,
            "physical_ancillas": 2,
            "data_coords": [(float(i), 0.0) for i in range(3)],
            "z_stab_coords": [(0.5, 0.0), (1.5, 0.0)],
        })
        self.metadata = meta

    @property
    def code_type(self) -> CodeType:
        return CodeType.REPETITION

    @property
    def n(self) -> int:
        return 3

    @property
    def num_physical_ancillas(self) -> int:
        return 2

    @property
    def hz(self) -> np.ndarray:
        return self._hz

    @property
    def stabilizers(self) -> List[stim.PauliString]:
        return list(self._stabilizers)

    @property
    def logical_x(self) -> stim.PauliString:
        return stim.PauliString("XXX")

    @property
    def logical_z(self) -> stim.PauliString:
        return stim.PauliString("Z__")

    def encoding_circuit(self) -> List[GateOperation]:
        return [
            GateOperation(GateName.CNOT, (0, 1), label="CNOT₀₁"),
            GateOperation(GateName.CNOT, (0, 2), label="CNOT₀₂"),
        ]

    def syndrome_table(self) -> List[SyndromeTableEntry]:
        """Bit order s1 = Z0Z1, s2 = Z1Z2."""
        return pair_lookup_table((0, 1), (0, 1, 2), GateName.X, "Error")

    def _encoded_amplitudes(self, state: LogicalState) -> Dict[int, complex]:
        return {
            LogicalState.ZERO: {0b000: 1.0},
            LogicalState.ONE: {0b111: 1.0},
            LogicalState.PLUS: {0b000: _SQRT1_2, 0b111: _SQRT1_2},
            LogicalState.MINUS: {0b000: _SQRT1_2, 0b111: -_SQRT1_2},
        }[state]
