"""[[9,1,3]] Shor Code (Concatenated Repetition Code)

Shor's code is a [[9,1,3]] CSS code, the first quantum error-correcting code,
constructed by concatenating a 3-qubit bit-flip code with a 3-qubit phase-flip code.
It can correct one arbitrary qubit error (distance 3).

The qubits are organized in 3 blocks of 3 (leaders 0, 3, 6):
- Each block is a bit-flip repetition code (X errors detected by in-block Z parity)
- The blocks together form a phase-flip code (Z errors detected by X parity
  across pairs of blocks)

Syndrome extraction uses 8 ancilla roles (6 Z checks, then 2 X checks) that all
share one physical ancilla, qubit 9: 10 physical qubits, 1024 amplitudes.
"""

from __future__ import annotations

import itertools
from typing import Any, Dict, List, Optional, Sequence, Tuple

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

BLOCKS: Tuple[Tuple[int, int, int], ...] = ((0, 1, 2), (3, 4, 5), (6, 7, 8))
LEADERS: Tuple[int, ...] = tuple(block[0] for block in BLOCKS)

_CODEWORD_AMPLITUDE = 1.0 / (2.0 * np.sqrt(2.0))


class ShorCode91(StateVectorCode):
    """
    [[9,1,3]] Shor code (first quantum error-correcting code).

    Qubits arranged in 3x3 grid:
      0  1  2
      3  4  5
      6  7  8

    Stabilizers:
    - Z stabilizers: parity checks within each row (weight-2)
    - X stabilizers: parity checks across rows (weight-6, ensuring phase coherence)

    Only |0⟩ and |1⟩ logical inputs are supported.
    """

    supported_states = (LogicalState.ZERO, LogicalState.ONE)

    def __init__(self, metadata: Optional[Dict[str, Any]] = None):
        # Z-type checks WITHIN each block (detect X errors)
        self._hz = np.array([
            [1, 1, 0, 0, 0, 0, 0, 0, 0],  # Z_0 Z_1
            [0, 1, 1, 0, 0, 0, 0, 0, 0],  # Z_1 Z_2
            [0, 0, 0, 1, 1, 0, 0, 0, 0],  # Z_3 Z_4
            [0, 0, 0, 0, 1, 1, 0, 0, 0],  # Z_4 Z_5
            [0, 0, 0, 0, 0, 0, 1, 1, 0],  # Z_6 Z_7
            [0, 0, 0, 0, 0, 0, 0, 1, 1],  # Z_7 Z_8
        ], dtype=np.uint8)

        # X-type checks ACROSS blocks (detect Z errors)
        self._hx = np.array([
            [1, 1, 1, 1, 1, 1, 0, 0, 0],  # X_0 X_1 X_2 X_3 X_4 X_5
            [0, 0, 0, 1, 1, 1, 1, 1, 1],  # X_3 X_4 X_5 X_6 X_7 X_8
        ], dtype=np.uint8)

        self._stabilizers = (
            paulis_from_checks(self._hz, "Z") + paulis_from_checks(self._hx, "X")
        )

        meta: Dict[str, Any] = metadata or {}
        meta.update({
            "name": "Shor_9",
            "n": 9,
            "k": 1,
            "distance": 3,
            "code_type": CodeType.SHOR.value,
            "blocks": [list(b) for b in BLOCKS],
            "physical_ancillas": 1,
            "virtual_ancillas": 8,
            "data_coords": [(float(q % 3), float(q // 3)) for q in range(9)],
        })
        self.metadata = meta

    @property
    def code_type(self) -> CodeType:
        return CodeType.SHOR

    @property
    def n(self) -> int:
        return 9

    @property
    def num_physical_ancillas(self) -> int:
        return 1

    @property
    def hz(self) -> np.ndarray:
        return self._hz

    @property
    def hx(self) -> np.ndarray:
        return self._hx

    @property
    def stabilizers(self) -> List[stim.PauliString]:
        return list(self._stabilizers)

    @property
    def logical_x(self) -> stim.PauliString:
        # X_L flips the relative sign of every block: Z on one qubit per block
        return stim.PauliString("Z__Z__Z__")

    @property
    def logical_z(self) -> stim.PauliString:
        # Z_L distinguishes the block sign, measured by X on a whole block
        return stim.PauliString("XXX______")

    def encoding_circuit(self) -> List[GateOperation]:
        ops = [
            GateOperation(GateName.CNOT, (0, 3), label="spread to leaders"),
            GateOperation(GateName.CNOT, (0, 6), label="spread to leaders"),
        ]
        ops += [GateOperation(GateName.H, (q,), label="phase protection") for q in LEADERS]
        for leader, a, b in BLOCKS:
            ops.append(GateOperation(GateName.CNOT, (leader, a), label=f"block {leader // 3}"))
            ops.append(GateOperation(GateName.CNOT, (leader, b), label=f"block {leader // 3}"))
        return ops

    def syndrome_table(self) -> List[SyndromeTableEntry]:
        """Per-block bit-flip rows (positions 0-5), then phase-flip rows (6, 7)."""
        rows: List[SyndromeTableEntry] = []
        for block, qubits in enumerate(BLOCKS):
            rows += pair_lookup_table(
                (2 * block, 2 * block + 1), qubits, GateName.X, "Bit-flip error"
            )
        phase = (6, 7)
        rows += [
            SyndromeTableEntry(phase, (0, 0), "No phase error"),
            SyndromeTableEntry(phase, (1, 0), "Phase error in block 0",
                               GateOperation(GateName.Z, (0,), label="correction")),
            SyndromeTableEntry(phase, (1, 1), "Phase error in block 1",
                               GateOperation(GateName.Z, (3,), label="correction")),
            SyndromeTableEntry(phase, (0, 1), "Phase error in block 2",
                               GateOperation(GateName.Z, (6,), label="correction")),
        ]
        return rows

    @staticmethod
    def bit_flip_syndrome(syndrome: Sequence[int]) -> Tuple[int, ...]:
        """The six in-block Z-parity bits."""
        return tuple(syndrome[:6])

    @staticmethod
    def phase_flip_syndrome(syndrome: Sequence[int]) -> Tuple[int, ...]:
        """The two cross-block X-parity bits."""
        return tuple(syndrome[6:8])

    def _encoded_amplitudes(self, state: LogicalState) -> Dict[int, complex]:
        amplitudes = {}
        for pattern in itertools.product((0, 1), repeat=3):
            index = sum(0b111 << (3 * block) for block, bit in enumerate(pattern) if bit)
            sign = (-1) ** sum(pattern) if state is LogicalState.ONE else 1
            amplitudes[index] = sign * _CODEWORD_AMPLITUDE
        return amplitudes
