# src/qecvector/codes/abstract_code.py
"""
Abstract base class for codes simulated on a QuantumSystem.

Class Hierarchy:
    StateVectorCode (ABC)
    ├── RepetitionCode  - 3-qubit bit-flip code (codes/small/repetition_codes.py)
    └── ShorCode91      - 9-qubit Shor code (codes/small/shor_code.py)

Key Design Principles:
1. A code owns its circuits (encoding, decoding) and its stabilizers as
   ``stim.PauliString`` objects; it never touches amplitudes directly.
2. Syndromes are measured honestly, one ancilla use per stabilizer, in the
   order of ``stabilizers``.
3. The syndrome table is the only description of the decoder. ``correct``
   reads the same entries that ``syndrome_table`` hands to a presentation
   layer, so the two cannot drift apart.
"""
from __future__ import annotations

import logging
import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import stim

from qecvector.exceptions import ConfigurationError
from qecvector.noise.gate_errors import GateErrorConfig
from qecvector.quantum.gates import STIM_NAMES, GateName, GateOperation
from qecvector.quantum.state_vector import StateVector
from qecvector.quantum.system import QuantumSystem, QubitRole, StepType
from qecvector.utils import coerce_enum

logger = logging.getLogger(__name__)

Syndrome = Tuple[int, ...]


class CodeType(Enum):
    REPETITION = "repetition"
    SHOR = "shor"


class LogicalState(Enum):
    """Logical input states."""
    ZERO = "zero"
    ONE = "one"
    PLUS = "plus"
    MINUS = "minus"

    @property
    def ket(self) -> str:
        return {"zero": "|0⟩", "one": "|1⟩", "plus": "|+⟩", "minus": "|−⟩"}[self.value]


_SQRT1_2 = 1.0 / np.sqrt(2.0)
_DEFINITE_TOL = 1e-6

# Single-qubit amplitudes (|0⟩, |1⟩) of each logical input
INPUT_AMPLITUDES: Dict[LogicalState, Tuple[complex, complex]] = {
    LogicalState.ZERO: (1.0, 0.0),
    LogicalState.ONE: (0.0, 1.0),
    LogicalState.PLUS: (_SQRT1_2, _SQRT1_2),
    LogicalState.MINUS: (_SQRT1_2, -_SQRT1_2),
}

# Gates preparing each logical input on qubit 0 from |0⟩
_PREPARATION: Dict[LogicalState, Tuple[GateName, ...]] = {
    LogicalState.ZERO: (),
    LogicalState.ONE: (GateName.X,),
    LogicalState.PLUS: (GateName.H,),
    LogicalState.MINUS: (GateName.X, GateName.H),
}


@dataclass(frozen=True)
class SyndromeTableEntry:
    """One row of a code's decoder.

    Attributes
    ----------
    positions : Tuple[int, ...]
        Indices into the full syndrome that this row reads.
    syndrome : Tuple[int, ...]
        Bit values at ``positions`` selecting this row.
    meaning : str
        What the pattern indicates.
    correction : GateOperation, optional
        Gate applied to undo the error; None when nothing is applied.
    """
    positions: Tuple[int, ...]
    syndrome: Tuple[int, ...]
    meaning: str
    correction: Optional[GateOperation] = None

    @property
    def correction_label(self) -> str:
        if self.correction is None:
            return "None"
        return f"Apply {self.correction.name.value}{self.correction.qubits[0]}"

    def as_dict(self) -> Dict[str, str]:
        return {
            "syndrome": "(" + ", ".join(str(b) for b in self.syndrome) + ")",
            "meaning": self.meaning,
            "correction": self.correction_label,
        }


def paulis_from_checks(checks: np.ndarray, pauli: str) -> List[stim.PauliString]:
    """Turn the rows of a binary check matrix into Pauli strings of one type."""
    return [
        stim.PauliString("".join(pauli if bit else "_" for bit in row))
        for row in np.asarray(checks, dtype=np.uint8)
    ]


def pair_lookup_table(
    positions: Tuple[int, int],
    qubits: Sequence[int],
    gate: GateName,
    what: str,
) -> List[SyndromeTableEntry]:
    """Standard 3-position decoder over two adjacent-pair checks.

    (0,0) none; (1,0) first qubit; (1,1) middle qubit; (0,1) last qubit.
    """
    first, middle, last = qubits
    return [
        SyndromeTableEntry(positions, (0, 0), "No error"),
        SyndromeTableEntry(positions, (1, 0), f"{what} on q{first}",
                           GateOperation(gate, (first,), label="correction")),
        SyndromeTableEntry(positions, (1, 1), f"{what} on q{middle}",
                           GateOperation(gate, (middle,), label="correction")),
        SyndromeTableEntry(positions, (0, 1), f"{what} on q{last}",
                           GateOperation(gate, (last,), label="correction")),
    ]


class StateVectorCode(ABC):
    """
    Abstract base class for a code simulated on a QuantumSystem.

    Subclasses supply the data-qubit count, ancilla layout, encoding circuit,
    stabilizers, syndrome table and encoded targets. Everything else
    (preparing inputs, encoding, decoding, honest syndrome extraction,
    table-driven correction, fidelity targets) is implemented here.
    """

    #: Logical inputs the code accepts.
    supported_states: Tuple[LogicalState, ...] = tuple(LogicalState)

    @property
    @abstractmethod
    def code_type(self) -> CodeType:
        """Tag used by the simulator and factory."""

    @property
    @abstractmethod
    def n(self) -> int:
        """Number of data qubits."""

    @property
    def k(self) -> int:
        return 1

    @property
    def distance(self) -> Optional[int]:
        return self.metadata.get("distance")

    @property
    def name(self) -> str:
        return self.metadata.get("name", self.__class__.__name__)

    @property
    def metadata(self) -> Dict[str, Any]:
        return getattr(self, "_metadata", {})

    @metadata.setter
    def metadata(self, value: Dict[str, Any]) -> None:
        self._metadata = value

    # --- Ancilla layout ---

    @property
    def num_virtual_ancillas(self) -> int:
        """One ancilla role per stabilizer."""
        return len(self.stabilizers)

    @property
    @abstractmethod
    def num_physical_ancillas(self) -> int:
        """Physical ancilla qubits backing the virtual roles."""

    @property
    def num_physical_qubits(self) -> int:
        return self.n + self.num_physical_ancillas

    # --- Structure ---

    @property
    @abstractmethod
    def stabilizers(self) -> List[stim.PauliString]:
        """Stabilizer generators in syndrome-bit order."""

    @property
    @abstractmethod
    def logical_x(self) -> stim.PauliString:
        """Logical X operator."""

    @property
    @abstractmethod
    def logical_z(self) -> stim.PauliString:
        """Logical Z operator."""

    @abstractmethod
    def encoding_circuit(self) -> List[GateOperation]:
        """Gates mapping (input on qubit 0, rest |0⟩) to the encoded state."""

    def decoding_circuit(self) -> List[GateOperation]:
        """Inverse of the encoding circuit (every encoding gate is self-inverse)."""
        return list(reversed(self.encoding_circuit()))

    @abstractmethod
    def syndrome_table(self) -> List[SyndromeTableEntry]:
        """Decoder rows, grouped by the syndrome positions they read."""

    @abstractmethod
    def _encoded_amplitudes(self, state: LogicalState) -> Dict[int, complex]:
        """Non-zero amplitudes of the encoded ``state`` over data-qubit indices."""

    @property
    def syndrome_length(self) -> int:
        return len(self.stabilizers)

    def encoding_stim_circuit(self) -> stim.Circuit:
        """Encoding circuit as a ``stim.Circuit``."""
        circuit = stim.Circuit()
        for op in self.encoding_circuit():
            circuit.append(STIM_NAMES[op.name], list(op.qubits))
        return circuit

    # --- Systems and states ---

    def validate_initial_state(self, state: Union[LogicalState, str]) -> LogicalState:
        state = coerce_enum(LogicalState, state, "initial state")
        if state not in self.supported_states:
            supported = ", ".join(s.value for s in self.supported_states)
            raise ConfigurationError(
                f"{self.name} does not support initial state {state.value!r} "
                f"(supported: {supported})"
            )
        return state

    def create_system(
        self,
        gate_error_config: Optional[GateErrorConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> QuantumSystem:
        """Fresh |0…0⟩ system sized for this code, with qubit labels set."""
        system = QuantumSystem(
            self.n,
            num_virtual_ancillas=self.num_virtual_ancillas,
            num_physical_ancillas=self.num_physical_ancillas,
            gate_error_config=gate_error_config,
            rng=rng,
        )
        for j in range(self.num_physical_ancillas):
            system.set_qubit_info(self.n + j, f"a{j}", QubitRole.ANCILLA)
        return system

    def prepare_input(self, system: QuantumSystem, state: Union[LogicalState, str]) -> None:
        """Reset ``system`` and prepare the logical input on qubit 0."""
        state = self.validate_initial_state(state)
        system.reinitialize()
        for gate in _PREPARATION[state]:
            system.apply_gate(GateOperation(gate, (0,), label="prepare"))
        system.log_step(StepType.ENCODE, f"Initialize to {state.ket} on data qubit")

    def encode(self, system: QuantumSystem) -> None:
        for op in self.encoding_circuit():
            system.apply_gate(op)
        system.log_step(
            StepType.ENCODE,
            f"Encoding complete: 1 logical qubit -> {self.n} physical qubits ({self.name})",
        )

    def decode(self, system: QuantumSystem) -> None:
        for op in self.decoding_circuit():
            system.apply_gate(op)
        system.log_step(StepType.DECODE, f"Decoded from {self.name}")

    # --- Syndrome extraction and correction ---

    def measure_syndrome(self, system: QuantumSystem) -> Syndrome:
        """Measure every stabilizer through its own (virtual) ancilla."""
        bits = []
        for i, stabilizer in enumerate(self.stabilizers):
            bits.append(
                system.measure_stabilizer(stabilizer, virtual_ancilla=self.n + i)
            )
        syndrome = tuple(bits)
        logger.debug("%s syndrome %s", self.name, syndrome)
        return syndrome

    def expected_syndrome(self, system: QuantumSystem) -> Syndrome:
        """Syndrome implied by the current state, read without collapse.

        Bit i is 1 when ⟨S_i⟩ < 0. Used on error-free shadow copies, where
        every stabilizer has a definite eigenvalue. A stabilizer whose
        expectation is not ±1 has no definite bit; it reads as 0 and a
        ``UserWarning`` is issued.
        """
        bits = []
        for s in self.stabilizers:
            value = system.expectation(s)
            if abs(value) < 1 - _DEFINITE_TOL:
                warnings.warn(
                    f"Stabilizer {s} has no definite value (<S> = {value:.3f}); "
                    f"expected syndrome bit read as 0",
                    UserWarning,
                    stacklevel=2,
                )
                logger.warning("indefinite stabilizer %s, <S> = %.3f", s, value)
                bits.append(0)
                continue
            bits.append(1 if value < 0 else 0)
        return tuple(bits)

    def _check_syndrome(self, syndrome: Sequence[int]) -> Syndrome:
        syndrome = tuple(int(b) for b in syndrome)
        if len(syndrome) != self.syndrome_length:
            raise ValueError(
                f"{self.name} syndrome has {self.syndrome_length} bits. Got {len(syndrome)}"
            )
        if any(b not in (0, 1) for b in syndrome):
            raise ValueError(f"Syndrome bits must be 0 or 1. Got {syndrome}")
        return syndrome

    def lookup(self, syndrome: Sequence[int]) -> List[SyndromeTableEntry]:
        """Table rows selected by ``syndrome``, one per position group, in table order."""
        syndrome = self._check_syndrome(syndrome)
        rows = []
        seen = set()
        for entry in self.syndrome_table():
            if entry.positions in seen:
                continue
            if tuple(syndrome[i] for i in entry.positions) == entry.syndrome:
                rows.append(entry)
                seen.add(entry.positions)
        return rows

    def correct(self, system: QuantumSystem, syndrome: Sequence[int]) -> List[int]:
        """Apply the table's corrections for ``syndrome``.

        Returns
        -------
        List[int]
            Qubits that received a correction gate, in application order.
        """
        corrected = []
        for entry in self.lookup(syndrome):
            if entry.correction is None:
                continue
            system.apply_gates_with_description(
                [entry.correction],
                f"Correction: {entry.correction_label} ({entry.meaning})",
                StepType.CORRECTION,
            )
            corrected.append(entry.correction.qubits[0])
            logger.info("%s correction %s", self.name, entry.correction_label)
        if not corrected:
            system.log_step(
                StepType.CORRECTION,
                f"Syndrome {tuple(syndrome)}: no correction needed",
            )
        return corrected

    # --- Targets ---

    def logical_target(self, state: Union[LogicalState, str]) -> StateVector:
        """Ideal encoded state (ancillas in |0⟩) over the physical register."""
        state = self.validate_initial_state(state)
        target = StateVector.zeros(self.num_physical_qubits)
        for index, amp in self._encoded_amplitudes(state).items():
            target.set_amplitude(index, amp)
        return target

    def decoded_target(self, state: Union[LogicalState, str]) -> StateVector:
        """Input state on qubit 0, every other qubit |0⟩."""
        state = self.validate_initial_state(state)
        a0, a1 = INPUT_AMPLITUDES[state]
        target = StateVector.zeros(self.num_physical_qubits)
        target.set_amplitude(0, a0)
        target.set_amplitude(1, a1)
        return target

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(n={self.n}, ancillas={self.num_physical_ancillas})"
