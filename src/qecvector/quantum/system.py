# src/qecvector/quantum/system.py
"""
QuantumSystem: a state vector plus everything the codes need around it.

Responsibilities
----------------
- apply gates, measurements and resets, checking normalization after each;
- keep an append-only history of ``QuantumStep`` records;
- inject gate errors after intentional gates (``GateErrorConfig``);
- virtualize ancillas, so codes can address many single-use ancilla roles
  while the register only holds a few physical ancilla qubits.

Ancilla virtualization
----------------------
Indices ``0 .. num_data_qubits-1`` are data qubits. Indices from
``num_data_qubits`` upward are *virtual* ancillas; virtual ancilla ``v`` maps
to physical qubit::

    num_data_qubits + (v - num_data_qubits) % num_physical_ancillas

Every stabilizer measurement resets its ancilla to |0⟩ before returning, so
consecutive virtual ancillas sharing a physical qubit never see residue from
an earlier use. The 9-qubit Shor code with 8 ancilla roles therefore runs on
10 physical qubits (1024 amplitudes) rather than 17.
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import stim

from qecvector.exceptions import ConfigurationError, DimensionError
from qecvector.noise.gate_errors import GateErrorConfig, pauli_for_gate_error
from qecvector.quantum.gates import (
    FROM_STIM_NAMES,
    GATE_ARITY,
    STIM_NAMES,
    GateName,
    GateOperation,
    apply_gate,
)
from qecvector.quantum.state_vector import StateVector

logger = logging.getLogger(__name__)


class StepType(Enum):
    """Kind of history record."""
    GATE = "gate"
    GATE_ERROR = "gate-error"
    MEASUREMENT = "measurement"
    NOISE = "noise"
    CORRECTION = "correction"
    ENCODE = "encode"
    DECODE = "decode"


class QubitRole(Enum):
    DATA = "data"
    ANCILLA = "ancilla"


@dataclass(frozen=True)
class QubitInfo:
    index: int
    label: str
    role: QubitRole = QubitRole.DATA


@dataclass(frozen=True)
class GateErrorDetails:
    """What a gate-error step did and why."""
    gate_name: str
    qubit_index: int
    error_type: str
    probability: float


@dataclass(frozen=True)
class QuantumStep:
    """One history record.

    ``operations`` holds the gates (on physical qubits) that the step applied,
    in order. Steps written with ``log_step`` carry no operations.
    """
    index: int
    type: StepType
    description: str
    operations: Tuple[GateOperation, ...] = field(default_factory=tuple)
    measurement_result: Optional[int] = None
    qubit_index: Optional[int] = None
    gate_error: Optional[GateErrorDetails] = None
    is_reset: bool = False


class QuantumSystem:
    """State vector with gate/measurement primitives, history and ancilla map.

    Parameters
    ----------
    num_data_qubits : int
        Number of data qubits (physical indices ``0 .. n-1``).
    num_virtual_ancillas : int, default=0
        Number of ancilla roles addressable from index ``num_data_qubits``.
    num_physical_ancillas : int, optional
        Physical ancilla qubits backing the virtual ones. Defaults to one
        physical qubit per virtual ancilla.
    gate_error_config : GateErrorConfig, optional
        Gate-error settings (disabled by default).
    rng : numpy.random.Generator, optional
        Source of every random draw (measurement collapse, gate errors).
    """

    def __init__(
        self,
        num_data_qubits: int,
        num_virtual_ancillas: int = 0,
        num_physical_ancillas: Optional[int] = None,
        gate_error_config: Optional[GateErrorConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        if num_data_qubits < 1:
            raise ConfigurationError(f"num_data_qubits must be >= 1. Got {num_data_qubits}")
        if num_physical_ancillas is None:
            num_physical_ancillas = num_virtual_ancillas
        if num_virtual_ancillas < 0 or num_physical_ancillas < 0:
            raise ConfigurationError("Ancilla counts must be non-negative")
        if num_virtual_ancillas > 0 and num_physical_ancillas == 0:
            raise ConfigurationError(
                f"{num_virtual_ancillas} virtual ancilla(s) need at least one physical ancilla"
            )

        self._num_data = int(num_data_qubits)
        self._num_virtual = max(int(num_virtual_ancillas), int(num_physical_ancillas))
        self._num_physical_ancillas = int(num_physical_ancillas)
        self.gate_error_config = gate_error_config or GateErrorConfig()
        self.rng = rng if rng is not None else np.random.default_rng()

        self.state = StateVector(self.num_qubits)
        self.qubits: List[QubitInfo] = [
            QubitInfo(i, f"q{i}", QubitRole.DATA) for i in range(self._num_data)
        ] + [
            QubitInfo(self._num_data + j, f"a{j}", QubitRole.ANCILLA)
            for j in range(self._num_physical_ancillas)
        ]
        self._history: List[QuantumStep] = []
        self._step_counter = 0

    # ------------------------------------------------------------------
    # Sizes and index mapping
    # ------------------------------------------------------------------

    @property
    def num_qubits(self) -> int:
        """Physical qubit count (data + physical ancillas)."""
        return self._num_data + self._num_physical_ancillas

    @property
    def num_data_qubits(self) -> int:
        return self._num_data

    @property
    def num_virtual_ancillas(self) -> int:
        return self._num_virtual

    @property
    def num_physical_ancillas(self) -> int:
        return self._num_physical_ancillas

    @property
    def dimension(self) -> int:
        return self.state.dimension

    @property
    def ancilla_map(self) -> Dict[int, int]:
        """Virtual ancilla index -> physical qubit index."""
        first = self._num_data
        return {v: self.physical_index(v) for v in range(first, first + self._num_virtual)}

    def physical_index(self, qubit: int) -> int:
        """Resolve a data or virtual-ancilla index to its physical qubit."""
        if 0 <= qubit < self._num_data:
            return qubit
        offset = qubit - self._num_data
        if 0 <= offset < self._num_virtual:
            return self._num_data + offset % self._num_physical_ancillas
        raise DimensionError(qubit, self._num_data + self._num_virtual)

    def _resolve(self, op: GateOperation) -> GateOperation:
        physical = tuple(self.physical_index(q) for q in op.qubits)
        if physical == op.qubits:
            return op
        return op.with_qubits(*physical)

    def qubit_label(self, qubit: int) -> str:
        return self.qubits[self.physical_index(qubit)].label

    def set_qubit_info(self, index: int, label: str, role: QubitRole = QubitRole.DATA) -> None:
        if not 0 <= index < self.num_qubits:
            raise DimensionError(index, self.num_qubits)
        self.qubits[index] = QubitInfo(index, label, QubitRole(role))

    def set_gate_error_config(self, config: Optional[GateErrorConfig]) -> None:
        self.gate_error_config = config or GateErrorConfig()

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    @property
    def history(self) -> Tuple[QuantumStep, ...]:
        return tuple(self._history)

    def _append(self, step_type: StepType, description: str, **fields) -> QuantumStep:
        step = QuantumStep(self._step_counter, step_type, description, **fields)
        self._step_counter += 1
        self._history.append(step)
        return step

    def log_step(self, step_type: StepType, description: str) -> QuantumStep:
        """Record a step that applies no operation (phase markers, notes)."""
        return self._append(StepType(step_type), description)

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def apply_gate(
        self,
        op: GateOperation,
        gate_errors: bool = True,
        error_config: Optional[GateErrorConfig] = None,
    ) -> None:
        """Apply ``op``, log it as a gate step, then run gate-error injection.

        ``error_config`` overrides the system's gate-error settings for this
        one gate (used by custom circuits with per-gate error rates).
        """
        resolved = self._resolve(op)
        apply_gate(self.state, resolved)
        self.state.check_normalized(resolved.describe())
        labels = ", ".join(self.qubits[q].label for q in resolved.qubits)
        self._append(
            StepType.GATE,
            f"Apply {resolved.label or resolved.name.value} to {labels}",
            operations=(resolved,),
        )
        logger.debug("gate %s", resolved.describe())
        if gate_errors:
            self._inject_gate_errors(resolved, error_config or self.gate_error_config)

    def apply_gates_with_description(
        self,
        ops: Sequence[GateOperation],
        description: str,
        step_type: StepType = StepType.GATE,
    ) -> QuantumStep:
        """Apply several gates as one history record. No gate errors are drawn."""
        resolved = tuple(self._resolve(op) for op in ops)
        for op in resolved:
            apply_gate(self.state, op)
        self.state.check_normalized(description)
        logger.debug("%s: %s", StepType(step_type).value, description)
        return self._append(StepType(step_type), description, operations=resolved)

    def _inject_gate_errors(self, op: GateOperation, config: GateErrorConfig) -> None:
        if not config.applies_to(op.arity):
            return
        for q in op.qubits:
            if self.rng.random() >= config.probability:
                continue
            pauli = pauli_for_gate_error(config.type, self.rng)
            if pauli is None:
                continue
            error_op = GateOperation(pauli, (q,), label=f"{pauli}{q} (gate error)")
            apply_gate(self.state, error_op)
            self.state.check_normalized("gate error")
            self._append(
                StepType.GATE_ERROR,
                f"Gate error: {pauli} on {self.qubits[q].label} after {op.name.value}",
                operations=(error_op,),
                qubit_index=q,
                gate_error=GateErrorDetails(op.name.value, q, pauli, config.probability),
            )
            logger.debug("gate error %s on q%d after %s", pauli, q, op.name.value)

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    def measure_qubit(
        self,
        qubit: int,
        description: Optional[str] = None,
        forced: Optional[int] = None,
    ) -> int:
        """Projective Z measurement, logged as a measurement step."""
        p = self.physical_index(qubit)
        result = self.state.measure(p, self.rng, forced=forced)
        self.state.check_normalized(f"measurement of qubit {p}")
        self._append(
            StepType.MEASUREMENT,
            f"{description or 'Measure ' + self.qubits[p].label}: result = {result}",
            measurement_result=result,
            qubit_index=p,
        )
        logger.debug("measure q%d -> %d", p, result)
        return result

    def reset_qubit(self, qubit: int, description: Optional[str] = None) -> None:
        p = self.physical_index(qubit)
        self.state.reset(p)
        self.state.check_normalized(f"reset of qubit {p}")
        self._append(
            StepType.MEASUREMENT,
            description or f"Reset {self.qubits[p].label} to |0⟩",
            qubit_index=p,
            is_reset=True,
        )

    def measure_stabilizer(
        self,
        pauli: stim.PauliString,
        virtual_ancilla: int,
        description: Optional[str] = None,
    ) -> int:
        """Measure a Z-type or X-type Pauli string through an ancilla.

        Z-type: CNOT from every support qubit into the ancilla.
        X-type: H on the ancilla, CNOT from the ancilla onto every support
        qubit, H again. The ancilla is then measured and reset to |0⟩.

        Returns
        -------
        int
            0 for eigenvalue +1, 1 for eigenvalue -1.
        """
        anc = self.physical_index(virtual_ancilla)
        if anc < self._num_data:
            raise ValueError(f"Qubit {virtual_ancilla} is a data qubit, not an ancilla")
        support = [(q, pauli[q]) for q in range(len(pauli)) if pauli[q]]
        if not support:
            raise ValueError("Cannot measure the identity stabilizer")
        for q, _ in support:
            if q >= self._num_data:
                raise DimensionError(q, self._num_data, what="Stabilizer support qubit")
        kinds = {code for _, code in support}
        name = "".join(f"{'_XYZ'[code]}{q}" for q, code in support)

        if kinds == {3}:
            ops = [GateOperation(GateName.CNOT, (q, anc), label="syndrome") for q, _ in support]
        elif kinds == {1}:
            ops = (
                [GateOperation(GateName.H, (anc,), label="syndrome")]
                + [GateOperation(GateName.CNOT, (anc, q), label="syndrome") for q, _ in support]
                + [GateOperation(GateName.H, (anc,), label="syndrome")]
            )
        else:
            raise ValueError(f"Stabilizer {pauli} must be purely X-type or Z-type")

        self.apply_gates_with_description(
            ops, f"Syndrome coupling for {name}", StepType.MEASUREMENT
        )
        outcome = self.measure_qubit(
            anc, description or f"Measure {self.qubits[anc].label} for {name}"
        )
        if complex(pauli.sign) == -1:
            outcome ^= 1
        self.reset_qubit(anc)
        return outcome

    def expectation(self, pauli: stim.PauliString) -> float:
        """⟨P⟩ on the current state (no collapse, nothing logged)."""
        return self.state.expectation(pauli)

    # ------------------------------------------------------------------
    # Derived quantities
    # ------------------------------------------------------------------

    def fidelity_with(self, target: StateVector) -> float:
        return self.state.fidelity(target)

    def bloch_coordinates(self, qubit: int) -> Tuple[float, float, float]:
        return self.state.bloch_coordinates(self.physical_index(qubit))

    def all_bloch_coordinates(self) -> Dict[int, Tuple[float, float, float]]:
        return {q: self.state.bloch_coordinates(q) for q in range(self.num_qubits)}

    def state_string(self, threshold: float = 0.01) -> str:
        return self.state.to_string(threshold)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reinitialize(self) -> None:
        """Back to |0…0⟩ with an empty history."""
        self.state = StateVector(self.num_qubits)
        self._history = []
        self._step_counter = 0

    def clone(self) -> "QuantumSystem":
        """Deep copy of state, history and qubit info.

        The random generator is shared, not copied: a clone draws from the
        same stream as its parent.
        """
        other = QuantumSystem.__new__(QuantumSystem)
        other._num_data = self._num_data
        other._num_virtual = self._num_virtual
        other._num_physical_ancillas = self._num_physical_ancillas
        other.gate_error_config = dataclasses.replace(self.gate_error_config)
        other.rng = self.rng
        other.state = self.state.copy()
        other.qubits = list(self.qubits)
        other._history = list(self._history)
        other._step_counter = self._step_counter
        return other

    # ------------------------------------------------------------------
    # stim interchange
    # ------------------------------------------------------------------

    def apply_stim_circuit(
        self,
        circuit: stim.Circuit,
        description: str = "stim circuit",
        step_type: StepType = StepType.GATE,
    ) -> List[int]:
        """Apply a Clifford ``stim.Circuit`` (gates, M, R, MR, TICK).

        Consecutive gates are logged as one step; measurements and resets are
        logged individually. Returns the measurement outcomes in order.
        """
        results: List[int] = []
        pending: List[GateOperation] = []

        def flush():
            if pending:
                self.apply_gates_with_description(list(pending), description, step_type)
                pending.clear()

        for inst in circuit.flattened():
            name = inst.name
            if name == "TICK":
                continue
            targets = [t.value for t in inst.targets_copy() if t.is_qubit_target]
            if name in ("M", "MZ", "MR", "MRZ", "R", "RZ"):
                flush()
                for q in targets:
                    if name.startswith("M"):
                        results.append(self.measure_qubit(q))
                    if name.startswith("R") or name.startswith("MR"):
                        self.reset_qubit(q)
                continue
            if name not in FROM_STIM_NAMES:
                raise ValueError(f"Unsupported stim instruction {name!r}")
            gate = FROM_STIM_NAMES[name]
            arity = GATE_ARITY.get(gate, 1)
            for k in range(0, len(targets), arity):
                pending.append(GateOperation(gate, tuple(targets[k:k + arity])))
        flush()
        return results

    def to_stim_circuit(self) -> stim.Circuit:
        """Export the logged operation history as a stim circuit.

        Raises ValueError when the history contains a non-Clifford gate.
        """
        circuit = stim.Circuit()
        for step in self._history:
            for op in step.operations:
                if op.name is GateName.I:
                    continue
                if not op.is_clifford:
                    raise ValueError(f"{op.name.value} has no stim equivalent")
                circuit.append(STIM_NAMES[op.name], list(op.qubits))
            if step.type is StepType.MEASUREMENT and step.qubit_index is not None:
                circuit.append("R" if step.is_reset else "M", [step.qubit_index])
        return circuit

    def __repr__(self) -> str:
        return (
            f"QuantumSystem(data={self._num_data}, "
            f"ancillas={self._num_physical_ancillas}/{self._num_virtual}, "
            f"steps={len(self._history)})"
        )
