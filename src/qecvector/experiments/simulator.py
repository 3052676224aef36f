# src/qecvector/experiments/simulator.py
"""
Phase-driven QEC simulator.

A QECSimulator walks one code through the cycle::

    init -> encode -> noise -> syndrome -> correction -> decode -> complete

Construction prepares the logical input on qubit 0 and leaves the simulator
in ``init``. ``step_forward`` advances exactly one phase; the phase methods
(``encode``, ``apply_noise``, ...) can also be called directly. Each phase
method declares the phases it may be called from (``requires_phase``); a call
from any other phase logs a warning and raises SequenceError.

Every phase transition stores a deep-copied SimulatorState, so
``step_backward`` / ``go_to_step`` restore earlier states instead of trying to
undo measurements. Retention above a qubit-count threshold follows the
configured SnapshotPolicy.
"""
from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import stim

from qecvector.codes import CodeType, LogicalState, StateVectorCode, create_code
from qecvector.codes.abstract_code import SyndromeTableEntry
from qecvector.exceptions import ConfigurationError, SequenceError
from qecvector.experiments.reconciliation import isolate_error_syndrome
from qecvector.experiments.snapshots import SnapshotPolicy
from qecvector.noise.gate_errors import GateErrorConfig, GateErrorScope, GateErrorType
from qecvector.noise.models import (
    NoiseConfig,
    NoiseEvent,
    NoiseType,
    apply_noise,
    describe_noise,
    inject_error,
)
from qecvector.quantum.gates import GateOperation
from qecvector.quantum.state_vector import StateVector
from qecvector.quantum.system import QuantumStep, QuantumSystem, StepType
from qecvector.utils import coerce_enum

logger = logging.getLogger(__name__)


class SimulationPhase(Enum):
    INIT = "init"
    ENCODE = "encode"
    NOISE = "noise"
    SYNDROME = "syndrome"
    CORRECTION = "correction"
    DECODE = "decode"
    COMPLETE = "complete"


# =============================================================================
# Configuration and records
# =============================================================================

@dataclass
class SimulatorConfig:
    """
    Configuration of one simulator run.

    Attributes
    ----------
    code_type : CodeType
        ``"repetition"`` or ``"shor"``.
    initial_state : LogicalState
        Logical input; ``"plus"`` / ``"minus"`` are repetition-code only.
    noise_config : NoiseConfig
        Noise applied in the noise phase.
    gate_error_config : GateErrorConfig, optional
        Errors after intentional gates (preparation, encode, decode).
    snapshot_policy : SnapshotPolicy
        Undo-history retention.
    """
    code_type: Union[CodeType, str] = CodeType.REPETITION
    initial_state: Union[LogicalState, str] = LogicalState.ZERO
    noise_config: NoiseConfig = field(default_factory=NoiseConfig)
    gate_error_config: Optional[GateErrorConfig] = None
    snapshot_policy: SnapshotPolicy = field(default_factory=SnapshotPolicy)

    def __post_init__(self):
        self.code_type = coerce_enum(CodeType, self.code_type, "code type")
        self.initial_state = create_code(self.code_type).validate_initial_state(
            self.initial_state
        )
        if self.noise_config is None:
            self.noise_config = NoiseConfig()


@dataclass
class SimulatorState:
    """Everything needed to resume a run; the unit of snapshotting."""
    system: QuantumSystem
    phase: SimulationPhase
    config: SimulatorConfig
    noise_events: List[NoiseEvent] = field(default_factory=list)
    syndrome: Tuple[int, ...] = ()
    corrected_qubits: List[int] = field(default_factory=list)
    step_index: int = 0

    def clone(self) -> "SimulatorState":
        return SimulatorState(
            system=self.system.clone(),
            phase=self.phase,
            config=self.config,
            noise_events=list(self.noise_events),
            syndrome=tuple(self.syndrome),
            corrected_qubits=list(self.corrected_qubits),
            step_index=self.step_index,
        )


@dataclass(frozen=True)
class SimulationResult:
    system: QuantumSystem
    initial_logical_state: LogicalState
    final_fidelity: float
    error_detected: bool
    errors_applied: List[NoiseEvent]
    correction_applied: bool
    syndrome: Tuple[int, ...]
    steps: Tuple[QuantumStep, ...]


@dataclass
class CustomGateStep:
    """One caller-supplied gate with its own gate-error settings."""
    op: GateOperation
    error_probability: float = 0.0
    error_type: Union[GateErrorType, str] = GateErrorType.DEPOLARIZING
    apply_to: Union[GateErrorScope, str] = GateErrorScope.ALL

    def __post_init__(self):
        self.error_type = coerce_enum(GateErrorType, self.error_type, "gate error type")
        self.apply_to = coerce_enum(GateErrorScope, self.apply_to, "gate error scope")
        self.error_probability = float(self.error_probability)
        if not 0.0 <= self.error_probability <= 1.0:
            raise ConfigurationError(
                f"error_probability must be in [0, 1]. Got {self.error_probability}"
            )

    def error_config(self) -> GateErrorConfig:
        return GateErrorConfig(
            enabled=self.error_probability > 0.0,
            type=self.error_type,
            probability=self.error_probability,
            apply_to=self.apply_to,
        )


PlanItem = Union[CustomGateStep, NoiseConfig]


@dataclass(frozen=True)
class CustomCircuitResult:
    """Outcome of ``apply_custom_circuit``.

    ``fidelity`` compares the corrected system with an error-free copy that
    ran only the intentional gates.
    """
    expected_syndrome: Tuple[int, ...]
    measured_syndrome: Tuple[int, ...]
    error_syndrome: Tuple[int, ...]
    corrected_qubits: List[int]
    noise_events: List[NoiseEvent]
    fidelity: float


# =============================================================================
# Phase guard
# =============================================================================

def requires_phase(*allowed: SimulationPhase) -> Callable:
    """Reject calls made outside ``allowed`` phases with SequenceError."""
    allowed_names = tuple(p.value for p in allowed)

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs):
            phase = self._state.phase
            if phase not in allowed:
                logger.warning(
                    "Rejected %s in phase %s (allowed from: %s)",
                    method.__name__, phase.value, ", ".join(allowed_names),
                )
                raise SequenceError(method.__name__, phase.value, allowed_names)
            return method(self, *args, **kwargs)

        wrapper.allowed_phases = allowed
        return wrapper

    return decorator


# =============================================================================
# Simulator
# =============================================================================

class QECSimulator:
    """Orchestrates a code, noise and the snapshot history.

    Parameters
    ----------
    config : SimulatorConfig
        Code, input state, noise and retention settings.
    rng : numpy.random.Generator or int, optional
        Random source (or seed) for noise, gate errors and measurements.
    """

    def __init__(
        self,
        config: SimulatorConfig,
        rng: Optional[Union[np.random.Generator, int]] = None,
    ):
        self._rng = np.random.default_rng(rng)
        self._start(config)

    def _start(self, config: SimulatorConfig) -> None:
        self._config = config
        self._code: StateVectorCode = create_code(config.code_type)
        system = self._code.create_system(config.gate_error_config, self._rng)
        self._code.prepare_input(system, config.initial_state)
        self._state = SimulatorState(system=system, phase=SimulationPhase.INIT, config=config)
        self._snapshots: List[SimulatorState] = []
        self._decimated_count = 0
        logger.info(
            "New %s run, input %s, %d physical qubits",
            self._code.name, config.initial_state.ket, system.num_qubits,
        )
        self._save_snapshot(boundary=True)

    def reset(self, config: Optional[SimulatorConfig] = None) -> None:
        """Start over, optionally with a new configuration."""
        self._start(config or self._config)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> SimulatorState:
        return self._state

    @property
    def config(self) -> SimulatorConfig:
        return self._config

    @property
    def code(self) -> StateVectorCode:
        return self._code

    @property
    def system(self) -> QuantumSystem:
        return self._state.system

    @property
    def phase(self) -> SimulationPhase:
        return self._state.phase

    @property
    def syndrome(self) -> Tuple[int, ...]:
        return self._state.syndrome

    @property
    def corrected_qubits(self) -> List[int]:
        return list(self._state.corrected_qubits)

    @property
    def noise_events(self) -> List[NoiseEvent]:
        return list(self._state.noise_events)

    @property
    def history(self) -> Tuple[QuantumStep, ...]:
        return self._state.system.history

    @property
    def snapshot_count(self) -> int:
        return len(self._snapshots)

    @property
    def current_snapshot_index(self) -> int:
        return self._state.step_index

    def bloch_coordinates(self) -> Dict[int, Tuple[float, float, float]]:
        return self._state.system.all_bloch_coordinates()

    def syndrome_table(self) -> List[SyndromeTableEntry]:
        return self._code.syndrome_table()

    def logical_target(self, state: Optional[Union[LogicalState, str]] = None) -> StateVector:
        """Ideal encoded state for ``state`` (default: the configured input)."""
        return self._code.logical_target(state or self._config.initial_state)

    def fidelity(
        self, target: Optional[Union[StateVector, LogicalState, str]] = None
    ) -> float:
        """Fidelity of the current state with ``target``.

        With no explicit vector, the target follows the phase: the decoded
        input before encoding and after decoding, the encoded logical state
        in between.
        """
        if isinstance(target, StateVector):
            return self._state.system.fidelity_with(target)
        logical = target or self._config.initial_state
        if self._state.phase in (
            SimulationPhase.INIT, SimulationPhase.DECODE, SimulationPhase.COMPLETE
        ):
            vector = self._code.decoded_target(logical)
        else:
            vector = self._code.logical_target(logical)
        return self._state.system.fidelity_with(vector)

    def export_stim_circuit(self) -> stim.Circuit:
        """Operation history of the current run as a ``stim.Circuit``."""
        return self._state.system.to_stim_circuit()

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def _save_snapshot(self, boundary: bool) -> None:
        policy = self._config.snapshot_policy
        if not boundary or not policy.keep_phase_boundaries:
            self._decimated_count += 1
        keep = policy.should_keep(
            self._state.system.num_qubits, boundary, self._decimated_count
        )
        # The starting state is always restorable
        if not keep and self._snapshots:
            return
        self._state.step_index = len(self._snapshots)
        self._snapshots.append(self._state.clone())

    def _restore(self, index: int) -> None:
        self._state = self._snapshots[index].clone()
        self._state.step_index = index

    def step_backward(self) -> bool:
        """Restore the previous snapshot; False at the first one."""
        if self._state.step_index <= 0:
            return False
        self._restore(self._state.step_index - 1)
        return True

    def go_to_step(self, index: int) -> bool:
        """Restore snapshot ``index``; False (no change) when out of range."""
        if not 0 <= index < len(self._snapshots):
            return False
        self._restore(index)
        return True

    def _enter(self, phase: SimulationPhase) -> None:
        logger.info("%s: %s -> %s", self._code.name, self._state.phase.value, phase.value)
        self._state.phase = phase
        self._save_snapshot(boundary=True)

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    @requires_phase(SimulationPhase.INIT)
    def encode(self) -> None:
        self._code.encode(self._state.system)
        self._enter(SimulationPhase.ENCODE)

    @requires_phase(SimulationPhase.ENCODE)
    def apply_noise(self) -> List[NoiseEvent]:
        system = self._state.system
        noise_config = self._config.noise_config
        events = apply_noise(system, noise_config, self._rng)
        self._state.noise_events = list(events)
        applied = [e for e in events if e.applied]
        logger.debug("%s: %d error(s) applied", describe_noise(noise_config), len(applied))

        if not applied and noise_config.type is not NoiseType.NONE:
            system.log_step(StepType.NOISE, "No errors occurred (probabilistic)")
        elif len(applied) > 1 and self._code.code_type is CodeType.REPETITION:
            system.log_step(
                StepType.NOISE,
                f"{len(applied)} errors applied - exceeds correction capability",
            )
            logger.warning("%d errors exceed the repetition code's capability", len(applied))
        self._enter(SimulationPhase.NOISE)
        return events

    @requires_phase(SimulationPhase.ENCODE, SimulationPhase.NOISE)
    def inject_error(self, qubit: int, error_type: str) -> NoiseEvent:
        """Apply one X/Y/Z error by hand; moves the run to the noise phase."""
        event = inject_error(self._state.system, qubit, error_type)
        self._state.noise_events.append(event)
        self._enter(SimulationPhase.NOISE)
        return event

    @requires_phase(SimulationPhase.NOISE)
    def measure_syndrome(self) -> Tuple[int, ...]:
        system = self._state.system
        syndrome = self._code.measure_syndrome(system)
        self._state.syndrome = syndrome
        system.log_step(
            StepType.MEASUREMENT,
            "Syndrome measured: (" + ", ".join(str(b) for b in syndrome) + ")",
        )
        self._enter(SimulationPhase.SYNDROME)
        return syndrome

    @requires_phase(SimulationPhase.SYNDROME)
    def correct(self) -> List[int]:
        system = self._state.system
        syndrome = self._state.syndrome
        corrected = self._code.correct(system, syndrome)
        self._log_capacity(system, syndrome)
        self._state.corrected_qubits = corrected
        self._enter(SimulationPhase.CORRECTION)
        return corrected

    def _log_capacity(self, system: QuantumSystem, syndrome: Sequence[int]) -> None:
        applied = sum(1 for e in self._state.noise_events if e.applied)
        if applied < 2:
            return
        if self._code.code_type is CodeType.REPETITION:
            if not any(syndrome):
                message = (
                    f"Logical error: {applied} errors caused an undetectable "
                    f"transition between codewords"
                )
            else:
                message = (
                    f"Wrong correction: {applied} errors exceed the code's "
                    f"capability (only 1 error is correctable)"
                )
        else:
            message = f"{applied} errors may exceed the correction capability"
        system.log_step(StepType.CORRECTION, message)
        logger.warning(message)

    @requires_phase(SimulationPhase.CORRECTION)
    def decode(self) -> None:
        self._code.decode(self._state.system)
        self._enter(SimulationPhase.DECODE)

    @requires_phase(SimulationPhase.DECODE)
    def complete(self) -> float:
        """Finish the run; returns fidelity with the decoded input."""
        fidelity = self.fidelity()
        self._state.system.log_step(
            StepType.DECODE, f"Fidelity with target state: {fidelity * 100:.2f}%"
        )
        self._enter(SimulationPhase.COMPLETE)
        return fidelity

    def step_forward(self) -> bool:
        """Advance exactly one phase; False once the run is complete."""
        advance = {
            SimulationPhase.INIT: self.encode,
            SimulationPhase.ENCODE: self.apply_noise,
            SimulationPhase.NOISE: self.measure_syndrome,
            SimulationPhase.SYNDROME: self.correct,
            SimulationPhase.CORRECTION: self.decode,
            SimulationPhase.DECODE: self.complete,
        }.get(self._state.phase)
        if advance is None:
            return False
        advance()
        return True

    def run_full_cycle(self) -> SimulationResult:
        """Encode, add noise, measure the syndrome and correct.

        Starts from a fresh run when the simulator has already advanced.
        The run is left in the correction phase.
        """
        if self._state.phase is not SimulationPhase.INIT:
            self.reset()
        self.encode()
        events = self.apply_noise()
        syndrome = self.measure_syndrome()
        corrected = self.correct()
        final_fidelity = self._state.system.fidelity_with(
            self._code.logical_target(self._config.initial_state)
        )
        return SimulationResult(
            system=self._state.system,
            initial_logical_state=self._config.initial_state,
            final_fidelity=final_fidelity,
            error_detected=any(syndrome),
            errors_applied=events,
            correction_applied=bool(corrected),
            syndrome=syndrome,
            steps=self._state.system.history,
        )

    @requires_phase(SimulationPhase.ENCODE, SimulationPhase.NOISE)
    def apply_custom_circuit(
        self,
        plan: Sequence[PlanItem],
        noise: Optional[NoiseConfig] = None,
    ) -> CustomCircuitResult:
        """Run caller gates on the encoded state, then measure and correct.

        Parameters
        ----------
        plan : sequence of CustomGateStep or NoiseConfig
            Gates (each with its own gate-error settings) in order. A
            NoiseConfig entry applies noise at that point of the circuit.
        noise : NoiseConfig, optional
            Noise applied after the last gate, before syndrome extraction.

        The expected syndrome is read from an error-free copy that runs only
        the intentional gates; the measured syndrome comes from the real
        system. Their XOR (the error-only part) drives the correction table.
        Errors from an earlier noise phase are removed from the copy, so
        they are corrected along with the circuit's own noise. Gate errors
        raised while encoding stay in both.
        """
        system = self._state.system
        shadow = system.clone()
        shadow.set_gate_error_config(None)
        # Noise-phase errors sit directly on the encoded state; strip them
        undo = [
            GateOperation(e.error_type, (e.qubit_index,))
            for e in self._state.noise_events if e.applied
        ]
        if undo:
            shadow.apply_gates_with_description(undo, "Remove noise from shadow", StepType.NOISE)
        events: List[NoiseEvent] = []

        items = list(plan) + ([noise] if noise is not None else [])
        for item in items:
            if isinstance(item, NoiseConfig):
                events += apply_noise(system, item, self._rng)
            else:
                system.apply_gate(item.op, error_config=item.error_config())
                shadow.apply_gate(item.op, gate_errors=False)
            self._save_snapshot(boundary=False)

        self._state.noise_events += events
        expected = self._code.expected_syndrome(shadow)
        measured = self._code.measure_syndrome(system)
        error_syndrome = isolate_error_syndrome(expected, measured)
        system.log_step(
            StepType.MEASUREMENT,
            f"Syndrome: expected {expected}, measured {measured}, error part {error_syndrome}",
        )
        corrected = self._code.correct(system, error_syndrome)
        self._state.syndrome = error_syndrome
        self._state.corrected_qubits = corrected
        self._enter(SimulationPhase.CORRECTION)

        return CustomCircuitResult(
            expected_syndrome=expected,
            measured_syndrome=measured,
            error_syndrome=error_syndrome,
            corrected_qubits=corrected,
            noise_events=events,
            fidelity=system.fidelity_with(shadow.state),
        )
