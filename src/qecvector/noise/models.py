# src/qecvector/noise/models.py
"""
Pauli noise applied directly to a QuantumSystem.

Two sampling modes are supported:

- ``probability``: every candidate qubit independently receives the error
  with probability p (depolarizing draws once and splits [0, p) into thirds
  for X, Y, Z);
- ``exact-count``: exactly k distinct candidates are chosen uniformly and
  each of them always receives the error.

Candidates default to the system's data qubits; ``target_qubits`` replaces
that list. Every call returns one ``NoiseEvent`` per candidate, including
candidates the draw skipped, so callers can audit what happened.

Noise gates are logged as ``noise`` steps and never trigger gate errors.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from qecvector.exceptions import ConfigurationError, DimensionError
from qecvector.quantum.gates import GateOperation
from qecvector.utils import coerce_enum

if TYPE_CHECKING:
    from qecvector.quantum.system import QuantumSystem

logger = logging.getLogger(__name__)


class NoiseType(Enum):
    NONE = "none"
    BIT_FLIP = "bit-flip"
    PHASE_FLIP = "phase-flip"
    BIT_PHASE_FLIP = "bit-phase-flip"
    DEPOLARIZING = "depolarizing"


class NoiseMode(Enum):
    PROBABILITY = "probability"
    EXACT_COUNT = "exact-count"


_PAULI_FOR_TYPE = {
    NoiseType.BIT_FLIP: "X",
    NoiseType.PHASE_FLIP: "Z",
    NoiseType.BIT_PHASE_FLIP: "Y",
}

_ERROR_NAMES = {
    "X": "Bit-flip (X)",
    "Y": "Bit-phase-flip (Y)",
    "Z": "Phase-flip (Z)",
}


@dataclass
class NoiseConfig:
    """Noise channel settings.

    Attributes
    ----------
    type : NoiseType
        Pauli channel.
    mode : NoiseMode
        Probability or exact-count sampling.
    probability : float
        Per-qubit error probability (probability mode).
    exact_count : int, optional
        Number of errors (exact-count mode, required there).
    target_qubits : sequence of int, optional
        Distinct candidate qubits; defaults to all data qubits.
    """
    type: Union[NoiseType, str] = NoiseType.NONE
    mode: Union[NoiseMode, str] = NoiseMode.PROBABILITY
    probability: float = 0.0
    exact_count: Optional[int] = None
    target_qubits: Optional[Sequence[int]] = None

    def __post_init__(self):
        self.type = coerce_enum(NoiseType, self.type, "noise type")
        self.mode = coerce_enum(NoiseMode, self.mode, "noise mode")
        self.probability = float(self.probability)
        if not 0.0 <= self.probability <= 1.0:
            raise ConfigurationError(
                f"Noise probability must be in [0, 1]. Got {self.probability}"
            )
        if self.exact_count is not None:
            self.exact_count = int(self.exact_count)
            if self.exact_count < 0:
                raise ConfigurationError(
                    f"exact_count must be >= 0. Got {self.exact_count}"
                )
        if self.mode is NoiseMode.EXACT_COUNT and self.exact_count is None:
            raise ConfigurationError("exact-count mode requires exact_count")
        if self.target_qubits is not None:
            self.target_qubits = tuple(int(q) for q in self.target_qubits)
            repeated = sorted({q for q in self.target_qubits if self.target_qubits.count(q) > 1})
            if repeated:
                raise ConfigurationError(
                    f"target_qubits must be distinct. Repeated: {repeated}"
                )

    @classmethod
    def exact(
        cls,
        type: Union[NoiseType, str],
        count: int,
        target_qubits: Optional[Sequence[int]] = None,
    ) -> "NoiseConfig":
        """Shorthand for exact-count noise."""
        return cls(
            type=type,
            mode=NoiseMode.EXACT_COUNT,
            probability=1.0,
            exact_count=count,
            target_qubits=target_qubits,
        )


@dataclass(frozen=True)
class NoiseEvent:
    """Outcome for one candidate qubit; ``error_type`` is "X", "Y", "Z" or "none"."""
    qubit_index: int
    error_type: str
    applied: bool


# =============================================================================
# Application
# =============================================================================

def _candidates(system: "QuantumSystem", config: NoiseConfig) -> List[int]:
    if config.target_qubits is None:
        return list(range(system.num_data_qubits))
    for q in config.target_qubits:
        if not 0 <= q < system.num_qubits:
            raise DimensionError(q, system.num_qubits)
    return list(config.target_qubits)


def _apply_pauli(system: "QuantumSystem", qubit: int, pauli: str, source: str) -> None:
    op = GateOperation(pauli, (qubit,), label=f"{pauli}{qubit} ({source})")
    system.apply_gates_with_description(
        [op], f"{_ERROR_NAMES[pauli]} error on qubit {qubit}", "noise"
    )
    logger.debug("%s noise %s on q%d", source, pauli, qubit)


def _depolarizing_pauli(r: float, p: float) -> Optional[str]:
    if r < p / 3:
        return "X"
    if r < 2 * p / 3:
        return "Y"
    if r < p:
        return "Z"
    return None


def apply_noise(
    system: "QuantumSystem",
    config: NoiseConfig,
    rng: Optional[np.random.Generator] = None,
) -> List[NoiseEvent]:
    """Apply ``config`` to ``system`` and report one event per candidate.

    Parameters
    ----------
    system : QuantumSystem
        System to corrupt in place.
    config : NoiseConfig
        Channel, mode and candidates.
    rng : numpy.random.Generator, optional
        Random source; defaults to ``system.rng``.

    Returns
    -------
    List[NoiseEvent]
        In candidate order.
    """
    rng = rng if rng is not None else system.rng
    candidates = _candidates(system, config)

    if config.type is NoiseType.NONE:
        return [NoiseEvent(q, "none", False) for q in candidates]

    if config.mode is NoiseMode.EXACT_COUNT:
        count = config.exact_count
        if count > len(candidates):
            warnings.warn(
                f"exact_count={count} exceeds the {len(candidates)} candidate qubits; "
                f"applying {len(candidates)} errors",
                UserWarning,
                stacklevel=2,
            )
            count = len(candidates)
        chosen = set(
            int(q) for q in rng.choice(candidates, size=count, replace=False)
        ) if count else set()

        events = []
        for q in candidates:
            if q not in chosen:
                events.append(NoiseEvent(q, "none", False))
                continue
            if config.type is NoiseType.DEPOLARIZING:
                pauli = ("X", "Y", "Z")[int(rng.integers(3))]
            else:
                pauli = _PAULI_FOR_TYPE[config.type]
            _apply_pauli(system, q, pauli, "noise")
            events.append(NoiseEvent(q, pauli, True))
        return events

    events = []
    p = config.probability
    for q in candidates:
        r = rng.random()
        if config.type is NoiseType.DEPOLARIZING:
            pauli = _depolarizing_pauli(r, p)
        else:
            pauli = _PAULI_FOR_TYPE[config.type] if r < p else None
        if pauli is None:
            events.append(NoiseEvent(q, "none", False))
        else:
            _apply_pauli(system, q, pauli, "noise")
            events.append(NoiseEvent(q, pauli, True))
    return events


def inject_error(system: "QuantumSystem", qubit: int, error_type: str) -> NoiseEvent:
    """Apply an X, Y or Z error unconditionally (manual injection)."""
    pauli = str(error_type).upper()
    if pauli not in _ERROR_NAMES:
        raise ConfigurationError(f"Unknown error type {error_type!r}. Expected X, Y or Z")
    physical = system.physical_index(qubit)
    op = GateOperation(pauli, (physical,), label=f"{pauli}{physical} (injected)")
    system.apply_gates_with_description(
        [op], f"Manually injected {pauli} error on qubit {physical}", "noise"
    )
    logger.debug("injected %s on q%d", pauli, physical)
    return NoiseEvent(physical, pauli, True)


def inject_errors(
    system: "QuantumSystem", errors: Iterable[Tuple[int, str]]
) -> List[NoiseEvent]:
    """Inject several errors in order; ``errors`` holds (qubit, type) pairs."""
    return [inject_error(system, q, t) for q, t in errors]


# =============================================================================
# Reference curves and descriptions
# =============================================================================

def repetition_logical_error_rate(p: float) -> float:
    """P(two or more of three bit flips) = 3p^2(1-p) + p^3."""
    return 3 * p * p * (1 - p) + p ** 3


def shor_logical_error_rate(p: float) -> float:
    """Leading-order Shor code failure rate, p^2 (1 + 2p)."""
    return p * p * (1 + 2 * p)


def describe_noise(config: NoiseConfig) -> str:
    """One-line human-readable summary of ``config``."""
    if config.type is NoiseType.NONE:
        return "No noise"
    where = (
        "qubits " + ", ".join(str(q) for q in config.target_qubits)
        if config.target_qubits is not None
        else "all qubits"
    )
    name = {
        NoiseType.BIT_FLIP: "Bit-flip (X)",
        NoiseType.PHASE_FLIP: "Phase-flip (Z)",
        NoiseType.BIT_PHASE_FLIP: "Bit-phase-flip (Y)",
        NoiseType.DEPOLARIZING: "Depolarizing",
    }[config.type]
    if config.mode is NoiseMode.EXACT_COUNT:
        return f"{name} noise, exactly {config.exact_count} error(s) on {where}"
    return f"{name} noise with p={config.probability * 100:.1f}% on {where}"


__all__ = [
    "NoiseType",
    "NoiseMode",
    "NoiseConfig",
    "NoiseEvent",
    "apply_noise",
    "inject_error",
    "inject_errors",
    "repetition_logical_error_rate",
    "shor_logical_error_rate",
    "describe_noise",
]
