# src/qecvector/quantum/state_vector.py
"""
Dense state-vector representation of an n-qubit register.

Amplitudes are stored in a numpy ``complex128`` array of length 2^n. Basis
index ``i`` encodes the computational basis state through its bits: bit k of
``i`` is the value of qubit k (little-endian, the same convention as
``stim.TableauSimulator.state_vector(endian="little")``).

Scalars are plain Python ``complex`` values (add, multiply, ``conjugate()``
and ``abs(z) ** 2`` cover everything the simulator needs).

Gate kernels follow the index-pair picture: a single-qubit gate on qubit t
acts on every pair (i0, i1) of indices that differ only in bit t. With a
C-ordered reshape to ``(2^(n-t-1), 2, 2^t)`` the middle axis *is* bit t, so
the whole sweep over pairs is a couple of vectorized numpy operations.

Example
-------
>>> sv = StateVector(2)
>>> sv.apply_single_qubit_gate(HADAMARD, 0)
>>> sv.apply_matrix(CNOT_MATRIX, (0, 1))
>>> sv.to_string()
'(0.7071)|00⟩ + (0.7071)|11⟩'
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np
import stim

from qecvector.exceptions import DimensionError, NormalizationError

NORMALIZATION_TOLERANCE = 1e-6
_ZERO_PROBABILITY = 1e-12

# Indexed like stim.PauliString items: 0=I, 1=X, 2=Y, 3=Z.
_PAULI_BY_STIM_CODE = (
    np.eye(2, dtype=np.complex128),
    np.array([[0, 1], [1, 0]], dtype=np.complex128),
    np.array([[0, -1j], [1j, 0]], dtype=np.complex128),
    np.array([[1, 0], [0, -1]], dtype=np.complex128),
)


class StateVector:
    """Normalized amplitude vector over the 2^n computational basis."""

    def __init__(self, num_qubits: int):
        if num_qubits < 1:
            raise ValueError(f"num_qubits must be >= 1. Got {num_qubits}")
        self._num_qubits = int(num_qubits)
        self._amplitudes = np.zeros(1 << self._num_qubits, dtype=np.complex128)
        self._amplitudes[0] = 1.0

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def zeros(cls, num_qubits: int) -> "StateVector":
        """All-zero (unnormalized) vector, used to build targets entry by entry."""
        sv = cls(num_qubits)
        sv._amplitudes[0] = 0.0
        return sv

    @classmethod
    def from_amplitudes(cls, amplitudes: Iterable[complex]) -> "StateVector":
        """Build a state from explicit amplitudes (length must be a power of 2)."""
        arr = np.array(list(amplitudes), dtype=np.complex128).ravel()
        dim = arr.size
        if dim < 2 or dim & (dim - 1):
            raise ValueError(f"Amplitudes length must be a power of 2. Got {dim}")
        sv = cls(dim.bit_length() - 1)
        sv._amplitudes = arr
        return sv

    @classmethod
    def basis_state(cls, num_qubits: int, index: int) -> "StateVector":
        """Computational basis state |index⟩."""
        sv = cls.zeros(num_qubits)
        sv.set_amplitude(index, 1.0)
        return sv

    # ------------------------------------------------------------------
    # Basic accessors
    # ------------------------------------------------------------------

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def dimension(self) -> int:
        return self._amplitudes.size

    @property
    def amplitudes(self) -> np.ndarray:
        """Read-only view of the amplitude array."""
        view = self._amplitudes.view()
        view.flags.writeable = False
        return view

    def __len__(self) -> int:
        return self.dimension

    def _check_index(self, index: int) -> None:
        if index < 0 or index >= self.dimension:
            raise DimensionError(index, self.dimension, what="Basis index")

    def _check_qubit(self, qubit: int) -> None:
        if qubit < 0 or qubit >= self._num_qubits:
            raise DimensionError(qubit, self._num_qubits)

    def amplitude(self, index: int) -> complex:
        self._check_index(index)
        return complex(self._amplitudes[index])

    def set_amplitude(self, index: int, value: complex) -> None:
        self._check_index(index)
        self._amplitudes[index] = value

    def probability(self, index: int) -> float:
        """Probability of observing basis state ``index``."""
        return abs(self.amplitude(index)) ** 2

    def probabilities(self) -> np.ndarray:
        return np.abs(self._amplitudes) ** 2

    def _bit_values(self, qubit: int) -> np.ndarray:
        return (np.arange(self.dimension) >> qubit) & 1

    def _pairs(self, qubit: int) -> np.ndarray:
        """View with shape (high, 2, low); axis 1 is the value of ``qubit``."""
        return self._amplitudes.reshape(-1, 2, 1 << qubit)

    def qubit_probability(self, qubit: int) -> float:
        """P(qubit = 1)."""
        self._check_qubit(qubit)
        return float(np.sum(np.abs(self._pairs(qubit)[:, 1, :]) ** 2))

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def norm_squared(self) -> float:
        return float(np.real(np.vdot(self._amplitudes, self._amplitudes)))

    def is_normalized(self, tol: float = NORMALIZATION_TOLERANCE) -> bool:
        return abs(self.norm_squared() - 1.0) <= tol

    def check_normalized(self, context: str = "", tol: float = NORMALIZATION_TOLERANCE) -> None:
        """Raise NormalizationError if the norm drifted beyond ``tol``."""
        norm_sq = self.norm_squared()
        if abs(norm_sq - 1.0) > tol:
            raise NormalizationError(norm_sq, context)

    def normalize(self) -> None:
        norm = np.sqrt(self.norm_squared())
        if norm > _ZERO_PROBABILITY:
            self._amplitudes /= norm

    # ------------------------------------------------------------------
    # Unitaries
    # ------------------------------------------------------------------

    def apply_single_qubit_gate(self, matrix: np.ndarray, qubit: int) -> None:
        """Apply a 2x2 unitary to ``qubit`` over every (i0, i1) index pair."""
        self._check_qubit(qubit)
        m = np.asarray(matrix, dtype=np.complex128)
        if m.shape != (2, 2):
            raise ValueError(f"Single-qubit gate must be 2x2. Got {m.shape}")
        pairs = self._pairs(qubit)
        a0 = pairs[:, 0, :].copy()
        a1 = pairs[:, 1, :].copy()
        pairs[:, 0, :] = m[0, 0] * a0 + m[0, 1] * a1
        pairs[:, 1, :] = m[1, 0] * a0 + m[1, 1] * a1

    def apply_matrix(self, matrix: np.ndarray, qubits: Sequence[int]) -> None:
        """Apply a 2^k x 2^k unitary to ``qubits``.

        ``qubits[0]`` is the most significant bit of the matrix row/column
        index, so ``CNOT_MATRIX`` on ``(control, target)`` is a CNOT.
        """
        qubits = tuple(int(q) for q in qubits)
        for q in qubits:
            self._check_qubit(q)
        if len(set(qubits)) != len(qubits):
            raise ValueError(f"Gate qubits must be distinct. Got {qubits}")
        k = len(qubits)
        m = np.asarray(matrix, dtype=np.complex128)
        if m.shape != (1 << k, 1 << k):
            raise ValueError(
                f"Gate on {k} qubit(s) needs a {1 << k}x{1 << k} matrix. Got {m.shape}"
            )
        if k == 1:
            self.apply_single_qubit_gate(m, qubits[0])
            return

        n = self._num_qubits
        axes = [n - 1 - q for q in qubits]
        front = list(range(k))
        psi = np.moveaxis(self._amplitudes.reshape((2,) * n), axes, front)
        shape = psi.shape
        out = (m @ psi.reshape(1 << k, -1)).reshape(shape)
        out = np.moveaxis(out, front, axes)
        self._amplitudes = np.ascontiguousarray(out).reshape(-1)

    # ------------------------------------------------------------------
    # Measurement and reset
    # ------------------------------------------------------------------

    def measure(
        self,
        qubit: int,
        rng: Optional[np.random.Generator] = None,
        forced: Optional[int] = None,
    ) -> int:
        """Projective Z measurement of ``qubit``.

        Parameters
        ----------
        qubit : int
            Qubit to measure.
        rng : numpy.random.Generator, optional
            Random source for the outcome draw. A fresh default generator is
            used when omitted.
        forced : int, optional
            Force the outcome (0 or 1) instead of drawing it.

        Returns
        -------
        int
            The outcome. The vector is projected onto it and renormalized.
        """
        self._check_qubit(qubit)
        p1 = self.qubit_probability(qubit)
        if forced is None:
            if rng is None:
                rng = np.random.default_rng()
            outcome = 1 if rng.random() < p1 else 0
        else:
            outcome = int(forced)
            if outcome not in (0, 1):
                raise ValueError(f"Forced outcome must be 0 or 1. Got {forced}")

        p_outcome = p1 if outcome == 1 else 1.0 - p1
        if p_outcome < _ZERO_PROBABILITY:
            raise ValueError(
                f"Cannot project qubit {qubit} onto |{outcome}⟩: outcome has zero probability"
            )
        pairs = self._pairs(qubit)
        pairs[:, 1 - outcome, :] = 0.0
        self._amplitudes /= np.sqrt(p_outcome)
        return outcome

    def reset(self, qubit: int) -> None:
        """Force ``qubit`` to |0⟩ by folding the bit=1 half onto the bit=0 half."""
        self._check_qubit(qubit)
        pairs = self._pairs(qubit)
        pairs[:, 0, :] += pairs[:, 1, :]
        pairs[:, 1, :] = 0.0
        norm_sq = self.norm_squared()
        if norm_sq < _ZERO_PROBABILITY:
            raise NormalizationError(norm_sq, f"reset of qubit {qubit}")
        self._amplitudes /= np.sqrt(norm_sq)

    # ------------------------------------------------------------------
    # Derived quantities
    # ------------------------------------------------------------------

    def inner(self, other: "StateVector") -> complex:
        """⟨self|other⟩; 0 for mismatched dimensions."""
        if self.dimension != other.dimension:
            return 0j
        return complex(np.vdot(self._amplitudes, other._amplitudes))

    def fidelity(self, other: "StateVector") -> float:
        """|⟨other|self⟩|², clipped to [0, 1]."""
        return float(min(1.0, max(0.0, abs(self.inner(other)) ** 2)))

    def bloch_coordinates(self, qubit: int) -> Tuple[float, float, float]:
        """(⟨X⟩, ⟨Y⟩, ⟨Z⟩) of ``qubit``'s reduced density matrix.

        Only index pairs differing in bit ``qubit`` contribute to the
        off-diagonal term, which is exactly the partial trace over the rest
        of the register. The vector is shorter than 1 when ``qubit`` is
        entangled.
        """
        self._check_qubit(qubit)
        pairs = self._pairs(qubit)
        a0 = pairs[:, 0, :]
        a1 = pairs[:, 1, :]
        rho00 = float(np.sum(np.abs(a0) ** 2))
        rho11 = float(np.sum(np.abs(a1) ** 2))
        rho01 = complex(np.vdot(a1, a0))
        return (2.0 * rho01.real, -2.0 * rho01.imag, rho00 - rho11)

    def expectation(self, pauli: stim.PauliString) -> float:
        """⟨ψ|P|ψ⟩ for a Pauli string (qubit k of the string acts on qubit k)."""
        if len(pauli) > self._num_qubits:
            raise DimensionError(len(pauli) - 1, self._num_qubits)
        image = self.copy()
        for q in range(len(pauli)):
            code = pauli[q]
            if code:
                image.apply_single_qubit_gate(_PAULI_BY_STIM_CODE[code], q)
        value = np.vdot(self._amplitudes, image._amplitudes) * complex(pauli.sign)
        return float(value.real)

    def copy(self) -> "StateVector":
        sv = StateVector(self._num_qubits)
        sv._amplitudes = self._amplitudes.copy()
        return sv

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    @staticmethod
    def basis_state_label(index: int, num_qubits: int) -> str:
        """Ket label with qubit n-1 leftmost, e.g. index 1 on 3 qubits -> |001⟩."""
        return "|" + format(index, f"0{num_qubits}b") + "⟩"

    @staticmethod
    def _format_amplitude(value: complex) -> str:
        if abs(value.imag) < 1e-10:
            return f"{value.real:.4f}"
        if abs(value.real) < 1e-10:
            return f"{value.imag:.4f}i"
        sign = "+" if value.imag >= 0 else "-"
        return f"{value.real:.4f}{sign}{abs(value.imag):.4f}i"

    def nonzero_terms(self, threshold: float = 0.01) -> List[Tuple[int, complex]]:
        """(index, amplitude) pairs whose probability exceeds ``threshold``."""
        probs = self.probabilities()
        return [
            (int(i), complex(self._amplitudes[i]))
            for i in np.flatnonzero(probs > threshold)
        ]

    def to_string(self, threshold: float = 0.01) -> str:
        terms = [
            f"({self._format_amplitude(amp)}){self.basis_state_label(i, self._num_qubits)}"
            for i, amp in self.nonzero_terms(threshold)
        ]
        return " + ".join(terms) if terms else "0"

    def __repr__(self) -> str:
        return f"StateVector(num_qubits={self._num_qubits}, {self.to_string()})"
