"""
Tests for the dense StateVector engine and the gate catalogue.

Covers little-endian indexing, single- and multi-qubit gate kernels,
measurement/reset, Bloch coordinates, fidelity, Pauli expectations and
agreement with stim's tableau simulator on Clifford circuits.
"""
import numpy as np
import pytest
import stim

from qecvector.exceptions import DimensionError, NormalizationError
from qecvector.quantum.gates import (
    CNOT_MATRIX,
    HADAMARD,
    PAULI_X,
    S_GATE,
    GateName,
    GateOperation,
    apply_gate,
    rx,
    rz,
)
from qecvector.quantum.state_vector import StateVector

SQRT1_2 = 1 / np.sqrt(2)


def _bell() -> StateVector:
    sv = StateVector(2)
    sv.apply_single_qubit_gate(HADAMARD, 0)
    sv.apply_matrix(CNOT_MATRIX, (0, 1))
    return sv


def _apply(sv: StateVector, name, *qubits, params=()):
    apply_gate(sv, GateOperation(name, qubits, params))


# ============================================================================
# Construction and indexing
# ============================================================================

class TestConstruction:

    def test_starts_in_all_zero_state(self):
        sv = StateVector(3)
        assert sv.dimension == 8
        assert sv.amplitude(0) == 1
        assert sv.is_normalized()

    def test_zeros_is_unnormalized(self):
        sv = StateVector.zeros(2)
        assert sv.norm_squared() == 0
        with pytest.raises(NormalizationError):
            sv.check_normalized("test")

    def test_from_amplitudes_requires_power_of_two(self):
        with pytest.raises(ValueError):
            StateVector.from_amplitudes([1, 0, 0])

    def test_from_amplitudes_infers_qubit_count(self):
        sv = StateVector.from_amplitudes([0, 0, 0, 1])
        assert sv.num_qubits == 2
        assert sv.probability(3) == 1

    def test_qubit_k_is_bit_k(self):
        sv = StateVector(3)
        _apply(sv, GateName.X, 1)
        assert sv.probability(0b010) == pytest.approx(1.0)

    def test_basis_state_label_is_msb_first(self):
        assert StateVector.basis_state_label(1, 3) == "|001⟩"
        assert StateVector.basis_state_label(6, 3) == "|110⟩"

    def test_out_of_range_qubit(self):
        sv = StateVector(2)
        with pytest.raises(DimensionError):
            sv.apply_single_qubit_gate(PAULI_X, 2)
        with pytest.raises(IndexError):
            sv.measure(-1)

    def test_amplitudes_view_is_read_only(self):
        sv = StateVector(1)
        with pytest.raises(ValueError):
            sv.amplitudes[0] = 0


# ============================================================================
# Gates
# ============================================================================

class TestGates:

    def test_hadamard(self):
        sv = StateVector(1)
        _apply(sv, "H", 0)
        assert sv.amplitude(0) == pytest.approx(SQRT1_2)
        assert sv.amplitude(1) == pytest.approx(SQRT1_2)

    def test_bell_state(self):
        sv = _bell()
        assert sv.amplitude(0) == pytest.approx(SQRT1_2)
        assert sv.amplitude(3) == pytest.approx(SQRT1_2)
        assert sv.probability(1) == pytest.approx(0)
        assert sv.to_string() == "(0.7071)|00⟩ + (0.7071)|11⟩"

    def test_cnot_control_is_first_qubit(self):
        sv = StateVector(2)
        _apply(sv, GateName.X, 1)
        _apply(sv, GateName.CNOT, 0, 1)
        assert sv.probability(0b10) == pytest.approx(1)
        _apply(sv, GateName.CNOT, 1, 0)
        assert sv.probability(0b11) == pytest.approx(1)

    def test_cnot_on_non_adjacent_qubits(self):
        sv = StateVector(3)
        _apply(sv, GateName.X, 2)
        _apply(sv, GateName.CNOT, 2, 0)
        assert sv.probability(0b101) == pytest.approx(1)

    def test_cz_phase(self):
        sv = StateVector(2)
        _apply(sv, "H", 0)
        _apply(sv, "H", 1)
        _apply(sv, "CZ", 0, 1)
        assert sv.amplitude(3) == pytest.approx(-0.5)
        assert sv.amplitude(1) == pytest.approx(0.5)

    def test_swap(self):
        sv = StateVector(3)
        _apply(sv, "X", 0)
        _apply(sv, "SWAP", 0, 2)
        assert sv.probability(0b100) == pytest.approx(1)

    def test_toffoli(self):
        sv = StateVector(3)
        _apply(sv, "X", 0)
        _apply(sv, "X", 1)
        _apply(sv, "Toffoli", 0, 1, 2)
        assert sv.probability(0b111) == pytest.approx(1)

    def test_toffoli_needs_both_controls(self):
        sv = StateVector(3)
        _apply(sv, "X", 0)
        _apply(sv, "Toffoli", 0, 1, 2)
        assert sv.probability(0b001) == pytest.approx(1)

    def test_rotations(self):
        sv = StateVector(1)
        sv.apply_single_qubit_gate(rx(np.pi), 0)
        assert sv.probability(1) == pytest.approx(1)
        sv = StateVector(1)
        sv.apply_single_qubit_gate(HADAMARD, 0)
        sv.apply_single_qubit_gate(rz(np.pi / 2), 0)
        x, y, z = sv.bloch_coordinates(0)
        assert (x, y, z) == pytest.approx((0, 1, 0), abs=1e-9)

    def test_gate_operation_rejects_wrong_arity(self):
        with pytest.raises(ValueError):
            GateOperation(GateName.CNOT, (0,))
        with pytest.raises(ValueError):
            GateOperation(GateName.CNOT, (1, 1))

    def test_unknown_gate_name(self):
        from qecvector.exceptions import ConfigurationError
        with pytest.raises(ConfigurationError):
            GateOperation("SQRT_W", (0,))

    def test_matrix_size_checked(self):
        sv = StateVector(2)
        with pytest.raises(ValueError):
            sv.apply_matrix(HADAMARD, (0, 1))

    def test_norm_preserved_by_every_gate(self):
        sv = StateVector(3)
        ops = [
            GateOperation("H", (0,)), GateOperation("T", (0,)),
            GateOperation("CNOT", (0, 2)), GateOperation("Ry", (1,), (0.3,)),
            GateOperation("CZ", (1, 2)), GateOperation("Toffoli", (2, 1, 0)),
            GateOperation("S", (2,)), GateOperation("SWAP", (0, 1)),
        ]
        for op in ops:
            apply_gate(sv, op)
            assert sv.norm_squared() == pytest.approx(1.0, abs=1e-6)


# ============================================================================
# Measurement and reset
# ============================================================================

class TestMeasurement:

    def test_deterministic_outcomes(self):
        rng = np.random.default_rng(1)
        sv = StateVector(2)
        assert sv.measure(0, rng) == 0
        _apply(sv, "X", 1)
        assert sv.measure(1, rng) == 1

    def test_forced_projection_collapses_bell_pair(self):
        sv = _bell()
        assert sv.measure(0, forced=1) == 1
        assert sv.probability(0b11) == pytest.approx(1)
        assert sv.is_normalized()

    def test_forcing_impossible_outcome_raises(self):
        sv = StateVector(1)
        with pytest.raises(ValueError):
            sv.measure(0, forced=1)

    def test_outcome_statistics(self):
        rng = np.random.default_rng(1234)
        ones = 0
        for _ in range(2000):
            sv = StateVector(1)
            sv.apply_single_qubit_gate(HADAMARD, 0)
            ones += sv.measure(0, rng)
        assert 0.45 < ones / 2000 < 0.55

    def test_reset_returns_qubit_to_zero(self):
        sv = StateVector(1)
        _apply(sv, "X", 0)
        sv.reset(0)
        assert sv.probability(0) == pytest.approx(1)

    def test_reset_folds_bit_one_half(self):
        sv = _bell()
        sv.reset(0)
        assert sv.qubit_probability(0) == pytest.approx(0)
        assert sv.amplitude(0b00) == pytest.approx(SQRT1_2)
        assert sv.amplitude(0b10) == pytest.approx(SQRT1_2)
        assert sv.is_normalized()


# ============================================================================
# Derived quantities
# ============================================================================

class TestObservables:

    @pytest.mark.parametrize(
        "gates,expected",
        [
            ([], (0, 0, 1)),
            ([PAULI_X], (0, 0, -1)),
            ([HADAMARD], (1, 0, 0)),
            ([HADAMARD, S_GATE], (0, 1, 0)),
        ],
    )
    def test_bloch_coordinates(self, gates, expected):
        sv = StateVector(1)
        for g in gates:
            sv.apply_single_qubit_gate(g, 0)
        assert sv.bloch_coordinates(0) == pytest.approx(expected, abs=1e-9)

    def test_entangled_qubit_has_short_bloch_vector(self):
        sv = _bell()
        for q in (0, 1):
            assert np.linalg.norm(sv.bloch_coordinates(q)) == pytest.approx(0, abs=1e-9)

    def test_bloch_of_one_qubit_in_product_state(self):
        sv = StateVector(3)
        sv.apply_single_qubit_gate(HADAMARD, 1)
        assert sv.bloch_coordinates(1) == pytest.approx((1, 0, 0), abs=1e-9)
        assert sv.bloch_coordinates(2) == pytest.approx((0, 0, 1), abs=1e-9)

    def test_fidelity(self):
        a = StateVector(2)
        b = StateVector(2)
        assert a.fidelity(b) == pytest.approx(1)
        _apply(b, "X", 0)
        assert a.fidelity(b) == pytest.approx(0)
        _apply(a, "H", 0)
        assert a.fidelity(b) == pytest.approx(0.5)

    def test_fidelity_ignores_global_phase(self):
        a = StateVector(1)
        b = StateVector.from_amplitudes([1j, 0])
        assert a.fidelity(b) == pytest.approx(1)

    def test_fidelity_of_mismatched_dimensions_is_zero(self):
        assert StateVector(2).fidelity(StateVector(3)) == 0

    @pytest.mark.parametrize(
        "pauli,value",
        [("ZZ", 1), ("XX", 1), ("YY", -1), ("Z_", 0), ("-ZZ", -1)],
    )
    def test_pauli_expectation_on_bell_state(self, pauli, value):
        assert _bell().expectation(stim.PauliString(pauli)) == pytest.approx(value, abs=1e-9)

    def test_expectation_rejects_long_pauli(self):
        with pytest.raises(DimensionError):
            StateVector(1).expectation(stim.PauliString("ZZ"))


# ============================================================================
# stim cross-validation
# ============================================================================

class TestAgainstStim:

    @pytest.mark.parametrize(
        "text,n",
        [
            ("H 0\nCX 0 1\nS 1\nH 2\nCZ 1 2", 3),
            ("H 0 1 2 3\nCZ 0 1 2 3\nCX 3 0\nS_DAG 2\nSWAP 1 3\nY 0", 4),
        ],
    )
    def test_clifford_circuits_match_tableau_simulator(self, text, n):
        circuit = stim.Circuit(text)
        sim = stim.TableauSimulator()
        sim.do_circuit(circuit)
        sim.set_num_qubits(n)
        expected = StateVector.from_amplitudes(sim.state_vector(endian="little"))

        from qecvector.quantum.system import QuantumSystem
        system = QuantumSystem(n)
        system.apply_stim_circuit(circuit)
        assert system.state.fidelity(expected) == pytest.approx(1.0, abs=1e-6)
