"""
Tests for the [[9,1,3]] Shor code on a 10-qubit register (9 data qubits,
one physical ancilla shared by all eight stabilizer measurements).
"""
import itertools

import numpy as np
import pytest
import stim

from qecvector.codes import CodeType, LogicalState, ShorCode91, create_code
from qecvector.exceptions import ConfigurationError
from qecvector.noise import inject_error
from qecvector.quantum.state_vector import StateVector

CODEWORD_AMPLITUDE = 1 / (2 * np.sqrt(2))


def _make_encoded(state="zero", seed=0):
    code = ShorCode91()
    system = code.create_system(rng=np.random.default_rng(seed))
    code.prepare_input(system, state)
    code.encode(system)
    return code, system


class TestStructure:

    def test_parameters(self):
        code = ShorCode91()
        assert (code.n, code.k, code.distance) == (9, 1, 3)
        assert code.num_virtual_ancillas == 8
        assert code.num_physical_ancillas == 1
        assert code.num_physical_qubits == 10
        assert code.code_type is CodeType.SHOR

    def test_register_size(self):
        _, system = _make_encoded()
        assert system.num_qubits == 10
        assert system.dimension == 1024
        assert set(system.ancilla_map.values()) == {9}

    def test_stabilizer_order(self):
        code = ShorCode91()
        stabs = [str(s) for s in code.stabilizers]
        assert stabs[:2] == ["+ZZ_______", "+_ZZ______"]
        assert stabs[6:] == ["+XXXXXX___", "+___XXXXXX"]

    def test_stabilizers_commute(self):
        code = ShorCode91()
        for a, b in itertools.combinations(code.stabilizers, 2):
            assert a.commutes(b)
        for s in code.stabilizers:
            assert s.commutes(code.logical_x)
            assert s.commutes(code.logical_z)
        assert not code.logical_x.commutes(code.logical_z)

    def test_superposition_inputs_rejected(self):
        code = ShorCode91()
        for state in ("plus", "minus"):
            with pytest.raises(ConfigurationError):
                code.validate_initial_state(state)

    def test_factory(self):
        assert isinstance(create_code(CodeType.SHOR), ShorCode91)


class TestEncoding:

    @pytest.mark.parametrize("state", ["zero", "one"])
    def test_encoded_state_matches_target(self, state):
        code, system = _make_encoded(state)
        assert system.fidelity_with(code.logical_target(state)) == pytest.approx(1)

    def test_codeword_amplitudes(self):
        _, system = _make_encoded("one")
        # one block in |111⟩ gives a minus sign, two give a plus sign
        assert system.state.amplitude(0b000000111) == pytest.approx(-CODEWORD_AMPLITUDE)
        assert system.state.amplitude(0b000111111) == pytest.approx(CODEWORD_AMPLITUDE)
        assert system.state.amplitude(0) == pytest.approx(CODEWORD_AMPLITUDE)
        assert system.state.qubit_probability(9) == pytest.approx(0)

    @pytest.mark.parametrize("state", ["zero", "one"])
    def test_decode_inverts_encode(self, state):
        code, system = _make_encoded(state)
        code.decode(system)
        assert system.fidelity_with(code.decoded_target(state)) == pytest.approx(1)

    def test_encoding_agrees_with_stim(self):
        code = ShorCode91()
        sim = stim.TableauSimulator()
        sim.do_circuit(code.encoding_stim_circuit())
        sim.set_num_qubits(9)
        stim_vector = np.asarray(sim.state_vector(endian="little"))
        ours = code.logical_target("zero").amplitudes[:512]
        assert abs(np.vdot(ours, stim_vector)) ** 2 == pytest.approx(1, abs=1e-6)

    def test_logical_operators(self):
        code, system = _make_encoded("zero")
        assert system.expectation(code.logical_z) == pytest.approx(1)
        for q in (0, 3, 6):
            inject_error(system, q, "Z")
        assert system.fidelity_with(code.logical_target("one")) == pytest.approx(1)

    def test_expected_syndrome_of_codeword(self):
        code, system = _make_encoded("one")
        assert code.expected_syndrome(system) == (0,) * 8


class TestSyndromes:

    def test_bit_flip_on_first_qubit(self):
        code, system = _make_encoded("zero")
        inject_error(system, 0, "X")
        syndrome = code.measure_syndrome(system)
        assert code.bit_flip_syndrome(syndrome) == (1, 0, 0, 0, 0, 0)
        assert code.phase_flip_syndrome(syndrome) == (0, 0)

    def test_phase_flip_on_first_qubit(self):
        code, system = _make_encoded("zero")
        inject_error(system, 0, "Z")
        syndrome = code.measure_syndrome(system)
        assert code.bit_flip_syndrome(syndrome) == (0,) * 6
        assert code.phase_flip_syndrome(syndrome) == (1, 0)

    def test_y_error_in_middle_block(self):
        code, system = _make_encoded("zero")
        inject_error(system, 4, "Y")
        syndrome = code.measure_syndrome(system)
        assert syndrome[2:4] == (1, 1)
        assert code.phase_flip_syndrome(syndrome) == (1, 1)
        assert code.correct(system, syndrome) == [4, 3]
        assert system.fidelity_with(code.logical_target("zero")) >= 0.95

    def test_phase_flip_in_last_block_corrected_on_leader(self):
        code, system = _make_encoded("one")
        inject_error(system, 8, "Z")
        syndrome = code.measure_syndrome(system)
        assert code.phase_flip_syndrome(syndrome) == (0, 1)
        assert code.correct(system, syndrome) == [6]
        assert system.fidelity_with(code.logical_target("one")) == pytest.approx(1)

    def test_ancilla_reused_cleanly(self):
        code, system = _make_encoded("zero")
        inject_error(system, 7, "X")
        code.measure_syndrome(system)
        assert system.state.qubit_probability(9) == pytest.approx(0)
        # A second extraction sees the same syndrome
        assert code.measure_syndrome(system) == (0, 0, 0, 0, 1, 1, 0, 0)

    @pytest.mark.parametrize("state", ["zero", "one"])
    def test_every_single_qubit_pauli_is_corrected(self, state):
        for qubit, pauli in itertools.product(range(9), "XYZ"):
            code, system = _make_encoded(state)
            inject_error(system, qubit, pauli)
            syndrome = code.measure_syndrome(system)
            assert any(syndrome), (qubit, pauli)
            code.correct(system, syndrome)
            fidelity = system.fidelity_with(code.logical_target(state))
            assert fidelity >= 0.95, (qubit, pauli, syndrome)

    def test_phase_flips_in_two_blocks_fail(self):
        code, system = _make_encoded("zero")
        inject_error(system, 0, "Z")
        inject_error(system, 3, "Z")
        syndrome = code.measure_syndrome(system)
        assert code.phase_flip_syndrome(syndrome) == (0, 1)
        assert code.correct(system, syndrome) == [6]
        assert system.fidelity_with(code.logical_target("zero")) < 0.5
        assert system.fidelity_with(code.logical_target("one")) == pytest.approx(1)


class TestSyndromeTable:

    def test_rows_cover_blocks_and_phase(self):
        table = ShorCode91().syndrome_table()
        assert len(table) == 16
        phase_rows = [e for e in table if e.positions == (6, 7)]
        assert [e.as_dict()["correction"] for e in phase_rows] == [
            "None", "Apply Z0", "Apply Z3", "Apply Z6",
        ]
        assert phase_rows[2].meaning == "Phase error in block 1"

    def test_lookup_picks_one_row_per_group(self):
        code = ShorCode91()
        rows = code.lookup((0, 0, 1, 0, 0, 0, 1, 1))
        assert [e.meaning for e in rows] == [
            "No error",
            "Bit-flip error on q3",
            "No error",
            "Phase error in block 1",
        ]

    def test_decoded_target_uses_physical_register(self):
        target = ShorCode91().decoded_target(LogicalState.ONE)
        assert target.dimension == 1024
        assert target.probability(1) == pytest.approx(1)
        assert isinstance(target, StateVector)
