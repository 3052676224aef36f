"""Tests for separating deliberate syndrome bits from error-induced ones."""
import pytest

from qecvector.experiments import isolate_error_syndrome


class TestIsolateErrorSyndrome:

    def test_xor(self):
        assert isolate_error_syndrome((1, 0), (1, 1)) == (0, 1)
        assert isolate_error_syndrome([0, 0, 1], [1, 0, 1]) == (1, 0, 0)

    def test_matching_syndromes_cancel(self):
        syndrome = (1, 0, 1, 1, 0, 0, 1, 0)
        assert isolate_error_syndrome(syndrome, syndrome) == (0,) * 8

    def test_empty(self):
        assert isolate_error_syndrome((), ()) == ()

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            isolate_error_syndrome((0, 1), (0, 1, 0))

    def test_non_binary_bits(self):
        with pytest.raises(ValueError):
            isolate_error_syndrome((0, 2), (0, 1))
