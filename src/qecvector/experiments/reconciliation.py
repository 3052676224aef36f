# src/qecvector/experiments/reconciliation.py
"""
Separating deliberate logical operations from errors in a syndrome.

When a caller runs its own gates on an encoded state, some stabilizers may
legitimately flip (the gates moved the state out of the code space on
purpose). The syndrome those gates *alone* would produce is the expected
syndrome; whatever the measurement shows beyond it was caused by errors::

    error syndrome = expected XOR measured

Only the error syndrome is handed to the code's correction table, so the
same decoder works no matter which deliberate gates preceded it.
"""
from __future__ import annotations

from typing import Sequence, Tuple


def isolate_error_syndrome(
    expected: Sequence[int], measured: Sequence[int]
) -> Tuple[int, ...]:
    """Bitwise XOR of two equal-length syndromes.

    Parameters
    ----------
    expected : sequence of int
        Syndrome implied by the intentional gates (error-free).
    measured : sequence of int
        Syndrome observed on the real, possibly corrupted, system.

    Returns
    -------
    Tuple[int, ...]
        1 where the two disagree.

    Raises
    ------
    ValueError
        If the lengths differ or a bit is not 0/1.
    """
    if len(expected) != len(measured):
        raise ValueError(
            f"Syndrome lengths differ: expected {len(expected)} bits, measured {len(measured)}"
        )
    for bit in (*expected, *measured):
        if bit not in (0, 1):
            raise ValueError(f"Syndrome bits must be 0 or 1. Got {bit!r}")
    return tuple(int(e) ^ int(m) for e, m in zip(expected, measured))
