# src/qecvector/exceptions.py
"""
Exception hierarchy for qecvector.

All library errors derive from QECSimulationError. Each concrete error also
inherits the closest builtin so callers catching ValueError / IndexError /
RuntimeError keep working.

    QECSimulationError
    ├── ConfigurationError  (ValueError)   - unknown code type / initial state
    ├── DimensionError      (IndexError)   - qubit index outside the system
    ├── NormalizationError  (ArithmeticError) - amplitude norm drifted from 1
    └── SequenceError       (RuntimeError) - phase operation called out of order
"""
from __future__ import annotations


class QECSimulationError(Exception):
    """Base class for every error raised by qecvector."""


class ConfigurationError(QECSimulationError, ValueError):
    """Invalid simulator, noise or code configuration."""


class DimensionError(QECSimulationError, IndexError):
    """Qubit index (or vector length) incompatible with the system."""

    def __init__(self, index: int, size: int, what: str = "Qubit"):
        self.index = index
        self.size = size
        super().__init__(f"{what} {index} out of range [0, {size})")


class NormalizationError(QECSimulationError, ArithmeticError):
    """Squared-magnitude sum of the state vector deviates from 1.

    This always indicates an implementation bug, never a user error.
    """

    def __init__(self, norm_squared: float, context: str = ""):
        self.norm_squared = norm_squared
        where = f" after {context}" if context else ""
        super().__init__(
            f"State vector not normalized{where}: sum |a|^2 = {norm_squared:.12f}"
        )


class SequenceError(QECSimulationError, RuntimeError):
    """A phase-specific operation was invoked in the wrong simulation phase."""

    def __init__(self, operation: str, phase: str, allowed: tuple):
        self.operation = operation
        self.phase = phase
        self.allowed = allowed
        super().__init__(
            f"Cannot {operation} in phase '{phase}' "
            f"(allowed from: {', '.join(allowed)})"
        )


__all__ = [
    "QECSimulationError",
    "ConfigurationError",
    "DimensionError",
    "NormalizationError",
    "SequenceError",
]
