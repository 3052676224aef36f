"""qecvector Codes Module

Class Hierarchy:
    StateVectorCode (ABC) - circuits, stabilizers, syndrome table, targets
    ├── RepetitionCode    - 3 data qubits, 2 physical ancillas
    └── ShorCode91        - 9 data qubits, 8 virtual ancillas on 1 physical

Code Organization:
    codes/
    ├── abstract_code.py   - Base class, syndrome-table rows, enums
    └── small/             - Repetition and Shor codes
"""
from typing import Union

from .abstract_code import (
    CodeType,
    LogicalState,
    StateVectorCode,
    Syndrome,
    SyndromeTableEntry,
)
from .small import RepetitionCode, ShorCode91
from qecvector.utils import coerce_enum

_CODES = {
    CodeType.REPETITION: RepetitionCode,
    CodeType.SHOR: ShorCode91,
}


def create_code(code_type: Union[CodeType, str]) -> StateVectorCode:
    """Instantiate the code registered for ``code_type``.

    Unknown names raise ConfigurationError.
    """
    return _CODES[coerce_enum(CodeType, code_type, "code type")]()


__all__ = [
    "CodeType",
    "LogicalState",
    "StateVectorCode",
    "Syndrome",
    "SyndromeTableEntry",
    "RepetitionCode",
    "ShorCode91",
    "create_code",
]
