"""Small codes simulated directly on state vectors."""

from .repetition_codes import RepetitionCode
from .shor_code import ShorCode91

__all__ = ["RepetitionCode", "ShorCode91"]
