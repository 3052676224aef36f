# src/qecvector/utils.py
"""Small helpers shared across qecvector modules."""
from __future__ import annotations

from enum import Enum
from typing import Type, TypeVar, Union

from qecvector.exceptions import ConfigurationError

E = TypeVar("E", bound=Enum)


def coerce_enum(enum_cls: Type[E], value: Union[E, str], what: str) -> E:
    """Return ``value`` as a member of ``enum_cls``.

    Accepts a member or its string value. Unknown strings raise
    ConfigurationError listing the accepted values.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(repr(m.value) for m in enum_cls)
        raise ConfigurationError(
            f"Unknown {what} {value!r}. Expected one of: {choices}"
        ) from None
