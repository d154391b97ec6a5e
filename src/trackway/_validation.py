"""Shared argument coercion and validation helpers."""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

import numpy as np

from trackway.errors import ConfigurationError

E = TypeVar("E", bound=Enum)


def _normalize_name(name: str) -> str:
    """Normalize an option name by removing non-alphanumeric characters and
    converting to lowercase.

    Parameters
    ----------
    name : str
        The option name to normalize.

    Returns
    -------
    str
        The normalized name.

    """
    return "".join(filter(str.isalnum, name)).lower()


def coerce_enum(value: E | str, enum_type: type[E], argument: str) -> E:
    """Resolve an enum member from a member or a loosely spelled string.

    Parameters
    ----------
    value : Enum member or str
        Value to resolve. Strings match member values or names after
        normalization, so ``"Min.Box"``, ``"min_box"`` and ``"MINBOX"`` are
        equivalent.
    enum_type : type[Enum]
        Enum class to resolve against.
    argument : str
        Argument name used in the error message.

    Returns
    -------
    Enum member

    Raises
    ------
    ConfigurationError
        If `value` does not name a member of `enum_type`.
    """
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        wanted = _normalize_name(value)
        for member in enum_type:
            if wanted in (_normalize_name(str(member.value)), _normalize_name(member.name)):
                return member
    valid = ", ".join(repr(member.value) for member in enum_type)
    raise ConfigurationError(
        f"Invalid '{argument}' value {value!r}. Valid options are: {valid}.",
        error_code="E2001",
    )


def validate_nsim(nsim: int) -> int:
    """Check that a simulation count is a positive integer."""
    if isinstance(nsim, bool) or not isinstance(nsim, (int, np.integer)) or nsim < 1:
        raise ConfigurationError(
            f"nsim must be a positive integer, got {nsim!r}.\n"
            f"Fix: request at least one simulation (999 is a common choice).",
            error_code="E2006",
        )
    return int(nsim)
