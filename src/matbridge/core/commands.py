"""Command strings issued to the engine, one builder per protocol step.

Builders take identifiers and integer lengths as given; callers are
responsible for passing names that are valid in the engine.
"""

from __future__ import annotations

from typing import Optional, Sequence


def real_command(name: str) -> str:
    return f"real({name});"


def isreal_command(name: str) -> str:
    return f"isreal({name});"


def imag_command(name: str) -> str:
    return f"imag({name});"


def size_command(name: str) -> str:
    return f"size({name});"


def genvarname_command(base: str) -> str:
    return f"genvarname('{base}', who);"


def reshape_command(
    target: str,
    real_var: str,
    imag_var: Optional[str],
    lengths: Sequence[int],
) -> str:
    expr = real_var
    if imag_var is not None:
        expr += f" + {imag_var} * i"
    args = "".join(f", {int(length)}" for length in lengths)
    return f"{target} = reshape({expr}{args});"


def clear_command(name: str) -> str:
    return f"clear {name};"
