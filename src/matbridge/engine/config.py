from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass
class EngineConfig:
    """
    Switches for the local reference engine.

    * ``name_length_max`` caps identifiers produced by ``genvarname``.
    * ``imaginary_units`` lists names that evaluate to the imaginary unit
      unless a variable of the same name is bound; it must include ``"i"``.
    * ``log_commands`` raises command logging from DEBUG to INFO.
    """

    name_length_max: int = 63
    imaginary_units: Tuple[str, ...] = ("i", "j")
    log_commands: bool = False

    def normalized(self) -> "EngineConfig":
        max_len = int(self.name_length_max)
        if max_len <= 0:
            raise ValueError("name_length_max must be positive")
        units = tuple(str(unit) for unit in self.imaginary_units)
        if not units:
            raise ValueError("imaginary_units must name at least one identifier")
        for unit in units:
            if not unit.isidentifier():
                raise ValueError(f"Imaginary unit {unit!r} is not a valid identifier")
        if "i" not in units:
            raise ValueError("imaginary_units must include 'i', the unit used by matrix writes")
        return EngineConfig(
            name_length_max=max_len,
            imaginary_units=units,
            log_commands=bool(self.log_commands),
        )
