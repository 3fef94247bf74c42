from __future__ import annotations

import logging
from dataclasses import InitVar, dataclass, field
from typing import Optional, Tuple

import numpy as np

from .channel import RemoteChannel
from .commands import clear_command, reshape_command
from .matrix import MatrixValue
from .names import allocate_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True, repr=False, eq=False)
class SetMatrixCall:
    """Store a matrix in the engine under ``name``.

    The real and imaginary parts are uploaded to temporary variables and then
    combined and reshaped into ``name`` by a single evaluated statement, so
    ``name`` is never bound to a partial value. Temporaries are not removed if
    a step fails.
    """

    name: str
    matrix: InitVar[MatrixValue]
    real: np.ndarray = field(init=False)
    imaginary: Optional[np.ndarray] = field(init=False)
    lengths: Tuple[int, ...] = field(init=False)

    def __post_init__(self, matrix: MatrixValue) -> None:
        object.__setattr__(self, "real", matrix.real_linear_array())
        object.__setattr__(self, "imaginary", matrix.imaginary_linear_array())
        object.__setattr__(self, "lengths", tuple(matrix.get_lengths()))

    def call(self, channel: RemoteChannel) -> None:
        real_var = allocate_name(channel, self.name + "_real")
        channel.set_variable(real_var, self.real)

        imag_var = None
        if self.imaginary is not None:
            imag_var = allocate_name(channel, self.name + "_imag")
            channel.set_variable(imag_var, self.imaginary)

        channel.eval(reshape_command(self.name, real_var, imag_var, self.lengths))

        # genvarname truncates long bases, so a temporary can come back as the
        # target itself; that one now holds the result.
        for temp in (real_var, imag_var):
            if temp is not None and temp != self.name:
                channel.eval(clear_command(temp))
        logger.debug(
            "Wrote matrix %s with lengths %s via %s",
            self.name,
            list(self.lengths),
            ", ".join(var for var in (real_var, imag_var) if var is not None),
        )
        return None

    def __repr__(self) -> str:
        kind = "real" if self.imaginary is None else "complex"
        return f"SetMatrixCall(name={self.name!r}, {kind}, lengths={list(self.lengths)})"
