from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from .channel import RemoteChannel
from .commands import imag_command, isreal_command, real_command, size_command
from .dimensions import to_local_lengths
from .exceptions import MalformedResultError
from .matrix import MatrixValue

logger = logging.getLogger(__name__)


def _single_result(channel: RemoteChannel, command: str) -> Any:
    return channel.returning_eval(command, 1)[0]


def _as_flat_doubles(command: str, value: Any) -> np.ndarray:
    if isinstance(value, np.ndarray) and value.dtype.kind in "fiu":
        return value.astype(np.float64, copy=False).reshape(-1, order="F")
    if isinstance(value, (list, tuple)) and all(
        isinstance(item, (int, float)) and not isinstance(item, bool) for item in value
    ):
        return np.asarray(value, dtype=np.float64)
    raise MalformedResultError(command, "numeric array", value)


def _as_bool(command: str, value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, np.ndarray) and value.dtype == np.bool_ and value.size > 0:
        return bool(value.reshape(-1)[0])
    if isinstance(value, (list, tuple)) and value and isinstance(value[0], (bool, np.bool_)):
        return bool(value[0])
    raise MalformedResultError(command, "boolean array", value)


@dataclass(frozen=True)
class GetMatrixCall:
    """Read a whole matrix from the engine.

    Four separate evaluations are needed. If ``name`` is reassigned by someone
    else between them, the parts returned may come from different values.
    """

    name: str

    def call(self, channel: RemoteChannel) -> MatrixValue:
        command = real_command(self.name)
        real = _as_flat_doubles(command, _single_result(channel, command))

        command = isreal_command(self.name)
        is_real = _as_bool(command, _single_result(channel, command))
        imaginary = None
        if not is_real:
            command = imag_command(self.name)
            imaginary = _as_flat_doubles(command, _single_result(channel, command))

        command = size_command(self.name)
        lengths = to_local_lengths(_as_flat_doubles(command, _single_result(channel, command)))

        logger.debug(
            "Read %s matrix %s with lengths %s",
            "real" if imaginary is None else "complex",
            self.name,
            list(lengths),
        )
        return MatrixValue(real, imaginary, lengths)
