from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np

ArrayLike = Union[np.ndarray, Sequence[float], Sequence[int]]


def _frozen_vector(values: ArrayLike, label: str) -> np.ndarray:
    arr = np.array(values, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"{label} array must be one-dimensional, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


def _coerce_lengths(lengths: Sequence[Any]) -> Tuple[int, ...]:
    result = []
    for length in lengths:
        if isinstance(length, (bool, np.bool_)) or not isinstance(length, numbers.Integral):
            raise ValueError(f"Dimension length {length!r} is not an integer")
        if int(length) < 0:
            raise ValueError(f"Dimension length {length!r} is negative")
        result.append(int(length))
    return tuple(result)


@dataclass(frozen=True, init=False, repr=False, eq=False)
class MatrixValue:
    """
    Immutable numeric matrix of any dimensionality, real or complex.

    Values are held as flat ``float64`` arrays in column-major order, the
    linearization used by the engine, alongside the length of every dimension.
    ``imaginary`` is ``None`` for purely real matrices. Empty ``lengths`` are
    only accepted together with an empty ``real`` array.
    """

    real: np.ndarray
    imaginary: Optional[np.ndarray]
    lengths: Tuple[int, ...]

    def __init__(
        self,
        real: ArrayLike,
        imaginary: Optional[ArrayLike],
        lengths: Sequence[int],
    ):
        real_arr = _frozen_vector(real, "Real")
        imag_arr = None
        if imaginary is not None:
            imag_arr = _frozen_vector(imaginary, "Imaginary")
            if imag_arr.shape != real_arr.shape:
                raise ValueError(
                    f"Imaginary array has {imag_arr.size} elements; "
                    f"real array has {real_arr.size}"
                )
        dims = _coerce_lengths(lengths)
        if not dims and real_arr.size:
            raise ValueError(f"Empty lengths describe no elements; real array has {real_arr.size}")
        if dims and math.prod(dims) != real_arr.size:
            raise ValueError(
                f"Lengths {list(dims)} describe {math.prod(dims)} elements; "
                f"real array has {real_arr.size}"
            )
        object.__setattr__(self, "real", real_arr)
        object.__setattr__(self, "imaginary", imag_arr)
        object.__setattr__(self, "lengths", dims)

    @classmethod
    def from_array(cls, array: Any) -> "MatrixValue":
        arr = np.asarray(array)
        if arr.ndim == 0:
            arr = arr.reshape(1, 1)
        elif arr.ndim == 1:
            arr = arr.reshape(-1, 1)
        lengths = tuple(int(dim) for dim in arr.shape)
        flat = arr.reshape(-1, order="F")
        if np.iscomplexobj(flat):
            return cls(flat.real, flat.imag, lengths)
        return cls(flat, None, lengths)

    @property
    def is_real(self) -> bool:
        return self.imaginary is None

    @property
    def ndim(self) -> int:
        return len(self.lengths)

    @property
    def size(self) -> int:
        return int(self.real.size)

    def real_linear_array(self) -> np.ndarray:
        return self.real.copy()

    def imaginary_linear_array(self) -> Optional[np.ndarray]:
        if self.imaginary is None:
            return None
        return self.imaginary.copy()

    def get_lengths(self) -> Tuple[int, ...]:
        return self.lengths

    def to_array(self) -> np.ndarray:
        """Return the matrix as a numpy array shaped by ``lengths``."""
        shape = self.lengths or (self.real.size,)
        if self.imaginary is None:
            values = self.real.copy()
        else:
            values = self.real + 1j * self.imaginary
        return values.reshape(shape, order="F")

    def real_value(self, *indices: int) -> float:
        return float(self.real[self._linear_index(indices)])

    def imaginary_value(self, *indices: int) -> float:
        if self.imaginary is None:
            return 0.0
        return float(self.imaginary[self._linear_index(indices)])

    def _linear_index(self, indices: Sequence[int]) -> int:
        if len(indices) != len(self.lengths):
            raise IndexError(
                f"Expected {len(self.lengths)} indices for lengths {list(self.lengths)}, "
                f"got {len(indices)}"
            )
        for index, length in zip(indices, self.lengths):
            if not 0 <= index < length:
                raise IndexError(f"Index {index} out of bounds for dimension of length {length}")
        return int(np.ravel_multi_index(tuple(indices), self.lengths, order="F"))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MatrixValue):
            return NotImplemented
        if self.lengths != other.lengths:
            return False
        if (self.imaginary is None) != (other.imaginary is None):
            return False
        if not np.array_equal(self.real, other.real):
            return False
        if self.imaginary is None:
            return True
        return bool(np.array_equal(self.imaginary, other.imaginary))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        kind = "real" if self.imaginary is None else "complex"
        return f"MatrixValue({kind}, lengths={list(self.lengths)})"
