from __future__ import annotations

from typing import Any, Tuple

import numpy as np


def to_local_lengths(remote_vector: Any) -> Tuple[int, ...]:
    """Narrow the engine's floating-point dimension vector to integer lengths.

    Each entry is truncated toward zero. Entries are expected to be whole
    numbers already; fractional values are not rejected.
    """
    sizes = np.atleast_1d(np.asarray(remote_vector, dtype=np.float64))
    return tuple(int(size) for size in sizes.reshape(-1))
