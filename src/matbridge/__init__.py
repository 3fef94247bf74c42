from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _load_version

from .core.channel import Dispatcher, RemoteChannel, UnitOfWork
from .core.dimensions import to_local_lengths
from .core.exceptions import (
    CommandSyntaxError,
    EngineError,
    InvocationError,
    MalformedResultError,
    MatbridgeError,
)
from .core.matrix import MatrixValue
from .core.names import allocate_name
from .core.reader import GetMatrixCall
from .core.writer import SetMatrixCall
from .engine import EngineConfig, LocalEngine
from .processor import MatrixProcessor

try:
    __version__ = _load_version("matbridge")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "MatrixProcessor",
    "MatrixValue",
    "GetMatrixCall",
    "SetMatrixCall",
    "allocate_name",
    "to_local_lengths",
    "RemoteChannel",
    "UnitOfWork",
    "Dispatcher",
    "LocalEngine",
    "EngineConfig",
    "MatbridgeError",
    "InvocationError",
    "EngineError",
    "CommandSyntaxError",
    "MalformedResultError",
    "__version__",
]
