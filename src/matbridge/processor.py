from __future__ import annotations

from .core.channel import Dispatcher
from .core.matrix import MatrixValue
from .core.reader import GetMatrixCall
from .core.writer import SetMatrixCall


class MatrixProcessor:
    """Retrieve and store engine matrices through a dispatcher.

    Each call is dispatched as one unit of work. The processor holds no state
    besides the dispatcher, so it is safe to share between threads; ordering of
    concurrent calls is up to the dispatcher.
    """

    def __init__(self, proxy: Dispatcher):
        self._proxy = proxy

    def get_matrix(self, matrix_name: str) -> MatrixValue:
        """Retrieve the matrix bound to ``matrix_name``.

        Several engine functions are evaluated in turn; if the variable is
        modified between them the result may combine parts of different values.
        """
        return self._proxy.invoke_and_wait(GetMatrixCall(matrix_name))

    def set_matrix(self, matrix_name: str, matrix: MatrixValue) -> None:
        """Store ``matrix`` in the engine as ``matrix_name``."""
        self._proxy.invoke_and_wait(SetMatrixCall(matrix_name, matrix))

    def __repr__(self) -> str:
        cls = type(self)
        return f"[{cls.__module__}.{cls.__qualname__} proxy={self._proxy!r}]"
