from __future__ import annotations

from typing import Any, Protocol, Sequence, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


class RemoteChannel(Protocol):
    """Operations available to a unit of work while it runs against the engine."""

    def eval(self, command: str) -> None:
        """Evaluate ``command`` without retrieving results."""

    def returning_eval(self, command: str, nargout: int) -> Sequence[Any]:
        """Evaluate ``command`` and return exactly ``nargout`` results."""

    def set_variable(self, name: str, value: Any) -> None:
        """Bind ``value`` to ``name`` in the engine namespace."""

    def get_variable(self, name: str) -> Any:
        """Return the whole value bound to ``name``."""


class UnitOfWork(Protocol[T_co]):
    def call(self, channel: RemoteChannel) -> T_co:
        """Run a self-contained sequence of channel operations."""


class Dispatcher(Protocol):
    def invoke_and_wait(self, unit: UnitOfWork[T]) -> T:
        """Run ``unit`` against the engine, blocking until it completes."""
