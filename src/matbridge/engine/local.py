from __future__ import annotations

import logging
import math
import re
import threading
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
from lark import Lark, Token, Tree
from lark.exceptions import LarkError, UnexpectedInput

from ..core.channel import UnitOfWork
from ..core.exceptions import CommandSyntaxError, EngineError, InvocationError, MatbridgeError
from .config import EngineConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

GRAMMAR_PATH = Path(__file__).with_name("command_grammar.lark")

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_]")


@lru_cache(maxsize=1)
def _build_lark() -> Lark:
    grammar = GRAMMAR_PATH.read_text(encoding="utf-8")
    return Lark(
        grammar,
        parser="lalr",
        start="start",
        maybe_placeholders=False,
    )


def parse_command(command: str) -> Tree:
    try:
        return _build_lark().parse(command)
    except UnexpectedInput as exc:
        raise CommandSyntaxError(
            "Invalid engine command",
            command=command,
            line=getattr(exc, "line", None),
            column=getattr(exc, "column", None),
        ) from exc
    except LarkError as exc:  # pragma: no cover - defensive
        raise CommandSyntaxError(f"Invalid engine command: {exc}", command=command) from exc


def _canonical_shape(shape: Sequence[int]) -> Tuple[int, ...]:
    dims = [int(dim) for dim in shape]
    while len(dims) < 2:
        dims.append(1)
    while len(dims) > 2 and dims[-1] == 1:
        dims.pop()
    return tuple(dims)


def _as_value(data: Any) -> np.ndarray:
    arr = np.asarray(data)
    if arr.dtype.kind in "iu":
        arr = arr.astype(np.float64)
    return arr.reshape(_canonical_shape(arr.shape), order="F")


def _row_vector(values: Sequence[float]) -> np.ndarray:
    arr = np.asarray(values, dtype=np.float64)
    return arr.reshape(1, arr.size)


def _unquote(token: str) -> str:
    return token[1:-1].replace("''", "'")


def _export(value: Any) -> Any:
    """Convert an engine value to the flat form handed back to callers."""
    if isinstance(value, np.ndarray):
        if value.dtype.kind == "b":
            return value.reshape(-1, order="F").copy()
        if value.dtype.kind == "U":
            return str(value.reshape(-1)[0]) if value.size == 1 else value.tolist()
        return np.array(value.reshape(-1, order="F"), dtype=value.dtype)
    return value


class LocalEngine:
    """
    In-process engine implementing the command subset used by matbridge.

    Variables live in a plain namespace of column-major numpy arrays. Units of
    work dispatched through :meth:`invoke_and_wait` run one at a time; direct
    calls to :meth:`eval` and friends are not serialized.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = (config or EngineConfig()).normalized()
        self._namespace: Dict[str, Any] = {}
        self._lock = threading.RLock()

    # Dispatcher ----------------------------------------------------------

    def invoke_and_wait(self, unit: UnitOfWork[T]) -> T:
        with self._lock:
            try:
                return unit.call(self)
            except MatbridgeError:
                raise
            except Exception as exc:
                raise InvocationError(f"Unit of work {unit!r} failed: {exc}") from exc

    # Channel -------------------------------------------------------------

    def eval(self, command: str) -> None:
        self._log(command)
        for statement in parse_command(command).children:
            self._execute(statement, command)

    def returning_eval(self, command: str, nargout: int) -> List[Any]:
        self._log(command)
        statements = parse_command(command).children
        if len(statements) != 1 or statements[0].data != "value":
            raise EngineError("Expected a single expression with results", command=command)
        if nargout == 0:
            self._evaluate(statements[0].children[0], command)
            return []
        if nargout != 1:
            raise EngineError(f"Too many output arguments ({nargout})", command=command)
        return [_export(self._evaluate(statements[0].children[0], command))]

    def set_variable(self, name: str, value: Any) -> None:
        if not name.isidentifier():
            raise EngineError(f"Invalid variable name {name!r}")
        arr = np.asarray(value)
        if arr.ndim <= 1 and arr.dtype.kind in "fiuc":
            stored = _row_vector(arr.reshape(-1)) if arr.dtype.kind != "c" else arr.reshape(1, -1)
        elif arr.dtype.kind in "U":
            stored = arr
        else:
            stored = _as_value(arr)
        self._namespace[name] = stored
        logger.debug("Bound %s with shape %s", name, getattr(stored, "shape", None))

    def get_variable(self, name: str) -> Any:
        if name not in self._namespace:
            raise EngineError(f"Undefined variable {name!r}")
        return _export(self._namespace[name])

    def variables(self) -> Tuple[str, ...]:
        return tuple(sorted(self._namespace))

    # Statements ----------------------------------------------------------

    def _log(self, command: str) -> None:
        level = logging.INFO if self.config.log_commands else logging.DEBUG
        logger.log(level, "eval: %s", command)

    def _execute(self, statement: Tree, command: str) -> None:
        if statement.data == "assign":
            target, expr = statement.children
            self._namespace[str(target)] = self._evaluate(expr, command)
        elif statement.data == "clear":
            names = [str(token) for token in statement.children]
            if not names:
                self._namespace.clear()
            for name in names:
                self._namespace.pop(name, None)
        else:
            self._namespace["ans"] = self._evaluate(statement.children[0], command)

    # Expressions ---------------------------------------------------------

    def _evaluate(self, node: Any, command: str) -> Any:
        if isinstance(node, Token):  # pragma: no cover - grammar wraps all tokens
            raise EngineError(f"Unexpected token {node!r}", command=command)
        kind = node.data
        if kind == "number":
            return np.full((1, 1), float(node.children[0]))
        if kind == "string":
            return np.asarray(_unquote(str(node.children[0])))
        if kind == "var":
            return self._lookup(str(node.children[0]), command)
        if kind == "neg":
            return -self._numeric(self._evaluate(node.children[0], command), command)
        if kind in {"add", "sub", "mul"}:
            lhs = self._numeric(self._evaluate(node.children[0], command), command)
            rhs = self._numeric(self._evaluate(node.children[1], command), command)
            return self._binary(kind, lhs, rhs, command)
        if kind == "call":
            name = str(node.children[0])
            args: List[Any] = []
            if len(node.children) > 1:
                args = [self._evaluate(arg, command) for arg in node.children[1].children]
            return self._call(name, args, command)
        raise EngineError(f"Unsupported expression '{kind}'", command=command)

    def _lookup(self, name: str, command: str) -> Any:
        if name in self._namespace:
            return self._namespace[name]
        if name == "who":
            return list(self.variables())
        if name in self.config.imaginary_units:
            return np.full((1, 1), 1j)
        raise EngineError(f"Undefined function or variable '{name}'", command=command)

    @staticmethod
    def _numeric(value: Any, command: str) -> np.ndarray:
        if not isinstance(value, np.ndarray) or value.dtype.kind not in "fiucb":
            raise EngineError("Operand is not numeric", command=command)
        if value.dtype.kind == "b":
            return value.astype(np.float64)
        return value

    @staticmethod
    def _binary(kind: str, lhs: np.ndarray, rhs: np.ndarray, command: str) -> np.ndarray:
        scalar = lhs.size == 1 or rhs.size == 1
        if kind == "mul":
            if scalar:
                return _as_value(lhs * rhs)
            if lhs.ndim == 2 and rhs.ndim == 2 and lhs.shape[1] == rhs.shape[0]:
                return _as_value(lhs @ rhs)
            raise EngineError(
                f"Inner matrix dimensions must agree: {lhs.shape} * {rhs.shape}",
                command=command,
            )
        if not scalar and lhs.shape != rhs.shape:
            raise EngineError(
                f"Matrix dimensions must agree: {lhs.shape} vs {rhs.shape}",
                command=command,
            )
        return _as_value(lhs + rhs if kind == "add" else lhs - rhs)

    # Builtins ------------------------------------------------------------

    def _call(self, name: str, args: List[Any], command: str) -> Any:
        if name in self._namespace:
            raise EngineError(f"Indexing into '{name}' is not supported", command=command)
        handler = getattr(self, f"_fn_{name}", None)
        if handler is None:
            raise EngineError(f"Undefined function '{name}'", command=command)
        return handler(args, command)

    def _single_numeric(self, name: str, args: List[Any], command: str) -> np.ndarray:
        if len(args) != 1:
            raise EngineError(f"{name} expects exactly one argument", command=command)
        return self._numeric(args[0], command)

    def _fn_real(self, args: List[Any], command: str) -> np.ndarray:
        value = self._single_numeric("real", args, command)
        return np.real(value).astype(np.float64)

    def _fn_imag(self, args: List[Any], command: str) -> np.ndarray:
        value = self._single_numeric("imag", args, command)
        return np.imag(value).astype(np.float64)

    def _fn_isreal(self, args: List[Any], command: str) -> np.ndarray:
        if len(args) != 1:
            raise EngineError("isreal expects exactly one argument", command=command)
        value = args[0]
        flag = not (isinstance(value, np.ndarray) and np.iscomplexobj(value))
        return np.full((1, 1), flag)

    def _fn_size(self, args: List[Any], command: str) -> np.ndarray:
        if len(args) != 1:
            raise EngineError("size expects exactly one argument", command=command)
        value = args[0]
        if isinstance(value, list):
            shape: Tuple[int, ...] = (len(value), 1)
        else:
            shape = _canonical_shape(np.shape(value))
        return _row_vector(shape)

    def _fn_reshape(self, args: List[Any], command: str) -> np.ndarray:
        if not args:
            raise EngineError("reshape expects at least one argument", command=command)
        value = self._numeric(args[0], command)
        if len(args) == 1:
            return value
        if len(args) == 2:
            raise EngineError("Size vector must have at least two elements", command=command)
        dims = []
        for arg in args[1:]:
            size = self._numeric(arg, command)
            if size.size != 1:
                raise EngineError("Size arguments must be scalars", command=command)
            length = float(np.real(size.reshape(-1)[0]))
            if length < 0:
                raise EngineError("Size arguments must be non-negative", command=command)
            if not length.is_integer():
                raise EngineError("Size arguments must be integers", command=command)
            dims.append(int(length))
        if math.prod(dims) != value.size:
            raise EngineError(
                f"Number of elements must not change: {value.size} into {dims}",
                command=command,
            )
        flat = value.reshape(-1, order="F")
        return flat.reshape(_canonical_shape(dims), order="F")

    def _fn_genvarname(self, args: List[Any], command: str) -> np.ndarray:
        if not args or len(args) > 2:
            raise EngineError("genvarname expects one or two arguments", command=command)
        base = args[0]
        if not (isinstance(base, np.ndarray) and base.dtype.kind == "U"):
            raise EngineError("genvarname expects a string base name", command=command)
        exclusions = set(args[1]) if len(args) == 2 and isinstance(args[1], list) else set()
        return np.asarray(self.generate_name(str(base), exclusions))

    def generate_name(self, base: str, exclusions: Any) -> str:
        """Derive a valid identifier from ``base`` that is not in ``exclusions``."""
        limit = self.config.name_length_max
        name = _INVALID_NAME_CHARS.sub("_", base)
        if not name or not name[0].isalpha():
            name = "x" + name
        name = name[:limit]
        if name not in exclusions:
            return name
        suffix = 1
        while True:
            tail = str(suffix)
            candidate = name[: limit - len(tail)] + tail
            if candidate not in exclusions:
                return candidate
            suffix += 1

    def __repr__(self) -> str:
        return f"LocalEngine(variables={list(self.variables())})"
