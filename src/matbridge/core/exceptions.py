from __future__ import annotations

from typing import Optional


class MatbridgeError(Exception):
    """Base class for matbridge-specific exceptions."""


class InvocationError(MatbridgeError, RuntimeError):
    """A remote operation failed while a unit of work was running."""


class EngineError(InvocationError):
    def __init__(self, message: str, *, command: Optional[str] = None):
        detail = f" (command: {command!r})" if command is not None else ""
        super().__init__(f"{message}{detail}")
        self.command = command


class CommandSyntaxError(EngineError, ValueError):
    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ):
        line_text = None
        if command is not None and line is not None:
            lines = command.splitlines()
            if 0 < line <= len(lines):
                line_text = lines[line - 1]
        detail = _format_location(line, column, line_text)
        MatbridgeError.__init__(self, f"{message}{detail}")
        self.command = command
        self.line = line
        self.column = column


class MalformedResultError(MatbridgeError, TypeError):
    def __init__(self, command: str, expected: str, found: object):
        super().__init__(
            f"Result of {command!r} has unexpected type {type(found).__name__}; "
            f"expected {expected}"
        )
        self.command = command
        self.expected = expected
        self.found = found


def _format_location(
    line: Optional[int],
    column: Optional[int],
    line_text: Optional[str],
) -> str:
    if line is None and column is None:
        return ""
    location = []
    if line is not None:
        location.append(f"line {line}")
    if column is not None:
        location.append(f"col {column}")
    location_str = f" ({', '.join(location)})"
    if line_text is None or column is None or column < 1:
        return location_str
    caret = " " * (column - 1) + "^"
    return f"{location_str}\n  {line_text}\n  {caret}"
