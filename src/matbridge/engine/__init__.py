"""In-process reference engine for matbridge."""

from .config import EngineConfig
from .local import LocalEngine, parse_command

__all__ = ["EngineConfig", "LocalEngine", "parse_command"]
