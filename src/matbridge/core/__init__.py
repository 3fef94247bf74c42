"""Core marshaling modules for matbridge."""

__all__ = [
    "channel",
    "commands",
    "dimensions",
    "exceptions",
    "matrix",
    "names",
    "reader",
    "writer",
]
