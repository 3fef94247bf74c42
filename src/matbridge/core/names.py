from __future__ import annotations

import logging

from .channel import RemoteChannel
from .commands import genvarname_command
from .exceptions import MalformedResultError

logger = logging.getLogger(__name__)


def allocate_name(channel: RemoteChannel, base: str) -> str:
    """Ask the engine for an identifier derived from ``base`` that is not bound.

    The name is not reserved: it stays free only until something binds it.
    """
    command = genvarname_command(base)
    result = channel.returning_eval(command, 1)[0]
    if isinstance(result, bytes):
        result = result.decode("utf-8")
    if not isinstance(result, str):
        raise MalformedResultError(command, "str", result)
    logger.debug("Allocated engine name %s for base %s", result, base)
    return result
