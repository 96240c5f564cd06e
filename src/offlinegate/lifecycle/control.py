"""One-way control messages from the application."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from offlinegate.lifecycle.generation import GenerationManager
from offlinegate.types import ControlMessage

logger = logging.getLogger(__name__)

FORCE_ACTIVATE = "force-activate"
_ALIASES = {"SKIP_WAITING": FORCE_ACTIVATE}


class ControlChannel:
    """Receives commands; nothing is ever sent back.

    The target is resolved per message so the channel always addresses the
    newest generation.
    """

    def __init__(self, target: Callable[[], GenerationManager | None]) -> None:
        self._target = target

    async def receive(self, message: ControlMessage | Mapping[str, Any] | None) -> None:
        command = _parse(message)
        if command is None:
            return
        if command != FORCE_ACTIVATE:
            logger.debug("Ignoring unknown control message type '%s'", command)
            return

        generation = self._target()
        if generation is None:
            logger.debug("force-activate received with no generation to activate")
            return
        logger.info("force-activate received for '%s'", generation.names.primary)
        await generation.skip_waiting()


def _parse(message: ControlMessage | Mapping[str, Any] | None) -> str | None:
    if not message:
        return None
    if isinstance(message, ControlMessage):
        parsed = message
    else:
        try:
            parsed = ControlMessage.model_validate(dict(message))
        except (ValidationError, TypeError, ValueError) as e:
            logger.debug("Ignoring malformed control message %r: %s", message, e)
            return None
    return _ALIASES.get(parsed.type, parsed.type)
