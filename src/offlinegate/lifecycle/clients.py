"""Open client sessions and the generation controlling each one."""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ClientRegistry:
    """Tracks which generation (by primary cache name) controls each client.

    A client connected before any generation was active is uncontrolled
    (controller None) until a generation claims it. Generations that share a
    registry agree on which one is current.
    """

    def __init__(self) -> None:
        self._controllers: dict[str, str | None] = {}
        self._current: str | None = None

    @property
    def current(self) -> str | None:
        """The generation that most recently claimed clients, if any."""
        return self._current

    def connect(self, client_id: str, controller: str | None = None) -> None:
        self._controllers[client_id] = controller

    def disconnect(self, client_id: str) -> bool:
        if client_id not in self._controllers:
            return False
        del self._controllers[client_id]
        return True

    def controller_of(self, client_id: str) -> str | None:
        return self._controllers.get(client_id)

    def controlled_by_other(self, generation: str) -> list[str]:
        """Clients held by a generation other than the given one."""
        return [
            client_id
            for client_id, controller in self._controllers.items()
            if controller is not None and controller != generation
        ]

    def claim(self, generation: str) -> int:
        """Make the given generation current and control every open client."""
        self._current = generation
        for client_id in self._controllers:
            self._controllers[client_id] = generation
        logger.debug("Generation '%s' claimed %d clients", generation, len(self._controllers))
        return len(self._controllers)

    def __len__(self) -> int:
        return len(self._controllers)

    def __contains__(self, client_id: object) -> bool:
        return client_id in self._controllers
