"""Shared lifecycle and listener handling for Wi-Fi Portal controllers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

_LOGGER = logging.getLogger(__name__)


class PortalController:
    """Base class for the view controllers.

    A controller is active between ``async_activate`` and ``async_deactivate``.
    Results of requests that resolve after deactivation must not touch state;
    subclasses check ``active`` after every await.
    """

    def __init__(self, session: httpx.AsyncClient, base_url: str) -> None:
        """Initialize the controller.

        Args:
            session: HTTP client session for API calls.
            base_url: Device base URL.

        """
        self._session = session
        self._base_url = base_url
        self._active = False
        self._listeners: list[Callable[[], None]] = []

    @property
    def active(self) -> bool:
        """Return True while the controller is activated."""
        return self._active

    def async_add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a callback invoked whenever the view state changes.

        Args:
            listener: Function to call after each state change.

        Returns:
            A function to unregister the callback.

        """
        self._listeners.append(listener)

        def unregister() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unregister

    def async_update_listeners(self) -> None:
        """Notify all registered listeners of a state change."""
        if not self._active:
            return
        for listener in list(self._listeners):
            listener()

    async def async_activate(self) -> None:
        """Start the controller."""
        self._active = True

    async def async_deactivate(self) -> None:
        """Stop the controller; later request results become no-ops."""
        self._active = False
        _LOGGER.debug("Deactivated %s", type(self).__name__)
