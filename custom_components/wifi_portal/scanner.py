"""Scan and connect controller for the Wi-Fi Portal integration.

This module reconciles the polled scan results and station status into
renderable view state and drives the station connect action.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from . import api
from .const import (
    HIDDEN_NETWORK_LABEL,
    MSG_CONNECT_FAILED,
    MSG_CONNECT_FAILED_FALLBACK,
    MSG_CONNECT_NETWORK_ERROR,
    MSG_CONNECT_SAVED,
    MSG_CONNECT_SUCCESS,
    MSG_CONNECTING,
    MSG_HIDDEN_NETWORK,
    MSG_PASSWORD_TOO_SHORT,
    MSG_SCAN_FAILED,
    STA_PASSWORD_MIN_LENGTH,
)
from .controller import PortalController
from .models import (
    ActionState,
    ConnectionAttempt,
    NetworkObservation,
    NetworkRow,
    StationStatus,
    build_network_rows,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .coordinator import WifiScanCoordinator

_LOGGER = logging.getLogger(__name__)


class ScanAndConnectController(PortalController):
    """Controller for the network list and the station connect action.

    The network list and station status are replaced wholesale on every
    successful poll. A failed poll sets an error but keeps the last shown
    list and status.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        coordinator: WifiScanCoordinator,
    ) -> None:
        """Initialize the controller.

        Args:
            session: HTTP client session for the connect action.
            coordinator: Coordinator polling scan results and station status.

        """
        super().__init__(session, coordinator.base_url)
        self._coordinator = coordinator
        self._coordinator_listener_unsub: Callable[[], None] | None = None
        self._networks: tuple[NetworkObservation, ...] | None = None
        self._station = StationStatus()
        self._error: str | None = None
        self.attempt = ConnectionAttempt()

    @property
    def networks(self) -> tuple[NetworkObservation, ...]:
        """Return the last successfully loaded network list."""
        return self._networks or ()

    @property
    def station(self) -> StationStatus:
        """Return the last reported station status."""
        return self._station

    @property
    def error(self) -> str | None:
        """Return the poll error message, if the last poll failed."""
        return self._error

    @property
    def loading(self) -> bool:
        """Return True until a network list has been loaded for the first time."""
        return self._networks is None and self._error is None

    @property
    def rows(self) -> list[NetworkRow]:
        """Return the render rows for the network list."""
        return build_network_rows(self.networks, self._station, self.attempt)

    async def async_activate(self) -> None:
        """Subscribe to the coordinator and run the first poll."""
        await super().async_activate()
        self._coordinator_listener_unsub = self._coordinator.async_add_listener(
            self._handle_coordinator_update
        )
        _LOGGER.debug("Scan controller activated, requesting first scan")
        await self._coordinator.async_refresh()

    async def async_deactivate(self) -> None:
        """Unsubscribe from the coordinator, which stops its poll timer."""
        await super().async_deactivate()
        if self._coordinator_listener_unsub is not None:
            self._coordinator_listener_unsub()
            self._coordinator_listener_unsub = None

    def _handle_coordinator_update(self) -> None:
        """Handle a finished poll from the coordinator."""
        if not self.active:
            return

        if not self._coordinator.last_update_success:
            _LOGGER.debug("Scan poll failed, keeping last known networks")
            self._error = MSG_SCAN_FAILED
            self.async_update_listeners()
            return

        snapshot = self._coordinator.data
        if snapshot is not None:
            self._networks = snapshot.networks
            if snapshot.station is not None:
                self._station = snapshot.station
        self._error = None
        self.async_update_listeners()

    def _reject_hidden(self, ssid: str) -> bool:
        """Show the hidden-network guidance if ``ssid`` cannot be joined."""
        if ssid != HIDDEN_NETWORK_LABEL and ssid.strip():
            return False
        self.attempt.status_message = MSG_HIDDEN_NETWORK
        self.async_update_listeners()
        return True

    def set_password_draft(self, value: str) -> None:
        """Update the password typed into the expanded form."""
        self.attempt.password_draft = value
        self.async_update_listeners()

    async def async_select_network(self, ssid: str, is_open: bool) -> None:  # noqa: FBT001
        """Handle the connect control of a network row.

        Open networks are connected to immediately with an empty password.
        For secured networks the inline password form is toggled.

        Args:
            ssid: SSID of the selected row.
            is_open: True if the network requires no passphrase.

        """
        if self.attempt.in_flight:
            _LOGGER.debug("Ignoring selection of %s, connect in flight", ssid)
            return

        if self._reject_hidden(ssid):
            return

        if is_open:
            await self.async_connect(ssid, "")
            return

        self.attempt.target_ssid = None if self.attempt.target_ssid == ssid else ssid
        self.attempt.password_draft = ""
        self.attempt.status_message = ""
        self.async_update_listeners()

    async def async_submit_password(self) -> None:
        """Submit the password form of the expanded network."""
        ssid = self.attempt.target_ssid
        if ssid is None:
            return

        if len(self.attempt.password_draft) < STA_PASSWORD_MIN_LENGTH:
            self.attempt.status_message = MSG_PASSWORD_TOO_SHORT
            self.async_update_listeners()
            return

        await self.async_connect(ssid, self.attempt.password_draft)

    async def async_connect_to(self, ssid: str, password: str = "") -> None:
        """Connect to a network by name, validating like the row controls.

        Networks missing from the current list are treated as secured.

        Args:
            ssid: Network to connect to.
            password: Passphrase for secured networks.

        """
        if self.attempt.in_flight:
            _LOGGER.debug("Ignoring connect to %s, connect in flight", ssid)
            return

        if self._reject_hidden(ssid):
            return

        is_open = any(
            network.ssid == ssid and network.is_open for network in self.networks
        )
        if is_open:
            await self.async_connect(ssid, "")
            return

        self.attempt.target_ssid = ssid
        self.attempt.password_draft = password
        self.attempt.status_message = ""
        await self.async_submit_password()

    async def async_connect(self, ssid: str, password: str) -> None:
        """Send station credentials to the device.

        At most one connect request is in flight; further calls are ignored
        until it resolves. The attempt leaves the pending state however the
        request ends, including cancellation.

        Args:
            ssid: Network to connect to; the hidden-network label is rejected.
            password: Passphrase, empty for open networks.

        """
        if self._reject_hidden(ssid):
            return

        if self.attempt.in_flight:
            _LOGGER.debug("Ignoring connect to %s, connect in flight", ssid)
            return

        self.attempt.state = ActionState.PENDING
        self.attempt.target_ssid = None
        self.attempt.status_message = MSG_CONNECTING
        self.async_update_listeners()

        status_message = ""
        try:
            status_message = await self._async_send_credentials(ssid, password)
        finally:
            if self.active:
                self.attempt.status_message = status_message
                self.attempt.password_draft = ""
                self.attempt.state = ActionState.DONE
                self.async_update_listeners()
            else:
                _LOGGER.debug("Connect to %s resolved after deactivation", ssid)

    async def _async_send_credentials(self, ssid: str, password: str) -> str:
        """POST the credentials and return the status line for the outcome."""
        try:
            message = await api.async_connect_station(
                self._session, self._base_url, ssid, password
            )
        except api.WifiPortalApiResponseError as err:
            _LOGGER.warning("Device rejected credentials for %s: %s", ssid, err)
            return MSG_CONNECT_FAILED.format(
                message=err.server_message or MSG_CONNECT_FAILED_FALLBACK
            )
        except api.WifiPortalApiClientError:
            _LOGGER.exception("API error while connecting to %s", ssid)
            return MSG_CONNECT_FAILED.format(message=MSG_CONNECT_FAILED_FALLBACK)
        except httpx.RequestError as err:
            _LOGGER.warning("Connection error while connecting to %s: %s", ssid, err)
            return MSG_CONNECT_NETWORK_ERROR

        _LOGGER.info("Credentials for %s saved on device", ssid)
        return MSG_CONNECT_SUCCESS.format(
            message=message or MSG_CONNECT_SAVED, ssid=ssid
        )
