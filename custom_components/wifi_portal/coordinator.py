"""Coordinator for the Wi-Fi Portal integration."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

import httpx
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import api
from .const import DEFAULT_SCAN_INTERVAL, DOMAIN
from .models import ScanSnapshot

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)


class WifiScanCoordinator(DataUpdateCoordinator[ScanSnapshot | None]):
    """Coordinator that polls scan results and station status.

    Every poll is numbered when it is sent. A response that resolves after a
    newer poll has already been applied is discarded, so an older snapshot
    never overwrites a newer one.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        session: httpx.AsyncClient,
        base_url: str,
        config_entry: ConfigEntry | None = None,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=f"{DOMAIN}_scan",
            update_interval=timedelta(seconds=DEFAULT_SCAN_INTERVAL),
        )
        self._session = session
        self._base_url = base_url
        self._sent_seq = 0
        self._applied_seq = 0
        self._applied_failure: UpdateFailed | None = None
        self.data = None

    @property
    def base_url(self) -> str:
        """Return the device base URL."""
        return self._base_url

    async def _async_update_data(self) -> ScanSnapshot | None:
        self._sent_seq += 1
        seq = self._sent_seq

        try:
            snapshot = await api.async_get_scan(self._session, self._base_url)
        except api.WifiPortalApiClientError as err:
            error_msg = f"API error while polling scan results: {err}"
            return self._apply_failure(seq, UpdateFailed(error_msg), err)
        except httpx.RequestError as err:
            error_msg = f"Connection error while polling scan results: {err}"
            return self._apply_failure(seq, UpdateFailed(error_msg), err)

        if self._is_stale(seq):
            return self._keep_applied()

        self._applied_seq = seq
        self._applied_failure = None
        return snapshot

    def _is_stale(self, seq: int) -> bool:
        if seq > self._applied_seq:
            return False
        _LOGGER.debug(
            "Discarding scan response #%d, #%d already applied",
            seq,
            self._applied_seq,
        )
        return True

    def _apply_failure(
        self, seq: int, failure: UpdateFailed, err: Exception
    ) -> ScanSnapshot | None:
        if self._is_stale(seq):
            return self._keep_applied()
        self._applied_seq = seq
        self._applied_failure = failure
        raise failure from err

    def _keep_applied(self) -> ScanSnapshot | None:
        """Return the applied outcome again, re-raising an applied failure."""
        if self._applied_failure is not None:
            raise self._applied_failure
        return self.data
