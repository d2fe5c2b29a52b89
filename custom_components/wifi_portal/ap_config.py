"""Access point configuration controller for the Wi-Fi Portal integration."""

from __future__ import annotations

import logging

import httpx

from . import api
from .const import (
    AP_PASSWORD_MAX_LENGTH,
    AP_PASSWORD_MIN_LENGTH,
    AP_SSID_MAX_LENGTH,
    MSG_AP_FETCH_NETWORK_ERROR,
    MSG_AP_PASSWORD_LENGTH,
    MSG_AP_SAVE_FAILED,
    MSG_AP_SAVE_NETWORK_ERROR,
    MSG_AP_SAVING,
    MSG_AP_SSID_REQUIRED,
    MSG_AP_SSID_TOO_LONG,
    PLACEHOLDER_VALUE,
)
from .controller import PortalController
from .models import ActionState, ApConfig, ApPhase, StatusKind, StatusMessage

_LOGGER = logging.getLogger(__name__)

PLACEHOLDER_CONFIG = ApConfig(ssid=PLACEHOLDER_VALUE, password_mask=PLACEHOLDER_VALUE)


def validate_ap_draft(ssid: str, password: str) -> str | None:
    """Validate an access point draft before it is sent.

    Args:
        ssid: SSID draft.
        password: Password draft.

    Returns:
        An error message, or None if the draft may be saved.

    """
    if not ssid.strip():
        return MSG_AP_SSID_REQUIRED
    if len(ssid) > AP_SSID_MAX_LENGTH:
        return MSG_AP_SSID_TOO_LONG
    if password and not (
        AP_PASSWORD_MIN_LENGTH <= len(password) <= AP_PASSWORD_MAX_LENGTH
    ):
        return MSG_AP_PASSWORD_LENGTH
    return None


class ApConfigController(PortalController):
    """Controller for the device's own access point identity.

    The current configuration is fetched once on activation and again after
    every successful save. The stored passphrase is only ever shown as the
    server-supplied mask.
    """

    def __init__(self, session: httpx.AsyncClient, base_url: str) -> None:
        """Initialize the controller."""
        super().__init__(session, base_url)
        self.current = ApConfig(ssid="", password_mask="")
        self.ssid_draft = ""
        self.password_draft = ""
        self.status = StatusMessage()
        self.load_state = ActionState.IDLE
        self.save_state = ActionState.IDLE

    @property
    def phase(self) -> ApPhase:
        """Return the controller phase derived from the action states."""
        if self.save_state is ActionState.PENDING:
            return ApPhase.SAVING
        if self.load_state is ActionState.PENDING:
            return ApPhase.LOADING
        return ApPhase.IDLE

    @property
    def can_save(self) -> bool:
        """Return True if the save control is enabled."""
        return self.phase is ApPhase.IDLE and bool(self.ssid_draft.strip())

    async def async_activate(self) -> None:
        """Activate the controller and load the current configuration."""
        await super().async_activate()
        await self.async_load()

    def set_ssid_draft(self, value: str) -> None:
        """Update the SSID typed into the form."""
        self.ssid_draft = value
        self.async_update_listeners()

    def set_password_draft(self, value: str) -> None:
        """Update the password typed into the form."""
        self.password_draft = value
        self.async_update_listeners()

    async def async_load(self) -> None:
        """Fetch the current access point configuration.

        Failures substitute placeholder values instead of failing the view.
        """
        self.load_state = ActionState.PENDING
        self.async_update_listeners()

        result = None
        try:
            result = await self._async_fetch_config()
        finally:
            if not self.active:
                _LOGGER.debug("Access point config resolved after deactivation")
            else:
                if result is not None:
                    config, status = result
                    self.current = config
                    self.ssid_draft = config.ssid
                    if status is not None:
                        self.status = status
                self.load_state = ActionState.DONE
                self.async_update_listeners()

    async def _async_fetch_config(self) -> tuple[ApConfig, StatusMessage | None]:
        try:
            config = await api.async_get_ap_config(self._session, self._base_url)
        except api.WifiPortalApiClientError as err:
            _LOGGER.warning("Device failed to report access point config: %s", err)
            return PLACEHOLDER_CONFIG, None
        except httpx.RequestError as err:
            _LOGGER.warning("Connection error while fetching AP config: %s", err)
            return PLACEHOLDER_CONFIG, StatusMessage(
                MSG_AP_FETCH_NETWORK_ERROR, StatusKind.ERROR
            )
        return config, None

    async def async_save(self) -> None:
        """Save the drafted access point configuration.

        The password draft is cleared after every request, whatever its
        outcome. Drafts failing local validation are never sent.
        """
        if self.phase is not ApPhase.IDLE:
            _LOGGER.debug("Ignoring save request while %s", self.phase)
            return

        error = validate_ap_draft(self.ssid_draft, self.password_draft)
        if error is not None:
            self.status = StatusMessage(error, StatusKind.ERROR)
            self.async_update_listeners()
            return

        self.save_state = ActionState.PENDING
        self.status = StatusMessage(MSG_AP_SAVING)
        self.async_update_listeners()

        status = StatusMessage()
        try:
            status = await self._async_send_config(self.ssid_draft, self.password_draft)
        finally:
            if not self.active:
                _LOGGER.debug("Access point save resolved after deactivation")
            else:
                self.status = status
                self.password_draft = ""
                self.save_state = ActionState.DONE
                self.async_update_listeners()

        if self.active and status.kind is StatusKind.SUCCESS:
            await self.async_load()

    async def _async_send_config(self, ssid: str, password: str) -> StatusMessage:
        """POST the drafts and return the status for the outcome."""
        try:
            message = await api.async_set_ap_config(
                self._session, self._base_url, ssid, password
            )
        except api.WifiPortalApiResponseError as err:
            _LOGGER.warning("Device rejected access point config: %s", err)
            return StatusMessage(
                err.server_message or MSG_AP_SAVE_FAILED, StatusKind.ERROR
            )
        except api.WifiPortalApiClientError:
            _LOGGER.exception("API error while saving access point config")
            return StatusMessage(MSG_AP_SAVE_FAILED, StatusKind.ERROR)
        except httpx.RequestError as err:
            _LOGGER.warning("Connection error while saving AP config: %s", err)
            return StatusMessage(MSG_AP_SAVE_NETWORK_ERROR, StatusKind.ERROR)

        _LOGGER.info("Access point config saved with SSID %s", ssid)
        return StatusMessage(message or "", StatusKind.SUCCESS)
