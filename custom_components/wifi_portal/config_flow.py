"""Config flow for the Wi-Fi Portal integration."""

import logging
from typing import Any

import httpx
import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.const import CONF_HOST
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import get_async_client

from . import api
from .const import (
    DOMAIN,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
)

_LOGGER = logging.getLogger(__name__)

STEP_USER_DATA_SCHEMA = vol.Schema({vol.Required(CONF_HOST): str})

# Checked in order, ConnectTimeout must map to the timeout key
_FORM_ERRORS: tuple[tuple[type[Exception], str], ...] = (
    (httpx.ConnectError, ERROR_CANNOT_CONNECT),
    (httpx.TimeoutException, ERROR_TIMEOUT),
    (httpx.RequestError, ERROR_CANNOT_CONNECT),
    (api.WifiPortalApiClientError, ERROR_API_ERROR),
)


async def async_validate_host(hass: HomeAssistant, host: str) -> str:
    """
    Check that the portal answers on the given host.

    The access point configuration endpoint is fetched as the reachability check.

    Returns:
        The normalized base URL of the device.

    """
    base_url = api.build_base_url(host)
    ap_config = await api.async_get_ap_config(get_async_client(hass), base_url)
    _LOGGER.info("Reached Wi-Fi Portal at %s (AP SSID %s)", base_url, ap_config.ssid)
    return base_url


def _form_error(err: Exception) -> str:
    for error_type, error_key in _FORM_ERRORS:
        if isinstance(err, error_type):
            return error_key
    return ERROR_UNKNOWN


class WifiPortalConfigFlow(ConfigFlow, domain=DOMAIN):
    """Set up a Wi-Fi Portal device by host."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask for the device host and check it before creating the entry."""
        errors: dict[str, str] = {}

        if user_input is not None:
            try:
                base_url = await async_validate_host(self.hass, user_input[CONF_HOST])
            except Exception as err:
                errors["base"] = _form_error(err)
                _LOGGER.exception(
                    "Could not validate %s (%s)", user_input[CONF_HOST], errors["base"]
                )
            else:
                await self.async_set_unique_id(base_url.lower())
                self._abort_if_unique_id_configured()
                return self.async_create_entry(
                    title=f"Wi-Fi Portal ({base_url})",
                    data={CONF_HOST: base_url},
                )

        return self.async_show_form(
            step_id="user", data_schema=STEP_USER_DATA_SCHEMA, errors=errors
        )
