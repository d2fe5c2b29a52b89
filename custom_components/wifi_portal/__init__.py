from __future__ import annotations

import logging
from typing import Any

import homeassistant.helpers.config_validation as cv
import voluptuous as vol
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, Platform
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ServiceValidationError

from .ap_config import ApConfigController
from .api import build_base_url, create_session_client
from .const import (
    ATTR_CONFIG_ENTRY_ID,
    ATTR_PASSWORD,
    ATTR_SSID,
    DOMAIN,
    SERVICE_CONNECT_NETWORK,
    SERVICE_SAVE_AP_CONFIG,
)
from .coordinator import WifiScanCoordinator
from .scanner import ScanAndConnectController

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.SENSOR]

SERVICE_SCHEMA = vol.Schema(
    {
        vol.Required(ATTR_SSID): cv.string,
        vol.Optional(ATTR_PASSWORD, default=""): cv.string,
        vol.Optional(ATTR_CONFIG_ENTRY_ID): cv.string,
    }
)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up Wi-Fi Portal integration for entry %s", entry.entry_id)

    if CONF_HOST not in entry.data:
        _LOGGER.error("Missing host in configuration for entry %s", entry.entry_id)
        return False

    session = create_session_client(hass)
    base_url = build_base_url(entry.data[CONF_HOST])

    coordinator = WifiScanCoordinator(hass, session, base_url, entry)
    scanner = ScanAndConnectController(session, coordinator)
    ap_config = ApConfigController(session, base_url)

    # Request failures are reflected in controller state, never raised here
    await scanner.async_activate()
    await ap_config.async_activate()

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "scanner": scanner,
        "ap_config": ap_config,
    }
    _LOGGER.debug("Stored controllers for entry %s (%s)", entry.entry_id, base_url)

    _async_register_services(hass)

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
        _LOGGER.info(
            "Successfully setup Wi-Fi Portal integration for entry %s", entry.entry_id
        )
        return True
    except Exception as err:
        _LOGGER.error("Failed to setup platforms for entry %s: %s", entry.entry_id, err)
        await scanner.async_deactivate()
        await ap_config.async_deactivate()
        hass.data[DOMAIN].pop(entry.entry_id, None)
        _async_remove_services_if_unused(hass)
        return False


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Wi-Fi Portal integration for entry %s", entry.entry_id)

    try:
        unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
        if unload_ok:
            if DOMAIN in hass.data and entry.entry_id in hass.data[DOMAIN]:
                entry_data = hass.data[DOMAIN].pop(entry.entry_id)
                await entry_data["scanner"].async_deactivate()
                await entry_data["ap_config"].async_deactivate()
                _LOGGER.debug("Deactivated controllers for entry %s", entry.entry_id)
            _async_remove_services_if_unused(hass)
            _LOGGER.info(
                "Successfully unloaded Wi-Fi Portal integration for entry %s",
                entry.entry_id,
            )
        else:
            _LOGGER.warning(
                "Failed to unload some platforms for entry %s", entry.entry_id
            )

        return unload_ok
    except Exception as err:
        _LOGGER.error(
            "Error unloading Wi-Fi Portal integration for entry %s: %s",
            entry.entry_id,
            err,
        )
        return False


def _resolve_entry_data(hass: HomeAssistant, call: ServiceCall) -> dict[str, Any]:
    """Return the stored controllers targeted by a service call."""
    loaded = hass.data.get(DOMAIN, {})
    entry_id = call.data.get(ATTR_CONFIG_ENTRY_ID)

    if entry_id is not None:
        if entry_id not in loaded:
            error_msg = f"Wi-Fi Portal entry {entry_id} is not loaded"
            raise ServiceValidationError(error_msg)
        return loaded[entry_id]

    if len(loaded) != 1:
        error_msg = f"{ATTR_CONFIG_ENTRY_ID} is required when {len(loaded)} devices are loaded"
        raise ServiceValidationError(error_msg)
    return next(iter(loaded.values()))


def _async_register_services(hass: HomeAssistant) -> None:
    if hass.services.has_service(DOMAIN, SERVICE_CONNECT_NETWORK):
        return

    async def async_connect_network(call: ServiceCall) -> None:
        scanner: ScanAndConnectController = _resolve_entry_data(hass, call)["scanner"]
        await scanner.async_connect_to(call.data[ATTR_SSID], call.data[ATTR_PASSWORD])

    async def async_save_ap_config(call: ServiceCall) -> None:
        ap_config: ApConfigController = _resolve_entry_data(hass, call)["ap_config"]
        ap_config.set_ssid_draft(call.data[ATTR_SSID])
        ap_config.set_password_draft(call.data[ATTR_PASSWORD])
        await ap_config.async_save()

    hass.services.async_register(
        DOMAIN, SERVICE_CONNECT_NETWORK, async_connect_network, schema=SERVICE_SCHEMA
    )
    hass.services.async_register(
        DOMAIN, SERVICE_SAVE_AP_CONFIG, async_save_ap_config, schema=SERVICE_SCHEMA
    )


def _async_remove_services_if_unused(hass: HomeAssistant) -> None:
    """Remove the services once no entry is loaded."""
    if hass.data.get(DOMAIN):
        return
    hass.services.async_remove(DOMAIN, SERVICE_CONNECT_NETWORK)
    hass.services.async_remove(DOMAIN, SERVICE_SAVE_AP_CONFIG)
