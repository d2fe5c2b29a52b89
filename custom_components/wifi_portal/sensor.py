"""Sensor entities for the Wi-Fi Portal integration.

This module exposes the derived view state of the scan/connect and access
point controllers as Home Assistant sensor entities.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import SensorDeviceClass, SensorEntity
from homeassistant.helpers.device_registry import DeviceInfo

from .const import DOMAIN
from .models import StationDisplayState

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .ap_config import ApConfigController
    from .controller import PortalController
    from .scanner import ScanAndConnectController

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Wi-Fi Portal sensors for a config entry."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    scanner = entry_data["scanner"]
    ap_config = entry_data["ap_config"]

    async_add_entities(
        [
            WifiStationSensor(entry, scanner),
            WifiNetworkCountSensor(entry, scanner),
            WifiAccessPointSensor(entry, ap_config),
        ]
    )


class WifiPortalEntity(SensorEntity):
    """Base entity that mirrors one controller's state."""

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(
        self, entry: ConfigEntry, controller: PortalController, key: str
    ) -> None:
        """Initialize the entity.

        Args:
            entry: Config entry of the device.
            controller: Controller whose state the entity reflects.
            key: Suffix of the unique id and translation key.

        """
        self._controller = controller
        self._listener_unsub: Callable[[], None] | None = None
        self._attr_unique_id = f"{entry.entry_id}_{key}"
        self._attr_translation_key = key
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, entry.entry_id)},
            name=entry.title,
        )

    async def async_added_to_hass(self) -> None:
        """Subscribe to controller updates."""
        await super().async_added_to_hass()
        self._listener_unsub = self._controller.async_add_listener(
            self._handle_controller_update
        )

    async def async_will_remove_from_hass(self) -> None:
        """Unsubscribe from controller updates."""
        await super().async_will_remove_from_hass()

        if self._listener_unsub is not None:
            self._listener_unsub()
            self._listener_unsub = None

    def _handle_controller_update(self) -> None:
        self.async_write_ha_state()


class WifiStationSensor(WifiPortalEntity):
    """Station connection state with the rendered network list."""

    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [state.value for state in StationDisplayState]

    def __init__(self, entry: ConfigEntry, scanner: ScanAndConnectController) -> None:
        """Initialize the station sensor."""
        super().__init__(entry, scanner, "station")
        self._scanner = scanner

    @property
    def native_value(self) -> str:
        """Return the station display state."""
        return self._scanner.station.display_state.value

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return status text, network rows and action status."""
        station = self._scanner.station
        attempt = self._scanner.attempt
        return {
            "status_text": station.status_text,
            "status_class": station.status_class,
            "saved_ssid": station.saved_ssid,
            "ip_address": station.ip_address,
            "loading": self._scanner.loading,
            "scan_error": self._scanner.error,
            "networks": [row.as_dict() for row in self._scanner.rows],
            "connect_state": attempt.state.value,
            "connect_status": attempt.status_message or None,
        }


class WifiNetworkCountSensor(WifiPortalEntity):
    """Number of networks in the last loaded scan."""

    def __init__(self, entry: ConfigEntry, scanner: ScanAndConnectController) -> None:
        """Initialize the network count sensor."""
        super().__init__(entry, scanner, "network_count")
        self._scanner = scanner

    @property
    def native_value(self) -> int | None:
        """Return the network count, or None until the first scan loads."""
        if self._scanner.loading:
            return None
        return len(self._scanner.networks)


class WifiAccessPointSensor(WifiPortalEntity):
    """Current access point SSID with the masked passphrase."""

    def __init__(self, entry: ConfigEntry, ap_config: ApConfigController) -> None:
        """Initialize the access point sensor."""
        super().__init__(entry, ap_config, "access_point")
        self._ap_config = ap_config

    @property
    def native_value(self) -> str | None:
        """Return the current access point SSID."""
        return self._ap_config.current.ssid or None

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return the password mask and the last save outcome."""
        status = self._ap_config.status
        return {
            "password_mask": self._ap_config.current.password_mask or None,
            "phase": self._ap_config.phase.value,
            "save_enabled": self._ap_config.can_save,
            "status": status.text or None,
            "status_kind": status.kind.value if status.text else None,
        }
