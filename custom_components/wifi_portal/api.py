"""API client for the Wi-Fi Portal device.

This module provides functions to interact with the device's Wi-Fi HTTP API,
including scan/status polling, station credentials and access point
configuration.
"""

import json
import logging
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client

from .const import API_AP_PATH, API_SCAN_PATH, API_STA_PATH, REQUEST_TIMEOUT
from .models import ApConfig, NetworkObservation, ScanSnapshot, StationStatus

_LOGGER = logging.getLogger(__name__)


class WifiPortalApiClientError(Exception):
    """Base exception for Wi-Fi Portal API client errors."""


class WifiPortalApiResponseError(WifiPortalApiClientError):
    """Exception raised when the device answers with a non-success status.

    Attributes:
        status_code: HTTP status code of the response.
        server_message: The ``message`` field of the error body, if any.

    """

    def __init__(self, status_code: int, server_message: str | None = None) -> None:
        """Initialize the error with the response status and message."""
        super().__init__(server_message or f"Request failed: {status_code}")
        self.status_code = status_code
        self.server_message = server_message


def build_base_url(host: str) -> str:
    """Build the device base URL from a host name or URL.

    Args:
        host: Host name, IP address, or full http(s) URL of the device.

    Returns:
        Base URL without a trailing slash.

    """
    host = host.strip().rstrip("/")
    if host.startswith(("http://", "https://")):
        return host
    return f"http://{host}"


def create_headers() -> dict[str, str]:
    """Create HTTP headers for device API requests."""
    return {
        "content-type": "application/json",
        "accept": "application/json",
    }


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates a failed request.

    Args:
        status: HTTP status code to check.

    Returns:
        True unless the status code is in the 2xx range.

    """
    return not httpx.codes.is_success(status)


def extract_message(data: Any) -> str | None:  # noqa: ANN401
    """Extract the ``message`` field from a response body.

    Args:
        data: Decoded response body.

    Returns:
        The message string, or None if absent or empty.

    """
    if not isinstance(data, dict):
        return None
    message = data.get("message")
    if message is None or message == "":
        return None
    return str(message)


def _decode_json(response: httpx.Response) -> Any:  # noqa: ANN401
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


def validate_response(response: httpx.Response) -> dict[str, Any]:
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON object from response.

    Raises:
        WifiPortalApiResponseError: If the status code is not a success.
        WifiPortalApiClientError: If the body is not a JSON object.

    """
    data = _decode_json(response)

    if is_http_error(response.status_code):
        raise WifiPortalApiResponseError(response.status_code, extract_message(data))

    if not isinstance(data, dict):
        error_msg = f"Unexpected response payload: {response.text[:100]!r}"
        raise WifiPortalApiClientError(error_msg)

    return data


def extract_networks(data: dict[str, Any]) -> tuple[NetworkObservation, ...]:
    """Extract the network list from a scan response.

    Args:
        data: Scan response data dictionary.

    Returns:
        Tuple of NetworkObservation objects in server order.

    """
    networks = data.get("networks") or []
    return tuple(
        NetworkObservation(
            ssid=str(network.get("ssid") or ""),
            is_open=bool(network.get("is_open", False)),
        )
        for network in networks
        if isinstance(network, dict)
    )


def extract_station_status(data: dict[str, Any]) -> StationStatus | None:
    """Extract station status from a scan response.

    Missing fields default to not connected and no saved SSID or address.

    Args:
        data: Scan response data dictionary.

    Returns:
        StationStatus, or None if the response has no ``sta_status`` object.

    """
    status = data.get("sta_status")
    if not isinstance(status, dict):
        return None
    return StationStatus(
        is_connected=bool(status.get("is_connected") or False),
        saved_ssid=status.get("saved_ssid") or None,
        ip_address=status.get("ip_address") or None,
    )


def extract_scan_snapshot(data: dict[str, Any]) -> ScanSnapshot:
    """Extract a ScanSnapshot from a scan response."""
    return ScanSnapshot(
        networks=extract_networks(data),
        station=extract_station_status(data),
    )


def extract_ap_config(data: dict[str, Any]) -> ApConfig:
    """Extract the access point identity from an AP response.

    Args:
        data: AP response data dictionary.

    Returns:
        ApConfig with the SSID and the server-supplied password mask.

    """
    return ApConfig(
        ssid=str(data.get("ssid") or ""),
        password_mask=str(data.get("password_mask") or ""),
    )


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client for the device API.

    Failed requests are not retried; the operator re-initiates actions.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient.

    """
    return create_async_httpx_client(hass, timeout=REQUEST_TIMEOUT)


async def async_get_scan(session: httpx.AsyncClient, base_url: str) -> ScanSnapshot:
    """Fetch scan results and station status from the device.

    Args:
        session: HTTP client session.
        base_url: Device base URL.

    Returns:
        ScanSnapshot with the visible networks and station status.

    Raises:
        WifiPortalApiResponseError: If the device reports a failure.
        WifiPortalApiClientError: If the response is malformed.

    """
    _LOGGER.debug("Fetching scan results from %s", base_url)
    response = await session.get(f"{base_url}{API_SCAN_PATH}", headers=create_headers())
    data = validate_response(response)
    snapshot = extract_scan_snapshot(data)
    _LOGGER.debug("Scan returned %d networks", len(snapshot.networks))
    return snapshot


async def async_connect_station(
    session: httpx.AsyncClient,
    base_url: str,
    ssid: str,
    password: str,
) -> str | None:
    """Store station credentials on the device and start connecting.

    Args:
        session: HTTP client session.
        base_url: Device base URL.
        ssid: Network to connect to.
        password: Network passphrase, empty for open networks.

    Returns:
        The server confirmation message, if any.

    Raises:
        WifiPortalApiResponseError: If the device reports a failure.
        WifiPortalApiClientError: If the response is malformed.

    """
    payload = {"ssid": ssid, "password": password}

    _LOGGER.debug("Sending station credentials for %s", ssid)
    response = await session.post(
        f"{base_url}{API_STA_PATH}", headers=create_headers(), json=payload
    )
    data = validate_response(response)
    _LOGGER.debug("Station credentials accepted for %s", ssid)
    return extract_message(data)


async def async_get_ap_config(session: httpx.AsyncClient, base_url: str) -> ApConfig:
    """Fetch the device's access point identity.

    Args:
        session: HTTP client session.
        base_url: Device base URL.

    Returns:
        ApConfig with the current SSID and password mask.

    Raises:
        WifiPortalApiResponseError: If the device reports a failure.
        WifiPortalApiClientError: If the response is malformed.

    """
    _LOGGER.debug("Fetching access point configuration from %s", base_url)
    response = await session.get(f"{base_url}{API_AP_PATH}", headers=create_headers())
    data = validate_response(response)
    return extract_ap_config(data)


async def async_set_ap_config(
    session: httpx.AsyncClient,
    base_url: str,
    ssid: str,
    password: str,
) -> str | None:
    """Save a new access point identity on the device.

    Args:
        session: HTTP client session.
        base_url: Device base URL.
        ssid: New access point SSID.
        password: New passphrase, empty for an open access point.

    Returns:
        The server confirmation message, if any.

    Raises:
        WifiPortalApiResponseError: If the device reports a failure.
        WifiPortalApiClientError: If the response is malformed.

    """
    payload = {"ssid": ssid, "password": password}

    _LOGGER.debug("Saving access point configuration with SSID %s", ssid)
    response = await session.post(
        f"{base_url}{API_AP_PATH}", headers=create_headers(), json=payload
    )
    data = validate_response(response)
    return extract_message(data)
