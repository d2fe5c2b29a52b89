"""Pytest configuration and fixtures for Wi-Fi Portal tests."""

from unittest.mock import Mock

import httpx
import pytest

BASE_URL = "http://192.168.4.1"


@pytest.fixture
def base_url() -> str:
    """Fixture providing the device base URL."""
    return BASE_URL


@pytest.fixture
def mock_session() -> Mock:
    """Create a mock HTTP session."""
    return Mock(spec=httpx.AsyncClient)


@pytest.fixture
def sample_scan_response() -> dict:
    """Fixture providing a sample scan API response.

    Returns:
        A dictionary with one secured, one open and one hidden network and a
        station that is not configured.

    """
    return {
        "networks": [
            {"ssid": "HomeNet", "is_open": False},
            {"ssid": "CafeGuest", "is_open": True},
            {"ssid": "", "is_open": False},
        ],
        "sta_status": {
            "is_connected": False,
            "saved_ssid": None,
            "ip_address": None,
        },
    }


@pytest.fixture
def sample_connected_scan_response() -> dict:
    """Fixture providing a scan API response with a connected station."""
    return {
        "networks": [{"ssid": "HomeNet", "is_open": False}],
        "sta_status": {
            "is_connected": True,
            "saved_ssid": "HomeNet",
            "ip_address": "192.168.4.2",
        },
    }


@pytest.fixture
def sample_ap_response() -> dict:
    """Fixture providing a sample access point API response."""
    return {"ssid": "PortalAP", "password_mask": "********"}
