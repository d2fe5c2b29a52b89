"""Constants for the Wi-Fi Portal integration.

This module contains all the constants used throughout the integration,
including API endpoints, validation limits and operator-facing messages.
"""

DOMAIN = "wifi_portal"

DEFAULT_SCAN_INTERVAL = 10  # Seconds between scan/status polls
REQUEST_TIMEOUT = 5.0

API_SCAN_PATH = "/api/wifi/scan"
API_STA_PATH = "/api/wifi/sta"
API_AP_PATH = "/api/wifi/ap"

HIDDEN_NETWORK_LABEL = "(Hidden Network)"
PLACEHOLDER_VALUE = "N/A"

STA_PASSWORD_MIN_LENGTH = 8
AP_SSID_MAX_LENGTH = 32
AP_PASSWORD_MIN_LENGTH = 8
AP_PASSWORD_MAX_LENGTH = 63

ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_API_ERROR = "api_error"
ERROR_UNKNOWN = "unknown_error"

SERVICE_CONNECT_NETWORK = "connect_network"
SERVICE_SAVE_AP_CONFIG = "save_ap_config"
ATTR_SSID = "ssid"
ATTR_PASSWORD = "password"  # noqa: S105
ATTR_CONFIG_ENTRY_ID = "config_entry_id"

# Scan/connect messages
MSG_SCAN_FAILED = "Failed to load networks and status. Check server logs."
MSG_CONNECTING = "Connecting..."
MSG_CONNECT_SUCCESS = (
    "Success! {message} The device is now attempting to connect to {ssid}. "
    "Polling will show connection status shortly."
)
MSG_CONNECT_SAVED = "Credentials saved."
MSG_CONNECT_FAILED = "Error: {message}"
MSG_CONNECT_FAILED_FALLBACK = "Failed to connect/save credentials."
MSG_CONNECT_NETWORK_ERROR = "A network error occurred while trying to connect."
MSG_PASSWORD_TOO_SHORT = "Password must be at least 8 characters."
MSG_HIDDEN_NETWORK = (
    "To connect to a Hidden Network, set its name on the device configuration "
    "page; hidden networks cannot be selected from the scan list."
)

# Access point messages
MSG_AP_FETCH_NETWORK_ERROR = "Network error while fetching configuration."
MSG_AP_SAVING = "Saving configuration..."
MSG_AP_SAVE_FAILED = "Save failed."
MSG_AP_SAVE_NETWORK_ERROR = "Network error during save operation."
MSG_AP_SSID_REQUIRED = "SSID must not be blank."
MSG_AP_SSID_TOO_LONG = "SSID must be at most 32 characters."
MSG_AP_PASSWORD_LENGTH = (
    "Password must be 8-63 characters, or left blank for an open network."
)
