"""Data models for the Wi-Fi Portal integration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .const import HIDDEN_NETWORK_LABEL


class ActionState(StrEnum):
    """Lifecycle of a single operator action (load, connect, save)."""

    IDLE = "idle"
    PENDING = "pending"
    DONE = "done"


class StationDisplayState(StrEnum):
    """Derived display state of the station connection."""

    CONNECTED = "connected"
    CONNECTING = "connecting"
    DISCONNECTED = "disconnected"


class ApPhase(StrEnum):
    """Phase of the access point controller."""

    IDLE = "idle"
    LOADING = "loading"
    SAVING = "saving"


class StatusKind(StrEnum):
    """Kind of an operator-facing status message."""

    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class NetworkObservation:
    """One wireless network seen in a scan snapshot.

    Attributes:
        ssid: Network name as reported by the device. Empty for hidden networks.
        is_open: True when no passphrase is required.

    """

    ssid: str
    is_open: bool

    @property
    def is_hidden(self) -> bool:
        """Return True if the network does not broadcast a usable name."""
        return not self.ssid.strip()

    @property
    def display_ssid(self) -> str:
        """Return the name to show, or the hidden-network label."""
        return HIDDEN_NETWORK_LABEL if self.is_hidden else self.ssid

    @property
    def security_label(self) -> str:
        """Return a short description of the network security."""
        return "Open" if self.is_open else "WPA/WPA2"

    @property
    def key(self) -> tuple[str, bool]:
        """Return the row identity; not unique across duplicate broadcasts."""
        return (self.display_ssid, self.is_open)


@dataclass(frozen=True, slots=True)
class StationStatus:
    """Authoritative client-mode connection state reported by the device."""

    is_connected: bool = False
    saved_ssid: str | None = None
    ip_address: str | None = None

    @property
    def display_state(self) -> StationDisplayState:
        """Return the display state derived from the three reported fields."""
        if self.is_connected:
            return StationDisplayState.CONNECTED
        if self.saved_ssid is not None:
            return StationDisplayState.CONNECTING
        return StationDisplayState.DISCONNECTED

    @property
    def status_text(self) -> str:
        """Return the human-readable status line."""
        state = self.display_state
        if state is StationDisplayState.CONNECTED:
            ssid = self.saved_ssid or "unknown network"
            ip_address = self.ip_address or "unknown"
            return f"Connected to {ssid} (IP: {ip_address})"
        if state is StationDisplayState.CONNECTING:
            return f"Saved: {self.saved_ssid}. Attempting to connect..."
        return "Not configured. Please select a network below."

    @property
    def status_class(self) -> str:
        """Return the style class matching the display state."""
        return f"sta-status-{self.display_state}"


@dataclass(frozen=True, slots=True)
class ScanSnapshot:
    """Result of one successful scan fetch.

    ``station`` is None when the response carried no station status object.
    """

    networks: tuple[NetworkObservation, ...]
    station: StationStatus | None


@dataclass(frozen=True, slots=True)
class NetworkRow:
    """Render state for one row of the network list."""

    network: NetworkObservation
    is_saved_target: bool
    annotation: str | None
    connect_enabled: bool
    form_expanded: bool
    button_label: str

    def as_dict(self) -> dict[str, str | bool | None]:
        """Return the row as a plain dictionary for state attributes."""
        return {
            "ssid": self.network.display_ssid,
            "security": self.network.security_label,
            "is_open": self.network.is_open,
            "annotation": self.annotation,
            "connect_enabled": self.connect_enabled,
            "form_expanded": self.form_expanded,
            "button_label": self.button_label,
        }


@dataclass
class ConnectionAttempt:
    """Client-side state of the pending or in-flight connect action."""

    target_ssid: str | None = None
    password_draft: str = ""
    status_message: str = ""
    state: ActionState = ActionState.IDLE

    @property
    def in_flight(self) -> bool:
        """Return True while a connect request is awaiting its response."""
        return self.state is ActionState.PENDING


@dataclass(frozen=True, slots=True)
class ApConfig:
    """Access point identity as reported by the device.

    ``password_mask`` is an opaque server representation, never the passphrase.
    """

    ssid: str
    password_mask: str


@dataclass(frozen=True, slots=True)
class StatusMessage:
    """Operator-facing outcome of the last access point action."""

    text: str = ""
    kind: StatusKind = StatusKind.INFO


def build_network_rows(
    networks: tuple[NetworkObservation, ...],
    station: StationStatus,
    attempt: ConnectionAttempt,
) -> list[NetworkRow]:
    """Build the render rows for a network list.

    Duplicate networks are kept as separate rows in server order.
    """
    rows = []
    for network in networks:
        is_saved_target = (
            station.saved_ssid is not None and network.ssid == station.saved_ssid
        )
        annotation = None
        if is_saved_target:
            annotation = (
                "(Current & Connected)"
                if station.is_connected
                else "(Current, but disconnected)"
            )
        form_expanded = (
            not network.is_open
            and not network.is_hidden
            and attempt.target_ssid == network.ssid
        )
        rows.append(
            NetworkRow(
                network=network,
                is_saved_target=is_saved_target,
                annotation=annotation,
                connect_enabled=not network.is_hidden and not attempt.in_flight,
                form_expanded=form_expanded,
                button_label="Cancel" if form_expanded else "Connect",
            )
        )
    return rows
