"""Tests for the Wi-Fi Portal scan and connect controller."""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest

from custom_components.wifi_portal import api
from custom_components.wifi_portal.models import (
    ActionState,
    NetworkObservation,
    ScanSnapshot,
    StationDisplayState,
    StationStatus,
)
from custom_components.wifi_portal.scanner import ScanAndConnectController

CONNECT_PATH = "custom_components.wifi_portal.scanner.api.async_connect_station"
VALID_PASSWORD = "password"

HOME = NetworkObservation(ssid="HomeNet", is_open=False)
CAFE = NetworkObservation(ssid="CafeGuest", is_open=True)
HIDDEN = NetworkObservation(ssid="", is_open=False)


@pytest.fixture
def mock_coordinator(base_url: str) -> Mock:
    """Create a mock scan coordinator."""
    coordinator = Mock()
    coordinator.base_url = base_url
    coordinator.data = None
    coordinator.last_update_success = True
    coordinator.async_add_listener = Mock(return_value=Mock())
    coordinator.async_refresh = AsyncMock()
    return coordinator


@pytest.fixture
def controller(
    mock_session: Mock, mock_coordinator: Mock
) -> ScanAndConnectController:
    """Create an activated-state controller for testing."""
    controller = ScanAndConnectController(mock_session, mock_coordinator)
    controller._active = True
    return controller


def push_snapshot(
    controller: ScanAndConnectController,
    coordinator: Mock,
    snapshot: ScanSnapshot | None,
    *,
    success: bool = True,
) -> None:
    """Simulate the coordinator finishing a poll."""
    coordinator.last_update_success = success
    if success:
        coordinator.data = snapshot
    controller._handle_coordinator_update()


class TestActivation:
    """Tests for activating and deactivating the controller."""

    @pytest.mark.asyncio
    async def test_activate_subscribes_and_requests_first_poll(
        self, mock_session: Mock, mock_coordinator: Mock
    ) -> None:
        """Test that activation subscribes and polls immediately."""
        controller = ScanAndConnectController(mock_session, mock_coordinator)
        await controller.async_activate()
        assert controller.active is True
        mock_coordinator.async_add_listener.assert_called_once()
        mock_coordinator.async_refresh.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_deactivate_unsubscribes_from_coordinator(
        self, mock_session: Mock, mock_coordinator: Mock
    ) -> None:
        """Test that deactivation removes the coordinator listener."""
        unsub = Mock()
        mock_coordinator.async_add_listener.return_value = unsub
        controller = ScanAndConnectController(mock_session, mock_coordinator)
        await controller.async_activate()
        await controller.async_deactivate()
        unsub.assert_called_once()
        assert controller.active is False

    def test_update_after_deactivation_is_ignored(
        self, controller: ScanAndConnectController, mock_coordinator: Mock
    ) -> None:
        """Test that poll results after teardown do not change state."""
        controller._active = False
        push_snapshot(
            controller, mock_coordinator, ScanSnapshot((HOME,), StationStatus())
        )
        assert controller.networks == ()
        assert controller.loading is True


class TestReconciliation:
    """Tests for applying poll results."""

    def test_loading_until_first_successful_poll(
        self, controller: ScanAndConnectController, mock_coordinator: Mock
    ) -> None:
        """Test that loading is shown only before the first list loads."""
        assert controller.loading is True
        push_snapshot(controller, mock_coordinator, ScanSnapshot((), StationStatus()))
        assert controller.loading is False
        assert controller.networks == ()

    def test_unconfigured_station_with_one_secured_network(
        self, controller: ScanAndConnectController, mock_coordinator: Mock
    ) -> None:
        """Test the not configured station with a single secured network."""
        push_snapshot(
            controller, mock_coordinator, ScanSnapshot((HOME,), StationStatus())
        )
        assert controller.station.status_text.startswith("Not configured")
        rows = controller.rows
        assert len(rows) == 1
        assert f"{rows[0].network.display_ssid} ({rows[0].network.security_label})" == (
            "HomeNet (WPA/WPA2)"
        )
        assert rows[0].connect_enabled is True
        assert rows[0].form_expanded is False

    def test_success_replaces_list_and_status_wholesale(
        self, controller: ScanAndConnectController, mock_coordinator: Mock
    ) -> None:
        """Test that each poll replaces the list and the status."""
        push_snapshot(
            controller,
            mock_coordinator,
            ScanSnapshot((HOME, CAFE), StationStatus(False, "HomeNet", None)),
        )
        push_snapshot(
            controller, mock_coordinator, ScanSnapshot((CAFE,), StationStatus())
        )
        assert controller.networks == (CAFE,)
        assert controller.station == StationStatus()

    def test_missing_station_object_keeps_previous_status(
        self, controller: ScanAndConnectController, mock_coordinator: Mock
    ) -> None:
        """Test that a response without sta_status leaves the status alone."""
        status = StationStatus(False, "HomeNet", None)
        push_snapshot(controller, mock_coordinator, ScanSnapshot((HOME,), status))
        push_snapshot(controller, mock_coordinator, ScanSnapshot((CAFE,), None))
        assert controller.networks == (CAFE,)
        assert controller.station == status

    def test_failure_keeps_stale_state_and_sets_error(
        self, controller: ScanAndConnectController, mock_coordinator: Mock
    ) -> None:
        """Test that a failed poll keeps the last list and status."""
        status = StationStatus(True, "HomeNet", "192.168.4.2")
        push_snapshot(controller, mock_coordinator, ScanSnapshot((HOME,), status))
        push_snapshot(controller, mock_coordinator, None, success=False)
        assert controller.error is not None
        assert controller.networks == (HOME,)
        assert controller.station == status
        assert controller.loading is False

    def test_success_clears_error(
        self, controller: ScanAndConnectController, mock_coordinator: Mock
    ) -> None:
        """Test that the next successful poll clears the error."""
        push_snapshot(controller, mock_coordinator, None, success=False)
        assert controller.error is not None
        push_snapshot(
            controller, mock_coordinator, ScanSnapshot((HOME,), StationStatus())
        )
        assert controller.error is None

    def test_hidden_network_rendered_with_label_and_disabled(
        self, controller: ScanAndConnectController, mock_coordinator: Mock
    ) -> None:
        """Test that hidden networks show the label and cannot be selected."""
        push_snapshot(
            controller, mock_coordinator, ScanSnapshot((HIDDEN,), StationStatus())
        )
        row = controller.rows[0]
        assert row.network.display_ssid == "(Hidden Network)"
        assert row.connect_enabled is False

    def test_listeners_notified_on_update(
        self, controller: ScanAndConnectController, mock_coordinator: Mock
    ) -> None:
        """Test that registered listeners are called after a poll."""
        listener = Mock()
        unregister = controller.async_add_listener(listener)
        push_snapshot(controller, mock_coordinator, ScanSnapshot((), StationStatus()))
        listener.assert_called_once()

        unregister()
        push_snapshot(controller, mock_coordinator, ScanSnapshot((), StationStatus()))
        listener.assert_called_once()


class TestSelectNetwork:
    """Tests for async_select_network method."""

    @pytest.mark.asyncio
    async def test_secured_network_toggles_form(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that selecting a secured network twice collapses its form."""
        with patch(CONNECT_PATH) as connect:
            await controller.async_select_network("HomeNet", is_open=False)
            assert controller.attempt.target_ssid == "HomeNet"
            await controller.async_select_network("HomeNet", is_open=False)
            assert controller.attempt.target_ssid is None
        connect.assert_not_called()

    @pytest.mark.asyncio
    async def test_selecting_other_network_collapses_previous_form(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that a new selection clears the draft and status message."""
        await controller.async_select_network("HomeNet", is_open=False)
        controller.set_password_draft("secret-draft")
        controller.attempt.status_message = "Password must be at least 8 characters."
        await controller.async_select_network("OfficeNet", is_open=False)
        assert controller.attempt.target_ssid == "OfficeNet"
        assert controller.attempt.password_draft == ""
        assert controller.attempt.status_message == ""

    @pytest.mark.asyncio
    async def test_open_network_connects_immediately(
        self, controller: ScanAndConnectController, base_url: str
    ) -> None:
        """Test that open networks are connected with an empty password."""
        with patch(CONNECT_PATH, return_value="Saved") as connect:
            await controller.async_select_network("CafeGuest", is_open=True)
        connect.assert_awaited_once_with(
            controller._session, base_url, "CafeGuest", ""
        )
        assert controller.attempt.target_ssid is None

    @pytest.mark.asyncio
    async def test_selecting_blank_ssid_shows_hidden_guidance(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that a blank secured row never opens a password form."""
        await controller.async_select_network("", is_open=False)
        assert controller.attempt.target_ssid is None
        assert "Hidden Network" in controller.attempt.status_message


class TestSubmitPassword:
    """Tests for async_submit_password method."""

    @pytest.mark.asyncio
    async def test_short_password_rejected_locally(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that a 5-character password is rejected without a request."""
        await controller.async_select_network("HomeNet", is_open=False)
        controller.set_password_draft("abcde")
        with patch(CONNECT_PATH) as connect:
            await controller.async_submit_password()
        connect.assert_not_called()
        assert controller.attempt.status_message == (
            "Password must be at least 8 characters."
        )
        assert controller.attempt.target_ssid == "HomeNet"
        assert controller.attempt.state is ActionState.IDLE

    @pytest.mark.asyncio
    async def test_submit_without_expanded_form_does_nothing(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that submitting with no target is a no-op."""
        with patch(CONNECT_PATH) as connect:
            await controller.async_submit_password()
        connect.assert_not_called()

    @pytest.mark.asyncio
    async def test_successful_connect_then_poll_shows_connected(
        self, controller: ScanAndConnectController, mock_coordinator: Mock
    ) -> None:
        """Test a successful connect followed by a poll reporting the link."""
        push_snapshot(
            controller, mock_coordinator, ScanSnapshot((HOME,), StationStatus())
        )
        await controller.async_select_network("HomeNet", is_open=False)
        controller.set_password_draft("12345678")
        with patch(CONNECT_PATH, return_value="Saved") as connect:
            await controller.async_submit_password()

        connect.assert_awaited_once()
        assert "Saved" in controller.attempt.status_message
        assert controller.attempt.status_message.startswith("Success!")
        assert controller.attempt.password_draft == ""
        assert controller.attempt.state is ActionState.DONE
        assert controller.station.is_connected is False

        push_snapshot(
            controller,
            mock_coordinator,
            ScanSnapshot((HOME,), StationStatus(True, "HomeNet", "192.168.4.2")),
        )
        assert controller.station.display_state is StationDisplayState.CONNECTED
        assert controller.station.status_text == (
            "Connected to HomeNet (IP: 192.168.4.2)"
        )
        assert controller.rows[0].annotation == "(Current & Connected)"


class TestConnect:
    """Tests for async_connect method."""

    @pytest.mark.asyncio
    async def test_hidden_label_rejected_without_request(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that the hidden-network label is never sent as a target."""
        with patch(CONNECT_PATH) as connect:
            await controller.async_connect("(Hidden Network)", "")
            await controller.async_connect("  ", "")
        connect.assert_not_called()
        assert "Hidden Network" in controller.attempt.status_message
        assert controller.attempt.state is ActionState.IDLE

    @pytest.mark.asyncio
    async def test_cancelled_request_leaves_controls_enabled(
        self,
        controller: ScanAndConnectController,
        mock_coordinator: Mock,
    ) -> None:
        """Test that a cancelled connect does not stay pending."""
        push_snapshot(
            controller, mock_coordinator, ScanSnapshot((HOME,), StationStatus())
        )
        with (
            patch(CONNECT_PATH, side_effect=asyncio.CancelledError),
            pytest.raises(asyncio.CancelledError),
        ):
            await controller.async_connect("HomeNet", VALID_PASSWORD)

        assert controller.attempt.state is ActionState.DONE
        assert controller.attempt.status_message != "Connecting..."
        assert controller.rows[0].connect_enabled is True

        with patch(CONNECT_PATH, return_value="Saved") as connect:
            await controller.async_connect("HomeNet", VALID_PASSWORD)
        connect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_server_failure_shows_server_message(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that a rejected connect shows the server message."""
        with patch(
            CONNECT_PATH,
            side_effect=api.WifiPortalApiResponseError(400, "Invalid password"),
        ):
            await controller.async_connect("HomeNet", VALID_PASSWORD)
        assert controller.attempt.status_message == "Error: Invalid password"
        assert controller.attempt.password_draft == ""
        assert controller.attempt.state is ActionState.DONE

    @pytest.mark.asyncio
    async def test_server_failure_without_message_uses_fallback(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test the generic fallback for a failure without message."""
        with patch(CONNECT_PATH, side_effect=api.WifiPortalApiResponseError(500)):
            await controller.async_connect("HomeNet", VALID_PASSWORD)
        assert controller.attempt.status_message == (
            "Error: Failed to connect/save credentials."
        )

    @pytest.mark.asyncio
    async def test_transport_failure_shows_network_error(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that a transport failure shows the network error message."""
        with patch(CONNECT_PATH, side_effect=httpx.ConnectError("unreachable")):
            await controller.async_connect("HomeNet", VALID_PASSWORD)
        assert controller.attempt.status_message == (
            "A network error occurred while trying to connect."
        )

    @pytest.mark.asyncio
    async def test_only_one_connect_in_flight(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that at most one connect request is in flight."""
        release = asyncio.Event()
        in_flight = 0
        max_in_flight = 0

        async def slow_connect(*_args: object) -> str:
            nonlocal in_flight, max_in_flight
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)
            await release.wait()
            in_flight -= 1
            return "Saved"

        with patch(CONNECT_PATH, side_effect=slow_connect) as connect:
            first = asyncio.create_task(
                controller.async_connect("HomeNet", VALID_PASSWORD)
            )
            await asyncio.sleep(0)
            assert controller.attempt.state is ActionState.PENDING
            assert controller.attempt.status_message == "Connecting..."
            assert not any(row.connect_enabled for row in controller.rows)

            await controller.async_connect("HomeNet", VALID_PASSWORD)
            await controller.async_select_network("CafeGuest", is_open=True)

            release.set()
            await first

        assert connect.await_count == 1
        assert max_in_flight == 1
        assert controller.attempt.state is ActionState.DONE

    @pytest.mark.asyncio
    async def test_result_after_deactivation_is_ignored(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that a connect resolving after teardown changes nothing."""
        release = asyncio.Event()
        listener = Mock()
        controller.async_add_listener(listener)

        async def slow_connect(*_args: object) -> str:
            await release.wait()
            return "Saved"

        with patch(CONNECT_PATH, side_effect=slow_connect):
            task = asyncio.create_task(
                controller.async_connect("HomeNet", VALID_PASSWORD)
            )
            await asyncio.sleep(0)
            await controller.async_deactivate()
            listener.reset_mock()

            release.set()
            await task

        assert controller.attempt.status_message == "Connecting..."
        listener.assert_not_called()


class TestConnectTo:
    """Tests for async_connect_to method."""

    @pytest.mark.asyncio
    async def test_connect_to_open_network_ignores_password(
        self,
        controller: ScanAndConnectController,
        mock_coordinator: Mock,
        base_url: str,
    ) -> None:
        """Test that known open networks connect with an empty password."""
        push_snapshot(
            controller, mock_coordinator, ScanSnapshot((CAFE,), StationStatus())
        )
        with patch(CONNECT_PATH, return_value=None) as connect:
            await controller.async_connect_to("CafeGuest", "ignored")
        connect.assert_awaited_once_with(
            controller._session, base_url, "CafeGuest", ""
        )

    @pytest.mark.asyncio
    async def test_connect_to_secured_network_validates_length(
        self, controller: ScanAndConnectController
    ) -> None:
        """Test that unknown networks need a valid password."""
        with patch(CONNECT_PATH) as connect:
            await controller.async_connect_to("HomeNet", "short")
        connect.assert_not_called()
        assert controller.attempt.status_message == (
            "Password must be at least 8 characters."
        )

    @pytest.mark.asyncio
    async def test_connect_to_secured_network_sends_password(
        self, controller: ScanAndConnectController, base_url: str
    ) -> None:
        """Test that a valid password is sent for secured networks."""
        with patch(CONNECT_PATH, return_value=None) as connect:
            await controller.async_connect_to("HomeNet", VALID_PASSWORD)
        connect.assert_awaited_once_with(
            controller._session, base_url, "HomeNet", VALID_PASSWORD
        )
        assert controller.attempt.status_message.startswith(
            "Success! Credentials saved."
        )

    @pytest.mark.parametrize("ssid", ["(Hidden Network)", "", "   "])
    @pytest.mark.asyncio
    async def test_connect_to_hidden_network_rejected_before_any_change(
        self, controller: ScanAndConnectController, ssid: str
    ) -> None:
        """Test that hidden targets only show guidance, whatever the password."""
        with patch(CONNECT_PATH) as connect:
            await controller.async_connect_to(ssid, "short")
            await controller.async_connect_to(ssid, "longenough")
        connect.assert_not_called()
        assert "Hidden Network" in controller.attempt.status_message
        assert controller.attempt.target_ssid is None
        assert controller.attempt.password_draft == ""
        assert controller.attempt.state is ActionState.IDLE
