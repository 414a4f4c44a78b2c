"""Tests for the Air Purifier polling coordinator."""

from datetime import timedelta
from unittest.mock import AsyncMock, Mock, patch

import pytest

from custom_components.xiaomi_purifier_3c.const import (
    DOMAIN,
    FIRMWARE_UNKNOWN,
    POLL_INTERVAL,
)
from custom_components.xiaomi_purifier_3c.coordinator import AirPurifierCoordinator
from custom_components.xiaomi_purifier_3c.models import DeviceIdentity, DeviceState

from .conftest import TEST_DID, TEST_FIRMWARE

REGISTRY = "custom_components.xiaomi_purifier_3c.coordinator.dr.async_get"
DEVICE_ENTRY_ID = "device_entry"


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    return Mock()


@pytest.fixture
def mock_device(identity: DeviceIdentity) -> Mock:
    """Create a mock synchronization engine."""
    device = Mock()
    device.identity = identity
    device.device_state = DeviceState()
    device.firmware_version = FIRMWARE_UNKNOWN
    device.async_update_properties = AsyncMock()
    return device


@pytest.fixture
def coordinator(mock_hass: Mock, mock_device: Mock) -> AirPurifierCoordinator:
    """Create a coordinator for testing."""
    return AirPurifierCoordinator(mock_hass, mock_device)


@pytest.fixture
def mock_registry() -> Mock:
    """Create a mock device registry holding the purifier."""
    registry = Mock()
    registry.async_get_device.return_value = Mock(id=DEVICE_ENTRY_ID)
    return registry


class TestAirPurifierCoordinatorInit:
    """Tests for AirPurifierCoordinator initialization."""

    def test_init_polls_on_fixed_interval(
        self, coordinator: AirPurifierCoordinator, mock_device: Mock
    ) -> None:
        """Test that the coordinator polls every interval and shares the snapshot."""
        assert coordinator.update_interval == timedelta(seconds=POLL_INTERVAL)
        assert coordinator.always_update is False
        assert coordinator.device is mock_device
        assert coordinator.data is mock_device.device_state


class TestAirPurifierCoordinatorUpdate:
    """Tests for _async_update_data method."""

    @pytest.mark.asyncio
    async def test_update_polls_device(
        self, coordinator: AirPurifierCoordinator, mock_device: Mock
    ) -> None:
        """Test that each refresh runs one engine poll."""
        result = await coordinator._async_update_data()

        mock_device.async_update_properties.assert_awaited_once()
        assert result is mock_device.device_state

    @pytest.mark.asyncio
    async def test_update_writes_firmware_after_connect(
        self,
        coordinator: AirPurifierCoordinator,
        mock_device: Mock,
        mock_registry: Mock,
    ) -> None:
        """Test that a poll after connecting publishes the firmware version."""
        mock_device.firmware_version = TEST_FIRMWARE
        with patch(REGISTRY, return_value=mock_registry):
            await coordinator._async_update_data()

        mock_registry.async_update_device.assert_called_once_with(
            DEVICE_ENTRY_ID, sw_version=TEST_FIRMWARE
        )


class TestAirPurifierCoordinatorDeviceChange:
    """Tests for async_handle_device_change method."""

    def test_device_change_updates_listeners(
        self, coordinator: AirPurifierCoordinator
    ) -> None:
        """Test that a significant change refreshes every entity."""
        with patch.object(coordinator, "async_update_listeners") as update_listeners:
            coordinator.async_handle_device_change()

        update_listeners.assert_called_once_with()


class TestAirPurifierCoordinatorFirmware:
    """Tests for async_update_firmware method."""

    def test_firmware_written_once(
        self,
        coordinator: AirPurifierCoordinator,
        mock_device: Mock,
        mock_registry: Mock,
    ) -> None:
        """Test that the registry entry is updated once per firmware version."""
        mock_device.firmware_version = TEST_FIRMWARE
        with patch(REGISTRY, return_value=mock_registry):
            coordinator.async_update_firmware()
            coordinator.async_update_firmware()

        mock_registry.async_get_device.assert_called_once_with(
            identifiers={(DOMAIN, TEST_DID)}
        )
        mock_registry.async_update_device.assert_called_once_with(
            DEVICE_ENTRY_ID, sw_version=TEST_FIRMWARE
        )

    def test_unknown_firmware_is_not_written(
        self, coordinator: AirPurifierCoordinator
    ) -> None:
        """Test that nothing is written before the first connection."""
        with patch(REGISTRY) as async_get:
            coordinator.async_update_firmware()

        async_get.assert_not_called()

    def test_firmware_written_after_device_registered(
        self,
        coordinator: AirPurifierCoordinator,
        mock_device: Mock,
        mock_registry: Mock,
    ) -> None:
        """Test that the update is retried until the registry entry exists."""
        mock_device.firmware_version = TEST_FIRMWARE
        mock_registry.async_get_device.side_effect = [None, Mock(id=DEVICE_ENTRY_ID)]
        with patch(REGISTRY, return_value=mock_registry):
            coordinator.async_update_firmware()
            mock_registry.async_update_device.assert_not_called()

            coordinator.async_update_firmware()

        mock_registry.async_update_device.assert_called_once_with(
            DEVICE_ENTRY_ID, sw_version=TEST_FIRMWARE
        )

    def test_new_firmware_version_is_written(
        self,
        coordinator: AirPurifierCoordinator,
        mock_device: Mock,
        mock_registry: Mock,
    ) -> None:
        """Test that a firmware upgrade seen on reconnect reaches the registry."""
        mock_device.firmware_version = TEST_FIRMWARE
        with patch(REGISTRY, return_value=mock_registry):
            coordinator.async_update_firmware()
            mock_device.firmware_version = "2.1.5_0040"
            coordinator.async_update_firmware()

        assert mock_registry.async_update_device.call_count == 2
        mock_registry.async_update_device.assert_called_with(
            DEVICE_ENTRY_ID, sw_version="2.1.5_0040"
        )
