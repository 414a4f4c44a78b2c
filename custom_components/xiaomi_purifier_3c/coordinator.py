"""Coordinator for Xiaomi Air Purifier 3C integration."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from homeassistant.core import callback
from homeassistant.helpers import device_registry as dr
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .const import DOMAIN, FIRMWARE_UNKNOWN, POLL_INTERVAL
from .models import DeviceState

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .device import AirPurifierDevice

_LOGGER = logging.getLogger(__name__)


class AirPurifierCoordinator(DataUpdateCoordinator[DeviceState]):
    """Coordinator that polls the purifier on a fixed interval.

    The data is the engine's live snapshot, so a finished poll never looks
    like new data by itself. Entities are only refreshed when the engine
    reports a significant change.
    """

    def __init__(self, hass: HomeAssistant, device: AirPurifierDevice) -> None:
        super().__init__(
            hass,
            _LOGGER,
            name=f"{DOMAIN}_{device.identity.did}",
            update_interval=timedelta(seconds=POLL_INTERVAL),
            always_update=False,
        )
        self._device = device
        self._registered_firmware: str | None = None
        self.data = device.device_state

    @property
    def device(self) -> AirPurifierDevice:
        """Return the synchronization engine."""
        return self._device

    async def _async_update_data(self) -> DeviceState:
        _LOGGER.debug("Polling properties of %s", self._device.identity.host)
        await self._device.async_update_properties()
        self.async_update_firmware()
        return self._device.device_state

    @callback
    def async_handle_device_change(self) -> None:
        """Refresh entities after the engine reported a significant change."""
        self.async_update_firmware()
        self.async_update_listeners()

    @callback
    def async_update_firmware(self) -> None:
        """Write the reported firmware version to the device registry."""
        firmware = self._device.firmware_version
        if firmware in (FIRMWARE_UNKNOWN, self._registered_firmware):
            return

        registry = dr.async_get(self.hass)
        device_entry = registry.async_get_device(
            identifiers={(DOMAIN, self._device.identity.did)}
        )
        if device_entry is None:
            return  # Entities not registered yet

        registry.async_update_device(device_entry.id, sw_version=firmware)
        self._registered_firmware = firmware
        _LOGGER.debug(
            "Updated firmware of %s to %s", self._device.identity.host, firmware
        )
