"""Base entity for Xiaomi Air Purifier 3C entities."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from homeassistant.core import callback
from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.entity import Entity

from .const import DOMAIN, MANUFACTURER, MODEL_NAME

if TYPE_CHECKING:
    from .coordinator import AirPurifierCoordinator

_LOGGER = logging.getLogger(__name__)


class AirPurifierEntity(Entity):
    """Entity backed by the snapshot of an ``AirPurifierDevice``.

    Entities never poll. They re-read the snapshot whenever the coordinator
    reports a significant change of the device.
    """

    _attr_has_entity_name = True
    _attr_should_poll = False

    def __init__(self, coordinator: AirPurifierCoordinator, key: str) -> None:
        self._coordinator = coordinator
        self._device = coordinator.device
        self._coordinator_listener_unsub: Callable[[], None] | None = None

        did = self._device.identity.did
        self._attr_unique_id = f"{did}_{key}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, did)},
            name=MODEL_NAME,
            manufacturer=MANUFACTURER,
            model=MODEL_NAME,
            serial_number=did,
            sw_version=self._device.firmware_version,
        )

    async def async_added_to_hass(self) -> None:
        """Subscribe to coordinator updates."""
        await super().async_added_to_hass()
        self._coordinator_listener_unsub = self._coordinator.async_add_listener(
            self._handle_coordinator_update
        )

    async def async_will_remove_from_hass(self) -> None:
        """Unsubscribe from coordinator updates."""
        await super().async_will_remove_from_hass()

        if self._coordinator_listener_unsub is not None:
            self._coordinator_listener_unsub()
            self._coordinator_listener_unsub = None

    @callback
    def _handle_coordinator_update(self) -> None:
        _LOGGER.debug("%s: device state changed", self.entity_id)
        self.async_write_ha_state()
