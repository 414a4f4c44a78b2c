"""Fan entity for the Mi Air Purifier 3C.

The purifier is represented as a fan that can only be switched on and off.
Operating details reported by the device are exposed as attributes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from homeassistant.components.fan import FanEntity, FanEntityFeature

from .const import DOMAIN
from .entity import AirPurifierEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import AirPurifierCoordinator

_LOGGER = logging.getLogger(__name__)

MODE_NAMES = {0: "auto", 1: "sleep", 2: "favorite"}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the purifier fan entity."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([AirPurifierFanEntity(entry_data["coordinator"])])


class AirPurifierFanEntity(AirPurifierEntity, FanEntity):
    """Power control of the purifier."""

    _attr_name = None
    _attr_supported_features = FanEntityFeature.TURN_ON | FanEntityFeature.TURN_OFF

    def __init__(self, coordinator: AirPurifierCoordinator) -> None:
        """Initialize the fan entity.

        Args:
            coordinator: Coordinator owning the purifier's engine.

        """
        super().__init__(coordinator, "purifier")

    @property
    def is_on(self) -> bool:
        """Return True if the purifier is running."""
        return self._device.device_state.power

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return device details that have no dedicated entity."""
        state = self._device.device_state
        return {
            "mode": MODE_NAMES.get(state.mode, state.mode),
            "motor_speed": state.motor_speed,
            "favorite_rpm": state.favorite_rpm,
            "led_level": state.led_level,
            "buzzer": state.buzzer,
            "child_lock": state.child_lock,
            "firmware_version": self._device.firmware_version,
        }

    async def async_turn_on(
        self,
        percentage: int | None = None,
        preset_mode: str | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> None:
        """Turn the purifier on."""
        _LOGGER.debug("%s: turn on", self.entity_id)
        await self._device.async_power_switch(True)
        self.async_write_ha_state()

    async def async_turn_off(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Turn the purifier off."""
        _LOGGER.debug("%s: turn off", self.entity_id)
        await self._device.async_power_switch(False)
        self.async_write_ha_state()
