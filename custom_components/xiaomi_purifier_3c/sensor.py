"""Sensor entities for the Mi Air Purifier 3C."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.const import (
    CONCENTRATION_MICROGRAMS_PER_CUBIC_METER,
    PERCENTAGE,
    UnitOfTime,
)

from .const import DOMAIN
from .entity import AirPurifierEntity
from .models import AirQualityLevel, DeviceState

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import AirPurifierCoordinator

AIR_QUALITY_LEVELS = (
    AirQualityLevel.EXCELLENT,
    AirQualityLevel.GOOD,
    AirQualityLevel.FAIR,
    AirQualityLevel.INFERIOR,
)


def classify_air_quality(aqi: int | None, breakpoints: Sequence[int]) -> AirQualityLevel:
    """Map an AQI reading onto an air quality level.

    Each breakpoint is the inclusive upper bound of a level, from excellent
    to inferior; anything above the last one is poor.
    """
    if aqi is None:
        return AirQualityLevel.UNKNOWN
    for level, upper in zip(AIR_QUALITY_LEVELS, breakpoints, strict=False):
        if aqi <= upper:
            return level
    return AirQualityLevel.POOR


@dataclass(frozen=True, kw_only=True)
class PurifierSensorEntityDescription(SensorEntityDescription):
    """Sensor description reading one value from the snapshot."""

    value_fn: Callable[[DeviceState], int]


SENSORS: tuple[PurifierSensorEntityDescription, ...] = (
    PurifierSensorEntityDescription(
        key="aqi",
        translation_key="aqi",
        device_class=SensorDeviceClass.PM25,
        native_unit_of_measurement=CONCENTRATION_MICROGRAMS_PER_CUBIC_METER,
        state_class=SensorStateClass.MEASUREMENT,
        value_fn=lambda state: state.aqi,
    ),
    PurifierSensorEntityDescription(
        key="filter_life_remaining",
        translation_key="filter_life_remaining",
        native_unit_of_measurement=PERCENTAGE,
        state_class=SensorStateClass.MEASUREMENT,
        value_fn=lambda state: state.filter_life_remaining,
    ),
    PurifierSensorEntityDescription(
        key="filter_hours_used",
        translation_key="filter_hours_used",
        device_class=SensorDeviceClass.DURATION,
        native_unit_of_measurement=UnitOfTime.HOURS,
        state_class=SensorStateClass.TOTAL_INCREASING,
        value_fn=lambda state: state.filter_hours_used,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensor entities for the purifier."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    coordinator = entry_data["coordinator"]

    entities: list[SensorEntity] = [
        PurifierSensorEntity(coordinator, description) for description in SENSORS
    ]
    entities.append(AirQualitySensorEntity(coordinator, entry_data["breakpoints"]))
    async_add_entities(entities)


class PurifierSensorEntity(AirPurifierEntity, SensorEntity):
    """Numeric value read from the purifier snapshot."""

    entity_description: PurifierSensorEntityDescription

    def __init__(
        self,
        coordinator: AirPurifierCoordinator,
        description: PurifierSensorEntityDescription,
    ) -> None:
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def native_value(self) -> int:
        """Return the current value from the snapshot."""
        return self.entity_description.value_fn(self._device.device_state)


class AirQualitySensorEntity(AirPurifierEntity, SensorEntity):
    """Air quality level derived from the AQI and configured breakpoints."""

    _attr_translation_key = "air_quality"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [level.value for level in AirQualityLevel]

    def __init__(
        self,
        coordinator: AirPurifierCoordinator,
        breakpoints: Sequence[int],
    ) -> None:
        super().__init__(coordinator, "air_quality")
        self._breakpoints = tuple(breakpoints)

    @property
    def native_value(self) -> str:
        """Return the air quality level for the current AQI."""
        return classify_air_quality(
            self._device.device_state.aqi, self._breakpoints
        ).value
