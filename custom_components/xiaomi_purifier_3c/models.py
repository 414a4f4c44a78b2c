"""Data models for Xiaomi Air Purifier 3C integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .const import FIRMWARE_UNKNOWN, MODEL


@dataclass(eq=False)
class PropertyDescriptor:
    """A remote MIoT property identified by service id and property id.

    Only ``(siid, piid)`` takes part in equality and hashing; ``value`` holds
    the last value reported by the device.
    """

    name: str
    siid: int
    piid: int
    value_type: type = int
    value: Any = field(default=None, repr=False)

    @property
    def key(self) -> tuple[int, int]:
        """Return the identity of the property."""
        return (self.siid, self.piid)

    def matches(self, siid: Any, piid: Any) -> bool:
        """Return True if the given ids address this property."""
        return self.siid == siid and self.piid == piid

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyDescriptor):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


@dataclass(frozen=True)
class DeviceIdentity:
    """Connection parameters of a single purifier.

    Attributes:
        did: Device id used in MIoT property requests.
        token: 32 character hex token for the miIO handshake.
        host: Network address of the device.

    """

    did: str
    token: str
    host: str


@dataclass
class DeviceInfo:
    """Static device information refreshed on every successful connection."""

    model: str = MODEL
    firmware_version: str = FIRMWARE_UNKNOWN


@dataclass(slots=True)
class DeviceState:
    """Last known property values of the purifier."""

    power: bool = False
    mode: int = 0
    aqi: int = 0
    filter_life_remaining: int = 0
    filter_hours_used: int = 0
    buzzer: bool = False
    led_level: int = 0
    child_lock: bool = False
    motor_speed: int = 0
    favorite_rpm: int = 0


class AirQualityLevel(StrEnum):
    """Air quality classes derived from the AQI reading."""

    UNKNOWN = "unknown"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    INFERIOR = "inferior"
    POOR = "poor"
