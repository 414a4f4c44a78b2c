"""MIoT properties tracked for the Mi Air Purifier 3C (zhimi.airpurifier.mb4)."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from .models import PropertyDescriptor

POWER = "power"
MODE = "mode"
AQI = "aqi"
FILTER_LIFE_REMAINING = "filter_life_remaining"
FILTER_HOURS_USED = "filter_hours_used"
BUZZER = "buzzer"
LED_LEVEL = "led_level"
CHILD_LOCK = "child_lock"
MOTOR_SPEED = "motor_speed"
FAVORITE_RPM = "favorite_rpm"

# (name, siid, piid, type) in request order
TRACKED_PROPERTIES: tuple[tuple[str, int, int, type], ...] = (
    (POWER, 2, 1, bool),
    (MODE, 2, 4, int),
    (AQI, 3, 4, int),
    (FILTER_LIFE_REMAINING, 4, 1, int),
    (FILTER_HOURS_USED, 4, 3, int),
    (BUZZER, 6, 1, bool),
    (LED_LEVEL, 7, 2, int),
    (CHILD_LOCK, 8, 1, bool),
    (MOTOR_SPEED, 9, 1, int),
    (FAVORITE_RPM, 9, 3, int),
)


class PropertyRegistry:
    """Immutable, ordered set of the properties polled from the device.

    The registry is built once from ``TRACKED_PROPERTIES`` and never grows
    or shrinks. Only the ``value`` slot of each descriptor changes, and only
    when a poll response is applied.
    """

    def __init__(
        self,
        properties: Sequence[tuple[str, int, int, type]] = TRACKED_PROPERTIES,
    ) -> None:
        """Initialize the registry from ``(name, siid, piid, type)`` tuples."""
        self._descriptors = tuple(
            PropertyDescriptor(name=name, siid=siid, piid=piid, value_type=kind)
            for name, siid, piid, kind in properties
        )
        self._by_name = {d.name: d for d in self._descriptors}
        self._by_key = {d.key: d for d in self._descriptors}

    def list(self) -> tuple[PropertyDescriptor, ...]:
        """Return the tracked descriptors in request order."""
        return self._descriptors

    def get(self, name: str) -> PropertyDescriptor:
        """Return the descriptor of a tracked field.

        Raises:
            KeyError: If the field is not tracked.

        """
        return self._by_name[name]

    def find(self, siid: Any, piid: Any) -> PropertyDescriptor | None:
        """Return the descriptor addressed by ``(siid, piid)``, if tracked."""
        try:
            return self._by_key.get((siid, piid))
        except TypeError:
            # Unhashable ids in a malformed record
            return None

    def as_request(self, did: str) -> list[dict[str, Any]]:
        """Build the ``get_properties`` argument for all tracked properties."""
        return [{"did": did, "siid": d.siid, "piid": d.piid} for d in self._descriptors]

    def __iter__(self) -> Iterator[PropertyDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)
