"""miIO transport for the Mi Air Purifier 3C.

This module wraps the blocking ``python-miio`` device client into an async
session that runs every request in the Home Assistant executor, and maps
library errors onto the integration's own exception hierarchy.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any

from miio import Device, DeviceException

from .const import MODEL

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)


class PurifierError(Exception):
    """Base exception for purifier communication errors."""


class PurifierConnectionError(PurifierError):
    """Exception raised when a session with the device cannot be opened."""


class PurifierRpcError(PurifierError):
    """Exception raised when a remote call fails or returns an error."""


class MiioSession:
    """An open miIO session with a single device.

    Requests are sent one at a time. ``miio.Device`` is not thread-safe, and
    a request abandoned by a timeout keeps its executor thread busy until the
    device answers, so the lock is held inside the executor job.
    """

    def __init__(self, hass: HomeAssistant, device: Device) -> None:
        self._hass = hass
        self._device = device
        self._lock = threading.Lock()

    async def async_call(self, method: str, params: Any = None) -> Any:  # noqa: ANN401
        """Send a remote call and return its result.

        Args:
            method: miIO method name, e.g. ``get_properties``.
            params: Method parameters, or None for parameterless methods.

        Returns:
            The ``result`` member of the device response.

        Raises:
            PurifierRpcError: If the call fails or the device answers with
                an error.

        """
        _LOGGER.debug("Calling %s with %s", method, params)
        try:
            return await self._hass.async_add_executor_job(self._send, method, params)
        except DeviceException as err:
            error_msg = f"Call {method} failed: {err}"
            raise PurifierRpcError(error_msg) from err
        except OSError as err:
            error_msg = f"Network error during {method}: {err}"
            raise PurifierRpcError(error_msg) from err

    def _send(self, method: str, params: Any) -> Any:  # noqa: ANN401
        with self._lock:
            return self._device.send(method, params)


class MiioTransport:
    """Factory for miIO sessions."""

    def __init__(self, hass: HomeAssistant) -> None:
        self._hass = hass

    async def async_connect(self, host: str, token: str) -> MiioSession:
        """Open a session with the device at ``host``.

        The miIO handshake is performed eagerly so an unreachable device is
        reported here rather than on the first call.

        Raises:
            PurifierConnectionError: If the device is unreachable or the
                token is malformed.

        """
        _LOGGER.debug("Opening miIO session with %s", host)
        try:
            device = await self._hass.async_add_executor_job(
                self._create_device, host, token
            )
        except (DeviceException, OSError, ValueError) as err:
            error_msg = f"Unable to connect to {host}: {err}"
            raise PurifierConnectionError(error_msg) from err

        return MiioSession(self._hass, device)

    @staticmethod
    def _create_device(host: str, token: str) -> Device:
        device = Device(host, token, model=MODEL)
        device.send_handshake()
        return device
