"""Synchronization engine for the Mi Air Purifier 3C.

The engine owns the miIO session with one purifier. It keeps retrying the
connection until it succeeds, polls all tracked properties in one batched
call, keeps the last known values in a single ``DeviceState`` snapshot and
notifies one subscriber when a significant field changes.

Failures never escape to the caller: every remote-call error is caught at
the boundary of the operation that produced it and logged. Reads always
return the last successfully observed state.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .const import (
    DEFAULT_CALL_TIMEOUT,
    METHOD_GET_PROPERTIES,
    METHOD_INFO,
    METHOD_SET_PROPERTIES,
    RECONNECT_DELAY,
)
from .models import DeviceInfo, DeviceState
from .properties import AQI, POWER, PropertyRegistry
from .transport import PurifierError, PurifierRpcError

if TYPE_CHECKING:
    from collections.abc import Callable

    from .models import DeviceIdentity, PropertyDescriptor
    from .transport import MiioSession, MiioTransport

_LOGGER = logging.getLogger(__name__)

# Fields whose change is reported to the subscriber
SIGNIFICANT_FIELDS = (POWER, AQI)


class RetryPolicy:
    """Strategy deciding how long to wait before the next connection attempt."""

    def next_delay(self, attempt: int) -> float:
        """Return the delay in seconds before retry number ``attempt``."""
        raise NotImplementedError


@dataclass(frozen=True)
class FixedRetryPolicy(RetryPolicy):
    """Retry forever with the same delay between attempts."""

    delay: float = RECONNECT_DELAY

    def next_delay(self, attempt: int) -> float:  # noqa: ARG002
        return self.delay


def _coerce(value: Any, value_type: type) -> Any:  # noqa: ANN401
    """Convert a raw property value to the field type, or None if impossible."""
    if value_type is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        return None

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _find_record(
    records: list[Any], descriptor: PropertyDescriptor
) -> Mapping[str, Any] | None:
    """Return the usable response record for ``descriptor``, if any.

    Records with a non-zero ``code`` carry no value (the device could not
    read the property) and are skipped like missing ones.
    """
    for record in records:
        if not isinstance(record, Mapping):
            continue
        if not descriptor.matches(record.get("siid"), record.get("piid")):
            continue
        if record.get("code", 0) != 0 or "value" not in record:
            continue
        return record
    return None


class AirPurifierDevice:
    """Connection, polling and change notification for one purifier.

    Constructing the engine schedules the first connection attempt on the
    running event loop. Until it succeeds, polls and commands are logged
    and ignored while the snapshot keeps its initial values.
    """

    def __init__(
        self,
        identity: DeviceIdentity,
        transport: MiioTransport,
        logger: logging.Logger | None = None,
        retry_policy: RetryPolicy | None = None,
        call_timeout: float = DEFAULT_CALL_TIMEOUT,
        *,
        auto_connect: bool = True,
    ) -> None:
        """Initialize the engine.

        Args:
            identity: Device id, token and address of the purifier.
            transport: Transport used to open the miIO session.
            logger: Logger for failures, defaults to the module logger.
            retry_policy: Delay strategy between connection attempts.
            call_timeout: Seconds before a remote call is abandoned.
            auto_connect: Schedule ``async_connect`` immediately.

        """
        self._identity = identity
        self._transport = transport
        self._logger = logger or _LOGGER
        self._retry_policy = retry_policy or FixedRetryPolicy()
        self._call_timeout = call_timeout

        self._registry = PropertyRegistry()
        self._info = DeviceInfo()
        self._state = DeviceState()
        self._session: MiioSession | None = None
        self._callback: Callable[[], None] | None = None

        self._failed_attempts = 0
        self._poll_in_flight = False
        self._shutdown = False
        self._connect_task: asyncio.Task[bool] | None = None
        self._retry_task: asyncio.Task[None] | None = None

        if auto_connect:
            self._connect_task = asyncio.create_task(self.async_connect())

    @property
    def identity(self) -> DeviceIdentity:
        """Return the connection parameters."""
        return self._identity

    @property
    def registry(self) -> PropertyRegistry:
        """Return the tracked properties."""
        return self._registry

    @property
    def connected(self) -> bool:
        """Return True if a session is open."""
        return self._session is not None

    @property
    def connect_attempts(self) -> int:
        """Return the number of consecutive failed connection attempts."""
        return self._failed_attempts

    @property
    def device_info(self) -> DeviceInfo:
        """Return model and firmware information."""
        return self._info

    @property
    def device_state(self) -> DeviceState:
        """Return the current snapshot."""
        return self._state

    @property
    def firmware_version(self) -> str:
        """Return the firmware version reported on the last connection."""
        return self._info.firmware_version

    def get_device_state(self) -> DeviceState:
        """Return the current snapshot."""
        return self._state

    def get_firmware_version(self) -> str:
        """Return the firmware version reported on the last connection."""
        return self._info.firmware_version

    def on_change(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register the change subscriber, replacing any previous one.

        Args:
            callback: Function called with no arguments after a poll changed
                a significant field.

        Returns:
            A function to unregister the callback.

        """
        self._callback = callback

        def unregister() -> None:
            if self._callback is callback:
                self._callback = None

        return unregister

    async def async_connect(self) -> bool:
        """Open the session, read device info and run the initial poll.

        On failure a new attempt is scheduled according to the retry policy.

        Returns:
            True if the device is connected, False otherwise.

        """
        if self._session is not None:
            self._logger.debug("Already connected to %s", self._identity.host)
            return True

        try:
            async with asyncio.timeout(self._call_timeout):
                session = await self._transport.async_connect(
                    self._identity.host, self._identity.token
                )
                info = await session.async_call(METHOD_INFO)
            self._apply_info(info)
        except (PurifierError, TimeoutError) as err:
            self._failed_attempts += 1
            self._logger.error(
                "Device connection failure for %s (attempt %d): %s",
                self._identity.host,
                self._failed_attempts,
                str(err) or "timeout",
            )
            self._session = None
            self._schedule_reconnect()
            return False

        if self._shutdown:
            self._logger.debug(
                "Dropping session with %s opened during shutdown", self._identity.host
            )
            return False

        self._failed_attempts = 0
        self._session = session
        self._logger.info(
            "Connected to %s at %s, firmware %s",
            self._info.model,
            self._identity.host,
            self._info.firmware_version,
        )

        await self.async_update_properties()
        return True

    def _apply_info(self, info: Any) -> None:  # noqa: ANN401
        if not isinstance(info, Mapping):
            error_msg = f"Malformed {METHOD_INFO} response: {info!r}"
            raise PurifierRpcError(error_msg)

        reported_model = info.get("model")
        if reported_model and reported_model != self._info.model:
            self._logger.warning(
                "Device at %s reports model %s, expected %s",
                self._identity.host,
                reported_model,
                self._info.model,
            )

        firmware = info.get("fw_ver")
        if firmware:
            self._info.firmware_version = str(firmware)
        else:
            self._logger.warning(
                "Device at %s did not report a firmware version", self._identity.host
            )

    def _schedule_reconnect(self) -> None:
        """Schedule a reconnection attempt."""
        if self._shutdown:
            return
        # A failing retry reschedules from inside its own task
        retry_task = self._retry_task
        if (
            retry_task is not None
            and not retry_task.done()
            and retry_task is not asyncio.current_task()
        ):
            return  # Reconnection already scheduled

        delay = self._retry_policy.next_delay(self._failed_attempts)
        self._logger.info(
            "Retrying connection to %s in %s seconds", self._identity.host, delay
        )

        async def reconnect() -> None:
            try:
                await asyncio.sleep(delay)
                if not self._shutdown:
                    await self.async_connect()
            finally:
                if self._retry_task is asyncio.current_task():
                    self._retry_task = None

        self._retry_task = asyncio.create_task(reconnect())

    async def async_update_properties(self) -> None:
        """Poll all tracked properties and notify on significant changes.

        A poll started while another one is still running does nothing.
        """
        if self._poll_in_flight:
            self._logger.debug(
                "Poll of %s already in progress, skipping", self._identity.host
            )
            return

        self._poll_in_flight = True
        try:
            await self._async_poll()
        finally:
            self._poll_in_flight = False

    async def _async_poll(self) -> None:
        session = self._session
        if session is None:
            self._logger.warning(
                "Cannot poll %s: device not connected", self._identity.host
            )
            return

        try:
            async with asyncio.timeout(self._call_timeout):
                records = await session.async_call(
                    METHOD_GET_PROPERTIES,
                    self._registry.as_request(self._identity.did),
                )
        except (PurifierError, TimeoutError) as err:
            self._logger.warning(
                "Device failure while polling %s: %s",
                self._identity.host,
                str(err) or "timeout",
            )
            return

        if not isinstance(records, list):
            self._logger.warning(
                "Malformed %s response from %s: %r",
                METHOD_GET_PROPERTIES,
                self._identity.host,
                records,
            )
            return

        previous = self._significant_values()
        self._apply_records(records)
        if self._significant_values() != previous:
            self._logger.debug(
                "Significant change on %s: %s -> %s",
                self._identity.host,
                previous,
                self._significant_values(),
            )
            self._notify()

    def _significant_values(self) -> tuple[Any, ...]:
        return tuple(getattr(self._state, name) for name in SIGNIFICANT_FIELDS)

    def _apply_records(self, records: list[Any]) -> None:
        """Copy matched values into the descriptors and the snapshot."""
        for descriptor in self._registry:
            record = _find_record(records, descriptor)
            if record is None:
                continue

            value = _coerce(record["value"], descriptor.value_type)
            if value is None:
                self._logger.debug(
                    "Ignoring unexpected value %r for %s",
                    record["value"],
                    descriptor.name,
                )
                continue

            descriptor.value = value
            setattr(self._state, descriptor.name, value)

    def _notify(self) -> None:
        callback = self._callback
        if callback is None:
            return
        try:
            callback()
        except Exception:
            self._logger.exception("Error in change callback")

    async def async_power_switch(self, target_on: bool) -> None:  # noqa: FBT001
        """Switch the purifier on or off and read the state back.

        Args:
            target_on: True to turn the purifier on.

        """
        session = self._session
        if session is None:
            self._logger.error(
                "Cannot switch power of %s: device not connected",
                self._identity.host,
            )
            return

        power = self._registry.get(POWER)
        try:
            async with asyncio.timeout(self._call_timeout):
                result = await session.async_call(
                    METHOD_SET_PROPERTIES,
                    [
                        {
                            "did": self._identity.did,
                            "siid": power.siid,
                            "piid": power.piid,
                            "value": target_on,
                        }
                    ],
                )
        except (PurifierError, TimeoutError) as err:
            self._logger.error(
                "Device failure while switching power of %s: %s",
                self._identity.host,
                str(err) or "timeout",
            )
            return

        if isinstance(result, list) and any(
            isinstance(r, Mapping) and r.get("code", 0) != 0 for r in result
        ):
            self._logger.error(
                "Device %s rejected power command: %s", self._identity.host, result
            )
            return

        await self.async_update_properties()

    async def async_shutdown(self) -> None:
        """Cancel pending connection attempts and drop the session."""
        self._shutdown = True

        for task in (self._connect_task, self._retry_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task

        self._connect_task = None
        self._retry_task = None
        self._session = None
