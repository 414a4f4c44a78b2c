from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import CONF_HOST, CONF_TOKEN, Platform
from homeassistant.core import HomeAssistant

from .const import CONF_BREAKPOINTS, CONF_DID, DEFAULT_BREAKPOINTS, DOMAIN
from .coordinator import AirPurifierCoordinator
from .device import AirPurifierDevice
from .models import DeviceIdentity
from .transport import MiioTransport

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.FAN, Platform.SENSOR]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Setting up Xiaomi Air Purifier 3C for entry %s", entry.entry_id)

    missing = [
        key for key in (CONF_HOST, CONF_TOKEN, CONF_DID) if key not in entry.data
    ]
    if missing:
        _LOGGER.error(
            "Missing %s in configuration for entry %s",
            ", ".join(missing),
            entry.entry_id,
        )
        return False

    identity = DeviceIdentity(
        did=str(entry.data[CONF_DID]),
        token=entry.data[CONF_TOKEN],
        host=entry.data[CONF_HOST],
    )
    # Starts connecting in the background and retries until it succeeds
    device = AirPurifierDevice(identity, MiioTransport(hass), logger=_LOGGER)
    coordinator = AirPurifierCoordinator(hass, device)
    device.on_change(coordinator.async_handle_device_change)

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "device": device,
        "coordinator": coordinator,
        "breakpoints": tuple(entry.data.get(CONF_BREAKPOINTS, DEFAULT_BREAKPOINTS)),
    }
    _LOGGER.debug("Stored data for entry %s", entry.entry_id)

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
        _LOGGER.info(
            "Successfully setup Xiaomi Air Purifier 3C for entry %s", entry.entry_id
        )
        return True
    except Exception as err:
        _LOGGER.error("Failed to setup platforms for entry %s: %s", entry.entry_id, err)
        await coordinator.async_shutdown()
        await device.async_shutdown()
        hass.data[DOMAIN].pop(entry.entry_id, None)
        return False


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info("Unloading Xiaomi Air Purifier 3C for entry %s", entry.entry_id)

    try:
        unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
        if unload_ok:
            entry_data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
            if entry_data is not None:
                await entry_data["coordinator"].async_shutdown()
                await entry_data["device"].async_shutdown()
                _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)
            _LOGGER.info(
                "Successfully unloaded Xiaomi Air Purifier 3C for entry %s",
                entry.entry_id,
            )
        else:
            _LOGGER.warning(
                "Failed to unload some platforms for entry %s", entry.entry_id
            )

        return unload_ok
    except Exception as err:
        _LOGGER.error(
            "Error unloading Xiaomi Air Purifier 3C for entry %s: %s",
            entry.entry_id,
            err,
        )
        return False
