"""
Configuration flow for Xiaomi Air Purifier 3C integration.

This module handles the setup of a purifier through Home Assistant's config
flow system. The entered host and token are checked by reading the device
info before the entry is created.
"""

import logging
import re
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.const import CONF_HOST, CONF_TOKEN

from .const import (
    BREAKPOINT_COUNT,
    CONF_BREAKPOINTS,
    CONF_DID,
    DEFAULT_BREAKPOINTS,
    DOMAIN,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_BREAKPOINTS,
    ERROR_INVALID_TOKEN,
    ERROR_UNKNOWN,
    METHOD_INFO,
    MODEL_NAME,
    TOKEN_LENGTH,
)
from .transport import MiioTransport, PurifierError

_LOGGER = logging.getLogger(__name__)

TOKEN_PATTERN = re.compile(rf"^[0-9a-fA-F]{{{TOKEN_LENGTH}}}$")


def parse_breakpoints(value: str) -> list[int]:
    """Parse a comma separated list of ascending AQI breakpoints.

    Args:
        value: Text such as ``"5, 15, 35, 55"``.

    Returns:
        The breakpoints as integers.

    Raises:
        ValueError: If the text does not hold four ascending non-negative
            integers.

    """
    breakpoints = [int(part) for part in value.split(",")]
    if len(breakpoints) != BREAKPOINT_COUNT:
        error_msg = f"Expected {BREAKPOINT_COUNT} breakpoints, got {len(breakpoints)}"
        raise ValueError(error_msg)
    if breakpoints[0] < 0 or breakpoints != sorted(set(breakpoints)):
        error_msg = "Breakpoints must be ascending non-negative integers"
        raise ValueError(error_msg)
    return breakpoints


class AirPurifierConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for Xiaomi Air Purifier 3C integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing host, token, device id
                and breakpoints.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            host = user_input[CONF_HOST].strip()
            token = user_input[CONF_TOKEN].strip()
            did = str(user_input[CONF_DID]).strip()

            try:
                breakpoints = parse_breakpoints(user_input[CONF_BREAKPOINTS])
            except ValueError as err:
                _LOGGER.warning(
                    "Invalid breakpoints (%s): %s", ERROR_INVALID_BREAKPOINTS, err
                )
                errors[CONF_BREAKPOINTS] = ERROR_INVALID_BREAKPOINTS

            if not TOKEN_PATTERN.match(token):
                errors[CONF_TOKEN] = ERROR_INVALID_TOKEN

            if not errors:
                try:
                    transport = MiioTransport(self.hass)
                    session = await transport.async_connect(host, token)
                    info = await session.async_call(METHOD_INFO)
                    _LOGGER.info(
                        "Successfully connected to purifier at %s (%s)",
                        host,
                        info.get("model") if isinstance(info, dict) else "unknown",
                    )
                except PurifierError:
                    _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                    errors["base"] = ERROR_CANNOT_CONNECT
                except Exception:
                    _LOGGER.exception(
                        "Unexpected error during setup (%s)", ERROR_UNKNOWN
                    )
                    errors["base"] = ERROR_UNKNOWN

                else:
                    await self.async_set_unique_id(did)
                    self._abort_if_unique_id_configured()

                    return self.async_create_entry(
                        title=f"{MODEL_NAME} ({host})",
                        data={
                            CONF_HOST: host,
                            CONF_TOKEN: token,
                            CONF_DID: did,
                            CONF_BREAKPOINTS: breakpoints,
                        },
                    )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_HOST): str,
                    vol.Required(CONF_TOKEN): str,
                    vol.Required(CONF_DID): str,
                    vol.Required(
                        CONF_BREAKPOINTS,
                        default=", ".join(str(b) for b in DEFAULT_BREAKPOINTS),
                    ): str,
                }
            ),
            errors=errors,
        )
