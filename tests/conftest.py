"""Pytest configuration and fixtures for Xiaomi Air Purifier 3C tests."""

from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from custom_components.xiaomi_purifier_3c.models import DeviceIdentity

TEST_DID = "123456789"
TEST_HOST = "192.168.1.50"
TEST_TOKEN = "0123456789abcdef0123456789abcdef"
TEST_FIRMWARE = "2.1.4_0039"


def make_record(siid: int, piid: int, value: Any, code: int = 0) -> dict[str, Any]:  # noqa: ANN401
    """Build one ``get_properties`` response record.

    Args:
        siid: Service id.
        piid: Property id.
        value: Reported value.
        code: MIoT result code, 0 for success.

    Returns:
        A record as returned by the device.

    """
    return {"did": TEST_DID, "siid": siid, "piid": piid, "code": code, "value": value}


@pytest.fixture
def identity() -> DeviceIdentity:
    """Fixture providing the identity of the test purifier."""
    return DeviceIdentity(did=TEST_DID, token=TEST_TOKEN, host=TEST_HOST)


@pytest.fixture
def sample_info_response() -> dict:
    """Fixture providing a sample ``miIO.info`` response.

    Returns:
        A dictionary representing the device info of a purifier.

    """
    return {
        "model": "zhimi.airpurifier.mb4",
        "fw_ver": TEST_FIRMWARE,
        "hw_ver": "esp32",
        "mac": "AA:BB:CC:DD:EE:FF",
    }


@pytest.fixture
def sample_properties_response() -> list[dict[str, Any]]:
    """Fixture providing a complete ``get_properties`` response.

    Returns:
        One record for every tracked property, in shuffled order.

    """
    return [
        make_record(3, 4, 12),
        make_record(2, 1, True),
        make_record(9, 3, 1200),
        make_record(2, 4, 0),
        make_record(4, 1, 87),
        make_record(4, 3, 412),
        make_record(6, 1, True),
        make_record(7, 2, 8),
        make_record(8, 1, False),
        make_record(9, 1, 620),
    ]


@pytest.fixture
def mock_session() -> Mock:
    """Create a mock miIO session."""
    session = Mock()
    session.async_call = AsyncMock()
    return session


@pytest.fixture
def mock_transport(mock_session: Mock) -> Mock:
    """Create a mock transport returning ``mock_session``."""
    transport = Mock()
    transport.async_connect = AsyncMock(return_value=mock_session)
    return transport
