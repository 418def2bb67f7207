"""Tests for environment-driven configuration."""

import pytest

from armpi_mcp.config import ArmConfig


def test_defaults():
    config = ArmConfig.from_env({})
    assert config == ArmConfig()
    assert config.port == 5000
    assert config.connect_timeout == 5.0
    assert config.read_timeout is None


def test_from_env_overrides():
    config = ArmConfig.from_env(
        {
            "ARMPI_HOST": "10.0.0.7",
            "ARMPI_PORT": "6000",
            "ARMPI_CONNECT_TIMEOUT": "2.5",
            "ARMPI_READ_TIMEOUT": "10",
            "ARMPI_PAD_MOVE_PAYLOADS": "yes",
            "ARMPI_HOME_TIMEOUT": "4",
        }
    )
    assert config == ArmConfig(
        host="10.0.0.7",
        port=6000,
        connect_timeout=2.5,
        read_timeout=10.0,
        pad_move_payloads=True,
        home_timeout=4.0,
    )


@pytest.mark.parametrize("value", ["", "none", "None"])
def test_read_timeout_disabled(value):
    assert ArmConfig.from_env({"ARMPI_READ_TIMEOUT": value}).read_timeout is None


@pytest.mark.parametrize(
    "env",
    [
        {"ARMPI_PORT": "http"},
        {"ARMPI_PORT": "70000"},
        {"ARMPI_CONNECT_TIMEOUT": "-1"},
        {"ARMPI_READ_TIMEOUT": "soon"},
        {"ARMPI_PAD_MOVE_PAYLOADS": "maybe"},
    ],
)
def test_invalid_values(env):
    with pytest.raises(ValueError):
        ArmConfig.from_env(env)
