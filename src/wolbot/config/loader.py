"""YAML configuration loader and validator."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from wolbot.auth.gate import AuthorizationGate
from wolbot.core.devices import DeviceRegistry, build_registry

TOKEN_ENV = "WOLBOT_TOKEN"


class ConfigError(Exception):
    """Raised for invalid or missing configuration."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors))


@dataclass(frozen=True)
class BotSettings:
    """Everything the bot needs, built once at startup and never mutated."""

    gate: AuthorizationGate
    registry: DeviceRegistry
    interface: Optional[str] = None
    token: Optional[str] = None
    poll_timeout: int = 30


def load_config(path: Path) -> Optional[dict[str, Any]]:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML config file

    Returns:
        Parsed configuration dictionary, or None if file is empty

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    with open(path) as f:
        result: Optional[dict[str, Any]] = yaml.safe_load(f)
        return result


def validate_config(config: dict[str, Any]) -> list[str]:
    """
    Validate the structure of a loaded configuration dictionary.

    Individual device entries are not checked here: a bad device is skipped
    when the registry is built, it does not make the whole config invalid.

    Returns:
        List of validation error messages (empty list = valid)
    """
    errors: list[str] = []

    if not isinstance(config, dict):
        return ["Config root must be a YAML mapping"]

    if "allowed_users" not in config:
        errors.append("'allowed_users' key is required")
    else:
        try:
            AuthorizationGate.from_config(config["allowed_users"])
        except ValueError as exc:
            errors.append(str(exc))

    devices = config.get("devices")
    if devices is None:
        errors.append("'devices' key is required")
    elif not isinstance(devices, dict):
        errors.append("'devices' must be a mapping of name → [mac, address, timeout]")

    interface = config.get("interface")
    if interface is not None and not isinstance(interface, str):
        errors.append("'interface' must be a string")

    telegram = config.get("telegram") or {}
    if not isinstance(telegram, dict):
        errors.append("'telegram' must be a mapping")
    else:
        poll_timeout = telegram.get("poll_timeout", 30)
        if isinstance(poll_timeout, bool) or not isinstance(poll_timeout, int) or poll_timeout < 0:
            errors.append("'telegram.poll_timeout' must be a non-negative integer")

    return errors


def settings_from_config(config: dict[str, Any]) -> BotSettings:
    """
    Construct BotSettings from a validated config dict.

    The token comes from the WOLBOT_TOKEN environment variable when set,
    otherwise from ``telegram.token``.

    Raises:
        ConfigError: If the config fails validation
    """
    errors = validate_config(config)
    if errors:
        raise ConfigError(errors)

    telegram = config.get("telegram") or {}
    token = os.environ.get(TOKEN_ENV) or telegram.get("token")
    return BotSettings(
        gate=AuthorizationGate.from_config(config["allowed_users"]),
        registry=build_registry(config["devices"]),
        interface=config.get("interface") or None,
        token=token,
        poll_timeout=int(telegram.get("poll_timeout", 30)),
    )
