"""Device registry: validated name → (MAC, address, timeout) records."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30  # seconds between the magic packet and the liveness probe
MAC_LENGTH = 6

_SEPARATORS_RE = re.compile(r"[:\-]")
_HEX_RE = re.compile(r"^[0-9A-Fa-f]+$")


class InvalidAddressFormat(ValueError):
    """Raised when a hardware address cannot be parsed into exactly 6 bytes."""


class ConfigMalformed(ValueError):
    """Raised for a device entry that cannot be turned into a DeviceRecord."""


class DeviceNotFound(KeyError):
    """Raised when a device name is not present in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"Device '{self.name}' not found"


@dataclass(frozen=True)
class DeviceRecord:
    """A single wakeable device."""

    name: str
    hardware_address: bytes
    address: str
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if len(self.hardware_address) != MAC_LENGTH:
            raise InvalidAddressFormat(
                f"MAC address must be exactly {MAC_LENGTH} bytes, "
                f"got {len(self.hardware_address)}"
            )

    @property
    def mac(self) -> str:
        return ":".join(f"{b:02X}" for b in self.hardware_address)


def parse_hardware_address(text: str) -> bytes:
    """
    Parse a MAC address written with ':' or '-' separators.

    Args:
        text: Address such as "AA:BB:CC:DD:EE:FF" or "aa-bb-cc-dd-ee-ff"

    Returns:
        The 6 address bytes

    Raises:
        InvalidAddressFormat: On a non-hex token, an out-of-range octet, or a
            byte count other than 6
    """
    tokens = [t for t in _SEPARATORS_RE.split(text.strip()) if t]
    octets: list[int] = []
    for token in tokens:
        if not _HEX_RE.match(token):
            raise InvalidAddressFormat(f"Invalid MAC address format: '{text}'")
        value = int(token, 16)
        if value > 0xFF:
            raise InvalidAddressFormat(f"Invalid MAC address format: '{text}'")
        octets.append(value)

    if len(octets) != MAC_LENGTH:
        raise InvalidAddressFormat(
            f"MAC address must be exactly {MAC_LENGTH} bytes: '{text}'"
        )
    return bytes(octets)


def parse_timeout(value: Any) -> int:
    """Parse a verification timeout; anything unusable falls back to the default."""
    if value is None or isinstance(value, bool):
        return DEFAULT_TIMEOUT
    try:
        seconds = int(str(value).strip())
    except ValueError:
        logger.warning("Unparsable timeout %r, using %ds", value, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    if seconds <= 0:
        logger.warning("Non-positive timeout %r, using %ds", value, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    return seconds


def record_from_entry(name: str, fields: Any) -> DeviceRecord:
    """
    Build a DeviceRecord from one raw config entry.

    Args:
        name: Device name (registry key)
        fields: [hardware address, network address] or
            [hardware address, network address, timeout]

    Raises:
        ConfigMalformed: If the entry shape or any field is invalid
    """
    if not isinstance(name, str) or not name:
        raise ConfigMalformed(f"device name must be a non-empty string, got {name!r}")
    if not isinstance(fields, (list, tuple)) or not 2 <= len(fields) <= 3:
        raise ConfigMalformed(
            f"device '{name}': expected [mac, address] or [mac, address, timeout]"
        )

    mac, address = fields[0], fields[1]
    if not isinstance(mac, str):
        raise ConfigMalformed(f"device '{name}': MAC address must be a string")
    if not isinstance(address, str) or not address.strip():
        raise ConfigMalformed(f"device '{name}': network address must be a non-empty string")
    if address.strip().startswith("-"):
        raise ConfigMalformed(f"device '{name}': network address must not start with '-'")

    try:
        hardware_address = parse_hardware_address(mac)
    except InvalidAddressFormat as exc:
        raise ConfigMalformed(f"device '{name}': {exc}") from exc

    timeout = parse_timeout(fields[2] if len(fields) == 3 else None)
    return DeviceRecord(
        name=name,
        hardware_address=hardware_address,
        address=address.strip(),
        timeout=timeout,
    )


class DeviceRegistry:
    """
    Read-only mapping of device name → DeviceRecord.

    Built once at startup and shared by every command handler and verification
    task; nothing mutates it afterwards.
    """

    def __init__(self, records: Mapping[str, DeviceRecord]) -> None:
        self._records: dict[str, DeviceRecord] = dict(records)

    def lookup(self, name: str) -> DeviceRecord:
        """Exact, case-sensitive lookup."""
        try:
            return self._records[name]
        except KeyError:
            raise DeviceNotFound(name) from None

    def names(self) -> list[str]:
        return list(self._records)

    def __contains__(self, name: object) -> bool:
        return name in self._records

    def __iter__(self) -> Iterator[DeviceRecord]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"DeviceRegistry({self.names()!r})"


def build_registry(raw_entries: Mapping[str, Any]) -> DeviceRegistry:
    """
    Build a registry from the raw ``devices`` config mapping.

    A malformed entry is logged and skipped; the remaining devices are still
    registered.
    """
    records: dict[str, DeviceRecord] = {}
    for name, fields in raw_entries.items():
        try:
            records[name] = record_from_entry(name, fields)
        except ConfigMalformed as exc:
            logger.warning("Skipping device: %s", exc)
            continue
        logger.debug("Registered device '%s' (%s)", name, records[name].mac)

    logger.info("Device registry built with %d device(s)", len(records))
    return DeviceRegistry(records)
