"""Wake-on-LAN magic packet encoding and broadcast transmission."""

import logging
import socket
from typing import Optional

from wakeonlan import create_magic_packet

from wolbot.core.devices import MAC_LENGTH, InvalidAddressFormat

logger = logging.getLogger(__name__)

BROADCAST_IP = "255.255.255.255"
WOL_PORT = 9
PACKET_LENGTH = 6 + 16 * MAC_LENGTH  # 102


class TransmitError(Exception):
    """Raised when the magic packet could not be handed to the local network stack."""


def create_packet(hardware_address: bytes) -> bytes:
    """
    Build a magic packet: 6 × 0xFF followed by the MAC repeated 16 times.

    Args:
        hardware_address: The 6-byte MAC of the target machine

    Returns:
        The 102-byte payload

    Raises:
        InvalidAddressFormat: If the address is not exactly 6 bytes
    """
    if len(hardware_address) != MAC_LENGTH:
        raise InvalidAddressFormat(
            f"MAC address must be exactly {MAC_LENGTH} bytes, got {len(hardware_address)}"
        )
    return create_magic_packet(hardware_address.hex())


def _bind_to_interface(sock: socket.socket, interface: str) -> None:
    option = getattr(socket, "SO_BINDTODEVICE", None)
    if option is None:
        logger.warning("Interface binding not supported on this platform; sending unbound")
        return
    try:
        sock.setsockopt(socket.SOL_SOCKET, option, interface.encode())
    except OSError as exc:
        logger.warning("Failed to bind to interface %s: %s; sending unbound", interface, exc)
        return
    logger.debug("Socket bound to interface %s", interface)


def send_packet(packet: bytes, interface: Optional[str] = None) -> int:
    """
    Broadcast a payload on the WoL port from a fresh UDP socket.

    Args:
        packet: Encoded magic packet
        interface: Optional interface name (e.g. "eth0") to bind the socket to.
            Binding failures are logged and the packet is sent unbound.

    Returns:
        Number of bytes accepted by the local stack

    Raises:
        TransmitError: If the socket cannot be created or the send fails
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            if interface:
                _bind_to_interface(sock, interface)
            sent = sock.sendto(packet, (BROADCAST_IP, WOL_PORT))
    except OSError as exc:
        logger.error("Failed to send magic packet: %s", exc)
        raise TransmitError(f"Failed to send magic packet: {exc}") from exc

    logger.debug("Sent %d byte(s) to %s:%d", sent, BROADCAST_IP, WOL_PORT)
    return sent
