"""Wake orchestration: send the magic packet, acknowledge, verify in the background."""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from wolbot.core.devices import DeviceNotFound, DeviceRegistry, InvalidAddressFormat
from wolbot.core.probe import is_online
from wolbot.core.wol import TransmitError, create_packet, send_packet

logger = logging.getLogger(__name__)

Reply = Callable[[str], Awaitable[None]]
Probe = Callable[[str], Awaitable[bool]]
Sleep = Callable[[float], Awaitable[None]]
Encode = Callable[[bytes], bytes]
Transmit = Callable[[bytes, Optional[str]], int]


class WakeState(enum.Enum):
    REQUESTED = "requested"
    ENCODED = "encoded"
    TRANSMITTED = "transmitted"
    ACKNOWLEDGED = "acknowledged"
    VERIFYING = "verifying"
    REPORTED = "reported"
    FAILED = "failed"


@dataclass(frozen=True)
class VerificationTask:
    """Everything a detached verification needs, copied out of the wake request."""

    device: str
    address: str
    timeout: int
    reply: Reply


# ── Reply texts ───────────────────────────────────────────────────────────────


def not_found_message() -> str:
    return "❌ Device not found in config."


def network_error_message() -> str:
    return "❌ Error: Failed to send Magic Packet"


def sent_message(name: str, timeout: int) -> str:
    return f"🚀 Magic Packet sent to `{name}`. Verifying in {timeout}s..."


def online_message(name: str) -> str:
    return f"✅ `{name}` is now ONLINE!"


def offline_message(name: str) -> str:
    return f"⚠️ `{name}` is still not responding to ping."


# ── Orchestrator ──────────────────────────────────────────────────────────────


class WakeOrchestrator:
    """
    Runs wake requests against a shared, read-only device registry.

    ``wake()`` returns as soon as the packet is sent and acknowledged; the
    delayed liveness check runs as its own asyncio task and reports through
    the reply callable it was given.

    Usage::

        orchestrator = WakeOrchestrator(registry, interface="eth0")
        await orchestrator.wake("desktop", reply)
        ...
        await orchestrator.join()
    """

    def __init__(
        self,
        registry: DeviceRegistry,
        interface: Optional[str] = None,
        *,
        encode: Optional[Encode] = None,
        transmit: Optional[Transmit] = None,
        probe: Optional[Probe] = None,
        sleep: Optional[Sleep] = None,
    ) -> None:
        self._registry = registry
        self._interface = interface
        self._encode = encode or create_packet
        self._transmit = transmit or send_packet
        self._probe = probe or is_online
        self._sleep = sleep or asyncio.sleep
        # Strong references so running tasks are not garbage-collected.
        self._tasks: set[asyncio.Task[WakeState]] = set()

    @property
    def registry(self) -> DeviceRegistry:
        return self._registry

    @property
    def pending(self) -> int:
        """Number of verification tasks still running."""
        return len(self._tasks)

    async def wake(self, name: str, reply: Reply) -> WakeState:
        """
        Wake a device by name.

        Args:
            name: Registry key (exact match)
            reply: Coroutine function delivering a text message to the requester

        Returns:
            VERIFYING when a verification task was started, FAILED otherwise
        """
        try:
            device = self._registry.lookup(name)
        except DeviceNotFound:
            logger.info("Wake requested for unknown device '%s'", name)
            await reply(not_found_message())
            return WakeState.FAILED

        logger.info("[%s] Waking up (%s)", name, device.mac)
        try:
            packet = self._encode(device.hardware_address)
            self._transmit(packet, self._interface)
        except (InvalidAddressFormat, TransmitError) as exc:
            logger.error("[%s] Wake failed: %s", name, exc)
            await reply(network_error_message())
            return WakeState.FAILED

        await reply(sent_message(name, device.timeout))

        task = VerificationTask(
            device=name, address=device.address, timeout=device.timeout, reply=reply
        )
        self._spawn(task)
        return WakeState.VERIFYING

    def _spawn(self, task: VerificationTask) -> None:
        running = asyncio.get_running_loop().create_task(
            self._verify(task), name=f"verify-{task.device}"
        )
        self._tasks.add(running)
        running.add_done_callback(self._tasks.discard)
        logger.debug(
            "[%s] Verification scheduled in %ds (%d pending)",
            task.device,
            task.timeout,
            len(self._tasks),
        )

    async def _verify(self, task: VerificationTask) -> WakeState:
        try:
            await self._sleep(task.timeout)
            online = await self._probe(task.address)
            logger.info(
                "[%s] Verification after %ds: %s",
                task.device,
                task.timeout,
                "online" if online else "offline",
            )
            await task.reply(online_message(task.device) if online else offline_message(task.device))
        except Exception as exc:
            logger.error("[%s] Verification failed: %s", task.device, exc)
            return WakeState.FAILED
        return WakeState.REPORTED

    async def join(self) -> None:
        """Wait for every in-flight verification to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
