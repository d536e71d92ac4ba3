"""Chat command routing: authorization first, then /list, /status, /wake."""

import logging
from typing import Awaitable, Callable, Optional

from wolbot.auth.gate import AuthorizationGate
from wolbot.core.devices import DeviceNotFound, DeviceRegistry
from wolbot.core.orchestrator import Reply, WakeOrchestrator, not_found_message
from wolbot.core.probe import is_online, probe_many

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "🤖 *WOL Bot Menu*\n\n"
    "`/list` — List configured devices\n"
    "`/status_all` — Ping all devices\n"
    "`/status <name>` — Ping specific device\n"
    "`/wake <name>` — Send Magic Packet"
)

Probe = Callable[[str], Awaitable[bool]]
ProbeMany = Callable[[list[str]], Awaitable[dict[str, bool]]]


def parse_command(text: str) -> tuple[str, Optional[str]]:
    """
    Split a message into (command, first argument).

    "/wake@my_bot desktop" → ("/wake", "desktop"). Non-command text yields
    an empty command.
    """
    parts = text.split()
    if not parts or not parts[0].startswith("/"):
        return "", None
    command = parts[0].split("@", 1)[0]
    arg = parts[1] if len(parts) > 1 else None
    return command, arg


def _status_label(online: bool) -> str:
    return "✅ ONLINE" if online else "🔴 OFFLINE"


class CommandRouter:
    """Dispatches authorized chat commands to the registry, prober and orchestrator."""

    def __init__(
        self,
        gate: AuthorizationGate,
        orchestrator: WakeOrchestrator,
        probe: Probe = is_online,
        probe_all: ProbeMany = probe_many,
    ) -> None:
        self._gate = gate
        self._orchestrator = orchestrator
        self._probe = probe
        self._probe_all = probe_all
        self._handlers: dict[str, Callable[[Optional[str], Reply], Awaitable[None]]] = {
            "/start": self._help,
            "/help": self._help,
            "/list": self._list,
            "/status_all": self._status_all,
            "/status": self._status,
            "/wake": self._wake,
        }

    @property
    def orchestrator(self) -> WakeOrchestrator:
        return self._orchestrator

    @property
    def registry(self) -> DeviceRegistry:
        return self._orchestrator.registry

    async def handle(self, caller_id: int, text: str, reply: Reply) -> None:
        """
        Process one inbound message.

        Unauthorized callers and unknown commands get no reply.
        """
        if not self._gate.check(caller_id):
            return

        command, arg = parse_command(text)
        handler = self._handlers.get(command)
        if handler is None:
            logger.debug("Ignoring message from %s: %r", caller_id, text)
            return

        logger.info("[CMD] %s %s requested by %s", command, arg or "", caller_id)
        await handler(arg, reply)

    async def _help(self, arg: Optional[str], reply: Reply) -> None:
        await reply(HELP_TEXT)

    async def _list(self, arg: Optional[str], reply: Reply) -> None:
        names = self.registry.names()
        if not names:
            await reply("📋 No devices configured.")
            return
        lines = ["📋 *Configured Devices:*"]
        lines.extend(f"• `{name}`" for name in names)
        await reply("\n".join(lines))

    async def _status_all(self, arg: Optional[str], reply: Reply) -> None:
        devices = list(self.registry)
        if not devices:
            await reply("📋 No devices configured.")
            return
        results = await self._probe_all([d.address for d in devices])
        lines = ["🔍 *Network Status:*"]
        lines.extend(f"• `{d.name}`: {_status_label(results[d.address])}" for d in devices)
        await reply("\n".join(lines))

    async def _status(self, arg: Optional[str], reply: Reply) -> None:
        if not arg:
            await reply("Usage: `/status <name>`")
            return
        try:
            device = self.registry.lookup(arg)
        except DeviceNotFound:
            await reply(not_found_message())
            return
        online = await self._probe(device.address)
        await reply(f"Device `{device.name}` is {_status_label(online)}")

    async def _wake(self, arg: Optional[str], reply: Reply) -> None:
        if not arg:
            await reply("Usage: `/wake <name>`")
            return
        await self._orchestrator.wake(arg, reply)
