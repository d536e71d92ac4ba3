"""Liveness probing via a single ICMP echo (the system ``ping`` binary)."""

import asyncio
import logging
from typing import Iterable

logger = logging.getLogger(__name__)

PING_BIN = "ping"
# Grace period on top of ping's own -W wait before the subprocess is killed.
_SUBPROCESS_GRACE = 2.0


async def is_online(address: str, timeout: int = 1) -> bool:
    """
    Check once whether a host answers a ping.

    Runs as an asyncio subprocess so other commands keep being processed
    while it waits.

    Args:
        address: IPv4 literal or hostname
        timeout: Seconds ping waits for the echo reply

    Returns:
        True if the host replied; False when it did not or the probe itself failed
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            PING_BIN,
            "-c",
            "1",
            "-W",
            str(timeout),
            address,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as exc:
        logger.error("Could not run %s for %s: %s", PING_BIN, address, exc)
        return False

    try:
        returncode = await asyncio.wait_for(proc.wait(), timeout + _SUBPROCESS_GRACE)
    except asyncio.TimeoutError:
        logger.warning("ping %s did not exit within %ds, killing it", address, timeout)
        try:
            proc.kill()
        except ProcessLookupError:
            pass  # exited between the timeout and the kill
        await proc.wait()
        return False

    online = returncode == 0
    logger.debug("Probe %s → %s", address, "online" if online else f"offline (exit {returncode})")
    return online


async def probe_many(addresses: Iterable[str], timeout: int = 1) -> dict[str, bool]:
    """Probe several addresses concurrently."""
    unique = list(dict.fromkeys(addresses))
    results = await asyncio.gather(*(is_online(a, timeout=timeout) for a in unique))
    return dict(zip(unique, results))
