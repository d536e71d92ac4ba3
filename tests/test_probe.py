"""Tests for the ping-based liveness prober."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from wolbot.core.probe import is_online, probe_many


def _proc(returncode: int) -> MagicMock:
    proc = MagicMock()
    proc.wait = AsyncMock(return_value=returncode)
    return proc


class TestIsOnline:
    """Tests for is_online."""

    @patch("wolbot.core.probe.asyncio.create_subprocess_exec", new_callable=AsyncMock)
    def test_exit_zero_is_online(self, mock_exec: AsyncMock) -> None:
        mock_exec.return_value = _proc(0)
        assert asyncio.run(is_online("192.168.1.10")) is True

    @patch("wolbot.core.probe.asyncio.create_subprocess_exec", new_callable=AsyncMock)
    def test_nonzero_exit_is_offline(self, mock_exec: AsyncMock) -> None:
        mock_exec.return_value = _proc(1)
        assert asyncio.run(is_online("192.168.1.10")) is False

    @patch("wolbot.core.probe.asyncio.create_subprocess_exec", new_callable=AsyncMock)
    def test_single_ping_with_bounded_wait(self, mock_exec: AsyncMock) -> None:
        mock_exec.return_value = _proc(0)
        asyncio.run(is_online("nas.lan", timeout=1))
        args = mock_exec.call_args[0]
        assert args == ("ping", "-c", "1", "-W", "1", "nas.lan")
        mock_exec.assert_called_once()

    @patch(
        "wolbot.core.probe.asyncio.create_subprocess_exec",
        new_callable=AsyncMock,
        side_effect=FileNotFoundError("ping"),
    )
    def test_missing_ping_binary_is_offline(self, mock_exec: AsyncMock) -> None:
        assert asyncio.run(is_online("192.168.1.10")) is False

    @patch("wolbot.core.probe._SUBPROCESS_GRACE", 0.01)
    @patch("wolbot.core.probe.asyncio.create_subprocess_exec", new_callable=AsyncMock)
    def test_hung_subprocess_is_killed_and_offline(self, mock_exec: AsyncMock) -> None:
        calls: list[int] = []

        async def wait() -> int:
            calls.append(1)
            if len(calls) == 1:
                await asyncio.sleep(10)
            return -9

        proc = MagicMock()
        proc.wait = wait
        mock_exec.return_value = proc

        assert asyncio.run(is_online("192.168.1.10", timeout=0)) is False
        proc.kill.assert_called_once()

    @patch("wolbot.core.probe._SUBPROCESS_GRACE", 0.01)
    @patch("wolbot.core.probe.asyncio.create_subprocess_exec", new_callable=AsyncMock)
    def test_exit_before_kill_is_offline(self, mock_exec: AsyncMock) -> None:
        calls: list[int] = []

        async def wait() -> int:
            calls.append(1)
            if len(calls) == 1:
                await asyncio.sleep(10)
            return 1

        proc = MagicMock()
        proc.wait = wait
        proc.kill.side_effect = ProcessLookupError()
        mock_exec.return_value = proc

        assert asyncio.run(is_online("192.168.1.10", timeout=0)) is False
        proc.kill.assert_called_once()
        assert len(calls) == 2


class TestProbeMany:
    @patch("wolbot.core.probe.is_online", new_callable=AsyncMock)
    def test_returns_result_per_address(self, mock_online: AsyncMock) -> None:
        mock_online.side_effect = lambda address, timeout=1: address == "10.0.0.1"
        results = asyncio.run(probe_many(["10.0.0.1", "10.0.0.2"]))
        assert results == {"10.0.0.1": True, "10.0.0.2": False}

    @patch("wolbot.core.probe.is_online", new_callable=AsyncMock, return_value=True)
    def test_duplicate_addresses_probed_once(self, mock_online: AsyncMock) -> None:
        results = asyncio.run(probe_many(["10.0.0.1", "10.0.0.1"]))
        assert results == {"10.0.0.1": True}
        assert mock_online.await_count == 1

    def test_empty(self) -> None:
        assert asyncio.run(probe_many([])) == {}
