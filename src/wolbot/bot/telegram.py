"""Minimal Telegram Bot API client: long-poll getUpdates, reply with sendMessage."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

API_BASE = "https://api.telegram.org"

Handler = Callable[[int, str, Callable[[str], Awaitable[None]]], Awaitable[None]]


class TelegramError(Exception):
    """Raised when the Bot API answers with ok=false."""


class TelegramBot:
    """
    Receives messages by long polling and hands them to a handler one at a time.

    Args:
        token: Bot token from @BotFather
        client: Optional preconfigured ``httpx.AsyncClient`` (tests pass one
            backed by ``httpx.MockTransport``); otherwise one is created and
            owned by this instance
        poll_timeout: Seconds the server holds a getUpdates request open
        retry_delay: Seconds to wait after a failed poll
    """

    def __init__(
        self,
        token: str,
        client: Optional[httpx.AsyncClient] = None,
        poll_timeout: int = 30,
        retry_delay: float = 5.0,
    ) -> None:
        self._base_url = f"{API_BASE}/bot{token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=poll_timeout + 10)
        self._poll_timeout = poll_timeout
        self._retry_delay = retry_delay
        self._offset: Optional[int] = None
        self._running = False

    @property
    def offset(self) -> Optional[int]:
        return self._offset

    async def _call(self, method: str, payload: dict[str, Any]) -> Any:
        resp = await self._client.post(f"{self._base_url}/{method}", json=payload)
        resp.raise_for_status()
        body = resp.json()
        if not body.get("ok"):
            raise TelegramError(f"{method} failed: {body.get('description', 'unknown error')}")
        return body.get("result")

    async def get_updates(self, offset: Optional[int] = None) -> list[dict[str, Any]]:
        payload: dict[str, Any] = {
            "timeout": self._poll_timeout,
            "allowed_updates": ["message"],
        }
        if offset is not None:
            payload["offset"] = offset
        result = await self._call("getUpdates", payload)
        return list(result or [])

    async def send_message(self, chat_id: int, text: str) -> None:
        """Send a Markdown message. Failures are logged, never raised."""
        try:
            await self._call(
                "sendMessage",
                {"chat_id": chat_id, "text": text, "parse_mode": "Markdown"},
            )
            logger.debug("Reply sent to chat %s", chat_id)
        except (httpx.HTTPError, TelegramError) as exc:
            logger.error("Failed to send message to chat %s: %s", chat_id, exc)

    def _replier(self, chat_id: int) -> Callable[[str], Awaitable[None]]:
        async def reply(text: str) -> None:
            await self.send_message(chat_id, text)

        return reply

    async def poll_once(self, handler: Handler) -> int:
        """
        Fetch one batch of updates and dispatch each text message in order.

        Returns:
            Number of updates consumed
        """
        updates = await self.get_updates(self._offset)
        for update in updates:
            self._offset = int(update["update_id"]) + 1
            message = update.get("message") or {}
            text = message.get("text")
            chat = message.get("chat") or {}
            if not text or "id" not in chat:
                continue
            caller_id = int((message.get("from") or {}).get("id", 0))
            chat_id = int(chat["id"])
            try:
                await handler(caller_id, text, self._replier(chat_id))
            except Exception:
                logger.exception("Handler failed for update %s", update.get("update_id"))
        return len(updates)

    async def run(self, handler: Handler) -> None:
        """Poll until ``stop()`` is called."""
        self._running = True
        logger.info("Telegram polling started")
        while self._running:
            try:
                await self.poll_once(handler)
            except (httpx.HTTPError, TelegramError, ValueError) as exc:
                logger.warning("Polling failed: %s; retrying in %.0fs", exc, self._retry_delay)
                await asyncio.sleep(self._retry_delay)
        logger.info("Telegram polling stopped")

    def stop(self) -> None:
        self._running = False

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
