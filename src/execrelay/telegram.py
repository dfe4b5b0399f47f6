"""
Telegram Bot API access.

Sends rendered replies and caches the bot's own identity.  The identity
is looked up at most once per process: concurrent first callers wait on
the same lookup and later callers read the cached value.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Generic, Optional, TypeVar

import httpx

from .models import TelegramUser
from .outcome import Reply

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TelegramAPIError(Exception):
    def __init__(self, method: str, description: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"{method} failed: {description}")
        self.method = method
        self.description = description
        self.status_code = status_code


class OnceCell(Generic[T]):
    """Single-assignment async cache.

    The factory runs once.  If it raises, the cell stays empty and the
    next caller retries.
    """

    def __init__(self, factory: Callable[[], Awaitable[T]]) -> None:
        self._factory = factory
        self._lock = asyncio.Lock()
        self._value: Optional[T] = None
        self._set = False

    async def get(self) -> T:
        if self._set:
            return self._value  # type: ignore[return-value]
        async with self._lock:
            if not self._set:
                self._value = await self._factory()
                self._set = True
        return self._value  # type: ignore[return-value]


class TelegramSender:
    """Thin client over the Bot API methods the relay uses."""

    def __init__(self, client: httpx.AsyncClient, token: str, api_base: str = "https://api.telegram.org") -> None:
        if not token:
            raise ValueError("TELEGRAM_BOT_TOKEN is not set")
        self.client = client
        self.api_url = f"{api_base.rstrip('/')}/bot{token}"
        self.identity: OnceCell[TelegramUser] = OnceCell(self.get_me)

    async def _call(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.client.post(f"{self.api_url}/{method}", json=payload or {})
        try:
            body = response.json()
        except ValueError:
            raise TelegramAPIError(method, response.text, response.status_code)
        if not isinstance(body, dict):
            raise TelegramAPIError(method, f"unexpected response: {response.text}", response.status_code)
        if not body.get("ok"):
            raise TelegramAPIError(method, body.get("description", "unknown error"), response.status_code)
        return body.get("result")

    async def get_me(self) -> TelegramUser:
        result = await self._call("getMe")
        try:
            return TelegramUser.model_validate(result)
        except ValueError as exc:
            raise TelegramAPIError("getMe", str(exc)) from exc

    async def username(self) -> Optional[str]:
        return (await self.identity.get()).username

    async def send(self, reply: Reply) -> None:
        if reply.chat_id is None:
            raise ValueError("Reply has no chat_id")
        await self._call(
            "sendMessage",
            {
                "chat_id": reply.chat_id,
                "text": reply.text,
                "parse_mode": reply.parse_mode,
                "reply_to_message_id": reply.anchor_message_id,
            },
        )
        logger.info("Sent reply to chat %s (anchor %s)", reply.chat_id, reply.anchor_message_id)
