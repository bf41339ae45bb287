"""
NOTIFICATION SERVICE

Thin Telegram notification sender.
No fund access. No business logic.
"""

import asyncio
import logging
from typing import Optional, Protocol

import httpx

from market_sentinel.domain.errors import NotificationError

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"


class Notifier(Protocol):
    async def send(self, text: str) -> None:
        ...

    async def send_with_retry(self, text: str, max_retries: int = 3) -> None:
        ...


class TelegramNotifier:
    """
    Telegram Bot API sender (HTML parse mode)

    Without a token and chat id every send is skipped with a log line.
    """

    def __init__(
        self,
        bot_token: Optional[str],
        chat_id: Optional[str],
        proxy: Optional[str] = None,
        timeout: float = 30.0,
        backoff_base: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.proxy = proxy
        self.timeout = timeout
        self.backoff_base = backoff_base
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def _client(self) -> httpx.AsyncClient:
        if self._transport is not None:
            return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return httpx.AsyncClient(timeout=self.timeout, proxy=self.proxy)

    async def send(self, text: str) -> None:
        """
        Send one message

        Raises:
            NotificationError: request failed or Telegram returned non-200
        """
        if not self.configured:
            logger.info("Telegram credentials not set; skipping notification")
            return

        url = f"{TELEGRAM_API_BASE}/bot{self.bot_token}/sendMessage"
        payload = {"chat_id": self.chat_id, "text": text, "parse_mode": "HTML"}

        try:
            async with self._client() as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as exc:
            raise NotificationError(f"Telegram send failed: {exc}") from exc

        if response.status_code != 200:
            raise NotificationError(
                f"Telegram API error: status {response.status_code}, body: {response.text}"
            )

    async def send_with_retry(self, text: str, max_retries: int = 3) -> None:
        """
        Send with exponential backoff (1s, 2s, 4s ...)

        Cancellation during a backoff sleep propagates immediately.

        Raises:
            NotificationError: all max_retries + 1 attempts failed
        """
        last_exc: Optional[NotificationError] = None
        for attempt in range(max_retries + 1):
            try:
                await self.send(text)
                return
            except NotificationError as exc:
                last_exc = exc
                if attempt == max_retries:
                    break
                backoff = self.backoff_base * (2 ** attempt)
                logger.warning(
                    "Telegram send failed (attempt %d/%d): %s, retrying in %.0fs",
                    attempt + 1, max_retries + 1, exc, backoff,
                )
                await asyncio.sleep(backoff)

        raise NotificationError(
            f"Telegram send failed after {max_retries + 1} attempts: {last_exc}"
        ) from last_exc
