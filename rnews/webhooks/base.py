"""Webhook adapter interface shared by all chat platforms."""

from __future__ import annotations

import abc
import logging
from typing import Any

import httpx

from ..exceptions import WebhookError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0


class WebhookAdapter(abc.ABC):
    """Convert generic Markdown to a platform dialect, enforce its size limit and POST it.

    ``send_markdown`` returns normally on success and raises :class:`WebhookError`
    on any failure, so callers can count and log failures per message.
    """

    platform: str
    label: str

    def __init__(self, name: str, url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.name = name
        self.url = url
        self._timeout = timeout

    @abc.abstractmethod
    def prepare(self, text: str) -> str:
        """Return *text* converted to the platform dialect and truncated to its limit."""

    @abc.abstractmethod
    def build_payload(self, content: str) -> dict[str, Any]:
        """Wrap prepared *content* in the platform's JSON body."""

    async def send_markdown(self, text: str) -> None:
        payload = self.build_payload(self.prepare(text))
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self.url, json=payload)
        except httpx.TimeoutException as exc:
            raise WebhookError(f"{self.label} 请求超时 ({self._timeout}s)") from exc
        except httpx.HTTPError as exc:
            raise WebhookError(f"{self.label} 请求失败: {exc}") from exc

        if response.status_code >= 400:
            raise WebhookError(f"HTTP {response.status_code}: {response.text[:200]}")

        try:
            result = response.json()
        except ValueError:
            result = {}
        errcode = result.get("errcode") if isinstance(result, dict) else None
        if errcode:
            raise WebhookError(f"{self.label} API 错误: {result}")

        logger.info("✅ [%s] %s: 消息发送成功", self.label, self.name)
