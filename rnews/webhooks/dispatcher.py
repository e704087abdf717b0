"""Fan finished messages out to configured webhooks with fixed pacing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Mapping, Sequence

from ..exceptions import UnsupportedWebhookError, WebhookError
from ..models import Message
from ..pacing import Pacer, SleepFunc
from . import build_webhook_adapter
from .base import WebhookAdapter

if TYPE_CHECKING:
    from ..config import WebhookConfig

logger = logging.getLogger(__name__)

SEND_INTERVAL_SECONDS = 1.0


@dataclass(slots=True)
class DeliveryReport:
    sent: int = 0
    failed: int = 0
    missing_webhooks: int = 0

    def merge(self, other: "DeliveryReport") -> None:
        self.sent += other.sent
        self.failed += other.failed
        self.missing_webhooks += other.missing_webhooks


class WebhookDispatcher:
    """Hold one adapter per webhook id for a whole dispatch run and deliver messages sequentially.

    A pause follows every send, successful or not. Failures are logged and
    counted; they never stop delivery of later messages or webhooks.
    """

    def __init__(
        self,
        adapters: Mapping[str, WebhookAdapter],
        *,
        send_interval: float = SEND_INTERVAL_SECONDS,
        sleep: SleepFunc | None = None,
    ) -> None:
        self._adapters = dict(adapters)
        self._pacer = Pacer(send_interval, sleep=sleep)

    @classmethod
    def from_config(
        cls,
        webhooks: Mapping[str, "WebhookConfig"],
        *,
        send_interval: float = SEND_INTERVAL_SECONDS,
        sleep: SleepFunc | None = None,
    ) -> "WebhookDispatcher":
        adapters: dict[str, WebhookAdapter] = {}
        for name, webhook in webhooks.items():
            try:
                adapters[name] = build_webhook_adapter(name, webhook.type, webhook.url)
            except UnsupportedWebhookError as exc:
                logger.warning("⚠️ webhook \"%s\" 初始化失败，跳过: %s", name, exc)
        return cls(adapters, send_interval=send_interval, sleep=sleep)

    @property
    def webhook_names(self) -> list[str]:
        return list(self._adapters)

    async def deliver(self, webhook_ids: Sequence[str], messages: Sequence[Message]) -> DeliveryReport:
        """Send every message to every webhook, in webhook-list order then message order."""
        report = DeliveryReport()
        for webhook_id in webhook_ids:
            adapter = self._adapters.get(webhook_id)
            if adapter is None:
                logger.warning("⚠️ webhook \"%s\" 未找到，跳过", webhook_id)
                report.missing_webhooks += 1
                continue

            for index, message in enumerate(messages, start=1):
                try:
                    await adapter.send_markdown(message.text)
                    report.sent += 1
                except WebhookError as exc:
                    report.failed += 1
                    logger.error("❌ %s: 第 %d/%d 条消息发送失败 - %s", webhook_id, index, len(messages), exc)
                except Exception as exc:  # pylint: disable=broad-except
                    report.failed += 1
                    logger.error("❌ %s: 第 %d/%d 条消息发送异常 - %s", webhook_id, index, len(messages), exc)
                await self._pacer.pause()
        return report
