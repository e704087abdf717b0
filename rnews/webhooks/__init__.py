"""Webhook adapters keyed by platform type."""

from __future__ import annotations

from ..exceptions import UnsupportedWebhookError, WebhookError
from .base import WebhookAdapter
from .wecom import WecomWebhook
from .wps_teams import WpsTeamsWebhook

WEBHOOK_ADAPTERS: dict[str, type[WebhookAdapter]] = {
    WpsTeamsWebhook.platform: WpsTeamsWebhook,
    WecomWebhook.platform: WecomWebhook,
}


def build_webhook_adapter(name: str, webhook_type: str, url: str) -> WebhookAdapter:
    """Instantiate the adapter registered for *webhook_type*."""
    try:
        adapter_cls = WEBHOOK_ADAPTERS[webhook_type]
    except KeyError as exc:
        raise UnsupportedWebhookError(f"不支持的 webhook 类型: {webhook_type}") from exc
    return adapter_cls(name, url)


__all__ = [
    "WEBHOOK_ADAPTERS",
    "UnsupportedWebhookError",
    "WebhookAdapter",
    "WebhookError",
    "WecomWebhook",
    "WpsTeamsWebhook",
    "build_webhook_adapter",
]
