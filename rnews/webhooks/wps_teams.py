"""WPS 协作 (WPS Teams) group robot.

Accepts standard Markdown headers and lists under ``markdown.text``; the
platform limit is 5000 characters per message and about 20 messages/minute.
"""

from __future__ import annotations

import logging
from typing import Any

from .base import WebhookAdapter

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 5000
TRUNCATION_NOTICE = "\n\n> ⚠ 内容过长，已截断"
TRUNCATION_RESERVE = 30


class WpsTeamsWebhook(WebhookAdapter):
    platform = "wps-teams"
    label = "WPS Teams"

    def prepare(self, text: str) -> str:
        if len(text) <= MAX_CONTENT_CHARS:
            return text
        logger.warning("⚠️ [%s] %s: 消息内容超过 %d 字符，已截断", self.label, self.name, MAX_CONTENT_CHARS)
        return text[: MAX_CONTENT_CHARS - TRUNCATION_RESERVE] + TRUNCATION_NOTICE

    def build_payload(self, content: str) -> dict[str, Any]:
        return {"msgtype": "markdown", "markdown": {"text": content}}
