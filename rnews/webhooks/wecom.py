"""企业微信 (WeCom) group robot.

WeCom Markdown supports bold, links, inline code, quotes and
``<font color="info|comment|warning">`` but no headers. Content is limited to
4096 UTF-8 bytes, so truncation is measured in bytes, not characters.
"""

from __future__ import annotations

import logging
from typing import Any

from ..utils import truncate_to_bytes, utf8_length
from .base import WebhookAdapter

logger = logging.getLogger(__name__)

MAX_CONTENT_BYTES = 4096
TRUNCATION_RESERVE_BYTES = 60
TRUNCATION_NOTICE = '\n\n<font color="warning">内容过长，已截断</font>'


def convert_to_wecom_markdown(text: str) -> str:
    """Rewrite ``##``/``###`` headers as bold and ``> `` quotes as grey font spans."""
    lines: list[str] = []
    for line in text.split("\n"):
        if line.startswith("## "):
            lines.append(f"**{line[3:].strip()}**")
        elif line.startswith("### "):
            lines.append(f"**{line[4:].strip()}**")
        elif line.startswith("> "):
            lines.append(f'<font color="comment">{line[2:]}</font>')
        else:
            lines.append(line)
    return "\n".join(lines)


class WecomWebhook(WebhookAdapter):
    platform = "wecom"
    label = "WeCom"

    def prepare(self, text: str) -> str:
        content = convert_to_wecom_markdown(text)
        if utf8_length(content) <= MAX_CONTENT_BYTES:
            return content
        logger.warning("⚠️ [%s] %s: 消息内容超过 %d 字节，已截断", self.label, self.name, MAX_CONTENT_BYTES)
        return truncate_to_bytes(content, MAX_CONTENT_BYTES - TRUNCATION_RESERVE_BYTES) + TRUNCATION_NOTICE

    def build_payload(self, content: str) -> dict[str, Any]:
        # 企业微信使用 content 字段而非 text
        return {"msgtype": "markdown", "markdown": {"content": content}}
