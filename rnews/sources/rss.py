from __future__ import annotations

import calendar
import time
from datetime import datetime, timezone
from typing import Any, Mapping

import feedparser

from ..exceptions import SourceFetchError
from ..models import NewsItem
from .base import BaseSource

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _entry_datetime(entry: Mapping[str, Any]) -> datetime | None:
    """Convert feedparser's ``*_parsed`` UTC struct_time to an aware datetime."""
    for key in ("published_parsed", "updated_parsed", "created_parsed"):
        value = entry.get(key)
        if isinstance(value, time.struct_time):
            try:
                return datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
            except (OverflowError, ValueError):
                continue
    return None


class RssSource(BaseSource):
    """RSS/Atom feed: newest first, de-duplicated by link."""

    kind = "rss"
    default_name = "RSS"
    translatable = True

    async def _fetch(self, limit: int) -> list[NewsItem]:
        if not self.config.url:
            raise SourceFetchError(f"RSS 源 {self.name} 未配置 url")
        response = await self._get(
            self.config.url,
            accept="application/rss+xml, application/xml, text/xml, */*",
        )
        feed = feedparser.parse(response.content)
        if getattr(feed, "bozo", 0) and not feed.entries:
            raise SourceFetchError(f"无效的 RSS/Atom 内容: {getattr(feed, 'bozo_exception', '')}")

        seen: set[str] = set()
        items: list[NewsItem] = []
        for entry in feed.entries:
            title = (entry.get("title") or "").strip()
            link = (entry.get("link") or "").strip()
            if not title or not link or link in seen:
                continue
            seen.add(link)
            items.append(
                NewsItem(
                    title=title,
                    link=link,
                    source=self.name,
                    published_at=_entry_datetime(entry),
                )
            )

        items.sort(key=lambda item: item.published_at or EPOCH, reverse=True)
        return items[:limit]
