"""Chinese platform hot lists exposed as JSON endpoints."""

from __future__ import annotations

import abc
from typing import Any, Mapping
from urllib.parse import quote

from ..exceptions import SourceFetchError
from ..models import NewsItem
from .base import BaseSource

BAIDU_HOT_URL = "https://top.baidu.com/api/board"
TOUTIAO_HOT_URL = "https://www.toutiao.com/hot-event/hot-board/"
BILIBILI_HOT_URL = "https://app.bilibili.com/x/v2/search/trending/ranking"
BILIBILI_SEARCH_URL = "https://search.bilibili.com/all?keyword="


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


class _JsonHotSource(BaseSource):
    endpoint: str
    params: Mapping[str, str] | None = None

    async def _fetch(self, limit: int) -> list[NewsItem]:
        response = await self._get(self.endpoint, params=self.params, accept="application/json")
        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceFetchError(f"热榜响应不是合法 JSON: {exc}") from exc
        if not isinstance(payload, Mapping):
            raise SourceFetchError("热榜响应格式无效")

        items: list[NewsItem] = []
        for entry in self._entries(payload):
            if len(items) >= limit:
                break
            if not isinstance(entry, Mapping):
                continue
            item = self._to_item(entry)
            if item is not None:
                items.append(item)
        return items

    @abc.abstractmethod
    def _entries(self, payload: Mapping[str, Any]) -> list:
        """Return the raw hot-list entries from the decoded payload."""

    @abc.abstractmethod
    def _to_item(self, entry: Mapping[str, Any]) -> NewsItem | None:
        """Map one entry to a NewsItem, or None when it lacks a title or link."""


class BaiduHotSource(_JsonHotSource):
    kind = "baidu-hot"
    default_name = "百度热搜"
    endpoint = BAIDU_HOT_URL
    params = {"platform": "wise", "tab": "realtime"}

    def _entries(self, payload: Mapping[str, Any]) -> list:
        cards = _as_list((payload.get("data") or {}).get("cards"))
        if not cards or not isinstance(cards[0], Mapping):
            return []
        groups = _as_list(cards[0].get("content"))
        if not groups or not isinstance(groups[0], Mapping):
            return []
        return _as_list(groups[0].get("content"))

    def _to_item(self, entry: Mapping[str, Any]) -> NewsItem | None:
        title = str(entry.get("word") or "").strip()
        link = str(entry.get("url") or "").strip()
        if not title or not link:
            return None
        item = NewsItem(title=title, link=link, source=self.name)
        description = str(entry.get("desc") or "").strip()
        return item.with_description(description) if description else item


class ToutiaoHotSource(_JsonHotSource):
    kind = "toutiao-hot"
    default_name = "今日头条"
    endpoint = TOUTIAO_HOT_URL
    params = {"origin": "toutiao_pc"}

    def _entries(self, payload: Mapping[str, Any]) -> list:
        return _as_list(payload.get("data"))

    def _to_item(self, entry: Mapping[str, Any]) -> NewsItem | None:
        title = str(entry.get("Title") or "").strip()
        link = str(entry.get("Url") or "").strip()
        if not title or not link:
            return None
        return NewsItem(title=title, link=link, source=self.name)


class BilibiliHotSource(_JsonHotSource):
    kind = "bilibili-hot"
    default_name = "B站热搜"
    endpoint = BILIBILI_HOT_URL

    def _entries(self, payload: Mapping[str, Any]) -> list:
        return _as_list((payload.get("data") or {}).get("list"))

    def _to_item(self, entry: Mapping[str, Any]) -> NewsItem | None:
        keyword = str(entry.get("keyword") or "").strip()
        if not keyword:
            return None
        title = str(entry.get("show_name") or "").strip() or keyword
        return NewsItem(title=title, link=f"{BILIBILI_SEARCH_URL}{quote(keyword)}", source=self.name)
