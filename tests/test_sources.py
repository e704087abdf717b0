"""Tests for RSS, GitHub Trending and hot-list sources with mocked HTTP."""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from conftest import MockResponse
from rnews.config import SourceConfig
from rnews.sources import (
    BaiduHotSource,
    BilibiliHotSource,
    GithubTrendingSource,
    RssSource,
    ToutiaoHotSource,
    build_source,
)
from rnews.sources.github_trending import build_trending_url, parse_star_count

RSS_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example</title>
    <item>
      <title>Older story</title>
      <link>https://news.example/older</link>
      <pubDate>Mon, 06 Jan 2025 08:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Undated story</title>
      <link>https://news.example/undated</link>
    </item>
    <item>
      <title>Newest story</title>
      <link>https://news.example/newest</link>
      <pubDate>Tue, 07 Jan 2025 09:30:00 GMT</pubDate>
    </item>
    <item>
      <title>Newest story repost</title>
      <link>https://news.example/newest</link>
      <pubDate>Tue, 07 Jan 2025 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>No link here</title>
    </item>
  </channel>
</rss>
"""

TRENDING_HTML = """
<html><body>
<article class="Box-row">
  <h2 class="h3 lh-condensed"><a href="/psf/requests">psf / requests</a></h2>
  <p class="col-9 color-fg-muted my-1 pr-4">A simple, yet elegant, HTTP library.</p>
  <div class="f6 color-fg-muted mt-2">
    <span itemprop="programmingLanguage">Python</span>
    <a class="Link--muted" href="/psf/requests/stargazers">51,234</a>
    <span class="d-inline-block float-sm-right">1,024 stars today</span>
  </div>
</article>
<article class="Box-row">
  <h2 class="h3 lh-condensed"><a href="/someone/tool">someone / tool</a></h2>
</article>
</body></html>
"""


def _rss_config(**kwargs) -> SourceConfig:
    return SourceConfig(type="rss", name=kwargs.pop("name", "Example"), url="https://news.example/feed", **kwargs)


class TestRssSource:

    @pytest.mark.asyncio
    async def test_sorted_deduplicated_and_limited(self, mock_http):
        mock_http.queue(MockResponse(200, content=RSS_FEED))

        items = await RssSource(_rss_config()).fetch(10)

        assert [item.title for item in items] == ["Newest story", "Older story", "Undated story"]
        assert items[0].published_at == datetime(2025, 1, 7, 9, 30, tzinfo=timezone.utc)
        assert items[2].published_at is None
        assert {item.source for item in items} == {"Example"}
        assert mock_http.requests[0]["url"] == "https://news.example/feed"

    @pytest.mark.asyncio
    async def test_limit_applied(self, mock_http):
        mock_http.queue(MockResponse(200, content=RSS_FEED))
        items = await RssSource(_rss_config()).fetch(1)
        assert [item.title for item in items] == ["Newest story"]

    @pytest.mark.asyncio
    async def test_network_failure_returns_empty(self, mock_http):
        mock_http.queue(httpx.ConnectError("connection refused"))
        assert await RssSource(_rss_config()).fetch(5) == []

    @pytest.mark.asyncio
    async def test_http_error_returns_empty(self, mock_http):
        mock_http.queue(MockResponse(404, text="not found"))
        assert await RssSource(_rss_config()).fetch(5) == []

    def test_translatable(self):
        assert RssSource(_rss_config()).translatable is True
        assert BaiduHotSource(SourceConfig(type="baidu-hot")).translatable is False


class TestGithubTrendingSource:

    def test_build_trending_url(self):
        assert build_trending_url() == "https://github.com/trending"
        assert build_trending_url("python", "weekly") == "https://github.com/trending/python?since=weekly"
        assert build_trending_url("c++") == "https://github.com/trending/c%2B%2B"

    def test_parse_star_count(self):
        assert parse_star_count("51,234") == 51234
        assert parse_star_count("n/a") == 0

    @pytest.mark.asyncio
    async def test_parse_repositories(self, mock_http):
        mock_http.queue(MockResponse(200, text=TRENDING_HTML))
        source = GithubTrendingSource(SourceConfig(type="github-trending", language="python", since="daily"))

        items = await source.fetch(5)

        assert len(items) == 2
        first = items[0]
        assert first.title == "psf/requests"
        assert first.link == "https://github.com/psf/requests"
        assert first.extra.stars == 51234
        assert first.extra.today_stars == 1024
        assert first.extra.language == "Python"
        assert first.extra.description == "A simple, yet elegant, HTTP library."
        assert items[1].extra.stars == 0
        assert items[1].extra.description == ""
        assert mock_http.requests[0]["url"] == "https://github.com/trending/python?since=daily"

    @pytest.mark.asyncio
    async def test_limit_applied(self, mock_http):
        mock_http.queue(MockResponse(200, text=TRENDING_HTML))
        items = await GithubTrendingSource(SourceConfig(type="github-trending")).fetch(1)
        assert [item.title for item in items] == ["psf/requests"]


class TestHotLists:

    @pytest.mark.asyncio
    async def test_baidu_hot(self, mock_http):
        payload = {
            "data": {
                "cards": [
                    {
                        "content": [
                            {
                                "content": [
                                    {"word": "热点一", "url": "https://m.baidu.com/s?word=1", "desc": "描述一"},
                                    {"word": "", "url": "https://m.baidu.com/s?word=x"},
                                    {"word": "热点二", "url": "https://m.baidu.com/s?word=2"},
                                ]
                            }
                        ]
                    }
                ]
            }
        }
        mock_http.queue(MockResponse(200, payload))

        items = await BaiduHotSource(SourceConfig(type="baidu-hot")).fetch(10)

        assert [item.title for item in items] == ["热点一", "热点二"]
        assert items[0].extra.description == "描述一"
        assert items[1].extra is None
        assert items[0].source == "百度热搜"
        assert mock_http.requests[0]["params"] == {"platform": "wise", "tab": "realtime"}

    @pytest.mark.asyncio
    async def test_toutiao_hot(self, mock_http):
        payload = {"data": [{"Title": f"头条{i}", "Url": f"https://www.toutiao.com/trending/{i}"} for i in range(5)]}
        mock_http.queue(MockResponse(200, payload))

        items = await ToutiaoHotSource(SourceConfig(type="toutiao-hot", name="头条热榜")).fetch(3)

        assert [item.title for item in items] == ["头条0", "头条1", "头条2"]
        assert items[0].source == "头条热榜"

    @pytest.mark.asyncio
    async def test_bilibili_hot(self, mock_http):
        payload = {"data": {"list": [{"keyword": "原神", "show_name": "原神新版本"}, {"keyword": "黑神话"}]}}
        mock_http.queue(MockResponse(200, payload))

        items = await BilibiliHotSource(SourceConfig(type="bilibili-hot")).fetch(10)

        assert [item.title for item in items] == ["原神新版本", "黑神话"]
        assert items[0].link == "https://search.bilibili.com/all?keyword=%E5%8E%9F%E7%A5%9E"
        assert items[0].source == "B站热搜"

    @pytest.mark.asyncio
    async def test_invalid_json_returns_empty(self, mock_http):
        mock_http.queue(MockResponse(200, payload=None, text="<html>blocked</html>"))
        assert await ToutiaoHotSource(SourceConfig(type="toutiao-hot")).fetch(5) == []

    @pytest.mark.asyncio
    async def test_unexpected_shape_returns_empty(self, mock_http):
        mock_http.queue(MockResponse(200, {"data": {"cards": []}}))
        assert await BaiduHotSource(SourceConfig(type="baidu-hot")).fetch(5) == []


def test_build_source_registry():
    assert isinstance(build_source(SourceConfig(type="rss", name="x", url="https://x")), RssSource)
    assert isinstance(build_source(SourceConfig(type="bilibili-hot")), BilibiliHotSource)
    with pytest.raises(ValueError):
        build_source(SourceConfig(type="weibo-hot"))


def test_hot_list_subclass_must_implement_entry_mapping():
    from rnews.sources.hot_lists import _JsonHotSource

    class HalfDone(_JsonHotSource):
        kind = "half-done"
        default_name = "Half"
        endpoint = "https://half.example/api"

        def _entries(self, payload):
            return []

    with pytest.raises(TypeError):
        HalfDone(SourceConfig(type="half-done"))
