"""GitHub Trending page scraper."""

from __future__ import annotations

import logging
import re
from urllib.parse import quote, urlencode

from bs4 import BeautifulSoup

from ..models import NewsExtra, NewsItem
from .base import BaseSource

logger = logging.getLogger(__name__)

GITHUB_TRENDING_URL = "https://github.com/trending"
TODAY_STARS_REGEX = re.compile(r"([\d,]+)\s+stars?\s+today", re.IGNORECASE)


def parse_star_count(text: str) -> int:
    """``"12,345"`` -> 12345; unparsable text -> 0."""
    digits = text.replace(",", "").strip()
    try:
        return int(digits)
    except ValueError:
        return 0


def build_trending_url(language: str | None = None, since: str | None = None) -> str:
    path = f"/{quote(language, safe='')}" if language else ""
    query = f"?{urlencode({'since': since})}" if since else ""
    return f"{GITHUB_TRENDING_URL}{path}{query}"


def parse_trending_html(html: str, limit: int) -> list[NewsItem]:
    soup = BeautifulSoup(html, "html.parser")
    items: list[NewsItem] = []
    for article in soup.select("article.Box-row"):
        if len(items) >= limit:
            break
        anchor = article.select_one("h2 a")
        href = (anchor.get("href") or "").strip() if anchor else ""
        if not href:
            continue

        description_node = article.select_one("p.col-9")
        language_node = article.select_one('[itemprop="programmingLanguage"]')
        stars_node = article.select_one('a[href$="/stargazers"]')
        today_node = article.select_one("span.d-inline-block.float-sm-right")

        today_match = TODAY_STARS_REGEX.search(today_node.get_text(" ", strip=True)) if today_node else None
        items.append(
            NewsItem(
                title=href.lstrip("/"),
                link=f"https://github.com{href}",
                source="GitHub Trending",
                extra=NewsExtra(
                    stars=parse_star_count(stars_node.get_text(strip=True)) if stars_node else 0,
                    today_stars=parse_star_count(today_match.group(1)) if today_match else 0,
                    description=description_node.get_text(" ", strip=True) if description_node else "",
                    language=language_node.get_text(strip=True) if language_node else "",
                ),
            )
        )
    return items


class GithubTrendingSource(BaseSource):
    kind = "github-trending"
    default_name = "GitHub Trending"

    async def _fetch(self, limit: int) -> list[NewsItem]:
        url = build_trending_url(self.config.language, self.config.since)
        response = await self._get(url, accept="text/html", user_agent="rNews/1.0")
        items = parse_trending_html(response.text, limit)
        if not items:
            logger.warning("⚠️ [GitHub] Trending 页面未解析到任何仓库，页面结构可能已变化")
        return items
