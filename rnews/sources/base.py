"""Common behaviour for news sources: HTTP access and failure isolation."""

from __future__ import annotations

import abc
import logging
from typing import TYPE_CHECKING, Any, Mapping

import httpx

from ..models import NewsItem

if TYPE_CHECKING:
    from ..config import SourceConfig

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
BROWSER_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko)"
)


class BaseSource(abc.ABC):
    """A configured source; ``fetch`` never raises and returns at most ``limit`` items."""

    kind: str
    default_name: str
    translatable: bool = False

    def __init__(self, config: "SourceConfig", timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.config = config
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self.config.name or self.default_name

    async def fetch(self, limit: int) -> list[NewsItem]:
        try:
            items = await self._fetch(limit)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("⚠️ [%s] 抓取失败: %s", self.name, exc)
            return []
        return items[:limit]

    @abc.abstractmethod
    async def _fetch(self, limit: int) -> list[NewsItem]:
        """Fetch and parse items; may raise, ``fetch`` absorbs the failure."""

    async def _get(
        self,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        accept: str = "*/*",
        user_agent: str = BROWSER_UA,
    ) -> httpx.Response:
        headers = {"User-Agent": user_agent, "Accept": accept}
        async with httpx.AsyncClient(timeout=self._timeout, headers=headers, follow_redirects=True) as client:
            response = await client.get(url, params=params)
        response.raise_for_status()
        return response
