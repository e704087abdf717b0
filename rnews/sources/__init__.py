"""News sources keyed by their configuration ``type``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Type

from .base import BaseSource
from .github_trending import GithubTrendingSource
from .hot_lists import BaiduHotSource, BilibiliHotSource, ToutiaoHotSource
from .rss import RssSource

if TYPE_CHECKING:
    from ..config import SourceConfig

SOURCE_CLASSES: Dict[str, Type[BaseSource]] = {
    cls.kind: cls
    for cls in (RssSource, GithubTrendingSource, BaiduHotSource, ToutiaoHotSource, BilibiliHotSource)
}


def build_source(config: "SourceConfig") -> BaseSource:
    try:
        source_cls = SOURCE_CLASSES[config.type]
    except KeyError as exc:
        raise ValueError(f"Unsupported source type: {config.type}") from exc
    return source_cls(config)


__all__ = [
    "BaseSource",
    "BaiduHotSource",
    "BilibiliHotSource",
    "GithubTrendingSource",
    "RssSource",
    "SOURCE_CLASSES",
    "ToutiaoHotSource",
    "build_source",
]
