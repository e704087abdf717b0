"""Configuration loader: YAML file with ``${ENV_VAR}`` references plus an optional ``.env``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from typing import Any, Dict, List, Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigError
from .utils import BEIJING_TZ
from .webhooks import WEBHOOK_ADAPTERS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"
LOCAL_FILTER_FILENAME = "filter.local.yaml"
SOURCE_TYPES = ("rss", "github-trending", "baidu-hot", "toutiao-hot", "bilibili-hot")
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


@dataclass(slots=True)
class WebhookConfig:
    type: str
    url: str


@dataclass(slots=True)
class SourceConfig:
    type: str
    name: str | None = None
    url: str | None = None
    language: str | None = None
    since: str | None = None


@dataclass(slots=True)
class CategoryConfig:
    name: str
    count: int
    webhooks: List[str] = field(default_factory=list)
    sources: List[SourceConfig] = field(default_factory=list)

    @property
    def is_trending(self) -> bool:
        return any(source.type == "github-trending" for source in self.sources)


@dataclass(slots=True)
class ScheduleRule:
    cron: str
    categories: List[str] = field(default_factory=list)


@dataclass(slots=True)
class Settings:
    translate: bool = True
    timezone: str = "Asia/Shanghai"
    _tzinfo: tzinfo | None = field(default=None, init=False, repr=False, compare=False)

    @property
    def tzinfo(self) -> tzinfo:
        if self._tzinfo is None:
            try:
                self._tzinfo = ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError):
                logger.warning("无效的时区配置 %s，使用北京时间", self.timezone)
                self._tzinfo = BEIJING_TZ
        return self._tzinfo


@dataclass(slots=True)
class AppConfig:
    webhooks: Dict[str, WebhookConfig]
    categories: Dict[str, CategoryConfig]
    schedule: List[ScheduleRule] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    base_dir: Path | None = None


def _load_env_file(config_dir: Path) -> None:
    """Load the first ``.env`` found next to the config file or in the CWD; existing variables win."""
    for candidate in (config_dir / ".env", Path.cwd() / ".env"):
        if candidate.is_file():
            load_dotenv(candidate, override=False)
            return


def resolve_env_vars(text: str) -> str:
    """Substitute ``${VAR}`` on non-comment lines; an undefined variable is a ConfigError."""

    def _replace(match: re.Match[str]) -> str:
        var_name = match.group(1).strip()
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(
                f'环境变量 "{var_name}" 未定义。\n'
                "请在 .env 文件中设置，或通过系统环境变量传入。"
            )
        return value

    lines = []
    for line in text.split("\n"):
        if line.lstrip().startswith("#"):
            lines.append(line)
        else:
            lines.append(ENV_VAR_PATTERN.sub(_replace, line))
    return "\n".join(lines)


def load_config(config_path: str | os.PathLike[str] | None = None) -> AppConfig:
    """Load, resolve and validate the YAML configuration."""
    raw_path = config_path or os.getenv("RNEWS_CONFIG") or DEFAULT_CONFIG_PATH
    resolved_path = Path(raw_path).expanduser().resolve()
    if not resolved_path.is_file():
        raise ConfigError(
            f"配置文件不存在: {resolved_path}\n"
            "请复制 config.example.yaml 为 config.yaml 并配置 .env 文件。"
        )

    _load_env_file(resolved_path.parent)
    text = resolve_env_vars(resolved_path.read_text(encoding="utf-8"))
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"配置文件解析失败: {exc}") from exc

    config = parse_config(data)
    config.base_dir = resolved_path.parent
    return config


def parse_config(data: Any) -> AppConfig:
    """Build and validate an :class:`AppConfig` from decoded YAML."""
    if not isinstance(data, Mapping):
        raise ConfigError("配置错误: 顶层必须是映射。")

    webhooks = _parse_webhooks(data.get("webhooks"))
    categories = _parse_categories(data.get("categories"), webhooks)

    schedule = [
        ScheduleRule(cron=str(rule.get("cron", "")), categories=[str(c) for c in rule.get("categories") or []])
        for rule in data.get("schedule") or []
        if isinstance(rule, Mapping)
    ]

    settings_raw = data.get("settings") or {}
    if not isinstance(settings_raw, Mapping):
        raise ConfigError("配置错误: settings 必须是映射。")
    settings = Settings(
        translate=settings_raw.get("translate", True) is not False,
        timezone=str(settings_raw.get("timezone") or "Asia/Shanghai"),
    )
    return AppConfig(webhooks=webhooks, categories=categories, schedule=schedule, settings=settings)


def _parse_webhooks(raw: Any) -> Dict[str, WebhookConfig]:
    if not isinstance(raw, Mapping) or not raw:
        raise ConfigError("配置错误: 至少需要配置一个 webhook。")
    webhooks: Dict[str, WebhookConfig] = {}
    for name, entry in raw.items():
        if not isinstance(entry, Mapping) or not entry.get("url"):
            raise ConfigError(f'配置错误: webhook "{name}" 缺少 url。')
        webhook_type = str(entry.get("type", ""))
        if webhook_type not in WEBHOOK_ADAPTERS:
            raise ConfigError(
                f'配置错误: webhook "{name}" 的类型 "{webhook_type}" 不受支持，'
                f"可选: {', '.join(WEBHOOK_ADAPTERS)}"
            )
        webhooks[str(name)] = WebhookConfig(type=webhook_type, url=str(entry["url"]))
    return webhooks


def _parse_categories(raw: Any, webhooks: Mapping[str, WebhookConfig]) -> Dict[str, CategoryConfig]:
    if not isinstance(raw, Mapping) or not raw:
        raise ConfigError("配置错误: 至少需要配置一个新闻类别。")

    categories: Dict[str, CategoryConfig] = {}
    for category_id, entry in raw.items():
        if not isinstance(entry, Mapping):
            raise ConfigError(f'配置错误: 类别 "{category_id}" 格式无效。')

        webhook_ids = [str(w) for w in entry.get("webhooks") or []]
        for webhook_id in webhook_ids:
            if webhook_id not in webhooks:
                raise ConfigError(
                    f'配置错误: 类别 "{category_id}" 引用了不存在的 webhook "{webhook_id}"。\n'
                    f"可用的 webhook: {', '.join(webhooks)}"
                )

        sources_raw = entry.get("sources") or []
        if not sources_raw:
            raise ConfigError(f'配置错误: 类别 "{category_id}" 没有配置任何数据源。')
        sources = [_parse_source(category_id, source) for source in sources_raw]

        count = entry.get("count")
        if not isinstance(count, int) or isinstance(count, bool) or count < 1:
            raise ConfigError(f'配置错误: 类别 "{category_id}" 的 count 必须大于 0。')

        categories[str(category_id)] = CategoryConfig(
            name=str(entry.get("name") or category_id),
            count=count,
            webhooks=webhook_ids,
            sources=sources,
        )
    return categories


def _parse_source(category_id: str, raw: Any) -> SourceConfig:
    if not isinstance(raw, Mapping):
        raise ConfigError(f'配置错误: 类别 "{category_id}" 的数据源格式无效。')
    source_type = str(raw.get("type", ""))
    if source_type not in SOURCE_TYPES:
        raise ConfigError(f'配置错误: 类别 "{category_id}" 的数据源类型 "{source_type}" 不受支持。')
    source = SourceConfig(
        type=source_type,
        name=raw.get("name"),
        url=raw.get("url"),
        language=raw.get("language"),
        since=raw.get("since"),
    )
    if source_type == "rss" and (not source.name or not source.url):
        raise ConfigError(f'配置错误: 类别 "{category_id}" 的 RSS 数据源需要 name 和 url。')
    return source


def load_local_filter(base_dir: str | os.PathLike[str] | None = None) -> List[str]:
    """Read blocked keywords from the untracked ``filter.local.yaml``; missing file means none."""
    candidates = []
    if base_dir is not None:
        candidates.append(Path(base_dir) / LOCAL_FILTER_FILENAME)
    candidates.append(Path.cwd() / LOCAL_FILTER_FILENAME)

    for path in candidates:
        if not path.is_file():
            continue
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("⚠️ 本地过滤配置读取失败 %s: %s", path, exc)
            return []
        if not isinstance(data, Mapping):
            logger.warning("⚠️ 本地过滤配置格式无效: %s", path)
            return []
        keywords = data.get("blockedKeywords", data.get("blocked_keywords")) or []
        if isinstance(keywords, str):
            keywords = [keywords]
        elif not isinstance(keywords, list):
            logger.warning("⚠️ 本地过滤配置 blockedKeywords 必须是列表: %s", path)
            return []
        blocked = [str(keyword) for keyword in keywords if str(keyword).strip()]
        if blocked:
            logger.info("🚫 已加载 %d 个屏蔽关键字", len(blocked))
        return blocked
    return []
