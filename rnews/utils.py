"""Utility helpers for logging, keyword filtering, CJK detection and timestamps."""

from __future__ import annotations

import logging
import os
import re
import sys
from datetime import datetime, timedelta, timezone, tzinfo
from pathlib import Path
from typing import Sequence

import colorlog

from .models import NewsItem


# 北京时区 UTC+8
BEIJING_TZ = timezone(timedelta(hours=8))

# 基本汉字（标题分词用）
HAN_REGEX = re.compile(r"[\u4e00-\u9fff]")
# 基本汉字、扩展 A、兼容汉字（翻译判定用）
CJK_REGEX = re.compile(r"[\u4e00-\u9fff\u3400-\u4dbf\uf900-\ufaff]")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _beijing_time(record: logging.LogRecord, datefmt: str | None) -> str:
    dt = datetime.fromtimestamp(record.created, tz=timezone.utc).astimezone(BEIJING_TZ)
    s = dt.strftime(datefmt or LOG_DATEFMT)
    return f"{s},{int(record.msecs):03d}"


class BeijingTimeFormatter(logging.Formatter):
    """Formatter that uses Beijing time (UTC+8) instead of local time."""

    def formatTime(self, record, datefmt=None):
        return _beijing_time(record, datefmt)


class BeijingColoredFormatter(colorlog.ColoredFormatter):
    """Colored formatter with Beijing time."""

    def formatTime(self, record, datefmt=None):
        return _beijing_time(record, datefmt)


class _MaxLevelFilter(logging.Filter):
    """Filter that only allows records up to a specific level."""

    def __init__(self, max_level: int) -> None:
        super().__init__()
        self._max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - logging helper
        return record.levelno <= self._max_level


def setup_logger(name: str, level: str | None = None) -> logging.Logger:
    """Configure a color logger on stdout/stderr that also writes to ``./logs/rnews.log``."""
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if logger.handlers:
        return logger

    console_formatter = BeijingColoredFormatter(
        "%(log_color)s" + LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        log_colors={
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "red,bg_white",
        },
    )
    console_handler = colorlog.StreamHandler(stream=sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.addFilter(_MaxLevelFilter(logging.INFO))
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(BeijingTimeFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    logger.addHandler(stderr_handler)

    if os.getenv("RNEWS_LOG_FILE", "1").lower() not in {"0", "false", "no", "off"}:
        Path("./logs").mkdir(exist_ok=True)
        file_handler = logging.FileHandler("./logs/rnews.log", encoding="utf-8")
        file_handler.setFormatter(BeijingTimeFormatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
        logger.addHandler(file_handler)

    return logger


def count_cjk(text: str) -> int:
    return len(CJK_REGEX.findall(text or ""))


def apply_keyword_filter(items: Sequence[NewsItem], blocked_keywords: Sequence[str]) -> list[NewsItem]:
    """Drop items whose title or description contains any blocked keyword.

    Matching is a literal, case-sensitive substring test. An empty block list
    returns the input untouched.
    """
    if not blocked_keywords:
        return items  # type: ignore[return-value]

    kept: list[NewsItem] = []
    for item in items:
        description = item.extra.description if item.extra and item.extra.description else ""
        text = f"{item.title} {description}"
        if any(keyword in text for keyword in blocked_keywords):
            continue
        kept.append(item)
    return kept


def format_local_time(now: datetime | None = None, tz: tzinfo | None = None) -> str:
    """Render *now* as ``YYYY-MM-DD HH:mm`` in *tz* (default Beijing time)."""
    moment = now or datetime.now(tz=timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz or BEIJING_TZ).strftime("%Y-%m-%d %H:%M")


def truncate_to_bytes(text: str, max_bytes: int) -> str:
    """Truncate *text* to at most *max_bytes* UTF-8 bytes without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= max_bytes:
        return text
    return encoded[: max(max_bytes, 0)].decode("utf-8", errors="ignore")


def utf8_length(text: str) -> int:
    return len(text.encode("utf-8"))
