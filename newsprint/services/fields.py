from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from newsprint.config import LocaleConfig

logger = structlog.get_logger(__name__)

# Selector order is priority order: the first non-empty match wins.
AUTHOR_SELECTORS: tuple[str, ...] = (
    'meta[name="author"]',
    'meta[property="article:author"]',
    ".author",
    ".byline",
    '[rel="author"]',
    ".writer",
    ".news-detail-author",
    ".article-author",
)

DATE_SELECTORS: tuple[str, ...] = (
    'meta[property="article:published_time"]',
    'meta[name="publication_date"]',
    ".date",
    ".publish-date",
    ".article-date",
    ".news-date",
    ".time",
    ".timestamp",
)

IMAGE_SELECTORS: tuple[str, ...] = (
    'meta[property="og:image"]',
    'meta[name="twitter:image"]',
    "article img",
    ".post-content img",
    ".article-content img",
    ".entry-content img",
    ".news-detail-img img",
    ".article-img img",
)

DATE_TIME_PATTERN = re.compile(
    r"(\d{1,2}[./-]\d{1,2}[./-]\d{2,4})[^\d]*(\d{1,2}:\d{1,2})", re.IGNORECASE
)
_MAILTO_PATTERN = re.compile(r"mailto:.*$", re.IGNORECASE | re.DOTALL)
# Python 3.10 only parses ISO offsets written as ``+HH:MM``.
_COMPACT_OFFSET = re.compile(r"([+-])(\d{2})(\d{2})$")


@dataclass(frozen=True)
class ArticleFields:
    title: str = ""
    author: str = ""
    publish_date: str = ""
    publish_time: str = ""
    image_url: str = ""


def _attribute(element, name: str) -> str:
    value = element.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    return value.strip() if isinstance(value, str) else ""


def _content_or_text(element) -> str:
    return _attribute(element, "content") or element.get_text().strip()


def extract_title(soup) -> str:
    for tag_name in ("title", "h1"):
        element = soup.find(tag_name)
        if element is None:
            continue
        title = element.get_text().strip()
        if title:
            return title
    return ""


def extract_author(soup) -> str:
    for selector in AUTHOR_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        author = _MAILTO_PATTERN.sub("", _content_or_text(element)).strip()
        if author:
            return author
    return ""


def _parse_iso(value: str) -> Optional[datetime]:
    candidate = value.strip()
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    candidate = _COMPACT_OFFSET.sub(r"\1\2:\3", candidate)
    try:
        return datetime.fromisoformat(candidate)
    except ValueError:
        return None


def _to_display_zone(value: datetime, locale: LocaleConfig) -> datetime:
    if value.tzinfo is None:
        return value
    try:
        return value.astimezone(ZoneInfo(locale.timezone))
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(
            event="fields.unknown_timezone",
            operation="fields.date",
            timezone=locale.timezone,
        )
        return value


def parse_publish_datetime(
    raw: str, locale: Optional[LocaleConfig] = None
) -> tuple[str, str]:
    """Split a raw date string into ``(date, time)`` display strings.

    ISO-8601 values (anything containing ``T`` that parses) are formatted in
    the target locale. Otherwise a ``dd.mm.yyyy ... HH:MM`` style match is
    used verbatim, and failing that the raw text is returned as the date.
    """
    locale = locale or LocaleConfig()
    raw = raw.strip()
    if not raw:
        return "", ""

    if "T" in raw:
        parsed = _parse_iso(raw)
        if parsed is not None:
            local = _to_display_zone(parsed, locale)
            return local.strftime(locale.date_format), local.strftime(locale.time_format)

    match = DATE_TIME_PATTERN.search(raw)
    if match:
        return match.group(1), match.group(2)
    return raw, ""


def extract_publish_datetime(
    soup, locale: Optional[LocaleConfig] = None
) -> tuple[str, str]:
    for selector in DATE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        raw = _content_or_text(element)
        if not raw:
            continue
        publish_date, publish_time = parse_publish_datetime(raw, locale)
        if publish_date:
            return publish_date, publish_time
    return "", ""


def resolve_image_url(value: str, page_url: str) -> str:
    """Make an image reference absolute relative to ``page_url``."""
    candidate = (value or "").strip()
    if not candidate:
        return ""
    parsed = urlparse(page_url)
    origin = f"{parsed.scheme}://{parsed.netloc}"
    if candidate.startswith("//"):
        return f"{parsed.scheme}:{candidate}"
    if candidate.startswith("/"):
        return f"{origin}{candidate}"
    if candidate.lower().startswith(("http://", "https://", "data:")):
        return candidate
    base_path = "/".join(parsed.path.split("/")[:-1])
    return f"{origin}{base_path}/{candidate}"


def extract_image_url(soup, page_url: str) -> str:
    for selector in IMAGE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        value = _attribute(element, "content") or _attribute(element, "src")
        if value:
            return resolve_image_url(value, page_url)
    return ""


def extract_fields(
    soup, base_url: str, *, locale: Optional[LocaleConfig] = None
) -> ArticleFields:
    """Best-effort title, byline, dates and hero image for a parsed page."""
    publish_date, publish_time = extract_publish_datetime(soup, locale)
    fields = ArticleFields(
        title=extract_title(soup),
        author=extract_author(soup),
        publish_date=publish_date,
        publish_time=publish_time,
        image_url=extract_image_url(soup, base_url),
    )
    if not fields.title:
        logger.warning(
            event="fields.title_missing", operation="fields.extract", url=base_url
        )
    logger.debug(
        event="fields.extracted",
        operation="fields.extract",
        url=base_url,
        has_author=bool(fields.author),
        has_date=bool(fields.publish_date),
        has_image=bool(fields.image_url),
    )
    return fields
