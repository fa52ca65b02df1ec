import time
from typing import Callable, Optional

import structlog
from bs4 import BeautifulSoup, FeatureNotFound

from newsprint.config import (
    AppSettings,
    FetchConfig,
    GenerationConfig,
    LocaleConfig,
    get_settings,
)
from newsprint.models.article import ArticleRecord
from newsprint.services.content import extract_content
from newsprint.services.exceptions import (
    ContentExtractionError,
    FetchError,
    ParseError,
)
from newsprint.services.fetch import fetch_html, validate_url
from newsprint.services.fields import extract_fields
from newsprint.services.generation import TextGenerator, build_generator
from newsprint.services.translation import LanguageResult, detect_and_translate
from newsprint.utils.correlation import extraction_context

logger = structlog.get_logger(__name__)

FetcherFn = Callable[[str], str]


def parse_document(html: str, *, url: Optional[str] = None) -> BeautifulSoup:
    """Build a document tree, preferring lxml and falling back to html.parser."""
    last_error: Optional[Exception] = None
    for features in ("lxml", "html.parser"):
        try:
            return BeautifulSoup(html, features)
        except FeatureNotFound as exc:
            last_error = exc
        except (ValueError, TypeError, AssertionError) as exc:
            last_error = exc
            # structlog uses the positional argument for the event name; keep ``event`` keyword-only.
            logger.warning(
                event="parser_backend_failed",
                operation="parser.parse",
                backend=features,
                error=str(exc),
            )
    raise ParseError(f"HTML parsing error: {last_error}", url=url) from last_error


def extract_article(
    url: str,
    *,
    fetcher: Optional[FetcherFn] = None,
    generator: Optional[TextGenerator] = None,
    settings: Optional[AppSettings] = None,
    fetch_config: Optional[FetchConfig] = None,
    generation: Optional[GenerationConfig] = None,
    locale: Optional[LocaleConfig] = None,
    translate: bool = True,
) -> ArticleRecord:
    """Fetch ``url`` and turn it into an :class:`ArticleRecord`.

    Raises ``InvalidInputError``, ``FetchError``/``FetchTimeoutError``,
    ``ParseError`` or ``ContentExtractionError``. Text-generation failures
    never escape: they only degrade the AI extraction strategy and the
    language fields.
    """
    target = validate_url(url)

    if settings is None and None in (fetch_config, generation, locale, generator):
        settings = get_settings()
    fetch_config = fetch_config or FetchConfig.from_settings(settings)
    generation = generation or GenerationConfig.from_settings(settings)
    locale = locale or LocaleConfig.from_settings(settings)
    if generator is None:
        generator = build_generator(settings)

    with extraction_context(target):
        started = time.perf_counter()
        logger.info(event="extraction_started", operation="extract.start", url=target)

        if fetcher is None:
            html = fetch_html(target, config=fetch_config)
        else:
            html = fetcher(target)
        if not html or not html.strip():
            raise FetchError("Failed to fetch webpage content", url=target)

        soup = parse_document(html, url=target)
        fields = extract_fields(soup, target, locale=locale)

        content = extract_content(
            soup, html, target, generator=generator, generation=generation
        )
        if not content.strip():
            logger.error(
                event="extraction_failed",
                operation="extract.content",
                url=target,
                status="failure",
            )
            raise ContentExtractionError(
                "Could not extract content from the webpage", url=target
            )

        if translate:
            language = detect_and_translate(
                fields.title,
                content,
                generator=generator,
                generation=generation,
                locale=locale,
            )
        else:
            language = LanguageResult(language=locale.unknown_language)

        record = ArticleRecord(
            url=target,
            title=fields.title,
            author=fields.author,
            image_url=fields.image_url,
            content=content,
            publish_date=fields.publish_date,
            publish_time=fields.publish_time,
            language=language.language,
            is_translated=language.is_translated,
            translated_title=language.translated_title,
            translated_content=language.translated_content,
        )
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            event="extraction_complete",
            operation="extract.complete",
            url=target,
            status="success",
            chars=len(content),
            language=record.language,
            is_translated=record.is_translated,
            elapsed_ms=elapsed_ms,
        )
        return record
