import copy
import html as html_lib
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

import structlog

from newsprint.config import GenerationConfig
from newsprint.services.exceptions import CapabilityError
from newsprint.services.generation import (
    GenerationRequest,
    TextGenerator,
    generate_text,
)
from newsprint.services.sanitizer import sanitize_html
from newsprint.utils.text_cleaner import strip_code_fences

logger = structlog.get_logger(__name__)

MIN_CONTENT_CHARS = 100
MIN_PARAGRAPH_CHARS = 20

CONTENT_SELECTORS: tuple[str, ...] = (
    "article",
    ".post-content",
    ".article-content",
    ".entry-content",
    ".content",
    ".news-detail-content",
    ".article-body",
    "main",
    "#content",
    ".post",
    ".story",
    ".news-text",
    "[itemprop='articleBody']",
    ".story-body",
)

CONTAINER_NOISE = (
    "script, style, .share-buttons, .social-share, .paylas, .share, nav, "
    ".navigation, .breadcrumb, .related-news, .comments, .sidebar, .ad, "
    ".advertisement, footer, header, .menu"
)

BODY_NOISE = (
    "script, style, header, footer, nav, .menu, .navigation, .share, .social, "
    ".comments, .sidebar, .ad, .advertisement, iframe, .breadcrumb, .related-news"
)

EXTRACTION_SYSTEM_PROMPT = (
    "You are a news article extractor. Extract the COMPLETE main content of the "
    "article without truncating or summarizing. Preserve paragraphs and formatting. "
    "Return only the article content in clean HTML format, without any analysis, "
    "code blocks, or additional text. EXCLUDE navigation elements, social media "
    "buttons, related news sections, comments, and any other non-article content. "
    "Focus only on the actual news article text and any images that are part of "
    "the article content. DO NOT include any markdown formatting, code block "
    "markers like ```html, or any other non-HTML formatting. ENSURE THE ENTIRE "
    "ARTICLE IS INCLUDED WITHOUT CUTTING OFF ANY CONTENT."
)
EXTRACTION_USER_PROMPT = (
    "Extract the COMPLETE news article content from this HTML, ensuring no text "
    "is cut off. Return ONLY clean HTML without any markdown formatting or code "
    "block markers: {html}"
)


@dataclass(frozen=True)
class ContentContext:
    soup: Any
    html: str
    url: str
    generator: Optional[TextGenerator] = None
    generation: GenerationConfig = field(default_factory=GenerationConfig)


ContentFn = Callable[[ContentContext], str]


@dataclass(frozen=True)
class ContentStrategy:
    name: str
    extractor: ContentFn
    # A terminal strategy's output is taken whatever its length.
    terminal: bool = False
    extractor_attr: Optional[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "extractor_attr", getattr(self.extractor, "__name__", None)
        )

    def run(self, context: ContentContext) -> str:
        extractor_fn = self.extractor
        if self.extractor_attr:
            module = sys.modules.get(__name__)
            candidate = getattr(module, self.extractor_attr, None)
            if callable(candidate):
                extractor_fn = candidate
        return extractor_fn(context) or ""


class ContentStrategyRegistry:
    def __init__(self, strategies: Iterable[ContentStrategy]):
        self._strategies: dict[str, ContentStrategy] = {
            strategy.name: strategy for strategy in strategies
        }

    def get(self, name: str) -> Optional[ContentStrategy]:
        return self._strategies.get(name)

    def all(self) -> list[ContentStrategy]:
        return list(self._strategies.values())

    def names(self) -> list[str]:
        return list(self._strategies)


def _remove_noise(container, selectors: str) -> None:
    for node in container.select(selectors):
        node.extract()


def _extract_by_selectors(context: ContentContext) -> str:
    """Inner HTML of the first known article container with enough content."""
    for selector in CONTENT_SELECTORS:
        element = context.soup.select_one(selector)
        if element is None:
            continue
        container = copy.copy(element)
        _remove_noise(container, CONTAINER_NOISE)
        content = container.decode_contents()
        if len(content.strip()) > MIN_CONTENT_CHARS:
            logger.debug(
                event="content_selector_match",
                operation="content.selectors",
                selector=selector,
                chars=len(content.strip()),
            )
            return content
    return ""


def _extract_paragraphs(context: ContentContext) -> str:
    """Rebuild the body from every substantial ``<p>`` on the page."""
    chunks: list[str] = []
    for paragraph in context.soup.find_all("p"):
        text = paragraph.get_text().strip()
        if len(text) > MIN_PARAGRAPH_CHARS:
            chunks.append(f"<p>{html_lib.escape(text, quote=False)}</p>\n")
    aggregated = "".join(chunks)
    if len(aggregated) > MIN_CONTENT_CHARS:
        return aggregated
    return ""


def _extract_with_generator(context: ContentContext) -> str:
    if context.generator is None:
        logger.info(
            event="content_generator_skipped",
            operation="content.ai",
            url=context.url,
            reason="no_generator",
        )
        return ""

    request = GenerationRequest(
        system=EXTRACTION_SYSTEM_PROMPT,
        prompt=EXTRACTION_USER_PROMPT.format(html=context.html),
        model=context.generation.model,
        temperature=context.generation.temperature,
        max_tokens=context.generation.extraction_max_tokens,
    )
    try:
        raw = generate_text(context.generator, request, operation="extract")
    except CapabilityError as exc:
        logger.warning(
            event="content_generator_failed",
            operation="content.ai",
            url=context.url,
            error=str(exc),
        )
        return ""
    return strip_code_fences(raw)


def _salvage_body(context: ContentContext) -> str:
    """Whole ``<body>`` minus obvious chrome; noisy but never missing."""
    body = context.soup.body
    source = body if body is not None else context.soup
    clone = copy.copy(source)
    _remove_noise(clone, BODY_NOISE)
    return clone.decode_contents()


CONTENT_STRATEGIES = ContentStrategyRegistry(
    [
        ContentStrategy("selectors", _extract_by_selectors),
        ContentStrategy("paragraphs", _extract_paragraphs),
        ContentStrategy("ai", _extract_with_generator),
        ContentStrategy("body", _salvage_body, terminal=True),
    ]
)


def extract_content(
    soup,
    html: str,
    url: str,
    *,
    generator: Optional[TextGenerator] = None,
    generation: Optional[GenerationConfig] = None,
    registry: Optional[ContentStrategyRegistry] = None,
) -> str:
    """Return the sanitized article body, or ``""`` when nothing usable was found.

    Strategies run in registry order and stop at the first one producing more
    than ``MIN_CONTENT_CHARS`` trimmed characters; a terminal strategy is
    accepted unconditionally. ``soup`` is never modified.
    """
    context = ContentContext(
        soup=soup,
        html=html,
        url=url,
        generator=generator,
        generation=generation or GenerationConfig(),
    )
    registry = registry or CONTENT_STRATEGIES

    content = ""
    winner: Optional[str] = None
    for strategy in registry.all():
        attempt_started = time.perf_counter()
        content = strategy.run(context)
        chars = len(content.strip())
        elapsed_ms = int((time.perf_counter() - attempt_started) * 1000)
        accepted = chars > MIN_CONTENT_CHARS or (strategy.terminal and chars > 0)
        # structlog uses the positional argument for the event name; keep ``event`` keyword-only.
        logger.info(
            event="content_strategy",
            operation="content.strategy",
            strategy=strategy.name,
            url=url,
            status="success" if accepted else "short",
            chars=chars,
            elapsed_ms=elapsed_ms,
        )
        if accepted or strategy.terminal:
            winner = strategy.name
            break

    sanitized = sanitize_html(content) if content else ""
    logger.info(
        event="content_extracted",
        operation="content.extract",
        url=url,
        winner=winner,
        raw_chars=len(content),
        chars=len(sanitized),
    )
    return sanitized
