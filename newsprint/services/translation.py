from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Optional

import structlog

from newsprint.config import GenerationConfig, LocaleConfig
from newsprint.services.exceptions import CapabilityError
from newsprint.services.generation import (
    GenerationRequest,
    TextGenerator,
    generate_text,
)
from newsprint.utils.text_cleaner import html_to_text

logger = structlog.get_logger(__name__)

DETECTION_SAMPLE_CHARS = 500

DETECTION_SYSTEM_PROMPT = (
    "You are a language detection system. Analyze the provided text and determine "
    "its language. Return ONLY the language name in {language_english} (e.g., "
    "{examples}, etc.). If you're not sure, make your best guess."
)
DETECTION_USER_PROMPT = 'Detect the language of this text: "{title} {sample}..."'

TITLE_SYSTEM_PROMPT = (
    "You are a professional translator. Translate the given text from its original "
    "language to {language_english}. Maintain the original meaning, tone, and style "
    "as much as possible. Return ONLY the translated text without any explanations "
    "or notes."
)
TITLE_USER_PROMPT = 'Translate this title to {language_english}: "{title}"'

CONTENT_SYSTEM_PROMPT = (
    "You are a professional news translator. Your task is to translate news content "
    "from its original language to {language_english} while following these strict "
    "guidelines:\n\n"
    "1. Maintain the original meaning, tone, and style of the news article\n"
    "2. Preserve important HTML formatting like paragraphs, but simplify excessive "
    "formatting\n"
    "3. REMOVE ALL DUPLICATIONS - do not repeat the title, publication info, or any "
    "content\n"
    "4. REMOVE ALL LINKS, navigation elements, social media buttons, and sharing "
    "options\n"
    "5. REMOVE ALL METADATA like timestamps, article IDs, tracking codes\n"
    "6. REMOVE ALL FOOTER INFORMATION like copyright notices, website info\n"
    "7. REMOVE ALL RELATED ARTICLE LINKS or suggestions\n"
    "8. REMOVE ALL ADVERTISEMENTS or promotional content\n\n"
    "Return ONLY the clean, translated HTML content of the actual news article. "
    "Focus exclusively on the main article text, preserving only essential "
    "formatting."
)
CONTENT_USER_PROMPT = (
    "Translate this news content to {language_english}, following all the "
    "guidelines to produce clean, professional output without duplications, "
    "links, or metadata: {content}"
)


@dataclass(frozen=True)
class LanguageResult:
    language: str
    is_translated: bool = False
    translated_title: Optional[str] = None
    translated_content: Optional[str] = None


def _request(
    system: str, prompt: str, generation: GenerationConfig, max_tokens: int
) -> GenerationRequest:
    return GenerationRequest(
        system=system,
        prompt=prompt,
        model=generation.model,
        temperature=generation.temperature,
        max_tokens=max_tokens,
    )


def detect_language(
    title: str,
    content: str,
    *,
    generator: TextGenerator,
    generation: GenerationConfig,
    locale: LocaleConfig,
) -> str:
    """Ask the generator for the language name; raises ``CapabilityError``."""
    sample = html_to_text(content)[:DETECTION_SAMPLE_CHARS]
    request = _request(
        DETECTION_SYSTEM_PROMPT.format(
            language_english=locale.language_english,
            examples=", ".join(f"'{name}'" for name in locale.language_examples),
        ),
        DETECTION_USER_PROMPT.format(title=title, sample=sample),
        generation,
        generation.detection_max_tokens,
    )
    language = generate_text(generator, request, operation="detect").strip()
    if not language:
        raise CapabilityError("Language detection returned an empty answer")
    return language


def translate_title(
    title: str,
    *,
    generator: TextGenerator,
    generation: GenerationConfig,
    locale: LocaleConfig,
) -> str:
    request = _request(
        TITLE_SYSTEM_PROMPT.format(language_english=locale.language_english),
        TITLE_USER_PROMPT.format(language_english=locale.language_english, title=title),
        generation,
        generation.title_max_tokens,
    )
    return generate_text(generator, request, operation="translate_title").strip()


def translate_content(
    content: str,
    *,
    generator: TextGenerator,
    generation: GenerationConfig,
    locale: LocaleConfig,
) -> str:
    request = _request(
        CONTENT_SYSTEM_PROMPT.format(language_english=locale.language_english),
        CONTENT_USER_PROMPT.format(
            language_english=locale.language_english, content=content
        ),
        generation,
        generation.content_max_tokens,
    )
    return generate_text(generator, request, operation="translate_content").strip()


def detect_and_translate(
    title: str,
    content: str,
    *,
    generator: TextGenerator,
    generation: Optional[GenerationConfig] = None,
    locale: Optional[LocaleConfig] = None,
) -> LanguageResult:
    """Detect the article language and translate title and body when foreign.

    Detection failures downgrade to the locale's "unknown" marker. Once a
    language is known, each translation degrades on its own to an inline
    ``[error label: message]`` placeholder and the result stays translated.
    """
    generation = generation or GenerationConfig()
    locale = locale or LocaleConfig()

    try:
        language = detect_language(
            title, content, generator=generator, generation=generation, locale=locale
        )
    except CapabilityError as exc:
        logger.warning(
            event="translation_detect_failed",
            operation="translation.detect",
            error=str(exc),
        )
        return LanguageResult(language=locale.unknown_language, is_translated=False)

    if language == locale.language:
        logger.info(
            event="translation_skipped",
            operation="translation.detect",
            language=language,
        )
        return LanguageResult(language=language, is_translated=False)

    try:
        translated_title = translate_title(
            title, generator=generator, generation=generation, locale=locale
        )
    except CapabilityError as exc:
        logger.warning(
            event="translation_title_failed",
            operation="translation.title",
            language=language,
            error=str(exc),
        )
        translated_title = f"[{locale.translation_error_label}: {exc}]"

    try:
        translated_content = translate_content(
            content, generator=generator, generation=generation, locale=locale
        )
    except CapabilityError as exc:
        logger.warning(
            event="translation_content_failed",
            operation="translation.content",
            language=language,
            error=str(exc),
        )
        translated_content = (
            f"<p>[{locale.translation_error_label}: {html.escape(str(exc))}]</p>"
        )

    logger.info(
        event="translation_complete",
        operation="translation.translate",
        language=language,
    )
    return LanguageResult(
        language=language,
        is_translated=True,
        translated_title=translated_title,
        translated_content=translated_content,
    )
