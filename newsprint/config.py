from __future__ import annotations

from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    ENV: str = "development"

    FETCH_TIMEOUT_SECONDS: float = 15.0
    FETCH_MAX_RETRIES: int = 2
    FETCH_BACKOFF_BASE_SECONDS: float = 1.0
    FETCH_USER_AGENT: str = DEFAULT_USER_AGENT
    FETCH_ACCEPT: str = "text/html,application/xhtml+xml,application/xml"
    FETCH_ACCEPT_LANGUAGE: str = "en-US,en;q=0.9,tr;q=0.8"

    GENERATION_PROVIDER: str = "openai"
    GENERATION_MODEL: str = "gpt-4o-mini"
    GENERATION_TEMPERATURE: float = 0.3
    GENERATION_DETECTION_MAX_TOKENS: int = 50
    GENERATION_TITLE_MAX_TOKENS: int = 200
    GENERATION_CONTENT_MAX_TOKENS: int = 3000
    OPENAI_API_KEY: str | None = None
    GEMINI_API_KEY: str | None = None

    TARGET_LOCALE: str = "tr-TR"
    TARGET_LANGUAGE: str = "Türkçe"
    TARGET_LANGUAGE_ENGLISH: str = "Turkish"
    TARGET_LANGUAGE_EXAMPLES: str = (
        "İngilizce,Almanca,Fransızca,İspanyolca,İtalyanca,"
        "Rusça,Çince,Japonca,Arapça,Türkçe"
    )
    UNKNOWN_LANGUAGE: str = "Bilinmiyor"
    TRANSLATION_ERROR_LABEL: str = "Çeviri hatası"
    DISPLAY_TIMEZONE: str = "Europe/Istanbul"
    DATE_FORMAT: str = "%d.%m.%Y"
    TIME_FORMAT: str = "%H:%M"

    EXTRACT_RATE_LIMIT: int = 30
    EXTRACT_RATE_WINDOW_SECONDS: float = 3600.0


def get_settings() -> AppSettings:
    return AppSettings()


@dataclass(frozen=True)
class FetchConfig:
    """Timeouts, retry budget and request headers for page fetching."""

    timeout_seconds: float = 15.0
    max_retries: int = 2
    backoff_base_seconds: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = "text/html,application/xhtml+xml,application/xml"
    accept_language: str = "en-US,en;q=0.9,tr;q=0.8"

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> FetchConfig:
        settings = settings or get_settings()
        return cls(
            timeout_seconds=settings.FETCH_TIMEOUT_SECONDS,
            max_retries=max(0, settings.FETCH_MAX_RETRIES),
            backoff_base_seconds=settings.FETCH_BACKOFF_BASE_SECONDS,
            user_agent=settings.FETCH_USER_AGENT,
            accept=settings.FETCH_ACCEPT,
            accept_language=settings.FETCH_ACCEPT_LANGUAGE,
        )

    @property
    def total_attempts(self) -> int:
        return self.max_retries + 1


@dataclass(frozen=True)
class GenerationConfig:
    """Model id, temperature and per-call token ceilings for the text generator."""

    model: str = "gpt-4o-mini"
    temperature: float = 0.3
    detection_max_tokens: int = 50
    title_max_tokens: int = 200
    content_max_tokens: int = 3000

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> GenerationConfig:
        settings = settings or get_settings()
        return cls(
            model=settings.GENERATION_MODEL,
            temperature=settings.GENERATION_TEMPERATURE,
            detection_max_tokens=settings.GENERATION_DETECTION_MAX_TOKENS,
            title_max_tokens=settings.GENERATION_TITLE_MAX_TOKENS,
            content_max_tokens=settings.GENERATION_CONTENT_MAX_TOKENS,
        )

    @property
    def extraction_max_tokens(self) -> int:
        # AI-assisted extraction shares the content translation ceiling.
        return self.content_max_tokens


@dataclass(frozen=True)
class LocaleConfig:
    """The reader's native language and how dates and diagnostics are shown."""

    locale: str = "tr-TR"
    language: str = "Türkçe"
    language_english: str = "Turkish"
    language_examples: tuple[str, ...] = (
        "İngilizce",
        "Almanca",
        "Fransızca",
        "İspanyolca",
        "İtalyanca",
        "Rusça",
        "Çince",
        "Japonca",
        "Arapça",
        "Türkçe",
    )
    unknown_language: str = "Bilinmiyor"
    translation_error_label: str = "Çeviri hatası"
    timezone: str = "Europe/Istanbul"
    date_format: str = "%d.%m.%Y"
    time_format: str = "%H:%M"

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None) -> LocaleConfig:
        settings = settings or get_settings()
        examples = tuple(
            value.strip()
            for value in settings.TARGET_LANGUAGE_EXAMPLES.split(",")
            if value.strip()
        )
        return cls(
            locale=settings.TARGET_LOCALE,
            language=settings.TARGET_LANGUAGE,
            language_english=settings.TARGET_LANGUAGE_ENGLISH,
            language_examples=examples or (settings.TARGET_LANGUAGE,),
            unknown_language=settings.UNKNOWN_LANGUAGE,
            translation_error_label=settings.TRANSLATION_ERROR_LABEL,
            timezone=settings.DISPLAY_TIMEZONE,
            date_format=settings.DATE_FORMAT,
            time_format=settings.TIME_FORMAT,
        )
