from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from newsprint.config import AppSettings, FetchConfig, GenerationConfig, LocaleConfig
from newsprint.services.generation import TextGenerator, build_generator
from newsprint.utils.rate_limits import SlidingWindowRateLimiter


@dataclass(frozen=True)
class ExtractionServices:
    """Collaborators shared by request handlers, stored on ``app.extensions``."""

    settings: AppSettings
    fetch_config: FetchConfig
    generation: GenerationConfig
    locale: LocaleConfig
    generator: TextGenerator
    rate_limiter: SlidingWindowRateLimiter
    fetcher: Optional[Callable[[str], str]] = None

    @classmethod
    def from_settings(
        cls,
        settings: AppSettings,
        *,
        generator: Optional[TextGenerator] = None,
        fetcher: Optional[Callable[[str], str]] = None,
    ) -> ExtractionServices:
        return cls(
            settings=settings,
            fetch_config=FetchConfig.from_settings(settings),
            generation=GenerationConfig.from_settings(settings),
            locale=LocaleConfig.from_settings(settings),
            generator=generator or build_generator(settings),
            rate_limiter=SlidingWindowRateLimiter(
                settings.EXTRACT_RATE_LIMIT, settings.EXTRACT_RATE_WINDOW_SECONDS
            ),
            fetcher=fetcher,
        )
