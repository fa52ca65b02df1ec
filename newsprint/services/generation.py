from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional

import structlog
from openai import OpenAI

from newsprint.config import AppSettings, get_settings
from newsprint.services.exceptions import CapabilityError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class GenerationRequest:
    """One chat-style call: a system instruction, a user prompt and the knobs."""

    system: str
    prompt: str
    model: str
    temperature: float
    max_tokens: int


class TextGenerator:
    """Interface for text-generation providers.

    ``generate`` returns the model's plain-text answer or raises. Callers go
    through :func:`generate_text`, which turns any failure into
    :class:`CapabilityError`.
    """

    provider = "unknown"

    def generate(self, request: GenerationRequest) -> str:
        raise NotImplementedError


class OpenAIGenerator(TextGenerator):
    provider = "openai"

    def __init__(self, api_key: Optional[str] = None, *, client: Any = None) -> None:
        if client is None and api_key:
            client = OpenAI(api_key=api_key)
        self._client = client

    def generate(self, request: GenerationRequest) -> str:
        if self._client is None:
            raise CapabilityError(
                "OPENAI_API_KEY is not configured", provider=self.provider
            )
        response = self._client.chat.completions.create(
            model=request.model,
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            messages=[
                {"role": "system", "content": request.system},
                {"role": "user", "content": request.prompt},
            ],
        )
        choices = getattr(response, "choices", None) or []
        if not choices or not getattr(choices[0], "message", None):
            raise CapabilityError("OpenAI returned no choices", provider=self.provider)
        return choices[0].message.content or ""


class GeminiGenerator(TextGenerator):
    provider = "gemini"

    def __init__(self, api_key: Optional[str] = None) -> None:
        self._api_key = api_key

    def generate(self, request: GenerationRequest) -> str:
        if not self._api_key:
            raise CapabilityError(
                "GEMINI_API_KEY is not configured", provider=self.provider
            )
        try:
            import google.generativeai as genai  # type: ignore[import-untyped]
        except ImportError as exc:
            raise CapabilityError(
                "google-generativeai is not installed", provider=self.provider
            ) from exc

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(request.model, system_instruction=request.system)
        result = model.generate_content(
            request.prompt,
            generation_config={
                "temperature": request.temperature,
                "max_output_tokens": request.max_tokens,
            },
        )
        text = getattr(result, "text", None)
        if not isinstance(text, str):
            raise CapabilityError("Gemini returned no text", provider=self.provider)
        return text


def build_generator(settings: Optional[AppSettings] = None) -> TextGenerator:
    """Instantiate the provider named by ``GENERATION_PROVIDER``."""
    settings = settings or get_settings()
    provider = (settings.GENERATION_PROVIDER or "").strip().lower()
    if provider == "gemini":
        return GeminiGenerator(api_key=settings.GEMINI_API_KEY)
    if provider != "openai":
        # structlog uses the positional argument for the event name; keep ``event`` keyword-only.
        logger.warning(
            event="generation_provider_unknown",
            operation="generation.build",
            provider=provider,
            fallback="openai",
        )
    return OpenAIGenerator(api_key=settings.OPENAI_API_KEY)


def generate_text(
    generator: TextGenerator, request: GenerationRequest, *, operation: str
) -> str:
    """Run ``request`` through ``generator``; every failure becomes ``CapabilityError``."""
    provider = getattr(generator, "provider", generator.__class__.__name__)
    started = time.perf_counter()
    try:
        text = generator.generate(request)
    except CapabilityError as exc:
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.warning(
            event="generation_call",
            operation=f"generation.{operation}",
            provider=provider,
            model=request.model,
            status="error",
            error=str(exc),
            elapsed_ms=elapsed_ms,
        )
        raise
    except Exception as exc:  # provider SDKs raise their own hierarchies
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.warning(
            event="generation_call",
            operation=f"generation.{operation}",
            provider=provider,
            model=request.model,
            status="error",
            error_type=exc.__class__.__name__,
            error=str(exc),
            elapsed_ms=elapsed_ms,
        )
        raise CapabilityError(
            str(exc) or exc.__class__.__name__, provider=provider
        ) from exc

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    if not isinstance(text, str):
        raise CapabilityError(
            f"{provider} returned a non-text response", provider=provider
        )
    logger.info(
        event="generation_call",
        operation=f"generation.{operation}",
        provider=provider,
        model=request.model,
        status="success",
        chars=len(text),
        elapsed_ms=elapsed_ms,
    )
    return text
