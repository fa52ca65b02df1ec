from __future__ import annotations

import traceback


class ExtractionError(Exception):
    """Base class for extraction pipeline errors."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class InvalidInputError(ExtractionError):
    """Malformed URL or a scheme other than http/https."""


class FetchError(ExtractionError):
    """Network, HTTP status or content-type failure while fetching a page."""


class FetchTimeoutError(FetchError):
    """The final fetch attempt exceeded its deadline."""


class ParseError(ExtractionError):
    """The fetched bytes could not be turned into a document tree."""


class ContentExtractionError(ExtractionError):
    """Every content strategy came back empty."""


class CapabilityError(Exception):
    """The text generator failed; callers recover locally."""

    def __init__(self, message: str, *, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


def error_report(exc: BaseException) -> dict[str, str]:
    """Split an error into a one-line message and the full chained trace."""
    message = str(exc).strip() or exc.__class__.__name__
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return {"error": message.splitlines()[0], "detail": detail}


__all__ = [
    "ExtractionError",
    "InvalidInputError",
    "FetchError",
    "FetchTimeoutError",
    "ParseError",
    "ContentExtractionError",
    "CapabilityError",
    "error_report",
]
