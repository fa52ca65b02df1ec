import logging
import time
from contextlib import closing
from http.cookiejar import DefaultCookiePolicy
from typing import Callable, Optional
from urllib.parse import urlparse

import requests

from newsprint.config import FetchConfig
from newsprint.services.exceptions import (
    FetchError,
    FetchTimeoutError,
    InvalidInputError,
)

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")
HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")

SleepFn = Callable[[float], None]
ClockFn = Callable[[], float]


def validate_url(url: Optional[str]) -> str:
    """Return the trimmed URL or raise ``InvalidInputError``."""
    candidate = (url or "").strip() if isinstance(url, str) else ""
    if not candidate:
        raise InvalidInputError("Invalid URL format: URL is empty", url=url)
    try:
        parsed = urlparse(candidate)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid URL format: {exc}", url=candidate) from exc
    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidInputError(
            "Invalid URL format: URL must use HTTP or HTTPS protocol", url=candidate
        )
    if not parsed.netloc:
        raise InvalidInputError("Invalid URL format: URL has no host", url=candidate)
    return candidate


def _build_headers(config: FetchConfig) -> dict[str, str]:
    return {
        "User-Agent": config.user_agent,
        "Accept": config.accept,
        "Accept-Language": config.accept_language,
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
    }


def _content_type(response) -> str:
    headers = getattr(response, "headers", None) or {}
    return headers.get("Content-Type") or headers.get("content-type") or ""


def _new_session() -> requests.Session:
    session = requests.Session()
    # An empty allow-list rejects every cookie, both stored and sent.
    session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
    return session


def _decode_body(body: bytes, encoding: Optional[str]) -> str:
    try:
        return body.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


def _fetch_once(session, url: str, config: FetchConfig, clock: ClockFn) -> str:
    deadline = clock() + config.timeout_seconds
    session.cookies.clear()
    response = session.get(
        url,
        headers=_build_headers(config),
        timeout=config.timeout_seconds,
        allow_redirects=True,
        stream=True,
    )
    with closing(response):
        if not 200 <= response.status_code < 300:
            raise requests.HTTPError(
                f"HTTP error! Status: {response.status_code}", response=response
            )

        content_type = _content_type(response)
        lowered = content_type.lower()
        if not any(kind in lowered for kind in HTML_CONTENT_TYPES):
            raise FetchError(
                f"Unexpected content type: {content_type}. Expected HTML.", url=url
            )

        # ``timeout`` only bounds each socket read; the deadline bounds the attempt.
        chunks: list[bytes] = []
        for chunk in response.iter_content(chunk_size=None):
            if clock() > deadline:
                raise requests.Timeout(
                    f"Read exceeded {config.timeout_seconds}s deadline"
                )
            chunks.append(chunk)

    encoding = response.encoding if "charset" in lowered else None
    return _decode_body(b"".join(chunks), encoding)


def _exhausted_error(
    url: str, attempts: int, error: Optional[Exception], timed_out: bool
) -> FetchError:
    if timed_out:
        return FetchTimeoutError(
            "Request timed out. The website took too long to respond.", url=url
        )
    message = str(error) if error else "unknown error"
    if "CORS" in message:
        return FetchError(
            "CORS error: The website doesn't allow access from our application. "
            f"(after {attempts} attempts: {message})",
            url=url,
        )
    if (
        isinstance(error, requests.exceptions.SSLError)
        or "SSL" in message
        or "certificate" in message.lower()
    ):
        return FetchError(
            "SSL error: The website has an invalid security certificate. "
            f"(after {attempts} attempts: {message})",
            url=url,
        )
    return FetchError(f"Fetch failed after {attempts} attempts: {message}", url=url)


def fetch_html(
    url: str,
    *,
    config: Optional[FetchConfig] = None,
    session: Optional[requests.Session] = None,
    sleep: SleepFn = time.sleep,
    clock: ClockFn = time.monotonic,
) -> str:
    """Fetch a page's HTML with a per-attempt deadline and exponential backoff.

    Invalid URLs and non-HTML responses fail immediately. Timeouts, transport
    errors and non-2xx statuses are retried ``config.max_retries`` times,
    sleeping ``backoff_base_seconds * 2**attempt_index`` between attempts.
    The body is streamed so a slow trickle still counts against
    ``timeout_seconds``. No cookies are kept or sent.
    """
    target = validate_url(url)
    config = config or FetchConfig.from_settings()
    owns_session = session is None
    active_session = session or _new_session()
    started = time.perf_counter()

    attempts = config.total_attempts
    last_error: Optional[Exception] = None
    timed_out = False
    try:
        for attempt_index in range(attempts):
            try:
                logger.debug("Fetching %s (attempt %s)", target, attempt_index + 1)
                html = _fetch_once(active_session, target, config, clock)
            except FetchError:
                raise
            except requests.Timeout as exc:
                last_error = exc
                timed_out = True
            except requests.RequestException as exc:
                last_error = exc
                timed_out = False
            else:
                elapsed_ms = int((time.perf_counter() - started) * 1000)
                logger.debug(
                    "fetch.success",
                    extra={
                        "url": target,
                        "attempts": attempt_index + 1,
                        "elapsed_ms": elapsed_ms,
                    },
                )
                return html

            logger.warning(
                "fetch.attempt_failed",
                extra={
                    "url": target,
                    "attempt": attempt_index + 1,
                    "timed_out": timed_out,
                    "error": str(last_error),
                },
            )
            if attempt_index + 1 >= attempts:
                break
            wait = config.backoff_base_seconds * (2**attempt_index)
            logger.debug(
                "fetch.retry_sleep",
                extra={
                    "url": target,
                    "attempt": attempt_index + 1,
                    "sleep_seconds": wait,
                },
            )
            sleep(wait)
    finally:
        if owns_session:
            active_session.close()

    error = _exhausted_error(target, attempts, last_error, timed_out)
    logger.error("Fetch exhausted for %s: %s", target, error)
    raise error from last_error
