from __future__ import annotations

import structlog
from contextlib import contextmanager, suppress
from typing import Any, Iterator, Optional
from uuid import uuid4

from flask import g


def _get_flask_context_id() -> Optional[str]:
    with suppress(RuntimeError):
        if g is not None and hasattr(g, "correlation_id"):
            return getattr(g, "correlation_id")
    return None


def current_correlation_id() -> Optional[str]:
    """Return the active correlation id if bound."""
    cid = _get_flask_context_id()
    if cid:
        return cid
    context = structlog.contextvars.get_contextvars()
    return context.get("correlation_id")


def ensure_correlation_id(value: Optional[str] = None) -> str:
    """Guarantee that a correlation id is bound and returned."""
    correlation_id = value or current_correlation_id() or uuid4().hex
    with suppress(RuntimeError):
        setattr(g, "correlation_id", correlation_id)
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)
    return correlation_id


def bind_request_context(url: Optional[str] = None, **extra: Any) -> None:
    """Bind request metadata into the logging context."""
    context: dict[str, Any] = {"url": url}
    context.update(extra)
    structlog.contextvars.bind_contextvars(**context)


@contextmanager
def extraction_context(url: str) -> Iterator[str]:
    """Bind a correlation id and the article URL for one extraction call."""
    correlation_id = current_correlation_id() or uuid4().hex
    with structlog.contextvars.bound_contextvars(
        correlation_id=correlation_id, url=url
    ):
        yield correlation_id


def clear_correlation_context() -> None:
    """Reset correlation and related context vars for the current scope."""
    structlog.contextvars.clear_contextvars()
    with suppress(RuntimeError):
        if g is not None and hasattr(g, "correlation_id"):
            delattr(g, "correlation_id")
