import logging
import math

from flask import Blueprint, current_app, jsonify, request

from newsprint.services.exceptions import (
    ContentExtractionError,
    ExtractionError,
    FetchError,
    FetchTimeoutError,
    InvalidInputError,
    ParseError,
    error_report,
)
from newsprint.services.parser import extract_article

bp = Blueprint("api", __name__, url_prefix="/api")
logger = logging.getLogger(__name__)

# Checked in order; subclasses before their parents.
_ERROR_STATUS: tuple[tuple[type[ExtractionError], int], ...] = (
    (InvalidInputError, 400),
    (FetchTimeoutError, 504),
    (FetchError, 502),
    (ParseError, 422),
    (ContentExtractionError, 422),
)


def _status_for(exc: ExtractionError) -> int:
    for error_cls, status in _ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status
    return 500


def _client_rate_limit_key(action: str) -> str:
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
    else:
        client_ip = request.remote_addr or "unknown"
    return f"{action}:{client_ip}"


@bp.route("/extract", methods=["POST"])
def extract():
    """Extract an article from the JSON body's ``url``."""
    services = current_app.extensions["newsprint"]

    rate_key = _client_rate_limit_key("extract")
    allowed, retry_after = services.rate_limiter.allow(rate_key)
    if not allowed:
        logger.warning("Rate limit triggered for extract (%s)", rate_key)
        response = jsonify(
            {"error": "Too many extraction requests. Please try again later."}
        )
        response.headers["Retry-After"] = str(max(1, math.ceil(retry_after)))
        return response, 429

    payload = request.get_json(silent=True) or {}
    url = payload.get("url") if isinstance(payload, dict) else None
    translate = True
    if isinstance(payload, dict) and payload.get("translate") is False:
        translate = False

    try:
        record = extract_article(
            url,
            fetcher=services.fetcher,
            generator=services.generator,
            settings=services.settings,
            fetch_config=services.fetch_config,
            generation=services.generation,
            locale=services.locale,
            translate=translate,
        )
    except ExtractionError as exc:
        status = _status_for(exc)
        logger.warning("Extraction failed for %s with %s: %s", url, status, exc)
        return jsonify(error_report(exc)), status

    return jsonify(record.to_dict()), 200
