import logging
from typing import Callable, Optional

from dotenv import load_dotenv
from flask import Flask, g, request

from newsprint.config import AppSettings, get_settings
from newsprint.extensions import ExtractionServices
from newsprint.models.article import ArticleRecord
from newsprint.services.generation import TextGenerator
from newsprint.services.parser import extract_article
from newsprint.utils.correlation import (
    bind_request_context,
    clear_correlation_context,
    ensure_correlation_id,
)
from newsprint.utils.logging_config import setup_logging

__all__ = ["create_app", "extract_article", "ArticleRecord"]


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    generator: Optional[TextGenerator] = None,
    fetcher: Optional[Callable[[str], str]] = None,
) -> Flask:
    """Create and configure an instance of the Flask application."""
    load_dotenv()

    # Set up logging as early as possible
    setup_logging()
    logger = logging.getLogger(__name__)

    settings = settings or get_settings()

    logger.info("Application starting with configuration:")
    logger.info(f"  ENV: {settings.ENV}")
    logger.info(f"  GENERATION_PROVIDER: {settings.GENERATION_PROVIDER}")
    logger.info(f"  GENERATION_MODEL: {settings.GENERATION_MODEL}")
    logger.info(f"  TARGET_LANGUAGE: {settings.TARGET_LANGUAGE}")

    app = Flask(__name__)
    app.config.from_mapping(ENV_NAME=settings.ENV)
    app.json.ensure_ascii = False

    app.extensions["newsprint"] = ExtractionServices.from_settings(
        settings, generator=generator, fetcher=fetcher
    )

    @app.before_request
    def bind_correlation_id():
        ensure_correlation_id(request.headers.get("X-Correlation-ID"))
        bind_request_context(path=request.path)

    @app.after_request
    def add_correlation_header(response):
        correlation_id = getattr(g, "correlation_id", None)
        if correlation_id:
            response.headers.setdefault("X-Correlation-ID", correlation_id)
        return response

    @app.teardown_request
    def reset_logging_context(_exc=None):
        clear_correlation_context()

    from .routes import api, utility

    app.register_blueprint(api.bp)
    app.register_blueprint(utility.bp)

    return app
