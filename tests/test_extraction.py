import dataclasses

import pytest

from newsprint.config import FetchConfig, GenerationConfig, LocaleConfig
from newsprint.models.article import ArticleRecord
from newsprint.services import parser
from newsprint.services.content import EXTRACTION_SYSTEM_PROMPT
from newsprint.services.exceptions import (
    ContentExtractionError,
    FetchError,
    FetchTimeoutError,
    InvalidInputError,
    ParseError,
)

URL = "https://example.com/article"


def _extract(fetcher, generator, **kwargs):
    return parser.extract_article(
        URL,
        fetcher=fetcher,
        generator=generator,
        fetch_config=FetchConfig(),
        generation=GenerationConfig(),
        locale=LocaleConfig(),
        **kwargs,
    )


def _pages(html):
    calls = []

    def fetcher(url):
        calls.append(url)
        return html

    fetcher.calls = calls
    return fetcher


def test_extract_article_without_translation(make_generator):
    html = (
        "<html><head><title>Example</title>"
        '<meta property="og:image" content="/hero.jpg">'
        '<meta name="author" content="Jane Doe"></head>'
        "<body><article><p>First paragraph over twenty chars long.</p></article>"
        "</body></html>"
    )
    generator = make_generator(default="")

    record = _extract(_pages(html), generator, translate=False)

    assert record.url == URL
    assert record.title == "Example"
    assert record.author == "Jane Doe"
    assert record.image_url == "https://example.com/hero.jpg"
    assert "<p>First paragraph over twenty chars long.</p>" in record.content
    assert record.language == "Bilinmiyor"
    assert record.is_translated is False
    assert record.translated_title is None
    assert all(request.system == EXTRACTION_SYSTEM_PROMPT for request in generator.requests)


def test_extract_article_translates_foreign_articles(article_html, make_generator):
    def handler(request):
        if "language detection" in request.system:
            return "İngilizce"
        if "news translator" in request.system:
            return "<p>Belediye meclisi ulaşım planını onayladı.</p>"
        if "professional translator" in request.system:
            return "Meclis ulaşım planını onayladı"
        raise AssertionError(f"unexpected request: {request.system[:40]}")

    generator = make_generator(handler=handler)

    record = _extract(_pages(article_html), generator)

    assert record.title == "Council approves transit plan"
    assert record.publish_date == "05.03.2024"
    assert record.publish_time == "14:30"
    assert record.image_url == "https://example.com/img/hero.jpg"
    assert record.language == "İngilizce"
    assert record.is_translated is True
    assert record.translated_title == "Meclis ulaşım planını onayladı"
    assert record.translated_content.startswith("<p>Belediye")
    assert len(generator.requests) == 3

    payload = record.to_dict()
    assert payload["imageUrl"] == "https://example.com/img/hero.jpg"
    assert payload["isTranslated"] is True
    assert payload["translatedTitle"] == "Meclis ulaşım planını onayladı"


def test_native_language_record_omits_translated_keys(article_html, make_generator):
    generator = make_generator(default="Türkçe")

    record = _extract(_pages(article_html), generator)

    payload = record.to_dict()
    assert payload["language"] == "Türkçe"
    assert payload["isTranslated"] is False
    assert "translatedTitle" not in payload
    assert "translatedContent" not in payload


def test_extract_article_rejects_invalid_url_before_fetching(make_generator):
    fetcher = _pages("<html></html>")

    with pytest.raises(InvalidInputError):
        parser.extract_article(
            "ftp://example.com/file", fetcher=fetcher, generator=make_generator()
        )

    assert fetcher.calls == []


def test_empty_body_is_a_fetch_error(make_generator):
    with pytest.raises(FetchError) as excinfo:
        _extract(_pages("   "), make_generator())

    assert str(excinfo.value) == "Failed to fetch webpage content"


def test_fetch_errors_propagate(make_generator):
    def fetcher(url):
        raise FetchTimeoutError("Request timed out.", url=url)

    with pytest.raises(FetchTimeoutError):
        _extract(fetcher, make_generator())


def test_page_without_content_is_a_content_error(make_generator):
    html = "<html><body><script>var x = 1;</script></body></html>"

    with pytest.raises(ContentExtractionError) as excinfo:
        _extract(_pages(html), make_generator(default=""))

    assert excinfo.value.url == URL
    assert "Could not extract content" in str(excinfo.value)


def test_parse_document_falls_back_to_html_parser(monkeypatch):
    real = parser.BeautifulSoup
    attempts = []

    def picky(markup, features):
        attempts.append(features)
        if features == "lxml":
            raise parser.FeatureNotFound("lxml missing")
        return real(markup, features)

    monkeypatch.setattr(parser, "BeautifulSoup", picky)

    soup = parser.parse_document("<p>Hi</p>")

    assert attempts == ["lxml", "html.parser"]
    assert soup.p.get_text() == "Hi"


def test_parse_document_raises_parse_error_when_every_backend_fails(monkeypatch):
    def broken(markup, features):
        raise ValueError("bad markup")

    monkeypatch.setattr(parser, "BeautifulSoup", broken)

    with pytest.raises(ParseError) as excinfo:
        parser.parse_document("<p>", url=URL)

    assert str(excinfo.value).startswith("HTML parsing error")
    assert excinfo.value.url == URL


def test_article_record_is_immutable():
    record = ArticleRecord(url=URL, content="<p>x</p>")

    with pytest.raises(dataclasses.FrozenInstanceError):
        record.title = "changed"
