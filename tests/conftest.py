import pytest

from newsprint.config import AppSettings
from newsprint.services.generation import TextGenerator


class FakeGenerator(TextGenerator):
    """Records every request and answers from a script or a handler."""

    provider = "fake"

    def __init__(self, responses=None, handler=None, default=""):
        self._responses = list(responses or [])
        self._handler = handler
        self._default = default
        self.requests = []

    def generate(self, request):
        self.requests.append(request)
        if self._handler is not None:
            response = self._handler(request)
        elif self._responses:
            response = self._responses.pop(0)
        else:
            response = self._default
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture()
def make_generator():
    """Build a ``FakeGenerator``; pass ``responses`` or a ``handler``."""

    def factory(responses=None, handler=None, default=""):
        return FakeGenerator(responses=responses, handler=handler, default=default)

    return factory


@pytest.fixture()
def long_paragraph():
    return (
        "The city council approved the new transit plan on Tuesday evening after "
        "a lengthy debate that stretched well past midnight."
    )


@pytest.fixture()
def article_html(long_paragraph):
    return f"""
        <html>
            <head>
                <title>  Council approves transit plan </title>
                <meta property="og:image" content="/img/hero.jpg">
                <meta name="author" content="Jane Doe">
                <meta property="article:published_time" content="2024-03-05T14:30:00">
            </head>
            <body>
                <header>Site header</header>
                <nav>Home | World | Sports</nav>
                <article>
                    <h1>Council approves transit plan</h1>
                    <div class="share">Share on social</div>
                    <p class="lead" data-track="1">{long_paragraph}</p>
                    <p>Officials said construction would begin next spring.</p>
                    <script>trackPageView();</script>
                </article>
                <footer>Copyright</footer>
            </body>
        </html>
    """


@pytest.fixture()
def test_settings():
    return AppSettings(
        ENV="test",
        GENERATION_PROVIDER="openai",
        OPENAI_API_KEY=None,
        EXTRACT_RATE_LIMIT=3,
        EXTRACT_RATE_WINDOW_SECONDS=60,
    )


@pytest.fixture()
def app(test_settings, make_generator, article_html):
    from newsprint import create_app

    pages = {"https://example.com/article": article_html}

    def fetcher(url):
        return pages[url]

    generator = make_generator(default="Türkçe")
    app = create_app(test_settings, generator=generator, fetcher=fetcher)
    app.config.update(TESTING=True)
    app.config["PAGES"] = pages
    app.config["GENERATOR"] = generator
    yield app


@pytest.fixture()
def client(app):
    return app.test_client()
