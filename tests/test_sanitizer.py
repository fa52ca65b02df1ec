import pytest

from newsprint.services.sanitizer import sanitize_html


def test_sanitize_html_strips_behaviour_and_presentation_attributes():
    fragment = (
        '<div class="x" data-id="1" onclick="track()" style="color: red">'
        '<p id="keep">Hello <b data-x="y">world</b></p></div>'
    )

    assert sanitize_html(fragment) == '<div><p id="keep">Hello <b>world</b></p></div>'


def test_sanitize_html_removes_active_and_advertising_elements():
    fragment = (
        "<p>Story text</p>"
        "<script>alert(1)</script><style>p {}</style>"
        '<iframe src="https://ads.example"></iframe>'
        "<form><input name='q'><button>Go</button></form>"
        '<div class="ad">Buy now</div><aside class="social">Follow us</aside>'
    )

    assert sanitize_html(fragment) == "<p>Story text</p>"


def test_sanitize_html_keeps_image_only_containers():
    fragment = '<div class="hero"><img src="a.jpg" data-src="b.jpg"/></div><p> </p>'

    assert sanitize_html(fragment) == '<div><img src="a.jpg"/></div>'


def test_sanitize_html_removes_nested_empty_containers_in_one_pass():
    fragment = "<div><div><p>  </p><div>\n</div></div></div><p>Kept</p>"

    assert sanitize_html(fragment) == "<p>Kept</p>"


@pytest.mark.parametrize("fragment", ["", "   ", None])
def test_sanitize_html_empty_input(fragment):
    assert sanitize_html(fragment) == ""


@pytest.mark.parametrize(
    "fragment",
    [
        '<div class="a"><p onclick="x()">One &amp; two</p><div><p></p></div></div>',
        "<p>Fish &lt;and&gt; chips</p>\n<p>Second paragraph</p>",
        '<div><span class="share">Share</span><img src="x.png"></div><p> </p>',
        "Loose text <b>bold</b>",
    ],
)
def test_sanitize_html_is_idempotent(fragment):
    once = sanitize_html(fragment)

    assert sanitize_html(once) == once
