from __future__ import annotations

from bs4 import BeautifulSoup

REMOVED_ELEMENTS = (
    "script, style, iframe, form, button, input, "
    ".ad, .advertisement, .share, .social"
)
EMPTY_CANDIDATES = ("p", "div")
PRESENTATIONAL_ATTRIBUTES = {"style", "class"}


def _is_stripped_attribute(name: str) -> bool:
    lowered = name.lower()
    return (
        lowered.startswith("data-")
        or lowered.startswith("on")
        or lowered in PRESENTATIONAL_ATTRIBUTES
    )


def sanitize_html(fragment: str | None) -> str:
    """Return ``fragment`` without scripts, ad/share blocks, empty containers
    and ``data-*``/``on*``/``style``/``class`` attributes.

    Applying it twice gives the same result as applying it once: empty
    containers are checked innermost first, so a ``<div>`` emptied by the
    removal of its children goes in the same pass.
    """
    if not fragment or not fragment.strip():
        return ""

    soup = BeautifulSoup(fragment, "html.parser")

    for element in soup.select(REMOVED_ELEMENTS):
        element.extract()

    for element in reversed(soup.find_all(EMPTY_CANDIDATES)):
        if element.get_text().strip():
            continue
        if element.find("img") is not None:
            continue
        element.extract()

    for element in soup.find_all(True):
        stripped = [name for name in element.attrs if _is_stripped_attribute(name)]
        for name in stripped:
            del element.attrs[name]

    return str(soup).strip()
