"""Helpers to normalise extracted article text and model output."""

import re
import unicodedata

from bs4 import BeautifulSoup

_CONTROL_CHARS = {
    "\u200b",  # zero-width space
    "\u200c",  # zero-width non-joiner
    "\u200d",  # zero-width joiner
    "\ufeff",  # zero-width no-break space / BOM
}

_WHITESPACE = re.compile(r"\s+")
_CODE_FENCE = re.compile(r"```html", re.IGNORECASE)


def _strip_control_chars(text: str) -> str:
    for char in _CONTROL_CHARS:
        text = text.replace(char, "")
    return text


def collapse_whitespace(raw_text: str | None) -> str:
    """Normalise inline text (titles, bylines) to single-spaced, trimmed form."""
    if not raw_text:
        return ""
    text = unicodedata.normalize("NFKC", raw_text)
    text = text.replace("\u00a0", " ")
    text = _strip_control_chars(text)
    return _WHITESPACE.sub(" ", text).strip()


def html_to_text(fragment: str | None) -> str:
    """Plain, whitespace-collapsed text of an HTML fragment."""
    if not fragment:
        return ""
    soup = BeautifulSoup(fragment, "html.parser")
    return collapse_whitespace(soup.get_text(" "))


def strip_code_fences(raw_text: str | None) -> str:
    """Remove markdown fences and stray backticks a model wrapped around HTML."""
    if not raw_text:
        return ""
    text = _CODE_FENCE.sub("", raw_text)
    text = text.replace("```", "").replace("`", "")
    return text.strip()
