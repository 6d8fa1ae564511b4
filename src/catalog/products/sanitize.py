"""Text sanitization for product descriptions.

WooCommerce descriptions are rich text with embedded HTML. Listings and the
exported catalog show plain text: every tag is dropped, text content and
word boundaries are kept, whitespace runs collapse to a single space.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")

# Tags that separate words when rendered; inline tags (b, em, span) do not.
_BLOCK_TAGS = [
    "address", "article", "blockquote", "dd", "div", "dl", "dt", "figcaption",
    "h1", "h2", "h3", "h4", "h5", "h6", "hr", "li", "ol", "p", "pre",
    "section", "table", "td", "th", "tr", "ul",
]

TITLE_SEPARATOR = " - "


def strip_markup(text: str | None) -> str:
    """Return the plain text of an HTML fragment."""
    if not text:
        return ""
    soup = BeautifulSoup(text, "html.parser")
    for element in soup(["script", "style"]):
        element.decompose()
    for element in soup.find_all("br"):
        element.replace_with(" ")
    for element in soup.find_all(_BLOCK_TAGS):
        element.insert_before(" ")
        element.insert_after(" ")
    return _WHITESPACE.sub(" ", soup.get_text()).strip()


def product_title(description: str | None) -> str:
    """First segment of a description of the form "Title - details"."""
    plain = strip_markup(description)
    return plain.split(TITLE_SEPARATOR, 1)[0].strip()
