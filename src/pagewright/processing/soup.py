"""Parsing and serialization helpers shared by the HTML transforms."""

from __future__ import annotations

from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

# Minimal entity escaping and <br> rather than <br/>, so unchanged markup round-trips close to verbatim.
HTML_SERIALIZER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)


def parse_html(html: str) -> BeautifulSoup:
    """Parse without implied <html>/<body> wrappers."""
    return BeautifulSoup(html, "html.parser")


def render_html(soup: BeautifulSoup) -> str:
    return soup.decode(formatter=HTML_SERIALIZER)
