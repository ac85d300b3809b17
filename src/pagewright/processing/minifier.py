"""Best-effort HTML compaction."""

from __future__ import annotations

import logging
import re

from bs4.element import Comment, NavigableString, PreformattedString, Tag

from pagewright.processing.models import Outcome, Transformed, Unchanged
from pagewright.processing.soup import parse_html, render_html

logger = logging.getLogger(__name__)

WHITESPACE_SENSITIVE_TAGS = frozenset({"pre", "textarea", "script", "style"})
INLINE_TAGS = frozenset(
    {
        "a", "abbr", "b", "bdi", "bdo", "button", "cite", "code", "em", "i", "img", "input",
        "kbd", "label", "mark", "q", "s", "samp", "select", "small", "span", "strong",
        "sub", "sup", "time", "u", "var",
    }
)  # fmt: skip

# HTML whitespace only; U+00A0 from &nbsp; is content.
_HTML_SPACE = " \t\n\r\f"
_WHITESPACE_RUN = re.compile(f"[{_HTML_SPACE}]+")


def _is_preserved(text: NavigableString) -> bool:
    return any(parent.name in WHITESPACE_SENSITIVE_TAGS for parent in text.parents)


def _is_inline(node: object) -> bool:
    if isinstance(node, Tag):
        return node.name in INLINE_TAGS
    if isinstance(node, NavigableString) and not isinstance(node, PreformattedString):
        return bool(node.strip(_HTML_SPACE))
    return False


def _between_inline_content(text: NavigableString) -> bool:
    # "<b>a</b> <i>b</i>" keeps its space; whitespace next to block elements goes.
    return _is_inline(text.previous_sibling) and _is_inline(text.next_sibling)


def minify(html: str) -> Outcome:
    """Strip comments and collapse whitespace. Falls back to the input on any failure."""
    try:
        soup = parse_html(html)

        for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()

        for text in list(soup.find_all(string=True)):
            if isinstance(text, PreformattedString) or _is_preserved(text):
                continue

            collapsed = _WHITESPACE_RUN.sub(" ", str(text))
            if collapsed == " " and not _between_inline_content(text):
                text.extract()
            elif collapsed != str(text):
                text.replace_with(NavigableString(collapsed))

        return Transformed(render_html(soup).strip(_HTML_SPACE))
    except Exception as e:  # noqa: BLE001
        logger.warning("HTML minification failed, returning original: %s", e)
        return Unchanged(html, error=str(e))
