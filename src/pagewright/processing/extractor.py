"""Pull a single HTML document out of free-form agent text."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# The language tag is matched case-sensitively on purpose: ```HTML falls through to the generic pattern.
HTML_FENCE_PATTERN = re.compile(r"```html[ \t]*\n?([\s\S]*?)```")
ANY_FENCE_PATTERN = re.compile(r"```[\w+.-]*[ \t]*\n?([\s\S]*?)```")

DOCUMENT_SHELL = "<html>\n<head>\n<title>Generated Page</title>\n</head>\n<body>\n{fragment}\n</body>\n</html>"

_HTML_TAG = re.compile(r"<html|<HTML")
_BODY_TAG = re.compile(r"<body|<BODY")


def _strip_code_fences(text: str) -> tuple[str, bool]:
    """Return the first fenced block's content (```html preferred) and whether a fence was found."""
    match = HTML_FENCE_PATTERN.search(text) or ANY_FENCE_PATTERN.search(text)
    if match:
        return match.group(1), True
    return text, False


def extract(raw_text: str | None) -> str:
    """Extract HTML from an agent response. Never raises."""
    if not raw_text:
        return ""

    html, fenced = _strip_code_fences(raw_text)
    html = html.strip()

    if not html:
        logger.warning("Agent response contained no HTML content")
        return ""

    if not fenced and not _HTML_TAG.search(html) and not _BODY_TAG.search(html):
        html = DOCUMENT_SHELL.format(fragment=html)

    return html
