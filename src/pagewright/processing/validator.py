"""Structural and security validation of HTML.

Validation never blocks the pipeline. It runs two passes over the input:

* a tag-balance scan that records parser diagnostics with a severity
  (``error`` diagnostics make the report invalid, ``warning`` ones do not);
* a walk over the BeautifulSoup tree that flags disallowed tags, inline
  scripts and inline event handlers as warnings.

The tree is parsed with ``html.parser``, which does not add implied
``<html>``/``<body>`` wrappers, so the report reflects the caller's markup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from html.parser import HTMLParser
from typing import TYPE_CHECKING

from pagewright.core.config import ProcessingConfig
from pagewright.processing.models import ValidationReport
from pagewright.processing.soup import parse_html

if TYPE_CHECKING:
    from bs4 import Tag

logger = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "param", "source", "track", "wbr"}
)
# Elements whose end tag may be omitted; leaving them open is not a diagnostic.
OPTIONAL_END_ELEMENTS = frozenset(
    {
        "html", "head", "body", "p", "li", "dt", "dd", "option", "optgroup",
        "thead", "tbody", "tfoot", "tr", "td", "th", "colgroup", "caption", "rt", "rp",
    }
)  # fmt: skip
EVENT_HANDLER_ATTRIBUTES = ("onclick", "onload", "onerror", "onmouseover")

DISALLOWED_TAG_WARNING = "Potentially unsafe or disallowed tag: {tag}"
INLINE_SCRIPT_WARNING = "Inline scripts detected — potential security risk"
EVENT_HANDLER_WARNING = "Inline event handlers detected — potential security risk"


class Severity(StrEnum):
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    message: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.message} (line {self.line}, column {self.column})"


class _TagBalanceScanner(HTMLParser):
    """Tracks open elements and records mismatches the way libxml-style parsers report them."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.stack: list[tuple[str, tuple[int, int]]] = []
        self.diagnostics: list[Diagnostic] = []

    def _report(self, severity: Severity, message: str) -> None:
        line, column = self.getpos()
        self.diagnostics.append(Diagnostic(severity, message, line, column))

    def _check_attributes(self, attrs: list[tuple[str, str | None]]) -> None:
        seen: set[str] = set()
        for name, _ in attrs:
            if name in seen:
                self._report(Severity.WARNING, f"Attribute {name} redefined")
            seen.add(name)

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._check_attributes(attrs)

        if tag in VOID_ELEMENTS:
            return
        # Same-name optional-end siblings (<li>a<li>b) close the previous one implicitly.
        if self.stack and self.stack[-1][0] == tag and tag in OPTIONAL_END_ELEMENTS:
            self.stack.pop()
        self.stack.append((tag, self.getpos()))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        # <div/> never opens an element in HTML; only the attribute check applies.
        self._check_attributes(attrs)

    def handle_endtag(self, tag: str) -> None:
        if tag in VOID_ELEMENTS:
            self._report(Severity.WARNING, f"Unexpected end tag : {tag}")
            return

        open_tags = [name for name, _ in self.stack]
        if tag not in open_tags:
            severity = Severity.WARNING if tag in OPTIONAL_END_ELEMENTS else Severity.ERROR
            self._report(severity, f"Unexpected end tag : {tag}")
            return

        while self.stack:
            name, _ = self.stack.pop()
            if name == tag:
                break
            if name not in OPTIONAL_END_ELEMENTS:
                self._report(Severity.ERROR, f"Opening and ending tag mismatch: {tag} and {name}")

    def finish(self) -> list[Diagnostic]:
        self.close()
        for name, (line, column) in self.stack:
            if name not in OPTIONAL_END_ELEMENTS:
                self.diagnostics.append(
                    Diagnostic(Severity.ERROR, f"Premature end of data in tag {name}", line, column)
                )
        self.stack.clear()
        return self.diagnostics


def scan_structure(html: str) -> list[Diagnostic]:
    """Return tag-balance diagnostics for ``html``."""
    scanner = _TagBalanceScanner()
    scanner.feed(html)
    return scanner.finish()


def _has_event_handler(tag: Tag) -> bool:
    return any(attr in tag.attrs for attr in EVENT_HANDLER_ATTRIBUTES)


def validate(html: str, config: ProcessingConfig | None = None) -> ValidationReport:
    """Validate HTML structure and content. Never raises."""
    config = config or ProcessingConfig()
    errors: list[str] = []
    warnings: list[str] = []

    if not html or not html.strip():
        return ValidationReport.parse_failure("document is empty")

    try:
        for diagnostic in scan_structure(html):
            if diagnostic.severity in (Severity.ERROR, Severity.FATAL):
                errors.append(str(diagnostic))
            else:
                warnings.append(str(diagnostic))

        soup = parse_html(html)

        for element in soup.find_all(True):
            tag_name = element.name.lower()
            if tag_name not in config.allowed_tags:
                warnings.append(DISALLOWED_TAG_WARNING.format(tag=tag_name))

        if soup.find("script", src=False) is not None:
            warnings.append(INLINE_SCRIPT_WARNING)

        if soup.find(_has_event_handler) is not None:
            warnings.append(EVENT_HANDLER_WARNING)

    except Exception as e:  # noqa: BLE001
        logger.warning("HTML validation could not parse the document: %s", e)
        return ValidationReport.parse_failure(str(e))

    return ValidationReport.build(errors, warnings)
