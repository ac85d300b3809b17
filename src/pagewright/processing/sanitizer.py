"""Denylist sanitization of agent-generated HTML.

The sanitizer walks the parsed tree once. For each element a visitor decides
on one action: keep it, drop the whole subtree, or strip some attributes.
Any failure while parsing or serializing falls back to the original input;
sanitization never makes processing harder to complete than doing nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from bs4 import Tag

from pagewright.processing.models import Outcome, Transformed, Unchanged
from pagewright.processing.soup import parse_html, render_html

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

ALWAYS_REMOVED_TAGS = frozenset({"object", "embed"})
REMOVED_WITHOUT_SRC_TAGS = frozenset({"script", "iframe"})
EVENT_HANDLER_PREFIX = "on"


@dataclass(frozen=True)
class Keep:
    pass


@dataclass(frozen=True)
class RemoveSubtree:
    pass


@dataclass(frozen=True)
class RemoveAttributes:
    names: tuple[str, ...]


SanitizeAction = Keep | RemoveSubtree | RemoveAttributes


def classify(element: Tag) -> SanitizeAction:
    """Decide what the denylist does with one element."""
    name = (element.name or "").lower()
    if name in ALWAYS_REMOVED_TAGS:
        return RemoveSubtree()
    if name in REMOVED_WITHOUT_SRC_TAGS and not element.has_attr("src"):
        return RemoveSubtree()

    handlers = tuple(attr for attr in element.attrs if attr.lower().startswith(EVENT_HANDLER_PREFIX))
    if handlers:
        return RemoveAttributes(handlers)
    return Keep()


def walk(root: Tag, visitor: Callable[[Tag], SanitizeAction]) -> int:
    """Apply ``visitor`` to every element under ``root`` in one pass; return the number of changes."""
    changes = 0
    pending: list[Tag] = [root]
    while pending:
        node = pending.pop()
        for child in list(node.children):
            if not isinstance(child, Tag):
                continue
            match visitor(child):
                case RemoveSubtree():
                    child.decompose()
                    changes += 1
                    continue
                case RemoveAttributes(names=names):
                    for name in names:
                        del child[name]
                    changes += 1
                case Keep():
                    pass
            pending.append(child)
    return changes


def sanitize(html: str) -> Outcome:
    """Remove dangerous elements and inline event handlers."""
    try:
        soup = parse_html(html)
        changes = walk(soup, classify)
        if not changes:
            return Unchanged(html)
        return Transformed(render_html(soup))
    except Exception as e:  # noqa: BLE001
        logger.warning("HTML sanitization failed, returning original: %s", e)
        return Unchanged(html, error=str(e))
