"""Tests for denylist sanitization."""

import pytest
from bs4 import BeautifulSoup, Tag

from pagewright.processing import sanitizer
from pagewright.processing.models import Transformed, Unchanged
from pagewright.processing.sanitizer import Keep, RemoveAttributes, RemoveSubtree, classify, sanitize


def _first_tag(html: str) -> Tag:
    tag = BeautifulSoup(html, "html.parser").find(True)
    assert isinstance(tag, Tag)
    return tag


def assert_nothing_dangerous(html: str) -> None:
    soup = BeautifulSoup(html, "html.parser")
    assert soup.find(["object", "embed"]) is None
    assert soup.find("script", src=False) is None
    assert soup.find("iframe", src=False) is None
    for element in soup.find_all(True):
        assert not [attr for attr in element.attrs if attr.lower().startswith("on")]


class TestClassify:
    """Test cases for the per-element decision."""

    def test_plain_element_is_kept(self) -> None:
        """Ordinary markup needs no action."""
        assert classify(_first_tag('<p class="lead">hi</p>')) == Keep()

    @pytest.mark.parametrize(
        "html",
        ['<object data="movie.swf"></object>', '<embed src="movie.swf">', "<script>x()</script>", "<iframe></iframe>"],
    )
    def test_dangerous_elements_are_removed(self, html: str) -> None:
        """object/embed always go; script/iframe go without src."""
        assert classify(_first_tag(html)) == RemoveSubtree()

    def test_sourced_script_and_iframe_are_kept(self) -> None:
        """External scripts and frames are left in place."""
        assert classify(_first_tag('<script src="app.js"></script>')) == Keep()
        assert classify(_first_tag('<iframe src="https://example.com"></iframe>')) == Keep()

    def test_event_handlers_are_stripped(self) -> None:
        """Every on* attribute is listed for removal."""
        action = classify(_first_tag('<img src="a.png" onerror="bad()" onload="worse()">'))

        assert isinstance(action, RemoveAttributes)
        assert set(action.names) == {"onerror", "onload"}


class TestSanitize:
    """Test cases for the whole-document pass."""

    def test_clean_input_is_unchanged(self) -> None:
        """Nothing to remove means the input comes back untouched."""
        html = '<div class="card"><p>Hello <b>world</b></p><img src="x.png" alt=""></div>'
        outcome = sanitize(html)

        assert isinstance(outcome, Unchanged)
        assert outcome.html == html
        assert outcome.error is None

    def test_inline_script_removed_external_kept(self) -> None:
        """Only scripts without src are dropped."""
        outcome = sanitize('<p>a</p><script>alert(1)</script><script src="app.js"></script>')

        assert isinstance(outcome, Transformed)
        assert "alert(1)" not in outcome.html
        assert 'src="app.js"' in outcome.html
        assert "<p>a</p>" in outcome.html

    def test_nested_constructs_are_all_removed(self) -> None:
        """Dangerous content deep in the tree is found in one pass."""
        html = (
            "<html><body><div><section>"
            '<script>steal()</script><span onclick="go()" ONMOUSEOVER="x()">text</span>'
            '<object data="a"><param name="x"></object><embed src="b"><iframe></iframe>'
            "</section></div></body></html>"
        )
        outcome = sanitize(html)

        assert isinstance(outcome, Transformed)
        assert_nothing_dangerous(outcome.html)
        assert "<span>text</span>" in outcome.html

    def test_removed_subtree_takes_children_with_it(self) -> None:
        """Children of a removed element are not kept."""
        outcome = sanitize('<div><object data="a"><p>fallback</p></object></div>')

        assert "fallback" not in outcome.html

    def test_failure_returns_original(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A parser failure falls back to the original input."""

        def broken_parse(html: str) -> None:
            raise ValueError("boom")

        monkeypatch.setattr(sanitizer, "parse_html", broken_parse)
        html = "<script>alert(1)</script>"
        outcome = sanitize(html)

        assert isinstance(outcome, Unchanged)
        assert outcome.html == html
        assert outcome.error == "boom"
