from __future__ import annotations

import pytest

from catalogsync.sync.text import normalize_text

pytestmark = pytest.mark.unit


def test_break_and_paragraph_tags_become_spaces() -> None:
    assert normalize_text("<p>A</p><br>B") == "A B"


def test_whitespace_is_collapsed_and_trimmed() -> None:
    assert normalize_text("  x   y ") == "x y"
    assert normalize_text("line one\n\n\tline two") == "line one line two"


@pytest.mark.parametrize(
    "markup",
    ["<BR/>", "< br >", "<br />", "<P>", '<p class="lead">'],
)
def test_break_tag_variants(markup: str) -> None:
    assert normalize_text(f"left{markup}right") == "left right"


def test_other_tags_are_removed_without_spacing() -> None:
    assert normalize_text("<strong>bold</strong>face and <a href='#'>link</a>") == (
        "boldface and link"
    )


def test_empty_and_missing_input() -> None:
    assert normalize_text("") == ""
    assert normalize_text(None) == ""
    assert normalize_text("<p></p>") == ""


@pytest.mark.parametrize(
    "text",
    [
        "<p>Systems <em>engineering</em></p><br>research",
        "  spaced\n\nout  ",
        "a <b <br> c> d",
        "<<p>>x",
        "plain text",
    ],
)
def test_normalize_is_idempotent(text: str) -> None:
    once = normalize_text(text)
    assert normalize_text(once) == once
