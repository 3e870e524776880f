# tests/test_core/test_row.py
"""Unit tests for `kedit.core.Row`.
==================================

Covers tab expansion in `render_row`, the raw/visual column conversions and
the render-space substring search.
"""

import pytest

from kedit.core.Highlighter import Highlight
from kedit.core.Row import Row


def rendered(raw: bytes, tab_stop: int = 8) -> Row:
    row = Row(raw)
    row.render_row(tab_stop)
    return row


@pytest.mark.parametrize(
    "raw, expected",
    [
        (b"abc", b"abc"),
        (b"\tab", b" " * 8 + b"ab"),
        (b"ab\tc", b"ab" + b" " * 6 + b"c"),
        (b"12345\tx", b"12345   x"),
        (b"1234567\tx", b"1234567 x"),
        (b"12345678\tx", b"12345678" + b" " * 8 + b"x"),
        (b"", b""),
    ],
)
def test_render_expands_tabs_to_next_stop(raw: bytes, expected: bytes) -> None:
    """A tab always emits at least one space and stops on a multiple of 8."""
    assert rendered(raw).render == expected


def test_render_respects_tab_stop() -> None:
    assert rendered(b"\tx", tab_stop=4).render == b"    x"


def test_highlight_matches_render_length() -> None:
    """`render_row` resets highlight to NORMAL with one entry per render byte."""
    row = rendered(b"a\tb\tc")
    assert len(row.highlight) == len(row.render)
    assert set(row.highlight) == {Highlight.NORMAL}


def test_render_is_idempotent() -> None:
    row = rendered(b"x\ty\t\tz")
    first = row.render
    row.render_row(8)
    assert row.render == first


def test_cx_to_rx_counts_tab_cells() -> None:
    row = Row(b"\tx")
    assert row.cx_to_rx(0, 8) == 0
    assert row.cx_to_rx(1, 8) == 8
    assert row.cx_to_rx(2, 8) == 9


def test_rx_to_cx_lands_on_the_tab_cell() -> None:
    """Every visual column inside a tab maps back to the tab's raw index."""
    row = Row(b"\tx")
    for rx in range(8):
        assert row.rx_to_cx(rx, 8) == 0
    assert row.rx_to_cx(8, 8) == 1


def test_rx_to_cx_past_end_returns_length() -> None:
    row = Row(b"\tx")
    assert row.rx_to_cx(100, 8) == 2


def test_cx_rx_round_trip() -> None:
    """Converting cx -> rx -> cx gives back the same raw index."""
    row = Row(b"a\tbc\t\td")
    for cx in range(len(row.raw) + 1):
        assert row.rx_to_cx(row.cx_to_rx(cx, 8), 8) == cx


def test_find_searches_render() -> None:
    row = rendered(b"\thello")
    assert row.find(b"ll") == 10
    assert row.find(b"zz") is None


def test_find_empty_needle_is_no_match() -> None:
    assert rendered(b"abc").find(b"") is None
