# kedit/core/Row.py
"""Row Module for the kedit Editor
=================================
A `Row` is one line of the document. It owns three co-indexed sequences:

- ``raw``: the bytes as stored on disk (a ``bytearray``, mutated in place),
- ``render``: ``raw`` with every tab expanded to the next tab stop,
- ``highlight``: one `Highlight` class per ``render`` byte,

plus the block-comment state entering and leaving the row. ``render`` and
``highlight`` are only ever replaced together by `Row.render_row` followed by
the highlighter; the `Document` is the only caller that mutates ``raw``.
"""

from typing import Optional

from kedit.core.Highlighter import Highlight

TAB = 0x09


class Row:
    """One line of text with its rendered form and highlight classes.

    Attributes:
        raw (bytearray): Bytes of the line without the trailing newline.
        render (bytes): Tab-expanded bytes shown on screen.
        highlight (list[Highlight]): Class of each byte in ``render``.
        open_comment_in (bool): A block comment is open when the row starts.
        open_comment_out (bool): A block comment is still open when the row ends.
    """

    __slots__ = ("raw", "render", "highlight", "open_comment_in", "open_comment_out")

    def __init__(self, raw: bytes = b"") -> None:
        self.raw: bytearray = bytearray(raw)
        self.render: bytes = b""
        self.highlight: list[Highlight] = []
        self.open_comment_in: bool = False
        self.open_comment_out: bool = False

    def __len__(self) -> int:
        return len(self.raw)

    def __repr__(self) -> str:
        return f"Row({bytes(self.raw)!r})"

    def render_row(self, tab_stop: int) -> None:
        """Rebuilds ``render`` from ``raw`` and resets ``highlight`` to normal.

        A tab always emits at least one space and stops on the next multiple
        of *tab_stop*. Calling this twice on unchanged ``raw`` gives the same
        ``render``.
        """
        out = bytearray()
        for byte in self.raw:
            if byte == TAB:
                out.append(0x20)
                while len(out) % tab_stop:
                    out.append(0x20)
            else:
                out.append(byte)
        self.render = bytes(out)
        self.highlight = [Highlight.NORMAL] * len(self.render)

    def cx_to_rx(self, cx: int, tab_stop: int) -> int:
        """Converts a raw byte index to a visual column."""
        rx = 0
        for byte in self.raw[:cx]:
            if byte == TAB:
                rx += (tab_stop - 1) - (rx % tab_stop)
            rx += 1
        return rx

    def rx_to_cx(self, rx: int, tab_stop: int) -> int:
        """Converts a visual column to the raw index of the cell containing it.

        Returns ``len(raw)`` when *rx* lies past the end of the row.
        """
        current_rx = 0
        for cx, byte in enumerate(self.raw):
            if byte == TAB:
                current_rx += (tab_stop - 1) - (current_rx % tab_stop)
            current_rx += 1
            if current_rx > rx:
                return cx
        return len(self.raw)

    def find(self, needle: bytes) -> Optional[int]:
        """Return the ``render`` offset of *needle*, or None."""
        if not needle:
            return None
        offset = self.render.find(needle)
        return offset if offset != -1 else None
