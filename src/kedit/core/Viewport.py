# kedit/core/Viewport.py
"""Cursor and scroll state of the editing window.

`EditorView` holds the cursor in raw coordinates (``cx``, ``cy``), the derived
visual column ``rx`` and the scroll offsets. `EditorView.scroll` is the only
place that recomputes ``rx`` and clamps the offsets; it runs before every
frame is composed.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kedit.core.Document import Document

STATUS_LINES = 2


@dataclass
class EditorView:
    """Cursor position, scroll offsets and text-area size.

    Attributes:
        cx: Byte index into the current row's ``raw``.
        cy: Row index; may equal the row count (the line past the end).
        rx: Visual column of the cursor, derived from ``cx``.
        rowoff: First document row shown on screen.
        coloff: First visual column shown on screen.
        screenrows: Text rows available (terminal rows minus the two bars).
        screencols: Terminal columns.
    """

    cx: int = 0
    cy: int = 0
    rx: int = 0
    rowoff: int = 0
    coloff: int = 0
    screenrows: int = 22
    screencols: int = 80

    @classmethod
    def for_terminal(cls, rows: int, cols: int) -> "EditorView":
        """Builds a view for a terminal of *rows* x *cols* cells."""
        view = cls()
        view.resize(rows, cols)
        return view

    def resize(self, rows: int, cols: int) -> None:
        """Adopts a new terminal size, reserving the status and message bars."""
        self.screenrows = max(1, rows - STATUS_LINES)
        self.screencols = max(1, cols)
        logging.debug(f"EditorView.resize: {self.screenrows} text rows x {self.screencols} cols")

    def clamp_cursor(self, document: "Document") -> None:
        """Pulls ``cy`` and ``cx`` back inside the document."""
        self.cy = max(0, min(self.cy, len(document.rows)))
        rowlen = len(document.rows[self.cy].raw) if self.cy < len(document.rows) else 0
        self.cx = max(0, min(self.cx, rowlen))

    def scroll(self, document: "Document") -> None:
        """Recomputes ``rx`` and moves the offsets so the cursor is visible.

        Running it twice without moving the cursor changes nothing.
        """
        self.rx = 0
        if self.cy < len(document.rows):
            self.rx = document.rows[self.cy].cx_to_rx(self.cx, document.tab_stop)
        else:
            self.rx = self.cx

        if self.cy < self.rowoff:
            self.rowoff = self.cy
        if self.cy >= self.rowoff + self.screenrows:
            self.rowoff = self.cy - self.screenrows + 1
        if self.rx < self.coloff:
            self.coloff = self.rx
        if self.rx >= self.coloff + self.screencols:
            self.coloff = self.rx - self.screencols + 1

    def snapshot(self) -> tuple[int, int, int, int]:
        """Returns ``(cx, cy, rowoff, coloff)`` for a later `restore`."""
        return self.cx, self.cy, self.rowoff, self.coloff

    def restore(self, saved: tuple[int, int, int, int]) -> None:
        self.cx, self.cy, self.rowoff, self.coloff = saved
