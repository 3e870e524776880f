# kedit/core/Document.py
"""Document Module for the kedit Editor
======================================
This module provides the `Document` class: the ordered, index-addressed
collection of `Row` objects that makes up one open file.

Key Features:
-------------
- Structural edits (insert/delete row, split on newline, merge on backspace)
  that return the resulting cursor position instead of touching any view.
- Every edit that changes a row's ``raw`` bytes re-derives ``render`` and
  ``highlight`` before returning, and cascades block-comment state to the
  following rows.
- A monotonic ``dirty`` counter bumped by every content mutation.
- Byte-exact load and save: one row per ``\\n``-terminated line with one
  trailing ``\\r`` stripped on load, rows joined with ``\\n`` on save.

Intended Usage:
---------------
The `Kedit` session owns a single `Document` for its lifetime and translates
key presses into the edit methods below; the renderer only reads ``rows``.
"""

import logging
import os
from typing import Optional

from kedit.core.Highlighter import SyntaxRule, highlight_row, propagate, select_syntax
from kedit.core.Row import Row

DEFAULT_TAB_STOP = 8


## ==================== Document Class ====================
class Document:
    """Ordered list of rows plus the state shared by all of them.

    Attributes:
        rows (list[Row]): The lines of the file; the list index is the row number.
        tab_stop (int): Width of a tab stop used for rendering.
        syntax (Optional[SyntaxRule]): Active highlighting rule, None for plain text.
        dirty (int): Number of content mutations since the last load or save.
    """

    def __init__(self, tab_stop: int = DEFAULT_TAB_STOP, syntax: Optional[SyntaxRule] = None) -> None:
        if tab_stop < 1:
            raise ValueError(f"tab_stop must be positive, got {tab_stop}")
        self.rows: list[Row] = []
        self.tab_stop: int = tab_stop
        self.syntax: Optional[SyntaxRule] = syntax
        self.dirty: int = 0

    def __len__(self) -> int:
        return len(self.rows)

    @classmethod
    def from_lines(cls, lines: list[bytes], **kwargs) -> "Document":
        """Builds a clean document holding *lines* (used by tests and tools)."""
        doc = cls(**kwargs)
        for line in lines:
            doc.insert_row(len(doc.rows), line)
        doc.dirty = 0
        return doc

    # --- Derivation ---
    def _update_row(self, at: int) -> None:
        """Re-renders row *at*, re-highlights it and cascades comment state."""
        self.rows[at].render_row(self.tab_stop)
        propagate(self.rows, at, self.syntax)

    def _reseed(self, at: int) -> None:
        """Re-highlights from *at* if its incoming comment state is stale."""
        if at >= len(self.rows):
            return
        expected = at > 0 and self.rows[at - 1].open_comment_out
        if self.rows[at].open_comment_in != expected:
            propagate(self.rows, at, self.syntax)

    def select_syntax(self, filename: Optional[str]) -> Optional[SyntaxRule]:
        """Selects the rule for *filename* and re-highlights every row."""
        self.syntax = select_syntax(filename)
        # full pass in row order, each row seeded from the one above
        for at, row in enumerate(self.rows):
            row.open_comment_in = at > 0 and self.rows[at - 1].open_comment_out
            highlight_row(row, self.syntax)
        return self.syntax

    # --- Row operations ---
    def insert_row(self, at: int, data: bytes = b"") -> None:
        """Inserts a new row holding *data* at index *at* (clamped)."""
        at = max(0, min(at, len(self.rows)))
        self.rows.insert(at, Row(data))
        self._update_row(at)
        self.dirty += 1

    def delete_row(self, at: int) -> None:
        """Removes row *at*; out-of-range indices are ignored."""
        if at < 0 or at >= len(self.rows):
            logging.debug(f"delete_row: index {at} out of range ({len(self.rows)} rows)")
            return
        del self.rows[at]
        self._reseed(at)
        self.dirty += 1

    # --- Editing operations ---
    def insert_char(self, cx: int, cy: int, ch: int) -> tuple[int, int]:
        """Inserts byte *ch* before column *cx* of row *cy*.

        Typing on the line just past the last row first creates that row.

        Returns:
            The cursor position after the insertion.
        """
        cy = max(0, min(cy, len(self.rows)))
        if cy == len(self.rows):
            self.insert_row(cy, b"")
        row = self.rows[cy]
        cx = max(0, min(cx, len(row.raw)))
        row.raw.insert(cx, ch)
        self._update_row(cy)
        self.dirty += 1
        return cx + 1, cy

    def insert_newline(self, cx: int, cy: int) -> tuple[int, int]:
        """Splits row *cy* at *cx*, or opens an empty row above it at column 0.

        Returns:
            The cursor position: column 0 of the row below.
        """
        cy = max(0, min(cy, len(self.rows)))
        if cx > 0 and cy < len(self.rows):
            row = self.rows[cy]
            cx = min(cx, len(row.raw))
            self.insert_row(cy + 1, bytes(row.raw[cx:]))
            del row.raw[cx:]
            self._update_row(cy)
        else:
            self.insert_row(cy, b"")
        return 0, cy + 1

    def delete_char(self, cx: int, cy: int) -> tuple[int, int]:
        """Backspace: removes the byte before *cx*, or joins row *cy* onto the
        previous row when *cx* is 0.

        Returns:
            The cursor position after the deletion.
        """
        if cy < 0 or cy >= len(self.rows):
            return cx, cy

        row = self.rows[cy]
        cx = max(0, min(cx, len(row.raw)))
        if cx == 0 and cy == 0:
            return cx, cy
        if cx > 0:
            del row.raw[cx - 1]
            self._update_row(cy)
            self.dirty += 1
            return cx - 1, cy

        prev = self.rows[cy - 1]
        new_cx = len(prev.raw)
        prev.raw.extend(row.raw)
        self._update_row(cy - 1)
        self.dirty += 1
        self.delete_row(cy)
        return new_cx, cy - 1

    # --- Serialization ---
    def rows_to_text(self) -> bytes:
        """Returns every row followed by a newline, in row order."""
        return b"".join(bytes(row.raw) + b"\n" for row in self.rows)

    def load(self, path: str) -> int:
        """Replaces the content with the lines of the file at *path*.

        Raises:
            OSError: The file cannot be opened or read.

        Returns:
            Number of rows loaded.
        """
        logging.debug(f"Document.load: reading '{path}'")
        self.rows = []
        with open(path, "rb") as f:
            for line in f:
                if line.endswith(b"\n"):
                    line = line[:-1]
                    if line.endswith(b"\r"):
                        line = line[:-1]
                self.insert_row(len(self.rows), line)
        self.dirty = 0
        logging.info(f"Loaded {len(self.rows)} rows from '{path}'")
        return len(self.rows)

    def save(self, path: str) -> int:
        """Writes `rows_to_text` to *path*, retrying short writes.

        Raises:
            OSError: Opening or writing the file failed; ``dirty`` is left untouched.

        Returns:
            Number of bytes written.
        """
        data = self.rows_to_text()
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
        try:
            view = memoryview(data)
            while view:
                written = os.write(fd, view)
                view = view[written:]
        finally:
            os.close(fd)
        self.dirty = 0
        logging.info(f"Saved {len(data)} bytes to '{path}'")
        return len(data)
