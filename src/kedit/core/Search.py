# kedit/core/Search.py
"""Search Module for the kedit Editor
====================================
Incremental, directional search driven by the search prompt.

The prompt calls `SearchState.on_key` after every keystroke with the query
typed so far. Each call first removes the previous match overlay, then moves
to the next row (circularly, in the current direction) whose ``render``
contains the query, puts the cursor on it and paints the match span with
`Highlight.MATCH`. The overlay is a snapshot/restore of one row's highlight
list, so the underlying syntax classes are never lost.
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Union

from kedit.core.Highlighter import Highlight
from kedit.ui.KeyBinder import Key

if TYPE_CHECKING:
    from kedit.core.Document import Document
    from kedit.core.Viewport import EditorView


FORWARD_KEYS = (Key.ARROW_RIGHT, Key.ARROW_DOWN)
BACKWARD_KEYS = (Key.ARROW_LEFT, Key.ARROW_UP)


@dataclass
class SearchState:
    """State of one search prompt invocation.

    Attributes:
        last_match: Row index of the current match, or None before the first hit.
        direction: +1 to search downwards, -1 upwards.
        saved_hl_line: Row whose highlight is currently overlaid, or None.
        saved_hl: Copy of that row's highlight before the overlay.
    """

    last_match: Optional[int] = None
    direction: int = 1
    saved_hl_line: Optional[int] = None
    saved_hl: list[Highlight] = field(default_factory=list)

    def restore_highlight(self, document: "Document") -> None:
        """Puts back the highlight saved before the last overlay, if any."""
        if self.saved_hl_line is None:
            return
        if self.saved_hl_line < len(document.rows):
            row = document.rows[self.saved_hl_line]
            # the row may have been re-highlighted meanwhile
            if len(row.highlight) == len(self.saved_hl):
                row.highlight = self.saved_hl
        self.saved_hl_line = None
        self.saved_hl = []

    def on_key(
        self,
        document: "Document",
        view: "EditorView",
        query: bytes,
        key: Union[int, Key],
    ) -> Optional[int]:
        """Advances the search after one prompt keystroke.

        Args:
            document: Document being searched.
            view: View whose cursor follows the match.
            query: Query bytes typed so far.
            key: Key that was just pressed.

        Returns:
            Row index of the new match, or None when nothing matched.
        """
        self.restore_highlight(document)

        if key in (Key.ENTER, Key.ESCAPE):
            self.last_match = None
            self.direction = 1
            return None
        if key in FORWARD_KEYS:
            self.direction = 1
        elif key in BACKWARD_KEYS:
            self.direction = -1
        else:
            self.last_match = None
            self.direction = 1

        if not query:
            return None

        numrows = len(document.rows)
        if self.last_match is None:
            self.direction = 1
        current = self.last_match if self.last_match is not None else -1

        for _ in range(numrows):
            current += self.direction
            if current == -1:
                current = numrows - 1
            elif current == numrows:
                current = 0

            row = document.rows[current]
            offset = row.find(query)
            if offset is None:
                continue

            self.last_match = current
            view.cy = current
            view.cx = row.rx_to_cx(offset, document.tab_stop)
            # scroll() clamps this so the match row lands at the top
            view.rowoff = numrows

            self.saved_hl_line = current
            self.saved_hl = list(row.highlight)
            row.highlight[offset:offset + len(query)] = [Highlight.MATCH] * len(query)
            logging.debug(f"Search: {query!r} found at row {current}, render offset {offset}")
            return current

        logging.debug(f"Search: {query!r} not found")
        return None
