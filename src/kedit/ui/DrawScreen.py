# kedit/ui/DrawScreen.py
"""DrawScreen.py
========================
DrawScreen composes one complete terminal frame for the kedit editor as a
single byte string of ANSI escape sequences.

It is responsible for:
- drawing the visible slice of every document row with its highlight colours,
- emitting a colour escape only where the highlight class changes,
- substituting non-printable bytes with a reverse-video placeholder,
- drawing ``~`` filler rows and the welcome line of an empty document,
- rendering the status bar and the timed message bar,
- placing the cursor.

The frame is returned, not written: the session hands it to its sink in one
call, so the terminal never shows a half-drawn screen.
"""

import logging
import time
from typing import TYPE_CHECKING, Any

from wcwidth import wcswidth, wcwidth

from kedit import __version__
from kedit.core.Highlighter import Highlight

if TYPE_CHECKING:
    from kedit.core.Kedit import Kedit


HIDE_CURSOR = b"\x1b[?25l"
SHOW_CURSOR = b"\x1b[?25h"
CURSOR_HOME = b"\x1b[H"
ERASE_LINE = b"\x1b[K"
REVERSE = b"\x1b[7m"
RESET = b"\x1b[m"
DEFAULT_FG = b"\x1b[39m"
CRLF = b"\r\n"

FILENAME_WIDTH = 20
DEFAULT_MESSAGE_TIMEOUT = 5

DEFAULT_COLORS: dict[str, int] = {
    "comment": 36,
    "mlcomment": 36,
    "keyword1": 33,
    "keyword2": 32,
    "string": 35,
    "number": 31,
    "match": 34,
    "default": 37,
}


## ================= class DrawScreen ==============================
class DrawScreen:
    """DrawScreen Class
    =========================
    Renders the editor state of a `Kedit` session into frame bytes.

    Attributes:
        editor (Kedit): Session providing document, view and status message.
        config (dict): Editor configuration.
        colors (dict[Highlight, int]): SGR foreground code per highlight class.
        message_timeout (float): Seconds a status message stays visible.

    Methods:
        render_frame(): Composes the complete frame.
        truncate_string(s, max_width): Clips text to a display width.
        _draw_rows(buf): Text area.
        _draw_status_bar(buf): Reverse-video status line.
        _draw_message_bar(buf): Message line.
        _position_cursor(buf): Cursor placement and show-cursor.
    """

    def __init__(self, editor: "Kedit", config: dict[str, Any]) -> None:
        self.editor = editor
        self.config = config
        self.colors = self._init_colors()
        self.message_timeout = float(
            config.get("editor", {}).get("message_timeout", DEFAULT_MESSAGE_TIMEOUT)
        )

    def _init_colors(self) -> dict[Highlight, int]:
        """Resolves the SGR code of every highlight class from ``[colors]``."""
        configured = {**DEFAULT_COLORS, **(self.config.get("colors", {}) or {})}
        colors: dict[Highlight, int] = {}
        for klass in Highlight:
            if klass is Highlight.NORMAL:
                continue
            value = configured.get(klass.name.lower(), configured["default"])
            try:
                colors[klass] = int(value)
            except (TypeError, ValueError):
                logging.error(f"Invalid color {value!r} for '{klass.name.lower()}', using default")
                colors[klass] = DEFAULT_COLORS.get(klass.name.lower(), DEFAULT_COLORS["default"])
        return colors

    def truncate_string(self, s: str, max_width: int) -> str:
        """Return `s` clipped to visual width `max_width`.

        Wide characters are measured with :pyfunc:`wcwidth.wcwidth`;
        non-printable ones count as a single cell.
        """
        result: list[str] = []
        consumed = 0
        for ch in s:
            w = wcwidth(ch)
            if w < 0:
                w = 1
            if consumed + w > max_width:
                break
            result.append(ch)
            consumed += w
        return "".join(result)

    @staticmethod
    def display_width(s: str) -> int:
        width = wcswidth(s)
        return width if width >= 0 else len(s)

    # ---------------------- Frame --------------------
    def render_frame(self) -> bytes:
        """Composes the full frame for the current session state.

        The view must already be scrolled (`EditorView.scroll`).
        """
        buf = bytearray()
        buf += HIDE_CURSOR
        buf += CURSOR_HOME
        self._draw_rows(buf)
        self._draw_status_bar(buf)
        self._draw_message_bar(buf)
        self._position_cursor(buf)
        return bytes(buf)

    def _draw_rows(self, buf: bytearray) -> None:
        document = self.editor.document
        view = self.editor.view
        numrows = len(document.rows)

        for y in range(view.screenrows):
            filerow = y + view.rowoff
            if filerow >= numrows:
                if numrows == 0 and y == view.screenrows // 3:
                    self._draw_welcome(buf)
                else:
                    buf += b"~"
            else:
                row = document.rows[filerow]
                start = min(view.coloff, len(row.render))
                end = min(len(row.render), view.coloff + view.screencols)
                self._draw_line(buf, row.render[start:end], row.highlight[start:end])
            buf += ERASE_LINE
            buf += CRLF

    def _draw_welcome(self, buf: bytearray) -> None:
        cols = self.editor.view.screencols
        welcome = f"Kedit editor -- version {__version__}"[:cols]
        padding = (cols - len(welcome)) // 2
        if padding:
            buf += b"~" + b" " * (padding - 1)
        buf += welcome.encode("ascii")

    def _draw_line(self, buf: bytearray, text: bytes, highlight: list[Highlight]) -> None:
        """Appends *text* with a colour escape at every class boundary."""
        current_color = -1
        for byte, klass in zip(text, highlight):
            if byte < 32 or byte >= 127:
                sym = 64 + byte if byte < 32 else ord("?")
                buf += REVERSE
                buf.append(sym)
                buf += RESET
                if current_color != -1:
                    buf += f"\x1b[{current_color}m".encode("ascii")
                continue

            if klass == Highlight.NORMAL:
                if current_color != -1:
                    buf += DEFAULT_FG
                    current_color = -1
            else:
                color = self.colors[klass]
                if color != current_color:
                    current_color = color
                    buf += f"\x1b[{color}m".encode("ascii")
            buf.append(byte)
        buf += DEFAULT_FG

    def _draw_status_bar(self, buf: bytearray) -> None:
        """Reverse-video line: name, row count, modified flag, filetype and position."""
        document = self.editor.document
        view = self.editor.view
        cols = view.screencols

        name = self.truncate_string(self.editor.filename or "[No Name]", FILENAME_WIDTH)
        modified = " (modified)" if document.dirty else ""
        left = self.truncate_string(f"{name} - {len(document.rows)} lines{modified}", cols)

        filetype = document.syntax.filetype if document.syntax else "no ft"
        right = f"{filetype} | {view.cy + 1}/{len(document.rows)}"

        left_w = self.display_width(left)
        right_w = self.display_width(right)
        if left_w + right_w <= cols:
            line = left + " " * (cols - left_w - right_w) + right
        else:
            line = left + " " * (cols - left_w)

        buf += REVERSE
        buf += line.encode("utf-8", "replace")
        buf += RESET
        buf += CRLF

    def _draw_message_bar(self, buf: bytearray) -> None:
        buf += ERASE_LINE
        message = self.editor.status_message
        if message and time.time() - self.editor.status_time < self.message_timeout:
            buf += self.truncate_string(message, self.editor.view.screencols).encode("utf-8", "replace")

    def _position_cursor(self, buf: bytearray) -> None:
        view = self.editor.view
        buf += f"\x1b[{view.cy - view.rowoff + 1};{view.rx - view.coloff + 1}H".encode("ascii")
        buf += SHOW_CURSOR
