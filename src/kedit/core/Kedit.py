# kedit/core/Kedit.py
"""kedit.core.Kedit
============================
Kedit: the editing session of the kedit terminal text editor.

This module defines the `Kedit` class, the central controller that ties the
document model to the terminal. It owns:

- the `Document` (rows, syntax rule, dirty counter),
- the `EditorView` (cursor and scroll offsets),
- the `DrawScreen` renderer and the `KeyBinder` input layer,
- the status message and its timestamp.

The session never touches the terminal directly. It is constructed with a
byte source ``read_byte(timeout)`` and a frame sink ``write(data)``, which is
what lets the tests drive it with scripted keys and inspect every frame.

Flow of one key press: `KeyBinder.get_key_input` decodes it, `process_keypress`
dispatches it (quit confirmation first, then the key binding or character
insertion), and `refresh_screen` scrolls the view and writes the next frame.
"""

import logging
import time
from typing import Any, Callable, Optional

from kedit.core.Document import DEFAULT_TAB_STOP, Document
from kedit.core.Search import SearchState
from kedit.core.Viewport import EditorView
from kedit.ui.DrawScreen import DrawScreen
from kedit.ui.KeyBinder import Key, KeyBinder, KeyEvent, ctrl_key

HELP_MESSAGE = "HELP: Ctrl-S = save | Ctrl-Q = quit | Ctrl-F = find"
QUIT_WARNING = "WARNING!!! File has unsaved changes. Are you sure you want to quit? (y/N)"
SEARCH_PROMPT = "Search: %s (Use ESC/Arrows/Enter)"
SAVE_PROMPT = "Save as: %s (ESC to cancel)"

PromptCallback = Callable[[bytes, KeyEvent], Any]


class Kedit:
    """The editing session.

    Attributes:
        config (dict): Merged configuration.
        read_byte (Callable): Byte source, ``read_byte(timeout) -> int | None``.
        write (Callable): Frame sink, receives each frame in one call.
        on_idle (Callable | None): Called when the key source yields no key;
            returns a new ``(rows, cols)`` after a terminal resize, else None.
        document (Document): The open document.
        view (EditorView): Cursor and scroll state.
        filename (str | None): Path the document is saved to.
        status_message (str): Text of the message bar.
        status_time (float): When ``status_message`` was set.
        confirm_quit (bool): A quit with unsaved changes awaits confirmation.
        running (bool): The main loop keeps going while True.
    """

    def __init__(
        self,
        config: dict[str, Any],
        read_byte: Callable[[Optional[float]], Optional[int]],
        write: Callable[[bytes], Any],
        screen_size: tuple[int, int] = (24, 80),
        on_idle: Optional[Callable[[], Optional[tuple[int, int]]]] = None,
    ) -> None:
        self.config = config
        self.read_byte = read_byte
        self.write = write
        self.on_idle = on_idle

        editor_cfg = config.get("editor", {})
        self.document = Document(tab_stop=int(editor_cfg.get("tab_stop", DEFAULT_TAB_STOP)))
        self.view = EditorView.for_terminal(*screen_size)
        self.filename: Optional[str] = None

        self.status_message: str = ""
        self.status_time: float = 0.0
        self.confirm_quit: bool = False
        self.running: bool = False

        self.drawer = DrawScreen(self, config)
        self.keybinder = KeyBinder(self)

    # --- Status message ---
    def _set_status_message(self, message: str) -> None:
        """Sets the message bar text and restarts its visibility timer."""
        message = str(message)
        if self.status_message != message:
            logging.debug(f"Status message set to: '{message}'")
        self.status_message = message
        self.status_time = time.time()

    # --- File operations ---
    def open_file(self, path: str) -> None:
        """Loads *path* into the document and selects its filetype.

        A path that does not exist yet opens an empty document under that
        name, created on the first save.

        Raises:
            OSError: The file exists but cannot be read.
        """
        try:
            self.document.load(path)
        except FileNotFoundError:
            logging.info(f"'{path}' does not exist yet, starting an empty document")
            self.document.rows = []
            self.document.dirty = 0
            self._set_status_message(f"New file: {path}")
        self.filename = path
        self.document.select_syntax(path)
        self.view.cx = self.view.cy = self.view.rowoff = self.view.coloff = 0

    def save_file(self) -> bool:
        """Writes the document to `filename`, prompting for a name if needed.

        Returns:
            True when the file was written.
        """
        if not self.filename:
            answer = self.prompt(SAVE_PROMPT)
            if answer is None:
                self._set_status_message("Save aborted")
                return False
            self.filename = answer.decode("utf-8", "surrogateescape")
            self.document.select_syntax(self.filename)

        try:
            written = self.document.save(self.filename)
        except OSError as e:
            logging.error(f"Saving '{self.filename}' failed: {e}", exc_info=True)
            self._set_status_message(f"Can't save! I/O error: {e.strerror or e}")
            return False

        self._set_status_message(f"{written} bytes written to disk")
        return True

    # --- Prompt and search ---
    def prompt(self, template: str, callback: Optional[PromptCallback] = None) -> Optional[bytes]:
        """Reads a line of input in the message bar.

        *template* holds one ``%s`` for the text typed so far. The callback,
        if any, is called with ``(text, key)`` after every key.

        Returns:
            The entered bytes on Enter (only once non-empty), None on Escape.
        """
        buf = bytearray()
        while True:
            self._set_status_message(template % buf.decode("utf-8", "replace"))
            self.refresh_screen()

            key = self.keybinder.get_key_input()
            if key is None:
                self._idle()
                continue

            if key in (Key.DEL, Key.BACKSPACE, ctrl_key("h")):
                if buf:
                    buf.pop()
            elif key == Key.ESCAPE:
                self._set_status_message("")
                if callback:
                    callback(bytes(buf), key)
                return None
            elif key == Key.ENTER:
                if buf:
                    self._set_status_message("")
                    if callback:
                        callback(bytes(buf), key)
                    return bytes(buf)
            elif 32 <= key < 127:
                buf.append(int(key))

            if callback:
                callback(bytes(buf), key)

    def find(self) -> None:
        """Incremental search; Escape puts the cursor back where it was."""
        saved = self.view.snapshot()
        state = SearchState()

        def on_key(query: bytes, key: KeyEvent) -> None:
            state.on_key(self.document, self.view, query, key)

        query = self.prompt(SEARCH_PROMPT, on_key)
        if query is None:
            self.view.restore(saved)
        logging.debug(f"find: finished with query {query!r}")

    # --- Editing ---
    def insert_char(self, ch: int) -> None:
        self.view.cx, self.view.cy = self.document.insert_char(self.view.cx, self.view.cy, ch)

    def handle_enter(self) -> None:
        self.view.cx, self.view.cy = self.document.insert_newline(self.view.cx, self.view.cy)

    def handle_backspace(self) -> None:
        self.view.cx, self.view.cy = self.document.delete_char(self.view.cx, self.view.cy)

    def handle_delete(self) -> None:
        """Deletes the byte under the cursor, joining the next row at end of line."""
        rows = self.document.rows
        if self.view.cy >= len(rows):
            return
        if self.view.cy == len(rows) - 1 and self.view.cx >= len(rows[self.view.cy].raw):
            return
        self.handle_right()
        self.handle_backspace()

    # --- Cursor movement ---
    def _current_row_len(self) -> Optional[int]:
        if self.view.cy < len(self.document.rows):
            return len(self.document.rows[self.view.cy].raw)
        return None

    def _snap_cx(self) -> None:
        rowlen = self._current_row_len() or 0
        if self.view.cx > rowlen:
            self.view.cx = rowlen

    def handle_left(self) -> None:
        if self.view.cx > 0:
            self.view.cx -= 1
        elif self.view.cy > 0:
            self.view.cy -= 1
            self.view.cx = len(self.document.rows[self.view.cy].raw)

    def handle_right(self) -> None:
        rowlen = self._current_row_len()
        if rowlen is None:
            return
        if self.view.cx < rowlen:
            self.view.cx += 1
        else:
            self.view.cy += 1
            self.view.cx = 0

    def handle_up(self) -> None:
        if self.view.cy > 0:
            self.view.cy -= 1
        self._snap_cx()

    def handle_down(self) -> None:
        if self.view.cy < len(self.document.rows):
            self.view.cy += 1
        self._snap_cx()

    def handle_home(self) -> None:
        self.view.cx = 0

    def handle_end(self) -> None:
        rowlen = self._current_row_len()
        if rowlen is not None:
            self.view.cx = rowlen

    def handle_page_up(self) -> None:
        for _ in range(self.view.screenrows - 1):
            self.handle_up()

    def handle_page_down(self) -> None:
        for _ in range(self.view.screenrows - 1):
            self.handle_down()

    def handle_escape(self) -> None:
        """Escape outside a prompt leaves the document alone."""

    def redraw(self) -> None:
        logging.debug("redraw requested")

    def handle_resize(self, rows: int, cols: int) -> None:
        """Adopts a new terminal size and keeps the cursor inside the document."""
        logging.info(f"Terminal resized to {rows}x{cols}")
        self.view.resize(rows, cols)
        self.view.clamp_cursor(self.document)

    # --- Quit ---
    def quit(self) -> None:
        """Stops the main loop, asking for confirmation if there are unsaved changes."""
        if self.document.dirty and not self.confirm_quit:
            self.confirm_quit = True
            self._set_status_message(QUIT_WARNING)
            return
        logging.info("Quit requested, leaving main loop")
        self.running = False

    def _handle_quit_confirmation(self, key: KeyEvent) -> None:
        if key in (ord("y"), ord("Y")):
            self.running = False
            logging.info("Quit confirmed with unsaved changes")
        elif key in (ord("n"), ord("N"), Key.ENTER):
            self.confirm_quit = False
            self._set_status_message("")
        else:
            self._set_status_message(QUIT_WARNING)

    # --- Main loop ---
    def process_keypress(self, key: KeyEvent) -> None:
        if self.confirm_quit:
            self._handle_quit_confirmation(key)
            return
        self.keybinder.handle_input(key)

    def refresh_screen(self) -> None:
        """Scrolls the view to the cursor and writes one frame."""
        self.view.scroll(self.document)
        self.write(self.drawer.render_frame())

    def _idle(self) -> None:
        if self.on_idle is None:
            return
        size = self.on_idle()
        if size is not None:
            self.handle_resize(*size)

    def run(self) -> None:
        """Refresh, read a key, dispatch; until quit."""
        logging.info("Editor main loop started.")
        self.running = True
        self._set_status_message(HELP_MESSAGE)
        while self.running:
            self.refresh_screen()
            key = self.keybinder.get_key_input()
            if key is None:
                self._idle()
                continue
            self.process_keypress(key)
        logging.info("Editor main loop finished.")
