# src/kedit/ui/TerminalAppMode.py
from __future__ import annotations

import curses
import errno
import fcntl
import logging
import os
import select
import signal
import struct
import sys
import termios
from typing import Any, Optional

DEFAULT_SIZE = (24, 80)
POLL_INTERVAL = 0.1


class TerminalAppMode:
    """
    Put the terminal into the state the editor draws in:

    - Raw input: no echo, no line buffering, no signal keys, no CR/NL
      translation, 8-bit bytes delivered one at a time.
    - No output post-processing, so frames are written byte for byte.
    - Alternate screen buffer (smcup/rmcup) via terminfo, so the shell
      screen comes back untouched on exit.
    - SIGWINCH recorded as a pending resize that interrupts `read_byte`.

    Always pair `enter()` with `exit()` (try/finally).
    """

    def __init__(self, fd_in: Optional[int] = None, fd_out: Optional[int] = None) -> None:
        self.fd_in = sys.stdin.fileno() if fd_in is None else fd_in
        self.fd_out = sys.stdout.fileno() if fd_out is None else fd_out
        self._entered: bool = False
        self._orig_attrs: Optional[list[Any]] = None
        self._orig_winch: Any = None
        self._terminfo_ready: bool = False
        self._resize_pending: bool = False

    def enter(self) -> None:
        if not os.isatty(self.fd_in):
            raise OSError(errno.ENOTTY, "stdin is not a tty")

        self._orig_attrs = termios.tcgetattr(self.fd_in)
        raw = termios.tcgetattr(self.fd_in)
        raw[0] &= ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON)
        raw[1] &= ~termios.OPOST
        raw[2] |= termios.CS8
        raw[3] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
        raw[6][termios.VMIN] = 0
        raw[6][termios.VTIME] = 1
        termios.tcsetattr(self.fd_in, termios.TCSAFLUSH, raw)

        self._setup_terminfo()
        # Switch to alternate screen (smcup) before the first frame.
        self._tputs("smcup")

        if hasattr(signal, "SIGWINCH"):
            self._orig_winch = signal.signal(signal.SIGWINCH, self._on_winch)

        self._entered = True
        logging.debug("TerminalAppMode: entered (raw mode + alternate screen).")

    def exit(self) -> None:
        if not self._entered:
            return

        try:
            self.write(b"\x1b[2J\x1b[H")
        except OSError as e:
            logging.debug("TerminalAppMode: clear on exit failed: %r", e)
        self._tputs("rmcup")

        if self._orig_attrs is not None:
            termios.tcsetattr(self.fd_in, termios.TCSAFLUSH, self._orig_attrs)
        if self._orig_winch is not None:
            signal.signal(signal.SIGWINCH, self._orig_winch)
            self._orig_winch = None

        self._entered = False
        logging.debug("TerminalAppMode: exited (restored terminal modes).")

    # ── I/O ───────────────────────────────────────────────────────────────────

    def read_byte(self, timeout: Optional[float]) -> Optional[int]:
        """Reads one byte from the terminal.

        Args:
            timeout: Seconds to wait, or None to wait until a byte arrives.

        Returns:
            The byte value, or None on timeout or when a resize is pending.
        """
        remaining = timeout
        while True:
            if timeout is None and self._resize_pending:
                return None
            wait = POLL_INTERVAL if remaining is None else min(POLL_INTERVAL, remaining)
            ready, _, _ = select.select([self.fd_in], [], [], wait)
            if ready:
                data = os.read(self.fd_in, 1)
                if data:
                    return data[0]
            if remaining is not None:
                remaining -= wait
                if remaining <= 0:
                    return None

    def write(self, data: bytes) -> None:
        """Writes *data* completely, retrying short writes."""
        view = memoryview(data)
        while view:
            written = os.write(self.fd_out, view)
            view = view[written:]

    # ── window size ───────────────────────────────────────────────────────────

    def get_window_size(self) -> tuple[int, int]:
        """Returns ``(rows, cols)``: TIOCGWINSZ, then terminfo, then 24x80."""
        try:
            packed = fcntl.ioctl(self.fd_out, termios.TIOCGWINSZ, struct.pack("HHHH", 0, 0, 0, 0))
            rows, cols, _, _ = struct.unpack("HHHH", packed)
            if rows and cols:
                return rows, cols
        except OSError as e:
            logging.debug("TIOCGWINSZ failed: %r", e)

        self._setup_terminfo()
        if self._terminfo_ready:
            try:
                rows, cols = curses.tigetnum("lines"), curses.tigetnum("cols")
                if rows > 0 and cols > 0:
                    return rows, cols
            except curses.error as e:
                logging.debug("terminfo size lookup failed: %r", e)

        logging.warning("Could not determine window size, assuming %dx%d", *DEFAULT_SIZE)
        return DEFAULT_SIZE

    def take_resize(self) -> bool:
        """Returns True once after each SIGWINCH."""
        pending, self._resize_pending = self._resize_pending, False
        return pending

    # ── helpers ───────────────────────────────────────────────────────────────

    def _on_winch(self, signum: int, frame: Any) -> None:
        self._resize_pending = True

    def _setup_terminfo(self) -> None:
        if self._terminfo_ready:
            return
        try:
            curses.setupterm(fd=self.fd_out)
            self._terminfo_ready = True
        except curses.error as e:
            logging.debug("setupterm() failed: %r", e)

    def _tputs(self, capname: str) -> None:
        if not self._terminfo_ready:
            return
        try:
            s = curses.tigetstr(capname)
            if s:
                self.write(s)
        except (curses.error, OSError) as e:
            # Non-fatal where capability is missing (linux console, etc.).
            logging.debug("tputs(%s) skipped: %r", capname, e)
