# tests/ui/test_terminal_app_mode.py
"""Tests for `TerminalAppMode` I/O helpers.

Raw mode itself needs a real tty; these tests use pipes and patched
``fcntl``/``curses`` calls to cover reading, writing and size detection.
"""

import curses
import errno
import os
import signal
import struct

import pytest

from kedit.ui import TerminalAppMode as tam_module
from kedit.ui.TerminalAppMode import TerminalAppMode


@pytest.fixture
def pipe_terminal():
    r, w = os.pipe()
    term = TerminalAppMode(fd_in=r, fd_out=w)
    yield term, r, w
    os.close(r)
    os.close(w)


def test_read_byte_returns_available_byte(pipe_terminal) -> None:
    term, _, w = pipe_terminal
    os.write(w, b"xy")
    assert term.read_byte(0.5) == ord("x")
    assert term.read_byte(None) == ord("y")


def test_read_byte_times_out(pipe_terminal) -> None:
    term, _, _ = pipe_terminal
    assert term.read_byte(0.05) is None


def test_pending_resize_interrupts_blocking_read(pipe_terminal) -> None:
    term, _, _ = pipe_terminal
    term._on_winch(getattr(signal, "SIGWINCH", 28), None)
    assert term.read_byte(None) is None
    assert term.take_resize() is True
    assert term.take_resize() is False


def test_write_retries_short_writes(pipe_terminal, monkeypatch) -> None:
    term, _, w = pipe_terminal
    chunks = []

    def short_write(fd, data):
        assert fd == w
        chunk = bytes(data[:3])
        chunks.append(chunk)
        return len(chunk)

    monkeypatch.setattr(tam_module.os, "write", short_write)
    term.write(b"abcdefgh")
    assert chunks == [b"abc", b"def", b"gh"]


def test_enter_requires_a_tty(pipe_terminal) -> None:
    term, _, _ = pipe_terminal
    with pytest.raises(OSError) as excinfo:
        term.enter()
    assert excinfo.value.errno == errno.ENOTTY


def test_exit_without_enter_writes_nothing(pipe_terminal, monkeypatch) -> None:
    term, _, _ = pipe_terminal
    written = []
    monkeypatch.setattr(term, "write", written.append)
    term.exit()
    assert written == []


def test_window_size_from_ioctl(pipe_terminal, monkeypatch) -> None:
    term, _, _ = pipe_terminal
    monkeypatch.setattr(tam_module.fcntl, "ioctl", lambda fd, req, buf: struct.pack("HHHH", 30, 100, 0, 0))
    assert term.get_window_size() == (30, 100)


def test_window_size_from_terminfo(pipe_terminal, monkeypatch) -> None:
    term, _, _ = pipe_terminal
    monkeypatch.setattr(tam_module.fcntl, "ioctl", lambda fd, req, buf: struct.pack("HHHH", 0, 0, 0, 0))
    monkeypatch.setattr(tam_module.curses, "setupterm", lambda fd: None)
    monkeypatch.setattr(tam_module.curses, "tigetnum", {"lines": 50, "cols": 132}.get)
    assert term.get_window_size() == (50, 132)


def test_window_size_default(pipe_terminal, monkeypatch) -> None:
    term, _, _ = pipe_terminal

    def no_ioctl(fd, req, buf):
        raise OSError(errno.ENOTTY, "not a tty")

    def no_terminfo(fd):
        raise curses.error("setupterm: could not find terminal")

    monkeypatch.setattr(tam_module.fcntl, "ioctl", no_ioctl)
    monkeypatch.setattr(tam_module.curses, "setupterm", no_terminfo)
    assert term.get_window_size() == (24, 80)
