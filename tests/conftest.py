# tests/conftest.py
"""Pytest configuration with shared fixtures for the kedit editor tests.

The editor session never talks to a terminal directly, so the fixtures here
drive it with a scripted byte source and collect every frame it writes.
"""

from __future__ import annotations

import copy
from typing import Any, Callable, Iterable, Optional

import pytest

from kedit.core.Document import Document
from kedit.core.Highlighter import SyntaxRule, select_syntax
from kedit.core.Kedit import Kedit
from kedit.utils.utils import DEFAULT_CONFIG


class ScriptedKeys:
    """Byte source that replays a fixed script.

    Timed reads return None once the script is exhausted (like a terminal
    with nothing pending); a blocking read on an empty script raises
    `EOFError` so a runaway loop fails the test instead of hanging it.
    """

    def __init__(self, data: bytes = b"") -> None:
        self.data = bytearray(data)

    def feed(self, data: bytes) -> None:
        self.data += data

    def __call__(self, timeout: Optional[float]) -> Optional[int]:
        if self.data:
            return self.data.pop(0)
        if timeout is None:
            raise EOFError("key script exhausted")
        return None


class FrameSink:
    """Frame sink collecting every frame the session writes."""

    def __init__(self) -> None:
        self.frames: list[bytes] = []

    def __call__(self, data: bytes) -> None:
        self.frames.append(bytes(data))

    @property
    def last(self) -> bytes:
        return self.frames[-1]


@pytest.fixture
def config() -> dict[str, Any]:
    """A private copy of the built-in configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


@pytest.fixture
def c_syntax() -> SyntaxRule:
    rule = select_syntax("test.c")
    assert rule is not None
    return rule


@pytest.fixture
def c_document(c_syntax: SyntaxRule) -> Callable[[Iterable[bytes]], Document]:
    """Factory for clean documents highlighted as C."""

    def make(lines: Iterable[bytes]) -> Document:
        return Document.from_lines(list(lines), syntax=c_syntax)

    return make


@pytest.fixture
def make_editor(config: dict[str, Any]) -> Callable[..., Kedit]:
    """Factory for editor sessions with a scripted key source and a frame sink.

    The returned session carries its source and sink as ``editor.keys`` and
    ``editor.sink``.
    """

    def make(
        lines: Iterable[bytes] = (),
        keys: bytes = b"",
        size: tuple[int, int] = (24, 80),
        filename: Optional[str] = None,
    ) -> Kedit:
        source = ScriptedKeys(keys)
        sink = FrameSink()
        editor = Kedit(config, read_byte=source, write=sink, screen_size=size)
        for line in lines:
            editor.document.insert_row(len(editor.document.rows), line)
        editor.document.dirty = 0
        if filename is not None:
            editor.filename = filename
            editor.document.select_syntax(filename)
        editor.keys = source  # type: ignore[attr-defined]
        editor.sink = sink  # type: ignore[attr-defined]
        return editor

    return make
