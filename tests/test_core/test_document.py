# tests/test_core/test_document.py
"""Unit tests for `kedit.core.Document`.
=======================================

Row structure edits, the cursor positions they return, the dirty counter and
byte-exact load/save.
"""

import os

import pytest

from kedit.core.Document import Document
from kedit.core.Highlighter import Highlight


def texts(doc: Document) -> list[bytes]:
    return [bytes(row.raw) for row in doc.rows]


def test_tab_stop_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Document(tab_stop=0)


def test_from_lines_is_clean() -> None:
    doc = Document.from_lines([b"a", b"b"])
    assert texts(doc) == [b"a", b"b"]
    assert doc.dirty == 0
    assert len(doc) == 2


def test_insert_char_returns_next_column() -> None:
    doc = Document.from_lines([b"ac"])
    assert doc.insert_char(1, 0, ord("b")) == (2, 0)
    assert texts(doc) == [b"abc"]
    assert doc.dirty > 0


def test_insert_char_past_last_row_creates_it() -> None:
    doc = Document()
    assert doc.insert_char(0, 0, ord("x")) == (1, 0)
    assert texts(doc) == [b"x"]


def test_insert_char_keeps_render_current() -> None:
    doc = Document.from_lines([b"ab"])
    doc.insert_char(1, 0, ord("\t"))
    row = doc.rows[0]
    assert row.render == b"a" + b" " * 7 + b"b"
    assert len(row.highlight) == len(row.render)


def test_newline_splits_row() -> None:
    doc = Document.from_lines([b"hello world"])
    assert doc.insert_newline(5, 0) == (0, 1)
    assert texts(doc) == [b"hello", b" world"]


def test_newline_at_column_zero_inserts_empty_row_above() -> None:
    doc = Document.from_lines([b"abc"])
    assert doc.insert_newline(0, 0) == (0, 1)
    assert texts(doc) == [b"", b"abc"]


def test_newline_past_last_row_appends() -> None:
    doc = Document.from_lines([b"abc"])
    assert doc.insert_newline(0, 1) == (0, 2)
    assert texts(doc) == [b"abc", b""]


def test_split_then_merge_restores_row() -> None:
    """A newline followed by a backspace at column 0 undoes the split."""
    doc = Document.from_lines([b"hello world"])
    cx, cy = doc.insert_newline(5, 0)
    assert doc.delete_char(cx, cy) == (5, 0)
    assert texts(doc) == [b"hello world"]


def test_delete_char_removes_byte_before_cursor() -> None:
    doc = Document.from_lines([b"abc"])
    assert doc.delete_char(2, 0) == (1, 0)
    assert texts(doc) == [b"ac"]


@pytest.mark.parametrize("cx, cy", [(0, 0), (0, 2), (3, 5)])
def test_delete_char_noops(cx: int, cy: int) -> None:
    """Backspace at the very start or past the last row changes nothing."""
    doc = Document.from_lines([b"ab", b"cd"])
    assert doc.delete_char(cx, cy) == (cx, cy)
    assert texts(doc) == [b"ab", b"cd"]
    assert doc.dirty == 0


@pytest.mark.parametrize("cx", [5, -2])
def test_delete_char_clamps_column_at_document_start(cx: int) -> None:
    """A column outside the first row still means the start of the document."""
    doc = Document.from_lines([b"", b"abc"])
    assert doc.delete_char(cx, 0) == (0, 0)
    assert texts(doc) == [b"", b"abc"]
    assert doc.dirty == 0


def test_delete_char_negative_column_is_clamped() -> None:
    doc = Document.from_lines([b"ab", b"cd"])
    assert doc.delete_char(-1, 1) == (2, 0)
    assert texts(doc) == [b"abcd"]


def test_delete_char_negative_row_is_noop() -> None:
    doc = Document.from_lines([b"ab", b"cd"])
    assert doc.delete_char(1, -1) == (1, -1)
    assert texts(doc) == [b"ab", b"cd"]
    assert doc.dirty == 0


def test_insert_row_clamps_index() -> None:
    doc = Document.from_lines([b"a"])
    doc.insert_row(99, b"z")
    doc.insert_row(-3, b"0")
    assert texts(doc) == [b"0", b"a", b"z"]


def test_delete_row_out_of_range_is_ignored() -> None:
    doc = Document.from_lines([b"a"])
    doc.delete_row(5)
    doc.delete_row(-1)
    assert texts(doc) == [b"a"]
    assert doc.dirty == 0


def test_delete_row_reseeds_following_row(c_document) -> None:
    """Deleting the row that opened a block comment clears it below."""
    doc = c_document([b"/* open", b"int"])
    assert doc.rows[1].open_comment_in
    doc.delete_row(0)
    assert not doc.rows[0].open_comment_in
    assert doc.rows[0].highlight == [Highlight.KEYWORD2] * 3


def test_dirty_counts_mutations() -> None:
    doc = Document.from_lines([b""])
    doc.insert_char(0, 0, ord("a"))
    first = doc.dirty
    doc.insert_char(1, 0, ord("b"))
    assert doc.dirty > first


def test_rows_to_text_terminates_every_row() -> None:
    doc = Document.from_lines([b"a", b"", b"b"])
    assert doc.rows_to_text() == b"a\n\nb\n"
    assert Document().rows_to_text() == b""


def test_load_strips_line_endings(tmp_path) -> None:
    path = tmp_path / "in.txt"
    path.write_bytes(b"one\r\ntwo\n\nlast")
    doc = Document()
    doc.insert_char(0, 0, ord("x"))
    assert doc.load(str(path)) == 4
    assert texts(doc) == [b"one", b"two", b"", b"last"]
    assert doc.dirty == 0


def test_load_keeps_lone_carriage_return(tmp_path) -> None:
    path = tmp_path / "in.txt"
    path.write_bytes(b"a\r\r\n")
    doc = Document()
    doc.load(str(path))
    assert texts(doc) == [b"a\r"]


def test_load_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        Document().load(str(tmp_path / "absent.txt"))


def test_save_writes_rows_and_clears_dirty(tmp_path) -> None:
    path = tmp_path / "out.txt"
    doc = Document.from_lines([b"a\tb", b"\xff\x00"])
    doc.insert_char(0, 0, ord(">"))
    written = doc.save(str(path))
    assert path.read_bytes() == b">a\tb\n\xff\x00\n"
    assert written == len(path.read_bytes())
    assert doc.dirty == 0
    assert os.stat(path).st_mode & 0o600 == 0o600


def test_save_truncates_existing_file(tmp_path) -> None:
    path = tmp_path / "out.txt"
    path.write_bytes(b"a much longer previous content\n")
    Document.from_lines([b"x"]).save(str(path))
    assert path.read_bytes() == b"x\n"


def test_load_save_round_trip(tmp_path) -> None:
    source = tmp_path / "src.c"
    source.write_bytes(b"int main(void) {\n\treturn 0;\n}\n")
    doc = Document()
    doc.load(str(source))
    target = tmp_path / "dst.c"
    doc.save(str(target))
    assert target.read_bytes() == source.read_bytes()


def test_failed_save_keeps_dirty(tmp_path) -> None:
    doc = Document.from_lines([b"a"])
    doc.insert_char(0, 0, ord("b"))
    dirty = doc.dirty
    with pytest.raises(OSError):
        doc.save(str(tmp_path / "missing-dir" / "out.txt"))
    assert doc.dirty == dirty


def test_select_syntax_rehighlights_all_rows() -> None:
    doc = Document.from_lines([b"/* x", b"int"])
    assert doc.rows[1].highlight == [Highlight.NORMAL] * 3
    rule = doc.select_syntax("prog.c")
    assert rule is not None and rule.filetype == "c"
    assert doc.rows[0].open_comment_out
    assert doc.rows[1].highlight == [Highlight.MLCOMMENT] * 3
    assert doc.select_syntax("notes.txt") is None
    assert doc.rows[1].highlight == [Highlight.NORMAL] * 3
