# kedit/core/Highlighter.py
"""Highlighter Module for the kedit Editor
=========================================
This module classifies every rendered byte of a row into a highlight class and
keeps multi-line comment state consistent across row boundaries.

Key Features:
-------------
- A fixed, ordered table of per-filetype rules (`HLDB`), selected once per file
  name by extension or substring match.
- A single left-to-right scan per row honouring comments, strings, numbers and
  separator-delimited keywords (primary and secondary).
- Propagation of open block comments to following rows with an explicit
  worklist loop that stops as soon as a row's incoming state already matches.

Classes:
--------
- Highlight: highlight classes stored per rendered byte.
- SyntaxRule: immutable description of one filetype.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from kedit.core.Row import Row


class Highlight(enum.IntEnum):
    """Highlight class of a single rendered byte."""

    NORMAL = 0
    COMMENT = 1
    MLCOMMENT = 2
    KEYWORD1 = 3
    KEYWORD2 = 4
    STRING = 5
    NUMBER = 6
    MATCH = 7


HL_HIGHLIGHT_NUMBERS = 1 << 0
HL_HIGHLIGHT_STRINGS = 1 << 1

SEPARATORS = b",.()+-/*=~%<>[];"
QUOTES = b"\"'"
WHITESPACE = b" \t\n\v\f\r"
DIGITS = b"0123456789"


@dataclass(frozen=True)
class SyntaxRule:
    """Immutable highlighting rule for one filetype.

    Keywords ending with ``|`` belong to the secondary class (types).

    Attributes:
        filetype: Name shown in the status bar.
        filematch: Extensions (leading dot) or substrings matched against file names.
        keywords: Keyword list; secondary keywords carry a trailing ``|``.
        singleline_comment: Token starting a comment that runs to end of row.
        multiline_comment_start: Token opening a block comment.
        multiline_comment_end: Token closing a block comment.
        flags: Bit set of ``HL_HIGHLIGHT_NUMBERS`` / ``HL_HIGHLIGHT_STRINGS``.
    """

    filetype: str
    filematch: tuple[str, ...]
    keywords: tuple[str, ...] = ()
    singleline_comment: bytes = b""
    multiline_comment_start: bytes = b""
    multiline_comment_end: bytes = b""
    flags: int = 0
    # (token, class) pairs, longest first
    compiled_keywords: tuple[tuple[bytes, Highlight], ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        compiled = []
        for keyword in self.keywords:
            if keyword.endswith("|"):
                compiled.append((keyword[:-1].encode("ascii"), Highlight.KEYWORD2))
            else:
                compiled.append((keyword.encode("ascii"), Highlight.KEYWORD1))
        compiled.sort(key=lambda item: len(item[0]), reverse=True)
        object.__setattr__(self, "compiled_keywords", tuple(compiled))


C_HL_KEYWORDS = (
    "switch", "if", "while", "for", "break", "continue", "return", "else",
    "struct", "union", "typedef", "static", "enum", "class", "case",
    "int|", "long|", "double|", "float|", "char|", "unsigned|", "signed|",
    "void|",
)

PYTHON_HL_KEYWORDS = (
    "and", "as", "assert", "break", "class", "continue", "def", "del", "elif",
    "else", "except", "finally", "for", "from", "global", "if", "import", "in",
    "is", "lambda", "nonlocal", "not", "or", "pass", "raise", "return", "try",
    "while", "with", "yield",
    "None|", "True|", "False|", "self|", "int|", "str|", "bytes|", "list|",
    "dict|", "set|", "tuple|", "float|", "bool|",
)

JS_HL_KEYWORDS = (
    "break", "case", "catch", "class", "const", "continue", "default", "delete",
    "do", "else", "export", "extends", "finally", "for", "function", "if",
    "import", "in", "instanceof", "let", "new", "return", "switch", "this",
    "throw", "try", "typeof", "var", "while", "yield", "async", "await",
    "true|", "false|", "null|", "undefined|", "NaN|", "Infinity|",
)

HLDB: tuple[SyntaxRule, ...] = (
    SyntaxRule(
        filetype="c",
        filematch=(".c", ".h", ".cpp", ".hpp", ".cc"),
        keywords=C_HL_KEYWORDS,
        singleline_comment=b"//",
        multiline_comment_start=b"/*",
        multiline_comment_end=b"*/",
        flags=HL_HIGHLIGHT_NUMBERS | HL_HIGHLIGHT_STRINGS,
    ),
    SyntaxRule(
        filetype="python",
        filematch=(".py", ".pyw"),
        keywords=PYTHON_HL_KEYWORDS,
        singleline_comment=b"#",
        flags=HL_HIGHLIGHT_NUMBERS | HL_HIGHLIGHT_STRINGS,
    ),
    SyntaxRule(
        filetype="javascript",
        filematch=(".js", ".mjs", ".ts"),
        keywords=JS_HL_KEYWORDS,
        singleline_comment=b"//",
        multiline_comment_start=b"/*",
        multiline_comment_end=b"*/",
        flags=HL_HIGHLIGHT_NUMBERS | HL_HIGHLIGHT_STRINGS,
    ),
)


def is_separator(byte: int) -> bool:
    """Return True for whitespace, NUL and the punctuation that ends a token."""
    return byte == 0 or byte in WHITESPACE or byte in SEPARATORS


def select_syntax(filename: Optional[str]) -> Optional[SyntaxRule]:
    """Picks the first rule in `HLDB` whose pattern matches *filename*.

    Patterns with a leading dot must equal the last extension of the file
    name; other patterns match anywhere in the name.

    Args:
        filename: File name as given on the command line or in the save prompt.

    Returns:
        The matching rule, or None when the file gets no highlighting.
    """
    if not filename:
        return None

    dot = filename.rfind(".")
    extension = filename[dot:] if dot != -1 else None

    for rule in HLDB:
        for pattern in rule.filematch:
            is_ext = pattern.startswith(".")
            if (is_ext and extension == pattern) or (not is_ext and pattern in filename):
                logging.debug(f"select_syntax: '{filename}' matched filetype '{rule.filetype}'")
                return rule

    logging.debug(f"select_syntax: no filetype for '{filename}'")
    return None


def highlight_row(row: "Row", syntax: Optional[SyntaxRule]) -> None:
    """Classifies every byte of ``row.render`` and sets ``row.open_comment_out``.

    The scan is seeded with ``row.open_comment_in``. Precedence per position,
    first match wins: open block comment, block comment start, single-line
    comment, string, number, keyword (only right after a separator), normal.

    Args:
        row: Row whose ``render`` is current.
        syntax: Active rule, or None to classify everything as normal.
    """
    render = row.render
    length = len(render)
    hl = [Highlight.NORMAL] * length
    row.highlight = hl

    if syntax is None:
        row.open_comment_out = False
        return

    scs = syntax.singleline_comment
    mcs = syntax.multiline_comment_start
    mce = syntax.multiline_comment_end
    has_block = bool(mcs and mce)
    strings = bool(syntax.flags & HL_HIGHLIGHT_STRINGS)
    numbers = bool(syntax.flags & HL_HIGHLIGHT_NUMBERS)

    prev_hl = Highlight.NORMAL
    prev_sep = True
    in_string = 0
    in_comment = row.open_comment_in
    escape = False

    i = 0
    while i < length:
        c = render[i]

        if has_block and not in_string:
            if in_comment:
                if render.startswith(mce, i):
                    end = i + len(mce)
                    hl[i:end] = [Highlight.MLCOMMENT] * len(mce)
                    i = end
                    prev_hl = Highlight.MLCOMMENT
                    in_comment = False
                    prev_sep = True
                else:
                    hl[i] = prev_hl = Highlight.MLCOMMENT
                    prev_sep = False
                    i += 1
                continue
            if render.startswith(mcs, i):
                end = i + len(mcs)
                hl[i:end] = [Highlight.MLCOMMENT] * len(mcs)
                i = end
                prev_hl = Highlight.MLCOMMENT
                in_comment = True
                prev_sep = True
                continue

        if scs and not in_string and render.startswith(scs, i):
            hl[i:] = [Highlight.COMMENT] * (length - i)
            break

        if strings and (in_string or c in QUOTES):
            hl[i] = prev_hl = Highlight.STRING
            if not in_string:
                in_string = c
                prev_sep = True
            elif c == in_string:
                if escape:
                    escape = False
                else:
                    in_string = 0
                    prev_sep = True
            else:
                escape = not escape and c == ord("\\")
                prev_sep = False
            i += 1
            continue

        if numbers and (
            (c in DIGITS and (prev_sep or prev_hl == Highlight.NUMBER))
            or (c == ord(".") and prev_hl == Highlight.NUMBER)
        ):
            hl[i] = prev_hl = Highlight.NUMBER
            prev_sep = False
            i += 1
            continue

        if prev_sep:
            for token, klass in syntax.compiled_keywords:
                end = i + len(token)
                if render.startswith(token, i) and (end >= length or is_separator(render[end])):
                    hl[i:end] = [klass] * len(token)
                    i = end - 1
                    break

        prev_hl = hl[i]
        prev_sep = is_separator(render[i])
        i += 1

    row.open_comment_out = in_comment


def propagate(rows: list["Row"], start: int, syntax: Optional[SyntaxRule]) -> int:
    """Re-highlights ``rows[start]`` and every following row whose incoming
    block-comment state no longer matches its predecessor.

    Args:
        rows: All rows of the document.
        start: Index of the first row to re-scan.
        syntax: Active rule.

    Returns:
        Number of rows that were re-scanned.
    """
    scanned = 0
    idx = start
    while idx < len(rows):
        row = rows[idx]
        row.open_comment_in = idx > 0 and rows[idx - 1].open_comment_out
        highlight_row(row, syntax)
        scanned += 1

        nxt = idx + 1
        if nxt >= len(rows) or rows[nxt].open_comment_in == row.open_comment_out:
            break
        idx = nxt

    if scanned > 1:
        logging.debug(f"propagate: comment state cascaded over {scanned} rows from {start}")
    return scanned
