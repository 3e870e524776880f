# src/kedit/core/__init__.py
"""Public facade for kedit.core: re-export the document model from CamelCase modules.

The `Kedit` session is imported from ``kedit.core.Kedit`` directly; it pulls
in the ui layer, which itself imports from this package.
"""

# Re-export classes/symbols from CamelCase modules
from .Document import Document  # noqa: F401
from .Highlighter import HLDB, Highlight, SyntaxRule, select_syntax  # noqa: F401
from .Row import Row  # noqa: F401
from .Search import SearchState  # noqa: F401
from .Viewport import EditorView  # noqa: F401


__all__ = [
    "Document",
    "EditorView",
    "HLDB",
    "Highlight",
    "Row",
    "SearchState",
    "SyntaxRule",
    "select_syntax",
]
