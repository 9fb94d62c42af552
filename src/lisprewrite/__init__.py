# topmark:header:start
#
#   project      : LispRewrite
#   file         : __init__.py
#   file_relpath : src/lisprewrite/__init__.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""LispRewrite package.

LispRewrite replaces Lisp expressions in source text while leaving everything
else (whitespace, comments, reader notation) byte-for-byte intact. A predicate
decides, expression by expression in text order, whether to replace; the
replaced text is the printed form of the value it returns.

Example:
    ```python
    from lisprewrite import Symbol, replace_equal, rewrite

    rewrite("(foo ;; keep me\\n  bar)", replace_equal(Symbol("bar"), Symbol("baz")))
    # -> "(foo ;; keep me\\n  baz)"
    ```
"""

from __future__ import annotations

from lisprewrite.config.options import MutableRewriteOptions, RewriteOptions, load_options
from lisprewrite.core.errors import EngineInvariantError, MalformedInputError, RewriteError
from lisprewrite.core.printer import to_lisp
from lisprewrite.core.reader import Reader, read_all
from lisprewrite.core.values import NIL, T, Char, Cons, Record, Symbol, lisp_list
from lisprewrite.engine.driver import rewrite
from lisprewrite.engine.predicates import chain, replace_equal, replace_if
from lisprewrite.engine.types import NO_MATCH, Replacement, ReplaceKind, match

__all__ = [
    "NIL",
    "NO_MATCH",
    "T",
    "Char",
    "Cons",
    "EngineInvariantError",
    "MalformedInputError",
    "MutableRewriteOptions",
    "Reader",
    "Record",
    "ReplaceKind",
    "Replacement",
    "RewriteError",
    "RewriteOptions",
    "Symbol",
    "chain",
    "lisp_list",
    "load_options",
    "match",
    "read_all",
    "replace_equal",
    "replace_if",
    "rewrite",
    "to_lisp",
]
