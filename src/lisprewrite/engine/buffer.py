# topmark:header:start
#
#   project      : LispRewrite
#   file         : buffer.py
#   file_relpath : src/lisprewrite/engine/buffer.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Mutable source text with a cursor and expression-boundary searches.

[`SourceBuffer`][lisprewrite.engine.buffer.SourceBuffer] is the working copy a
rewrite pass owns. Besides reading and span replacement it offers the searches
the span resolver and the failure classifier build on:

* forward/backward trivia skipping (whitespace and comments);
* a default backward expression search, in the spirit of an editor's
  "backward sexp" motion;
* matching-delimiter searches.

Searches consult a per-character syntax map (code, escaped, comment, string)
computed by a forward scan, so delimiters inside strings, comments and character
literals are never mistaken for structure. The map is rebuilt lazily after every
mutation.

The default backward search has known blind spots, which the span resolver
corrects:

* ``?\\N{NAME WITH SPACES}`` stops at the last space inside the braces;
* ``##`` (the empty symbol) loses its first ``#``, scanned as a dispatch prefix;
* ``#s(...)`` stops at the parenthesis, leaving the record prefix out;
* a shorthand token separated from its operand by whitespace is not included.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Final

from lisprewrite.config.logging import get_logger
from lisprewrite.config.options import RewriteOptions
from lisprewrite.core.reader import TOKEN_DELIMITERS, WHITESPACE, Reader

if TYPE_CHECKING:
    from lisprewrite.config.logging import RewriteLogger

logger: RewriteLogger = get_logger(__name__)

# Syntax classes for the per-character map.
CODE: Final[int] = 0
ESCAPED: Final[int] = 1
COMMENT: Final[int] = 2
STRING: Final[int] = 3
STRING_START: Final[int] = 4

OPENERS: Final[str] = "(["
CLOSERS: Final[str] = ")]"

_LABEL_DEF_RE: Final[re.Pattern[str]] = re.compile(r"(?:#[0-9]+=)+")


class SourceBuffer:
    """Mutable text with one movable cursor.

    Args:
        text (str): Initial contents.
        options (RewriteOptions | None): Parser-mode options shared with the reader.
    """

    def __init__(self, text: str, options: RewriteOptions | None = None) -> None:
        self.options: RewriteOptions = options or RewriteOptions()
        self.reader = Reader(self.options)
        self._text = text
        self._syntax: bytearray | None = None
        self.cursor = 0

    # ---- Contents ------------------------------------------------------------

    @property
    def text(self) -> str:
        """Current contents."""
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def substring(self, start: int, end: int) -> str:
        """Return the text between two offsets."""
        return self._text[start:end]

    def char_before(self, pos: int) -> str:
        """Return the character just before ``pos`` (empty at the start of text)."""
        return self._text[pos - 1] if pos > 0 else ""

    def read_next(self, pos: int) -> tuple[Any, int]:
        """Read one value at ``pos``; see [`Reader.read_next`][lisprewrite.core.reader.Reader.read_next]."""
        return self.reader.read_next(self._text, pos)

    def replace(self, start: int, end: int, new_text: str) -> int:
        """Delete ``[start, end)``, insert ``new_text`` there and move the cursor past it.

        Returns:
            int: The offset just past the inserted text.
        """
        old = self._text[start:end]
        self._text = self._text[:start] + new_text + self._text[end:]
        self._syntax = None
        self.cursor = start + len(new_text)
        logger.debug("replaced %r at %d..%d with %r", old, start, end, new_text)
        return self.cursor

    # ---- Syntax map ----------------------------------------------------------

    @property
    def syntax(self) -> bytearray:
        """Per-character syntax classes of the current text."""
        if self._syntax is None:
            self._syntax = self._scan_syntax()
        return self._syntax

    def _scan_syntax(self) -> bytearray:
        text = self._text
        n = len(text)
        comment = self.options.comment_start
        classes = bytearray(n)
        token_start = True
        i = 0
        while i < n:
            c = text[i]
            if c == "\\":
                if i + 1 < n:
                    classes[i + 1] = ESCAPED
                i += 2
                token_start = False
            elif c == comment:
                end = text.find("\n", i)
                end = n if end < 0 else end
                classes[i:end] = bytes([COMMENT]) * (end - i)
                i = end
            elif c == '"':
                classes[i] = STRING_START
                i += 1
                while i < n and text[i] != '"':
                    classes[i] = STRING
                    if text[i] == "\\" and i + 1 < n:
                        classes[i + 1] = STRING
                        i += 1
                    i += 1
                if i < n:
                    classes[i] = STRING
                i += 1
                token_start = True
            elif c == "?" and token_start:
                # Character literal: the character after '?' (or after '?\') is never syntax.
                skip = 2 if text.startswith("\\", i + 1) else 1
                if i + skip < n:
                    classes[i + skip] = ESCAPED
                i += skip + 1
                token_start = False
            elif c == "#" and token_start and (m := _LABEL_DEF_RE.match(text, i)):
                i = m.end()
            else:
                token_start = (
                    c in WHITESPACE
                    or c in TOKEN_DELIMITERS
                    or (c == "@" and i > 0 and text[i - 1] == ",")
                )
                i += 1
        return classes

    def is_trivia(self, pos: int) -> bool:
        """Return True if the character at ``pos`` is whitespace or inside a comment."""
        cls = self.syntax[pos]
        return cls == COMMENT or (cls == CODE and self._text[pos] in WHITESPACE)

    def is_constituent(self, pos: int) -> bool:
        """Return True if the character at ``pos`` can be part of a symbol-like token."""
        cls = self.syntax[pos]
        if cls == ESCAPED:
            return True
        if cls != CODE:
            return False
        c = self._text[pos]
        return c not in WHITESPACE and c not in TOKEN_DELIMITERS

    def is_code(self, pos: int, chars: str) -> bool:
        """Return True if ``pos`` holds one of ``chars`` as real syntax."""
        return 0 <= pos < len(self._text) and self.syntax[pos] == CODE and self._text[pos] in chars

    # ---- Searches ------------------------------------------------------------

    def skip_trivia(self, pos: int) -> int:
        """Return the first offset at or after ``pos`` that is not trivia."""
        n = len(self._text)
        while pos < n and self.is_trivia(pos):
            pos += 1
        return pos

    def skip_trivia_backward(self, pos: int, limit: int) -> int:
        """Return the smallest offset ``>= limit`` reachable from ``pos`` over trivia."""
        while pos > limit and self.is_trivia(pos - 1):
            pos -= 1
        return pos

    def closes_at(self, pos: int) -> bool:
        """Return True if the first non-trivia character at ``pos`` closes a container."""
        return self.is_code(self.skip_trivia(pos), CLOSERS)

    def skip_closer(self, pos: int) -> int | None:
        """Return the offset past the closing delimiter at or after ``pos``, else None."""
        pos = self.skip_trivia(pos)
        if self.is_code(pos, CLOSERS):
            return pos + 1
        return None

    def find_opener_backward(self, close_pos: int, limit: int) -> int | None:
        """Return the offset of the delimiter opening the one at ``close_pos``."""
        depth = 0
        pos = close_pos
        while pos >= limit:
            if self.is_code(pos, CLOSERS):
                depth += 1
            elif self.is_code(pos, OPENERS):
                depth -= 1
                if depth == 0:
                    return pos
            pos -= 1
        return None

    def find_opener_forward(self, pos: int, end: int) -> int | None:
        """Return the offset of the first opening delimiter in ``[pos, end)``."""
        while pos < end:
            if self.is_code(pos, OPENERS):
                return pos
            pos += 1
        return None

    def backward_expression(self, end: int, limit: int) -> int | None:
        """Return the start of the expression ending at ``end``, searching no lower than ``limit``.

        Returns:
            int | None: The start offset, or None when no expression boundary lies
                in ``[limit, end)``.
        """
        pos = self.skip_trivia_backward(end, limit)
        if pos <= limit:
            return None
        syntax = self.syntax
        last = pos - 1
        if syntax[last] in (STRING, STRING_START):
            while last > limit and syntax[last] != STRING_START:
                last -= 1
            if syntax[last] != STRING_START:
                return None
            pos = last
        elif self.is_code(last, CLOSERS):
            opener = self.find_opener_backward(last, limit)
            if opener is None:
                return None
            pos = opener
        else:
            start = pos
            while start > limit and self.is_constituent(start - 1):
                start -= 1
            # A graph label belongs to the definition, not to the labelled atom.
            label = _LABEL_DEF_RE.match(self._text, start, pos)
            if label is not None:
                start = label.end()
            # '##' scans as a dispatch '#' followed by a one-character token.
            if self._text.startswith("##", start) and pos - start == 2:
                start += 1
            if start >= pos:
                return None
            pos = start
        return self.skip_prefix_backward(pos, limit)

    def skip_prefix_backward(self, pos: int, limit: int) -> int:
        """Extend ``pos`` backward over adjacent shorthand prefix tokens."""
        text = self._text
        while pos > limit and self.syntax[pos - 1] == CODE:
            c = text[pos - 1]
            if c in "'`,":
                pos -= 1
                if c == "'" and pos > limit and self.is_code(pos - 1, "#"):
                    pos -= 1
            elif c == "@" and pos - 1 > limit and self.is_code(pos - 2, ","):
                pos -= 2
            else:
                break
        return pos
