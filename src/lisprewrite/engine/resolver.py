# topmark:header:start
#
#   project      : LispRewrite
#   file         : resolver.py
#   file_relpath : src/lisprewrite/engine/resolver.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Span resolution: map a value to the exact text it was read from.

The reader reports where a value *ends*. [`SpanResolver`][lisprewrite.engine.resolver.SpanResolver]
finds where it *starts* by searching backward with
[`SourceBuffer.backward_expression`][lisprewrite.engine.buffer.SourceBuffer.backward_expression],
then applies overrides for the syntaxes that search gets wrong, checked in order:

1. named-character escapes ``?\\N{...}`` (the name may contain spaces);
2. the empty symbol ``##``;
3. record literals ``#s(...)``;
4. shorthand quote-forms whose token is separated from the operand by whitespace,
   comments or graph labels (``' (a b)``, ``'#1=(a b)``), or nested ones
   (``' 'x``).

A start below the previous expression's end means a syntax form no rule covers;
it raises [`SpanResolutionError`][lisprewrite.core.errors.SpanResolutionError]
rather than guessing.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, Final

from lisprewrite.config.logging import get_logger
from lisprewrite.core.errors import EngineInvariantError, ReaderError, SpanResolutionError
from lisprewrite.core.values import Char, Cons, Record, Symbol, quote_form_token
from lisprewrite.engine.types import Span

if TYPE_CHECKING:
    from lisprewrite.config.logging import RewriteLogger
    from lisprewrite.engine.buffer import SourceBuffer

logger: RewriteLogger = get_logger(__name__)

RECORD_PREFIX: Final[str] = "#s"
NAMED_CHAR_PREFIX: Final[str] = "\\N"
# Longest first, so ",@" is not taken for ",".
_PREFIX_TOKENS: Final[tuple[str, ...]] = ("#'", ",@", "'", "`", ",")
_LABEL_TAIL_RE: Final[re.Pattern[str]] = re.compile(r"#[0-9]+=\Z")


class SpanResolver:
    """Resolve the start offset of values read from a [`SourceBuffer`][lisprewrite.engine.buffer.SourceBuffer]."""

    def __init__(self, buffer: SourceBuffer) -> None:
        self.buffer = buffer

    def resolve(self, value: Any, prev_end: int, cursor_after: int) -> Span:
        """Return the span of ``value``, which was read between ``prev_end`` and ``cursor_after``.

        Raises:
            SpanResolutionError: If no rule finds a start at or after ``prev_end``.
            EngineInvariantError: If the resolved span is empty.
        """
        start = self.resolve_start(value, prev_end, cursor_after)
        if cursor_after <= start:
            raise EngineInvariantError(
                f"empty span for {value!r} at {start}..{cursor_after}",
                kind="empty_span",
                offsets=(start, cursor_after),
            )
        logger.trace(
            "span %d..%d: %r", start, cursor_after, self.buffer.substring(start, cursor_after)
        )
        return Span(start, cursor_after)

    def resolve_start(self, value: Any, prev_end: int, cursor_after: int) -> int:
        """Return the offset of the first character of ``value``'s text.

        Args:
            value (Any): The value that was read.
            prev_end (int): End of the previous expression; the lower search bound.
            cursor_after (int): Offset just past the value's last character.

        Returns:
            int: The start offset, ``prev_end <= start < cursor_after``.

        Raises:
            SpanResolutionError: If no rule produces a position at or after ``prev_end``.
        """
        start = self.buffer.backward_expression(cursor_after, prev_end)
        if start is None or start < prev_end:
            raise SpanResolutionError(value, prev_end, cursor_after)

        if isinstance(value, Char):
            start = self._named_char_start(start, prev_end, cursor_after)
        elif isinstance(value, Symbol):
            start = self._empty_symbol_start(start, prev_end)
        elif isinstance(value, Record):
            start = self._record_start(start, prev_end)
        elif quote_form_token(value) is not None:
            start = self._shorthand_start(value, start, prev_end, cursor_after)

        if start < prev_end:
            raise SpanResolutionError(value, prev_end, cursor_after)
        return start

    def extend_container_start(self, value: Any, opener: int, prev_end: int) -> int:
        """Extend a container's opening delimiter to its record prefix or shorthand token.

        Used when the container's value could not be read standalone. Only one
        shorthand token is considered.
        """
        start = opener
        if isinstance(value, Record):
            return self._record_start(start, prev_end)
        token = quote_form_token(value)
        if token is not None:
            before = self.buffer.skip_trivia_backward(start, prev_end)
            token_start = before - len(token)
            if token_start >= prev_end and self.buffer.substring(token_start, before) == token:
                start = token_start
        return start

    # ---- Overrides -----------------------------------------------------------

    def _named_char_start(self, start: int, prev_end: int, cursor_after: int) -> int:
        buf = self.buffer
        if buf.char_before(cursor_after) != "}":
            return start
        brace = buf.text.rfind("{", prev_end, cursor_after)
        pos = brace - len(NAMED_CHAR_PREFIX)
        if pos < prev_end or buf.substring(pos, brace) != NAMED_CHAR_PREFIX:
            return start
        while pos > prev_end and buf.is_constituent(pos - 1):
            pos -= 1
        if buf.substring(pos, pos + 1) != "?":
            return start
        logger.trace("named character escape starts at %d (default %d)", pos, start)
        return buf.skip_prefix_backward(pos, prev_end)

    def _empty_symbol_start(self, start: int, prev_end: int) -> int:
        buf = self.buffer
        hash_pos = start - 1
        if hash_pos < prev_end or not buf.is_code(hash_pos, "#"):
            return start
        attached = hash_pos > prev_end and buf.is_constituent(hash_pos - 1)
        if attached and buf.char_before(hash_pos) != "=":
            return start
        logger.trace("empty-symbol shorthand: including '#' at %d", hash_pos)
        return buf.skip_prefix_backward(hash_pos, prev_end)

    def _record_start(self, start: int, prev_end: int) -> int:
        prefix_start = start - len(RECORD_PREFIX)
        if prefix_start >= prev_end and self.buffer.substring(prefix_start, start) == RECORD_PREFIX:
            return self.buffer.skip_prefix_backward(prefix_start, prev_end)
        return start

    def _shorthand_start(self, value: Any, start: int, prev_end: int, cursor_after: int) -> int:
        own = self._own_start(value, prev_end, cursor_after)
        if own != start:
            logger.trace(
                "shorthand %r starts at %d (default %d)", quote_form_token(value), own, start
            )
        return own

    def _own_start(self, value: Any, prev_end: int, cursor_after: int) -> int:
        """Return where ``value``'s own text starts.

        Prefix tokens absorbed by the default search that belong to enclosing
        shorthand forms are left out. A quote-form written longhand is the list
        ending at ``cursor_after`` when that list nests exactly as many
        quote-forms as ``value``. Otherwise it is located from its operand: the
        token must be the first code before the operand, possibly across
        whitespace, comments and graph labels.

        The operand chain is walked down first, then the tokens are matched on the
        way back up.
        """
        buf = self.buffer
        pending: list[tuple[Any, str]] = []
        seen: set[int] = set()
        opener: int | None = None
        written: Cons | None = None
        while (token := quote_form_token(value)) is not None:
            if opener is None:
                found = buf.backward_expression(cursor_after, prev_end)
                if found is None:
                    raise SpanResolutionError(value, prev_end, cursor_after)
                opener = self._strip_prefix_tokens(found, cursor_after)
                written = self._written_list(opener, cursor_after)
            longhand = (
                written is not None
                and written.car == value.car
                and _quote_depth(written) == _quote_depth(value)
            )
            # A circular operand chain ('#1# under its own label) ends at the default start.
            if id(value) in seen or longhand:
                start = opener
                break
            seen.add(id(value))
            pending.append((value, token))
            value = value.cdr.car
        else:
            start = self._strip_prefix_tokens(
                self.resolve_start(value, prev_end, cursor_after), cursor_after
            )

        for form, token in reversed(pending):
            before = self._skip_labels_backward(start, prev_end)
            token_start = before - len(token)
            if token_start >= prev_end and buf.substring(token_start, before) == token:
                start = token_start
            elif opener is not None and buf.is_code(opener, "("):
                # Longhand that cannot be read on its own, e.g. #1=(quote #1#).
                start = opener
            else:
                raise SpanResolutionError(form, prev_end, cursor_after)
        return start

    def _written_list(self, opener: int, cursor_after: int) -> Cons | None:
        """Return the list read at ``opener`` if it ends exactly at ``cursor_after``."""
        buf = self.buffer
        if not buf.is_code(opener, "("):
            return None
        try:
            written, end = buf.read_next(opener)
        except ReaderError:
            return None
        if end != cursor_after or not isinstance(written, Cons):
            return None
        return written

    def _skip_labels_backward(self, pos: int, prev_end: int) -> int:
        buf = self.buffer
        pos = buf.skip_trivia_backward(pos, prev_end)
        while buf.char_before(pos) == "=":
            m = _LABEL_TAIL_RE.search(buf.text, prev_end, pos)
            if m is None:
                break
            pos = buf.skip_trivia_backward(m.start(), prev_end)
        return pos

    def _strip_prefix_tokens(self, pos: int, end: int) -> int:
        buf = self.buffer
        while pos < end:
            for token in _PREFIX_TOKENS:
                if buf.substring(pos, pos + len(token)) == token and buf.is_code(pos, token[0]):
                    pos += len(token)
                    break
            else:
                return pos
        return pos


def _quote_depth(value: Any) -> int:
    """Return how many quote-forms are nested along ``value``'s operand chain."""
    depth = 0
    seen: set[int] = set()
    while quote_form_token(value) is not None and id(value) not in seen:
        seen.add(id(value))
        depth += 1
        value = value.cdr.car
    return depth
