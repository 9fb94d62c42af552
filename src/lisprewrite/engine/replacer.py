# topmark:header:start
#
#   project      : LispRewrite
#   file         : replacer.py
#   file_relpath : src/lisprewrite/engine/replacer.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Replacement engine: walk one top-level expression and apply the predicate.

Each visited expression is offered to the predicate first. A match replaces the
expression's exact text with the printed replacement and the region is never
entered. Otherwise the engine descends:

* atoms: nothing to do, the cursor moves past the span;
* shorthand quote-forms written with their token (``'x``, ``#'f``...): the operand
  is read again right after the token;
* lists, vectors and records: each child is read from the text in order, starting
  right after the opening delimiter, and visited in turn. A dotted tail is the
  final expression of a list.

Children are re-read from the text rather than taken from the parent value so
that their spans are exact even after earlier siblings were replaced. Reads that
fail only because the child is not self-contained (graph occurrences, dotted
separators) go through the [`FailureClassifier`][lisprewrite.engine.classifier.FailureClassifier].

Traversal keeps a stack of generator frames instead of recursing: a frame yields
each child ``(value, span)`` to visit and is resumed once the child's visit has
finished and the buffer cursor sits past it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from lisprewrite.config.logging import get_logger
from lisprewrite.config.options import RewriteOptions
from lisprewrite.core.errors import EngineInvariantError, MalformedInputError, ReaderError
from lisprewrite.core.printer import to_lisp
from lisprewrite.core.values import Cons, Record, is_atom, quote_form_token
from lisprewrite.engine.classifier import MISSING
from lisprewrite.engine.types import RecoveryKind, Replacement, Span

if TYPE_CHECKING:
    from collections.abc import Generator

    from lisprewrite.config.logging import RewriteLogger
    from lisprewrite.engine.buffer import SourceBuffer
    from lisprewrite.engine.classifier import FailureClassifier
    from lisprewrite.engine.resolver import SpanResolver
    from lisprewrite.engine.types import Predicate

    # A frame yields the children it wants visited and may return a flag.
    Frame = Generator[tuple[Any, Span], None, bool]

logger: RewriteLogger = get_logger(__name__)


class ReplacementEngine:
    """Apply a predicate to an expression and all of its subexpressions.

    Args:
        buffer (SourceBuffer): The buffer being rewritten.
        predicate (Predicate): Called with each visited value.
        resolver (SpanResolver): Maps read values to their text spans.
        classifier (FailureClassifier): Recovers from unreadable subforms.
        options (RewriteOptions | None): Engine options (``max_depth``).
    """

    def __init__(
        self,
        buffer: SourceBuffer,
        predicate: Predicate,
        resolver: SpanResolver,
        classifier: FailureClassifier,
        options: RewriteOptions | None = None,
    ) -> None:
        self.buffer = buffer
        self.predicate = predicate
        self.resolver = resolver
        self.classifier = classifier
        self.options: RewriteOptions = options or RewriteOptions()
        self.replacements = 0
        self.visited = 0

    def apply(self, value: Any, span: Span) -> None:
        """Visit ``value`` (whose text is ``span``) depth-first in text order.

        On return the buffer cursor sits just past the (possibly replaced)
        expression.

        Raises:
            EngineInvariantError: If a span is empty, the traversal stalls, a
                closing delimiter is missing or ``max_depth`` is exceeded.
            MalformedInputError: If a child cannot be read and no recovery applies.
        """
        max_depth = self.options.max_depth
        stack: list[Frame] = [self._visit(value, span)]
        while stack:
            try:
                child_value, child_span = next(stack[-1])
            except StopIteration:
                stack.pop()
                continue
            if max_depth is not None and len(stack) >= max_depth:
                raise EngineInvariantError(
                    f"nesting deeper than max_depth={max_depth} at offset {child_span.start}",
                    kind="max_depth",
                    offsets=(child_span.start, child_span.end),
                )
            stack.append(self._visit(child_value, child_span))

    # ---- Frames --------------------------------------------------------------

    def _visit(self, value: Any, span: Span) -> Frame:
        buf = self.buffer
        if span.end <= span.start:
            raise EngineInvariantError(
                f"empty span {span.start}..{span.end}",
                kind="empty_span",
                offsets=(span.start, span.end),
            )
        self.visited += 1

        result = self.predicate(value)
        if not isinstance(result, Replacement):
            raise TypeError(
                f"predicate must return a Replacement, got {type(result).__name__}"
            )
        if result.matched:
            new_text = to_lisp(result.value)
            buf.replace(span.start, span.end, new_text)
            self.replacements += 1
            return False

        if is_atom(value):
            buf.cursor = span.end
            return False

        token = quote_form_token(value)
        if token is not None and buf.substring(span.start, span.start + len(token)) == token:
            yield from self._step(span.start + len(token), value.cdr.car)
            return False

        opener = buf.find_opener_forward(span.start, span.end)
        if opener is None:
            raise EngineInvariantError(
                f"no opening delimiter in {buf.substring(span.start, span.end)!r}",
                kind="missing_opener",
                offsets=(span.start, span.end),
            )
        if isinstance(value, Cons):
            yield from self._walk_list(value, opener + 1)
        else:
            items = value.slots if isinstance(value, Record) else value
            yield from self._walk_sequence(items, opener + 1)

        end = buf.skip_closer(buf.cursor)
        if end is None:
            raise EngineInvariantError(
                f"missing closing delimiter after offset {buf.cursor}",
                kind="missing_closer",
                offsets=(span.start, buf.cursor),
            )
        if end <= span.start:
            raise EngineInvariantError(
                f"traversal ended at {end}, before the expression start {span.start}",
                kind="stalled",
                offsets=(span.start, end),
            )
        buf.cursor = end
        return False

    def _walk_list(self, value: Cons, cursor: int) -> Frame:
        buf = self.buffer
        cell: Any = value
        buf.cursor = cursor
        while not buf.closes_at(buf.cursor):
            before = buf.cursor
            # After a '.', the next expression is the remainder itself.
            expected = cell.car if isinstance(cell, Cons) else MISSING
            dotted = yield from self._step(before, expected, tail=cell)
            if dotted or not isinstance(cell, Cons):
                cell = MISSING
            else:
                cell = cell.cdr
            self._check_progress(before)
        return False

    def _walk_sequence(self, items: list[Any], cursor: int) -> Frame:
        buf = self.buffer
        buf.cursor = cursor
        index = 0
        while not buf.closes_at(buf.cursor):
            before = buf.cursor
            expected = items[index] if index < len(items) else MISSING
            yield from self._step(before, expected)
            self._check_progress(before)
            index += 1
        return False

    def _step(self, prev_end: int, expected: Any, tail: Any = MISSING) -> Frame:
        """Read and visit the expression after ``prev_end``.

        Returns True (as the generator's return value) when a dotted-pair
        separator was consumed, so the expression visited was a list tail.
        """
        buf = self.buffer
        try:
            value, end = buf.read_next(prev_end)
        except ReaderError as exc:
            recovery = self.classifier.classify(exc, prev_end, expected)
            if recovery.kind is RecoveryKind.OPAQUE:
                assert recovery.span is not None
                buf.cursor = recovery.span.end
                return False
            if recovery.kind is RecoveryKind.CONTAINER:
                assert recovery.span is not None
                yield expected, recovery.span
                return False
            if tail is MISSING:
                raise MalformedInputError(exc) from None
            assert recovery.resume_at is not None
            logger.trace("dotted tail after %d", recovery.resume_at)
            yield from self._step(recovery.resume_at, tail)
            return True
        yield value, self.resolver.resolve(value, prev_end, end)
        return False

    def _check_progress(self, before: int) -> None:
        if self.buffer.cursor <= before:
            raise EngineInvariantError(
                f"traversal stalled at offset {before}",
                kind="stalled",
                offsets=(before, self.buffer.cursor),
            )
