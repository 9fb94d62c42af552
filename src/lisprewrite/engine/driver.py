# topmark:header:start
#
#   project      : LispRewrite
#   file         : driver.py
#   file_relpath : src/lisprewrite/engine/driver.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Top-level rewrite loop.

[`rewrite`][lisprewrite.engine.driver.rewrite] reads the source one top-level
expression at a time, resolves its span and hands it to the
[`ReplacementEngine`][lisprewrite.engine.replacer.ReplacementEngine], until only
whitespace and comments remain. Text outside replaced spans is returned
byte-for-byte.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lisprewrite.config.logging import get_logger
from lisprewrite.config.options import RewriteOptions
from lisprewrite.core.errors import (
    EngineInvariantError,
    MalformedInputError,
    ReaderError,
    ReadFailure,
)
from lisprewrite.engine.buffer import SourceBuffer
from lisprewrite.engine.classifier import FailureClassifier
from lisprewrite.engine.replacer import ReplacementEngine
from lisprewrite.engine.resolver import SpanResolver
from lisprewrite.engine.types import RecoveryKind

if TYPE_CHECKING:
    from lisprewrite.config.logging import RewriteLogger
    from lisprewrite.engine.types import Predicate

logger: RewriteLogger = get_logger(__name__)


class Driver:
    """One rewrite pass over a source text.

    Args:
        text (str): Source text.
        predicate (Predicate): Called with each visited value.
        options (RewriteOptions | None): Parser-mode and engine options.
    """

    def __init__(
        self, text: str, predicate: Predicate, options: RewriteOptions | None = None
    ) -> None:
        self.options: RewriteOptions = options or RewriteOptions()
        self.buffer = SourceBuffer(text, self.options)
        self.resolver = SpanResolver(self.buffer)
        self.classifier = FailureClassifier(self.buffer, self.resolver)
        self.engine = ReplacementEngine(
            self.buffer, predicate, self.resolver, self.classifier, self.options
        )

    def run(self) -> str:
        """Rewrite every top-level expression and return the resulting text."""
        buf = self.buffer
        cursor = 0
        count = 0
        while True:
            try:
                value, end = buf.read_next(cursor)
            except ReaderError as exc:
                if exc.kind is ReadFailure.END_OF_INPUT:
                    break
                recovery = self.classifier.classify(exc, cursor)
                if recovery.kind is not RecoveryKind.OPAQUE or recovery.span is None:
                    raise MalformedInputError(exc) from None
                cursor = recovery.span.end
                continue
            span = self.resolver.resolve(value, cursor, end)
            self.engine.apply(value, span)
            if buf.cursor <= cursor:
                raise EngineInvariantError(
                    f"top-level traversal stalled at offset {cursor}",
                    kind="stalled",
                    offsets=(cursor, buf.cursor),
                )
            cursor = buf.cursor
            count += 1

        logger.debug(
            "%d top-level expressions, %d visited, %d replaced",
            count,
            self.engine.visited,
            self.engine.replacements,
        )
        return buf.text

    @property
    def replacements(self) -> int:
        """Number of replacements made so far."""
        return self.engine.replacements


def rewrite(text: str, predicate: Predicate, *, options: RewriteOptions | None = None) -> str:
    """Return ``text`` with every expression matched by ``predicate`` replaced.

    Expressions are visited depth-first in text order. A matched expression's
    exact text is replaced by the printed form of the replacement value and is
    not entered; everything else (whitespace, comments, notation choices such as
    ``'x`` versus ``(quote x)``) is preserved.

    Args:
        text (str): Lisp source text.
        predicate (Predicate): Returns ``match(value)`` to replace an expression,
            or ``NO_MATCH`` to keep it and visit its children.
        options (RewriteOptions | None): Parser-mode options; defaults apply when ``None``.

    Returns:
        str: The rewritten text (identical to ``text`` when nothing matched).

    Raises:
        MalformedInputError: If the text is not valid Lisp.
        EngineInvariantError: If an internal consistency check fails.
    """
    return Driver(text, predicate, options).run()
