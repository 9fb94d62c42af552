# topmark:header:start
#
#   project      : LispRewrite
#   file         : classifier.py
#   file_relpath : src/lisprewrite/engine/classifier.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Classify reader failures that are legal inside a larger expression.

Reading a child of a composite value one expression at a time can fail on text
that only makes sense in context:

* a graph occurrence ``#N#`` whose ``#N=`` definition lies in the parent;
* a container embedding such an occurrence;
* the ``.`` separating a dotted-pair tail.

The reader reports these with distinct [`ReadFailure`][lisprewrite.core.errors.ReadFailure]
kinds. [`FailureClassifier`][lisprewrite.engine.classifier.FailureClassifier]
confirms each kind against the text just before the failure point and returns a
[`Recovery`][lisprewrite.engine.types.Recovery]. Any other failure is malformed
input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

from lisprewrite.config.logging import get_logger
from lisprewrite.core.errors import MalformedInputError, ReadFailure, ReaderError
from lisprewrite.engine.buffer import CLOSERS
from lisprewrite.engine.types import Recovery, RecoveryKind, Span

if TYPE_CHECKING:
    from lisprewrite.config.logging import RewriteLogger
    from lisprewrite.engine.buffer import SourceBuffer
    from lisprewrite.engine.resolver import SpanResolver

logger: RewriteLogger = get_logger(__name__)


class _Missing:
    """Marker for "the parent supplied no expected value"."""

    def __repr__(self) -> str:
        return "<missing>"


MISSING: Final[Any] = _Missing()


class FailureClassifier:
    """Turn unreadable-subform failures into recoveries.

    Args:
        buffer (SourceBuffer): The buffer being rewritten.
        resolver (SpanResolver): Resolver used to extend container starts.
    """

    def __init__(self, buffer: SourceBuffer, resolver: SpanResolver) -> None:
        self.buffer = buffer
        self.resolver = resolver

    def classify(self, error: ReaderError, prev_end: int, expected: Any = MISSING) -> Recovery:
        """Return the recovery for ``error``, raised by a read starting at ``prev_end``.

        Args:
            error (ReaderError): The reader failure.
            prev_end (int): End of the previous expression (the read's start cursor).
            expected (Any): The value the parent structure holds at this position,
                or ``MISSING`` at top level.

        Returns:
            Recovery: How the traversal step continues.

        Raises:
            MalformedInputError: If no recovery rule applies.
        """
        if not error.is_unreadable_subform:
            raise MalformedInputError(error)

        before = self.buffer.char_before(error.position)
        recovery: Recovery | None = None
        if error.kind is ReadFailure.DANGLING_DOT and before == ".":
            recovery = Recovery(RecoveryKind.TAIL, resume_at=error.position)
        elif before == "#" and error.kind in (
            ReadFailure.UNRESOLVED_OCCURRENCE,
            ReadFailure.INCOMPLETE_CONTAINER,
        ):
            recovery = self._occurrence(error, prev_end)
        elif (
            before in CLOSERS
            and error.kind is ReadFailure.INCOMPLETE_CONTAINER
            and expected is not MISSING
        ):
            recovery = self._container(error, prev_end, expected)

        if recovery is None:
            logger.debug(
                "no recovery for %s at %d (before %r)", error.kind.value, error.position, before
            )
            raise MalformedInputError(error)
        logger.trace("recovered %s at %d: %r", error.kind.value, error.position, recovery)
        return recovery

    def _occurrence(self, error: ReaderError, prev_end: int) -> Recovery | None:
        buf = self.buffer
        end = error.position
        pos = end - 1
        while pos > prev_end and buf.substring(pos - 1, pos).isdigit():
            pos -= 1
        digits = buf.substring(pos, end - 1)
        hash_pos = pos - 1
        if not digits.isdigit() or hash_pos < prev_end or not buf.is_code(hash_pos, "#"):
            return None
        if buf.skip_trivia(prev_end) > hash_pos:
            return None
        # '#N#, `#N# and friends: the prefix belongs to the opaque span too.
        start = buf.skip_prefix_backward(hash_pos, prev_end)
        logger.debug("graph occurrence #%s# at %d..%d left as is", digits, start, end)
        return Recovery(RecoveryKind.OPAQUE, span=Span(start, end))

    def _container(self, error: ReaderError, prev_end: int, expected: Any) -> Recovery | None:
        buf = self.buffer
        close = error.position - 1
        opener = buf.find_opener_forward(prev_end, close)
        if opener is None or buf.find_opener_backward(close, opener) != opener:
            return None
        start = self.resolver.extend_container_start(expected, opener, prev_end)
        return Recovery(RecoveryKind.CONTAINER, span=Span(start, error.position))
