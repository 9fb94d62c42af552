# topmark:header:start
#
#   project      : LispRewrite
#   file         : errors.py
#   file_relpath : src/lisprewrite/core/errors.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Exceptions raised by the reader and the rewrite engine.

Two families reach the caller of [`rewrite`][lisprewrite.engine.driver.rewrite]:

* [`MalformedInputError`][lisprewrite.core.errors.MalformedInputError]: the source
  text is not syntactically valid and no recovery rule applies.
* [`EngineInvariantError`][lisprewrite.core.errors.EngineInvariantError]: an
  internal consistency check failed. This signals a gap in the span resolver or
  failure classifier rule tables and is never retried.

Both carry a ``kind`` string and the text offsets involved so callers can report
them without parsing the message.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ReadFailure(Enum):
    """Disambiguated failure kinds reported by the value reader.

    Members:
        END_OF_INPUT: Only whitespace and comments remain.
        DANGLING_DOT: A dotted-pair separator stands alone.
        UNRESOLVED_OCCURRENCE: A bare ``#N#`` whose label is not defined in this read.
        INCOMPLETE_CONTAINER: A list, vector or record embedding an occurrence whose
            definition lies outside the text being read.
        MALFORMED: Any other syntax error.
    """

    END_OF_INPUT = "end_of_input"
    DANGLING_DOT = "dangling_dot"
    UNRESOLVED_OCCURRENCE = "unresolved_occurrence"
    INCOMPLETE_CONTAINER = "incomplete_container"
    MALFORMED = "malformed"


class ReaderError(Exception):
    """Failure to read one value at a cursor.

    Attributes:
        kind (ReadFailure): Discriminant of the failure.
        position (int): Offset where reading stopped. For the ambiguous kinds this is
            just past the offending token (or past the incomplete container).
        start (int): Offset where the read attempt began.
        reason (str): Human-readable detail.
    """

    def __init__(self, kind: ReadFailure, *, position: int, start: int, reason: str = "") -> None:
        self.kind = kind
        self.position = position
        self.start = start
        self.reason = reason or kind.value
        super().__init__(f"{self.reason} at offset {position}")

    @property
    def is_unreadable_subform(self) -> bool:
        """Return True if the text is legal only as part of a larger expression."""
        return self.kind in (
            ReadFailure.DANGLING_DOT,
            ReadFailure.UNRESOLVED_OCCURRENCE,
            ReadFailure.INCOMPLETE_CONTAINER,
        )


class RewriteError(Exception):
    """Base class for errors surfaced by a rewrite pass.

    Attributes:
        kind (str): The malformed-input kind or the failed invariant.
        offsets (tuple[int, ...]): Text offsets involved in the failure.
    """

    kind: str = "rewrite_error"

    def __init__(self, message: str, *, kind: str | None = None, offsets: tuple[int, ...] = ()):
        if kind is not None:
            self.kind = kind
        self.offsets = offsets
        super().__init__(message)

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly description of the error."""
        return {
            "error": type(self).__name__,
            "kind": self.kind,
            "offsets": list(self.offsets),
            "message": str(self),
        }


class MalformedInputError(RewriteError):
    """The source text is not syntactically valid."""

    def __init__(self, error: ReaderError) -> None:
        self.reader_error = error
        super().__init__(
            f"malformed input: {error.reason} (offsets {error.start}..{error.position})",
            kind=error.kind.value,
            offsets=(error.start, error.position),
        )


class EngineInvariantError(RewriteError):
    """An internal consistency check of the rewrite engine failed."""

    kind = "engine_invariant"


class SpanResolutionError(EngineInvariantError):
    """No rule produced a span start at or after the previous expression's end."""

    kind = "unresolved_span"

    def __init__(self, value: object, prev_end: int, cursor_after: int) -> None:
        self.value = value
        self.prev_end = prev_end
        self.cursor_after = cursor_after
        super().__init__(
            f"cannot resolve the start of {value!r} between offsets {prev_end} and {cursor_after}",
            offsets=(prev_end, cursor_after),
        )
