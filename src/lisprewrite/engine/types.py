# topmark:header:start
#
#   project      : LispRewrite
#   file         : types.py
#   file_relpath : src/lisprewrite/engine/types.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Type definitions shared by the rewrite engine components.

These dataclasses replace bare tuples between the resolver, the failure
classifier and the replacement engine, and give predicates an explicit tagged
result type.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final


@dataclass(frozen=True)
class Span:
    """Offsets bounding the exact text of one expression.

    ``start`` is inclusive and ``end`` is exclusive (slice-friendly). A span is
    only valid for the traversal step that computed it.
    """

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


class ReplaceKind(Enum):
    """Discriminant of a predicate result.

    Members:
        MATCH: Replace the expression with ``Replacement.value``.
        NO_MATCH: Leave the expression alone (its children are still visited).
    """

    MATCH = "match"
    NO_MATCH = "no_match"


@dataclass(frozen=True)
class Replacement:
    """Result of a predicate.

    ``Replacement(ReplaceKind.MATCH, NIL)`` and ``NO_MATCH`` are distinct: the former
    replaces the expression with ``nil``.

    Attributes:
        kind (ReplaceKind): Discriminant.
        value (Any): The replacement value when ``kind`` is ``MATCH``.
    """

    kind: ReplaceKind
    value: Any = None

    @property
    def matched(self) -> bool:
        """Return True if the predicate asked for a replacement."""
        return self.kind is ReplaceKind.MATCH


NO_MATCH: Final[Replacement] = Replacement(ReplaceKind.NO_MATCH)


def match(value: Any) -> Replacement:
    """Return a predicate result replacing the expression with ``value``.

    ``None`` is rejected rather than read as ``nil``: pass
    [`NIL`][lisprewrite.core.values.NIL] (or ``False``) to replace an expression
    with ``nil``, and return ``NO_MATCH`` to keep it.

    Raises:
        TypeError: If ``value`` is ``None``.
    """
    if value is None:
        raise TypeError("match() needs a Lisp value; use NIL for nil, not None")
    return Replacement(ReplaceKind.MATCH, value)


Predicate = Callable[[Any], Replacement]


class RecoveryKind(Enum):
    """How a traversal step recovers from an unreadable-subform failure.

    Members:
        OPAQUE: The span is a graph occurrence; skip it without consulting the predicate.
        CONTAINER: The span is a composite whose value comes from the enclosing structure.
        TAIL: A dotted-pair separator was skipped; the next expression is a list tail.
    """

    OPAQUE = "opaque"
    CONTAINER = "container"
    TAIL = "tail"


@dataclass(frozen=True)
class Recovery:
    """Classifier verdict for an unreadable subform.

    Attributes:
        kind (RecoveryKind): Recovery strategy.
        span (Span | None): The recovered span (``OPAQUE``/``CONTAINER``).
        resume_at (int | None): Offset to continue reading from (``TAIL``).
    """

    kind: RecoveryKind
    span: Span | None = None
    resume_at: int | None = None
