# topmark:header:start
#
#   project      : LispRewrite
#   file         : predicates.py
#   file_relpath : src/lisprewrite/engine/predicates.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Ready-made predicates for common rewrites."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from lisprewrite.engine.types import NO_MATCH, Replacement, match

if TYPE_CHECKING:
    from collections.abc import Callable

    from lisprewrite.engine.types import Predicate


def _same(value: Any, other: Any) -> bool:
    # 1 and 1.0 (or True and 1) are different Lisp values.
    return type(value) is type(other) and value == other


def replace_equal(old: Any, new: Any) -> Predicate:
    """Return a predicate replacing every expression equal to ``old`` with ``new``."""

    def predicate(value: Any) -> Replacement:
        return match(new) if _same(value, old) else NO_MATCH

    return predicate


def replace_if(test: Callable[[Any], bool], new: Any | Callable[[Any], Any]) -> Predicate:
    """Return a predicate replacing expressions for which ``test`` is true.

    Args:
        test (Callable[[Any], bool]): Selects the expressions to replace.
        new (Any | Callable[[Any], Any]): The replacement value, or a function
            computing it from the matched value.

    Returns:
        Predicate: The predicate.
    """

    def predicate(value: Any) -> Replacement:
        if not test(value):
            return NO_MATCH
        return match(new(value) if callable(new) else new)

    return predicate


def chain(*predicates: Predicate) -> Predicate:
    """Return a predicate trying each of ``predicates`` in turn; the first match wins."""

    def predicate(value: Any) -> Replacement:
        for candidate in predicates:
            result = candidate(value)
            if result.matched:
                return result
        return NO_MATCH

    return predicate
