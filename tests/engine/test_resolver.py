# topmark:header:start
#
#   project      : LispRewrite
#   file         : test_resolver.py
#   file_relpath : tests/engine/test_resolver.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for SpanResolver: default search plus the override rules."""

from __future__ import annotations

import pytest

from lisprewrite.core.errors import EngineInvariantError, SpanResolutionError
from lisprewrite.core.reader import Reader
from lisprewrite.core.values import QUOTE, Symbol, lisp_list
from lisprewrite.engine.types import Span
from tests.conftest import make_resolver, mark_engine, parametrize, sym


def resolve_text(text: str, prev_end: int = 0) -> tuple[str, Span]:
    """Read the expression after ``prev_end`` and return its resolved text and span."""
    resolver = make_resolver(text)
    value, end = Reader().read_next(text, prev_end)
    span = resolver.resolve(value, prev_end, end)
    return text[span.start : span.end], span


@mark_engine
@parametrize(
    "text, prev_end, expected",
    [
        ("foo", 0, "foo"),
        ("(a b) (c d)", 5, "(c d)"),
        ("x 'y", 1, "'y"),
        ("x #'car", 1, "#'car"),
        ("x `(a ,b)", 1, "`(a ,b)"),
        ("x ,@xs", 1, ",@xs"),
        ('x "a (b"', 1, '"a (b"'),
        ("x ?\\)", 1, "?\\)"),
        ("#1=(a b)", 0, "(a b)"),
        ("#1=foo", 0, "foo"),
        ("(f) ; comment (x)\n bar", 3, "bar"),
    ],
)
def test_default_search(text: str, prev_end: int, expected: str) -> None:
    """Ordinary expressions resolve to their exact text (graph labels excluded)."""
    assert resolve_text(text, prev_end)[0] == expected


@mark_engine
@parametrize(
    "text, prev_end, expected",
    [
        # Named-character escapes may contain spaces.
        ("x ?\\N{LATIN SMALL LETTER A}", 1, "?\\N{LATIN SMALL LETTER A}"),
        ("x '?\\N{LATIN SMALL LETTER A}", 1, "'?\\N{LATIN SMALL LETTER A}"),
        # The empty symbol.
        ("##", 0, "##"),
        ("x ##", 1, "##"),
        ("x '##", 1, "'##"),
        # Records.
        ("#s(point 1 2)", 0, "#s(point 1 2)"),
        ("x '#s(point 1 2)", 1, "'#s(point 1 2)"),
        # Shorthand token separated from its operand.
        ("' (a b)", 0, "' (a b)"),
        ("x ' ; note\n  y", 1, "' ; note\n  y"),
        ("x #' car", 1, "#' car"),
        ("x ,@ (xs)", 1, ",@ (xs)"),
        ("x ' '(y)", 1, "' '(y)"),
        ("x '(quote (a b))", 1, "'(quote (a b))"),
        ("x (quote 'y)", 1, "(quote 'y)"),
        ("#1='#1#", 0, "'#1#"),
        ("#1=(quote #1#)", 0, "(quote #1#)"),
    ],
)
def test_override_rules(text: str, prev_end: int, expected: str) -> None:
    """Override rules fix the default search's blind spots."""
    assert resolve_text(text, prev_end)[0] == expected


@mark_engine
def test_unresolvable_start_raises() -> None:
    resolver = make_resolver("(a b)")
    with pytest.raises(SpanResolutionError) as excinfo:
        resolver.resolve(lisp_list(sym("a"), sym("b")), 2, 5)
    assert isinstance(excinfo.value, EngineInvariantError)
    assert excinfo.value.offsets == (2, 5)


@mark_engine
def test_extend_container_start_takes_one_shorthand_token() -> None:
    text = "(#1=a ''(b #1#))"
    resolver = make_resolver(text)
    once = lisp_list(QUOTE, lisp_list(sym("b"), sym("a")))
    assert resolver.extend_container_start(lisp_list(QUOTE, once), 8, 5) == 7
    assert resolver.extend_container_start(lisp_list(sym("b"), sym("a")), 8, 5) == 8


@mark_engine
def test_extend_container_start_includes_record_prefix() -> None:
    from lisprewrite.core.values import Record

    resolver = make_resolver("(#1=a #s(r #1#))")
    assert resolver.extend_container_start(Record([sym("r"), sym("a")]), 8, 5) == 6


@mark_engine
def test_empty_symbol_attached_to_a_token_is_left_alone() -> None:
    # 'a##' reads as one symbol; rule 2 must not extend it.
    text, _span = resolve_text("x a##", 1)
    assert text == "a##"
    assert Reader().read_next("x a##", 1)[0] == Symbol("a##")
