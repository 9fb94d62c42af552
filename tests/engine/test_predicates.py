# topmark:header:start
#
#   project      : LispRewrite
#   file         : test_predicates.py
#   file_relpath : tests/engine/test_predicates.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the ready-made predicates."""

from __future__ import annotations

from lisprewrite.core.values import NIL, lisp_list
from lisprewrite.engine.predicates import chain, replace_equal, replace_if
from lisprewrite.engine.types import NO_MATCH, ReplaceKind, match
from tests.conftest import sym


def test_replace_equal_is_structural() -> None:
    predicate = replace_equal(lisp_list(sym("a"), 1), sym("x"))
    assert predicate(lisp_list(sym("a"), 1)) == match(sym("x"))
    assert predicate(lisp_list(sym("a"), 2)) is NO_MATCH


def test_replace_equal_distinguishes_number_types() -> None:
    predicate = replace_equal(1, 2)
    assert predicate(1).matched
    assert not predicate(1.0).matched


def test_matching_nil_is_not_no_match() -> None:
    result = replace_equal(sym("a"), NIL)(sym("a"))
    assert result.kind is ReplaceKind.MATCH
    assert result.value == NIL


def test_replace_if_constant_and_computed() -> None:
    constant = replace_if(lambda v: v == sym("a"), sym("b"))
    assert constant(sym("a")) == match(sym("b"))
    assert constant(sym("c")) is NO_MATCH

    computed = replace_if(lambda v: isinstance(v, int), lambda v: v + 1)
    assert computed(41) == match(42)


def test_chain_first_match_wins() -> None:
    predicate = chain(
        replace_equal(sym("a"), sym("first")),
        replace_equal(sym("a"), sym("second")),
        replace_equal(sym("b"), sym("third")),
    )
    assert predicate(sym("a")) == match(sym("first"))
    assert predicate(sym("b")) == match(sym("third"))
    assert predicate(sym("c")) is NO_MATCH
    assert chain()(sym("a")) is NO_MATCH
