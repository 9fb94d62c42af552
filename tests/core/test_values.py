# topmark:header:start
#
#   project      : LispRewrite
#   file         : test_values.py
#   file_relpath : tests/core/test_values.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for the value model helpers."""

from __future__ import annotations

from typing import Any

import pytest

from lisprewrite.core.values import (
    NIL,
    QUOTE,
    UNQUOTE_SPLICING,
    Cons,
    Record,
    is_atom,
    iter_cells,
    lisp_equal,
    lisp_list,
    list_items,
    quote_form_token,
)
from tests.conftest import sym


def test_cons_equality_is_structural() -> None:
    assert lisp_list(1, lisp_list(2)) == lisp_list(1, lisp_list(2))
    assert lisp_list(1, 2) != lisp_list(1, 2, 3)
    assert Cons(1, 2) != Cons(1, 3)
    assert lisp_list(sym("a")) != [sym("a")]


def test_cons_equality_handles_long_lists() -> None:
    items = list(range(50_000))
    assert lisp_list(*items) == lisp_list(*items)


def test_equality_handles_deep_nesting() -> None:
    def nest(depth: int) -> Any:
        value: Any = sym("x")
        for idx in range(depth):
            value = lisp_list(value) if idx % 2 else [value]
        return value

    assert nest(50_000) == nest(50_000)
    assert nest(50_000) != nest(50_002)


def test_equality_of_circular_lists_terminates() -> None:
    first = Cons(sym("a"), NIL)
    first.cdr = first
    second = Cons(sym("a"), Cons(sym("a"), NIL))
    second.cdr.cdr = second
    assert first == second
    assert first != Cons(sym("b"), first)


def test_record_equality_is_structural() -> None:
    assert Record([sym("p"), lisp_list(1)]) == Record([sym("p"), lisp_list(1)])
    assert Record([sym("p"), 1]) != Record([sym("p"), 1, 2])
    assert Record([sym("p")]) != [sym("p")]
    assert lisp_equal([1, Record([sym("r")])], [1, Record([sym("r")])])


def test_cons_is_unhashable() -> None:
    with pytest.raises(TypeError):
        hash(Cons(1, NIL))


def test_iter_cells_stops_on_cycles() -> None:
    cell = Cons(sym("a"), NIL)
    cell.cdr = cell
    assert list(iter_cells(cell)) == [cell]
    assert list_items(lisp_list(1, 2, tail=3)) == [1, 2]


def test_is_atom() -> None:
    assert is_atom(sym("a"))
    assert is_atom("string")
    assert not is_atom([1])
    assert not is_atom(Record([sym("r")]))
    assert not is_atom(lisp_list(1))


def test_quote_form_token() -> None:
    assert quote_form_token(lisp_list(QUOTE, sym("x"))) == "'"
    assert quote_form_token(lisp_list(UNQUOTE_SPLICING, sym("x"))) == ",@"
    assert quote_form_token(lisp_list(QUOTE)) is None
    assert quote_form_token(lisp_list(QUOTE, 1, 2)) is None
    assert quote_form_token(Cons(QUOTE, sym("x"))) is None
    assert quote_form_token(lisp_list(sym("list"), 1)) is None
