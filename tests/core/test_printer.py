# topmark:header:start
#
#   project      : LispRewrite
#   file         : test_printer.py
#   file_relpath : tests/core/test_printer.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Tests for printing values in Lisp read syntax."""

from __future__ import annotations

import math
from typing import Any

import pytest

from lisprewrite.core.printer import print_char, print_float, print_symbol, to_lisp
from lisprewrite.core.reader import CTRL_BIT, META_BIT, read_all
from lisprewrite.core.values import (
    BACKQUOTE,
    FUNCTION,
    NIL,
    QUOTE,
    UNQUOTE_SPLICING,
    Char,
    Cons,
    Record,
    Symbol,
    lisp_list,
)
from tests.conftest import parametrize, sym


@parametrize(
    "name, expected",
    [
        ("foo", "foo"),
        ("foo bar", "foo\\ bar"),
        ("42", "\\42"),
        ("-1.5", "\\-1.5"),
        (".", "\\."),
        ("", "##"),
        ("#x", "\\#x"),
        ("?a", "\\?a"),
        ("a;b", "a\\;b"),
        ("a(b)", "a\\(b\\)"),
        ("1.0e+INF", "\\1.0e+INF"),
        ("-1.0e+INF", "\\-1.0e+INF"),
        ("0.0e+NaN", "\\0.0e+NaN"),
    ],
)
def test_print_symbol(name: str, expected: str) -> None:
    assert print_symbol(Symbol(name)) == expected


@parametrize(
    "code, expected",
    [
        (ord("a"), "?a"),
        (10, "?\\n"),
        (32, "?\\s"),
        (127, "?\\d"),
        (1, "?\\^A"),
        (ord("("), "?\\("),
        (META_BIT | ord("a"), "?\\M-a"),
        (CTRL_BIT | ord("%"), "?\\C-%"),
        (0x200B, "?\\N{U+200B}"),
        (0x110000, "?\\x110000"),
    ],
)
def test_print_char(code: int, expected: str) -> None:
    assert print_char(Char(code)) == expected


def test_print_float() -> None:
    assert print_float(1.0) == "1.0"
    assert print_float(math.inf) == "1.0e+INF"
    assert print_float(-math.inf) == "-1.0e+INF"
    assert print_float(math.nan) == "0.0e+NaN"


@parametrize(
    "value, expected",
    [
        (lisp_list(sym("a"), 1, "s"), '(a 1 "s")'),
        (Cons(sym("a"), sym("b")), "(a . b)"),
        (lisp_list(sym("a"), tail=2), "(a . 2)"),
        (NIL, "nil"),
        (lisp_list(QUOTE, sym("x")), "'x"),
        (lisp_list(FUNCTION, sym("car")), "#'car"),
        (lisp_list(BACKQUOTE, lisp_list(UNQUOTE_SPLICING, sym("xs"))), "`,@xs"),
        (lisp_list(QUOTE, sym("x"), sym("y")), "(quote x y)"),
        ([1, [2], "s"], '[1 [2] "s"]'),
        (Record([sym("point"), 1, 2]), "#s(point 1 2)"),
        (True, "t"),
        (False, "nil"),
    ],
)
def test_to_lisp(value: Any, expected: str) -> None:
    assert to_lisp(value) == expected


def test_shared_structure_gets_labels() -> None:
    shared = lisp_list(sym("x"))
    assert to_lisp(lisp_list(shared, shared)) == "(#1=(x) #1#)"


def test_circular_list_prints_with_labels() -> None:
    cell = Cons(sym("a"), NIL)
    cell.cdr = cell
    assert to_lisp(cell) == "#1=(a . #1#)"


def test_unprintable_value_raises() -> None:
    with pytest.raises(TypeError):
        to_lisp(None)


@parametrize(
    "text",
    [
        "(defun f (x) \"doc\" (* x 2))",
        "'(a . b)",
        "[?a ?\\n ?\\M-x 1.5 -3]",
        "#s(rec \"x\" (1 2))",
        "`(a ,b ,@c)",
        "(\\42 foo\\ bar ##)",
        "(#1=(x) #1#)",
        "(\\1.0e+INF \\-1.0e+INF \\0.0e+NaN 1.0e+INF)",
        "?\\x110000",
    ],
)
def test_print_read_round_trip(text: str) -> None:
    """Printing a read value and reading it back gives an equal value."""
    (value,) = read_all(text)
    (again,) = read_all(to_lisp(value))
    assert again == value


def test_deeply_nested_values_print_without_recursion() -> None:
    depth = 50_000
    value = lisp_list(sym("x"))
    for _ in range(depth):
        value = lisp_list(QUOTE, lisp_list(value))
    text = to_lisp(value)
    assert text == "'(" * depth + "(x)" + ")" * depth
    (again,) = read_all(text)
    assert again == value
