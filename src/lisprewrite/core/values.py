# topmark:header:start
#
#   project      : LispRewrite
#   file         : values.py
#   file_relpath : src/lisprewrite/core/values.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Value model for parsed Lisp data.

Lisp values map onto Python as follows:

* symbols: [`Symbol`][lisprewrite.core.values.Symbol] (``nil`` doubles as the empty list);
* integers, floats and strings: ``int``, ``float`` and ``str``;
* characters: [`Char`][lisprewrite.core.values.Char];
* cons cells: [`Cons`][lisprewrite.core.values.Cons] (mutable, so that graph
  notation can build circular structure);
* vectors: plain Python ``list``;
* records: [`Record`][lisprewrite.core.values.Record].

A *shorthand quote-form* is a 2-element list headed by one of the symbols in
[`SHORTHAND_TOKENS`][lisprewrite.core.values.SHORTHAND_TOKENS]; the reader builds
one for ``'x``, ``#'x``, `` `x ``, ``,x`` and ``,@x``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final, Union

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True)
class Symbol:
    """An interned symbol, compared by name."""

    name: str

    def __repr__(self) -> str:
        return f"Symbol({self.name!r})"


@dataclass(frozen=True)
class Char:
    """A character value.

    ``code`` is the full Emacs character code, modifier bits included (``?\\M-a``
    sets bit 27).
    """

    code: int

    def __repr__(self) -> str:
        return f"Char({self.code!r})"


class Cons:
    """A mutable cons cell."""

    __slots__ = ("car", "cdr")

    def __init__(self, car: Any, cdr: Any) -> None:
        self.car = car
        self.cdr = cdr

    def __eq__(self, other: object) -> bool:
        return lisp_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        from lisprewrite.core.printer import to_lisp

        return f"Cons<{to_lisp(self)}>"


@dataclass(eq=False)
class Record:
    """A record (``#s(type slot...)``); ``slots[0]`` is the record type."""

    slots: list[Any] = field(default_factory=lambda: [])

    def __eq__(self, other: object) -> bool:
        return lisp_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    @property
    def type_name(self) -> Any:
        """Return the record's type slot (or ``NIL`` for an empty record)."""
        return self.slots[0] if self.slots else NIL


Value = Union[Symbol, Char, Cons, Record, list[Any], str, int, float]

NIL: Final[Symbol] = Symbol("nil")
T: Final[Symbol] = Symbol("t")

QUOTE: Final[Symbol] = Symbol("quote")
FUNCTION: Final[Symbol] = Symbol("function")
BACKQUOTE: Final[Symbol] = Symbol("`")
UNQUOTE: Final[Symbol] = Symbol(",")
UNQUOTE_SPLICING: Final[Symbol] = Symbol(",@")

# Reserved head symbol -> shorthand reader token.
SHORTHAND_TOKENS: Final[dict[Symbol, str]] = {
    QUOTE: "'",
    FUNCTION: "#'",
    BACKQUOTE: "`",
    UNQUOTE: ",",
    UNQUOTE_SPLICING: ",@",
}


def lisp_list(*items: Any, tail: Any = NIL) -> Any:
    """Build a list from ``items``, ending in ``tail`` (``NIL`` for a proper list)."""
    result: Any = tail
    for item in reversed(items):
        result = Cons(item, result)
    return result


def iter_cells(value: Any) -> Iterator[Cons]:
    """Yield the cons cells of a list, stopping at a non-cons tail or a cycle."""
    seen: set[int] = set()
    while isinstance(value, Cons) and id(value) not in seen:
        seen.add(id(value))
        yield value
        value = value.cdr


def list_items(value: Any) -> list[Any]:
    """Return the heads of a list's cells (the dotted tail, if any, is dropped)."""
    return [cell.car for cell in iter_cells(value)]


def is_atom(value: Any) -> bool:
    """Return True for values without substructure."""
    return not isinstance(value, (Cons, list, Record))


def quote_form_token(value: Any) -> str | None:
    """Return the shorthand token if ``value`` is a shorthand quote-form, else None."""
    if not isinstance(value, Cons) or not isinstance(value.car, Symbol):
        return None
    token = SHORTHAND_TOKENS.get(value.car)
    if token is None:
        return None
    rest = value.cdr
    if isinstance(rest, Cons) and rest.cdr == NIL:
        return token
    return None


def lisp_equal(a: Any, b: Any) -> bool:
    """Return True if two values are structurally equal.

    Conses, vectors and records are compared element by element with an explicit
    stack, so deep nesting and circular structure terminate. Atoms compare with
    ``==``.
    """
    stack: list[tuple[Any, Any]] = [(a, b)]
    seen: set[tuple[int, int]] = set()
    while stack:
        x, y = stack.pop()
        if x is y:
            continue
        if isinstance(x, (Cons, list, Record)):
            if type(x) is not type(y):
                return False
            pair = (id(x), id(y))
            if pair in seen:
                continue
            seen.add(pair)
            if isinstance(x, Cons):
                stack.append((x.cdr, y.cdr))
                stack.append((x.car, y.car))
                continue
            xs, ys = (x.slots, y.slots) if isinstance(x, Record) else (x, y)
            if len(xs) != len(ys):
                return False
            stack.extend(zip(reversed(xs), reversed(ys)))
        elif isinstance(y, (Cons, list, Record)) or x != y:
            return False
    return True
