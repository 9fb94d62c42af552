# topmark:header:start
#
#   project      : LispRewrite
#   file         : printer.py
#   file_relpath : src/lisprewrite/core/printer.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Print values in Lisp read syntax.

The output of [`to_lisp`][lisprewrite.core.printer.to_lisp] reads back (with
[`Reader`][lisprewrite.core.reader.Reader]) to an equal value:

* quote-forms use their shorthand prefix (``'x``, ``#'f``, `` `x ``, ``,x``, ``,@x``);
* composite values referenced more than once (shared or circular structure) are
  labelled with graph notation (``#1=`` on first print, ``#1#`` afterwards);
* symbols, strings and characters are escaped as needed.
"""

from __future__ import annotations

import math
from typing import Any, Final

from lisprewrite.core.reader import (
    ALT_BIT,
    CTRL_BIT,
    FLOAT_RE,
    HYPER_BIT,
    INT_RE,
    MAX_UNICODE,
    META_BIT,
    SHIFT_BIT,
    SPECIAL_FLOAT_RE,
    SUPER_BIT,
    TOKEN_DELIMITERS,
    WHITESPACE,
)
from lisprewrite.core.values import NIL, Char, Cons, Record, Symbol, quote_form_token

_SYMBOL_ESCAPES: Final[str] = WHITESPACE + TOKEN_DELIMITERS + ";\\"
_CHAR_ESCAPES: Final[str] = "()[]\\;\"'`,#?.|"

_MODIFIER_PREFIXES: Final[tuple[tuple[int, str], ...]] = (
    (ALT_BIT, "\\A-"),
    (SUPER_BIT, "\\s-"),
    (HYPER_BIT, "\\H-"),
    (SHIFT_BIT, "\\S-"),
    (CTRL_BIT, "\\C-"),
    (META_BIT, "\\M-"),
)

_NAMED_CONTROLS: Final[dict[int, str]] = {
    9: "\\t",
    10: "\\n",
    12: "\\f",
    13: "\\r",
    27: "\\e",
    32: "\\s",
    127: "\\d",
}


def print_symbol(sym: Symbol) -> str:
    """Return the read syntax of a symbol."""
    name = sym.name
    if not name:
        return "##"
    if name == "." or any(rx.match(name) for rx in (INT_RE, FLOAT_RE, SPECIAL_FLOAT_RE)):
        return "\\" + name
    out: list[str] = []
    for idx, c in enumerate(name):
        if c in _SYMBOL_ESCAPES or (idx == 0 and c in "#?"):
            out.append("\\")
        out.append(c)
    return "".join(out)


def print_string(value: str) -> str:
    """Return the read syntax of a string."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def print_char(char: Char) -> str:
    """Return the read syntax of a character (``?a``, ``?\\n``, ``?\\M-a``...)."""
    code = char.code
    prefix: list[str] = []
    for bit, text in _MODIFIER_PREFIXES:
        if code & bit:
            prefix.append(text)
            code &= ~bit
    if code in _NAMED_CONTROLS:
        body = _NAMED_CONTROLS[code]
    elif code < 32:
        body = "\\^" + chr(code + 64)
    elif code > MAX_UNICODE:
        body = f"\\x{code:x}"
    elif chr(code) in _CHAR_ESCAPES:
        body = "\\" + chr(code)
    elif chr(code).isprintable():
        body = chr(code)
    else:
        body = f"\\N{{U+{code:X}}}"
    return "?" + "".join(prefix) + body


def print_float(value: float) -> str:
    """Return the read syntax of a float, including infinities and NaN."""
    if math.isnan(value):
        return "0.0e+NaN"
    if math.isinf(value):
        return "1.0e+INF" if value > 0 else "-1.0e+INF"
    return repr(value)


def _children(node: Any) -> list[Any]:
    if isinstance(node, Cons):
        return [node.car, node.cdr]
    if isinstance(node, Record):
        return list(node.slots)
    if isinstance(node, list):
        return list(node)
    return []


class _Printer:
    """Stateful printer handling graph labels for one top-level value.

    Pending output is kept on a work stack of ``(is_text, item)`` pairs, so deeply
    nested values print without recursion.
    """

    def __init__(self, root: Any) -> None:
        self.shared: set[int] = self._find_shared(root)
        self.labels: dict[int, int] = {}
        self.parts: list[str] = []
        self.work: list[tuple[bool, Any]] = []

    @staticmethod
    def _find_shared(root: Any) -> set[int]:
        counts: dict[int, int] = {}
        stack: list[Any] = [root]
        while stack:
            node = stack.pop()
            if not isinstance(node, (Cons, list, Record)):
                continue
            key = id(node)
            counts[key] = counts.get(key, 0) + 1
            if counts[key] == 1:
                stack.extend(_children(node))
        return {key for key, count in counts.items() if count > 1}

    def run(self, root: Any) -> str:
        self.work.append((False, root))
        while self.work:
            is_text, item = self.work.pop()
            if is_text:
                self.parts.append(item)
            else:
                self.emit(item)
        return "".join(self.parts)

    def schedule(self, *pieces: tuple[bool, Any]) -> None:
        """Queue ``pieces`` to be printed next, in order."""
        self.work.extend(reversed(pieces))

    def emit(self, value: Any) -> None:
        key = id(value)
        if key in self.shared:
            if key in self.labels:
                self.parts.append(f"#{self.labels[key]}#")
                return
            self.labels[key] = len(self.labels) + 1
            self.parts.append(f"#{self.labels[key]}=")
        self.emit_body(value)

    def emit_body(self, value: Any) -> None:
        parts = self.parts
        if isinstance(value, bool):
            parts.append("t" if value else "nil")
        elif isinstance(value, Symbol):
            parts.append(print_symbol(value))
        elif isinstance(value, Char):
            parts.append(print_char(value))
        elif isinstance(value, int):
            parts.append(str(value))
        elif isinstance(value, float):
            parts.append(print_float(value))
        elif isinstance(value, str):
            parts.append(print_string(value))
        elif isinstance(value, Cons):
            self.emit_cons(value)
        elif isinstance(value, Record):
            self.schedule((True, "#s("), *self.items(value.slots), (True, ")"))
        elif isinstance(value, list):
            self.schedule((True, "["), *self.items(value), (True, "]"))
        else:
            raise TypeError(f"cannot print {type(value).__name__} value {value!r} as Lisp")

    @staticmethod
    def items(values: list[Any]) -> list[tuple[bool, Any]]:
        pieces: list[tuple[bool, Any]] = []
        for idx, item in enumerate(values):
            if idx:
                pieces.append((True, " "))
            pieces.append((False, item))
        return pieces

    def emit_cons(self, value: Cons) -> None:
        token = quote_form_token(value)
        if token is not None and id(value.cdr) not in self.shared:
            self.schedule((True, token), (False, value.cdr.car))
            return
        pieces: list[tuple[bool, Any]] = [(True, "("), (False, value.car)]
        tail: Any = value.cdr
        while isinstance(tail, Cons):
            if id(tail) in self.shared:
                pieces += [(True, " . "), (False, tail)]
                break
            pieces += [(True, " "), (False, tail.car)]
            tail = tail.cdr
        else:
            if not (isinstance(tail, Symbol) and tail == NIL):
                pieces += [(True, " . "), (False, tail)]
        pieces.append((True, ")"))
        self.schedule(*pieces)


def to_lisp(value: Any) -> str:
    """Return the printed (read syntax) form of ``value``.

    ``True`` and ``False`` print as ``t`` and ``nil`` for convenience when building
    replacement values in Python.

    Raises:
        TypeError: If ``value`` has no Lisp read syntax (e.g. ``None``).
    """
    return _Printer(value).run(value)
