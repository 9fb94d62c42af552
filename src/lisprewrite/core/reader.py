# topmark:header:start
#
#   project      : LispRewrite
#   file         : reader.py
#   file_relpath : src/lisprewrite/core/reader.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Value reader for Emacs Lisp read syntax.

[`Reader.read_next`][lisprewrite.core.reader.Reader.read_next] converts the text
at a cursor into one value and the cursor just past it. Failures are reported as
[`ReaderError`][lisprewrite.core.errors.ReaderError] with a disambiguated
[`ReadFailure`][lisprewrite.core.errors.ReadFailure] kind, so callers can tell
"end of input" and "legal only inside a larger expression" apart from genuine
syntax errors.

Graph labels (``#N=`` / ``#N#``) are scoped to a single ``read_next`` call, just
like a single call to the Lisp ``read`` function. Reading a fragment of a larger
form can therefore hit an occurrence whose definition lies outside the fragment:

* a bare occurrence raises ``UNRESOLVED_OCCURRENCE`` just past the ``#N#`` token;
* a container embedding one is read to its end, then raises
  ``INCOMPLETE_CONTAINER`` just past its closing delimiter.
"""

from __future__ import annotations

import re
import unicodedata
from typing import TYPE_CHECKING, Any, Final

from lisprewrite.config.logging import get_logger
from lisprewrite.config.options import RewriteOptions
from lisprewrite.core.errors import ReaderError, ReadFailure
from lisprewrite.core.values import (
    BACKQUOTE,
    FUNCTION,
    NIL,
    QUOTE,
    UNQUOTE,
    UNQUOTE_SPLICING,
    Char,
    Cons,
    Record,
    Symbol,
    lisp_list,
)

if TYPE_CHECKING:
    from lisprewrite.config.logging import RewriteLogger

logger: RewriteLogger = get_logger(__name__)

WHITESPACE: Final[str] = " \t\n\r\f"
# Characters that end a symbol or number token (besides whitespace and the comment start).
TOKEN_DELIMITERS: Final[str] = "()[]\"'`,"

INT_RE: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+\.?\Z")
FLOAT_RE: Final[re.Pattern[str]] = re.compile(
    r"[+-]?(?:[0-9]*\.[0-9]+(?:e[+-]?[0-9]+)?|[0-9]+(?:\.[0-9]*)?e[+-]?[0-9]+)\Z"
)
SPECIAL_FLOAT_RE: Final[re.Pattern[str]] = re.compile(r"([+-]?)[0-9]+\.[0-9]+e\+(INF|NaN)\Z")
_HEX_RE: Final[re.Pattern[str]] = re.compile(r"[0-9a-fA-F]+")
_OCT_RE: Final[re.Pattern[str]] = re.compile(r"[0-7]{1,3}")
_DIGITS_RE: Final[re.Pattern[str]] = re.compile(r"[0-9]+")

# Emacs modifier bits for character literals.
META_BIT: Final[int] = 1 << 27
CTRL_BIT: Final[int] = 1 << 26
SHIFT_BIT: Final[int] = 1 << 25
HYPER_BIT: Final[int] = 1 << 24
SUPER_BIT: Final[int] = 1 << 23
ALT_BIT: Final[int] = 1 << 22

MAX_UNICODE: Final[int] = 0x10FFFF

_MODIFIERS: Final[dict[str, int]] = {
    "M": META_BIT,
    "S": SHIFT_BIT,
    "H": HYPER_BIT,
    "s": SUPER_BIT,
    "A": ALT_BIT,
}

_SIMPLE_ESCAPES: Final[dict[str, int]] = {
    "n": 10,
    "t": 9,
    "r": 13,
    "f": 12,
    "e": 27,
    "a": 7,
    "b": 8,
    "v": 11,
    "d": 127,
    "s": 32,
}


class _Placeholder:
    """Stand-in for a graph label whose definition is still being read."""

    __slots__ = ("label", "used")

    def __init__(self, label: int) -> None:
        self.label = label
        self.used = False


class _Unresolved:
    """Marker for an occurrence whose label is defined outside the text being read."""

    __slots__ = ("label",)

    def __init__(self, label: int) -> None:
        self.label = label

    def __repr__(self) -> str:
        return f"#{self.label}#"


def _ctrlify(code: int) -> int:
    """Apply the control modifier the way the Lisp reader does."""
    if code == ord("?"):
        return 127
    base = code & ~(META_BIT | SHIFT_BIT | HYPER_BIT | SUPER_BIT | ALT_BIT)
    mods = code - base
    if ord("a") <= base <= ord("z"):
        base -= 32
    if ord("@") <= base <= ord("_"):
        return (base & 0x1F) | mods
    return code | CTRL_BIT


def _substitute(tree: Any, placeholder: _Placeholder, obj: Any) -> None:
    """Replace every reference to ``placeholder`` inside ``tree`` with ``obj``."""
    seen: set[int] = set()
    stack: list[Any] = [tree]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        if isinstance(node, Cons):
            if node.car is placeholder:
                node.car = obj
            if node.cdr is placeholder:
                node.cdr = obj
            stack.extend((node.car, node.cdr))
        elif isinstance(node, (list, Record)):
            items: list[Any] = node if isinstance(node, list) else node.slots
            for idx, item in enumerate(items):
                if item is placeholder:
                    items[idx] = obj
            stack.extend(items)


class _Sentinel:
    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"<{self.name}>"


# A frame needs another form before it can finish.
_MORE: Final[_Sentinel] = _Sentinel("more")
# read_element pushed a frame instead of reading a value.
_OPENED: Final[_Sentinel] = _Sentinel("opened")


class _Frame:
    """An open container or prefix waiting for the forms inside it."""

    def feed(self, value: Any) -> None:
        raise NotImplementedError

    def poll(self, parser: _Parser) -> Any:
        """Return the finished value, or ``_MORE`` when another form is needed."""
        raise NotImplementedError


class _ListFrame(_Frame):
    def __init__(self) -> None:
        self.items: list[Any] = []
        self.tail: Any = NIL
        self.want_tail = False
        self.has_tail = False

    def feed(self, value: Any) -> None:
        if self.want_tail:
            self.tail = value
            self.want_tail = False
            self.has_tail = True
        else:
            self.items.append(value)

    def poll(self, parser: _Parser) -> Any:
        parser.skip_trivia()
        if parser.i >= parser.n:
            raise parser.fail("unterminated list")
        c = parser.text[parser.i]
        if c == ")":
            parser.i += 1
            return lisp_list(*self.items, tail=self.tail)
        if self.has_tail:
            raise parser.fail("expected ')' after the dotted tail")
        if c == "]":
            raise parser.fail("mismatched ']'")
        if parser.at_dot():
            if not self.items:
                raise parser.fail("'.' at the start of a list")
            parser.i += 1
            self.want_tail = True
        return _MORE


class _SequenceFrame(_Frame):
    def __init__(self, close: str, record: bool = False) -> None:
        self.close = close
        self.record = record
        self.items: list[Any] = []

    def feed(self, value: Any) -> None:
        self.items.append(value)

    def poll(self, parser: _Parser) -> Any:
        parser.skip_trivia()
        if parser.i >= parser.n:
            raise parser.fail(f"missing {self.close!r}")
        c = parser.text[parser.i]
        if c == self.close:
            parser.i += 1
            if not self.record:
                return self.items
            if not self.items:
                raise parser.fail("empty record")
            return Record(self.items)
        if c in ")]":
            raise parser.fail(f"mismatched {c!r}")
        return _MORE


class _PrefixFrame(_Frame):
    """A shorthand token; finishes with the quote-form around the next form."""

    def __init__(self, head: Symbol) -> None:
        self.head = head
        self.operand: Any = _MORE

    def feed(self, value: Any) -> None:
        self.operand = value

    def poll(self, parser: _Parser) -> Any:
        if self.operand is _MORE:
            return _MORE
        return lisp_list(self.head, self.operand)


class _LabelFrame(_Frame):
    """A ``#N=`` definition; finishes with the labelled form."""

    def __init__(self, parser: _Parser, label: int) -> None:
        self.label = label
        self.placeholder = _Placeholder(label)
        self.obj: Any = _MORE
        parser.labels[label] = self.placeholder

    def feed(self, value: Any) -> None:
        self.obj = value

    def poll(self, parser: _Parser) -> Any:
        obj = self.obj
        if obj is _MORE:
            return _MORE
        if obj is self.placeholder:
            raise parser.fail(f"#{self.label}= refers to itself")
        parser.labels[self.label] = obj
        if self.placeholder.used:
            _substitute(obj, self.placeholder, obj)
        return obj


class _Parser:
    """Single-use parser state for one ``read_next`` call."""

    def __init__(self, text: str, pos: int, options: RewriteOptions) -> None:
        self.text = text
        self.n = len(text)
        self.i = pos
        self.start = pos
        self.options = options
        self.labels: dict[int, Any] = {}
        self.unresolved = False
        self.delimiters = WHITESPACE + TOKEN_DELIMITERS + options.comment_start

    # ---- Failures ------------------------------------------------------------

    def fail(self, reason: str, kind: ReadFailure = ReadFailure.MALFORMED) -> ReaderError:
        return ReaderError(kind, position=self.i, start=self.start, reason=reason)

    # ---- Lexical helpers -----------------------------------------------------

    def skip_trivia(self) -> None:
        text, comment = self.text, self.options.comment_start
        while self.i < self.n:
            c = text[self.i]
            if c in WHITESPACE:
                self.i += 1
            elif c == comment:
                nl = text.find("\n", self.i)
                self.i = self.n if nl < 0 else nl
            else:
                break

    def at_delimiter(self) -> bool:
        return self.i >= self.n or self.text[self.i] in self.delimiters

    def at_dot(self) -> bool:
        return (
            self.i < self.n
            and self.text[self.i] == "."
            and (self.i + 1 >= self.n or self.text[self.i + 1] in self.delimiters)
        )

    # ---- Forms ---------------------------------------------------------------

    def read_form(self, top: bool = False) -> Any:
        """Read one form; open containers and prefixes wait on an explicit stack."""
        stack: list[_Frame] = []
        value: Any = _MORE
        while True:
            if value is _MORE:
                value = self.read_element(stack, top and not stack)
                if value is _OPENED:
                    value = stack[-1].poll(self)
                    if value is not _MORE:
                        stack.pop()
                continue
            if not stack:
                return value
            frame = stack[-1]
            frame.feed(value)
            value = frame.poll(self)
            if value is not _MORE:
                stack.pop()

    def read_element(self, stack: list[_Frame], top: bool) -> Any:
        """Read an atom, or push the frame it opens and return ``_OPENED``."""
        self.skip_trivia()
        if self.i >= self.n:
            raise self.fail("end of input inside an expression")
        c = self.text[self.i]
        frame: Any
        if c == "(":
            self.i += 1
            frame = _ListFrame()
        elif c == "[":
            self.i += 1
            frame = _SequenceFrame("]")
        elif c in ")]":
            raise self.fail(f"unexpected {c!r}")
        elif c == '"':
            return self.read_string()
        elif c == "?":
            return self.read_char()
        elif c == "'":
            self.i += 1
            frame = _PrefixFrame(QUOTE)
        elif c == "`":
            self.i += 1
            frame = _PrefixFrame(BACKQUOTE)
        elif c == ",":
            self.i += 1
            if self.i < self.n and self.text[self.i] == "@":
                self.i += 1
                frame = _PrefixFrame(UNQUOTE_SPLICING)
            else:
                frame = _PrefixFrame(UNQUOTE)
        elif c == "#":
            frame = self.read_dispatch(top)
            if not isinstance(frame, _Frame):
                return frame
        elif self.at_dot():
            self.i += 1
            if top:
                raise self.fail("dotted-pair separator outside a list", ReadFailure.DANGLING_DOT)
            raise self.fail("unexpected '.'")
        else:
            return self.read_atom()
        stack.append(frame)
        return _OPENED

    def read_dispatch(self, top: bool) -> Any:
        """Read a ``#`` syntax: a value, or the frame of a prefix, record or label."""
        text = self.text
        nxt = text[self.i + 1] if self.i + 1 < self.n else ""
        if nxt == "'":
            self.i += 2
            return _PrefixFrame(FUNCTION)
        if nxt == "#":
            self.i += 2
            return Symbol("")
        if nxt == "s" and text.startswith("(", self.i + 2):
            self.i += 3
            return _SequenceFrame(")", record=True)
        if nxt == ":":
            self.i += 2
            if self.at_delimiter():
                return Symbol("")
            return self.read_atom(symbol_only=True)
        if nxt in ("x", "X", "o", "O", "b", "B"):
            self.i += 2
            token_start = self.i
            token, _ = self.read_token()
            base = {"x": 16, "o": 8, "b": 2}[nxt.lower()]
            try:
                return int(token, base)
            except ValueError:
                self.i = token_start
                raise self.fail(f"invalid radix-{base} integer {token!r}") from None
        m = _DIGITS_RE.match(text, self.i + 1)
        if m is not None and m.end() < self.n and text[m.end()] in "=#":
            label = int(m.group())
            marker = text[m.end()]
            self.i = m.end() + 1
            if marker == "=":
                return _LabelFrame(self, label)
            return self.read_occurrence(label, top)
        raise self.fail(f"unsupported '#' syntax at {text[self.i:self.i + 3]!r}")

    def read_occurrence(self, label: int, top: bool) -> Any:
        if label in self.labels:
            found = self.labels[label]
            if isinstance(found, _Placeholder):
                found.used = True
            return found
        if top:
            raise self.fail(f"#{label}# is not defined here", ReadFailure.UNRESOLVED_OCCURRENCE)
        self.unresolved = True
        return _Unresolved(label)

    # ---- Atoms ---------------------------------------------------------------

    def read_token(self) -> tuple[str, bool]:
        """Read a symbol/number token; return its text and whether it had escapes."""
        chars: list[str] = []
        escaped = False
        text = self.text
        while self.i < self.n and text[self.i] not in self.delimiters:
            c = text[self.i]
            if c == "\\":
                if self.i + 1 >= self.n:
                    raise self.fail("backslash at end of input")
                chars.append(text[self.i + 1])
                escaped = True
                self.i += 2
                continue
            chars.append(c)
            self.i += 1
        return "".join(chars), escaped

    def read_atom(self, symbol_only: bool = False) -> Any:
        token, escaped = self.read_token()
        if not token and not escaped:
            raise self.fail("empty token")
        if not escaped and not symbol_only:
            if INT_RE.match(token):
                return int(token.rstrip("."))
            special = SPECIAL_FLOAT_RE.match(token)
            if special:
                sign = -1.0 if special.group(1) == "-" else 1.0
                return sign * float("inf") if special.group(2) == "INF" else float("nan")
            if FLOAT_RE.match(token):
                return float(token)
        if self.options.case_fold:
            token = token.lower()
        return Symbol(token)

    def read_string(self) -> str:
        text = self.text
        self.i += 1
        out: list[str] = []
        while True:
            if self.i >= self.n:
                raise self.fail("unterminated string")
            c = text[self.i]
            if c == '"':
                self.i += 1
                return "".join(out)
            if c != "\\":
                out.append(c)
                self.i += 1
                continue
            self.i += 1
            if self.i >= self.n:
                raise self.fail("unterminated string")
            e = text[self.i]
            if e in "\n ":
                self.i += 1
                continue
            out.append(self.string_char(self.read_escape()))

    def string_char(self, code: int) -> str:
        """Return the string character for an escape's code.

        Meta on an ASCII character sets its high bit, as in a unibyte Emacs string.
        Other modifiers have no meaning inside a string.
        """
        if code & META_BIT and code & ~META_BIT < 0x80:
            code = (code & ~META_BIT) | 0x80
        if code > MAX_UNICODE:
            raise self.fail("invalid character in string")
        return chr(code)

    def read_char(self) -> Char:
        self.i += 1
        if self.i >= self.n:
            raise self.fail("end of input after '?'")
        if self.text[self.i] == "\\":
            self.i += 1
            code = self.read_escape()
        else:
            code = ord(self.text[self.i])
            self.i += 1
        if self.i < self.n and self.text[self.i] not in self.delimiters:
            raise self.fail("invalid character literal")
        return Char(code)

    def read_escape(self) -> int:
        """Decode the escape sequence at ``self.i`` (just past the backslash).

        Modifier prefixes (``\\C-``, ``\\^``, ``\\M-``...) can be stacked; they are
        applied to the operand innermost first.
        """
        text = self.text
        pending: list[int] = []
        while True:
            if self.i >= self.n:
                raise self.fail("incomplete escape sequence")
            e = text[self.i]
            nxt = text[self.i + 1] if self.i + 1 < self.n else ""
            if e == "^" or (e == "C" and nxt == "-"):
                self.i += 1 if e == "^" else 2
                pending.append(CTRL_BIT)
            elif e in _MODIFIERS and nxt == "-":
                self.i += 2
                pending.append(_MODIFIERS[e])
            else:
                code = self.read_plain_escape(e, nxt)
                break
            if self.i >= self.n:
                raise self.fail("incomplete modifier escape")
            if text[self.i] != "\\":
                code = ord(text[self.i])
                self.i += 1
                break
            self.i += 1
        for bit in reversed(pending):
            code = _ctrlify(code) if bit == CTRL_BIT else code | bit
        return code

    def read_plain_escape(self, e: str, nxt: str) -> int:
        text = self.text
        if e == "N" and nxt == "{":
            close = text.find("}", self.i + 2)
            if close < 0:
                raise self.fail("unterminated \\N{...} escape")
            name = text[self.i + 2 : close]
            self.i = close + 1
            return self._lookup_char_name(name)
        if e in "uU":
            width = 4 if e == "u" else 8
            digits = text[self.i + 1 : self.i + 1 + width]
            if len(digits) != width or not _HEX_RE.fullmatch(digits):
                raise self.fail(f"invalid \\{e} escape")
            self.i += 1 + width
            code = int(digits, 16)
            if code > MAX_UNICODE:
                raise self.fail(f"non-Unicode character \\{e}{digits}")
            return code
        if e == "x":
            m = _HEX_RE.match(text, self.i + 1)
            if m is None:
                raise self.fail("invalid \\x escape")
            self.i = m.end()
            return int(m.group(), 16)
        m = _OCT_RE.match(text, self.i)
        if m is not None:
            self.i = m.end()
            return int(m.group(), 8)
        self.i += 1
        return _SIMPLE_ESCAPES.get(e, ord(e))

    def _lookup_char_name(self, name: str) -> int:
        if name.startswith("U+"):
            if not _HEX_RE.fullmatch(name[2:]):
                raise self.fail(f"invalid code point {name!r}")
            code = int(name[2:], 16)
            if code > MAX_UNICODE:
                raise self.fail(f"invalid code point {name!r}")
            return code
        try:
            return ord(unicodedata.lookup(" ".join(name.split())))
        except KeyError:
            raise self.fail(f"unknown character name {name!r}") from None


class Reader:
    """Read Lisp values from text, one expression at a time.

    Args:
        options (RewriteOptions | None): Parser-mode options; defaults apply when ``None``.
    """

    def __init__(self, options: RewriteOptions | None = None) -> None:
        self.options: RewriteOptions = options or RewriteOptions()

    def read_next(self, text: str, pos: int) -> tuple[Any, int]:
        """Read the expression starting at or after ``pos``.

        Args:
            text (str): Source text.
            pos (int): Cursor to start reading from; leading whitespace and comments
                are skipped.

        Returns:
            tuple[Any, int]: The value and the offset just past its last character.

        Raises:
            ReaderError: With ``END_OF_INPUT`` when nothing but trivia remains, one of
                the unreadable-subform kinds, or ``MALFORMED``.
        """
        parser = _Parser(text, pos, self.options)
        parser.skip_trivia()
        if parser.i >= parser.n:
            raise parser.fail("end of input", ReadFailure.END_OF_INPUT)
        value = parser.read_form(top=True)
        if parser.unresolved:
            raise parser.fail(
                "expression refers to a graph label defined outside it",
                ReadFailure.INCOMPLETE_CONTAINER,
            )
        logger.trace("read %r at %d..%d", value, pos, parser.i)
        return value, parser.i

    def read_all(self, text: str) -> list[Any]:
        """Read every top-level expression of ``text``."""
        values: list[Any] = []
        pos = 0
        while True:
            try:
                value, pos = self.read_next(text, pos)
            except ReaderError as exc:
                if exc.kind is ReadFailure.END_OF_INPUT:
                    return values
                raise
            values.append(value)


def read_all(text: str, options: RewriteOptions | None = None) -> list[Any]:
    """Read every top-level expression of ``text``."""
    return Reader(options).read_all(text)
