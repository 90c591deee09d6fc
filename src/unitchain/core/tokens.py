"""
unitchain.core.tokens
=====================

Tokenizer/classifier for the small arithmetic language used by unit
equivalences (``a=b*2.54``, ``a=(b-32)*5/9`` ...).

Text is scanned once, left to right, and turned into immutable
:class:`Token` objects. Every later stage (parser, evaluator, solver,
path synthesis) works on tokens instead of re-scanning substrings.

Recognition order for each position:
  1. number   -- digits, at most one '.', optional 'e'/'E' exponent whose
                 sign does not end the literal; a leading '-' belongs to
                 the number only right after an operator or '(' (or at the
                 very start of the text)
  2. symbol   -- 'a', 'b' or the free variable 'x'
  3. operator -- one of + - * / % ^
  4. '(' and ')'
A '(' that does not follow an operator gets an implicit '*' in front of
it, so ``2(3+4)`` reads as ``2*(3+4)``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple

from unitchain.errors import ExpressionSyntaxError

# --- Token kinds ------------------------------------------------------------
NUMBER = "number"
SYMBOL = "symbol"
OPERATOR = "operator"
LPAREN = "lparen"
RPAREN = "rparen"

FREE_VARIABLE = "x"
RESERVED_SYMBOLS: Tuple[str, ...] = ("a", "b", FREE_VARIABLE)
OPERATORS = "+-*/%^"


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexical element; ``text`` is exactly what gets rendered."""

    kind: str
    text: str

    @property
    def is_number(self) -> bool:
        return self.kind == NUMBER

    @property
    def is_symbol(self) -> bool:
        return self.kind == SYMBOL

    @property
    def is_operator(self) -> bool:
        return self.kind == OPERATOR

    @property
    def is_lparen(self) -> bool:
        return self.kind == LPAREN

    @property
    def is_rparen(self) -> bool:
        return self.kind == RPAREN

    @property
    def ends_operand(self) -> bool:
        # True when a following '+'/'-' must be a binary operator
        return self.kind in (NUMBER, SYMBOL, RPAREN)

    def is_op(self, op: str) -> bool:
        return self.kind == OPERATOR and self.text == op

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.text!r})"


def number(text: str) -> Token:
    return Token(NUMBER, text)


def symbol(name: str) -> Token:
    if name not in RESERVED_SYMBOLS:
        raise ValueError(f"Unknown symbol {name!r}; expected one of {RESERVED_SYMBOLS}")
    return Token(SYMBOL, name)


def operator(op: str) -> Token:
    if len(op) != 1 or op not in OPERATORS:
        raise ValueError(f"Unknown operator {op!r}")
    return Token(OPERATOR, op)


OPEN = Token(LPAREN, "(")
CLOSE = Token(RPAREN, ")")


# ---------------- Scanner ----------------
class _Tokenizer:
    """Index-based scanner; ``last_was_operator`` drives unary minus and
    implicit multiplication."""

    def __init__(self, text: str):
        self.s = text
        self.n = len(text)
        self.i = 0
        self.last_was_operator = True
        self.tokens: list[Token] = []

    def tokenize(self) -> Tuple[Token, ...]:
        while True:
            self._skip_ws()
            if self.i >= self.n:
                break
            self._next()
        return tuple(self.tokens)

    def _next(self) -> None:
        ch = self.s[self.i]

        num = self._scan_number()
        if num is not None:
            self._emit(number(num), operator_like=False)
        elif ch in RESERVED_SYMBOLS:
            self.i += 1
            self._emit(Token(SYMBOL, ch), operator_like=False)
        elif ch in OPERATORS:
            self.i += 1
            self._emit(Token(OPERATOR, ch), operator_like=True)
        elif ch == "(":
            if not self.last_was_operator:
                self.tokens.append(Token(OPERATOR, "*"))
            self.i += 1
            self._emit(OPEN, operator_like=True)
        elif ch == ")":
            self.i += 1
            self._emit(CLOSE, operator_like=False)
        else:
            raise ExpressionSyntaxError(f"Unrecognized character: '{ch}'.")

    def _emit(self, tok: Token, *, operator_like: bool) -> None:
        self.tokens.append(tok)
        self.last_was_operator = operator_like

    # ---- number helpers ----
    def _starts_number(self, j: int) -> bool:
        return j < self.n and (self.s[j].isdigit() or self.s[j] == ".")

    def _scan_number(self):
        s, n, i0 = self.s, self.n, self.i
        if s[i0] == "-":
            if not (self.last_was_operator and self._starts_number(i0 + 1)):
                return None
            j = i0 + 1
        elif self._starts_number(i0):
            j = i0
        else:
            return None

        found_decimal = s[j] == "."
        j += 1
        while j < n:
            c = s[j]
            if c == ".":
                if found_decimal:
                    raise ExpressionSyntaxError(
                        f"Malformed number '{s[i0:j + 1]}': more than one decimal point."
                    )
                found_decimal = True
            elif c in "eE":
                # the exponent sign is part of the literal
                if j + 1 < n and s[j + 1] in "+-":
                    j += 1
            elif not c.isdigit():
                break
            j += 1

        self.i = j
        return s[i0:j]

    def _skip_ws(self) -> None:
        s, n, i = self.s, self.n, self.i
        while i < n and s[i].isspace():
            i += 1
        self.i = i


def tokenize(text: str) -> Tuple[Token, ...]:
    """Split ``text`` into tokens. Raises :class:`ExpressionSyntaxError`."""
    return _Tokenizer(text).tokenize()


def render(tokens: Iterable[Token]) -> str:
    """Inverse of :func:`tokenize` (modulo whitespace and implicit '*')."""
    return "".join(t.text for t in tokens)


def contains_symbol(tokens: Sequence[Token], name: str) -> bool:
    return any(t.kind == SYMBOL and t.text == name for t in tokens)


def symbols_in(tokens: Sequence[Token]) -> set[str]:
    return {t.text for t in tokens if t.kind == SYMBOL}


def parentheses_balanced(text: str) -> bool:
    """Counts only; nesting order is checked later by the parser."""
    return text.count("(") == text.count(")")


__all__ = [
    "Token",
    "NUMBER",
    "SYMBOL",
    "OPERATOR",
    "LPAREN",
    "RPAREN",
    "FREE_VARIABLE",
    "RESERVED_SYMBOLS",
    "OPERATORS",
    "OPEN",
    "CLOSE",
    "number",
    "symbol",
    "operator",
    "tokenize",
    "render",
    "contains_symbol",
    "symbols_in",
    "parentheses_balanced",
]
