"""
unitchain.core.solver
=====================

Rearranges an equivalence such as ``a=b*2.54`` or ``a=(b-32)*5/9`` so a
single symbol stands alone on the left-hand side.

Only "linear-ish" isolation is attempted. Each pass of the loop:

  * splits both sides into additive terms (signs belong to the term,
    splits happen only outside parentheses; exponent signs such as
    ``1e-3`` are part of a number token and never split),
  * moves terms holding the target to the left, all others to the right,
    flipping their sign,
  * refuses terms that mix several of the reserved symbols,
  * reduces the single remaining left term by stripping an enclosing
    group or by moving the multiplicative coefficient of the factor that
    holds the target over to the right-hand side.

Anything else (several target terms, the target in an exponent, ...) is
rejected with :class:`SolverError` rather than solved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, Tuple

from unitchain.core.tokens import (
    CLOSE,
    OPEN,
    RESERVED_SYMBOLS,
    Token,
    contains_symbol,
    number,
    operator,
    parentheses_balanced,
    render,
    symbol,
    symbols_in,
    tokenize,
)
from unitchain.errors import SolverError

Tokens = Tuple[Token, ...]

_TOO_COMPLICATED = "Expression is too complicated!"


class EquationSolver(Protocol):
    """Callable shape of :func:`solve_for`; injected into the path finder."""

    def __call__(self, equation: str, target: str) -> str: ...


@dataclass(frozen=True, slots=True)
class _Term:
    negative: bool
    body: Tokens

    def contains(self, name: str) -> bool:
        return contains_symbol(self.body, name)

    @property
    def combined(self) -> bool:
        return len(symbols_in(self.body)) > 1

    def inverted(self) -> "_Term":
        return _Term(not self.negative, self.body)


# ---------------------------------------------------------------------------
# Term handling
# ---------------------------------------------------------------------------
def split_terms(tokens: Sequence[Token]) -> list[_Term]:
    """Break a side into additive terms at top-level binary '+'/'-'."""
    terms: list[_Term] = []
    current: list[Token] = []
    negative = False
    depth = 0
    prev: Optional[Token] = None

    for tok in tokens:
        if depth == 0 and (tok.is_op("+") or tok.is_op("-")):
            if prev is not None and prev.ends_operand:
                terms.append(_Term(negative, tuple(current)))
                current = []
                negative = tok.text == "-"
                prev = tok
                continue
            if not current:
                # leading sign(s) of a term
                if tok.text == "-":
                    negative = not negative
                prev = tok
                continue
        if tok.is_lparen:
            depth += 1
        elif tok.is_rparen:
            depth -= 1
        current.append(tok)
        prev = tok

    terms.append(_Term(negative, tuple(current)))
    if any(not t.body for t in terms):
        raise SolverError(f"Missing term in '{render(tokens)}'.")
    return terms


def assemble(terms: Sequence[_Term]) -> Tokens:
    """Join terms back into one token sequence (inverse of split_terms)."""
    if not terms:
        return (number("0"),)

    out: list[Token] = []
    for idx, term in enumerate(terms):
        if term.negative:
            out.append(operator("-"))
            if idx == 0 and term.body[0].is_number:
                # "-2^2" would re-read as (-2)^2
                out.extend((OPEN, *term.body, CLOSE))
                continue
        elif idx > 0:
            out.append(operator("+"))
        out.extend(term.body)
    return tuple(out)


def normalize_negation(tokens: Sequence[Token], name: str) -> Tuple[Tokens, bool]:
    """
    Rewrite a '-' sitting directly in front of symbol ``name`` as an
    explicit multiplication by -1, e.g. ``2*-x`` -> ``2*-1*x`` and
    ``3-x`` -> ``3-1*x``. Returns the new tokens and whether anything
    changed.
    """
    out: list[Token] = []
    changed = False
    for tok in tokens:
        if tok.is_symbol and tok.text == name and out and out[-1].is_op("-"):
            out.pop()
            if out and out[-1].ends_operand:
                out.extend((operator("-"), number("1"), operator("*")))
            else:
                out.extend((number("-1"), operator("*")))
            changed = True
        out.append(tok)
    return tuple(out), changed


def _enclosing_group(body: Sequence[Token]) -> Optional[Tokens]:
    """Inner tokens if ``body`` is exactly one parenthesized group."""
    if len(body) < 2 or not body[0].is_lparen or not body[-1].is_rparen:
        return None
    depth = 0
    for i, tok in enumerate(body):
        if tok.is_lparen:
            depth += 1
        elif tok.is_rparen:
            depth -= 1
            if depth == 0 and i != len(body) - 1:
                return None
    return tuple(body[1:-1])


def _top_level_operators(tokens: Sequence[Token]) -> set[str]:
    ops: set[str] = set()
    depth = 0
    prev: Optional[Token] = None
    for tok in tokens:
        if tok.is_lparen:
            depth += 1
        elif tok.is_rparen:
            depth -= 1
        elif depth == 0 and tok.is_operator and prev is not None and prev.ends_operand:
            ops.add(tok.text)
        prev = tok
    return ops


def _target_factor(body: Sequence[Token], target: str) -> Tuple[Tokens, Tokens, Tokens]:
    """
    Locate the top-level factor holding ``target``: the bare symbol or a
    parenthesized group around it. Returns (before, factor, after).
    """
    found: list[Tuple[int, int]] = []
    depth = 0
    group_start = 0
    for i, tok in enumerate(body):
        if tok.is_lparen:
            if depth == 0:
                group_start = i
            depth += 1
        elif tok.is_rparen:
            depth -= 1
            if depth == 0 and contains_symbol(body[group_start:i], target):
                found.append((group_start, i + 1))
        elif depth == 0 and tok.is_symbol and tok.text == target:
            found.append((i, i + 1))

    if not found:
        raise SolverError(f"Left-hand side must contain '{target}'.")
    if len(found) > 1:
        raise SolverError(_TOO_COMPLICATED)
    lo, hi = found[0]
    return tuple(body[:lo]), tuple(body[lo:hi]), tuple(body[hi:])


def _wrap(term: _Term, op: str, operand: Sequence[Token]) -> _Term:
    return _Term(term.negative, (OPEN, *term.body, CLOSE, operator(op), OPEN, *operand, CLOSE))


def _cross_multiply(body: Tokens, rhs: list[_Term], target: str) -> Tuple[Tokens, list[_Term]]:
    """Move the coefficient around the target factor to the right-hand side."""
    before, factor, after = _target_factor(body, target)
    cannot_extract = SolverError(f"Could not extract '{target}' from left-hand side!")

    if after:
        rest = after[1:]
        ops = _top_level_operators(rest)
        if not rest or not (after[0].is_op("*") or after[0].is_op("/")):
            raise cannot_extract
        if ops - {"*", "/", "^"}:
            raise cannot_extract
        if after[0].is_op("*"):
            rhs = [_wrap(t, "/", rest) for t in rhs]
        elif not ops & {"*", "/"}:
            rhs = [_wrap(t, "*", rest) for t in rhs]
        else:
            # x/p*q == x*(1/p*q)
            rhs = [_wrap(t, "/", (number("1"), *after)) for t in rhs]

    if before:
        prefix, last = before[:-1], before[-1]
        if not prefix:
            raise cannot_extract
        if last.is_op("*"):
            rhs = [_wrap(t, "/", prefix) for t in rhs]
        elif last.is_op("/"):
            # p/x == r  ->  x == p/r
            joined = assemble(rhs)
            rhs = split_terms((OPEN, *prefix, CLOSE, operator("/"), OPEN, *joined, CLOSE))
        else:
            raise cannot_extract

    return factor, rhs


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def _separate_sides(equation: str) -> Tuple[str, str]:
    if "=" not in equation:
        raise SolverError("Could not separate LHS and RHS!")
    if equation.count("=") > 1:
        raise SolverError("Equation must contain exactly one '='.")
    lhs, rhs = (side.strip() for side in equation.split("="))
    if not lhs:
        raise SolverError("Left-hand side is empty!")
    if not rhs:
        raise SolverError("Right-hand side is empty!")
    return lhs, rhs


def solve_for(equation: str, target: str) -> str:
    """
    Isolate ``target`` ('a', 'b' or 'x') in ``equation`` and return the
    right-hand side as text.

    >>> solve_for("a=b*2.54", "b")
    '(a)/(2.54)'

    Raises:
      SolverError when the equation cannot be rearranged.
      ExpressionSyntaxError when a side contains unknown characters.
    """
    if target not in RESERVED_SYMBOLS:
        raise SolverError(f"Cannot solve for '{target}'; expected one of {', '.join(RESERVED_SYMBOLS)}.")

    lhs_text, rhs_text = _separate_sides(equation)
    if not parentheses_balanced(lhs_text):
        raise SolverError("Imbalanced parentheses on left-hand side!")
    if not parentheses_balanced(rhs_text):
        raise SolverError("Imbalanced parentheses on right-hand side!")

    lhs = tokenize(lhs_text)
    rhs = tokenize(rhs_text)
    if not (contains_symbol(lhs, target) or contains_symbol(rhs, target)):
        raise SolverError(f"Equation does not contain '{target}'.")

    goal = (symbol(target),)
    changed = True
    while changed and (lhs != goal or contains_symbol(rhs, target)):
        lh_terms: list[_Term] = []
        rh_terms: list[_Term] = []
        moved_left: list[_Term] = []
        moved_right: list[_Term] = []
        for term in split_terms(rhs):
            if term.combined:
                raise SolverError(_TOO_COMPLICATED)
            if term.contains(target):
                moved_left.append(term.inverted())
            else:
                rh_terms.append(term)
        for term in split_terms(lhs):
            if term.combined:
                raise SolverError(_TOO_COMPLICATED)
            if term.contains(target):
                lh_terms.append(term)
            else:
                moved_right.append(term.inverted())
        changed = bool(moved_left or moved_right)
        lh_terms += moved_left
        rh_terms += moved_right

        if len(lh_terms) > 1:
            # no factoring of common components
            raise SolverError(_TOO_COMPLICATED)
        if not lh_terms:
            raise SolverError(f"Left-hand side must contain '{target}'.")

        term = lh_terms[0]
        if term.body != goal or term.negative:
            if term.negative:
                # -T = R  ->  T = -R
                term = term.inverted()
                rh_terms = [t.inverted() for t in rh_terms]
            body, _ = normalize_negation(term.body, target)
            inner = _enclosing_group(body)
            if inner is not None:
                body = inner
            elif body != goal:
                body, rh_terms = _cross_multiply(body, rh_terms, target)
            changed = True
            term = _Term(False, body)

        lhs = assemble([term])
        rhs = assemble(rh_terms)

    if lhs != goal or contains_symbol(rhs, target):
        raise SolverError(_TOO_COMPLICATED)
    return render(rhs)


def solve_for_a(equation: str) -> str:
    return solve_for(equation, "a")


def solve_for_b(equation: str) -> str:
    return solve_for(equation, "b")


__all__ = [
    "EquationSolver",
    "split_terms",
    "assemble",
    "normalize_negation",
    "solve_for",
    "solve_for_a",
    "solve_for_b",
]
