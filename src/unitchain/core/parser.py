from __future__ import annotations

from functools import lru_cache
from typing import Dict, Sequence, Tuple

from unitchain.core.tokens import Token, parentheses_balanced, tokenize
from unitchain.errors import ExpressionSyntaxError

# --- Operator tables ------------------------------------------------
# lowest to highest
PRECEDENCE: Dict[str, int] = {
    "+": 2,
    "-": 2,
    "*": 3,
    "/": 3,
    "%": 3,
    "^": 4,
}
RIGHT_ASSOCIATIVE = frozenset("^")

RPN = Tuple[Token, ...]


def _displaces(incoming: Token, stacked: Token) -> bool:
    """Should ``stacked`` be moved to the output before ``incoming`` is pushed?"""
    new_prec = PRECEDENCE.get(incoming.text, 0)
    old_prec = PRECEDENCE.get(stacked.text, 0)
    if new_prec == 0 or old_prec == 0:
        return False
    if incoming.text in RIGHT_ASSOCIATIVE:
        return new_prec < old_prec
    return new_prec <= old_prec


# ---------------- Shunting-yard ----------------
class _ShuntingYard:
    """
    Turns an infix token sequence into reverse Polish notation.

      number, symbol -> output queue
      operator       -> pops stacked operators it displaces, then pushed
      '('            -> pushed
      ')'            -> pops to output until the matching '(' (both dropped)
    """

    def __init__(self, tokens: Sequence[Token]):
        self.tokens = tokens
        self.output: list[Token] = []
        self.stack: list[Token] = []

    def parse(self) -> RPN:
        for tok in self.tokens:
            if tok.is_number or tok.is_symbol:
                self.output.append(tok)
            elif tok.is_operator:
                self._push_operator(tok)
            elif tok.is_lparen:
                self.stack.append(tok)
            elif tok.is_rparen:
                self._close_paren()
            else:
                raise RuntimeError(f"Invalid token: {tok!r}")
        self._flush()
        return tuple(self.output)

    def _push_operator(self, tok: Token) -> None:
        while self.stack and self.stack[-1].is_operator and _displaces(tok, self.stack[-1]):
            self.output.append(self.stack.pop())
        self.stack.append(tok)

    def _close_paren(self) -> None:
        while self.stack and not self.stack[-1].is_lparen:
            self.output.append(self.stack.pop())
        if not self.stack:
            # counts were balanced, so this ')' came before its '('
            raise ExpressionSyntaxError("Unrecognized character: ')'.")
        self.stack.pop()

    def _flush(self) -> None:
        while self.stack:
            tok = self.stack.pop()
            if tok.is_lparen:
                raise ExpressionSyntaxError("Imbalanced parentheses!")
            self.output.append(tok)


def parse_tokens(tokens: Sequence[Token]) -> RPN:
    """Shunting-yard over an already tokenized expression."""
    return _ShuntingYard(tokens).parse()


# Cache the compiled queue only; bindings are applied at evaluation time.
@lru_cache(maxsize=4096)
def parse(text: str) -> RPN:
    """
    Parse infix ``text`` into a reverse Polish token queue.

    The parenthesis counts are checked before any scanning so ``"(1+2"``
    and ``"1+2)"`` both fail with "Imbalanced parentheses!".

    Raises:
      ExpressionSyntaxError on imbalance, stray ')' or unknown characters.
    """
    if not parentheses_balanced(text):
        raise ExpressionSyntaxError("Imbalanced parentheses!")
    return parse_tokens(tokenize(text))


__all__ = ["PRECEDENCE", "RIGHT_ASSOCIATIVE", "RPN", "parse", "parse_tokens"]
