from __future__ import annotations

import math
from typing import Callable, Dict, Mapping, Optional, Sequence

from unitchain.core.parser import parse
from unitchain.core.tokens import Token
from unitchain.errors import EvaluationError

Bindings = Mapping[str, float]


def _divide(left: float, right: float) -> float:
    if right == 0.0:
        raise EvaluationError("Division by zero!")
    return left / right


def _modulo(left: float, right: float) -> float:
    if right == 0.0:
        raise EvaluationError("Modulo by zero!")
    return left % right


def _power(left: float, right: float) -> float:
    try:
        return math.pow(left, right)
    except ValueError:
        raise EvaluationError(f"Cannot raise {left!r} to the power {right!r}.") from None
    except OverflowError:
        raise EvaluationError(f"Overflow while raising {left!r} to the power {right!r}.") from None


# (left, right) -> result; left is the operand that was pushed first
_BINARY: Dict[str, Callable[[float, float], float]] = {
    "+": lambda left, right: left + right,
    "-": lambda left, right: left - right,
    "*": lambda left, right: left * right,
    "/": _divide,
    "%": _modulo,
    "^": _power,
}


def _number_value(tok: Token) -> float:
    try:
        value = float(tok.text)
    except ValueError:
        raise EvaluationError(f"Could not convert {tok.text} to a number.") from None
    if not math.isfinite(value):
        raise EvaluationError(f"Could not convert {tok.text} to a number.")
    return value


def _symbol_value(tok: Token, bindings: Bindings) -> float:
    try:
        return float(bindings[tok.text])
    except KeyError:
        raise EvaluationError(f"Unable to evaluate '{tok.text}'.") from None


def _apply_operator(tok: Token, stack: list[float]) -> None:
    if len(stack) < 2:
        # the only unary operator is negation
        if tok.text != "-" or not stack:
            raise EvaluationError("Attempting to apply operator without two operands!")
        stack.append(-1.0 * stack.pop())
        return

    right = stack.pop()
    left = stack.pop()
    stack.append(_BINARY[tok.text](left, right))


def evaluate(rpn: Sequence[Token], bindings: Optional[Bindings] = None) -> float:
    """
    Reduce a reverse Polish token queue to a single float.

    ``bindings`` maps symbol names ('a', 'b', 'x') to values; an unbound
    symbol is an error.

    Raises:
      EvaluationError when operands are missing, values are left over
      ("Not enough operators!"), or a literal is not a finite number.
    """
    env: Bindings = bindings or {}
    stack: list[float] = []

    for tok in rpn:
        if tok.is_number:
            stack.append(_number_value(tok))
        elif tok.is_symbol:
            stack.append(_symbol_value(tok, env))
        elif tok.is_operator:
            _apply_operator(tok, stack)
        else:
            raise EvaluationError(f"Unable to evaluate '{tok.text}'.")

    if len(stack) > 1:
        raise EvaluationError("Not enough operators!")
    if not stack:
        raise EvaluationError("Expression produced no value!")
    return stack[0]


def evaluate_expression(text: str, bindings: Optional[Bindings] = None) -> float:
    """Parse and evaluate ``text`` in one step."""
    return evaluate(parse(text), bindings)


__all__ = ["Bindings", "evaluate", "evaluate_expression"]
