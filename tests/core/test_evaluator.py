import math

import pytest

from unitchain.core.evaluator import evaluate, evaluate_expression
from unitchain.core.parser import parse
from unitchain.errors import EvaluationError, ExpressionSyntaxError


# --------------------------
# Arithmetic
# --------------------------

@pytest.mark.parametrize("text, expected", [
    ("1+2*3", 7.0),
    ("2*(3+4)", 14.0),
    ("2(3+4)", 14.0),
    ("10/4", 2.5),
    ("10-4-3", 3.0),
    ("2^3^2", 512.0),
    ("7%3", 1.0),
    ("1e-3*1000", 1.0),
    ("-(2^2)", -4.0),
    ("0-2^2", -4.0),
    ("3*-2", -6.0),
])
def test_evaluate_expression(text, expected):
    assert math.isclose(evaluate_expression(text), expected)

def test_negative_literal_is_raised_as_a_whole():
    # "-2" is read as one literal before '^' applies
    assert evaluate_expression("-2^2") == 4.0

def test_unary_minus_on_group():
    assert evaluate_expression("-(273.15)+x", {"x": 373.15}) == pytest.approx(100.0)

def test_bindings():
    assert evaluate(parse("(x-32)*5/9"), {"x": 212}) == pytest.approx(100.0)
    assert evaluate_expression("a*b", {"a": 2, "b": 4}) == 8.0


# --------------------------
# Errors
# --------------------------

def test_unbound_symbol():
    with pytest.raises(EvaluationError, match="Unable to evaluate 'a'"):
        evaluate_expression("a+1")

def test_too_many_operands():
    with pytest.raises(EvaluationError, match="Not enough operators!"):
        evaluate_expression("1 2")

@pytest.mark.parametrize("text", ["2+", "*", "2*"])
def test_missing_operand(text):
    with pytest.raises(EvaluationError, match="without two operands"):
        evaluate_expression(text)

def test_empty_expression():
    with pytest.raises(EvaluationError, match="no value"):
        evaluate_expression("")

def test_division_by_zero():
    with pytest.raises(EvaluationError, match="Division by zero"):
        evaluate_expression("1/0")

def test_modulo_by_zero():
    with pytest.raises(EvaluationError, match="Modulo by zero"):
        evaluate_expression("1%0")

def test_invalid_power():
    with pytest.raises(EvaluationError):
        evaluate_expression("(0-8)^0.5")

def test_bad_literal():
    with pytest.raises(EvaluationError, match="Could not convert"):
        evaluate_expression("2e")

def test_syntax_errors_propagate():
    with pytest.raises(ExpressionSyntaxError):
        evaluate_expression("(1+2")

def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        evaluate_expression("1/0")
