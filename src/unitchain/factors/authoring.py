from __future__ import annotations

from typing import Optional

from unitchain.core.evaluator import evaluate_expression
from unitchain.core.solver import EquationSolver, solve_for
from unitchain.errors import AuthoringError, DefinitionError, EvaluationError, ExpressionSyntaxError, SolverError
from unitchain.factors.equivalence import Equivalence, FactorGroup

_OTHER = {"a": "b", "b": "a"}


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def build_equation(a_qty: str = "1", b_qty: str = "1") -> str:
    """
    Equation stating that ``a_qty`` of unit A correspond to ``b_qty`` of
    unit B, e.g. 12 in per 1 ft -> ``a=b*12``.
    """
    a_qty, b_qty = a_qty.strip(), b_qty.strip()
    equation = "a=b"
    if a_qty != "1":
        equation += f"*{a_qty}"
    if b_qty != "1":
        equation += f"/{b_qty}"
    return equation


def new_equivalence(
    group: Optional[FactorGroup],
    unit: str,
    equivalent_unit: str,
    unit_qty: str = "1",
    equivalent_qty: str = "1",
) -> Equivalence:
    """
    Validate a new unit entered against ``group`` (``None`` for a group
    that does not exist yet) and return its equivalence.
    """
    unit, equivalent_unit = unit.strip(), equivalent_unit.strip()
    if not unit or not equivalent_unit:
        raise DefinitionError("Units name cannot be empty!")
    if unit == equivalent_unit:
        raise DefinitionError("Unit names must be unique!")
    if not (_is_number(unit_qty) and _is_number(equivalent_qty)):
        raise DefinitionError("Could not convert conversion factor to value!")

    if group is not None:
        if group.has_unit(unit):
            raise DefinitionError(f"Unit '{unit}' already exists!")
        if not group.has_unit(equivalent_unit):
            raise DefinitionError(
                f"Unit '{equivalent_unit}' is not defined in group '{group.name}'."
            )

    return Equivalence(unit, equivalent_unit, build_equation(unit_qty, equivalent_qty))


def scale_factor(equation: str, target: str, solver: EquationSolver = solve_for) -> float:
    """
    Multiplicative factor of ``target`` with the other symbol set to 1.

    ``scale_factor("a=b*12", "a")`` is 12.0 and
    ``scale_factor("a=b*12", "b")`` is 1/12.
    """
    if target not in _OTHER:
        raise AuthoringError(f"Can only derive a factor for 'a' or 'b', not '{target}'.")
    try:
        expression = solver(equation, target)
        return evaluate_expression(expression, {_OTHER[target]: 1.0})
    except (SolverError, ExpressionSyntaxError, EvaluationError) as e:
        raise AuthoringError(
            f"Could not derive a factor from '{equation}' ({e}). "
            "This relation must be edited in the definitions directly."
        ) from e


__all__ = ["build_equation", "new_equivalence", "scale_factor"]
