from __future__ import annotations

import logging
from typing import Callable, Dict, List, NamedTuple, Optional

from unitchain.core.evaluator import evaluate
from unitchain.core.graph import find_path
from unitchain.core.parser import parse
from unitchain.core.solver import EquationSolver, solve_for
from unitchain.core.tokens import FREE_VARIABLE
from unitchain.errors import ConversionPathError, ConverterError, EvaluationError
from unitchain.factors.registry import ConversionFactors

logger = logging.getLogger(__name__)

# (group, in_unit, out_unit, *, solver, source) -> expression in x
PathFinder = Callable[..., str]


class ConversionResult(NamedTuple):
    value: float
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Converter:
    """
    Converts values between units of one group, memoizing the composed
    expression for every ``(group, in_unit, out_unit)`` triple.

    The cache is emptied whenever ``factors`` reports a change (and on
    :meth:`clear_cache`). Instances are not meant to be shared between
    threads without external locking.
    """

    def __init__(
        self,
        factors: ConversionFactors,
        *,
        path_finder: PathFinder = find_path,
        solver: EquationSolver = solve_for,
    ) -> None:
        self.factors = factors
        self._path_finder = path_finder
        self._solver = solver
        self._cache: Dict[str, str] = {}
        factors.subscribe(self._on_factors_changed)

    # -------------------------- cache --------------------------------------
    @staticmethod
    def cache_key(group: str, in_unit: str, out_unit: str) -> str:
        return f"{group}:{in_unit}->{out_unit}"

    def clear_cache(self) -> None:
        self._cache.clear()

    def cached_keys(self) -> List[str]:
        return list(self._cache)

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def _on_factors_changed(self, _factors: ConversionFactors) -> None:
        logger.debug("dropping %d cached conversions", len(self._cache))
        self.clear_cache()

    # -------------------------- public API ---------------------------------
    def conversion_expression(self, group: str, in_unit: str, out_unit: str) -> str:
        """Composed expression (in ``x``) for the triple; raises on failure."""
        key = self.cache_key(group, in_unit, out_unit)
        expression = self._cache.get(key)
        if expression is not None:
            logger.debug("cache hit %s", key)
            return expression

        logger.debug("cache miss %s", key)
        expression = self._create_conversion(group, in_unit, out_unit)
        self._cache[key] = expression
        return expression

    def evaluate_conversion(self, expression: str, value: float) -> float:
        """Bind ``value`` to the free variable and evaluate ``expression``."""
        try:
            bound = float(value)
        except (OverflowError, ValueError, TypeError) as e:
            raise EvaluationError(f"Could not convert input value to a number: {e}") from e
        logger.debug("evaluating %s with %s=%s", expression, FREE_VARIABLE, bound)
        return evaluate(parse(expression), {FREE_VARIABLE: bound})

    def try_convert(self, group: str, in_unit: str, out_unit: str, value: float) -> ConversionResult:
        """Like :meth:`convert` but also reports what went wrong.

        On failure ``value`` is returned unchanged together with the message.
        """
        try:
            expression = self.conversion_expression(group, in_unit, out_unit)
            return ConversionResult(self.evaluate_conversion(expression, value))
        except ConverterError as e:
            logger.warning(
                "Error evaluating conversion %s: %s",
                self.cache_key(group, in_unit, out_unit),
                e,
            )
            return ConversionResult(value, str(e))

    def convert(self, group: str, in_unit: str, out_unit: str, value: float) -> float:
        """Convert ``value``; on any engine error the input value comes back."""
        return self.try_convert(group, in_unit, out_unit, value).value

    def solve_for_a(self, equation: str) -> str:
        return self._solver(equation, "a")

    def solve_for_b(self, equation: str) -> str:
        return self._solver(equation, "b")

    # ------------------------- internals -----------------------------------
    def _create_conversion(self, group: str, in_unit: str, out_unit: str) -> str:
        found = self.factors.find(group)
        if found is None:
            raise ConversionPathError(
                f"Could not find a conversion path from '{in_unit}' to '{out_unit}': "
                f"unknown group '{group}'."
            )
        return self._path_finder(
            found, in_unit, out_unit, solver=self._solver, source=self.factors.source
        )


__all__ = ["Converter", "ConversionResult", "PathFinder"]
