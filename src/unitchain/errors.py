"""
unitchain.errors
================

Error types raised by the conversion engine.

Every engine error is a ``ValueError`` so callers that only care about
"bad input" can keep catching that. The subclasses let the orchestration
layer and the authoring helpers tell the failure stages apart.
"""

from __future__ import annotations


class ConverterError(ValueError):
    """Base class for every failure reported by the engine."""


class ExpressionSyntaxError(ConverterError):
    """Imbalanced parentheses, unrecognized characters, malformed numbers."""


class EvaluationError(ConverterError):
    """The RPN queue could not be reduced to a single finite value."""


class SolverError(ConverterError):
    """An equation could not be rearranged for the requested symbol."""


class ConversionPathError(ConverterError):
    """Unknown group or unit, or no chain of equivalences between two units."""


class DefinitionError(ConverterError):
    """Invalid equivalence/group data or an invalid edit of the collection."""


class AuthoringError(ConverterError):
    """A user-entered relation could not be turned into a conversion factor."""


__all__ = [
    "ConverterError",
    "ExpressionSyntaxError",
    "EvaluationError",
    "SolverError",
    "ConversionPathError",
    "DefinitionError",
    "AuthoringError",
]
