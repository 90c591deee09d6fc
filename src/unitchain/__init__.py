"""
unitchain: convert values between named units by chaining pairwise unit equivalences.

Each group (length, temperature, ...) holds equations of the form ``a=f(b)``
between two units. A conversion request is answered by composing those
equations along the shortest chain into one expression and evaluating it.
This module exposes a minimal, stable public API. The default converter is
built lazily to avoid import-time side effects.
"""

from importlib import metadata as _metadata


__license__ = "MIT"

# Try to read the installed package version first; fall back to pyproject.toml for local dev.
try:
    __version__ = _metadata.version("unitchain")
except _metadata.PackageNotFoundError:
    import tomllib
    with open("pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public names exposed by the package. Keep this minimal and stable.
__all__ = ["__version__", "__license__", "convert", "DEFAULT_CONVERTER"]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing aid only
    from unitchain.core.converter import Converter

_default_converter = None

# Lazy access helpers -------------------------------------------------------

def _get_default_converter() -> "Converter":
    # Import here to avoid import-time side-effects / circular imports.
    global _default_converter
    if _default_converter is None:
        from unitchain.core.converter import Converter
        from unitchain.factors.registry import DEFAULT_FACTORS
        _default_converter = Converter(DEFAULT_FACTORS)
    return _default_converter

def __getattr__(name: str) -> Any:
    """
    Lazy attribute access. 'DEFAULT_CONVERTER' and 'convert' build a converter
    over the built-in definitions on first use.
    """
    if name == "DEFAULT_CONVERTER":
        return _get_default_converter()
    if name == "convert":
        return _get_default_converter().convert
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

def __dir__() -> list[str]:
    # Improve discoverability in REPL / autocomplete.
    return sorted(list(globals().keys()) + ["convert", "DEFAULT_CONVERTER"])
