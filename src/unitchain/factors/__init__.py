from typing import Any

__all__ = ["DEFAULT_FACTORS", "ConversionFactors", "Equivalence", "FactorGroup"]


def __getattr__(name: str) -> Any:
    # Import lazily so loading the records does not bootstrap the defaults.
    if name in ("DEFAULT_FACTORS", "ConversionFactors"):
        from unitchain.factors import registry
        return getattr(registry, name)
    if name in ("Equivalence", "FactorGroup"):
        from unitchain.factors import equivalence
        return getattr(equivalence, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
