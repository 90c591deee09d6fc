from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Tuple

from unitchain.errors import DefinitionError


@dataclass(frozen=True, slots=True)
class Equivalence:
    """Relation ``a=f(b)`` between two units of one group.

    ``unit_a`` is the unit standing in for ``a`` in ``equation`` and
    ``unit_b`` the one standing in for ``b``.
    """

    unit_a: str
    unit_b: str
    equation: str

    def __post_init__(self) -> None:
        if not self.unit_a or not self.unit_b:
            raise DefinitionError("Unit names cannot be empty.")
        if self.unit_a == self.unit_b:
            raise DefinitionError("Equivalence definition must have two unique unit strings.")
        if not all(c in self.equation for c in ("a", "b", "=")):
            raise DefinitionError(
                f"Relationship between '{self.unit_a}' and '{self.unit_b}' "
                "must contain 'a', 'b', and '='."
            )

    @property
    def units(self) -> Tuple[str, str]:
        return (self.unit_a, self.unit_b)

    def relates(self, first: str, second: str) -> bool:
        """True if this equivalence links ``first`` and ``second`` (either order)."""
        return {first, second} == {self.unit_a, self.unit_b}

    def is_a_side(self, unit: str) -> bool:
        return unit == self.unit_a


@dataclass(frozen=True, slots=True)
class FactorGroup:
    """A named set of equivalences (e.g. "Length") shown as one tab/list."""

    name: str
    equivalences: Tuple[Equivalence, ...] = field(default_factory=tuple)
    visible: bool = True

    def __post_init__(self) -> None:
        if not self.name:
            raise DefinitionError("Group name cannot be empty.")
        # accept any iterable, store an immutable tuple
        object.__setattr__(self, "equivalences", tuple(self.equivalences))
        if not self.equivalences:
            raise DefinitionError(f"Group '{self.name}' has no equivalence definitions.")

    def unit_list(self, sort: bool = True) -> List[str]:
        """Every unit named by the group's equivalences, without duplicates."""
        seen: dict[str, None] = {}
        for eq in self.equivalences:
            seen.setdefault(eq.unit_a)
            seen.setdefault(eq.unit_b)
        units = list(seen)
        return sorted(units) if sort else units

    def has_unit(self, unit: str) -> bool:
        return any(unit in eq.units for eq in self.equivalences)

    def with_equivalence(self, equivalence: Equivalence) -> "FactorGroup":
        return replace(self, equivalences=self.equivalences + (equivalence,))

    def with_visibility(self, visible: bool) -> "FactorGroup":
        return replace(self, visible=bool(visible))

    @classmethod
    def from_triples(
        cls, name: str, triples: Iterable[Tuple[str, str, str]], visible: bool = True
    ) -> "FactorGroup":
        """Build a group from ``(unit_a, unit_b, equation)`` triples."""
        return cls(name, tuple(Equivalence(a, b, eq) for a, b, eq in triples), visible)


__all__ = ["Equivalence", "FactorGroup"]
