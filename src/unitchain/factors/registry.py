"""
unitchain.factors.registry
==========================

In-memory collection of :class:`FactorGroup` records handed to the
conversion engine.

- Encapsulates the group list in a `ConversionFactors` class (thread-safe).
- Whole-list replacement (`load`) plus the edits the authoring workflow
  needs: `add_group`, `add_equivalence`, `set_group_visibility`.
- Change notification: every edit bumps `revision` and calls subscribed
  listeners, which is how converters know to drop memoized expressions.
- A bootstrapped `DEFAULT_FACTORS` with common groups.

Reading from or writing to disk is left to the caller; `source` only names
where the definitions came from for diagnostics.
"""
from __future__ import annotations

import inspect
import logging
import threading
import weakref
from typing import Callable, Dict, Iterable, Iterator, List, Optional

from unitchain.errors import ConversionPathError, DefinitionError
from unitchain.factors.equivalence import Equivalence, FactorGroup

logger = logging.getLogger(__name__)

ChangeListener = Callable[["ConversionFactors"], None]


def _reference(listener: ChangeListener) -> Callable[[], Optional[ChangeListener]]:
    # bound methods are held weakly
    if inspect.ismethod(listener):
        return weakref.WeakMethod(listener)
    return lambda: listener


class ConversionFactors:
    """Ordered, thread-safe list of factor groups.

    Group lookup is exact and case-sensitive; duplicate detection is
    case-insensitive so "Length" and "length" cannot coexist.
    """

    def __init__(self, groups: Iterable[FactorGroup] = (), source: str = "<memory>") -> None:
        self._lock = threading.RLock()
        self._groups: List[FactorGroup] = []
        self._listeners: List[Callable[[], Optional[ChangeListener]]] = []
        self.source = source
        self.revision = 0
        groups = list(groups)
        if groups:
            self.load(groups)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __iter__(self) -> Iterator[FactorGroup]:
        with self._lock:
            return iter(list(self._groups))

    def __len__(self) -> int:
        with self._lock:
            return len(self._groups)

    # -------------------------- change tracking ----------------------------
    def subscribe(self, listener: ChangeListener) -> None:
        """Call ``listener(self)`` after every change to the group list.

        Bound methods are referenced weakly: once their object is garbage
        collected they are dropped without an explicit :meth:`unsubscribe`.
        """
        with self._lock:
            self._listeners.append(_reference(listener))

    def unsubscribe(self, listener: ChangeListener) -> None:
        with self._lock:
            for ref in self._listeners:
                if ref() == listener:
                    self._listeners.remove(ref)
                    break

    @property
    def listener_count(self) -> int:
        """Live subscribers; dead weak references are pruned first."""
        with self._lock:
            self._listeners = [ref for ref in self._listeners if ref() is not None]
            return len(self._listeners)

    def _changed(self) -> None:
        self.revision += 1
        live = [(ref, ref()) for ref in self._listeners]
        self._listeners = [ref for ref, listener in live if listener is not None]
        logger.debug("conversion factors changed (revision %d, source %s)", self.revision, self.source)
        for _, listener in live:
            if listener is not None:
                listener(self)

    # -------------------------- public API ---------------------------------
    def load(self, groups: Iterable[FactorGroup], source: Optional[str] = None) -> None:
        """Replace every group at once (what a reload from storage does)."""
        groups = list(groups)
        seen: Dict[str, str] = {}
        for g in groups:
            key = g.name.casefold()
            if key in seen:
                raise DefinitionError(f"Duplicate groups '{seen[key]}' and '{g.name}'.")
            seen[key] = g.name

        with self._lock:
            self._groups = groups
            if source is not None:
                self.source = source
            self._changed()

    def add_group(self, name: str, equivalences: Iterable[Equivalence], visible: bool = True) -> FactorGroup:
        """Append a new group; it must come with at least one equivalence."""
        equivalences = tuple(equivalences)
        if not equivalences:
            raise DefinitionError(f"Group '{name}' has no unit definitions!")
        group = FactorGroup(name, equivalences, visible)

        with self._lock:
            if any(g.name.casefold() == name.casefold() for g in self._groups):
                raise DefinitionError(f"Cannot add group '{name}': a group with this name already exists.")
            self._groups.append(group)
            self._changed()
        return group

    def add_equivalence(self, group: str, equivalence: Equivalence) -> FactorGroup:
        with self._lock:
            idx = self._index(group)
            updated = self._groups[idx].with_equivalence(equivalence)
            self._groups[idx] = updated
            self._changed()
        return updated

    def set_group_visibility(self, group: str, visible: bool) -> None:
        with self._lock:
            idx = self._index(group)
            self._groups[idx] = self._groups[idx].with_visibility(visible)
            self._changed()

    def find(self, name: str) -> Optional[FactorGroup]:
        """Linear scan by exact name; ``None`` if absent."""
        with self._lock:
            for g in self._groups:
                if g.name == name:
                    return g
        return None

    def get(self, name: str) -> FactorGroup:
        """Lookup a group by exact name.

        Raises `ConversionPathError` if unknown.
        """
        group = self.find(name)
        if group is None:
            raise ConversionPathError(f"Unknown group '{name}' in {self.source}.")
        return group

    def has(self, name: str) -> bool:
        return self.find(name) is not None

    def names(self) -> List[str]:
        with self._lock:
            return [g.name for g in self._groups]

    def visible_groups(self) -> List[FactorGroup]:
        with self._lock:
            return [g for g in self._groups if g.visible]

    # ------------------------- internals -----------------------------------
    def _index(self, name: str) -> int:
        for i, g in enumerate(self._groups):
            if g.name == name:
                return i
        raise DefinitionError(f"Unknown group '{name}'.")


# ---------------------------------------------------------------------------
# Bootstrap a default collection with common groups
# ---------------------------------------------------------------------------

def _bootstrap_default_factors() -> ConversionFactors:
    # (unit_a, unit_b, equation): unit_a = f(unit_b)
    length = (
        ("mm",  "m",   "a=b*1000"),
        ("cm",  "m",   "a=b*100"),
        ("m",   "km",  "a=b*1000"),
        ("cm",  "in",  "a=b*2.54"),
        ("in",  "ft",  "a=b*12"),
        ("ft",  "yd",  "a=b*3"),
        ("ft",  "mile", "a=b*5280"),
        ("m",   "nmi", "a=b*1852"),
    )
    mass = (
        ("g",   "kg",  "a=b*1000"),
        ("mg",  "g",   "a=b*1000"),
        ("kg",  "t",   "a=b*1000"),
        ("lbm", "kg",  "a=b/0.45359237"),
        ("oz",  "lbm", "a=b*16"),
        ("lbm", "slug", "a=b*32.174049"),
    )
    time = (
        ("ms",  "s",   "a=b*1000"),
        ("s",   "min", "a=b*60"),
        ("min", "hr",  "a=b*60"),
        ("hr",  "day", "a=b*24"),
        ("day", "week", "a=b*7"),
    )
    temperature = (
        ("K",   "C",   "a=b+273.15"),
        ("C",   "F",   "a=(b-32)*5/9"),
        ("R",   "F",   "a=b+459.67"),
    )
    area = (
        ("mm^2", "m^2", "a=b*1e6"),
        ("cm^2", "m^2", "a=b*1e4"),
        ("cm^2", "in^2", "a=b*6.4516"),
        ("in^2", "ft^2", "a=b*144"),
        ("ft^2", "acre", "a=b*43560"),
    )
    volume = (
        ("mL",  "L",   "a=b*1000"),
        ("L",   "m^3", "a=b*1000"),
        ("in^3", "gal", "a=b*231"),
        ("mL",  "in^3", "a=b*16.387064"),
        ("floz", "gal", "a=b*128"),
    )
    pressure = (
        ("Pa",  "kPa", "a=b*1000"),
        ("kPa", "MPa", "a=b*1000"),
        ("Pa",  "bar", "a=b*1e5"),
        ("Pa",  "psi", "a=b*6894.757"),
        ("Pa",  "atm", "a=b*101325"),
        ("psi", "psf", "a=b/144"),
    )
    energy = (
        ("J",   "kJ",  "a=b*1000"),
        ("J",   "cal", "a=b*4.184"),
        ("J",   "BTU", "a=b*1055.056"),
        ("J",   "kWh", "a=b*3.6e6"),
        ("ft-lbf", "J", "a=b/1.3558179"),
    )

    return ConversionFactors(
        (
            FactorGroup.from_triples("Length", length),
            FactorGroup.from_triples("Mass", mass),
            FactorGroup.from_triples("Time", time),
            FactorGroup.from_triples("Temperature", temperature),
            FactorGroup.from_triples("Area", area),
            FactorGroup.from_triples("Volume", volume),
            FactorGroup.from_triples("Pressure", pressure),
            FactorGroup.from_triples("Energy", energy),
        ),
        source="<built-in>",
    )


# Public, shared default collection
DEFAULT_FACTORS: ConversionFactors = _bootstrap_default_factors()


__all__ = [
    "ConversionFactors",
    "ChangeListener",
    "DEFAULT_FACTORS",
]
