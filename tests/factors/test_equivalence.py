import pytest

from unitchain.errors import DefinitionError
from unitchain.factors.equivalence import Equivalence, FactorGroup


# --------------------------
# Equivalence
# --------------------------

def test_equivalence_fields():
    eq = Equivalence("cm", "in", "a=b*2.54")
    assert eq.units == ("cm", "in")
    assert eq.is_a_side("cm") and not eq.is_a_side("in")

def test_relates_either_order():
    eq = Equivalence("cm", "in", "a=b*2.54")
    assert eq.relates("cm", "in") and eq.relates("in", "cm")
    assert not eq.relates("cm", "m")

@pytest.mark.parametrize("unit_a, unit_b, equation", [
    ("", "in", "a=b"),
    ("cm", "", "a=b"),
    ("cm", "cm", "a=b"),
    ("cm", "in", "a=2.54"),
    ("cm", "in", "b*2.54"),
])
def test_invalid_equivalence(unit_a, unit_b, equation):
    with pytest.raises(DefinitionError):
        Equivalence(unit_a, unit_b, equation)

def test_equivalence_is_frozen():
    eq = Equivalence("cm", "in", "a=b*2.54")
    with pytest.raises(Exception):
        eq.equation = "a=b"


# --------------------------
# FactorGroup
# --------------------------

def test_unit_list_sorted_without_duplicates(length_group):
    assert length_group.unit_list() == ["cm", "in", "m"]

def test_unit_list_definition_order(length_group):
    assert length_group.unit_list(sort=False) == ["cm", "in", "m"]
    group = FactorGroup.from_triples("G", [("z", "y", "a=b"), ("y", "w", "a=b")])
    assert group.unit_list(sort=False) == ["z", "y", "w"]

def test_has_unit(length_group):
    assert length_group.has_unit("in")
    assert not length_group.has_unit("ft")

def test_equivalences_coerced_to_tuple():
    group = FactorGroup("G", [Equivalence("p", "q", "a=b")])
    assert isinstance(group.equivalences, tuple)

def test_empty_group_rejected():
    with pytest.raises(DefinitionError):
        FactorGroup("G", ())
    with pytest.raises(DefinitionError):
        FactorGroup("", [Equivalence("p", "q", "a=b")])

def test_with_equivalence_returns_new_group(length_group):
    grown = length_group.with_equivalence(Equivalence("in", "ft", "a=b*12"))
    assert grown.has_unit("ft")
    assert not length_group.has_unit("ft")
    assert grown.name == length_group.name

def test_with_visibility(length_group):
    hidden = length_group.with_visibility(False)
    assert not hidden.visible and length_group.visible
