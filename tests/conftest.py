# tests/conftest.py
import pytest

from unitchain.core.converter import Converter
from unitchain.core.graph import find_path
from unitchain.factors.equivalence import FactorGroup
from unitchain.factors.registry import ConversionFactors


@pytest.fixture
def length_group():
    return FactorGroup.from_triples(
        "Length",
        [
            ("cm", "in", "a=b*2.54"),
            ("cm", "m", "a=b*100"),
        ],
    )

@pytest.fixture
def temperature_group():
    return FactorGroup.from_triples(
        "Temperature",
        [
            ("K", "C", "a=b+273.15"),
            ("C", "F", "a=(b-32)*5/9"),
        ],
    )

@pytest.fixture
def split_group():
    # two components with no edge between them
    return FactorGroup.from_triples(
        "Split",
        [
            ("p", "q", "a=b*2"),
            ("r", "s", "a=b*3"),
        ],
    )

@pytest.fixture
def factors(length_group, temperature_group, split_group):
    return ConversionFactors([length_group, temperature_group, split_group], source="test-factors")

@pytest.fixture
def counting_path_finder():
    calls = []

    def finder(group, in_unit, out_unit, **kwargs):
        calls.append((group.name, in_unit, out_unit))
        return find_path(group, in_unit, out_unit, **kwargs)

    finder.calls = calls
    return finder

@pytest.fixture
def converter(factors, counting_path_finder):
    return Converter(factors, path_finder=counting_path_finder)
