import logging
import math

import pytest

from unitchain.core.evaluator import evaluate_expression
from unitchain.core.graph import ConversionGraph, find_path, substitute
from unitchain.core.solver import solve_for
from unitchain.core.tokens import render, tokenize
from unitchain.errors import ConversionPathError
from unitchain.factors.equivalence import FactorGroup


def convert_with(group, in_unit, out_unit, value):
    return evaluate_expression(find_path(group, in_unit, out_unit), {"x": value})


# --------------------------
# Graph construction
# --------------------------

def test_graph_has_node_per_unit(length_group):
    graph = ConversionGraph(length_group)
    assert set(graph.nodes) == {"cm", "in", "m"}
    assert set(graph.nodes["cm"].neighbors) == {"in", "m"}
    assert set(graph.nodes["in"].neighbors) == {"cm"}

def test_graph_keeps_first_duplicate_edge():
    group = FactorGroup.from_triples("G", [("p", "q", "a=b*2"), ("q", "p", "a=b/2")])
    graph = ConversionGraph(group)
    assert graph.nodes["p"].neighbors["q"].equation == "a=b*2"

def test_fresh_nodes_start_at_free_variable(length_group):
    node = ConversionGraph(length_group).get("m")
    assert not node.visited and node.expression == "x"


# --------------------------
# Substitution
# --------------------------

def test_substitute_renames_exposed_symbol():
    out = substitute(tokenize("(x)/(100)"), tokenize("b*2.54"), "b")
    assert render(out) == "((x*2.54))/(100)"

def test_substitute_spells_out_negation():
    out = substitute(tokenize("3-x"), tokenize("a"), "a")
    assert render(out) == "3-(x)"
    out = substitute(tokenize("x"), tokenize("-a"), "a")
    assert render(out) == "(-1*x)"


# --------------------------
# Path finding
# --------------------------

def test_single_edge_expression(length_group):
    assert find_path(length_group, "cm", "m") == "((x)/(100))"

def test_identity_path(length_group):
    assert find_path(length_group, "m", "m") == "x"

def test_chain_inches_to_meters(length_group):
    assert math.isclose(convert_with(length_group, "in", "m", 100), 2.54)

def test_chain_meters_to_inches(length_group):
    assert math.isclose(convert_with(length_group, "m", "in", 2.54), 100)

@pytest.mark.parametrize("in_unit, out_unit, value, expected", [
    ("C", "F", 100, 212),
    ("F", "C", 32, 0),
    ("K", "F", 373.15, 212),
    ("F", "K", 212, 373.15),
    ("C", "K", 0, 273.15),
])
def test_temperature_offsets(temperature_group, in_unit, out_unit, value, expected):
    assert convert_with(temperature_group, in_unit, out_unit, value) == pytest.approx(expected, abs=1e-9)

def test_round_trip_through_chain(temperature_group):
    there = convert_with(temperature_group, "K", "F", 250)
    assert convert_with(temperature_group, "F", "K", there) == pytest.approx(250)

def test_shortest_path_is_used():
    # p-q-r-s plus a direct p-s shortcut with a different factor
    group = FactorGroup.from_triples(
        "G",
        [("p", "q", "a=b*2"), ("q", "r", "a=b*2"), ("r", "s", "a=b*2"), ("p", "s", "a=b*10")],
    )
    assert convert_with(group, "s", "p", 1) == pytest.approx(10)

def test_unknown_unit(length_group):
    with pytest.raises(ConversionPathError, match="'ft' is not defined in group 'Length'"):
        find_path(length_group, "ft", "m")

def test_disconnected_units(split_group):
    with pytest.raises(ConversionPathError, match="Could not find a conversion path from 'p' to 's'"):
        find_path(split_group, "p", "s")

def test_disconnected_units_names_source(split_group):
    with pytest.raises(ConversionPathError, match="Check the definitions in defs.json"):
        find_path(split_group, "p", "s", source="defs.json")

def test_solver_is_injected(length_group):
    calls = []

    def solver(equation, target):
        calls.append((equation, target))
        return solve_for(equation, target)

    find_path(length_group, "in", "m", solver=solver)
    assert ("a=b*100", "b") in calls
    assert ("a=b*2.54", "a") in calls

def test_unsolvable_edge_is_reported():
    group = FactorGroup.from_triples("G", [("p", "q", "a=b^2")])
    with pytest.raises(ConversionPathError, match="Unsolvable equivalences: 'p'/'q'") as info:
        find_path(group, "p", "q")
    assert "Could not extract 'b'" in str(info.value)

def test_unsolvable_edge_does_not_block_other_paths(caplog):
    group = FactorGroup.from_triples("G", [("p", "q", "a=b*2"), ("r", "q", "a=b^2")])
    with caplog.at_level(logging.WARNING, logger="unitchain.core.graph"):
        assert convert_with(group, "p", "q", 4) == pytest.approx(2)
    assert "skipping r <-> q" in caplog.text

def test_unsolvable_edge_detour():
    # the direct s-p edge cannot be rearranged; the long way round still works
    group = FactorGroup.from_triples(
        "G",
        [("s", "p", "a=b^2"), ("p", "q", "a=b*2"), ("q", "s", "a=b*3")],
    )
    assert convert_with(group, "s", "p", 1) == pytest.approx(6)
