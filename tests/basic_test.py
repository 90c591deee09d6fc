import math

import unitchain


def test_convert_inches_to_centimeters():
    assert math.isclose(unitchain.convert("Length", "in", "cm", 1), 2.54)

def test_convert_celsius_to_fahrenheit():
    assert math.isclose(unitchain.convert("Temperature", "C", "F", 100), 212.0)

def test_convert_unknown_group_returns_input():
    assert unitchain.convert("NoSuchGroup", "a", "b", 7.5) == 7.5
