from __future__ import annotations

import math

import pytest

from geoshield.formatting import fmt_pair, js_round, to_fixed


@pytest.mark.parametrize(
    "value,digits,expected",
    [
        (0.125, 2, "0.13"),
        (-0.125, 2, "-0.13"),
        (2.5, 0, "3"),
        (1.005, 2, "1.00"),
        (40.7128, 6, "40.712800"),
        (-0.0, 6, "0.000000"),
        (-1e-9, 6, "-0.000000"),
        (137.5 * (math.pi / 180), 4, "2.3998"),
    ],
)
def test_to_fixed_matches_javascript(value, digits, expected):
    assert to_fixed(value, digits) == expected


def test_to_fixed_non_finite():
    assert to_fixed(math.nan) == "NaN"
    assert to_fixed(math.inf) == "Infinity"
    assert to_fixed(-math.inf) == "-Infinity"


def test_fmt_pair():
    assert fmt_pair(1, -2.5) == "(1.000000, -2.500000)"


@pytest.mark.parametrize("value,expected", [(2.5, 3), (-2.5, -2), (-2.6, -3), (2.4999, 2), (0.0, 0)])
def test_js_round(value, expected):
    assert js_round(value) == expected
