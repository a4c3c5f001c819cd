from __future__ import annotations

import math

import pytest

from geoshield.steps import (
    PIPELINE,
    PRIMES,
    Direction,
    StepKind,
    affine_step,
    apply_step,
    collatz_step,
    prime_jump_step,
)

COORDS = [(40.7128, -74.0060), (0.0, 0.0), (-33.8688, 151.2093), (89.5, -179.5), (1234.5, -98765.4321)]


def test_pipeline_order_is_fixed():
    assert PIPELINE == (
        StepKind.COLLATZ,
        StepKind.PRIME_JUMP,
        StepKind.FIBONACCI,
        StepKind.AFFINE,
        StepKind.LOG_SPIRAL,
    )


def test_collatz_offsets_from_integer_parts():
    # X: 40,20,10,5,16,8 -> 99 ; Y: 74,37,112,56,28,14 -> 321
    res = collatz_step(40.7128, -74.0060, 0, Direction.FORWARD)
    assert res.latitude == pytest.approx(40.7128 + 0.00099, abs=1e-12)
    assert res.longitude == pytest.approx(-74.0060 - 0.00321, abs=1e-12)
    assert "Integer Parts: X=40, Y=74" in res.trace
    assert "  X: 5 (odd) -> (3 * 5) + 1 = 16" in res.trace
    assert "  Y: 112 (even) -> 112 / 2 = 56" in res.trace
    assert "Lat Offset: ΣX % 10000 / 100000 = 0.000990" in res.trace
    assert "Lng Offset: ΣY % 10000 / 100000 = 0.003210" in res.trace


def test_collatz_ignores_seed():
    a = collatz_step(12.5, 7.25, 1, Direction.FORWARD)
    b = collatz_step(12.5, 7.25, 999999, Direction.FORWARD)
    assert a == b


def test_prime_jump_known_seed():
    # seed of "00": draws pick indices 0 and 3 -> 17 * 71
    res = prime_jump_step(0.0, 0.0, 1536, Direction.FORWARD)
    assert "Chosen Primes: p1=17, p2=71" in res.trace
    assert res.latitude == -(17 * 71) / 100000
    assert res.longitude == (17 * 71) / 100000


def test_prime_jump_zero_seed_picks_first_prime():
    res = prime_jump_step(1.0, 1.0, 0, Direction.FORWARD)
    assert res.latitude == 1.0 - PRIMES[0] ** 2 / 100000


@pytest.mark.parametrize("kind", list(StepKind))
@pytest.mark.parametrize("lat,lng", COORDS)
def test_each_step_is_invertible(kind, lat, lng):
    seed = 987654321
    fwd = apply_step(kind, lat, lng, seed, Direction.FORWARD)
    back = apply_step(kind, fwd.latitude, fwd.longitude, seed, Direction.REVERSE)
    assert back.latitude == pytest.approx(lat, abs=1e-9)
    assert back.longitude == pytest.approx(lng, abs=1e-9)


@pytest.mark.parametrize("kind", [StepKind.PRIME_JUMP, StepKind.FIBONACCI, StepKind.LOG_SPIRAL])
def test_offset_steps_move_less_than_a_tenth_of_a_degree(kind):
    res = apply_step(kind, 10.0, 20.0, 42, Direction.FORWARD)
    assert abs(res.latitude - 10.0) < 0.1
    assert abs(res.longitude - 20.0) < 0.1


def test_affine_reverse_at_origin_is_finite():
    fwd = affine_step(0.0, 0.0, 0, Direction.FORWARD)
    # seed 0: every draw is 0 -> a = 0.9, b = -0.05
    assert fwd.latitude == pytest.approx(-0.05)
    back = affine_step(0.0, 0.0, 0, Direction.REVERSE)
    assert math.isfinite(back.latitude) and math.isfinite(back.longitude)
    assert back.latitude == pytest.approx(0.05 / 0.9)


def test_affine_trace_changes_with_direction():
    fwd = affine_step(1.0, 2.0, 5, Direction.FORWARD)
    rev = affine_step(1.0, 2.0, 5, Direction.REVERSE)
    assert "Forward Calculation:" in fwd.trace
    assert "Reverse Calculation:" in rev.trace


def test_direction_accepts_plain_strings():
    a = apply_step(StepKind.FIBONACCI, 1.0, 2.0, 3, "reverse")
    b = apply_step(StepKind.FIBONACCI, 1.0, 2.0, 3, Direction.REVERSE)
    assert a == b


def test_step_titles():
    assert StepKind.COLLATZ.title() == "Collatz Mixing"
    assert StepKind.COLLATZ.title("az") == "Collatz Fərziyyəsi ilə Qarışdırma"
    assert [k.slug for k in PIPELINE] == ["collatz", "prime_jump", "fibonacci", "affine", "log_spiral"]


def test_collatz_propagates_nan():
    res = collatz_step(math.nan, 3.0, 0, Direction.FORWARD)
    assert math.isnan(res.latitude)
    assert math.isfinite(res.longitude)
    assert "X=NaN" in res.trace


def test_collatz_infinity_becomes_nan():
    res = collatz_step(math.inf, 3.0, 0, Direction.FORWARD)
    assert math.isnan(res.latitude)


def test_collatz_reverse_across_integer_boundary():
    # 40.9995 + 0.00099 lands on 41.00049; reversing must recover integer part 40, not 41
    fwd = collatz_step(40.9995, -12.25, 0, Direction.FORWARD)
    assert fwd.latitude > 41
    back = collatz_step(fwd.latitude, fwd.longitude, 0, Direction.REVERSE)
    assert back.latitude == pytest.approx(40.9995, abs=1e-12)
    assert back.longitude == pytest.approx(-12.25, abs=1e-12)
    assert "Integer Parts: X=40, Y=12" in back.trace


def test_collatz_reverse_uses_own_integer_part_away_from_boundaries():
    res = collatz_step(40.5, 74.5, 0, Direction.REVERSE)
    assert res.latitude == pytest.approx(40.5 - 0.00099, abs=1e-12)
    assert res.longitude == pytest.approx(74.5 + 0.00321, abs=1e-12)
