import math

import pytest

from logic.brightness import backlight_setpoint, calculate_brightness


def test_zero_lux_is_zero():
    assert calculate_brightness(0, "lux") == 0.0


@pytest.mark.parametrize("unit", ["vendor-defined", "LUX", "", "lux "])
def test_other_units_fall_back_to_zero(unit):
    assert calculate_brightness(500.0, unit) == 0.0


def test_known_points_on_curve():
    assert calculate_brightness(9, "lux") == pytest.approx(0.2)
    assert calculate_brightness(99, "lux") == pytest.approx(0.4)
    assert calculate_brightness(99999, "lux") == pytest.approx(1.0)


def test_monotonic_in_level():
    levels = [0, 0.5, 1, 3, 10, 50, 200, 1000, 5000, 20000, 100000]
    values = [calculate_brightness(level, "lux") for level in levels]
    assert values == sorted(values)


def test_setpoint_scaling():
    assert backlight_setpoint(calculate_brightness(99, "lux")) == pytest.approx(10.0)
    assert backlight_setpoint(calculate_brightness(9, "lux")) == pytest.approx(8.0)
    assert backlight_setpoint(0.0) == 6


def test_setpoint_unclamped_by_default():
    bright = math.log10(1e12) / 5.0
    assert backlight_setpoint(bright, lower=6, scale=100) > 100


def test_setpoint_clamped_when_upper_given():
    assert backlight_setpoint(5.0, lower=6, scale=100, upper=100) == 100
    assert backlight_setpoint(-1.0, lower=6, scale=10, upper=100) == 6


@pytest.mark.parametrize("level", [-1.0, -5.0, -1e9])
def test_negative_levels_count_as_darkness(level):
    assert calculate_brightness(level, "lux") == 0.0


def test_non_finite_levels_do_not_raise():
    assert calculate_brightness(float("inf"), "lux") == float("inf")
    assert math.isnan(calculate_brightness(float("nan"), "lux"))
