"""Tests for numeric coercion and metric formulas."""

import math

import pytest

from fitness_tracker.services.metrics import (
    bmi,
    calorie_target,
    exercise_kcal,
    format_height,
    format_weight,
    round1,
    to_int,
    to_number,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12.5", 12.5),
        (" 3 ", 3.0),
        (12, 12.0),
        (7.25, 7.25),
        (True, None),
        (False, None),
        ("abc", None),
        (None, None),
        ([1], None),
        (math.nan, None),
        ("inf", None),
    ],
)
def test_to_number(raw: object, expected: float | None) -> None:
    assert to_number(raw) == expected


def test_to_int_truncates() -> None:
    assert to_int("7.9") == 7
    assert to_int(-2.5) == -2
    assert to_int("x") is None


def test_round1() -> None:
    assert round1(22.857) == 22.9
    assert round1(1756.0) == 1756.0


def test_bmi() -> None:
    assert bmi(70, 175) == 22.9
    assert bmi(70, None) is None
    assert bmi(70, 0) is None
    assert bmi(None, 175) is None


def test_calorie_target_applies_goal_adjustment() -> None:
    assert calorie_target(70, "Lose") == 1756.0
    assert calorie_target(70, "lose") == 1756.0
    assert calorie_target(70, "Gain") == 2456.0
    assert calorie_target(70, "Maintain") == 2156.0
    assert calorie_target(70, None) == 2156.0
    assert calorie_target(None, "Lose") is None


def test_exercise_kcal() -> None:
    assert exercise_kcal(4.5, 20, 80) == 126
    assert exercise_kcal(4.5, 20, 70) == 110
    assert exercise_kcal(9.0, 18, None) == 198
    assert exercise_kcal(-1.0, 30, 70) == 0


def test_display_formatting() -> None:
    assert format_weight(70, "Metric") == "70.0 kg"
    assert format_weight(70, "Imperial") == "154.3 lb"
    assert format_height(175, "Metric") == "175 cm"
    assert format_height(175, "Imperial") == "5′ 8″"
