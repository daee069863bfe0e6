"""Numeric coercion and the health metric formulas.

The calorie target is a simplified estimate (weight x 22 x 1.4 with a goal
adjustment), not a medical formula. Its constants are part of the stored
history and must stay as they are.
"""

import math

DEFAULT_WEIGHT_KG = 70.0
CALORIE_BASE_FACTOR = 22.0
ACTIVITY_FACTOR = 1.4
GOAL_ADJUSTMENTS = {"lose": -400.0, "gain": 300.0}
KG_TO_LB = 2.20462
CM_PER_INCH = 2.54


def to_number(value: object) -> float | None:
    """Coerce a stored int, float or numeric string to float.

    Anything else, booleans and malformed strings included, yields None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def to_int(value: object) -> int | None:
    """Coerce like ``to_number`` and truncate toward zero."""
    number = to_number(value)
    return int(number) if number is not None else None


def round1(value: float) -> float:
    """Round to one decimal place (round-half-even on the scaled value)."""
    return round(value * 10) / 10


def bmi(weight_kg: float | None, height_cm: float | None) -> float | None:
    """Return BMI rounded to one decimal, or None without a usable height."""
    if weight_kg is None or height_cm is None or height_cm <= 0:
        return None
    height_m = height_cm / 100.0
    return round1(weight_kg / (height_m * height_m))


def calorie_target(weight_kg: float | None, goal: str | None) -> float | None:
    """Return the goal-adjusted daily calorie target."""
    if weight_kg is None:
        return None
    base = weight_kg * CALORIE_BASE_FACTOR * ACTIVITY_FACTOR
    adjustment = GOAL_ADJUSTMENTS.get((goal or "").strip().lower(), 0.0)
    return round1(base + adjustment)


def exercise_kcal(met: float, duration_min: float, weight_kg: float | None) -> int:
    """Return energy burned: MET x 3.5 x kg / 200 x minutes, never negative."""
    weight = weight_kg if weight_kg is not None else DEFAULT_WEIGHT_KG
    kcal = met * 3.5 * weight / 200.0 * duration_min
    return max(0, math.floor(kcal + 0.5))


def format_weight(weight_kg: float, units: str) -> str:
    if units == "Imperial":
        return f"{round1(weight_kg * KG_TO_LB)} lb"
    return f"{round1(weight_kg)} kg"


def format_height(height_cm: int, units: str) -> str:
    if units == "Imperial":
        inches_total = height_cm / CM_PER_INCH
        feet = int(inches_total / 12)
        inches = int(inches_total - feet * 12)
        return f"{feet}′ {inches}″"
    return f"{height_cm} cm"
