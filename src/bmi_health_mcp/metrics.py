"""Health metric formulas.

This is the computation engine behind the ``bmi-health-calculator`` tool. Every
function is pure: same input, same output, no I/O. Inputs have already been
validated against the tool's input schema, so the engine never raises: a
missing field, or a value the formulas cannot work with (a non-positive height
for the log terms, magnitudes that overflow a float), yields ``None`` for the
metrics that depend on it.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

ACTIVITY_MULTIPLIERS: dict[str, float] = {
    "sedentary": 1.2,
    "light": 1.375,
    "moderate": 1.55,
    "active": 1.725,
    "very_active": 1.9,
    "extra_active": 1.9,
}

DEFAULT_AGE_YEARS = 30
CM_PER_INCH = 2.54


def round_half_up(value: float, digits: int = 1) -> float | None:
    """Round like a calculator does (2.25 -> 2.3), not banker's rounding.

    Returns ``None`` when the value cannot be represented after scaling.
    """
    scaled = value * 10**digits + 0.5
    if not math.isfinite(scaled):
        return None
    return math.floor(scaled) / 10**digits


def bmi_value(weight_kg: float, height_cm: float) -> float:
    height_m = height_cm / 100
    if not height_m * height_m:
        # Underflows to zero for vanishingly small heights
        return math.copysign(math.inf, weight_kg)
    return weight_kg / (height_m * height_m)


def bmi_category(bmi: float) -> str | None:
    if math.isnan(bmi):
        return None
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal weight"
    if bmi < 30:
        return "Overweight"
    return "Obese"


def ideal_weight_range(height_cm: float, gender: str | None) -> tuple[float | None, float | None]:
    """Devine formula, reported as a +/-10% band. Unknown sex uses the male base."""
    inches_over_five_feet = max(0.0, height_cm / CM_PER_INCH - 60)
    base = 45.5 if gender == "female" else 50.0
    ideal = base + 2.3 * inches_over_five_feet
    return round_half_up(ideal * 0.9), round_half_up(ideal * 1.1)


def body_fat_navy(
    height_cm: float,
    waist_cm: float | None,
    neck_cm: float | None,
    hip_cm: float | None,
    gender: str | None,
) -> float | None:
    """U.S. Navy body fat estimate. Needs an explicit sex; females also need hip."""
    if not waist_cm or not neck_cm or height_cm <= 0:
        return None

    if gender == "male":
        if waist_cm <= neck_cm:
            return None
        density = 1.0324 - 0.19077 * math.log10(waist_cm - neck_cm) + 0.15456 * math.log10(height_cm)
    elif gender == "female" and hip_cm:
        if waist_cm + hip_cm <= neck_cm:
            return None
        density = 1.29579 - 0.35004 * math.log10(waist_cm + hip_cm - neck_cm) + 0.22100 * math.log10(height_cm)
    else:
        return None

    if not density or not math.isfinite(density):
        return None
    body_fat = 495 / density - 450
    return body_fat if math.isfinite(body_fat) else None


def daily_calories(
    weight_kg: float,
    height_cm: float,
    age_years: float | None,
    gender: str | None,
    activity_level: str | None,
) -> int | None:
    """Mifflin-St Jeor BMR times an activity multiplier (TDEE)."""
    age = age_years or DEFAULT_AGE_YEARS
    bmr = 10 * weight_kg + 6.25 * height_cm - 5 * age
    bmr += -161 if gender == "female" else 5
    tdee = bmr * ACTIVITY_MULTIPLIERS.get(activity_level or "sedentary", 1.2) + 0.5
    if not math.isfinite(tdee):
        return None
    return int(math.floor(tdee))


def compute_summary(arguments: Mapping[str, Any]) -> dict[str, Any]:
    """Compute every metric the widget displays from validated tool arguments."""
    height = arguments.get("height_cm")
    weight = arguments.get("weight_kg")
    gender = arguments.get("gender")

    if not height or not weight:
        return {
            "bmi": None,
            "bmi_category": None,
            "ideal_weight_min": None,
            "ideal_weight_max": None,
            "body_fat_pct": None,
            "tdee_calories": None,
        }

    bmi = bmi_value(weight, height)
    ideal_min, ideal_max = ideal_weight_range(height, gender)
    body_fat = body_fat_navy(
        height,
        arguments.get("waist_cm"),
        arguments.get("neck_cm"),
        arguments.get("hip_cm"),
        gender,
    )

    return {
        "bmi": round_half_up(bmi),
        "bmi_category": bmi_category(bmi),
        "ideal_weight_min": ideal_min,
        "ideal_weight_max": ideal_max,
        "body_fat_pct": round_half_up(body_fat) if body_fat is not None else None,
        "tdee_calories": daily_calories(
            weight,
            height,
            arguments.get("age_years"),
            gender,
            arguments.get("activity_level"),
        ),
    }
