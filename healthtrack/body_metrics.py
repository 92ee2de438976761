from __future__ import annotations

from enum import Enum
from typing import Any

BMI_UNDERWEIGHT_BELOW = 18.5
BMI_OVERWEIGHT_FROM = 25.0
BMI_OBESE_FROM = 30.0


class BmiCategory(str, Enum):
    UNDERWEIGHT = "Underweight"
    NORMAL = "Normal"
    OVERWEIGHT = "Overweight"
    OBESE = "Obese"


def _positive(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    v = float(value)
    if v != v or v <= 0:  # NaN or non-positive
        return None
    return v


def compute_bmi(height_cm: float | None, weight_kg: float | None) -> float | None:
    """weight / height(m)^2, or None when either input is missing or not positive."""
    h = _positive(height_cm)
    w = _positive(weight_kg)
    if h is None or w is None:
        return None
    meters = h / 100.0
    return w / (meters * meters)


def categorize_bmi(bmi: float) -> BmiCategory:
    # Boundaries belong to the higher category.
    if bmi < BMI_UNDERWEIGHT_BELOW:
        return BmiCategory.UNDERWEIGHT
    if bmi < BMI_OVERWEIGHT_FROM:
        return BmiCategory.NORMAL
    if bmi < BMI_OBESE_FROM:
        return BmiCategory.OVERWEIGHT
    return BmiCategory.OBESE


def bmi_summary(height_cm: float | None, weight_kg: float | None) -> dict[str, Any] | None:
    bmi = compute_bmi(height_cm, weight_kg)
    if bmi is None:
        return None
    return {"bmi": round(bmi, 1), "category": categorize_bmi(bmi).value}
