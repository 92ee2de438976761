from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from . import settings
from .body_metrics import categorize_bmi, compute_bmi

NOT_SPECIFIED = "Not specified"
NOT_SET = "Not set"
NOT_AVAILABLE = "Not available"

SYSTEM_MESSAGE = "You are a helpful nutrition expert providing personalized health tips."


@dataclass(frozen=True)
class InsightContext:
    calorie_intake: float
    water_intake: float
    calorie_goal: str
    water_goal_ml: str
    goal_type: str
    bmi: str
    bmi_category: str
    age: str
    gender: str
    activity_level: str


def _text(value: Any, placeholder: str) -> str:
    if value is None or value == "":
        return placeholder
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _number(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def build_insight_context(
    calorie_intake: Any,
    water_intake: Any,
    profile: dict[str, Any] | None,
) -> InsightContext:
    """Collect what the model is told about the user.

    Absent fields become readable placeholders instead of being left out.
    """
    profile = profile or {}
    bmi = compute_bmi(profile.get("height_cm"), profile.get("weight_kg"))
    goal_type = profile.get("goal") or profile.get("goal_type") or settings.DEFAULT_GOAL_TYPE
    water_goal = profile.get("daily_water_goal_ml") or settings.DEFAULT_DAILY_WATER_GOAL_ML

    return InsightContext(
        calorie_intake=_number(calorie_intake),
        water_intake=_number(water_intake),
        calorie_goal=_text(profile.get("daily_calorie_goal"), NOT_SET),
        water_goal_ml=_text(float(water_goal), NOT_SET),
        goal_type=str(goal_type),
        bmi=f"{bmi:.1f}" if bmi is not None else NOT_AVAILABLE,
        bmi_category=categorize_bmi(bmi).value if bmi is not None else NOT_AVAILABLE,
        age=_text(profile.get("age"), NOT_SPECIFIED),
        gender=_text(profile.get("gender"), NOT_SPECIFIED),
        activity_level=_text(profile.get("activity_level"), NOT_SPECIFIED),
    )


def render_prompt(ctx: InsightContext) -> str:
    calorie_goal = ctx.calorie_goal if ctx.calorie_goal == NOT_SET else f"{ctx.calorie_goal} kcal"
    if ctx.bmi == NOT_AVAILABLE:
        bmi_line = f"BMI: {NOT_AVAILABLE}"
    else:
        bmi_line = f"BMI: {ctx.bmi} ({ctx.bmi_category})"

    return f"""You are a nutrition expert. Based on the user's daily intake and profile:
- Total calories: {_text(ctx.calorie_intake, "0")} kcal (Goal: {calorie_goal})
- Total water: {_text(ctx.water_intake, "0")}ml (Goal: {ctx.water_goal_ml}ml)
- Weight goal: {ctx.goal_type}

User Profile:
- {bmi_line}
- Age: {ctx.age}
- Gender: {ctx.gender}
- Activity Level: {ctx.activity_level}
- Goal: {ctx.goal_type}
- Daily Calorie Goal: {calorie_goal}
- Daily Water Goal: {ctx.water_goal_ml}ml

Provide 3 personalized, actionable health tips to improve their diet and hydration. Keep each tip concise (1-2 sentences). Focus on:
1. Calorie balance analysis based on their goal ({ctx.goal_type} weight)
2. Hydration assessment and recommendations
3. One specific nutrition habit based on their BMI and goals

Make suggestions specific to their profile data and current intake. Be encouraging and practical.

Format as a JSON array of strings."""


def build_chat_request(ctx: InsightContext, model: str | None = None) -> dict[str, Any]:
    return {
        "model": model or settings.AI_MODEL,
        "messages": [
            {"role": "system", "content": SYSTEM_MESSAGE},
            {"role": "user", "content": render_prompt(ctx)},
        ],
    }
