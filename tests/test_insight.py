from __future__ import annotations

import unittest

from healthtrack.insight import (
    NOT_AVAILABLE,
    NOT_SET,
    NOT_SPECIFIED,
    SYSTEM_MESSAGE,
    build_chat_request,
    build_insight_context,
    render_prompt,
)


class InsightContextTests(unittest.TestCase):
    def test_placeholders_without_profile(self) -> None:
        ctx = build_insight_context(1200, 800, None)
        self.assertEqual(ctx.calorie_goal, NOT_SET)
        self.assertEqual(ctx.water_goal_ml, "2500")
        self.assertEqual(ctx.goal_type, "maintain")
        self.assertEqual(ctx.bmi, NOT_AVAILABLE)
        self.assertEqual(ctx.bmi_category, NOT_AVAILABLE)
        self.assertEqual(ctx.age, NOT_SPECIFIED)
        self.assertEqual(ctx.gender, NOT_SPECIFIED)
        self.assertEqual(ctx.activity_level, NOT_SPECIFIED)

    def test_full_profile(self) -> None:
        ctx = build_insight_context(
            "1500",
            2000,
            {
                "height_cm": 170,
                "weight_kg": 70,
                "age": 34,
                "gender": "female",
                "activity_level": "moderately_active",
                "goal": "lose_weight",
                "daily_calorie_goal": 1800,
                "daily_water_goal_ml": 3000,
            },
        )
        self.assertEqual(ctx.calorie_intake, 1500.0)
        self.assertEqual(ctx.bmi, "24.2")
        self.assertEqual(ctx.bmi_category, "Normal")
        self.assertEqual(ctx.goal_type, "lose_weight")
        self.assertEqual(ctx.calorie_goal, "1800")
        self.assertEqual(ctx.water_goal_ml, "3000")
        self.assertEqual(ctx.age, "34")

    def test_legacy_goal_type_used_when_goal_missing(self) -> None:
        ctx = build_insight_context(0, 0, {"goal_type": "gain_weight"})
        self.assertEqual(ctx.goal_type, "gain_weight")

    def test_prompt_keeps_every_field(self) -> None:
        text = render_prompt(build_insight_context(0, 0, {}))
        self.assertIn("Total calories: 0 kcal (Goal: Not set)", text)
        self.assertIn("Total water: 0ml (Goal: 2500ml)", text)
        self.assertIn("BMI: Not available", text)
        self.assertIn("- Age: Not specified", text)
        self.assertIn("- Gender: Not specified", text)
        self.assertIn("- Activity Level: Not specified", text)
        self.assertIn("Format as a JSON array of strings.", text)

    def test_prompt_with_bmi(self) -> None:
        text = render_prompt(build_insight_context(1500, 1000, {"height_cm": 170, "weight_kg": 85, "daily_calorie_goal": 2000}))
        self.assertIn("BMI: 29.4 (Overweight)", text)
        self.assertIn("Total calories: 1500 kcal (Goal: 2000 kcal)", text)

    def test_chat_request(self) -> None:
        body = build_chat_request(build_insight_context(0, 0, None), model="test-model")
        self.assertEqual(body["model"], "test-model")
        self.assertEqual(body["messages"][0], {"role": "system", "content": SYSTEM_MESSAGE})
        self.assertEqual(body["messages"][1]["role"], "user")


if __name__ == "__main__":
    unittest.main()
