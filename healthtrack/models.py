from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class UserProfilePayload(BaseModel):
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    activity_level: Optional[str] = None
    goal: Optional[str] = None
    goal_type: Optional[str] = None
    daily_calorie_goal: Optional[float] = None
    daily_water_goal_ml: Optional[float] = None


class DietSuggestionRequest(BaseModel):
    calorieIntake: float = 0
    waterIntake: float = 0
    userProfile: Optional[UserProfilePayload] = None


class ProfileUpdateRequest(BaseModel):
    height_cm: Optional[float] = Field(default=None, gt=0, le=300)
    weight_kg: Optional[float] = Field(default=None, gt=0, le=500)
    age: Optional[int] = Field(default=None, ge=1, le=130)
    gender: Optional[Literal["male", "female", "other"]] = None
    activity_level: Optional[
        Literal["sedentary", "lightly_active", "moderately_active", "very_active", "extremely_active"]
    ] = None
    goal: Optional[Literal["lose_weight", "maintain", "gain_weight", "build_muscle"]] = None
    daily_calorie_goal: Optional[float] = Field(default=None, gt=0)
    daily_water_goal_ml: Optional[float] = Field(default=None, gt=0)
    reminder_enabled: Optional[bool] = None


class MealCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    calories: float = Field(ge=0)
    time: Optional[datetime] = None


class WaterCreateRequest(BaseModel):
    amount_ml: float = Field(gt=0)
    time: Optional[datetime] = None


class ReminderCreateRequest(BaseModel):
    reminder_type: Literal["water", "meal", "goal"] = "water"
    time: str = Field(pattern=r"^\d{1,2}:\d{2}$")


class SuggestionListResponse(BaseModel):
    suggestions: list[str]


class StatusResponse(BaseModel):
    ok: bool
    dbPath: str
    bucketing: str
