import os


def get_env(name: str, default: str | None = None) -> str:
    v = os.getenv(name, default)
    if v is None:
        raise RuntimeError(f"Missing required env var: {name}")
    return v


def _optional_float(name: str) -> float | None:
    v = os.getenv(name)
    if not v:
        return None
    return float(v)


# One place for the water target so every caller agrees on it.
DEFAULT_DAILY_WATER_GOAL_ML = 2500.0
DEFAULT_GOAL_TYPE = "maintain"

AI_GATEWAY_URL = get_env("AI_GATEWAY_URL", "https://ai.gateway.lovable.dev/v1/chat/completions")
AI_GATEWAY_API_KEY = os.getenv("AI_GATEWAY_API_KEY")
AI_MODEL = get_env("AI_MODEL", "google/gemini-2.5-flash")
AI_TIMEOUT_SECONDS = _optional_float("AI_TIMEOUT_SECONDS")

BUCKETING_MODES = ("weekday", "calendar")


def _choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    v = get_env(name, default).strip().lower()
    if v not in choices:
        raise RuntimeError(f"Invalid {name}: {v!r} (expected one of {', '.join(choices)})")
    return v


# "weekday" keeps the legacy weekday-offset bucketing, "calendar" uses true day differences.
WEEKLY_BUCKETING = _choice("WEEKLY_BUCKETING", "weekday", BUCKETING_MODES)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
