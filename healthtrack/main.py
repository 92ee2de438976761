from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.exception_handlers import http_exception_handler, request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import ai_gateway, settings
from .aggregator import Metric, build_dashboard, today_totals
from .db import DB_PATH, LOCAL_TZ, init_db
from .insight import build_insight_context
from .intake import COMMON_MEALS, QUICK_WATER_AMOUNTS_ML, list_meals, list_water, log_meal, log_water
from .models import (
    DietSuggestionRequest,
    MealCreateRequest,
    ProfileUpdateRequest,
    ReminderCreateRequest,
    StatusResponse,
    SuggestionListResponse,
    WaterCreateRequest,
)
from .profile import SessionContext, get_profile, upsert_profile
from .reminders import create_reminder, delete_reminder, list_reminders
from .scan import recognize_food
from .security import require_api_key, require_session
from .store import StoreError
from .suggestions import parse_suggestions

log = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}
FUNCTIONS_PREFIX = "/functions/"

app = FastAPI(title="Health Track", version="0.1.0")


@app.on_event("startup")
def _startup() -> None:
    init_db()


@app.exception_handler(StoreError)
def _store_error(_: Request, exc: StoreError) -> JSONResponse:
    log.error("store failure: %s", exc)
    return JSONResponse(status_code=503, content={"detail": f"Storage unavailable ({exc.table})"})


def _with_function_cors(request: Request, response: Response) -> Response:
    if request.url.path.startswith(FUNCTIONS_PREFIX):
        response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> Response:
    return _with_function_cors(request, await http_exception_handler(request, exc))


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError) -> Response:
    return _with_function_cors(request, await request_validation_exception_handler(request, exc))


@app.get("/api/status", response_model=StatusResponse)
def status(_: None = Depends(require_api_key)) -> StatusResponse:
    return StatusResponse(ok=True, dbPath=str(DB_PATH), bucketing=settings.WEEKLY_BUCKETING)


# --- functions (CORS-enabled) ---


def _cors_json(content: Any, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


@app.options("/functions/diet-suggestions")
@app.options("/functions/scan-meal")
def functions_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@app.post("/functions/diet-suggestions")
def diet_suggestions(req: DietSuggestionRequest, _: None = Depends(require_api_key)) -> JSONResponse:
    profile = req.userProfile.model_dump() if req.userProfile else None
    ctx = build_insight_context(req.calorieIntake, req.waterIntake, profile)
    try:
        suggestions = ai_gateway.request_suggestions(ctx)
    except ai_gateway.SuggestionError as exc:
        log.error("Error in diet-suggestions function: %s", exc)
        return _cors_json({"error": str(exc)}, status_code=exc.status_code)
    return _cors_json({"suggestions": suggestions})


@app.post("/functions/scan-meal")
def scan_meal(_: None = Depends(require_api_key)) -> JSONResponse:
    return _cors_json(recognize_food())


# --- session API ---


@app.get("/api/profile")
def profile_get(session: SessionContext = Depends(require_session)) -> dict[str, Any]:
    return get_profile(session.user_id) or {}


@app.put("/api/profile")
def profile_put(req: ProfileUpdateRequest, session: SessionContext = Depends(require_session)) -> dict[str, Any]:
    return upsert_profile(session.user_id, **req.model_dump(exclude_unset=True))


@app.get("/api/meals/common")
def meals_common(_: None = Depends(require_api_key)) -> dict[str, Any]:
    return {"meals": list(COMMON_MEALS), "waterAmountsMl": list(QUICK_WATER_AMOUNTS_ML)}


@app.get("/api/meals")
def meals_list(since: datetime | None = None, session: SessionContext = Depends(require_session)) -> dict[str, Any]:
    return {"meals": list_meals(session, since=since)}


@app.post("/api/meals", status_code=201)
def meals_create(req: MealCreateRequest, session: SessionContext = Depends(require_session)) -> dict[str, Any]:
    return log_meal(session, name=req.name.strip(), calories=req.calories, time=req.time)


@app.get("/api/water")
def water_list(since: datetime | None = None, session: SessionContext = Depends(require_session)) -> dict[str, Any]:
    return {"water": list_water(session, since=since)}


@app.post("/api/water", status_code=201)
def water_create(req: WaterCreateRequest, session: SessionContext = Depends(require_session)) -> dict[str, Any]:
    return log_water(session, amount_ml=req.amount_ml, time=req.time)


@app.get("/api/dashboard")
def dashboard(session: SessionContext = Depends(require_session)) -> dict[str, Any]:
    return build_dashboard(session)


@app.post("/api/suggestions", response_model=SuggestionListResponse)
def suggestions(session: SessionContext = Depends(require_session)) -> SuggestionListResponse:
    now = datetime.now(timezone.utc).astimezone(LOCAL_TZ)
    totals = today_totals(session.user_id, now)
    errors = [t.error for t in totals.values() if t.error]
    if errors:
        raise HTTPException(status_code=503, detail="; ".join(errors))
    profile = session.profile.as_dict() if session.profile else None
    ctx = build_insight_context(totals[Metric.CALORIES].total, totals[Metric.WATER_ML].total, profile)
    try:
        raw = ai_gateway.request_suggestions(ctx)
    except ai_gateway.SuggestionError as exc:
        status_code = exc.status_code if exc.status_code in (402, 429) else 502
        raise HTTPException(status_code=status_code, detail=str(exc)) from exc
    return SuggestionListResponse(suggestions=parse_suggestions(raw))


@app.get("/api/reminders")
def reminders_list(session: SessionContext = Depends(require_session)) -> dict[str, Any]:
    return {"reminders": list_reminders(session)}


@app.post("/api/reminders", status_code=201)
def reminders_create(req: ReminderCreateRequest, session: SessionContext = Depends(require_session)) -> dict[str, Any]:
    try:
        return create_reminder(session, reminder_type=req.reminder_type, time_of_day=req.time)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.delete("/api/reminders/{reminder_id}")
def reminders_delete(reminder_id: int, session: SessionContext = Depends(require_session)) -> dict[str, Any]:
    if not delete_reminder(session, reminder_id):
        raise HTTPException(status_code=404, detail="Reminder not found")
    return {"ok": True}
