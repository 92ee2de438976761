from __future__ import annotations

import os

from fastapi import Depends, Header, HTTPException

from .profile import SessionContext, load_snapshot
from .store import StoreError


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-Api-Key")) -> None:
    expected = os.getenv("API_KEY")
    if not expected:
        # Fail closed: if API_KEY not set, do not accept requests.
        raise HTTPException(status_code=500, detail="Server misconfigured: API_KEY not set")
    if not x_api_key or x_api_key != expected:
        raise HTTPException(status_code=401, detail="Unauthorized")


def require_session(
    _: None = Depends(require_api_key),
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> SessionContext:
    """Session for the user the upstream auth provider vouched for."""
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing user")
    try:
        profile = load_snapshot(user_id)
    except StoreError as exc:
        raise HTTPException(status_code=503, detail="Failed to load profile") from exc
    return SessionContext(user_id=user_id, profile=profile)
