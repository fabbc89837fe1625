"""
FastAPI dependencies: storage, settings, admin key check.

The app factory may inject a storage handle and settings on app.state (tests do);
otherwise they are built lazily from the environment on first use.
"""

from __future__ import annotations

import hmac
import threading

from fastapi import Depends, Header, HTTPException, Request

from backend_devscore.config import Settings, get_settings
from backend_devscore.database import StorageHandle, get_storage

_storage_lock = threading.Lock()


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


def get_app_storage(request: Request) -> StorageHandle:
    """Dependency: app-scoped storage handle."""
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        with _storage_lock:
            storage = getattr(request.app.state, "storage", None)
            if storage is None:
                storage = get_storage(get_app_settings(request).database_url)
                request.app.state.storage = storage
    return storage


def require_admin(
    x_admin_key: str | None = Header(None, alias="X-Admin-Key"),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Reject unless X-Admin-Key matches ADMIN_API_KEY. Admin routes are off when no key is configured."""
    if not settings.admin_api_key:
        raise HTTPException(
            status_code=503,
            detail={"code": "ADMIN_DISABLED", "message": "Admin API key not configured"},
        )
    if not x_admin_key or not hmac.compare_digest(x_admin_key, settings.admin_api_key):
        raise HTTPException(
            status_code=401,
            detail={"code": "UNAUTHORIZED", "message": "Invalid admin key"},
        )
