# -*- coding: utf-8 -*-
"""
NutriFlow API

Practice-management backend for nutrition professionals: patients,
appointments, diet plans, chat, finances, plus a live WebSocket feed.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from .appointments.api import router as appointments_router
from .auth.api import router as auth_router
from .auth.security import get_current_user_from_request, get_token
from .chat.api import router as chat_router
from .config import Settings, settings
from .dashboard.api import router as dashboard_router
from .diet_plans.api import router as diet_plans_router
from .errors import NutriFlowError
from .financial.api import router as financial_router
from .messages import notification
from .patients.api import router as patients_router
from .profile.api import router as profile_router
from .realtime.websocket import websocket_endpoint
from .services import Services
from .uploads.api import router as uploads_router

logger = logging.getLogger(__name__)

_AUTH_EXEMPT_PREFIXES = (
    "/api/auth/login",
    "/api/auth/register",
    "/api/docs",
    "/api/redoc",
    "/api/openapi.json",
    "/api/uploads/files",
    "/api/ws",
)

# Dashboard pages served to signed-in professionals only.
_PROTECTED_PAGE_PREFIXES = ("/dashboard", "/patients", "/schedule", "/diet-plans", "/chat", "/financial", "/settings")


def _is_protected_page(path: str) -> bool:
    return any(path == p or path.startswith(p + "/") for p in _PROTECTED_PAGE_PREFIXES)


def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or settings
    # Build services eagerly so the store exists even when lifespan events are not triggered.
    services = Services(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.services.close()

    app = FastAPI(
        title="NutriFlow",
        description="Patients, appointments, diet plans, chat and finances for nutrition professionals",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _auth_gate(request: Request, call_next):
        path = request.url.path
        if path.startswith("/api") and path != "/api/health" and not any(path.startswith(p) for p in _AUTH_EXEMPT_PREFIXES):
            try:
                user = get_current_user_from_request(request)
                request.state.user = user
            except HTTPException as exc:
                return JSONResponse(
                    status_code=exc.status_code,
                    content={"detail": exc.detail, "notification": notification("not_authenticated", level="error")},
                )
        elif _is_protected_page(path):
            token = get_token(headers=request.headers, cookies=request.cookies)
            if services.identity.resolve(token) is None:
                return RedirectResponse(url=config.login_path, status_code=307)
        return await call_next(request)

    @app.exception_handler(NutriFlowError)
    async def _nutriflow_error(request: Request, exc: NutriFlowError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "notification": notification(exc.message_key, level="error")},
        )

    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(patients_router)
    app.include_router(appointments_router)
    app.include_router(diet_plans_router)
    app.include_router(chat_router)
    app.include_router(financial_router)
    app.include_router(dashboard_router)
    app.include_router(uploads_router)

    @app.get("/api/health")
    def health_check():
        return {
            "status": "ok",
            "version": "1.0.0",
            "timestamp": datetime.now().isoformat(),
        }

    @app.websocket("/api/ws/live")
    async def live_websocket(websocket: WebSocket):
        """Live snapshots of the signed-in professional's collections."""
        await websocket_endpoint(websocket, websocket.app.state.services)

    return app


app = create_app()


def run() -> None:
    """Console entry point (used by pyproject [project.scripts])."""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        port = int(settings.port_raw)
    except ValueError:
        port = 8000

    uvicorn.run("nutriflow.api:app", host=settings.host, port=port, reload=False)
