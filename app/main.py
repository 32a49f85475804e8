# File: app/main.py
# Project: college-issue-portal

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi import _rate_limit_exceeded_handler

from app.core.config import cors_origins_list, settings
from app.core.errors import AppError, app_error_handler
from app.core.ratelimit import limiter
from app.models import notification  # noqa: F401  registers the notifications table
from app.routers import auth, issues, departments, profiles, dashboards, photos

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="College Issue Portal API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
def health():
    return {"ok": True}

app.include_router(auth.router)
app.include_router(departments.router)
app.include_router(profiles.router)
app.include_router(issues.router)
app.include_router(dashboards.router)
app.include_router(photos.router)
