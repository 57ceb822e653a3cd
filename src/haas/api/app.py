"""
FastAPI application wiring.

This file creates the `FastAPI` instance and applies CORS for the staff/admin
frontends. Business logic lives in `haas.api.routes` and `haas.attendance`.

Run with: `uvicorn haas.api.app:app`
"""

from __future__ import annotations

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from haas.config.settings import get_settings
from haas.core.logging import configure_logging

from .routes import router

configure_logging()

app = FastAPI(title="HAAS Attendance API", version="0.1.0")

# The staff/admin frontend calls the API from the browser (`api.cors_origins`, or
# HAAS_CORS_ORIGINS as a comma-separated list; empty disables CORS).
cors_origins = get_settings().api.cors_origins
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )

app.include_router(router)
