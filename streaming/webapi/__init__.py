"""FastAPI application exposing the stream settings document."""

from __future__ import annotations

from fastapi import FastAPI

from .settings import router as settings_router

app = FastAPI(title="Streaming Settings Web API", version="1.0.0")

app.include_router(settings_router)


__all__ = ["app"]
