"""Route registration for the imgrouter API."""

from fastapi import FastAPI

from .chat import router as chat_router
from .health import router as health_router


def register_routes(app: FastAPI):
    app.include_router(chat_router)
    app.include_router(health_router)
