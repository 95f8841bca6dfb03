"""FastAPI app creation, CORS, global gateway state, and helper functions."""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import load_config
from ..gateway import ImageGateway

logger = logging.getLogger(__name__)

SERVICE_NAME = "img-router"

_gateway: Optional[ImageGateway] = None


def get_gateway() -> ImageGateway:
    """Return the shared gateway. Lazy-loads config on first call."""
    global _gateway
    if _gateway is None:
        _gateway = ImageGateway(load_config())
    return _gateway


def set_gateway(new_gateway: Optional[ImageGateway]):
    """Replace the shared gateway (tests inject one with a mock transport)."""
    global _gateway
    _gateway = new_gateway


def extract_bearer(auth_header: Optional[str]) -> str:
    """Credential from an ``Authorization: Bearer <key>`` header ('' if absent)."""
    if not auth_header:
        return ""
    return auth_header.replace("Bearer ", "").strip()


# --- FastAPI app creation (after all helpers are defined to avoid circular imports) ---

def _create_api() -> FastAPI:
    """Create and configure the FastAPI app with routes."""
    _api = FastAPI(title="imgrouter", version=__version__)

    allowed_origins_str = os.getenv("IMGROUTER_ALLOWED_ORIGINS", "*")
    allowed_origins = [o.strip() for o in allowed_origins_str.split(",") if o.strip()]
    _api.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_methods=["POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )

    from .routes import register_routes
    register_routes(_api)
    return _api


api = _create_api()
