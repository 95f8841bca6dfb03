"""
imgrouter - an OpenAI-compatible image generation gateway

A single ``/v1/chat/completions`` endpoint that recognizes which image backend
a caller's API key belongs to and forwards the request there:

- VolcEngine (UUID keys): text-to-image and image editing
- Gitee (30-60 char alphanumeric keys): text-to-image and multipart editing
- ModelScope (``ms-`` keys): async task submission with polling
- HuggingFace (``hf_`` keys): Gradio Space pool with failover

Quick Start:
    imgrouter --port 10001

    curl -H "Authorization: Bearer hf_xxx" \\
         -d '{"messages": [{"role": "user", "content": "a red fox"}]}' \\
         http://localhost:10001/v1/chat/completions
"""

__version__ = "0.1.0"

from .config import GatewayConfig, load_config
from .exceptions import (
    AuthenticationError,
    BackendDataError,
    BackendError,
    BackendHttpError,
    BackendTimeoutError,
    BackendTransportError,
    ConfigurationError,
    GatewayError,
)
from .gateway import GatewayResult, ImageGateway
from .models import CanonicalRequest, GeneratedImage, Provider

__all__ = [
    "__version__",
    # Gateway
    "ImageGateway", "GatewayResult",
    # Config
    "GatewayConfig", "load_config",
    # Models
    "Provider", "CanonicalRequest", "GeneratedImage",
    # Errors
    "GatewayError", "AuthenticationError", "ConfigurationError",
    "BackendError", "BackendHttpError", "BackendDataError",
    "BackendTimeoutError", "BackendTransportError",
]
