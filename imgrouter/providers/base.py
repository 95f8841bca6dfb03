"""
Base Image Provider - Abstract interface for all image generation backends

Each backend (VolcEngine, Gitee, ModelScope, HuggingFace) implements this
interface. Providers receive their immutable configuration at construction
and the caller's credential per call; they never keep per-request state.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..audit_logger import AuditLogger
from ..exceptions import BackendDataError, BackendHttpError
from ..http_client import HttpClient
from ..models import CanonicalRequest, GeneratedImage, Provider

logger = logging.getLogger(__name__)


class BaseImageProvider(ABC):
    """
    Abstract base class for image generation providers.

    Subclasses implement ``_generate()``; ``generate()`` wraps it with the
    observability events every call must emit, on success and on failure.
    """

    provider: Provider = Provider.UNKNOWN

    def __init__(self, config, http: HttpClient, default_prompt: str = "A beautiful scenery"):
        self.config = config
        self.http = http
        self.default_prompt = default_prompt

    @property
    def name(self) -> str:
        return self.provider.value

    # ===== Public entry point =====

    async def generate(
        self,
        credential: str,
        request: CanonicalRequest,
        audit: Optional[AuditLogger] = None,
    ) -> List[GeneratedImage]:
        """
        Generate images for a canonical request.

        Returns:
            Generated images in backend order.

        Raises:
            GatewayError subclasses on any non-recoverable condition.
        """
        audit = audit or AuditLogger()
        api_type = self.api_type(request)
        start = time.monotonic()

        audit.log_api_call_start(self.name, api_type)
        audit.log_full_prompt(self.name, request.prompt)
        if request.has_images:
            audit.log_input_images(self.name, request.images)

        try:
            images = await self._generate(credential, request, audit)
        except Exception as e:
            duration_ms = int((time.monotonic() - start) * 1000)
            audit.log_generation_failed(self.name, str(e))
            audit.log_api_call_end(self.name, api_type, False, duration_ms)
            raise

        duration_ms = int((time.monotonic() - start) * 1000)
        audit.log_generated_images(self.name, [img.to_log_dict() for img in images])
        audit.log_generation_complete(self.name, len(images), duration_ms)
        audit.log_api_call_end(self.name, api_type, True, duration_ms)
        return images

    # ===== Abstract methods (must be implemented by subclasses) =====

    @abstractmethod
    async def _generate(
        self,
        credential: str,
        request: CanonicalRequest,
        audit: AuditLogger,
    ) -> List[GeneratedImage]:
        """Backend-specific protocol."""
        pass

    def supports_editing(self) -> bool:
        """Whether input images are used by this backend."""
        return False

    # ===== Shared helpers =====

    def api_type(self, request: CanonicalRequest) -> str:
        if request.has_images and self.supports_editing():
            return "image_edit"
        return "generate_image"

    def resolve_model(self, requested: Optional[str], whitelist: Sequence[str], default: str) -> str:
        """Requested model if whitelisted, otherwise the default (silently)."""
        if requested and requested in whitelist:
            return requested
        return default

    def resolve_size(self, requested: Optional[str], default: str) -> str:
        """Requested size if allowed by the size whitelist, otherwise the default."""
        supported = getattr(self.config, "supported_sizes", ())
        if requested and (not supported or requested in supported):
            return requested
        return default

    def prompt_or_default(self, prompt: str) -> str:
        return prompt or self.default_prompt

    def _bearer_headers(self, credential: str, json_body: bool = True) -> dict:
        headers = {"Authorization": f"Bearer {credential}"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def check_response(self, response: httpx.Response, label: str) -> None:
        """Raise BackendHttpError carrying the body for any non-2xx status."""
        if response.is_success:
            return
        logger.error(f"{self.name} {label}: {response.status_code} - {response.text}")
        raise BackendHttpError(
            f"{self.name} {label} ({response.status_code}): {response.text}",
            self.name,
            upstream_status=response.status_code,
            body=response.text,
        )

    def parse_json(self, response: httpx.Response) -> Dict[str, Any]:
        """Decode a JSON object body or raise BackendDataError."""
        try:
            data = response.json()
        except ValueError as e:
            raise BackendDataError(f"{self.name} returned invalid JSON: {e}", self.name) from e
        if not isinstance(data, dict):
            raise BackendDataError(f"{self.name} returned unexpected payload: {data!r}", self.name)
        return data

    @staticmethod
    def images_from_data(items: Sequence[dict]) -> List[GeneratedImage]:
        """Map an OpenAI-style ``data`` array to GeneratedImage, base64 first."""
        images = []
        for item in items:
            if not isinstance(item, dict):
                continue
            if item.get("b64_json"):
                images.append(GeneratedImage(b64_json=item["b64_json"]))
            elif item.get("url"):
                images.append(GeneratedImage(url=item["url"]))
        return images

    def __repr__(self):
        return f"<{self.__class__.__name__} provider={self.name}>"
