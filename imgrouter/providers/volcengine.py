"""
VolcEngine Image Provider - Doubao Seedream via the Ark images endpoint

Single synchronous JSON call. Reference images are inlined as base64 data
URIs before sending so the request does not depend on the source URL
staying reachable; results are requested as b64_json for the same reason.
"""

import asyncio
import logging
from typing import Any, Dict, List, Sequence

from ..audit_logger import AuditLogger
from ..exceptions import BackendError
from ..models import CanonicalRequest, GeneratedImage, Provider
from .base import BaseImageProvider

logger = logging.getLogger(__name__)

DEFAULT_RESPONSE_FORMAT = "b64_json"


class VolcEngineProvider(BaseImageProvider):
    """VolcEngine (Doubao Seedream) image provider."""

    provider = Provider.VOLCENGINE

    def supports_editing(self) -> bool:
        return True

    async def _inline_image(self, image: str) -> str:
        """Convert an http(s) image to a data URI; keep the URL if that fails."""
        if image.startswith("data:image/") or not image.startswith("http"):
            return image
        try:
            b64, mime_type = await self.http.fetch_image(image, provider=self.name)
            return f"data:{mime_type};base64,{b64}"
        except BackendError as e:
            logger.warning(f"VolcEngine image to base64 failed, falling back to URL: {e}")
            return image

    async def inline_images(self, images: Sequence[str]) -> List[str]:
        """Inline all reference images concurrently, preserving order."""
        return list(await asyncio.gather(*(self._inline_image(img) for img in images)))

    def build_body(
        self,
        request: CanonicalRequest,
        model: str,
        size: str,
        images: Sequence[str],
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "model": model,
            "prompt": self.prompt_or_default(request.prompt),
            "response_format": request.response_format or DEFAULT_RESPONSE_FORMAT,
            "size": size,
            "watermark": False,
        }
        if images:
            body["image"] = images[0] if len(images) == 1 else list(images)
            if len(images) > 1:
                body["sequential_image_generation"] = "disabled"
        return body

    async def _generate(
        self,
        credential: str,
        request: CanonicalRequest,
        audit: AuditLogger,
    ) -> List[GeneratedImage]:
        images = await self.inline_images(request.images)

        model = self.resolve_model(
            request.model, self.config.supported_models, self.config.default_model
        )
        default_size = self.config.default_edit_size if images else self.config.default_size
        size = self.resolve_size(request.size, default_size)
        audit.log_generation_start(self.name, model, size, len(request.prompt))

        headers = self._bearer_headers(credential)
        headers["Connection"] = "close"
        response = await self.http.request(
            "POST",
            self.config.api_url,
            headers=headers,
            json=self.build_body(request, model, size, images),
            provider=self.name,
        )

        self.check_response(response, "API Error")

        data = self.parse_json(response)
        results = self.images_from_data(data.get("data") or [])
        logger.info(f"VolcEngine generated {len(results)} image(s)")
        return results
