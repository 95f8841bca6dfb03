"""
Gitee Image Provider - Gitee AI (Moark) synchronous image API

Two mutually exclusive modes:
- generate: JSON POST to the generations endpoint (no input images)
- edit: multipart POST of the first input image to the edits endpoint,
  always at the fixed edit size since edit models only accept it
"""

import logging
from typing import List

from ..audit_logger import AuditLogger
from ..exceptions import BackendDataError
from ..http_client import decode_data_uri
from ..models import CanonicalRequest, GeneratedImage, Provider
from .base import BaseImageProvider

logger = logging.getLogger(__name__)


class GiteeProvider(BaseImageProvider):
    """Gitee AI image provider with generate and edit modes."""

    provider = Provider.GITEE

    def supports_editing(self) -> bool:
        return True

    async def _load_image(self, image: str):
        """Raw bytes and MIME type for a data URI or a downloadable URL."""
        if image.startswith("data:image/"):
            logger.info("Gitee input image is already base64")
            return decode_data_uri(image, self.name)

        logger.info(f"Gitee downloading input image: {image[:50]}...")
        data, mime_type = await self.http.download(image, provider=self.name)
        logger.info(f"Gitee image downloaded, MIME: {mime_type}, size: {len(data) // 1024}KB")
        return data, mime_type

    def _results(self, data: dict) -> List[GeneratedImage]:
        items = data.get("data") or []
        if not items:
            raise BackendDataError("Gitee returned no image data", self.name)
        return self.images_from_data(items)

    async def _edit(self, credential: str, request: CanonicalRequest, audit: AuditLogger) -> List[GeneratedImage]:
        edit_models = self.config.edit_models
        model = self.resolve_model(
            request.model, edit_models, edit_models[0] if edit_models else self.config.default_model
        )
        size = self.config.default_edit_size
        audit.log_generation_start(self.name, model, size, len(request.prompt))
        logger.info(f"Gitee using image edit mode, model: {model}")

        image_bytes, mime_type = await self._load_image(request.images[0])

        form = {
            "model": model,
            "prompt": request.prompt or "",
            "size": size,
            "n": "1",
            "response_format": "b64_json",
        }
        files = {"image": ("image.png", image_bytes, mime_type)}

        logger.debug(f"Gitee sending edit request to: {self.config.edit_api_url}")
        response = await self.http.request(
            "POST",
            self.config.edit_api_url,
            headers=self._bearer_headers(credential, json_body=False),
            data=form,
            files=files,
            provider=self.name,
        )
        self.check_response(response, "Edit API Error")
        return self._results(self.parse_json(response))

    async def _text_to_image(self, credential: str, request: CanonicalRequest, audit: AuditLogger) -> List[GeneratedImage]:
        model = self.resolve_model(
            request.model, self.config.supported_models, self.config.default_model
        )
        size = self.resolve_size(request.size, self.config.default_size)
        audit.log_generation_start(self.name, model, size, len(request.prompt))
        logger.info(f"Gitee using text-to-image mode, model: {model}")

        body = {
            "model": model,
            "prompt": self.prompt_or_default(request.prompt),
            "size": size,
            "n": 1,
            "response_format": "b64_json",
        }

        logger.debug(f"Gitee sending generation request to: {self.config.api_url}")
        response = await self.http.request(
            "POST",
            self.config.api_url,
            headers=self._bearer_headers(credential),
            json=body,
            provider=self.name,
        )
        self.check_response(response, "API Error")
        return self._results(self.parse_json(response))

    async def _generate(
        self,
        credential: str,
        request: CanonicalRequest,
        audit: AuditLogger,
    ) -> List[GeneratedImage]:
        if request.has_images:
            return await self._edit(credential, request, audit)
        return await self._text_to_image(credential, request, audit)
