"""
HuggingFace Image Provider - Gradio Spaces queue API with URL failover

Each Space in the configured pool exposes the same ``generate_image``
Gradio endpoint. A call submits to the queue, then reads the result as a
server-sent-event stream. Spaces are tried in pool order until one yields an
image URL.
"""

import json
import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..audit_logger import AuditLogger
from ..exceptions import BackendDataError, ConfigurationError, GatewayError
from ..models import CanonicalRequest, GeneratedImage, Provider
from .base import BaseImageProvider

logger = logging.getLogger(__name__)

QUEUE_PATH = "/gradio_api/call/generate_image"
MAX_SEED = 2147483647
FALLBACK_DIMENSION = 1024


@dataclass
class FailoverAttempt:
    """Record of a single failed Space during failover."""
    url: str
    error: Exception


def parse_size(size: str) -> Tuple[int, int]:
    """``"WxH"`` to (width, height); unparseable parts fall back to 1024."""
    parts = size.lower().split("x")

    def _dim(index: int) -> int:
        try:
            value = int(parts[index])
        except (IndexError, ValueError):
            return FALLBACK_DIMENSION
        return value or FALLBACK_DIMENSION

    return _dim(0), _dim(1)


def parse_sse_image_url(stream: str) -> Optional[str]:
    """
    Extract the image URL from a Gradio SSE result stream.

    Only ``data:`` lines following ``event: complete`` are considered; any
    other event disarms them. ``event: error`` raises BackendDataError.
    """
    awaiting_data = False
    for line in stream.split("\n"):
        if line.startswith("event:"):
            event_type = line[len("event:"):].strip()
            if event_type == "error":
                raise BackendDataError("HuggingFace API returned an error event", Provider.HUGGINGFACE.value)
            awaiting_data = event_type == "complete"
        elif line.startswith("data:") and awaiting_data:
            raw = line[len("data:"):].strip()
            try:
                data = json.loads(raw)
            except ValueError as e:
                logger.error(f"Failed to parse HuggingFace SSE data: {e}")
                continue
            if isinstance(data, list) and data and isinstance(data[0], dict) and data[0].get("url"):
                return data[0]["url"]
    return None


class HuggingFaceProvider(BaseImageProvider):
    """HuggingFace Spaces (Z-Image) provider with ordered failover."""

    provider = Provider.HUGGINGFACE

    def _headers(self, credential: str) -> dict:
        headers = {"Content-Type": "application/json"}
        if credential:
            headers["Authorization"] = f"Bearer {credential}"
        return headers

    def build_payload(self, prompt: str, size: str) -> dict:
        width, height = parse_size(size)
        seed = random.randint(0, MAX_SEED)
        return {"data": [self.prompt_or_default(prompt), height, width, self.config.steps, seed, False]}

    async def _call_space(self, api_url: str, headers: dict, payload: dict) -> str:
        """Submit to one Space and read its result stream. Raises on any failure."""
        queue_response = await self.http.request(
            "POST",
            f"{api_url}{QUEUE_PATH}",
            headers=headers,
            json=payload,
            provider=self.name,
        )
        self.check_response(queue_response, "API Error")

        event_id = self.parse_json(queue_response).get("event_id")
        if not event_id:
            raise BackendDataError("HuggingFace queue response has no event_id", self.name)
        logger.info(f"HuggingFace task queued, Event ID: {event_id}")

        result_response = await self.http.request(
            "GET",
            f"{api_url}{QUEUE_PATH}/{event_id}",
            headers=headers,
            provider=self.name,
        )
        self.check_response(result_response, "Result API Error")

        image_url = parse_sse_image_url(result_response.text)
        if not image_url:
            raise BackendDataError("Could not extract an image URL from the SSE stream", self.name)
        return image_url

    async def _generate(
        self,
        credential: str,
        request: CanonicalRequest,
        audit: AuditLogger,
    ) -> List[GeneratedImage]:
        model = self.resolve_model(
            request.model, self.config.supported_models, self.config.default_model
        )
        size = self.resolve_size(request.size, self.config.default_size)
        audit.log_generation_start(self.name, model, size, len(request.prompt))

        if request.has_images:
            logger.warning("HuggingFace does not support reference images, ignoring input images")

        api_urls = self.config.api_urls
        if not api_urls:
            logger.error("HuggingFace API URL pool is empty")
            raise ConfigurationError("HuggingFace configuration error: no API URLs configured", self.name)

        headers = self._headers(credential)
        payload = self.build_payload(request.prompt, size)
        attempts: List[FailoverAttempt] = []

        logger.info(f"HuggingFace URL pool size: {len(api_urls)}")
        for index, api_url in enumerate(api_urls, start=1):
            logger.info(f"HuggingFace trying URL [{index}/{len(api_urls)}]: {api_url}")
            try:
                image_url = await self._call_space(api_url, headers, payload)
            except Exception as e:
                logger.error(f"HuggingFace URL [{api_url}] failed: {e}")
                attempts.append(FailoverAttempt(url=api_url, error=e))
                continue

            logger.info(f"HuggingFace succeeded with URL: {api_url}")
            return [GeneratedImage(url=image_url)]

        last_error = attempts[-1].error if attempts else None
        logger.error(f"HuggingFace all {len(attempts)} URL(s) failed: {last_error}")
        if isinstance(last_error, GatewayError):
            raise last_error
        raise BackendDataError(
            f"All HuggingFace URLs failed: {last_error or 'no attempt recorded'}",
            self.name,
        ) from last_error
