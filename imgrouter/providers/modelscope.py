"""
ModelScope Image Provider - asynchronous task API (submit, then poll)

Submit returns a task_id; the task is then polled at a fixed interval until
it reaches a terminal status or the attempt budget runs out.

Poll states:
    PENDING    - entry state; any non-terminal task_status, or a poll that
                 failed at the transport/HTTP level
    SUCCEEDED  - task_status == "SUCCEED"
    FAILED     - task_status == "FAILED"
    TIMED_OUT  - max_poll_attempts reached while still PENDING
"""

import asyncio
import json
import logging
from enum import Enum
from typing import Any, Dict, List

from ..audit_logger import AuditLogger
from ..exceptions import BackendDataError, BackendError, BackendTimeoutError
from ..models import CanonicalRequest, GeneratedImage, Provider
from .base import BaseImageProvider

logger = logging.getLogger(__name__)


class PollState(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


def classify_task_status(payload: Dict[str, Any]) -> PollState:
    """Map one poll response body to the next state."""
    status = payload.get("task_status")
    if status == "SUCCEED":
        return PollState.SUCCEEDED
    if status == "FAILED":
        return PollState.FAILED
    return PollState.PENDING


class ModelScopeProvider(BaseImageProvider):
    """ModelScope (Z-Image) image provider using async task mode."""

    provider = Provider.MODELSCOPE

    async def _submit(self, credential: str, model: str, size: str, prompt: str) -> str:
        headers = self._bearer_headers(credential)
        headers["X-ModelScope-Async-Mode"] = "true"
        response = await self.http.request(
            "POST",
            f"{self.config.api_url}/images/generations",
            headers=headers,
            json={"model": model, "prompt": prompt, "size": size, "n": 1},
            provider=self.name,
        )
        self.check_response(response, "Submit Error")

        task_id = self.parse_json(response).get("task_id")
        if not task_id:
            raise BackendDataError("ModelScope submit response has no task_id", self.name)
        logger.info(f"ModelScope task submitted, Task ID: {task_id}")
        return task_id

    async def _poll_once(self, credential: str, task_id: str) -> Dict[str, Any]:
        """
        One status check. Returns an empty dict when the poll itself failed,
        which keeps the task PENDING.
        """
        try:
            response = await self.http.request(
                "GET",
                f"{self.config.api_url}/tasks/{task_id}",
                headers={
                    "Authorization": f"Bearer {credential}",
                    "X-ModelScope-Task-Type": "image_generation",
                },
                provider=self.name,
            )
        except BackendError as e:
            logger.warning(f"ModelScope poll transport error: {e}")
            return {}

        if not response.is_success:
            logger.warning(f"ModelScope poll warning: {response.status_code}")
            return {}
        try:
            return self.parse_json(response)
        except BackendDataError as e:
            logger.warning(f"ModelScope poll returned unreadable body: {e}")
            return {}

    async def _wait_for_task(self, credential: str, task_id: str) -> Dict[str, Any]:
        """Poll until a terminal state; returns the SUCCEEDED payload."""
        for attempt in range(1, self.config.max_poll_attempts + 1):
            await asyncio.sleep(self.config.poll_interval)

            payload = await self._poll_once(credential, task_id)
            state = classify_task_status(payload)

            if state is PollState.SUCCEEDED:
                logger.info(f"ModelScope task succeeded after {attempt} poll(s)")
                return payload
            if state is PollState.FAILED:
                logger.error("ModelScope task failed")
                raise BackendDataError(
                    f"ModelScope Task Failed: {json.dumps(payload, ensure_ascii=False)}",
                    self.name,
                )
            logger.debug(f"ModelScope status: {payload.get('task_status')} (attempt {attempt})")

        logger.error("ModelScope task timed out")
        raise BackendTimeoutError(
            f"ModelScope Task Timeout after {self.config.max_poll_attempts} polls",
            self.name,
        )

    async def _generate(
        self,
        credential: str,
        request: CanonicalRequest,
        audit: AuditLogger,
    ) -> List[GeneratedImage]:
        if request.has_images:
            logger.warning("ModelScope does not support reference images, ignoring input images")

        model = self.resolve_model(
            request.model, self.config.supported_models, self.config.default_model
        )
        size = self.resolve_size(request.size, self.config.default_size)
        audit.log_generation_start(self.name, model, size, len(request.prompt))

        task_id = await self._submit(credential, model, size, self.prompt_or_default(request.prompt))
        payload = await self._wait_for_task(credential, task_id)

        return [GeneratedImage(url=url) for url in payload.get("output_images") or [] if url]
