"""
Structured audit logging for gateway requests.

Produces JSON log entries via Python's standard logging module under
the ``imgrouter.audit`` logger name.  Each entry includes a timestamp,
event_type, the request_id and event-specific fields.

Usage::

    audit = AuditLogger(generate_request_id())
    audit.log_provider_routing(provider="HuggingFace", key_prefix="hf_a")
    audit.log_api_call_end("HuggingFace", "generate_image", success=True, duration_ms=812)
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

_audit_logger = logging.getLogger("imgrouter.audit")

# Prompts longer than this are truncated in the log entry
MAX_LOGGED_PROMPT = 4000


def generate_request_id() -> str:
    """Unique opaque identifier used to correlate one request's events."""
    return f"req_{uuid.uuid4().hex[:12]}"


def summarize_image_ref(ref: str) -> str:
    """Reduce data URIs to their MIME prefix and size so base64 never hits the log."""
    if ref.startswith("data:"):
        header, _, payload = ref.partition(",")
        return f"{header},<{len(payload)} chars>"
    return ref


class AuditLogger:
    """Structured audit logger bound to one request."""

    def __init__(self, request_id: Optional[str] = None) -> None:
        self.request_id = request_id or ""

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _emit(self, event_type: str, fields: Dict[str, Any], level: int = logging.INFO) -> None:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "request_id": self.request_id,
        }
        entry.update(fields)
        _audit_logger.log(level, json.dumps(entry, default=str, ensure_ascii=False))

    # ------------------------------------------------------------------
    # request lifecycle
    # ------------------------------------------------------------------

    def log_request_start(self, method: str, path: str) -> None:
        self._emit("request_start", {"method": method, "path": path})

    def log_request_end(
        self,
        method: str,
        path: str,
        status: int,
        duration_ms: int,
        error: Optional[str] = None,
    ) -> None:
        fields: Dict[str, Any] = {
            "method": method,
            "path": path,
            "status": status,
            "duration_ms": duration_ms,
        }
        if error is not None:
            fields["error"] = error
        level = logging.INFO if status < 400 else logging.WARNING
        self._emit("request_end", fields, level)

    def log_provider_routing(self, provider: str, key_prefix: str) -> None:
        """Log a routing decision. Only a short credential prefix is recorded."""
        self._emit("provider_routing", {"provider": provider, "key_prefix": key_prefix})

    # ------------------------------------------------------------------
    # backend calls
    # ------------------------------------------------------------------

    def log_api_call_start(self, provider: str, api_type: str) -> None:
        self._emit("api_call_start", {"provider": provider, "api_type": api_type})

    def log_api_call_end(
        self,
        provider: str,
        api_type: str,
        success: bool,
        duration_ms: int,
    ) -> None:
        self._emit("api_call_end", {
            "provider": provider,
            "api_type": api_type,
            "success": success,
            "duration_ms": duration_ms,
        }, logging.INFO if success else logging.WARNING)

    def log_full_prompt(self, provider: str, prompt: str) -> None:
        self._emit("full_prompt", {
            "provider": provider,
            "prompt": prompt[:MAX_LOGGED_PROMPT],
            "prompt_length": len(prompt),
        })

    def log_input_images(self, provider: str, images: Iterable[str]) -> None:
        refs = [summarize_image_ref(img) for img in images]
        self._emit("input_images", {
            "provider": provider,
            "images": refs,
            "image_count": len(refs),
        })

    def log_generation_start(
        self,
        provider: str,
        model: str,
        size: str,
        prompt_length: int,
    ) -> None:
        self._emit("generation_start", {
            "provider": provider,
            "model": model,
            "size": size,
            "prompt_length": prompt_length,
        })

    def log_generated_images(self, provider: str, images: List[Dict[str, Any]]) -> None:
        self._emit("generated_images", {
            "provider": provider,
            "images": images,
            "image_count": len(images),
        })

    def log_generation_complete(self, provider: str, image_count: int, duration_ms: int) -> None:
        self._emit("generation_complete", {
            "provider": provider,
            "image_count": image_count,
            "duration_ms": duration_ms,
        })

    def log_generation_failed(self, provider: str, reason: str) -> None:
        self._emit("generation_failed", {"provider": provider, "reason": reason}, logging.ERROR)
