"""
Response normalization - generated images to markdown, markdown to
OpenAI chat-completion envelopes (JSON or SSE chunks).
"""

import json
import time
import uuid
from typing import Any, Dict, Iterator, Optional, Sequence

from .models import GeneratedImage

FAILURE_PLACEHOLDER = "Image generation failed"
UNKNOWN_MODEL = "unknown-model"


def format_image(image: GeneratedImage) -> str:
    """Markdown for one image; inline data wins over a URL. Empty if neither."""
    if image.b64_json:
        return f"![Generated Image](data:{image.mime_type};base64,{image.b64_json})"
    if image.url:
        return f"![Generated Image]({image.url})"
    return ""


def format_images(images: Sequence[GeneratedImage]) -> str:
    """Join image markdown with blank lines; never returns an empty string."""
    parts = [md for md in (format_image(img) for img in images) if md]
    return "\n\n".join(parts) or FAILURE_PLACEHOLDER


def new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4()}"


def build_completion(
    content: str,
    model: Optional[str] = None,
    completion_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Non-streaming chat.completion body."""
    return {
        "id": completion_id or new_completion_id(),
        "object": "chat.completion",
        "created": int(time.time()),
        "model": model or UNKNOWN_MODEL,
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "finish_reason": "stop",
        }],
        "usage": {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0},
    }


def _chunk(completion_id: str, model: str, delta: Dict[str, Any], finish_reason: Optional[str]) -> str:
    data = json.dumps({
        "id": completion_id,
        "object": "chat.completion.chunk",
        "created": int(time.time()),
        "model": model,
        "choices": [{
            "index": 0,
            "delta": delta,
            "finish_reason": finish_reason,
        }],
    }, ensure_ascii=False)
    return f"data: {data}\n\n"


def iter_stream_events(
    content: str,
    model: Optional[str] = None,
    completion_id: Optional[str] = None,
) -> Iterator[str]:
    """
    SSE frames for a streamed completion: one content chunk, one stop chunk,
    then the [DONE] marker.
    """
    completion_id = completion_id or new_completion_id()
    model = model or UNKNOWN_MODEL
    yield _chunk(completion_id, model, {"role": "assistant", "content": content}, None)
    yield _chunk(completion_id, model, {}, "stop")
    yield "data: [DONE]\n\n"
