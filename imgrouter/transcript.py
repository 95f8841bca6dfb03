"""
Transcript extraction - turn an OpenAI chat history into a CanonicalRequest.

The prompt comes from the latest user message. Images are collected
"current turn first": images attached to the latest user message take the
first slots, followed by images from the most recent earlier message that
carried any (markdown images in text, or image_url content items). Only that
single earlier message is used.

All functions operate on OpenAI message format:
- Text: {"role": "user", "content": "a red fox"}
- Structured: {"role": "user", "content": [{"type": "text", "text": "..."},
  {"type": "image_url", "image_url": {"url": "https://..."}}]}
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import CanonicalRequest

logger = logging.getLogger(__name__)

# ![alt](https://...) or ![alt](data:image/...)
_MARKDOWN_IMAGE_RE = re.compile(r"!\[.*?\]\(((?:https?://|data:image/)[^)]+)\)")


def _as_dict(message: Any) -> Dict[str, Any]:
    if hasattr(message, "model_dump"):
        return message.model_dump()
    return message if isinstance(message, dict) else {}


def _image_item_urls(items: Sequence[Any]) -> List[str]:
    """URLs of image_url items in order, skipping missing or empty ones."""
    urls = []
    for item in items:
        if not isinstance(item, dict) or item.get("type") != "image_url":
            continue
        image_url = item.get("image_url")
        url = image_url.get("url") if isinstance(image_url, dict) else image_url
        if url:
            urls.append(url)
    return urls


def _first_text(items: Sequence[Any]) -> str:
    for item in items:
        if isinstance(item, dict) and item.get("type") == "text":
            return item.get("text") or ""
    return ""


def images_in_content(content: Any) -> List[str]:
    """Image references carried by one message's content."""
    if isinstance(content, str):
        return _MARKDOWN_IMAGE_RE.findall(content)
    if isinstance(content, list):
        return _image_item_urls(content)
    return []


def find_last_user_message(messages: Sequence[Dict[str, Any]]) -> int:
    """Index of the last user message, or -1."""
    for i in range(len(messages) - 1, -1, -1):
        if messages[i].get("role") == "user":
            return i
    return -1


def find_historical_images(messages: Sequence[Dict[str, Any]], before: int) -> List[str]:
    """Images of the nearest message before ``before`` that has any."""
    for i in range(before - 1, -1, -1):
        found = images_in_content(messages[i].get("content"))
        if found:
            logger.debug(f"Found {len(found)} historical reference image(s) in message {i}")
            return found
    return []


def merge_images(current: Sequence[str], historical: Sequence[str]) -> Tuple[str, ...]:
    """Current images first, then historical ones not already present."""
    merged = list(current)
    for image in historical:
        if image not in merged:
            merged.append(image)
    return tuple(merged)


def extract(
    messages: Sequence[Any],
    model: Optional[str] = None,
    size: Optional[str] = None,
    response_format: Optional[str] = None,
) -> CanonicalRequest:
    """
    Build the canonical (prompt, images) request from a chat transcript.

    Pure function: the same transcript always yields the same result.

    Args:
        messages: OpenAI-format messages (dicts or pydantic models).
        model: Requested model, passed through untouched.
        size: Requested size, passed through untouched.
        response_format: Requested response format, passed through untouched.
    """
    msgs = [_as_dict(m) for m in messages or []]

    last_user = find_last_user_message(msgs)
    if last_user == -1:
        return CanonicalRequest(model=model, size=size, response_format=response_format)

    content = msgs[last_user].get("content")
    prompt = ""
    current: List[str] = []
    if isinstance(content, str):
        prompt = content
    elif isinstance(content, list):
        prompt = _first_text(content)
        current = _image_item_urls(content)

    historical = find_historical_images(msgs, last_user)
    images = merge_images(current, historical)

    logger.debug(f"Extracted prompt: {prompt[:80]}... (length: {len(prompt)}), images: {len(images)}")

    return CanonicalRequest(
        prompt=prompt,
        images=images,
        model=model,
        size=size,
        response_format=response_format,
    )
