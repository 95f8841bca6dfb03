"""
Core data types shared by the router, extractor, adapters and formatter.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class Provider(str, Enum):
    """Image backends the gateway can route to."""
    VOLCENGINE = "VolcEngine"
    GITEE = "Gitee"
    MODELSCOPE = "ModelScope"
    HUGGINGFACE = "HuggingFace"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class CanonicalRequest:
    """Backend-agnostic generation request derived from a chat transcript."""
    prompt: str = ""
    images: Tuple[str, ...] = field(default_factory=tuple)
    model: Optional[str] = None
    size: Optional[str] = None
    response_format: Optional[str] = None

    @property
    def has_images(self) -> bool:
        return len(self.images) > 0


@dataclass
class GeneratedImage:
    """One generated image, either a URL or inline base64 data."""
    url: Optional[str] = None
    b64_json: Optional[str] = None
    mime_type: str = "image/png"

    def to_log_dict(self) -> dict:
        if self.b64_json:
            return {"b64_json": f"<{len(self.b64_json)} chars>", "mime_type": self.mime_type}
        return {"url": self.url}
