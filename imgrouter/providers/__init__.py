"""
Image Providers for imgrouter

One adapter per backend protocol: synchronous JSON (VolcEngine), multipart
edit / JSON generate (Gitee), submit-and-poll (ModelScope) and Gradio SSE
with URL failover (HuggingFace).
"""

from .base import BaseImageProvider
from .factory import ImageProviderFactory
from .gitee import GiteeProvider
from .huggingface import HuggingFaceProvider
from .modelscope import ModelScopeProvider
from .volcengine import VolcEngineProvider

__all__ = [
    "BaseImageProvider",
    "ImageProviderFactory",
    "GiteeProvider",
    "HuggingFaceProvider",
    "ModelScopeProvider",
    "VolcEngineProvider",
]
