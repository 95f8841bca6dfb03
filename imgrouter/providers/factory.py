"""
Image Provider Factory - map a routed Provider to its adapter

The provider set is closed: each Provider value maps to exactly one adapter
class, built with that backend's slice of the GatewayConfig.
"""

import logging
from typing import Dict, List, Optional, Type

from ..config import GatewayConfig
from ..exceptions import AuthenticationError
from ..http_client import HttpClient
from ..models import Provider
from .base import BaseImageProvider
from .gitee import GiteeProvider
from .huggingface import HuggingFaceProvider
from .modelscope import ModelScopeProvider
from .volcengine import VolcEngineProvider

logger = logging.getLogger(__name__)


class ImageProviderFactory:
    """Factory for creating image provider instances."""

    _providers: Dict[Provider, Type[BaseImageProvider]] = {
        Provider.VOLCENGINE: VolcEngineProvider,
        Provider.GITEE: GiteeProvider,
        Provider.MODELSCOPE: ModelScopeProvider,
        Provider.HUGGINGFACE: HuggingFaceProvider,
    }

    def __init__(self, config: Optional[GatewayConfig] = None, http: Optional[HttpClient] = None):
        self.config = config or GatewayConfig()
        self.http = http or HttpClient(timeout=self.config.timeout)

    def _provider_config(self, provider: Provider):
        return {
            Provider.VOLCENGINE: self.config.volcengine,
            Provider.GITEE: self.config.gitee,
            Provider.MODELSCOPE: self.config.modelscope,
            Provider.HUGGINGFACE: self.config.huggingface,
        }[provider]

    def create_provider(self, provider: Provider) -> BaseImageProvider:
        """
        Create the adapter for a routed provider.

        Raises:
            AuthenticationError: provider is UNKNOWN (no adapter exists).
        """
        provider_class = self._providers.get(provider)
        if provider_class is None:
            raise AuthenticationError("Invalid API Key format. Could not detect provider.")
        return provider_class(
            self._provider_config(provider),
            self.http,
            default_prompt=self.config.default_prompt,
        )

    @classmethod
    def get_supported_providers(cls) -> List[str]:
        """Get list of supported provider names."""
        return [p.value for p in cls._providers]
