"""
Request dispatcher: credential -> provider -> canonical request -> adapter
-> markdown content.

Transport-agnostic; the FastAPI routes wrap it with HTTP envelopes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from .audit_logger import AuditLogger
from .config import GatewayConfig
from .exceptions import AuthenticationError, GatewayError
from .formatter import format_images
from .http_client import HttpClient
from .models import Provider
from .providers import ImageProviderFactory
from .router import classify
from .transcript import extract

logger = logging.getLogger(__name__)


@dataclass
class GatewayResult:
    provider: Provider
    content: str


class ImageGateway:
    """
    Stateless pipeline shared by all requests.

    Args:
        config: Gateway configuration; built-in defaults when omitted.
        http: HTTP client override (tests inject a mock transport).
    """

    def __init__(self, config: Optional[GatewayConfig] = None, http: Optional[HttpClient] = None):
        self.config = config or GatewayConfig()
        self.factory = ImageProviderFactory(self.config, http)

    def route(self, credential: Optional[str], audit: Optional[AuditLogger] = None) -> Provider:
        """Classify the credential, rejecting missing or unrecognized keys."""
        if not credential:
            logger.warning("Authorization header missing")
            raise AuthenticationError("Authorization header missing")

        provider = classify(credential, audit)
        if provider is Provider.UNKNOWN:
            logger.warning("API key format not recognized")
            raise AuthenticationError("Invalid API Key format. Could not detect provider.")
        logger.info(f"Routing to {provider.value}")
        return provider

    async def generate(
        self,
        credential: Optional[str],
        messages: Sequence[Any],
        model: Optional[str] = None,
        size: Optional[str] = None,
        response_format: Optional[str] = None,
        audit: Optional[AuditLogger] = None,
    ) -> GatewayResult:
        """
        Run one request through the full pipeline.

        Raises:
            AuthenticationError: Missing or unclassifiable credential.
            GatewayError: Any adapter failure, tagged with the provider name.
        """
        audit = audit or AuditLogger()
        provider = self.route(credential, audit)
        request = extract(messages, model=model, size=size, response_format=response_format)
        adapter = self.factory.create_provider(provider)

        try:
            images = await adapter.generate(credential, request, audit)
        except GatewayError as e:
            if e.provider is None:
                e.provider = provider.value
            raise
        except Exception as e:
            logger.error(f"Unexpected {provider.value} adapter error: {e}", exc_info=True)
            raise GatewayError(str(e) or "Internal Server Error", provider.value) from e

        return GatewayResult(provider=provider, content=format_images(images))
