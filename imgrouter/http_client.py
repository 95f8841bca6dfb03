"""
Timeout-bounded HTTP primitive shared by every provider adapter.

Each call opens its own httpx.AsyncClient inside ``async with`` so that a
timeout tears down the underlying connection instead of leaving it to drain.
"""

import asyncio
import base64
import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from .config import DEFAULT_TIMEOUT
from .exceptions import BackendDataError, BackendHttpError, BackendTimeoutError, BackendTransportError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "image/png"


class HttpClient:
    """
    Thin wrapper around httpx used for all outbound requests.

    Args:
        timeout: Default per-call timeout in seconds.
        transport: Optional httpx transport (tests pass httpx.MockTransport).
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Dict[str, str]] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        provider: Optional[str] = None,
    ) -> httpx.Response:
        """
        Send one request and return the fully read response.

        Non-success statuses are returned, not raised; callers decide whether
        they are fatal.

        Raises:
            BackendTimeoutError: The call exceeded its timeout.
            BackendTransportError: The connection failed before a response arrived.
        """
        timeout = self.timeout if timeout is None else timeout
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=timeout) as client:
                # httpx bounds each connect/read/write step; wait_for bounds the whole call
                return await asyncio.wait_for(
                    client.request(
                        method,
                        url,
                        headers=headers,
                        json=json,
                        data=data,
                        files=files,
                    ),
                    timeout,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error(f"{method} {url} timed out after {timeout}s")
            raise BackendTimeoutError(f"Request to {url} timed out after {timeout}s", provider) from e
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            raise BackendTransportError(f"Connection error for {url}: {e}", provider) from e
        except (httpx.InvalidURL, ValueError) as e:
            logger.error(f"{method} {url} rejected: {e}")
            raise BackendTransportError(f"Invalid URL {url}: {e}", provider) from e

    async def download(self, url: str, provider: Optional[str] = None) -> Tuple[bytes, str]:
        """
        Download an image.

        Returns:
            (raw_bytes, mime_type); the MIME type comes from Content-Type
            with parameters stripped, defaulting to image/png.
        """
        response = await self.request("GET", url, provider=provider)
        if not response.is_success:
            raise BackendHttpError(
                f"Image download failed ({response.status_code}): {url}",
                provider,
                upstream_status=response.status_code,
                body=response.text,
            )
        content_type = response.headers.get("content-type") or DEFAULT_MIME_TYPE
        mime_type = content_type.split(";")[0].strip() or DEFAULT_MIME_TYPE
        return response.content, mime_type

    async def fetch_image(self, url: str, provider: Optional[str] = None) -> Tuple[str, str]:
        """Download an image and return (base64_data, mime_type)."""
        content, mime_type = await self.download(url, provider=provider)
        return base64.b64encode(content).decode("ascii"), mime_type


def decode_data_uri(uri: str, provider: Optional[str] = None) -> Tuple[bytes, str]:
    """Split a ``data:<mime>;base64,<payload>`` URI into raw bytes and MIME type."""
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:"):
        raise BackendDataError("Malformed data URI", provider)
    mime_type = header[len("data:"):].split(";")[0] or DEFAULT_MIME_TYPE
    try:
        return base64.b64decode(payload), mime_type
    except ValueError as e:
        raise BackendDataError(f"Invalid base64 image data: {e}", provider) from e
