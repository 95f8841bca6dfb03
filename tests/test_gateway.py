"""Tests for imgrouter.gateway - route, extract, adapt, normalize"""

import dataclasses

import httpx
import pytest

from imgrouter.config import GatewayConfig
from imgrouter.exceptions import AuthenticationError, BackendHttpError, GatewayError
from imgrouter.gateway import ImageGateway
from imgrouter.models import Provider
from imgrouter.providers.volcengine import VolcEngineProvider

UUID_KEY = "123e4567-e89b-12d3-a456-426614174000"


def _config(**huggingface):
    base = GatewayConfig()
    return dataclasses.replace(base, huggingface=dataclasses.replace(base.huggingface, **huggingface))


# =========================================================================
# route
# =========================================================================


class TestRoute:

    def test_missing_credential(self):
        with pytest.raises(AuthenticationError, match="Authorization header missing"):
            ImageGateway().route("")

    def test_unrecognized_credential(self):
        with pytest.raises(AuthenticationError, match="Could not detect provider"):
            ImageGateway().route("sk-not-a-known-shape")

    def test_known_credential(self):
        assert ImageGateway().route(UUID_KEY) is Provider.VOLCENGINE


# =========================================================================
# generate
# =========================================================================


class TestGenerate:

    @pytest.mark.asyncio
    async def test_auth_failure_makes_no_outbound_call(self, mock_http):
        http, transport = mock_http(lambda r: httpx.Response(200))
        gateway = ImageGateway(http=http)
        with pytest.raises(AuthenticationError):
            await gateway.generate("bogus", [{"role": "user", "content": "x"}])
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_markdown_content_for_volcengine(self, mock_http):
        http, _ = mock_http(lambda r: httpx.Response(200, json={"data": [{"b64_json": "QUJD"}]}))
        gateway = ImageGateway(http=http)
        result = await gateway.generate(UUID_KEY, [{"role": "user", "content": "a red fox"}])
        assert result.provider is Provider.VOLCENGINE
        assert result.content == "![Generated Image](data:image/png;base64,QUJD)"

    @pytest.mark.asyncio
    async def test_empty_result_gives_placeholder(self, mock_http):
        http, _ = mock_http(lambda r: httpx.Response(200, json={"data": []}))
        gateway = ImageGateway(http=http)
        result = await gateway.generate(UUID_KEY, [{"role": "user", "content": "x"}])
        assert result.content == "Image generation failed"

    @pytest.mark.asyncio
    async def test_backend_error_tagged_with_provider(self, mock_http):
        http, _ = mock_http(lambda r: httpx.Response(500, text="boom"))
        gateway = ImageGateway(_config(api_urls=("https://only.hf.space",)), http=http)
        with pytest.raises(BackendHttpError) as exc_info:
            await gateway.generate("hf_abc", [{"role": "user", "content": "x"}])
        assert exc_info.value.provider == "HuggingFace"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self, mock_http, monkeypatch):
        async def explode(self, credential, request, audit):
            raise KeyError("data")

        monkeypatch.setattr(VolcEngineProvider, "_generate", explode)
        http, _ = mock_http(lambda r: httpx.Response(200))
        gateway = ImageGateway(http=http)
        with pytest.raises(GatewayError) as exc_info:
            await gateway.generate(UUID_KEY, [{"role": "user", "content": "x"}])
        assert exc_info.value.provider == "VolcEngine"
        assert exc_info.value.status_code == 500
        assert isinstance(exc_info.value.__cause__, KeyError)
