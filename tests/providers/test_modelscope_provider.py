"""Tests for imgrouter.providers.modelscope - submit and poll state machine"""

import dataclasses
import json

import httpx
import pytest

from imgrouter.config import MODELSCOPE_DEFAULTS
from imgrouter.exceptions import BackendDataError, BackendHttpError, BackendTimeoutError
from imgrouter.models import CanonicalRequest
from imgrouter.providers.modelscope import ModelScopeProvider, PollState, classify_task_status

KEY = "ms-test-key"
SUBMIT_URL = f"{MODELSCOPE_DEFAULTS.api_url}/images/generations"
TASK_URL = f"{MODELSCOPE_DEFAULTS.api_url}/tasks/task-1"

# No real sleeping between polls
FAST = dataclasses.replace(MODELSCOPE_DEFAULTS, poll_interval=0)


def _scripted(poll_responses):
    """Handler: submit returns task-1, polls replay ``poll_responses`` then repeat the last."""
    polls = list(poll_responses)

    def handler(request):
        if request.method == "POST":
            return httpx.Response(200, json={"task_id": "task-1"})
        item = polls.pop(0) if len(polls) > 1 else polls[0]
        if isinstance(item, Exception):
            raise item
        return httpx.Response(item.status_code, content=item.content, headers=item.headers)

    return handler


def _status(value, **extra):
    return httpx.Response(200, json={"task_status": value, **extra})


def _poll_count(transport) -> int:
    return sum(1 for url in transport.urls() if url == TASK_URL)


# =========================================================================
# classify_task_status
# =========================================================================


class TestClassifyTaskStatus:

    @pytest.mark.parametrize("payload,state", [
        ({"task_status": "SUCCEED"}, PollState.SUCCEEDED),
        ({"task_status": "FAILED"}, PollState.FAILED),
        ({"task_status": "RUNNING"}, PollState.PENDING),
        ({"task_status": "PENDING"}, PollState.PENDING),
        ({}, PollState.PENDING),
    ])
    def test_states(self, payload, state):
        assert classify_task_status(payload) is state


# =========================================================================
# submit
# =========================================================================


class TestModelScopeSubmit:

    @pytest.mark.asyncio
    async def test_submit_request_shape(self, mock_http):
        http, transport = mock_http(_scripted([_status("SUCCEED", output_images=["https://out/1.png"])]))
        provider = ModelScopeProvider(FAST, http)
        await provider.generate(KEY, CanonicalRequest(prompt="a red fox"))

        submit = transport.requests[0]
        assert str(submit.url) == SUBMIT_URL
        assert submit.headers["X-ModelScope-Async-Mode"] == "true"
        assert submit.headers["Authorization"] == f"Bearer {KEY}"
        assert json.loads(submit.content) == {
            "model": MODELSCOPE_DEFAULTS.default_model,
            "prompt": "a red fox",
            "size": MODELSCOPE_DEFAULTS.default_size,
            "n": 1,
        }

        poll = transport.requests[1]
        assert poll.method == "GET"
        assert poll.headers["X-ModelScope-Task-Type"] == "image_generation"

    @pytest.mark.asyncio
    async def test_submit_failure_is_hard_failure(self, mock_http):
        http, transport = mock_http(lambda r: httpx.Response(402, text="quota"))
        provider = ModelScopeProvider(FAST, http)
        with pytest.raises(BackendHttpError, match="Submit Error"):
            await provider.generate(KEY, CanonicalRequest(prompt="x"))
        assert _poll_count(transport) == 0

    @pytest.mark.asyncio
    async def test_missing_task_id(self, mock_http):
        http, _ = mock_http(lambda r: httpx.Response(200, json={"request_id": "r"}))
        provider = ModelScopeProvider(FAST, http)
        with pytest.raises(BackendDataError, match="task_id"):
            await provider.generate(KEY, CanonicalRequest(prompt="x"))


# =========================================================================
# polling
# =========================================================================


class TestModelScopePolling:

    @pytest.mark.asyncio
    async def test_three_pending_then_success_polls_four_times(self, mock_http):
        http, transport = mock_http(_scripted([
            _status("PENDING"),
            _status("RUNNING"),
            _status("RUNNING"),
            _status("SUCCEED", output_images=["https://out/1.png", "https://out/2.png"]),
        ]))
        provider = ModelScopeProvider(FAST, http)
        images = await provider.generate(KEY, CanonicalRequest(prompt="x"))

        assert _poll_count(transport) == 4
        assert [img.url for img in images] == ["https://out/1.png", "https://out/2.png"]
        assert all(img.b64_json is None for img in images)

    @pytest.mark.asyncio
    async def test_never_terminal_times_out_after_budget(self, mock_http):
        config = dataclasses.replace(FAST, max_poll_attempts=7)
        http, transport = mock_http(_scripted([_status("RUNNING")]))
        provider = ModelScopeProvider(config, http)
        with pytest.raises(BackendTimeoutError, match="7 polls"):
            await provider.generate(KEY, CanonicalRequest(prompt="x"))
        assert _poll_count(transport) == 7

    @pytest.mark.asyncio
    async def test_failed_status_carries_payload(self, mock_http):
        http, transport = mock_http(_scripted([
            _status("RUNNING"),
            _status("FAILED", errors={"message": "nsfw"}),
        ]))
        provider = ModelScopeProvider(FAST, http)
        with pytest.raises(BackendDataError, match="ModelScope Task Failed") as exc_info:
            await provider.generate(KEY, CanonicalRequest(prompt="x"))
        assert "nsfw" in exc_info.value.message
        assert _poll_count(transport) == 2

    @pytest.mark.asyncio
    async def test_transport_blip_keeps_polling(self, mock_http):
        blip = httpx.ConnectError("reset", request=httpx.Request("GET", TASK_URL))
        http, transport = mock_http(_scripted([
            blip,
            httpx.Response(502, text="bad gateway"),
            httpx.Response(200, text="not json"),
            _status("SUCCEED", output_images=["https://out/1.png"]),
        ]))
        provider = ModelScopeProvider(FAST, http)
        images = await provider.generate(KEY, CanonicalRequest(prompt="x"))
        assert images[0].url == "https://out/1.png"
        assert _poll_count(transport) == 4

    @pytest.mark.asyncio
    async def test_input_images_are_ignored(self, mock_http):
        http, transport = mock_http(_scripted([_status("SUCCEED", output_images=["https://out/1.png"])]))
        provider = ModelScopeProvider(FAST, http)
        await provider.generate(KEY, CanonicalRequest(prompt="x", images=("https://cdn/a.png",)))
        assert "image" not in json.loads(transport.requests[0].content)
        assert "https://cdn/a.png" not in transport.urls()
