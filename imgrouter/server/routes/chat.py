"""OpenAI-compatible chat completion route."""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from ...audit_logger import AuditLogger, generate_request_id
from ...exceptions import AuthenticationError, GatewayError
from ...formatter import build_completion, iter_stream_events
from ..app import extract_bearer, get_gateway
from ..models import ChatCompletionRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _error_response(error: GatewayError) -> JSONResponse:
    if isinstance(error, AuthenticationError):
        return JSONResponse({"error": error.message}, status_code=401)
    return JSONResponse(
        {
            "error": {
                "message": error.message,
                "type": "server_error",
                "provider": error.provider or "Unknown",
            }
        },
        status_code=error.status_code,
    )


async def _parse_body(request: Request, credential: str, audit: AuditLogger) -> ChatCompletionRequest:
    """
    Validate the JSON body. Credentials are checked before body errors are
    reported, so a bad body with a bad key still answers 401.
    """
    try:
        return ChatCompletionRequest.model_validate(await request.json())
    except ValueError as e:
        provider = get_gateway().route(credential, audit)
        logger.warning(f"Invalid request body: {e}")
        raise GatewayError(f"Invalid request body: {e}", provider.value) from e


@router.post("/v1/chat/completions")
async def chat_completions(request: Request):
    audit = AuditLogger(generate_request_id())
    method, path = request.method, request.url.path
    start = time.monotonic()
    audit.log_request_start(method, path)

    credential = extract_bearer(request.headers.get("authorization"))

    try:
        req = await _parse_body(request, credential, audit)
        response_format = req.response_format if isinstance(req.response_format, str) else None
        result = await get_gateway().generate(
            credential,
            req.messages,
            model=req.model,
            size=req.size,
            response_format=response_format,
            audit=audit,
        )
    except GatewayError as e:
        if not isinstance(e, AuthenticationError):
            logger.error(f"Request failed ({e.provider or 'Unknown'}): {e.message}")
        response = _error_response(e)
        audit.log_request_end(
            method, path, response.status_code,
            int((time.monotonic() - start) * 1000), e.message,
        )
        return response

    duration_ms = int((time.monotonic() - start) * 1000)

    if req.stream is True:
        logger.info("Response complete (stream)")
        audit.log_request_end(method, path, 200, duration_ms)
        return StreamingResponse(
            iter_stream_events(result.content, req.model),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    logger.info("Response complete (JSON)")
    audit.log_request_end(method, path, 200, duration_ms)
    return build_completion(result.content, req.model)
