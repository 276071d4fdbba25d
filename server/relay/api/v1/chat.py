from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from relay.core.dependencies import get_chat_relay
from relay.schemas.chat import ChatRequest, ChatResponse
from relay.services.upstream import ChatRelay, UpstreamError

logger = logging.getLogger(__name__)

router = APIRouter()

_decoder = json.JSONDecoder()


def _decode_first_value(body: bytes):
    """Decode the first JSON value in the body; anything after it is ignored."""
    text = body.decode("utf-8").lstrip()
    value, _end = _decoder.raw_decode(text)
    return value


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: Request,
    relay: ChatRelay = Depends(get_chat_relay),
) -> ChatResponse:
    """
    Relay a list of chat messages to the completion API.

    The body is decoded by hand so malformed input maps to 400 instead of
    FastAPI's 422.
    """
    body = await request.body()
    try:
        req = ChatRequest.model_validate(_decode_first_value(body))
    except (ValueError, ValidationError):
        raise HTTPException(status_code=400, detail="Invalid JSON request")

    try:
        return await relay.complete(req.messages)
    except UpstreamError as e:
        # Cause stays out of the response and out of default-level logs
        logger.debug(f"Chat relay failed: {e}")
        raise HTTPException(status_code=500, detail="Error from GPT API") from e
