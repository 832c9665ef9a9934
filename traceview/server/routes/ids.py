"""Identifier decoding routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from traceview.errors import MalformedIdentifierEncoding
from traceview.models import DecodeRequest, DecodeResponse

router = APIRouter(tags=["ids"])


@router.post("/ids/decode", response_model=DecodeResponse)
async def decode_ids(request: Request, body: DecodeRequest):
    """Convert base64 identifier fields anywhere in ``payload`` to hex."""
    codec = request.app.state.codec
    try:
        payload, errors = codec.convert(body.payload)
    except MalformedIdentifierEncoding as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return DecodeResponse(payload=payload, errors=errors)
