from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from tutor.agents.tutor_prompts import build_upstream_messages
from tutor.core.errors import get_request_id
from tutor.core.gateway import AIGatewayClient, UpstreamStream, get_gateway
from tutor.core.logging import DOMAIN_CHAT, get_domain_logger
from tutor.core.sse import DoneMarkerWatcher
from tutor.schemas.chat import ChatRequest

router = APIRouter(tags=["chat"])
logger = get_domain_logger(__name__, DOMAIN_CHAT)


class RelayStreamingResponse(StreamingResponse):
    """StreamingResponse that always releases the upstream connection, however the send ends."""

    def __init__(self, upstream: UpstreamStream, content, **kwargs):
        super().__init__(content, **kwargs)
        self.upstream = upstream

    async def __call__(self, scope, receive, send):
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.upstream.aclose()


async def relay_stream(upstream: UpstreamStream, request_id: str):
    watcher = DoneMarkerWatcher()
    try:
        async for chunk in upstream.iter_bytes():
            watcher.feed(chunk)
            yield chunk
    except httpx.HTTPError as exc:
        # Headers are already out; ending the body early is the only signal left.
        logger.warning("Upstream stream broke | request_id=%s | %s", request_id, exc)
    finally:
        await upstream.aclose()
        if not watcher.seen_done:
            logger.warning(
                "Chat stream ended without [DONE] | request_id=%s bytes=%s",
                request_id,
                watcher.bytes_forwarded,
            )


@router.post("/chat")
async def chat(req: ChatRequest, request: Request, gateway: AIGatewayClient = Depends(get_gateway)):
    request_id = get_request_id(request)
    messages = build_upstream_messages(req.mode, req.context, req.messages)
    logger.info(
        "Chat relay | request_id=%s mode=%s grade=%s topic=%s turns=%s",
        request_id,
        req.mode.value,
        req.context.grade,
        req.context.topic_name,
        len(req.messages),
    )
    upstream = await gateway.open_stream(messages)
    return RelayStreamingResponse(
        upstream,
        relay_stream(upstream, request_id),
        headers={"Content-Type": "text/event-stream", "Cache-Control": "no-cache"},
    )
