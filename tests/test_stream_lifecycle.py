from __future__ import annotations

import asyncio

import httpx
import pytest
from conftest import FakeUpstream, sse_body

from tutor.api.chat import RelayStreamingResponse, relay_stream
from tutor.core.errors import QuotaExhaustedError
from tutor.core.sse import acollect_stream


def _messages() -> list[dict]:
    return [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}]


@pytest.mark.asyncio
async def test_upstream_closed_when_consumer_stops_early():
    fake = FakeUpstream()

    async def _endless():
        while True:
            yield sse_body(["tick "], done=False)

    fake.handler = lambda request: httpx.Response(200, content=_endless())
    upstream = await fake.client().open_stream(_messages())

    relay = relay_stream(upstream, "req-1")
    first = await relay.__anext__()
    assert b"tick" in first
    assert not upstream.closed

    # Downstream went away: the generator is closed without being drained.
    await relay.aclose()
    assert upstream.closed


@pytest.mark.asyncio
async def test_upstream_closed_when_downstream_send_fails():
    fake = FakeUpstream()
    fake.handler = lambda request: httpx.Response(200, content=sse_body(["a", "b", "c"]))
    upstream = await fake.client().open_stream(_messages())
    response = RelayStreamingResponse(upstream, relay_stream(upstream, "req-2"))

    async def _receive():
        await asyncio.Event().wait()

    async def _send(message):
        if message["type"] == "http.response.body":
            raise OSError("client socket closed")

    scope = {"type": "http", "asgi": {"spec_version": "2.4"}, "method": "POST", "path": "/chat", "headers": []}
    with pytest.raises(Exception):
        await response(scope, _receive, _send)
    assert upstream.closed


@pytest.mark.asyncio
async def test_relay_output_decodes_to_fragments_in_order():
    fake = FakeUpstream()
    fragments = ["नमस्ते ", "students, ", "today: ", "integers."]
    fake.handler = lambda request: httpx.Response(200, content=sse_body(fragments))
    upstream = await fake.client().open_stream(_messages())

    text = await acollect_stream(relay_stream(upstream, "req-3"))
    assert text == "".join(fragments)
    assert upstream.closed


@pytest.mark.asyncio
async def test_failed_open_raises_translated_error():
    fake = FakeUpstream()
    fake.handler = lambda request: httpx.Response(402)
    with pytest.raises(QuotaExhaustedError):
        await fake.client().open_stream(_messages())
    assert len(fake.requests) == 1
