"""
AI gateway client: one OpenAI-compatible chat-completions endpoint, used in two ways.

* ``open_stream`` sends a streaming request and hands back the live upstream
  response once its status is known to be successful.
* ``complete`` sends a non-streaming request and returns the decoded JSON body.

Status translation lives here so both callers share it: 429 and 402 map to
their own exceptions, everything else that is not 2xx is an upstream failure.
Nothing is retried.
"""
from collections.abc import AsyncIterator

import anyio
import httpx

from tutor.core.errors import QuotaExhaustedError, RateLimitedError, UpstreamFailureError
from tutor.core.settings import settings


def raise_for_upstream_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    if response.status_code == 429:
        raise RateLimitedError()
    if response.status_code == 402:
        raise QuotaExhaustedError()
    raise UpstreamFailureError(f"AI gateway error (status {response.status_code})")


class UpstreamStream:
    """A successful streaming upstream response plus the client that owns its connection."""

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response):
        self._client = client
        self._response = response
        self._closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def closed(self) -> bool:
        return self._closed

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_bytes():
                if chunk:
                    yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        # Runs while the request task may already be cancelled (client went away).
        with anyio.CancelScope(shield=True):
            try:
                await self._response.aclose()
            finally:
                await self._client.aclose()


class AIGatewayClient:
    def __init__(
        self,
        *,
        url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url or settings.ai_gateway_url
        self.api_key = settings.ai_gateway_api_key if api_key is None else api_key
        self.model = model or settings.ai_model
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise UpstreamFailureError("AI_GATEWAY_API_KEY is not configured")
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _client(self, timeout: httpx.Timeout) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def open_stream(self, messages: list[dict]) -> UpstreamStream:
        headers = self._headers()
        payload = {"model": self.model, "messages": messages, "stream": True}
        # Reads are unbounded: the stream lasts as long as upstream keeps it open.
        client = self._client(httpx.Timeout(None, connect=settings.upstream_connect_timeout_seconds))
        try:
            request = client.build_request("POST", self.url, json=payload, headers=headers)
            response = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            await client.aclose()
            raise UpstreamFailureError(str(exc) or "AI gateway unreachable") from exc

        if not response.is_success:
            try:
                raise_for_upstream_status(response)
            finally:
                await response.aclose()
                await client.aclose()
        return UpstreamStream(client, response)

    async def complete(self, payload: dict) -> dict:
        headers = self._headers()
        body = {"model": self.model, **payload}
        timeout = httpx.Timeout(settings.quiz_timeout_seconds, connect=settings.upstream_connect_timeout_seconds)
        try:
            async with self._client(timeout) as client:
                response = await client.post(self.url, json=body, headers=headers)
                raise_for_upstream_status(response)
                return response.json()
        except httpx.HTTPError as exc:
            raise UpstreamFailureError(str(exc) or "AI gateway unreachable") from exc
        except ValueError as exc:
            raise UpstreamFailureError(f"AI gateway returned invalid JSON: {exc}") from exc


def get_gateway() -> AIGatewayClient:
    return AIGatewayClient()
