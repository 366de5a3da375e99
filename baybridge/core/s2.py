"""
Client for the durable append-only stream service (S2).
Appends go through the records endpoint; reads tail the same endpoint as SSE.
"""

import json
from typing import AsyncIterator, Optional
from urllib.parse import quote

import httpx

from . import config
from .schema import Record


class StreamServiceError(Exception):
    """Raised when the stream service cannot be reached."""
    pass


class StreamServiceClient:
    """Thin async wrapper over the S2 REST API for a single basin."""

    def __init__(self, basin: str, token: str, timeout: float = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.basin = basin
        self.base_url = config.get_s2_base_url(basin)
        self.timeout = timeout if timeout is not None else config.get_upstream_timeout()
        self._token = token
        self._transport = transport

    def _client(self, timeout=None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self._token}"},
            timeout=self.timeout if timeout is None else timeout,
            transport=self._transport,
        )

    @staticmethod
    def records_path(stream: str) -> str:
        return f"/streams/{quote(stream, safe='')}/records"

    async def append(self, stream: str, record: Record) -> httpx.Response:
        """
        Append one record. The upstream response is returned as-is so the caller
        can surface its status verbatim.
        """
        payload = {"records": [{"body": json.dumps(record.to_body())}]}
        try:
            async with self._client() as client:
                return await client.post(self.records_path(stream), json=payload)
        except httpx.HTTPError as e:
            raise StreamServiceError(f"S2 append failed: {e}") from e

    async def open_read(self, stream: str) -> "StreamTail":
        """Open an SSE tail of the stream from the first record."""
        params = {"seq_num": "0", "clamp": "true", "wait": str(config.get_s2_read_wait())}
        # The tail is long-lived; only bound connecting
        client = self._client(timeout=httpx.Timeout(self.timeout, read=None))
        try:
            request = client.build_request(
                "GET",
                self.records_path(stream),
                params=params,
                headers={"Accept": "text/event-stream"},
            )
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise StreamServiceError(f"S2 read failed: {e}") from e
        return StreamTail(client, response)


class StreamTail:
    """An open upstream SSE response together with the client that owns it."""

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response):
        self._client = client
        self.response = response

    @property
    def ok(self) -> bool:
        return self.response.is_success

    @property
    def status_code(self) -> int:
        return self.response.status_code

    async def iter_raw(self) -> AsyncIterator[bytes]:
        """
        Yield the upstream event-stream bytes, closing the tail when done.

        Content-encoding is undone so the SSE framing reaches subscribers as
        plain text; the relayed response carries no Content-Encoding header.
        """
        try:
            async for chunk in self.response.aiter_bytes():
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        try:
            await self.response.aclose()
        finally:
            await self._client.aclose()


def get_stream_client() -> Optional[StreamServiceClient]:
    """Get a configured stream client. Returns None in stub mode."""
    if not config.stream_backend_configured():
        return None
    basin, token = config.get_s2_credentials()
    return StreamServiceClient(basin, token)
