"""
Server-Sent Events framing and the stub-mode subscription loop.
"""

import asyncio
import json
from typing import Any, AsyncIterator

from .schema import now_ms
from .store import IStreamStore
from util.logging import logger

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def comment(text: str) -> str:
    """SSE comment frame; browsers ignore it, proxies see traffic."""
    return f": {text}\n\n"


def data_event(obj: Any) -> str:
    """SSE data frame carrying one JSON document."""
    return f"data: {json.dumps(obj)}\n\n"


class StubSubscription:
    """
    One open stub-mode subscription.

    Owns its lifecycle token: close() ends the loop at the next wake-up, which
    happens immediately rather than at the end of the current interval.
    """

    def __init__(self, store: IStreamStore, stream: str, interval: float = 1.0):
        if interval <= 0:
            raise ValueError(f"Interval must be > 0: {interval}")
        self.store = store
        self.stream = stream
        self.interval = interval
        self._closed = asyncio.Event()
        self.delivered = 0

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        """Cancel the subscription; safe to call more than once."""
        if not self._closed.is_set():
            self._closed.set()
            logger.log_stream_subscription(self.stream, "closed", "stub", {"delivered": self.delivered})

    async def _wait_tick(self) -> bool:
        """Sleep one interval. Returns False once the subscription is closed."""
        try:
            await asyncio.wait_for(self._closed.wait(), timeout=self.interval)
        except asyncio.TimeoutError:
            return True
        return False

    async def events(self) -> AsyncIterator[str]:
        """Yield SSE frames until closed."""
        self.store.ensure(self.stream)
        logger.log_stream_subscription(self.stream, "opened", "stub", {"interval_sec": self.interval})
        try:
            yield comment(f"connected {now_ms()}")

            while await self._wait_tick():
                batch = self.store.drain(self.stream)
                if batch:
                    self.delivered += len(batch)
                    logger.log_stream_subscription(self.stream, "batch", "stub", {"records": len(batch)})
                    yield data_event({"records": [r.to_dict() for r in batch]})
                else:
                    # Keep idle connections from timing out
                    yield comment(f"keepalive {now_ms()}")
        finally:
            # Sink closed (client went away or generator finalized)
            self.close()
