"""
Stream store used in stub mode.
The API talks to IStreamStore only, so the single-process demo map can be
swapped for a durable log without touching call sites.
"""

import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .schema import Record, SequencedRecord, now_ms


class IStreamStore(ABC):
    """Abstract interface for per-stream record buffers."""

    @abstractmethod
    def append(self, stream: str, record: Record) -> None:
        """Append a record to the end of a stream."""
        pass

    @abstractmethod
    def get(self, stream: str) -> List[Record]:
        """Return a snapshot of the records currently buffered for a stream."""
        pass

    @abstractmethod
    def drain(self, stream: str) -> List[SequencedRecord]:
        """Remove and return everything buffered for a stream, in append order."""
        pass

    @abstractmethod
    def ensure(self, stream: str) -> None:
        """Create an empty buffer for a stream if none exists."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Drop every stream."""
        pass


class InMemoryStreamStore(IStreamStore):
    """
    Process-wide map of stream name -> pending records.

    No cap, no persistence, no multi-instance consistency. Sequence numbers are
    derived from the wall clock but clamped above the last issued number, so
    they never decrease even if the clock steps backwards.
    """

    def __init__(self):
        self._buffers: Dict[str, List[Record]] = {}
        self._lock = threading.Lock()
        self._last_seq = 0

    def append(self, stream: str, record: Record) -> None:
        with self._lock:
            self._buffers.setdefault(stream, []).append(record)

    def get(self, stream: str) -> List[Record]:
        with self._lock:
            return list(self._buffers.get(stream, []))

    def drain(self, stream: str) -> List[SequencedRecord]:
        with self._lock:
            pending = self._buffers.get(stream)
            if not pending:
                return []
            self._buffers[stream] = []
            return [SequencedRecord.from_record(record, self._next_seq()) for record in pending]

    def ensure(self, stream: str) -> None:
        with self._lock:
            self._buffers.setdefault(stream, [])

    def clear(self) -> None:
        with self._lock:
            self._buffers.clear()

    def streams(self) -> List[str]:
        with self._lock:
            return list(self._buffers.keys())

    def _next_seq(self) -> int:
        # Caller holds the lock
        seq = max(now_ms(), self._last_seq + 1)
        self._last_seq = seq
        return seq


_default_store: Optional[InMemoryStreamStore] = None


def get_stream_store() -> IStreamStore:
    """Lazy initialization of the process-wide stub store."""
    global _default_store
    if _default_store is None:
        _default_store = InMemoryStreamStore()
    return _default_store
