"""
Record types shared by the stream store, the SSE bridge and the API.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Dict

STREAM_PREFIX = "students/"
DEMO_STUDENT_ID = "demo"


def now_ms() -> int:
    """Wall clock in epoch milliseconds."""
    return int(time.time() * 1000)


def stream_name(student_id: str) -> str:
    """One stream per student."""
    return f"{STREAM_PREFIX}{student_id}"


@dataclass(frozen=True)
class Record:
    """A posted classroom event. Immutable once appended."""

    type: str
    payload: Any
    at: int
    stream: str

    @classmethod
    def now(cls, type: str, payload: Any, stream: str) -> "Record":
        return cls(type=type, payload=payload, at=now_ms(), stream=stream)

    def to_body(self) -> Dict[str, Any]:
        """The JSON object stored in the stream (stream name excluded)."""
        return {"type": self.type, "payload": self.payload, "at": self.at}

    def to_dict(self) -> Dict[str, Any]:
        body = self.to_body()
        body["stream"] = self.stream
        return body


@dataclass(frozen=True)
class SequencedRecord:
    """Wire form of a record inside a read batch."""

    body: str
    seq_num: int

    @classmethod
    def from_record(cls, record: Record, seq_num: int) -> "SequencedRecord":
        return cls(body=json.dumps(record.to_body()), seq_num=seq_num)

    def to_dict(self) -> Dict[str, Any]:
        return {"body": self.body, "seq_num": self.seq_num}
