"""
Async client for the classroom API: post notes, follow a student's stream,
request translations.
"""

import json
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from ..core.schema import stream_name
from util.logging import logger

APPEND_PATH = "/api/s2/append"
READ_PATH = "/api/s2/read"
TRANSLATE_PATH = "/api/translate"


@dataclass
class TimelineItem:
    """One record as shown on the timeline."""

    type: str
    payload: Dict[str, Any]
    at: int
    seq_num: Optional[int] = None
    uid: Optional[str] = None
    view_text: Optional[str] = None  # translated (or raw fallback) text for parents

    @property
    def text(self) -> Optional[str]:
        value = self.payload.get("text") if isinstance(self.payload, dict) else None
        return value or None

    @property
    def author_role(self) -> Optional[str]:
        return self.payload.get("authorRole") if isinstance(self.payload, dict) else None


@dataclass
class TranslateResult:
    ok: bool
    text: str
    reason: Optional[str] = None


@dataclass
class AppendResult:
    ok: bool
    stub: bool = False
    status_code: int = 200
    body: Dict[str, Any] = field(default_factory=dict)


class SSEParser:
    """
    Incremental text/event-stream parser.

    Feed it lines; it returns the data payload of each completed event.
    Comment lines and fields other than data are ignored.
    """

    def __init__(self):
        self._data: List[str] = []

    def feed_line(self, line: str) -> Optional[str]:
        line = line.rstrip("\r\n")
        if line == "":
            if not self._data:
                return None
            data = "\n".join(self._data)
            self._data = []
            return data
        if line.startswith(":"):
            return None
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "data":
            self._data.append(value)
        return None


def parse_batch(data: str, student_id: str) -> List[TimelineItem]:
    """Turn one SSE data payload ({records: [{body, seq_num}]}) into timeline items."""
    message = json.loads(data)
    records = message.get("records") if isinstance(message, dict) else None
    if not records:
        return []

    items = []
    for record in records:
        body = json.loads(record["body"])
        seq_num = record.get("seq_num")
        at = body.get("at")
        items.append(TimelineItem(
            type=body.get("type") or "note",
            payload=body.get("payload") or {},
            at=at,
            seq_num=seq_num,
            uid=f"{seq_num if seq_num is not None else at}-{student_id}",
        ))
    return items


class ClassroomClient:
    """HTTP client bound to one classroom API base URL."""

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 20.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ClassroomClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def post_note(self, student_id: str, text: str, author_role: str = "teacher") -> Optional[AppendResult]:
        """
        Post a note. When the append was rejected or only acknowledged as a
        stub, push the same body into the stub ingest so subscribers see it.
        Blank notes are ignored and return None.
        """
        text = (text or "").strip()
        if not text:
            return None

        body = {"type": "note", "studentId": student_id, "payload": {"text": text, "authorRole": author_role}}
        response = await self._http.post(APPEND_PATH, json=body)

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        result = AppendResult(
            ok=response.is_success,
            stub=bool(data.get("stub")),
            status_code=response.status_code,
            body=data,
        )

        if not result.ok or result.stub:
            await self._http.post(READ_PATH, json=body)
            logger.log_stream_append(stream_name(student_id), "note", "client-stub-push",
                                     details={"append_status": response.status_code})
        return result

    async def subscribe(self, student_id: str) -> AsyncIterator[List[TimelineItem]]:
        """Follow a student's stream; yields each non-empty batch of new items."""
        parser = SSEParser()
        # No read timeout: the stream idles between keep-alives
        timeout = httpx.Timeout(self._http.timeout.connect, read=None)
        async with self._http.stream("GET", READ_PATH, params={"studentId": student_id}, timeout=timeout) as response:
            response.raise_for_status()
            async for line in response.aiter_lines():
                data = parser.feed_line(line)
                if data is None:
                    continue
                try:
                    items = parse_batch(data, student_id)
                except (ValueError, KeyError, TypeError, AttributeError) as e:
                    logger.debug(f"Skipping malformed stream event: {e}")
                    continue
                if items:
                    yield items

    async def translate(self, text: str, target_locale: str, source_locale: Optional[str] = None) -> TranslateResult:
        """Translate text; never raises for upstream failures."""
        body = {"text": text, "targetLocale": target_locale}
        if source_locale:
            body["sourceLocale"] = source_locale

        try:
            response = await self._http.post(TRANSLATE_PATH, json=body)
        except httpx.HTTPError as e:
            logger.log_translation(target_locale, "failed", text=text, reason="error")
            logger.debug(f"Translate request failed: {e}")
            return TranslateResult(ok=False, text=text, reason="error")

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.is_success:
            reason = data.get("reason") or "error"
            return TranslateResult(ok=False, text=text, reason=reason)

        translated = data.get("text")
        return TranslateResult(ok=True, text=translated if translated is not None else text)
