"""
Classroom client tests - SSE parsing, posting, subscribing and viewer translation.
"""

import json
import pytest
import httpx

from baybridge.api import main
from baybridge.client.classroom import ClassroomClient, SSEParser, TimelineItem, parse_batch
from baybridge.client.viewer import (
    STATUS_ERROR, STATUS_IDLE, STATUS_MISSING_KEY, STATUS_OK,
    CacheKey, TranslationCache, ViewerTranslator,
)
from baybridge.core.store import InMemoryStreamStore, get_stream_store


def batch_frame(*records) -> str:
    wire = [{"body": json.dumps(body), "seq_num": seq} for seq, body in records]
    return "data: " + json.dumps({"records": wire}) + "\n\n"


def client_for(handler) -> ClassroomClient:
    return ClassroomClient("http://api.test", transport=httpx.MockTransport(handler))


class TestSSEParser:

    def test_data_event_completes_on_blank_line(self):
        parser = SSEParser()
        assert parser.feed_line('data: {"records": []}') is None
        assert parser.feed_line("") == '{"records": []}'

    def test_comments_are_ignored(self):
        parser = SSEParser()
        assert parser.feed_line(": keepalive 123") is None
        assert parser.feed_line("") is None

    def test_multiline_data_is_joined(self):
        parser = SSEParser()
        parser.feed_line("data: a")
        parser.feed_line("data: b")
        assert parser.feed_line("") == "a\nb"

    def test_other_fields_are_ignored(self):
        parser = SSEParser()
        parser.feed_line("event: batch")
        parser.feed_line("id: 4")
        parser.feed_line("data:x")
        assert parser.feed_line("\r\n") == "x"


class TestParseBatch:

    def test_records_become_items(self):
        data = batch_frame((5, {"type": "note", "payload": {"text": "hi", "authorRole": "teacher"}, "at": 1000}))[6:]

        items = parse_batch(data, "s1")

        assert len(items) == 1
        item = items[0]
        assert item.seq_num == 5
        assert item.uid == "5-s1"
        assert item.text == "hi"
        assert item.author_role == "teacher"
        assert item.at == 1000

    def test_uid_falls_back_to_timestamp(self):
        data = json.dumps({"records": [{"body": json.dumps({"type": "note", "payload": {}, "at": 77})}]})

        assert parse_batch(data, "s1")[0].uid == "77-s1"

    def test_empty_or_missing_records(self):
        assert parse_batch('{"records": []}', "s1") == []
        assert parse_batch("{}", "s1") == []

    def test_malformed_body_raises(self):
        with pytest.raises(ValueError):
            parse_batch('{"records": [{"body": "not json"}]}', "s1")

    def test_item_without_text(self):
        item = TimelineItem(type="note", payload={}, at=1)
        assert item.text is None
        assert item.author_role is None


class TestPostNote:

    @pytest.mark.asyncio
    async def test_blank_note_is_not_sent(self):
        calls = []
        client = client_for(lambda request: calls.append(request) or httpx.Response(200, json={}))

        assert await client.post_note("s1", "   ") is None
        assert calls == []
        await client.aclose()

    @pytest.mark.asyncio
    async def test_stub_acknowledgment_pushes_to_ingest(self):
        calls = []

        def handler(request):
            calls.append((request.method, request.url.path, json.loads(request.content)))
            if request.url.path == "/api/s2/append":
                return httpx.Response(200, json={"ok": True, "stub": True, "record": {}})
            return httpx.Response(200, text="ok")

        async with client_for(handler) as client:
            result = await client.post_note("s1", "  Great job  ")

        assert result.ok and result.stub
        assert [path for _, path, _ in calls] == ["/api/s2/append", "/api/s2/read"]
        assert calls[0][2] == {"type": "note", "studentId": "s1", "payload": {"text": "Great job", "authorRole": "teacher"}}
        assert calls[1][2] == calls[0][2]

    @pytest.mark.asyncio
    async def test_real_append_does_not_push(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            return httpx.Response(200, json={"start_seq_num": 1})

        async with client_for(handler) as client:
            result = await client.post_note("s1", "hello", author_role="parent")

        assert result.ok and not result.stub
        assert paths == ["/api/s2/append"]

    @pytest.mark.asyncio
    async def test_rejected_append_pushes_to_ingest(self):
        paths = []

        def handler(request):
            paths.append(request.url.path)
            if request.url.path == "/api/s2/append":
                return httpx.Response(403, json={"ok": False, "error": "denied"})
            return httpx.Response(200, text="ok")

        async with client_for(handler) as client:
            result = await client.post_note("s1", "hello")

        assert not result.ok
        assert result.status_code == 403
        assert paths == ["/api/s2/append", "/api/s2/read"]


class TestSubscribe:

    @pytest.mark.asyncio
    async def test_yields_non_empty_batches(self):
        body = (
            ": connected 1\n\n"
            + batch_frame((1, {"type": "note", "payload": {"text": "a"}, "at": 1}))
            + ": keepalive 2\n\n"
            + 'data: {"records": []}\n\n'
            + "data: not json\n\n"
            + batch_frame((2, {"type": "note", "payload": {"text": "b"}, "at": 2}),
                          (3, {"type": "note", "payload": {"text": "c"}, "at": 3}))
        )
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, content=body.encode(), headers={"content-type": "text/event-stream"})

        async with client_for(handler) as client:
            batches = [batch async for batch in client.subscribe("s1")]

        assert seen["params"] == {"studentId": "s1"}
        assert [[item.text for item in batch] for batch in batches] == [["a"], ["b", "c"]]
        assert batches[1][1].uid == "3-s1"

    @pytest.mark.asyncio
    async def test_failed_subscription_raises(self):
        async with client_for(lambda request: httpx.Response(502, text="S2 read failed")) as client:
            with pytest.raises(httpx.HTTPStatusError):
                async for _ in client.subscribe("s1"):
                    pass


class TestTranslate:

    @pytest.mark.asyncio
    async def test_success(self):
        async with client_for(lambda request: httpx.Response(200, json={"ok": True, "text": "Hola"})) as client:
            result = await client.translate("Hello", "es")

        assert result.ok
        assert result.text == "Hola"

    @pytest.mark.asyncio
    async def test_missing_key_reason(self):
        def handler(request):
            return httpx.Response(400, json={"ok": False, "reason": "missing_key", "text": "Hello"})

        async with client_for(handler) as client:
            result = await client.translate("Hello", "es")

        assert not result.ok
        assert result.reason == "missing_key"
        assert result.text == "Hello"

    @pytest.mark.asyncio
    async def test_transport_failure_is_error(self):
        def handler(request):
            raise httpx.ConnectError("down", request=request)

        async with client_for(handler) as client:
            result = await client.translate("Hello", "es")

        assert not result.ok
        assert result.reason == "error"

    @pytest.mark.asyncio
    async def test_source_locale_sent_when_given(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"ok": True, "text": "x"})

        async with client_for(handler) as client:
            await client.translate("Hello", "zh", source_locale="en")

        assert seen["body"] == {"text": "Hello", "targetLocale": "zh", "sourceLocale": "en"}


class TestViewerTranslator:

    def item(self, text="Hello", at=1000):
        return TimelineItem(type="note", payload={"text": text}, at=at)

    @pytest.mark.asyncio
    async def test_cache_prevents_second_request(self):
        calls = []

        def handler(request):
            calls.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True, "text": "Hola"})

        async with client_for(handler) as client:
            translator = ViewerTranslator(client)
            first, second = self.item(), self.item()
            await translator.translate_item(first, "es")
            await translator.translate_item(second, "es")

        assert len(calls) == 1
        assert first.view_text == second.view_text == "Hola"
        assert translator.status == STATUS_OK
        assert CacheKey("es", 1000, "Hello") in translator.cache

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_share_one_request(self):
        calls = []

        def handler(request):
            calls.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True, "text": "Hola"})

        async with client_for(handler) as client:
            translator = ViewerTranslator(client)
            items = [self.item(), self.item(), self.item("Other", 2000)]
            await translator.translate_items(items, "es")

        assert [c["text"] for c in calls] == ["Hello", "Other"]
        assert [item.view_text for item in items] == ["Hola", "Hola", "Hola"]
        assert translator._in_flight == {}

    @pytest.mark.asyncio
    async def test_locale_is_part_of_cache_key(self):
        calls = []

        def handler(request):
            calls.append(json.loads(request.content)["targetLocale"])
            return httpx.Response(200, json={"ok": True, "text": "x"})

        async with client_for(handler) as client:
            translator = ViewerTranslator(client)
            await translator.translate_item(self.item(), "es")
            await translator.translate_item(self.item(), "zh")

        assert calls == ["es", "zh"]

    @pytest.mark.asyncio
    async def test_missing_key_falls_back_to_raw_text(self):
        def handler(request):
            return httpx.Response(400, json={"ok": False, "reason": "missing_key", "text": "Hello"})

        async with client_for(handler) as client:
            translator = ViewerTranslator(client)
            item = self.item()
            result = await translator.translate_item(item, "es")

        assert result == "Hello"
        assert item.view_text == "Hello"
        assert translator.status == STATUS_MISSING_KEY
        assert len(translator.cache) == 0

    @pytest.mark.asyncio
    async def test_upstream_error_falls_back_to_raw_text(self):
        def handler(request):
            return httpx.Response(502, json={"ok": False, "reason": "upstream_error", "text": "Hello"})

        async with client_for(handler) as client:
            translator = ViewerTranslator(client)
            item = self.item()
            await translator.translate_item(item, "es")

        assert item.view_text == "Hello"
        assert translator.status == STATUS_ERROR

    @pytest.mark.asyncio
    async def test_items_without_text_are_skipped(self):
        calls = []
        client = client_for(lambda request: calls.append(request) or httpx.Response(200, json={"ok": True, "text": "x"}))
        translator = ViewerTranslator(client)

        results = await translator.translate_items([TimelineItem(type="note", payload={}, at=1)], "es")

        assert results == [None]
        assert calls == []
        assert translator.status == STATUS_IDLE
        await client.aclose()

    @pytest.mark.asyncio
    async def test_translate_items_covers_every_item(self):
        def handler(request):
            text = json.loads(request.content)["text"]
            return httpx.Response(200, json={"ok": True, "text": text.upper()})

        async with client_for(handler) as client:
            translator = ViewerTranslator(client, TranslationCache())
            items = [self.item("a", 1), self.item("b", 2), self.item("c", 3)]
            await translator.translate_items(items, "es")

        assert [item.view_text for item in items] == ["A", "B", "C"]

    def test_reset_status(self):
        translator = ViewerTranslator(client=None)
        translator.status = STATUS_ERROR
        translator.reset_status()
        assert translator.status == STATUS_IDLE


class TestAgainstApp:
    """The client talks to the real app in stub mode."""

    @pytest.mark.asyncio
    async def test_stub_post_reaches_store(self, monkeypatch):
        for name in ("S2_BASIN", "S2_ACCESS_TOKEN"):
            monkeypatch.delenv(name, raising=False)
        store = InMemoryStreamStore()
        main.app.dependency_overrides[get_stream_store] = lambda: store
        try:
            transport = httpx.ASGITransport(app=main.app)
            async with ClassroomClient("http://testserver", transport=transport) as client:
                result = await client.post_note("s9", "Field trip on Friday")
        finally:
            main.app.dependency_overrides.clear()

        assert result.stub
        buffered = store.get("students/s9")
        assert len(buffered) == 1
        assert buffered[0].payload == {"text": "Field trip on Friday", "authorRole": "teacher"}
