"""
Stream bridge API - append records and subscribe to a student's stream.

Real mode forwards to S2 and relays its SSE tail unmodified. Stub mode (no
S2 credentials) acknowledges appends without writing anywhere durable and
serves reads from the in-process store, which the ingest side-channel fills.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from .schemas import AppendStubResponse, ErrorResponse, RecordRequest, StubRecord
from ..core import config
from ..core.s2 import StreamServiceClient, StreamServiceError, get_stream_client
from ..core.schema import DEMO_STUDENT_ID, Record, stream_name
from ..core.sse import SSE_HEADERS, StubSubscription
from ..core.store import IStreamStore, get_stream_store
from util.logging import logger, sanitize_payload

router = APIRouter()


def _stub_poll_interval() -> float:
    return config.get_stub_poll_interval()


@router.post("/append")
async def append_record(
    request: RecordRequest,
    s2_client: Optional[StreamServiceClient] = Depends(get_stream_client),
):
    """Append one record to the student's stream."""
    if not request.studentId:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="studentId required").model_dump(),
        )

    stream = stream_name(request.studentId)
    record = Record.now(request.type, request.payload, stream)

    # Stub mode (no S2 creds yet)
    if s2_client is None:
        logger.log_stream_append(stream, record.type, "stub", details={"payload": sanitize_payload(record.payload)})
        return AppendStubResponse(record=StubRecord(**record.to_dict())).model_dump()

    try:
        upstream = await s2_client.append(stream, record)
    except StreamServiceError as e:
        logger.log_stream_append(stream, record.type, "s2", status="failed", details={"error": str(e)})
        return JSONResponse(status_code=502, content=ErrorResponse(error=str(e)).model_dump())

    if not upstream.is_success:
        logger.log_stream_append(stream, record.type, "s2", status="rejected",
                                 details={"upstream_status": upstream.status_code})
        return JSONResponse(
            status_code=upstream.status_code,
            content=ErrorResponse(error=upstream.text).model_dump(),
        )

    logger.log_stream_append(stream, record.type, "s2")
    try:
        body = upstream.json()
    except ValueError:
        body = {"ok": True}
    return JSONResponse(status_code=upstream.status_code, content=body)


@router.get("/read")
async def read_stream(
    studentId: Optional[str] = None,
    s2_client: Optional[StreamServiceClient] = Depends(get_stream_client),
    store: IStreamStore = Depends(get_stream_store),
    interval: float = Depends(_stub_poll_interval),
):
    """Subscribe to a student's stream as text/event-stream."""
    if not studentId:
        return PlainTextResponse("studentId required", status_code=400)

    stream = stream_name(studentId)

    # ---- STUB MODE: poll the in-process store ----
    if s2_client is None:
        subscription = StubSubscription(store, stream, interval=interval)
        return StreamingResponse(
            subscription.events(),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
            background=BackgroundTask(subscription.close),
        )

    # ---- REAL S2 SSE: relay without reframing ----
    try:
        tail = await s2_client.open_read(stream)
    except StreamServiceError as e:
        logger.log_stream_subscription(stream, "open", "s2", {"error": str(e)}, status="failed")
        return PlainTextResponse("S2 read failed", status_code=502)

    if not tail.ok:
        logger.log_stream_subscription(stream, "open", "s2", {"upstream_status": tail.status_code}, status="failed")
        await tail.aclose()
        return PlainTextResponse("S2 read failed", status_code=502)

    logger.log_stream_subscription(stream, "opened", "s2")
    return StreamingResponse(
        tail.iter_raw(),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(tail.aclose),
    )


@router.post("/read", response_class=PlainTextResponse)
async def ingest_stub_record(
    request: RecordRequest,
    store: IStreamStore = Depends(get_stream_store),
):
    """Stub-only write path: push a record into the in-memory buffer."""
    stream = stream_name(request.studentId or DEMO_STUDENT_ID)
    record = Record.now(request.type, request.payload, stream)
    store.append(stream, record)
    logger.log_stream_append(stream, record.type, "stub-ingest")
    return "ok"
