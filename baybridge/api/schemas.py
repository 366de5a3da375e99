"""
Request and response models for the classroom updates API.
Field names follow the browser client's camelCase JSON.
"""

from pydantic import BaseModel, ConfigDict, field_validator
from typing import Any, List, Optional


class RecordRequest(BaseModel):
    """Body of POST /api/s2/append and the stub ingest POST /api/s2/read."""
    model_config = ConfigDict(extra="ignore")

    type: str = "note"
    payload: Any = None
    studentId: Optional[str] = None

    @field_validator('studentId')
    @classmethod
    def blank_student_id_is_missing(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class StubRecord(BaseModel):
    type: str
    payload: Any = None
    at: int
    stream: str


class AppendStubResponse(BaseModel):
    ok: bool = True
    stub: bool = True
    record: StubRecord


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str


class TranslateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    text: str
    targetLocale: Optional[str] = None
    sourceLocale: Optional[str] = None  # None = auto-detect


class TranslateResponse(BaseModel):
    ok: bool
    text: str
    reason: Optional[str] = None  # missing_key | upstream_error


class HealthResponse(BaseModel):
    status: str
    version: str
    stream_mode: str
    translation_enabled: bool
    config_issues: List[str] = []
