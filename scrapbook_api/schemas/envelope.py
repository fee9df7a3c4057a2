"""Error envelope returned by every failed request."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ResponseMeta(BaseModel):
    api_version: str = "1.0"
    processing_time_ms: int
    timestamp: datetime


class ErrorLocation(BaseModel):
    """Where the request went wrong: a stored entity, a body field, or a list position."""

    entity: str | None = None
    entity_id: str | None = None
    field: str | None = None
    index: int | None = None


class SuggestedAction(BaseModel):
    action: str
    endpoint: str | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class ErrorInfo(BaseModel):
    code: str
    message: str
    location: ErrorLocation | None = None
    retryable: bool = False
    suggested_fix: str | None = None
    suggested_actions: list[SuggestedAction] = Field(default_factory=list)


class ErrorEnvelope(BaseModel):
    request_id: str
    error: ErrorInfo
    meta: ResponseMeta
