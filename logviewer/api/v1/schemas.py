"""
Response schemas shared by the log APIs.
Field names are serialized in camelCase for the dashboard.
"""
from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True
    )


class ErrorLogResponse(CamelModel):
    """Refined error log response schema."""
    id: int
    trace_logs_id: Optional[int] = None
    profile: Optional[str] = None
    app_name: Optional[str] = None
    err_cd: Optional[str] = None
    schl_cd: Optional[str] = None
    cla_id: Optional[str] = None
    user_id: Optional[str] = None
    url: Optional[str] = None
    hash: Optional[str] = None
    exception: Optional[str] = None
    err_msg: Optional[str] = None
    message: Optional[str] = None
    created_at: datetime
    user_se_cd: Optional[str] = None


class TraceLogResponse(CamelModel):
    """Trace log response schema."""
    id: int
    created_at: datetime
    log_payload: Dict[str, Any]

    @classmethod
    def from_record(cls, record) -> "TraceLogResponse":
        return cls(id=record.id, created_at=record.created_at, log_payload=record.payload)


class CountResponse(CamelModel):
    """Total number of matching records."""
    total: int


class ErrorResponse(BaseModel):
    """Error body returned for rejected or failed queries."""
    detail: str
    error: str
