"""
Log record variants returned by the store.

Error logs carry a fixed set of typed columns; trace logs carry an open JSON
payload. The two variants only share the ``created_at`` ordering key.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Union
import json
import logging

logger = logging.getLogger(__name__)


class LogKind(str, Enum):
    """Log category served by an endpoint."""
    ERROR = "error-log"
    TRACE = "trace-log"
    USER = "user-log"


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class ErrorLogRecord:
    """Refined error log entry."""
    id: int
    created_at: datetime
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
    user_se_cd: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "ErrorLogRecord":
        return cls(
            id=row.id,
            created_at=ensure_utc(row.created_at),
            trace_logs_id=row.trace_logs_id,
            profile=row.profile,
            app_name=row.app_name,
            err_cd=row.err_cd,
            schl_cd=row.schl_cd,
            cla_id=row.cla_id,
            user_id=row.user_id,
            url=row.url,
            hash=row.hash,
            exception=row.exception,
            err_msg=row.err_msg,
            message=row.message,
            user_se_cd=row.user_se_cd,
        )


@dataclass(frozen=True)
class TraceLogRecord:
    """Trace log entry with a schema-less payload."""
    id: int
    created_at: datetime
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def app_name(self) -> Optional[str]:
        return self.payload.get("appName")

    @property
    def log_type(self) -> Optional[str]:
        return self.payload.get("logType")

    @property
    def uuid(self) -> Optional[str]:
        return self.payload.get("uuid")

    @property
    def evt_cd(self) -> Optional[str]:
        return self.payload.get("evtCd")

    @classmethod
    def from_row(cls, row) -> "TraceLogRecord":
        return cls(
            id=row.id,
            created_at=ensure_utc(row.created_at),
            payload=_coerce_payload(row.id, row.log_payload),
        )


LogRecord = Union[ErrorLogRecord, TraceLogRecord]


def _coerce_payload(record_id: int, raw: Any) -> Dict[str, Any]:
    # Some writers store the payload as a JSON-encoded string
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, (str, bytes)):
        try:
            decoded = json.loads(raw)
        except ValueError:
            logger.warning(f"Trace log {record_id} has an unparseable payload")
            return {}
        if isinstance(decoded, dict):
            return decoded
    logger.warning(f"Trace log {record_id} payload is not a JSON object")
    return {}
