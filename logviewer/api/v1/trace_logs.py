"""
Trace Logs API - Query launcher trace/event logs.
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from datetime import datetime

from logviewer.api.v1.schemas import TraceLogResponse
from logviewer.core.records import LogKind
from logviewer.dependencies import get_query_service
from logviewer.services.log_query_service import LogQueryService

router = APIRouter()

LIMIT_DESCRIPTION = "Number of records (default 100; allowed 100, 200, 300, 1000, 10000)"
LOG_TYPE_DESCRIPTION = "Log type (debug, ack, stats, error) or 'event' for records with an event code"


@router.get("/range", response_model=List[TraceLogResponse])
async def get_trace_logs_by_date_range(
    start_date: datetime = Query(..., alias="startDate", description="Range start (ISO 8601 with timezone)"),
    end_date: datetime = Query(..., alias="endDate", description="Range end (ISO 8601 with timezone)"),
    limit: Optional[int] = Query(None, description=LIMIT_DESCRIPTION),
    app_name: Optional[str] = Query(None, alias="appName", description="Application name filter"),
    log_type: Optional[str] = Query(None, alias="logType", description=LOG_TYPE_DESCRIPTION),
    profile: Optional[str] = Query(None, description="Profile filter (case-insensitive)"),
    service: LogQueryService = Depends(get_query_service)
):
    """List trace logs within an explicit date range."""
    records = await service.query_by_range(
        LogKind.TRACE, start_date, end_date,
        app_name=app_name, log_type=log_type, profile=profile, limit=limit
    )
    return [TraceLogResponse.from_record(record) for record in records]


@router.get("/recent", response_model=List[TraceLogResponse])
async def get_recent_trace_logs(
    minutes: Optional[int] = Query(None, description="Minutes back from now (default 10)"),
    limit: Optional[int] = Query(None, description=LIMIT_DESCRIPTION),
    app_name: Optional[str] = Query(None, alias="appName", description="Application name filter"),
    log_type: Optional[str] = Query(None, alias="logType", description=LOG_TYPE_DESCRIPTION),
    profile: Optional[str] = Query(None, description="Profile filter (case-insensitive)"),
    service: LogQueryService = Depends(get_query_service)
):
    """List trace logs from the last few minutes."""
    records = await service.query_by_recency(
        LogKind.TRACE, minutes,
        app_name=app_name, log_type=log_type, profile=profile, limit=limit
    )
    return [TraceLogResponse.from_record(record) for record in records]
