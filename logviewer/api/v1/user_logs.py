"""
User Logs API - Query trace logs tied to a user identifier.
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from datetime import datetime

from logviewer.api.v1.schemas import TraceLogResponse
from logviewer.core.records import LogKind
from logviewer.dependencies import get_query_service
from logviewer.services.log_query_service import LogQueryParams, LogQueryService

router = APIRouter()


@router.get("", response_model=List[TraceLogResponse])
async def get_user_logs(
    minutes: Optional[int] = Query(
        None, description="Minutes back from now (10, 20, 30, 60, 480, 720; default 10)"
    ),
    start_date: Optional[datetime] = Query(None, alias="startDate", description="Range start (ISO 8601)"),
    end_date: Optional[datetime] = Query(None, alias="endDate", description="Range end (ISO 8601)"),
    uuid: Optional[str] = Query(None, description="User identifier prefix (no leading wildcard)"),
    log_type: Optional[str] = Query(None, alias="logType", description="Log type (all, debug, ack, stats, error, event)"),
    limit: Optional[int] = Query(None, description="Maximum number of records (default 100, capped at 10000)"),
    service: LogQueryService = Depends(get_query_service)
):
    """
    List user logs.

    A complete startDate/endDate pair takes precedence over minutes.
    """
    records = await service.execute(LogQueryParams(
        kind=LogKind.USER,
        start_date=start_date,
        end_date=end_date,
        minutes=minutes,
        uuid=uuid,
        log_type=log_type,
        limit=limit
    ))
    return [TraceLogResponse.from_record(record) for record in records]
