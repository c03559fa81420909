"""
Error Logs API - Query the refined error log stream.
"""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from datetime import datetime

from logviewer.api.v1.schemas import CountResponse, ErrorLogResponse
from logviewer.core.records import LogKind
from logviewer.dependencies import get_query_service
from logviewer.services.log_query_service import LogQueryService

router = APIRouter()


@router.get("/range", response_model=List[ErrorLogResponse])
async def get_error_logs_by_date_range(
    start_date: datetime = Query(..., alias="startDate", description="Range start (ISO 8601)"),
    end_date: datetime = Query(..., alias="endDate", description="Range end (ISO 8601)"),
    profile: Optional[str] = Query("all", description="Profile (all, dev, stg, access, r-engl, r-math)"),
    app_name: Optional[str] = Query("all", alias="appName", description="Application name (all, vlmsapi, launcher, ...)"),
    limit: Optional[int] = Query(None, description="Maximum number of records (default 100, capped at 1000)"),
    service: LogQueryService = Depends(get_query_service)
):
    """List error logs within an explicit date range."""
    records = await service.query_by_range(
        LogKind.ERROR, start_date, end_date,
        profile=profile, app_name=app_name, limit=limit
    )
    return [ErrorLogResponse.model_validate(record) for record in records]


@router.get("/recent", response_model=List[ErrorLogResponse])
async def get_recent_error_logs(
    minutes: Optional[int] = Query(None, description="Minutes back from now (10, 30, 60; default 10)"),
    profile: Optional[str] = Query("all", description="Profile filter"),
    app_name: Optional[str] = Query("all", alias="appName", description="Application name filter"),
    limit: Optional[int] = Query(None, description="Maximum number of records (default 100, capped at 1000)"),
    service: LogQueryService = Depends(get_query_service)
):
    """List error logs from the last few minutes."""
    records = await service.query_by_recency(
        LogKind.ERROR, minutes,
        profile=profile, app_name=app_name, limit=limit
    )
    return [ErrorLogResponse.model_validate(record) for record in records]


@router.get("/range/count", response_model=CountResponse)
async def count_error_logs_by_date_range(
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    profile: Optional[str] = Query("all"),
    app_name: Optional[str] = Query("all", alias="appName"),
    service: LogQueryService = Depends(get_query_service)
):
    """Count error logs within an explicit date range."""
    total = await service.count_by_range(
        LogKind.ERROR, start_date, end_date,
        profile=profile, app_name=app_name
    )
    return CountResponse(total=total)


@router.get("/recent/count", response_model=CountResponse)
async def count_recent_error_logs(
    minutes: Optional[int] = Query(None),
    profile: Optional[str] = Query("all"),
    app_name: Optional[str] = Query("all", alias="appName"),
    service: LogQueryService = Depends(get_query_service)
):
    """Count error logs from the last few minutes."""
    total = await service.count_by_recency(
        LogKind.ERROR, minutes,
        profile=profile, app_name=app_name
    )
    return CountResponse(total=total)
