"""
API v1 router configuration.
"""
from fastapi import APIRouter

from logviewer.api.v1 import error_logs, trace_logs, user_logs
from logviewer.api.v1.schemas import ErrorResponse

# Error bodies produced by the LogQueryError handler
ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Unsupported limit, minutes or time window"},
    503: {"model": ErrorResponse, "description": "Log store unavailable"},
    504: {"model": ErrorResponse, "description": "Log store timeout"},
}

# Create main API router
api_router = APIRouter(responses=ERROR_RESPONSES)

# Include all log routers
api_router.include_router(error_logs.router, prefix="/error-logs", tags=["error-logs"])
api_router.include_router(trace_logs.router, prefix="/trace-logs-launcher", tags=["trace-logs"])
api_router.include_router(user_logs.router, prefix="/user-logs", tags=["user-logs"])
