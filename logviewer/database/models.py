"""
SQLAlchemy ORM Models for the Log Viewer.
Maps the telemetry tables written by the logging pipeline.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import BigInteger, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func

# BIGSERIAL on PostgreSQL, INTEGER PRIMARY KEY (rowid alias) on SQLite
SurrogateKey = BigInteger().with_variant(Integer(), "sqlite")
Payload = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


class TraceLog(Base):
    """
    TraceLog model - Raw trace/event logs with a schema-less JSON payload.

    Well-known payload keys: appName, logType, evtCd, uuid, profile.
    """
    __tablename__ = "trace_logs"

    id: Mapped[int] = mapped_column(SurrogateKey, primary_key=True, autoincrement=True)
    log_payload: Mapped[Optional[dict]] = mapped_column(Payload)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_trace_logs_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<TraceLog(id={self.id}, created_at={self.created_at})>"


class RefinedErrorLog(Base):
    """
    RefinedErrorLog model - Error entries extracted from trace logs.
    """
    __tablename__ = "refined_error_logs"

    id: Mapped[int] = mapped_column(SurrogateKey, primary_key=True, autoincrement=True)
    trace_logs_id: Mapped[Optional[int]] = mapped_column(BigInteger)

    # Origin
    profile: Mapped[Optional[str]] = mapped_column(String(20))
    app_name: Mapped[Optional[str]] = mapped_column(String(20))

    # Error details
    err_cd: Mapped[Optional[str]] = mapped_column(String(20))
    exception: Mapped[Optional[str]] = mapped_column(String(50))
    err_msg: Mapped[Optional[str]] = mapped_column(Text)
    message: Mapped[Optional[str]] = mapped_column(Text)
    url: Mapped[Optional[str]] = mapped_column(String(500))
    hash: Mapped[Optional[str]] = mapped_column(String(20))

    # User context
    schl_cd: Mapped[Optional[str]] = mapped_column(String(50))
    cla_id: Mapped[Optional[str]] = mapped_column(String(128))
    user_id: Mapped[Optional[str]] = mapped_column(String(64))
    user_se_cd: Mapped[Optional[str]] = mapped_column(String(1))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_refined_error_logs_created_at", "created_at"),
        Index("idx_refined_error_logs_profile_app", "profile", "app_name"),
    )

    def __repr__(self):
        return f"<RefinedErrorLog(id={self.id}, err_cd={self.err_cd}, app_name={self.app_name})>"
