"""
Logging Configuration - Console/file handlers, JSON formatting for shipped
logs, and performance loggers for requests and store queries.
"""
import logging
import logging.handlers
import sys
import json
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from logviewer.config import settings

_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

# Chatty libraries that only log above WARNING in production
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "asyncpg", "uvicorn.access")


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line, stamped with the service identity.

    Attributes passed through ``extra=`` end up under ``"extra"``.
    """

    def __init__(self, service: str, environment: str):
        super().__init__()
        self.service = service
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'service': self.service,
            'environment': self.environment,
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}:{record.funcName}:{record.lineno}",
        }

        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info),
            }

        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extra:
            entry['extra'] = extra

        return json.dumps(entry, default=str)


class LoggingManager:
    """Installs the root handlers once per process."""

    def __init__(self):
        self.configured = False

    def configure_logging(self, config: Optional[Dict[str, Any]] = None):
        """
        Configure the root logger.

        Args:
            config: Logging options, as returned by
                ``Settings.get_logging_config()``; defaults to the global settings
        """
        if self.configured:
            return

        config = config or settings.get_logging_config()

        root_logger = logging.getLogger()
        root_logger.setLevel(config['level'].upper())
        root_logger.handlers.clear()
        for handler in self.build_handlers(config):
            root_logger.addHandler(handler)

        quiet_level = logging.WARNING if settings.is_production else logging.INFO
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(quiet_level)

        self.configured = True
        logging.getLogger(__name__).info(
            f"Logging configured (level={config['level']}, console={config['to_console']}, "
            f"file={config['file_path'] if config['to_file'] else None})"
        )

    def build_handlers(self, config: Dict[str, Any]) -> List[logging.Handler]:
        """Create the console and file handlers enabled in ``config``."""
        handlers: List[logging.Handler] = []

        if config['to_console']:
            console_handler = logging.StreamHandler(sys.stdout)
            if settings.is_production:
                console_handler.setFormatter(self._json_formatter())
            else:
                console_handler.setFormatter(logging.Formatter(config['format'], datefmt='%Y-%m-%d %H:%M:%S'))
            handlers.append(console_handler)

        if config['to_file'] and config['file_path']:
            try:
                Path(config['file_path']).parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.handlers.RotatingFileHandler(
                    filename=config['file_path'],
                    maxBytes=config['max_bytes'],
                    backupCount=config['backup_count'],
                    encoding='utf-8'
                )
            except OSError as e:
                logging.getLogger(__name__).error(f"Failed to open log file {config['file_path']}: {e}")
            else:
                # Files are always JSON
                file_handler.setFormatter(self._json_formatter())
                handlers.append(file_handler)

        return handlers

    @staticmethod
    def _json_formatter() -> StructuredFormatter:
        return StructuredFormatter(service=settings.APP_NAME, environment=settings.APP_ENV)


class PerformanceLogger:
    """Timing records for HTTP requests and log-store queries."""

    def __init__(self):
        self.logger = logging.getLogger('performance')

    def log_request_performance(self, method: str, path: str, duration_ms: float,
                                status_code: int, client: Optional[str] = None):
        """Log API request performance."""
        self.logger.info(f"{method} {path} -> {status_code} in {duration_ms}ms", extra={
            'event_type': 'api_request',
            'method': method,
            'path': path,
            'duration_ms': duration_ms,
            'status_code': status_code,
            'client': client
        })

    def log_query_performance(self, kind: str, predicate: str, duration_ms: float,
                              rows_returned: int, limit: int, window_minutes: float):
        """Log one store call, including how wide a window it scanned."""
        self.logger.info(f"{kind} query ({predicate}) returned {rows_returned} rows in {duration_ms}ms", extra={
            'event_type': 'log_query',
            'kind': kind,
            'predicate': predicate,
            'duration_ms': duration_ms,
            'rows_returned': rows_returned,
            'limit': limit,
            'window_minutes': window_minutes
        })


# Global instances
logging_manager = LoggingManager()
performance_logger = PerformanceLogger()


def configure_logging():
    """Configure application logging from the global settings."""
    logging_manager.configure_logging()
