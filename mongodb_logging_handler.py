"""
MongoDB Logging Handler for storing application logs in MongoDB.

This allows viewing server logs remotely without shell access.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import UTC, datetime
from typing import Any

from db.models import ServerLog


class MongoDBHandler(logging.Handler):
    """Custom logging handler that writes log records to the server_logs collection."""

    def __init__(self, level: int = logging.INFO) -> None:
        super().__init__(level)
        self._pending: set[asyncio.Task] = set()

    def emit(self, record: logging.LogRecord) -> None:
        # Records from the driver or this module would recurse into emit()
        if record.name.startswith(("pymongo", "motor", __name__)):
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop (e.g. during shutdown); drop the record
            return
        try:
            entry = self._format_log_entry(record)
            task = loop.create_task(self._async_emit(entry))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
        except Exception:
            self.handleError(record)

    async def _async_emit(self, log_entry: dict[str, Any]) -> None:
        # Logging a failure here would feed straight back into emit()
        with contextlib.suppress(Exception):
            await ServerLog(**log_entry).insert()

    def _format_log_entry(self, record: logging.LogRecord) -> dict[str, Any]:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "lineno": record.lineno,
        }
        if record.exc_info:
            formatter = self.formatter or logging.Formatter()
            log_entry["exc_info"] = formatter.formatException(record.exc_info)
        return log_entry
