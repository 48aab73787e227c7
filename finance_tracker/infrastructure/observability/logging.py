"""Structured JSON logging for the finance tracker client"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO
from pythonjsonlogger import jsonlogger

from finance_tracker.config import settings

HANDLER_NAME = "finance_tracker.json"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> logging.Handler:
    """
    Install the JSON handler on the root logger.

    Repeated calls replace the handler installed earlier; handlers added by
    the host application are left in place.
    """
    root = logging.getLogger()
    root.setLevel(level)
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)
    return handler


def log_operation(
    operation: str,
    outcome: str,
    duration_ms: float,
    transaction_id: Optional[str] = None,
    error: Optional[str] = None,
) -> None:
    """Log structured store operation outcome"""
    extra = {
        "step": "operation_complete",
        "operation": operation,
        "outcome": outcome,
        "duration_ms": round(duration_ms, 2),
    }
    if transaction_id is not None:
        extra["transaction_id"] = transaction_id
    if error is not None:
        extra["error"] = error

    # Rejections are faults; validation and not-found are user conditions
    if outcome == "rejected":
        level = logging.ERROR
    elif outcome == "stale":
        level = logging.WARNING
    elif outcome in ("invalid", "not_found"):
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.getLogger("finance_tracker.sync").log(level, "Operation completed", extra=extra)
