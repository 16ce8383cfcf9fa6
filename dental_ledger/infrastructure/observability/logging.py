"""Structured JSON logging for production observability"""

import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from dental_ledger.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_ledger_event(
    request_id: str,
    clinic_id: str,
    step: str,
    **fields: Any,
) -> None:
    """Log structured outcome of a ledger operation (ids, counts, amounts in cents)"""
    logging.info(
        "Ledger operation completed",
        extra={
            "request_id": request_id,
            "clinic_id": clinic_id,
            "step": step,
            **{key: str(value) if isinstance(value, uuid.UUID) else value for key, value in fields.items()},
        },
    )
