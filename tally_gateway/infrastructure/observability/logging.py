"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from tally_gateway.config import settings


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

    # UnknownCadenceWarning and friends land on the "py.warnings" logger
    logging.captureWarnings(True)


def log_roi_analysis(
    request_id: str,
    user_id: str,
    subscription_count: int,
    duration_ms: float,
    subscription_id: Optional[str] = None,
) -> None:
    """Log structured ROI analysis outcome"""
    logging.info(
        "ROI analysis completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "roi_complete",
            "subscription_id": subscription_id,
            "subscription_count": subscription_count,
            "duration_ms": duration_ms,
        },
    )


def log_unknown_cadence(request_id: str, subscription_id: str, recurrence: Optional[str]) -> None:
    """Log a recurrence that fell back to the monthly multiplier"""
    logging.warning(
        "Unknown recurrence, using monthly multiplier",
        extra={
            "request_id": request_id,
            "subscription_id": subscription_id,
            "recurrence": recurrence,
            "step": "cadence_fallback",
        },
    )
