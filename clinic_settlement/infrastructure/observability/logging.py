"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger.json import JsonFormatter

from clinic_settlement.config import settings


class CustomJsonFormatter(JsonFormatter):
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


def log_profitability(
    request_id: str,
    payment_method: str,
    installment_count: int,
    margin_percent: str,
    issue_count: int,
) -> None:
    """Log structured profitability outcome for analysis"""
    logging.info(
        "Profitability computed",
        extra={
            "request_id": request_id,
            "step": "profitability_complete",
            "payment_method": payment_method,
            "installment_count": installment_count,
            "margin_percent": margin_percent,
            "issue_count": issue_count,
        },
    )


def log_projection(
    request_id: str,
    period_start: str,
    period_end: str,
    health_indicator: str,
    duration_ms: float,
) -> None:
    """Log structured cash flow projection outcome"""
    logging.info(
        "Cash flow projected",
        extra={
            "request_id": request_id,
            "step": "projection_complete",
            "period_start": period_start,
            "period_end": period_end,
            "health_indicator": health_indicator,
            "duration_ms": duration_ms,
        },
    )
