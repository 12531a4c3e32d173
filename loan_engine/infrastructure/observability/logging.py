"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from loan_engine.config import settings


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


def log_loan_created(
    request_id: str,
    user_id: str,
    loan_id: str,
    amount: int,
    currency_code: str,
    terms: int,
) -> None:
    """Log structured origination outcome"""
    logging.info(
        "Loan created",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "loan_id": loan_id,
            "step": "loan_created",
            "amount": amount,
            "currency_code": currency_code,
            "terms": terms,
        },
    )


def log_repayment_applied(
    request_id: str,
    user_id: str,
    loan_id: str,
    received_amount: int,
    applied_amount: int,
    loan_status: str,
    outstanding_amount: int,
) -> None:
    """Log structured repayment outcome, including how much of the payment was applied"""
    logging.info(
        "Repayment applied",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "loan_id": loan_id,
            "step": "repayment_applied",
            "received_amount": received_amount,
            "applied_amount": applied_amount,
            "clamped": received_amount != applied_amount,
            "loan_status": loan_status,
            "outstanding_amount": outstanding_amount,
        },
    )
