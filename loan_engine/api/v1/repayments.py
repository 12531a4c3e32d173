"""/v1/loans/{loan_id}/repayments - received repayment endpoints"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from loan_engine.api.v1.loans import parse_loan_id
from loan_engine.api.v1.schemas import ReceivedRepaymentListResponse, ReceivedRepaymentSchema, RepaymentRequest
from loan_engine.api.dependencies import get_loan_service, get_request_id, get_user_id
from loan_engine.domain.exceptions import DomainException
from loan_engine.domain.loans import LoanService
from loan_engine.domain.models import ReceivedRepayment
from loan_engine.infrastructure.observability.logging import log_repayment_applied
from loan_engine.infrastructure.observability.metrics import record_repayment

router = APIRouter()


def to_received_schema(received: ReceivedRepayment) -> ReceivedRepaymentSchema:
    return ReceivedRepaymentSchema(
        id=str(received.id),
        loan_id=str(received.loan_id),
        amount=received.amount,
        currency_code=received.currency_code,
        received_at=received.received_at,
    )


@router.post("/loans/{loan_id}/repayments", response_model=ReceivedRepaymentSchema, status_code=201)
def create_repayment(
    loan_id: str,
    request_body: RepaymentRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: LoanService = Depends(get_loan_service),
):
    """
    Apply a received payment to a loan.

    Flow:
    1. Load the loan on behalf of the acting user
    2. Record the payment and spend it on installments, earliest due first
    3. Return the ledger entry (amount as received, even if clamped)
    """
    request_id = get_request_id(request)
    loan_uuid = parse_loan_id(loan_id)

    try:
        loan = service.get_loan(loan_uuid, user_id)
        outstanding_before = loan.outstanding_amount
        received = service.repay_loan(
            loan,
            amount=request_body.amount,
            currency_code=request_body.currency_code,
            received_at=request_body.received_at,
        )
        loan = service.get_loan(loan_uuid, user_id)

    except DomainException:
        raise  # Mapped to 4xx by domain_exception_handler

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_repayment(received.amount, loan.status.value)
    log_repayment_applied(
        request_id,
        user_id,
        loan_id,
        received_amount=received.amount,
        applied_amount=outstanding_before - loan.outstanding_amount,
        loan_status=loan.status.value,
        outstanding_amount=loan.outstanding_amount,
    )

    return to_received_schema(received)


@router.get("/loans/{loan_id}/repayments", response_model=ReceivedRepaymentListResponse)
def list_repayments(
    loan_id: str,
    user_id: str = Depends(get_user_id),
    service: LoanService = Depends(get_loan_service),
):
    """Retrieve a loan's received repayments, oldest first"""
    loan_uuid = parse_loan_id(loan_id)

    loan = service.get_loan(loan_uuid, user_id)

    return ReceivedRepaymentListResponse(
        loan_id=loan_id,
        repayments=[to_received_schema(r) for r in service.list_received_repayments(loan.id)],
    )
