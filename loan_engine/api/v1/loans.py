"""/v1/loans - loan origination and lookup endpoints"""

import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from loan_engine.api.v1.schemas import LoanListResponse, LoanRequest, LoanResponse, ScheduledRepaymentSchema
from loan_engine.api.dependencies import get_loan_service, get_request_id, get_user_id
from loan_engine.domain.exceptions import DomainException
from loan_engine.domain.loans import LoanService
from loan_engine.domain.models import Loan, ScheduledRepayment
from loan_engine.infrastructure.observability.logging import log_loan_created
from loan_engine.infrastructure.observability.metrics import record_loan_created

router = APIRouter()


def parse_loan_id(loan_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(loan_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid loan ID format")


def to_loan_response(loan: Loan, schedule: list[ScheduledRepayment]) -> LoanResponse:
    return LoanResponse(
        id=str(loan.id),
        user_id=loan.user_id,
        amount=loan.amount,
        terms=loan.terms,
        outstanding_amount=loan.outstanding_amount,
        currency_code=loan.currency_code,
        processed_at=loan.processed_at,
        status=loan.status.value,
        scheduled_repayments=[
            ScheduledRepaymentSchema(
                id=str(inst.id),
                amount=inst.amount,
                outstanding_amount=inst.outstanding_amount,
                currency_code=inst.currency_code,
                due_date=inst.due_date,
                status=inst.status.value,
            )
            for inst in schedule
        ],
    )


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan(
    request_body: LoanRequest,
    request: Request,
    user_id: str = Depends(get_user_id),
    service: LoanService = Depends(get_loan_service),
):
    """
    Originate a loan with its monthly installment schedule.

    Returns:
        The new loan with `terms` installments due one month apart
    """
    request_id = get_request_id(request)

    try:
        loan = service.create_loan(
            user_id=user_id,
            amount=request_body.amount,
            currency_code=request_body.currency_code,
            terms=request_body.terms,
            processed_at=request_body.processed_at,
        )
    except DomainException:
        raise  # Mapped to 4xx by domain_exception_handler

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_loan_created(loan.currency_code, loan.terms)
    log_loan_created(request_id, user_id, str(loan.id), loan.amount, loan.currency_code, loan.terms)

    return to_loan_response(loan, service.get_schedule(loan.id))


@router.get("/loans", response_model=LoanListResponse)
def list_loans(
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(get_user_id),
    service: LoanService = Depends(get_loan_service),
):
    """Retrieve the acting user's most recent loans"""
    loans = service.list_loans(user_id, limit=limit)
    return LoanListResponse(
        user_id=user_id,
        loans=[to_loan_response(loan, service.get_schedule(loan.id)) for loan in loans],
    )


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(
    loan_id: str,
    user_id: str = Depends(get_user_id),
    service: LoanService = Depends(get_loan_service),
):
    """Retrieve a loan with its installment schedule"""
    loan_uuid = parse_loan_id(loan_id)

    loan = service.get_loan(loan_uuid, user_id)

    return to_loan_response(loan, service.get_schedule(loan.id))
