"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import List, Optional


class LoanRequest(BaseModel):
    """Request body for POST /v1/loans"""

    amount: int = Field(..., gt=0, description="Principal in minor units")
    currency_code: str = Field(..., min_length=3, max_length=3, description="ISO 4217 currency code")
    terms: int = Field(..., gt=0, description="Number of monthly installments")
    processed_at: date = Field(..., description="Origination date")


class RepaymentRequest(BaseModel):
    """Request body for POST /v1/loans/{loan_id}/repayments"""

    amount: int = Field(..., gt=0, description="Received amount in minor units")
    currency_code: str = Field(..., min_length=3, max_length=3)
    received_at: Optional[date] = Field(None, description="Date the payment was received (default: today)")


class ScheduledRepaymentSchema(BaseModel):
    """Single installment in a loan's schedule"""

    id: str
    amount: int
    outstanding_amount: int
    currency_code: str
    due_date: date
    status: str


class LoanResponse(BaseModel):
    """Loan with its installment schedule"""

    id: str
    user_id: str
    amount: int
    terms: int
    outstanding_amount: int
    currency_code: str
    processed_at: date
    status: str
    scheduled_repayments: List[ScheduledRepaymentSchema] = []


class LoanListResponse(BaseModel):
    """Response for GET /v1/loans"""

    user_id: str
    loans: List[LoanResponse]


class ReceivedRepaymentSchema(BaseModel):
    """Ledger entry for a received payment"""

    id: str
    loan_id: str
    amount: int
    currency_code: str
    received_at: date


class ReceivedRepaymentListResponse(BaseModel):
    """Response for GET /v1/loans/{loan_id}/repayments"""

    loan_id: str
    repayments: List[ReceivedRepaymentSchema]
