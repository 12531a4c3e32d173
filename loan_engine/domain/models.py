"""Domain models - immutable dataclasses representing loans and their repayments"""

import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple


class LoanStatus(str, Enum):
    DUE = "due"
    REPAID = "repaid"


class RepaymentStatus(str, Enum):
    DUE = "due"
    PARTIAL = "partial"
    REPAID = "repaid"


def repayment_status_for(outstanding_amount: int, amount: int) -> RepaymentStatus:
    """Status implied by an installment's outstanding balance"""
    if outstanding_amount <= 0:
        return RepaymentStatus.REPAID
    if outstanding_amount < amount:
        return RepaymentStatus.PARTIAL
    return RepaymentStatus.DUE


@dataclass(frozen=True)
class Loan:
    """Credit extended to a user, repaid through scheduled installments"""

    id: uuid.UUID
    user_id: str
    amount: int
    terms: int
    outstanding_amount: int
    currency_code: str
    processed_at: date
    status: LoanStatus = LoanStatus.DUE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_repaid(self) -> bool:
        return self.status == LoanStatus.REPAID

    def apply_payment(self, amount: int) -> "Loan":
        """
        Decrement the outstanding balance by an already-clamped amount.

        Outstanding is floored at 0 and the loan becomes repaid once nothing
        is left.
        """
        outstanding = max(self.outstanding_amount - amount, 0)
        status = LoanStatus.REPAID if outstanding <= 0 else self.status
        return replace(self, outstanding_amount=outstanding, status=status)


@dataclass(frozen=True)
class ScheduledRepayment:
    """Single installment in a loan's repayment schedule"""

    id: uuid.UUID
    loan_id: uuid.UUID
    amount: int
    outstanding_amount: int
    due_date: date
    currency_code: str
    status: RepaymentStatus = RepaymentStatus.DUE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    def apply_payment(self, available: int) -> Tuple["ScheduledRepayment", int]:
        """
        Cover as much of this installment as `available` allows.

        Returns the updated installment and the amount consumed.
        """
        consumed = min(available, self.outstanding_amount)
        outstanding = self.outstanding_amount - consumed
        updated = replace(
            self,
            outstanding_amount=outstanding,
            status=repayment_status_for(outstanding, self.amount),
        )
        return updated, consumed


@dataclass(frozen=True)
class ReceivedRepayment:
    """Ledger entry for a payment received against a loan. Never mutated."""

    id: uuid.UUID
    loan_id: uuid.UUID
    amount: int
    currency_code: str
    received_at: date
    created_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


@dataclass
class Installment:
    """Planned installment before it is persisted"""

    due_date: date
    amount: int
