"""Persistence and clock interfaces consumed by the loan engine"""

import uuid
from datetime import date
from typing import ContextManager, Iterable, List, Optional, Protocol
from loan_engine.domain.models import (
    Installment,
    Loan,
    ReceivedRepayment,
    RepaymentStatus,
    ScheduledRepayment,
)


class Clock(Protocol):
    def today(self) -> date: ...


class LoanRepository(Protocol):
    """Storage operations needed by loan origination and repayment"""

    def unit_of_work(self) -> ContextManager[None]:
        """All-or-nothing scope: commit on success, roll back on any exception"""
        ...

    def create_loan(
        self,
        user_id: str,
        amount: int,
        terms: int,
        currency_code: str,
        processed_at: date,
    ) -> Loan: ...

    def create_scheduled_repayments(
        self,
        loan: Loan,
        installments: Iterable[Installment],
    ) -> List[ScheduledRepayment]: ...

    def create_received_repayment(
        self,
        loan_id: uuid.UUID,
        amount: int,
        currency_code: str,
        received_at: date,
    ) -> ReceivedRepayment: ...

    def get_loan(self, loan_id: uuid.UUID, for_update: bool = False) -> Optional[Loan]: ...

    def list_loans_by_user(self, user_id: str, limit: int = 20) -> List[Loan]: ...

    def get_scheduled_repayments(
        self,
        loan_id: uuid.UUID,
        statuses: Optional[Iterable[RepaymentStatus]] = None,
    ) -> List[ScheduledRepayment]:
        """Installments of a loan ordered by due date, optionally filtered by status"""
        ...

    def update_scheduled_repayment(self, repayment: ScheduledRepayment) -> ScheduledRepayment: ...

    def update_loan(self, loan: Loan) -> Loan: ...

    def list_received_repayments(self, loan_id: uuid.UUID) -> List[ReceivedRepayment]: ...
