"""Data access layer for loans and repayments"""

import uuid
from contextlib import contextmanager
from datetime import date
from typing import Iterable, Iterator, List, Optional
from sqlalchemy.orm import Session
from loan_engine.infrastructure.database.models import LoanRecord, ScheduledRepaymentRecord, ReceivedRepaymentRecord
from loan_engine.domain.models import (
    Installment,
    Loan,
    LoanStatus,
    ReceivedRepayment,
    RepaymentStatus,
    ScheduledRepayment,
)


def _to_loan(record: LoanRecord) -> Loan:
    return Loan(
        id=record.id,
        user_id=record.user_id,
        amount=record.amount,
        terms=record.terms,
        outstanding_amount=record.outstanding_amount,
        currency_code=record.currency_code,
        processed_at=record.processed_at,
        status=LoanStatus(record.status),
        created_at=record.created_at,
        updated_at=record.updated_at,
        deleted_at=record.deleted_at,
    )


def _to_scheduled_repayment(record: ScheduledRepaymentRecord) -> ScheduledRepayment:
    return ScheduledRepayment(
        id=record.id,
        loan_id=record.loan_id,
        amount=record.amount,
        outstanding_amount=record.outstanding_amount,
        due_date=record.due_date,
        currency_code=record.currency_code,
        status=RepaymentStatus(record.status),
        created_at=record.created_at,
        updated_at=record.updated_at,
        deleted_at=record.deleted_at,
    )


def _to_received_repayment(record: ReceivedRepaymentRecord) -> ReceivedRepayment:
    return ReceivedRepayment(
        id=record.id,
        loan_id=record.loan_id,
        amount=record.amount,
        currency_code=record.currency_code,
        received_at=record.received_at,
        created_at=record.created_at,
        deleted_at=record.deleted_at,
    )


class LoanRepository:
    """SQLAlchemy-backed storage for loans, installments and received repayments"""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def unit_of_work(self) -> Iterator[None]:
        """Commit everything written inside the block, or roll all of it back"""
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def create_loan(
        self,
        user_id: str,
        amount: int,
        terms: int,
        currency_code: str,
        processed_at: date,
    ) -> Loan:
        """Persist a new loan with its full principal outstanding"""
        db_loan = LoanRecord(
            user_id=user_id,
            amount=amount,
            terms=terms,
            outstanding_amount=amount,
            currency_code=currency_code,
            processed_at=processed_at,
            status=LoanStatus.DUE.value,
        )
        self.db.add(db_loan)
        self.db.flush()  # Get ID without committing
        return _to_loan(db_loan)

    def create_scheduled_repayments(
        self,
        loan: Loan,
        installments: Iterable[Installment],
    ) -> List[ScheduledRepayment]:
        """Insert a loan's whole schedule in one batch"""
        records = [
            ScheduledRepaymentRecord(
                loan_id=loan.id,
                amount=inst.amount,
                outstanding_amount=inst.amount,
                currency_code=loan.currency_code,
                due_date=inst.due_date,
                status=RepaymentStatus.DUE.value,
            )
            for inst in installments
        ]
        self.db.add_all(records)
        self.db.flush()
        return [_to_scheduled_repayment(r) for r in records]

    def create_received_repayment(
        self,
        loan_id: uuid.UUID,
        amount: int,
        currency_code: str,
        received_at: date,
    ) -> ReceivedRepayment:
        db_received = ReceivedRepaymentRecord(
            loan_id=loan_id,
            amount=amount,
            currency_code=currency_code,
            received_at=received_at,
        )
        self.db.add(db_received)
        self.db.flush()
        return _to_received_repayment(db_received)

    def get_loan(self, loan_id: uuid.UUID, for_update: bool = False) -> Optional[Loan]:
        """Fetch a live loan, optionally locking its row until the transaction ends"""
        query = self.db.query(LoanRecord).filter(LoanRecord.id == loan_id, LoanRecord.deleted_at.is_(None))
        if for_update:
            query = query.with_for_update()
        record = query.first()
        return _to_loan(record) if record else None

    def list_loans_by_user(self, user_id: str, limit: int = 20) -> List[Loan]:
        """Fetch a user's most recent loans"""
        records = (
            self.db.query(LoanRecord)
            .filter(LoanRecord.user_id == user_id, LoanRecord.deleted_at.is_(None))
            .order_by(LoanRecord.created_at.desc(), LoanRecord.processed_at.desc())
            .limit(limit)
            .all()
        )
        return [_to_loan(r) for r in records]

    def get_scheduled_repayments(
        self,
        loan_id: uuid.UUID,
        statuses: Optional[Iterable[RepaymentStatus]] = None,
    ) -> List[ScheduledRepayment]:
        """Fetch a loan's installments, earliest due first"""
        query = self.db.query(ScheduledRepaymentRecord).filter(
            ScheduledRepaymentRecord.loan_id == loan_id,
            ScheduledRepaymentRecord.deleted_at.is_(None),
        )
        if statuses is not None:
            query = query.filter(ScheduledRepaymentRecord.status.in_([RepaymentStatus(s).value for s in statuses]))
        records = query.order_by(ScheduledRepaymentRecord.due_date.asc()).all()
        return [_to_scheduled_repayment(r) for r in records]

    def update_scheduled_repayment(self, repayment: ScheduledRepayment) -> ScheduledRepayment:
        """Write an installment's outstanding balance and status"""
        record = self.db.get(ScheduledRepaymentRecord, repayment.id)
        record.outstanding_amount = repayment.outstanding_amount
        record.status = repayment.status.value
        self.db.flush()
        return _to_scheduled_repayment(record)

    def update_loan(self, loan: Loan) -> Loan:
        """Write a loan's outstanding balance and status"""
        record = self.db.get(LoanRecord, loan.id)
        record.outstanding_amount = loan.outstanding_amount
        record.status = loan.status.value
        self.db.flush()
        return _to_loan(record)

    def list_received_repayments(self, loan_id: uuid.UUID) -> List[ReceivedRepayment]:
        """Fetch a loan's ledger entries in the order they were received"""
        records = (
            self.db.query(ReceivedRepaymentRecord)
            .filter(ReceivedRepaymentRecord.loan_id == loan_id, ReceivedRepaymentRecord.deleted_at.is_(None))
            .order_by(ReceivedRepaymentRecord.received_at.asc(), ReceivedRepaymentRecord.created_at.asc())
            .all()
        )
        return [_to_received_repayment(r) for r in records]
