"""SQLAlchemy ORM models for loans and repayments"""

import uuid
from sqlalchemy import Column, String, BigInteger, DateTime, Date, Integer, ForeignKey, Text, Uuid, CheckConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class LoanRecord(Base):
    """Loan extended to a user"""

    __tablename__ = "loans"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_loans_amount_positive"),
        CheckConstraint(
            "outstanding_amount >= 0 AND outstanding_amount <= amount",
            name="ck_loans_outstanding_range",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    terms = Column(Integer, nullable=False)
    outstanding_amount = Column(BigInteger, nullable=False)
    currency_code = Column(String(3), nullable=False)
    processed_at = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="due")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class ScheduledRepaymentRecord(Base):
    """Installment within a loan's repayment schedule"""

    __tablename__ = "scheduled_repayments"
    __table_args__ = (
        CheckConstraint(
            "outstanding_amount >= 0 AND outstanding_amount <= amount",
            name="ck_scheduled_repayments_outstanding_range",
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(Uuid(as_uuid=True), ForeignKey("loans.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    outstanding_amount = Column(BigInteger, nullable=False)
    currency_code = Column(String(3), nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(Text, nullable=False, default="due")  # due | partial | repaid
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class ReceivedRepaymentRecord(Base):
    """Payment received against a loan"""

    __tablename__ = "received_repayments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(Uuid(as_uuid=True), ForeignKey("loans.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    currency_code = Column(String(3), nullable=False)
    received_at = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    deleted_at = Column(DateTime(timezone=True), nullable=True)
