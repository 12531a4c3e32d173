"""Loan engine - origination and repayment allocation"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from loan_engine.domain.exceptions import (
    AlreadyRepaidError,
    CurrencyMismatchError,
    InvalidArgumentError,
    LoanAccessDeniedError,
    LoanNotFoundError,
    NothingOutstandingError,
)
from loan_engine.domain.installments import allocate_payment, generate_installment_plan
from loan_engine.domain.models import Loan, ReceivedRepayment, RepaymentStatus, ScheduledRepayment
from loan_engine.domain.ports import Clock, LoanRepository
from loan_engine.utils.date_utils import DateLike, SystemClock, parse_date

logger = logging.getLogger(__name__)

OPEN_REPAYMENT_STATUSES = (RepaymentStatus.DUE, RepaymentStatus.PARTIAL)


@dataclass(frozen=True)
class LoanPolicy:
    """Allowed loan terms and currency codes"""

    allowed_terms: FrozenSet[int] = field(default_factory=lambda: frozenset({3, 6}))
    allowed_currencies: FrozenSet[str] = field(default_factory=lambda: frozenset({"SGD", "VND"}))

    @classmethod
    def from_settings(cls, settings) -> "LoanPolicy":
        return cls(
            allowed_terms=frozenset(settings.allowed_terms),
            allowed_currencies=frozenset(settings.allowed_currencies),
        )


def _is_minor_units(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _to_date(value: DateLike, name: str):
    try:
        return parse_date(value)
    except ValueError as e:
        raise InvalidArgumentError(f"{name} must be a calendar date, got {value!r}") from e


class LoanService:
    """Creates loans with their schedules and applies received repayments"""

    def __init__(
        self,
        repository: LoanRepository,
        policy: Optional[LoanPolicy] = None,
        clock: Optional[Clock] = None,
    ):
        self.repository = repository
        self.policy = policy or LoanPolicy()
        self.clock = clock or SystemClock()

    def create_loan(
        self,
        user_id: str,
        amount: int,
        currency_code: str,
        terms: int,
        processed_at: DateLike,
    ) -> Loan:
        """
        Create a loan and its full installment schedule in one unit of work.

        Raises:
            InvalidArgumentError: Disallowed terms or currency, non-positive or
                non-integer amount, or unparseable origination date. Nothing is written.
        """
        if terms not in self.policy.allowed_terms:
            allowed = ", ".join(str(t) for t in sorted(self.policy.allowed_terms))
            raise InvalidArgumentError(f"Loan terms must be one of {allowed}, got {terms}")
        if not _is_minor_units(amount) or amount <= 0:
            raise InvalidArgumentError(f"Loan amount must be a positive integer, got {amount!r}")
        if currency_code not in self.policy.allowed_currencies:
            raise InvalidArgumentError(f"Unsupported currency code: {currency_code}")
        origination_date = _to_date(processed_at, "processed_at")

        installments = generate_installment_plan(amount, terms, origination_date)

        with self.repository.unit_of_work():
            loan = self.repository.create_loan(
                user_id=user_id,
                amount=amount,
                terms=terms,
                currency_code=currency_code,
                processed_at=origination_date,
            )
            self.repository.create_scheduled_repayments(loan, installments)

        return loan

    def repay_loan(
        self,
        loan: Loan,
        amount: int,
        currency_code: str,
        received_at: Optional[DateLike] = None,
    ) -> ReceivedRepayment:
        """
        Record a received payment and allocate it across open installments.

        The payment is spent earliest-due first. Amounts above the loan's
        outstanding balance are clamped before allocation, but the ledger
        entry keeps the amount actually received.

        Raises:
            CurrencyMismatchError: Currency differs from the loan's
            AlreadyRepaidError: Loan is already repaid
            InvalidArgumentError: Non-positive or non-integer amount, or bad date
            NothingOutstandingError: Clamped amount is not positive
        """
        received_date = self.clock.today() if received_at is None else _to_date(received_at, "received_at")

        with self.repository.unit_of_work():
            # Re-read under lock so concurrent repayments on this loan serialize
            current = self.repository.get_loan(loan.id, for_update=True)
            if current is None:
                raise LoanNotFoundError(f"Loan {loan.id} not found")

            clamped = self._validate_repayment(current, amount, currency_code)

            received = self.repository.create_received_repayment(
                loan_id=current.id,
                amount=amount,
                currency_code=currency_code,
                received_at=received_date,
            )

            open_installments = self.repository.get_scheduled_repayments(
                current.id, statuses=OPEN_REPAYMENT_STATUSES
            )
            for updated, remaining in allocate_payment(open_installments, clamped):
                self.repository.update_scheduled_repayment(updated)
                logger.debug(
                    "Installment %s now %s, outstanding %d, payment remaining %d",
                    updated.id,
                    updated.status.value,
                    updated.outstanding_amount,
                    remaining,
                )

            self.repository.update_loan(current.apply_payment(clamped))

        return received

    def _validate_repayment(self, loan: Loan, amount: int, currency_code: str) -> int:
        """Check repayment preconditions and return the clamped amount"""
        if loan.currency_code != currency_code:
            raise CurrencyMismatchError(
                f"Currency mismatch: loan currency is {loan.currency_code}, received {currency_code}"
            )
        if loan.is_repaid:
            raise AlreadyRepaidError(f"Loan {loan.id} is already repaid")
        if not _is_minor_units(amount) or amount <= 0:
            raise InvalidArgumentError(f"Repayment amount must be a positive integer, got {amount!r}")

        clamped = min(amount, loan.outstanding_amount)
        if clamped <= 0:
            raise NothingOutstandingError(f"Loan {loan.id} has no outstanding amount left")
        return clamped

    def get_loan(self, loan_id: uuid.UUID, user_id: str) -> Loan:
        """Fetch a loan on behalf of `user_id`"""
        loan = self.repository.get_loan(loan_id)
        if loan is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        if loan.user_id != user_id:
            raise LoanAccessDeniedError(f"Loan {loan_id} does not belong to user {user_id}")
        return loan

    def list_loans(self, user_id: str, limit: int = 20) -> List[Loan]:
        return self.repository.list_loans_by_user(user_id, limit=limit)

    def get_schedule(self, loan_id: uuid.UUID) -> List[ScheduledRepayment]:
        return self.repository.get_scheduled_repayments(loan_id)

    def list_received_repayments(self, loan_id: uuid.UUID) -> List[ReceivedRepayment]:
        return self.repository.list_received_repayments(loan_id)
