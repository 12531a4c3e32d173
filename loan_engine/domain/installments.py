"""Installment schedule generation and repayment allocation"""

from datetime import date
from typing import Iterable, Iterator, List, Tuple
from loan_engine.domain.models import Installment, ScheduledRepayment
from loan_engine.utils.date_utils import add_months


def generate_installment_plan(amount: int, terms: int, processed_at: date) -> List[Installment]:
    """
    Split a loan principal into monthly installments.

    Requirements:
    - `terms` installments, one per calendar month after origination
    - Installment i (1-based) is due on processed_at + i months
    - Last installment absorbs the integer-division remainder

    Args:
        amount: Loan principal in minor units
        terms: Number of installments
        processed_at: Origination date

    Returns:
        List of Installment objects ordered by due date

    Example:
        1000 over 3 terms from 2024-01-15 →
        [333 due 2024-02-15, 333 due 2024-03-15, 334 due 2024-04-15]
    """
    if amount <= 0 or terms <= 0:
        return []

    base_amount = amount // terms
    remainder = amount % terms

    installments = []
    for i in range(1, terms + 1):
        # Computed from the origination date so month-end clamping never accumulates
        due_date = add_months(processed_at, i)
        installment_amount = base_amount + (remainder if i == terms else 0)
        installments.append(Installment(due_date=due_date, amount=installment_amount))

    return installments


def allocate_payment(
    installments: Iterable[ScheduledRepayment],
    amount: int,
) -> Iterator[Tuple[ScheduledRepayment, int]]:
    """
    Walk installments earliest-due first, spending `amount` on each in turn.

    Yields (updated installment, remaining payment) for every installment
    touched. Installments are expected to be due or partial; they are
    re-sorted by due date so the earliest is always satisfied first.
    Stops as soon as the payment is exhausted.
    """
    remaining = amount
    for installment in sorted(installments, key=lambda inst: inst.due_date):
        if remaining <= 0:
            break

        updated, consumed = installment.apply_payment(remaining)
        remaining -= consumed
        yield updated, remaining
