"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidArgumentError(DomainException):
    """Malformed input: non-positive amount, disallowed terms or currency, bad date"""

    pass


class CurrencyMismatchError(DomainException):
    """Repayment currency differs from the loan currency"""

    pass


class AlreadyRepaidError(DomainException):
    """Repayment attempted against a loan that is already repaid"""

    pass


class NothingOutstandingError(DomainException):
    """Clamped repayment amount is not positive"""

    pass


class LoanNotFoundError(DomainException):
    """No live loan exists with the given id"""

    pass


class LoanAccessDeniedError(DomainException):
    """Loan belongs to another user"""

    pass
