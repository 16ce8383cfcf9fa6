"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationFailure(DomainException):
    """Request rejected before any computation or write"""

    pass


class InvalidAmount(ValidationFailure):
    """Amount is not positive or cannot be split into positive installments"""

    pass


class InvalidCount(ValidationFailure):
    """Installment count below the minimum for a plan"""

    pass


class InvalidDueDay(ValidationFailure):
    """Fixed due day outside 1-28"""

    pass


class InvalidSplit(ValidationFailure):
    """Rateio entries do not add up to the transaction total"""

    pass


class NothingToRenegotiate(ValidationFailure):
    """None of the referenced installments is currently open"""

    pass


class InvalidSchedule(ValidationFailure):
    """Appointment ends before it starts"""

    pass


class InvalidStatus(ValidationFailure):
    """Status value outside the allowed set"""

    pass


class EntityNotFound(DomainException):
    """Referenced record does not exist for the acting clinic"""

    pass


class ConcurrentModification(DomainException):
    """Conditional update matched no rows; caller must reload and retry"""

    pass


class PersistenceFailure(DomainException):
    """Ledger store rejected or failed a write"""

    pass
