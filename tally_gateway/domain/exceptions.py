"""Domain-specific exceptions and warnings"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Obligation or payment data is malformed or out of range"""

    pass


class SubscriptionNotFoundError(DomainException):
    """Subscription does not exist or belongs to another user"""

    pass


class UnknownCadenceWarning(UserWarning):
    """Recurrence not recognised; the monthly multiplier was used instead.

    Emitted through ``warnings.warn``, never raised.
    """

    pass
