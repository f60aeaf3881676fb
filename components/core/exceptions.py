"""Exception hierarchy for the loan tracker."""


class LoanTrackerError(Exception):
    """Base exception for all loan tracker errors."""


class NotFoundError(LoanTrackerError):
    """Raised when a referenced record does not exist."""


class StorageUnavailableError(LoanTrackerError):
    """Raised when the database cannot be reached or fails a statement."""


class ValidationError(LoanTrackerError):
    """Raised when a record fails validation at the store boundary."""


class PaymentExceedsBalanceError(ValidationError):
    """Raised when a payment is larger than the loan's remaining balance."""
