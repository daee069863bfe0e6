"""Exception hierarchy for the fitness tracker."""


class FitnessTrackerError(Exception):
    """Base class for application errors."""


class NotAuthenticatedError(FitnessTrackerError):
    """Raised when a per-user operation runs without an identity."""

    def __init__(self, message: str = "Not signed in") -> None:
        super().__init__(message)


class StoreUnavailableError(FitnessTrackerError):
    """Raised by store adapters for transient network or backend failures."""


class DocumentNotFoundError(FitnessTrackerError):
    """Raised when an update targets a document that does not exist."""


class TransactionConflictError(StoreUnavailableError):
    """Raised when a transaction keeps conflicting after all retries."""


class TransactionUsageError(FitnessTrackerError):
    """Raised when a transaction body reads after it has started writing."""


class PartialReconciliationError(FitnessTrackerError):
    """Raised when a plan entry was removed but its log entry was not written."""
