class LedgerError(Exception):
    """Base exception for attendance ledger failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError):
    """Raised when a referenced event (or other record) does not exist."""

    status_code = 404


class InvalidInputError(LedgerError):
    """Raised when a request body or value violates input rules."""

    status_code = 400


class ConflictError(LedgerError):
    """Raised when a uniqueness constraint fails mid-transaction."""


class StorageError(LedgerError):
    """Raised when the database fails to execute or commit."""
