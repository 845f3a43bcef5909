"""Exception hierarchy for Hoard storage."""


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class ConnectivityError(StorageError):
    """Raised when the database connection can't be opened or reused."""

    pass


class WriteError(StorageError):
    """Raised when an insert, update or delete fails."""

    pass


class DecodeError(StorageError, ValueError):
    """Raised when a stored value can't be rebuilt into the requested type."""

    pass


class BatchError(WriteError):
    """Raised when a statement inside a batch fails and the batch rolls back."""

    pass


class TransactionError(StorageError):
    """Raised when a transaction is opened while another is active."""

    pass
