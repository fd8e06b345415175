"""Persistence-specific exceptions."""


class PersistenceError(Exception):
    """Base exception for all persistence errors."""


class StoreUnavailableError(PersistenceError):
    """Raised when a Firestore read or write fails.

    The message is the upstream error text, passed through unchanged.
    """
