"""Exceptions raised by the journal store and service."""


class JournalError(Exception):
    """Base class for journal errors shown to the user."""


class AuthenticationError(JournalError):
    """No user profile is configured."""


class NotFoundError(JournalError):
    """The requested record does not exist."""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class PermissionDeniedError(JournalError):
    """The record belongs to another user."""


class ValidationError(JournalError):
    """Input is missing or inconsistent."""


class DuplicateNameError(JournalError):
    """A record with the same name already exists for this user."""


class LimitReachedError(JournalError):
    """The trial tier does not allow creating another record."""
