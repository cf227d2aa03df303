"""
Custom Exceptions - LeadGen Maturity Assessment
app/core/exceptions.py

Exception classes for storage and external collaborators. The scoring
engine itself never raises for a well-formed response document.
"""


class RepositoryException(Exception):
    """Base exception for repository operations."""

    pass


class DuplicateEntityException(RepositoryException):
    """Duplicate entity violation."""

    def __init__(self, message: str = "Entity already exists"):
        self.message = message
        super().__init__(message)


class DatabaseConnectionException(RepositoryException):
    """Database connection failure."""

    def __init__(self, message: str = "Database connection failed"):
        self.message = message
        super().__init__(message)


class NarrativeGenerationError(Exception):
    """Narrative generator unavailable or returned unusable output."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class CRMSyncError(Exception):
    """CRM API call failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)
