"""
Core Package - LeadGen Maturity Assessment
app/core/__init__.py

Core infrastructure: dependencies, exceptions, logging.
"""

from app.core.dependencies import (
    get_assessment_repository,
    get_hubspot_service,
    get_narrative_generator,
    get_scoring_service,
)
from app.core.exceptions import (
    CRMSyncError,
    DatabaseConnectionException,
    DuplicateEntityException,
    NarrativeGenerationError,
    RepositoryException,
)
from app.core.logging import configure_logging

__all__ = [
    # Dependencies
    "get_assessment_repository",
    "get_hubspot_service",
    "get_narrative_generator",
    "get_scoring_service",
    # Exceptions
    "CRMSyncError",
    "DatabaseConnectionException",
    "DuplicateEntityException",
    "NarrativeGenerationError",
    "RepositoryException",
    # Logging
    "configure_logging",
]
