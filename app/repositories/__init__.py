"""
Repositories Package - LeadGen Maturity Assessment
app/repositories/__init__.py

Data access layer for Snowflake database operations.
"""

from app.repositories.base import BaseRepository
from app.repositories.assessment_repository import AssessmentRepository

__all__ = [
    "BaseRepository",
    "AssessmentRepository",
]
