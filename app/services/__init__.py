"""
Services module for the LeadGen Maturity Assessment.
"""

from app.services.cache import ResultsCache, get_cache
from app.services.snowflake import get_snowflake_connection

__all__ = [
    "ResultsCache",
    "get_cache",
    "get_snowflake_connection",
]
