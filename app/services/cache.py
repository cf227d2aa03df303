"""
Results Cache - LeadGen Maturity Assessment
app/services/cache.py

Redis read-through cache for the assessment results view, plus a lazily
created process-wide instance. When Redis cannot be reached, get_cache()
returns None and callers go straight to Snowflake.
"""
from typing import Optional
from uuid import UUID

import redis

from app.config import settings
from app.models.assessment import AssessmentResultsResponse

TTL_RESULTS = settings.CACHE_TTL_RESULTS
KEY_PREFIX = "assessment"


def results_key(assessment_id: UUID | str) -> str:
    return f"{KEY_PREFIX}:{assessment_id}"


class ResultsCache:
    """Stores AssessmentResultsResponse views as JSON with a TTL."""

    def __init__(self, url: Optional[str] = None, ttl_seconds: int = TTL_RESULTS):
        self.ttl_seconds = ttl_seconds
        self.client = redis.from_url(
            url or settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=5,
        )

    def ping(self) -> bool:
        return bool(self.client.ping())

    def get_results(self, assessment_id: UUID | str) -> Optional[AssessmentResultsResponse]:
        data = self.client.get(results_key(assessment_id))
        if not data:
            return None
        return AssessmentResultsResponse.model_validate_json(data)

    def store_results(self, view: AssessmentResultsResponse) -> None:
        self.client.setex(results_key(view.assessment_id), self.ttl_seconds, view.model_dump_json())

    def invalidate(self, assessment_id: UUID | str) -> None:
        """Drop the cached view; the next read goes to storage."""
        self.client.delete(results_key(assessment_id))


_cache: Optional[ResultsCache] = None


def get_cache() -> Optional[ResultsCache]:
    """Shared ResultsCache, or None while Redis is unreachable."""
    global _cache
    if _cache is None:
        try:
            _cache = ResultsCache()
            _cache.ping()
        except (redis.RedisError, ConnectionError):
            _cache = None
    return _cache


def reset_cache() -> None:
    global _cache
    _cache = None
