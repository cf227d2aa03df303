"""
Results Cache Tests - LeadGen Maturity Assessment
tests/test_results_cache.py

Redis is replaced by MagicMock clients; the API tests reuse the in-memory
repository from conftest.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
import redis

from app.models.assessment import AssessmentResultsResponse
from app.services.cache import TTL_RESULTS, ResultsCache, get_cache, reset_cache, results_key


@pytest.fixture
def mock_client():
    with patch("app.services.cache.redis.from_url") as mock_from_url:
        client = MagicMock()
        mock_from_url.return_value = client
        yield client


@pytest.fixture
def view():
    return AssessmentResultsResponse(
        assessment_id=uuid4(),
        company="Acme Analytics",
        email="jane.doe@acmeanalytics.io",
        created_at=datetime(2026, 1, 28, tzinfo=timezone.utc),
    )


class TestResultsCache:

    def test_key_format(self):
        assessment_id = uuid4()
        assert results_key(assessment_id) == f"assessment:{assessment_id}"

    def test_store_uses_ttl(self, mock_client, view):
        ResultsCache(ttl_seconds=45).store_results(view)
        mock_client.setex.assert_called_once_with(
            f"assessment:{view.assessment_id}", 45, view.model_dump_json()
        )

    def test_get_hit(self, mock_client, view):
        mock_client.get.return_value = view.model_dump_json()
        cached = ResultsCache().get_results(view.assessment_id)
        assert cached == view

    def test_get_miss(self, mock_client):
        mock_client.get.return_value = None
        assert ResultsCache().get_results(uuid4()) is None

    def test_invalidate(self, mock_client):
        assessment_id = uuid4()
        ResultsCache().invalidate(assessment_id)
        mock_client.delete.assert_called_once_with(f"assessment:{assessment_id}")

    def test_default_ttl(self):
        assert TTL_RESULTS == 120


class TestCacheSingleton:

    def teardown_method(self):
        reset_cache()

    def test_returns_instance(self):
        with patch("app.services.cache.ResultsCache") as cache_class:
            instance = MagicMock()
            cache_class.return_value = instance
            reset_cache()
            assert get_cache() is instance
            assert get_cache() is instance
            assert cache_class.call_count == 1

    def test_unreachable_redis_returns_none(self):
        with patch("app.services.cache.ResultsCache") as cache_class:
            instance = MagicMock()
            instance.ping.side_effect = redis.ConnectionError("Redis unavailable")
            cache_class.return_value = instance
            reset_cache()
            assert get_cache() is None


class TestInvalidateAfterScoring:

    def test_invalidates_by_id(self):
        from app.routers.assessments import invalidate_assessment_cache

        with patch("app.routers.assessments.get_cache") as mock_get_cache:
            cache = MagicMock()
            mock_get_cache.return_value = cache
            assessment_id = uuid4()
            invalidate_assessment_cache(assessment_id)
            cache.invalidate.assert_called_once_with(assessment_id)

    def test_redis_error_is_logged_not_raised(self):
        from app.routers.assessments import invalidate_assessment_cache

        with patch("app.routers.assessments.get_cache") as mock_get_cache:
            cache = MagicMock()
            cache.invalidate.side_effect = redis.ConnectionError("Redis error")
            mock_get_cache.return_value = cache
            invalidate_assessment_cache(uuid4())


class TestResultsReadThrough:
    """GET /api/v1/assessments/{id} with a cache in front of storage."""

    def _create(self, client, submission):
        return client.post("/api/v1/assessments", json=submission).json()["assessment_id"]

    def test_hit_skips_repository(self, client, company_submission, monkeypatch):
        assessment_id = self._create(client, company_submission)
        first = client.get(f"/api/v1/assessments/{assessment_id}").json()

        cache = MagicMock()
        cache.get_results.return_value = AssessmentResultsResponse(**{**first, "company": "From Cache"})
        monkeypatch.setattr("app.routers.assessments.get_cache", lambda: cache)

        response = client.get(f"/api/v1/assessments/{assessment_id}")
        assert response.status_code == 200
        assert response.json()["company"] == "From Cache"
        cache.store_results.assert_not_called()

    def test_miss_populates_cache(self, client, company_submission, monkeypatch):
        assessment_id = self._create(client, company_submission)

        cache = MagicMock()
        cache.get_results.return_value = None
        monkeypatch.setattr("app.routers.assessments.get_cache", lambda: cache)

        client.get(f"/api/v1/assessments/{assessment_id}")
        stored = cache.store_results.call_args.args[0]
        assert str(stored.assessment_id) == assessment_id

    def test_redis_failure_falls_back_to_repository(self, client, company_submission, monkeypatch):
        assessment_id = self._create(client, company_submission)

        cache = MagicMock()
        cache.get_results.side_effect = redis.ConnectionError("down")
        cache.store_results.side_effect = redis.ConnectionError("down")
        monkeypatch.setattr("app.routers.assessments.get_cache", lambda: cache)

        response = client.get(f"/api/v1/assessments/{assessment_id}")
        assert response.status_code == 200
        assert response.json()["company"] == "Acme Analytics"

    def test_scoring_invalidates(self, client, company_submission, monkeypatch):
        assessment_id = self._create(client, company_submission)

        cache = MagicMock()
        monkeypatch.setattr("app.routers.assessments.get_cache", lambda: cache)

        client.post(f"/api/v1/assessments/{assessment_id}/score")
        assert str(cache.invalidate.call_args.args[0]) == assessment_id
