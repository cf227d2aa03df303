"""
Assessment Repository Tests - Snowflake replaced by MagicMock connections
"""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from snowflake.connector.errors import DatabaseError, OperationalError, ProgrammingError

from app.core.exceptions import (
    DatabaseConnectionException,
    DuplicateEntityException,
    RepositoryException,
)
from app.repositories.assessment_repository import AssessmentRepository
from app.scoring.integration_service import AssessmentScoringService
from app.scoring.responses import ResponseDocument
from app.services.narrative_generator import build_fallback_recommendation
from app.services.prompts import build_narrative_input


def _row(assessment_id, **overrides):
    row = {
        "ID": str(assessment_id),
        "EMAIL": "jane.doe@acmeanalytics.io",
        "COMPANY": "Acme Analytics",
        "INDUSTRY": "SaaS",
        "COMPANY_SIZE": "51-200",
        "RESPONSES": json.dumps({"infra": {"crm": {"present": True, "applicable": True}}}),
        "SCORES": None,
        "CONFIDENCE": None,
        "GAPS": None,
        "SUMMARY": None,
        "GROWTH_LEVERS": None,
        "RISK_FLAGS": None,
        "PREREQUISITES": None,
        "RECOMMENDATION_SOURCE": None,
        "CRM_CONTACT_ID": None,
        "CREATED_AT": datetime(2026, 1, 28, 12, 0),
        "SCORED_AT": None,
        "SYNCED_AT": None,
    }
    row.update(overrides)
    return row


@pytest.fixture
def cursor():
    cur = MagicMock()
    conn = MagicMock()
    conn.cursor.return_value = cur
    cur.connection = conn
    with patch("app.repositories.base.get_snowflake_connection", return_value=conn):
        yield cur


class TestReads:

    def test_get_by_id_converts_row(self, cursor):
        assessment_id = uuid4()
        cursor.fetchone.return_value = _row(assessment_id)

        record = AssessmentRepository().get_by_id(assessment_id)

        assert record["id"] == assessment_id
        assert record["responses"]["infra"]["crm"]["present"] is True
        assert record["scores"] is None
        assert record["gaps"] == []
        assert record["created_at"].tzinfo == timezone.utc
        assert cursor.execute.call_args.args[1] == (str(assessment_id),)

    def test_get_by_id_missing(self, cursor):
        cursor.fetchone.return_value = None
        assert AssessmentRepository().get_by_id(uuid4()) is None

    def test_cursor_and_connection_closed(self, cursor):
        cursor.fetchone.return_value = None
        AssessmentRepository().get_by_id(uuid4())
        cursor.close.assert_called_once()
        cursor.connection.close.assert_called_once()


class TestWrites:

    def test_create_binds_variant_json(self, cursor):
        cursor.fetchone.side_effect = lambda: _row(cursor.execute.call_args_list[0].args[1][0])
        responses = {"infra": {"crm": {"present": True, "applicable": True}}}

        record = AssessmentRepository().create(
            "jane.doe@acmeanalytics.io", "Acme Analytics", "SaaS", "51-200", responses
        )

        sql, params = cursor.execute.call_args_list[0].args
        assert "PARSE_JSON(%s)" in sql
        assert json.loads(params[5]) == responses
        assert str(record["id"]) == params[0]
        cursor.connection.commit.assert_called()

    def test_save_results_stores_engine_output(self, cursor, scoring_config, all_absent_responses):
        assessment_id = uuid4()
        cursor.fetchone.return_value = _row(assessment_id)
        service = AssessmentScoringService(scoring_config)
        document = ResponseDocument.from_dict(all_absent_responses)
        scores = service.score(document)
        recommendation = build_fallback_recommendation(
            build_narrative_input(scores, document, service.fallback_levers(scores))
        )

        AssessmentRepository().save_results(assessment_id, scores, recommendation)

        params = cursor.execute.call_args_list[0].args[1]
        assert json.loads(params[0])["outcome"] == "Foundation"
        assert params[1] == "high"
        assert len(json.loads(params[2])) == 28
        assert json.loads(params[4])[0]["name"] == "Email Deliverability"
        assert params[7] == "fallback"
        assert params[-1] == str(assessment_id)

    def test_mark_crm_synced(self, cursor):
        assessment_id = uuid4()
        AssessmentRepository().mark_crm_synced(assessment_id, "101")
        params = cursor.execute.call_args.args[1]
        assert params[0] == "101"
        assert params[2] == str(assessment_id)


class TestErrorMapping:

    def test_connect_failure(self):
        with patch(
            "app.repositories.base.get_snowflake_connection",
            side_effect=OperationalError(msg="could not connect"),
        ):
            with pytest.raises(DatabaseConnectionException):
                AssessmentRepository().get_by_id(uuid4())

    def test_duplicate(self, cursor):
        cursor.execute.side_effect = ProgrammingError(msg="Duplicate key value violates unique constraint")
        with pytest.raises(DuplicateEntityException):
            AssessmentRepository().ensure_table()

    def test_query_error(self, cursor):
        cursor.execute.side_effect = ProgrammingError(msg="SQL compilation error")
        with pytest.raises(RepositoryException, match="Query error"):
            AssessmentRepository().get_by_id(uuid4())

    def test_database_error(self, cursor):
        cursor.execute.side_effect = DatabaseError(msg="warehouse suspended")
        with pytest.raises(RepositoryException, match="Database error"):
            AssessmentRepository().get_by_id(uuid4())
