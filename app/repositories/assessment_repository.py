"""
Assessment Repository - LeadGen Maturity Assessment
app/repositories/assessment_repository.py

Data access layer for questionnaire submissions and their scored results.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from app.models.recommendation import Recommendation
from app.repositories.base import BaseRepository
from app.scoring.integration_service import AssessmentScores


CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS LEADGEN_ASSESSMENTS (
        ID VARCHAR(36) PRIMARY KEY,
        EMAIL VARCHAR(255) NOT NULL,
        COMPANY VARCHAR(255) NOT NULL,
        INDUSTRY VARCHAR(100),
        COMPANY_SIZE VARCHAR(50),
        RESPONSES VARIANT NOT NULL,
        SCORES VARIANT,
        CONFIDENCE VARCHAR(10),
        GAPS VARIANT,
        SUMMARY VARCHAR,
        GROWTH_LEVERS VARIANT,
        RISK_FLAGS VARIANT,
        PREREQUISITES VARIANT,
        RECOMMENDATION_SOURCE VARCHAR(20),
        CRM_CONTACT_ID VARCHAR(50),
        CREATED_AT TIMESTAMP_TZ NOT NULL,
        SCORED_AT TIMESTAMP_TZ,
        SYNCED_AT TIMESTAMP_TZ
    )
"""

_COLUMNS = """
    ID, EMAIL, COMPANY, INDUSTRY, COMPANY_SIZE, RESPONSES, SCORES, CONFIDENCE,
    GAPS, SUMMARY, GROWTH_LEVERS, RISK_FLAGS, PREREQUISITES,
    RECOMMENDATION_SOURCE, CRM_CONTACT_ID, CREATED_AT, SCORED_AT, SYNCED_AT
"""


class AssessmentRepository(BaseRepository):
    """Repository for assessment submissions and results."""

    TABLE_NAME = "LEADGEN_ASSESSMENTS"

    def ensure_table(self) -> None:
        """Create the assessments table if it does not exist."""
        self.execute(CREATE_TABLE_SQL)

    def create(
        self,
        email: str,
        company: str,
        industry: Optional[str],
        company_size: Optional[str],
        responses: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Store a new submission.

        Args:
            email: Respondent's company email
            company: Company name
            industry: Industry (optional)
            company_size: Company size band (optional)
            responses: Raw response document (module -> lever -> answer)

        Returns:
            Created assessment dict
        """
        assessment_id = uuid4()
        now = datetime.now(timezone.utc)

        # VARIANT values can't be bound in VALUES; INSERT ... SELECT with PARSE_JSON
        sql = f"""
            INSERT INTO {self.TABLE_NAME} (ID, EMAIL, COMPANY, INDUSTRY, COMPANY_SIZE,
                                           RESPONSES, CREATED_AT)
            SELECT %s, %s, %s, %s, %s, PARSE_JSON(%s), %s
        """
        params = (
            str(assessment_id),
            email,
            company,
            industry,
            company_size,
            self.to_variant(responses),
            now,
        )

        self.execute(sql, params)

        return self.get_by_id(assessment_id)

    def get_by_id(self, assessment_id: UUID) -> Optional[Dict[str, Any]]:
        """
        Retrieve an assessment by ID.

        Returns:
            Assessment dict or None if not found
        """
        sql = f"SELECT {_COLUMNS} FROM {self.TABLE_NAME} WHERE ID = %s"
        row = self.fetch_one(sql, (str(assessment_id),))

        if not row:
            return None

        return self._row_to_dict(row)

    def save_results(
        self,
        assessment_id: UUID,
        scores: AssessmentScores,
        recommendation: Recommendation,
    ) -> Optional[Dict[str, Any]]:
        """
        Store engine output and the recommendation for an assessment.

        Returns:
            Updated assessment dict or None if not found
        """
        sql = f"""
            UPDATE {self.TABLE_NAME}
            SET SCORES = PARSE_JSON(%s),
                CONFIDENCE = %s,
                GAPS = PARSE_JSON(%s),
                SUMMARY = %s,
                GROWTH_LEVERS = PARSE_JSON(%s),
                RISK_FLAGS = PARSE_JSON(%s),
                PREREQUISITES = PARSE_JSON(%s),
                RECOMMENDATION_SOURCE = %s,
                SCORED_AT = %s
            WHERE ID = %s
        """
        params = (
            self.to_variant(scores.scores_dict()),
            scores.confidence.value,
            self.to_variant([gap.to_dict() for gap in scores.gaps]),
            recommendation.summary,
            self.to_variant([lever.model_dump(mode="json") for lever in recommendation.levers]),
            self.to_variant(list(recommendation.risks)),
            self.to_variant(list(scores.prerequisites)),
            recommendation.source.value,
            datetime.now(timezone.utc),
            str(assessment_id),
        )
        self.execute(sql, params)
        return self.get_by_id(assessment_id)

    def mark_crm_synced(self, assessment_id: UUID, contact_id: str) -> None:
        """Record the CRM contact the assessment was pushed to."""
        sql = f"""
            UPDATE {self.TABLE_NAME}
            SET CRM_CONTACT_ID = %s, SYNCED_AT = %s
            WHERE ID = %s
        """
        self.execute(sql, (contact_id, datetime.now(timezone.utc), str(assessment_id)))

    def _row_to_dict(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Convert Snowflake row to assessment dict."""
        return {
            "id": UUID(row["ID"]),
            "email": row["EMAIL"],
            "company": row["COMPANY"],
            "industry": row["INDUSTRY"],
            "company_size": row["COMPANY_SIZE"],
            "responses": self.from_variant(row["RESPONSES"]) or {},
            "scores": self.from_variant(row["SCORES"]),
            "confidence": row["CONFIDENCE"],
            "gaps": self.from_variant(row["GAPS"]) or [],
            "summary": row["SUMMARY"],
            "growth_levers": self.from_variant(row["GROWTH_LEVERS"]) or [],
            "risk_flags": self.from_variant(row["RISK_FLAGS"]) or [],
            "prerequisites": self.from_variant(row["PREREQUISITES"]) or [],
            "recommendation_source": row["RECOMMENDATION_SOURCE"],
            "crm_contact_id": row["CRM_CONTACT_ID"],
            "created_at": self.utc(row["CREATED_AT"]),
            "scored_at": self.utc(row["SCORED_AT"]),
            "synced_at": self.utc(row["SYNCED_AT"]),
        }
