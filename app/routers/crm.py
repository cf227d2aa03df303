"""
CRM Sync Router
app/routers/crm.py

Endpoints:
  POST /api/v1/crm/sync - Push a scored assessment to HubSpot
                          (contact upsert, assessment note, deal)
"""

from typing import Optional
import logging

from fastapi import APIRouter, Depends, status

from app.core.dependencies import get_assessment_repository, get_hubspot_service
from app.core.exceptions import CRMSyncError
from app.models.assessment import CRMSyncRequest, CRMSyncResponse, ErrorResponse
from app.repositories.assessment_repository import AssessmentRepository
from app.routers.assessments import raise_assessment_not_found, raise_error
from app.services.hubspot import HubSpotService
from app.services.report_generator import generate_crm_note

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/crm", tags=["CRM"])


@router.post(
    "/sync",
    response_model=CRMSyncResponse,
    responses={
        400: {"model": ErrorResponse, "description": "CRM integration not configured"},
        404: {"model": ErrorResponse, "description": "Assessment not found"},
        409: {"model": ErrorResponse, "description": "Assessment has not been scored"},
        502: {"model": ErrorResponse, "description": "CRM API failure"},
    },
    summary="Sync assessment to CRM",
    description="Creates or updates the HubSpot contact, attaches an assessment note and opens a deal.",
)
async def sync_assessment(
    payload: CRMSyncRequest,
    assessment_repo: AssessmentRepository = Depends(get_assessment_repository),
    hubspot: Optional[HubSpotService] = Depends(get_hubspot_service),
) -> CRMSyncResponse:
    if hubspot is None:
        raise_error(status.HTTP_400_BAD_REQUEST, "CRM_NOT_CONFIGURED", "CRM integration not configured")

    record = assessment_repo.get_by_id(payload.assessment_id)
    if not record:
        raise_assessment_not_found()

    scores = record.get("scores")
    if not scores:
        raise_error(status.HTTP_409_CONFLICT, "ASSESSMENT_NOT_SCORED", "Assessment has not been scored yet")

    try:
        ids = await hubspot.sync_assessment(
            email=record["email"],
            company=record.get("company"),
            industry=record.get("industry"),
            company_size=record.get("company_size"),
            overall_score=scores["overall"],
            note_body=generate_crm_note(record),
        )
    except CRMSyncError as e:
        logger.error(
            "crm_sync_failed",
            extra={"assessment_id": str(payload.assessment_id), "error": e.message, "status_code": e.status_code},
        )
        raise_error(status.HTTP_502_BAD_GATEWAY, "CRM_SYNC_FAILED", e.message)

    assessment_repo.mark_crm_synced(payload.assessment_id, ids["contact_id"])

    return CRMSyncResponse(success=True, **ids)
