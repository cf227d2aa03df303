"""
Assessment Router - LeadGen Maturity Assessment
app/routers/assessments.py

Stores questionnaire submissions in Snowflake, scores them, and serves the
results view through the Redis cache.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID
import logging

import redis
from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from app.config import settings
from app.core.dependencies import (
    get_assessment_repository,
    get_narrative_generator,
    get_scoring_service,
)
from app.core.exceptions import RepositoryException
from app.models.assessment import (
    AssessmentCreated,
    AssessmentResultsResponse,
    AssessmentSubmission,
    ErrorResponse,
    ModuleScores,
    ScoreResultResponse,
)
from app.repositories.assessment_repository import AssessmentRepository
from app.routers.scoring import to_breakdown
from app.scoring.integration_service import AssessmentScoringService
from app.scoring.responses import ResponseDocument
from app.services.cache import get_cache
from app.services.narrative_generator import NarrativeGenerator, recommend
from app.services.prompts import build_narrative_input
from app.services.report_generator import generate_assessment_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/assessments", tags=["Assessments"])




#  Custom Exception Handlers

FIELD_MESSAGES = {
    "email": {
        "missing": "Email is required",
        "string_too_long": "Email must not exceed 255 characters",
        "string_type": "Email must be a string",
    },
    "company": {
        "missing": "Company name is required",
        "string_too_short": "Company name is required",
        "string_too_long": "Company name must not exceed 255 characters",
    },
    "responses": {
        "missing": "Responses are required",
        "dict_type": "Responses must be an object of module -> lever -> answer",
    },
    "assessment_id": {
        "uuid_parsing": "Assessment ID must be a valid UUID format",
        "uuid_type": "Assessment ID must be a valid UUID",
    },
}

DEFAULT_MESSAGES = {
    "missing": "Field '{field}' is required",
    "string_too_short": "Field '{field}' is too short",
    "string_too_long": "Field '{field}' is too long",
    "uuid_parsing": "Field '{field}' must be a valid UUID",
    "uuid_type": "Field '{field}' must be a valid UUID",
    "string_type": "Field '{field}' must be a string",
    "bool_type": "Field '{field}' must be true, false or null",
    "bool_parsing": "Field '{field}' must be true, false or null",
    "dict_type": "Field '{field}' must be an object",
    "enum": "Field '{field}' has an invalid value",
    "json_invalid": "Malformed JSON request body",
    "extra_forbidden": "Unknown field '{field}' is not allowed",
}


def get_validation_message(field: str, error_type: str, msg: str = "") -> str:
    # Messages raised by our own field validators are already user-facing
    if error_type == "value_error" and msg:
        return msg.removeprefix("Value error, ")

    root = field.split(".", 1)[0]
    if field in FIELD_MESSAGES or root in FIELD_MESSAGES:
        field_msgs = FIELD_MESSAGES.get(field) or FIELD_MESSAGES[root]
        for key in field_msgs:
            if key in error_type:
                return field_msgs[key]

    for key, template in DEFAULT_MESSAGES.items():
        if key in error_type:
            return template.format(field=field)

    return f"Invalid value for field '{field}'"


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()

    if not errors:
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error_code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": None,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    err = errors[0]
    error_type = err.get("type", "")
    loc = err.get("loc", [])

    if "json_invalid" in error_type:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error_code": "INVALID_REQUEST",
                "message": "Malformed JSON request body",
                "details": None,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    field = ".".join(str(l) for l in loc if l not in ("body", "path"))
    message = get_validation_message(field, error_type, err.get("msg", ""))

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "VALIDATION_ERROR",
            "message": message,
            "details": {"field": field, "type": error_type} if field else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


async def repository_exception_handler(request: Request, exc: RepositoryException):
    logger.error(
        "storage_unavailable",
        extra={"path": request.url.path, "error": str(exc)},
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error_code": "STORAGE_UNAVAILABLE",
            "message": "Assessment storage is temporarily unavailable",
            "details": None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


#  Exception Helpers

def raise_error(status_code: int, error_code: str, message: str):
    raise HTTPException(
        status_code=status_code,
        detail=ErrorResponse(
            error_code=error_code,
            message=message,
            timestamp=datetime.now(timezone.utc)
        ).model_dump(mode="json")
    )


def raise_assessment_not_found():
    raise_error(status.HTTP_404_NOT_FOUND, "ASSESSMENT_NOT_FOUND", "Assessment not found")


def invalidate_assessment_cache(assessment_id: UUID):
    """Invalidate assessment cache entries in Redis."""
    cache = get_cache()
    if cache:
        try:
            cache.invalidate(assessment_id)
        except redis.RedisError as e:
            logger.warning("cache_invalidate_failed", extra={"assessment_id": str(assessment_id), "error": str(e)})


def results_view(record: Dict[str, Any]) -> AssessmentResultsResponse:
    """Stored record → results view."""
    scores: Optional[ModuleScores] = ModuleScores(**record["scores"]) if record.get("scores") else None
    return AssessmentResultsResponse(
        assessment_id=record["id"],
        company=record["company"],
        industry=record.get("industry"),
        company_size=record.get("company_size"),
        email=record["email"],
        scores=scores,
        confidence=record.get("confidence"),
        summary=record.get("summary"),
        growth_levers=record.get("growth_levers") or [],
        risk_flags=record.get("risk_flags") or [],
        prerequisites=record.get("prerequisites") or [],
        created_at=record["created_at"],
        scored_at=record.get("scored_at"),
    )


_ERROR_EXAMPLES = {
    404: {
        "model": ErrorResponse,
        "description": "Assessment not found",
        "content": {
            "application/json": {
                "example": {
                    "error_code": "ASSESSMENT_NOT_FOUND",
                    "message": "Assessment not found",
                    "details": None,
                    "timestamp": "2026-01-28T12:00:00Z"
                }
            }
        }
    },
    503: {
        "model": ErrorResponse,
        "description": "Storage unavailable",
        "content": {
            "application/json": {
                "example": {
                    "error_code": "STORAGE_UNAVAILABLE",
                    "message": "Assessment storage is temporarily unavailable",
                    "details": None,
                    "timestamp": "2026-01-28T12:00:00Z"
                }
            }
        }
    },
}


#  Routes

@router.post(
    "",
    response_model=AssessmentCreated,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {
            "model": ErrorResponse,
            "description": "Invalid request",
            "content": {
                "application/json": {
                    "example": {
                        "error_code": "INVALID_REQUEST",
                        "message": "Malformed JSON request body",
                        "details": None,
                        "timestamp": "2026-01-28T12:00:00Z"
                    }
                }
            }
        },
        422: {
            "model": ErrorResponse,
            "description": "Validation error",
            "content": {
                "application/json": {
                    "example": {
                        "error_code": "VALIDATION_ERROR",
                        "message": "Please use your company email address instead of a personal email provider",
                        "details": {"field": "email", "type": "value_error"},
                        "timestamp": "2026-01-28T12:00:00Z"
                    }
                }
            }
        },
        503: _ERROR_EXAMPLES[503],
    },
    summary="Submit an assessment",
    description="Validates and stores a completed questionnaire. Requires a company email address.",
)
async def create_assessment(
    payload: AssessmentSubmission,
    assessment_repo: AssessmentRepository = Depends(get_assessment_repository),
) -> AssessmentCreated:
    record = assessment_repo.create(
        email=payload.email,
        company=payload.company,
        industry=payload.industry,
        company_size=payload.company_size,
        responses=payload.responses_dict(),
    )

    logger.info("assessment_created", extra={"assessment_id": str(record["id"])})
    return AssessmentCreated(assessment_id=record["id"], created_at=record["created_at"])


@router.post(
    "/{assessment_id}/score",
    response_model=ScoreResultResponse,
    responses={404: _ERROR_EXAMPLES[404], 503: _ERROR_EXAMPLES[503]},
    summary="Score an assessment",
    description=(
        "Runs the scoring engine over the stored responses, generates the narrative "
        "recommendation (deterministic fallback when the generator is unavailable) "
        "and stores the results."
    ),
)
async def score_assessment(
    assessment_id: UUID,
    assessment_repo: AssessmentRepository = Depends(get_assessment_repository),
    service: AssessmentScoringService = Depends(get_scoring_service),
    generator: Optional[NarrativeGenerator] = Depends(get_narrative_generator),
) -> ScoreResultResponse:
    record = assessment_repo.get_by_id(assessment_id)
    if not record:
        raise_assessment_not_found()

    document = ResponseDocument.from_dict(record["responses"])
    scores = service.score(document)

    narrative_input = build_narrative_input(
        scores,
        document,
        service.fallback_levers(scores),
        company=record.get("company"),
        industry=record.get("industry"),
        top_n=settings.NARRATIVE_TOP_GAPS,
    )
    recommendation = await recommend(generator, narrative_input)

    assessment_repo.save_results(assessment_id, scores, recommendation)
    invalidate_assessment_cache(assessment_id)

    breakdown = to_breakdown(scores)
    return ScoreResultResponse(
        **breakdown.model_dump(),
        assessment_id=assessment_id,
        recommendation=recommendation,
    )


@router.get(
    "/{assessment_id}",
    response_model=AssessmentResultsResponse,
    responses={404: _ERROR_EXAMPLES[404], 503: _ERROR_EXAMPLES[503]},
    summary="Get assessment results",
    description="Returns the stored submission and, once scored, its results.",
)
async def get_assessment(
    assessment_id: UUID,
    assessment_repo: AssessmentRepository = Depends(get_assessment_repository),
) -> AssessmentResultsResponse:
    cache = get_cache()

    # Try cache first (with graceful failure)
    if cache:
        try:
            cached = cache.get_results(assessment_id)
            if cached:
                return cached
        except redis.RedisError as e:
            logger.warning("cache_read_failed", extra={"assessment_id": str(assessment_id), "error": str(e)})

    record = assessment_repo.get_by_id(assessment_id)
    if not record:
        raise_assessment_not_found()

    view = results_view(record)

    if cache:
        try:
            cache.store_results(view)
        except redis.RedisError as e:
            logger.warning("cache_write_failed", extra={"assessment_id": str(assessment_id), "error": str(e)})

    return view


@router.get(
    "/{assessment_id}/report",
    response_class=PlainTextResponse,
    responses={404: _ERROR_EXAMPLES[404], 503: _ERROR_EXAMPLES[503]},
    summary="Assessment report",
    description="Markdown report for an assessment.",
)
async def get_assessment_report(
    assessment_id: UUID,
    assessment_repo: AssessmentRepository = Depends(get_assessment_repository),
) -> PlainTextResponse:
    record = assessment_repo.get_by_id(assessment_id)
    if not record:
        raise_assessment_not_found()

    return PlainTextResponse(generate_assessment_report(record), media_type="text/markdown")
