import re
from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from uuid import UUID
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.models.enumerations import ConfidenceLevel, Module, Outcome
from app.models.recommendation import Recommendation


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

BLOCKED_EMAIL_PROVIDERS = frozenset({
    "gmail.com", "yahoo.com", "hotmail.com", "outlook.com", "live.com",
    "aol.com", "icloud.com", "me.com", "mac.com", "protonmail.com",
    "tutanota.com", "yandex.com", "mail.ru", "gmx.com", "web.de",
    "zoho.com", "fastmail.com", "hey.com", "temp-mail.org", "10minutemail.com",
    "guerrillamail.com", "mailinator.com", "throwaway.email", "tempmail.net",
    "example.com", "test.com", "demo.com", "sample.com", "fake.com",
    "noreply.com", "no-reply.com",
})

FAKE_DOMAIN_PREFIXES = (
    "test", "demo", "sample", "fake", "temp", "example",
    "dummy", "placeholder", "your", "company",
)

GENERIC_LOCAL_PARTS = frozenset({
    "test", "demo", "sample", "fake", "temp", "temporary", "example",
    "dummy", "placeholder", "your", "company", "business", "admin",
    "info", "contact", "hello", "hi", "user", "guest", "visitor",
})


def validate_company_email(email: str) -> str:
    """Accept only plausible company addresses; returns the lower-cased email."""
    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Please enter a valid email address")

    local_part, domain = email.lower().split("@", 1)
    if domain in BLOCKED_EMAIL_PROVIDERS:
        raise ValueError(
            "Please use your company email address instead of a personal email provider"
        )
    if domain.startswith(FAKE_DOMAIN_PREFIXES):
        raise ValueError("Please use a real company email address")
    if local_part in GENERIC_LOCAL_PARTS:
        raise ValueError("Please use your actual name or a professional email address")
    return email.lower()


class LeverValue(BaseModel):
    """
    Wire shape of one lever answer.
    """

    present: Optional[StrictBool] = Field(
        default=None,
        description="Capability is in place (null when unanswered)"
    )

    applicable: bool = Field(
        default=True,
        description="False when the lever does not apply to the respondent"
    )


ResponsesPayload = Dict[Module, Dict[str, LeverValue]]


class AssessmentSubmission(BaseModel):
    """
    Model for submitting a completed questionnaire.
    """

    email: str = Field(
        ...,
        max_length=255,
        description="Company email address of the respondent"
    )

    company: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Company name"
    )

    industry: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Industry of the company"
    )

    company_size: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Company size band"
    )

    responses: ResponsesPayload = Field(
        ...,
        description="module -> lever -> {present, applicable}"
    )

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_company_email(v)

    @field_validator("company")
    @classmethod
    def check_company(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Company name is required")
        return v

    def responses_dict(self) -> Dict[str, Any]:
        return {
            module.value: {lever: value.model_dump() for lever, value in levers.items()}
            for module, levers in self.responses.items()
        }


class AssessmentCreated(BaseModel):
    """
    Returned after a submission is stored.
    """

    assessment_id: UUID
    created_at: datetime


class ScorePreviewRequest(BaseModel):
    """
    Score a questionnaire without storing it.
    """

    responses: ResponsesPayload

    def responses_dict(self) -> Dict[str, Any]:
        return {
            module.value: {lever: value.model_dump() for lever, value in levers.items()}
            for module, levers in self.responses.items()
        }


class ModuleScores(BaseModel):
    """
    Per-module scores plus the overall score and outcome band.
    """

    inbound: Optional[int] = Field(default=None, ge=0, le=100)
    outbound: Optional[int] = Field(default=None, ge=0, le=100)
    content: Optional[int] = Field(default=None, ge=0, le=100)
    paid: Optional[int] = Field(default=None, ge=0, le=100)
    nurture: Optional[int] = Field(default=None, ge=0, le=100)
    infra: Optional[int] = Field(default=None, ge=0, le=100)
    attr: Optional[int] = Field(default=None, ge=0, le=100)
    overall: int = Field(..., ge=0, le=100)
    outcome: Outcome


class GapRecordResponse(BaseModel):
    module: Module
    lever: str
    name: str
    present: bool
    weight: int
    computed_impact: int


class ScoreBreakdown(BaseModel):
    """
    Engine output for one response document.
    """

    scores: ModuleScores
    confidence: ConfidenceLevel
    prerequisites: List[str]
    risks: List[str]
    gaps: List[GapRecordResponse]


class ScoreResultResponse(ScoreBreakdown):
    """
    Result of scoring a stored assessment.
    """

    assessment_id: UUID
    recommendation: Recommendation


class AssessmentResultsResponse(BaseModel):
    """
    Stored results view.
    """

    model_config = ConfigDict(from_attributes=True)

    assessment_id: UUID
    company: str
    industry: Optional[str] = None
    company_size: Optional[str] = None
    email: str
    scores: Optional[ModuleScores] = None
    confidence: Optional[ConfidenceLevel] = None
    summary: Optional[str] = None
    growth_levers: List[Dict[str, Any]] = Field(default_factory=list)
    risk_flags: List[str] = Field(default_factory=list)
    prerequisites: List[str] = Field(default_factory=list)
    created_at: datetime
    scored_at: Optional[datetime] = None


class WeightsResponse(BaseModel):
    lever_weights: Dict[str, Dict[str, int]]
    module_weights: Dict[str, int]
    lever_count: int


class CRMSyncRequest(BaseModel):
    assessment_id: UUID


class CRMSyncResponse(BaseModel):
    success: bool
    contact_id: str
    note_id: Optional[str] = None
    deal_id: Optional[str] = None


class ErrorResponse(BaseModel):
    """
    Standard error response model.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(default=None, description="Additional error details")
    timestamp: datetime = Field(..., description="Error occurrence timestamp")
