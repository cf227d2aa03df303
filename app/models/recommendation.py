from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List

from app.models.enumerations import ConfidenceLevel, RecommendationSource


class GrowthLever(BaseModel):
    """
    One recommended action. Accepts camelCase keys from the narrative generator.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1)
    why: str = Field(..., min_length=1)
    expected_impact: str = Field(..., alias="expectedImpact")
    confidence: ConfidenceLevel
    first_step: str = Field(..., alias="firstStep")

    @field_validator("confidence", mode="before")
    @classmethod
    def normalise_confidence(cls, v):
        return v.lower() if isinstance(v, str) else v


class Recommendation(BaseModel):
    """
    Narrative recommendation for an assessment.
    """

    model_config = ConfigDict(populate_by_name=True)

    summary: str = Field(..., min_length=1)
    levers: List[GrowthLever] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    source: RecommendationSource = RecommendationSource.LLM
