from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class _CamelModel(BaseModel):
    """Snake-case attributes, camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

class GenerateRequest(_CamelModel):
    """Body of POST /v1/generate."""

    prompt: StrictStr = Field(..., min_length=1, description="What the contract should do.")
    user_id: StrictStr = Field(..., min_length=1, alias="userId", description="Caller-supplied quota key.")
    context: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Optional generation hints. Recognised keys: moduleName.",
    )


class UsageSummary(BaseModel):
    current: int
    limit: int
    remaining: int


class ValidationReport(BaseModel):
    issues: Optional[List[str]] = Field(default=None, description="Null when the code looks clean.")
    status: str = Field(..., pattern="^(clean|warnings)$")


class GenerationMetadata(_CamelModel):
    timestamp: datetime
    prompt_length: int = Field(..., alias="promptLength")


class GenerateResponse(_CamelModel):
    generated_code: str = Field(..., alias="generatedCode")
    usage: UsageSummary
    validation: ValidationReport
    metadata: GenerationMetadata


# ---------------------------------------------------------------------------
# Usage
# ---------------------------------------------------------------------------

class UsageRead(_CamelModel):
    current: int
    limit: int
    remaining: int
    reset_info: str = Field(..., alias="resetInfo")


# ---------------------------------------------------------------------------
# Meta
# ---------------------------------------------------------------------------

class HealthOut(BaseModel):
    status: str
    service: str
    version: str
    timestamp: datetime


class PricingPlan(_CamelModel):
    name: str
    price: int
    generations_per_day: int = Field(..., alias="generationsPerDay")
    features: List[str]


class PricingOut(BaseModel):
    plans: List[PricingPlan]
