from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from ..config import settings
from ..schemas import HealthOut, PricingOut, PricingPlan

router = APIRouter(tags=["meta"])


@router.get("/health", response_model=HealthOut)
def health() -> HealthOut:
    return HealthOut(
        status="healthy",
        service=settings.service_name,
        version=settings.service_version,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/v1/pricing", response_model=PricingOut)
def pricing() -> PricingOut:
    """Static plan list; the Free plan mirrors the configured quota."""
    return PricingOut(
        plans=[
            PricingPlan(
                name="Free",
                price=0,
                generations_per_day=settings.free_tier_limit,
                features=["Basic AI generation", "Compilation validation"],
            ),
            PricingPlan(
                name="Pro",
                price=29,
                generations_per_day=settings.pro_tier_limit,
                features=["Advanced generation", "Priority support", "Custom templates"],
            ),
        ]
    )
