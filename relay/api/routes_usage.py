from __future__ import annotations

from fastapi import APIRouter, Depends

from ..config import settings
from ..dependencies import get_gate
from ..schemas import UsageRead
from ..usage import AdmissionGate

router = APIRouter(prefix="/v1", tags=["usage"])

_DAY = 24 * 60 * 60


def describe_reset(interval_seconds: float) -> str:
    if interval_seconds == _DAY:
        return "Usage resets daily"
    if interval_seconds >= 3600:
        return f"Usage resets every {interval_seconds / 3600:g} hours"
    return f"Usage resets every {interval_seconds:g} seconds"


@router.get("/usage/{user_id}", response_model=UsageRead)
def get_usage(user_id: str, gate: AdmissionGate = Depends(get_gate)) -> UsageRead:
    """Current usage for a user. Read-only: never creates or resets a record."""
    decision = gate.check(user_id)
    return UsageRead(
        current=decision.current_usage,
        limit=decision.limit,
        remaining=decision.remaining,
        reset_info=describe_reset(settings.usage_reset_interval_seconds),
    )
