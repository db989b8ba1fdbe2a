import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request

from ..dependencies import get_gate, get_orchestrator
from ..errors import InternalError, RelayError, UsageLimitError
from ..generation import GenerationOrchestrator
from ..rate_limit import generate_rate_limit, limiter
from ..schemas import GenerateRequest, GenerateResponse, GenerationMetadata, UsageSummary, ValidationReport
from ..usage import AdmissionGate

logger = logging.getLogger("relay.api")

router = APIRouter(prefix="/v1", tags=["generation"])


@router.post("/generate", response_model=GenerateResponse)
@limiter.limit(generate_rate_limit)
async def generate(
    request: Request,
    body: GenerateRequest,
    gate: AdmissionGate = Depends(get_gate),
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> GenerateResponse:
    """Generate a Supra Move module for the prompt, charged to ``userId``'s quota.

    Returns 402 when the user is over quota. Usage is only counted once
    the provider returned code, so a failed generation is free.
    """
    user_id = body.user_id
    try:
        async with gate.hold(user_id):
            decision = gate.admit(user_id)
            if not decision.admitted:
                raise UsageLimitError(current_usage=decision.current_usage, limit=decision.limit)

            logger.info("Generating code for user %s, usage: %d/%d", user_id, decision.current_usage, decision.limit)
            result = await orchestrator.generate(body.prompt, body.context)
            current = gate.commit(user_id, decision)
    except RelayError:
        raise
    except Exception as exc:
        logger.exception("Generation error for user %s", user_id)
        raise InternalError() from exc

    logger.info("Code generated successfully for user %s", user_id)
    return GenerateResponse(
        generated_code=result.code,
        usage=UsageSummary(current=current, limit=gate.limit, remaining=max(0, gate.limit - current)),
        validation=ValidationReport(issues=result.issues or None, status=result.status),
        metadata=GenerationMetadata(timestamp=datetime.now(timezone.utc), prompt_length=len(body.prompt)),
    )
