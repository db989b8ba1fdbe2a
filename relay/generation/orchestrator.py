from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Protocol

from ..errors import ProviderError
from .prompts import build_enhanced_prompt, build_system_prompt
from .validation import validate_code

logger = logging.getLogger("relay.generation")


class CompletionProvider(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str) -> str: ...


@dataclass
class GenerationResult:
    code: str
    issues: List[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        return "warnings" if self.issues else "clean"


class GenerationOrchestrator:
    """Prompt in, validated Move source out."""

    def __init__(self, provider: CompletionProvider) -> None:
        self.provider = provider

    async def generate(self, prompt: str, context: Optional[Mapping[str, Any]] = None) -> GenerationResult:
        try:
            code = await self.provider.complete(build_system_prompt(), build_enhanced_prompt(prompt, context))
        except ProviderError as exc:
            logger.error("Provider call failed: %s", exc)
            raise

        issues = validate_code(code)
        if issues:
            # Returned anyway; logged so the prompt can be tuned.
            logger.warning("Validation issues: %s", issues)
        return GenerationResult(code=code, issues=issues)
