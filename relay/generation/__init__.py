from .orchestrator import GenerationOrchestrator, GenerationResult
from .provider import OpenAIProvider

__all__ = ["GenerationOrchestrator", "GenerationResult", "OpenAIProvider"]
