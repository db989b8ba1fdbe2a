"""
dependencies.py — FastAPI dependencies resolving per-app collaborators
======================================================================
The usage gate and the orchestrator live on ``app.state`` (built in
``main.py``) rather than as module globals, so tests can swap either one
through ``app.dependency_overrides``.
"""
from __future__ import annotations

from fastapi import Request

from .generation import GenerationOrchestrator
from .usage import AdmissionGate


def get_gate(request: Request) -> AdmissionGate:
    return request.app.state.gate


def get_orchestrator(request: Request) -> GenerationOrchestrator:
    return request.app.state.orchestrator
