"""
pytest configuration – shared fakes for the clock and the LLM provider,
plus an isolated usage gate wired into the app for every API test.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

import pytest

from relay.dependencies import get_gate, get_orchestrator
from relay.generation import GenerationOrchestrator
from relay.main import app
from relay.rate_limit import limiter
from relay.usage import AdmissionGate, UsageStore

GOOD_CODE = """module your_address::token {
    use std::signer;
    struct Caps has key {}
    public fun owner(account: &signer): address acquires Caps {
        let _c = borrow_global<Caps>(signer::address_of(account));
        signer::address_of(account)
    }
}"""


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class FakeProvider:
    """Records prompts; returns ``reply`` or raises ``error``."""

    def __init__(self, reply: str = GOOD_CODE, error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[Tuple[str, str]] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> UsageStore:
    return UsageStore(window=timedelta(days=30), clock=clock)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def gate(store: UsageStore) -> AdmissionGate:
    return AdmissionGate(store, limit=3)


@pytest.fixture
def wired_app(gate: AdmissionGate, provider: FakeProvider):
    """The real app with an isolated gate and a fake provider behind the orchestrator."""
    orchestrator = GenerationOrchestrator(provider)
    app.dependency_overrides[get_gate] = lambda: gate
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield app
    app.dependency_overrides.clear()
