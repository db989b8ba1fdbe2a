"""
Tests for the admission gate: admit/deny decisions, deferred commits,
both reset mechanisms, and per-user serialisation under ``hold``.

Run with: pytest tests/test_admission_gate.py -v
"""
from __future__ import annotations

import asyncio

import pytest

from relay.usage import AdmissionGate, UsageStore


def _cycle(gate: AdmissionGate, user_id: str) -> int:
    """One admit + successful commit. Returns the pre-increment usage."""
    decision = gate.admit(user_id)
    assert decision.admitted
    gate.commit(user_id, decision)
    return decision.current_usage


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------

def test_first_admit_is_admitted_with_zero_usage(gate):
    decision = gate.admit("newcomer")
    assert decision.admitted
    assert decision.current_usage == 0
    assert decision.limit == 3


def test_admit_alone_does_not_consume_quota(gate):
    for _ in range(10):
        assert gate.admit("alice").current_usage == 0


def test_denied_after_limit_cycles(gate):
    for _ in range(3):
        _cycle(gate, "alice")
    decision = gate.admit("alice")
    assert not decision.admitted
    assert decision.current_usage == 3
    assert decision.limit == 3
    assert decision.remaining == 0


def test_denial_does_not_mutate_record(gate, store):
    for _ in range(3):
        _cycle(gate, "alice")
    record = store.get_or_create("alice")
    before = (record.count, record.last_reset)
    gate.admit("alice")
    gate.admit("alice")
    assert (record.count, record.last_reset) == before


def test_commit_refuses_denied_decision(gate):
    for _ in range(3):
        _cycle(gate, "alice")
    denied = gate.admit("alice")
    with pytest.raises(RuntimeError):
        gate.commit("alice", denied)
    assert gate.check("alice").current_usage == 3


def test_zero_limit_denies_everyone(store):
    gate = AdmissionGate(store, limit=0)
    decision = gate.admit("alice")
    assert not decision.admitted
    assert decision.current_usage == 0


def test_scenario_ten_cycles_then_denied_and_independent_users(store):
    gate = AdmissionGate(store, limit=10)
    usages = [_cycle(gate, "user-A") for _ in range(10)]
    assert usages == list(range(10))

    denied = gate.admit("user-A")
    assert not denied.admitted
    assert (denied.current_usage, denied.limit) == (10, 10)

    other = gate.admit("user-B")
    assert other.admitted
    assert other.current_usage == 0


# ---------------------------------------------------------------------------
# Resets
# ---------------------------------------------------------------------------

def test_window_elapse_readmits_exhausted_user(gate, clock):
    for _ in range(3):
        _cycle(gate, "alice")
    assert not gate.admit("alice").admitted

    clock.advance(days=30)
    decision = gate.admit("alice")
    assert decision.admitted
    assert decision.current_usage == 0


def test_wholesale_clear_resets_every_user(gate, store, clock):
    for _ in range(3):
        _cycle(gate, "old-user")
    clock.advance(days=5)
    _cycle(gate, "recent-user")

    store.clear()

    assert gate.admit("old-user").current_usage == 0
    assert gate.admit("recent-user").current_usage == 0


# ---------------------------------------------------------------------------
# Read-only check
# ---------------------------------------------------------------------------

def test_check_matches_admit_without_side_effects(gate, store):
    _cycle(gate, "alice")
    decision = gate.check("alice")
    assert decision.admitted
    assert decision.current_usage == 1
    assert decision.remaining == 2

    assert gate.check("ghost").current_usage == 0
    assert "ghost" not in store


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

def test_hold_prevents_overshoot_for_same_user():
    gate = AdmissionGate(UsageStore(), limit=1)

    async def attempt() -> bool:
        async with gate.hold("alice"):
            decision = gate.admit("alice")
            if not decision.admitted:
                return False
            await asyncio.sleep(0.01)  # the provider call
            gate.commit("alice", decision)
            return True

    async def main():
        return await asyncio.gather(attempt(), attempt(), attempt())

    assert sorted(asyncio.run(main())) == [False, False, True]
    assert gate.check("alice").current_usage == 1


def test_hold_does_not_block_other_users():
    gate = AdmissionGate(UsageStore(), limit=5)

    async def main() -> bool:
        async with gate.hold("alice"):
            async def other():
                async with gate.hold("bob"):
                    return True
            return await asyncio.wait_for(other(), timeout=1.0)

    assert asyncio.run(main()) is True
