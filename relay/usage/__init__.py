from .gate import AdmissionDecision, AdmissionGate
from .scheduler import UsageResetScheduler
from .store import UsageRecord, UsageStore

__all__ = [
    "AdmissionDecision",
    "AdmissionGate",
    "UsageRecord",
    "UsageResetScheduler",
    "UsageStore",
]
