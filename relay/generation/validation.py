from __future__ import annotations

from typing import List

MISSING_ACQUIRES = "Missing acquires annotation"
MIXED_ADDRESSES = "Mixed address usage - use signer::address_of consistently"


def validate_code(code: str) -> List[str]:
    """Cheap substring checks for the compile errors the model makes most often.

    Findings are warnings: the code is still returned to the caller.
    """
    issues: List[str] = []
    if "borrow_global" in code and "acquires" not in code:
        issues.append(MISSING_ACQUIRES)
    if "@0x1" in code and "signer::address_of" in code:
        issues.append(MIXED_ADDRESSES)
    return issues
