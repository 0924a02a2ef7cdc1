# backend/servicedesk/core/capabilities.py
"""
Caller identity and the department capability check.

The identity service decides who the caller is and what they may do; the
engine only consumes that decision. Every facade operation receives a
`CapabilityCheck` callable (default: `grant_check`, which reads the grants
carried by the caller) and goes through `authorize`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Optional

from .errors import Forbidden

# Departments
MAINTENANCE = "maintenance"
LAUNDRY = "laundry"

# Capabilities inside a department
MANAGE_AGENTS = "manage_agents"
MANAGE_CLIENTS = "manage_clients"
MANAGE_BILLING = "manage_billing"


@dataclass(frozen=True)
class DepartmentGrant:
    manager_id: int
    capabilities: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Caller:
    user_id: str
    grants: Dict[str, DepartmentGrant] = field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: dict) -> "Caller":
        grants = {}
        for dept, raw in (claims.get("grants") or {}).items():
            if not isinstance(raw, dict) or raw.get("manager_id") is None:
                continue
            grants[dept] = DepartmentGrant(
                manager_id=int(raw["manager_id"]),
                capabilities=frozenset(raw.get("capabilities") or ()),
            )
        return cls(user_id=str(claims.get("sub")), grants=grants)


@dataclass(frozen=True)
class CapabilityDecision:
    allowed: bool
    manager_id: Optional[int] = None
    reason: Optional[str] = None


CapabilityCheck = Callable[[Caller, str, Optional[str]], CapabilityDecision]


def grant_check(caller: Caller, department: str, capability: Optional[str] = None) -> CapabilityDecision:
    grant = caller.grants.get(department)
    if grant is None:
        return CapabilityDecision(False, reason=f"Access to the {department} department is required")
    if capability and capability not in grant.capabilities:
        return CapabilityDecision(False, reason=f"Missing capability '{capability}' for {department}")
    return CapabilityDecision(True, manager_id=grant.manager_id)


def authorize(
    caller: Caller,
    department: str,
    capability: Optional[str] = None,
    *,
    check: CapabilityCheck = grant_check,
) -> int:
    """Return the caller's manager id for the department or raise Forbidden."""
    decision = check(caller, department, capability)
    if not decision.allowed:
        raise Forbidden(decision.reason or "Insufficient permissions")
    if decision.manager_id is None:
        raise Forbidden(f"No management scope in {department}")
    return decision.manager_id
