# vehicle_permits/services/decision_policy.py
"""
Who may decide a permit.
The decision router checks the configured policy before calling permit_service;
the lifecycle engine itself only records the decider it is given.
"""

from typing import Callable
from vehicle_permits.config import settings
from vehicle_permits.models.hr_user import HrUser
from vehicle_permits.models.permit import Permit
from vehicle_permits.services.errors import NotAuthorized

DecisionPolicy = Callable[[HrUser, Permit], bool]


def allow_any_decider(decider: HrUser, permit: Permit) -> bool:
    return True


def require_hr_flag(decider: HrUser, permit: Permit) -> bool:
    return bool(decider.is_hr)


POLICIES = {
    "any": allow_any_decider,
    "hr_only": require_hr_flag,
}


def get_decision_policy() -> DecisionPolicy:
    """FastAPI dependency — the policy named by DECISION_POLICY."""
    try:
        return POLICIES[settings.DECISION_POLICY.lower()]
    except KeyError:
        raise ValueError(f"Unknown DECISION_POLICY: {settings.DECISION_POLICY}")


def authorize_decision(policy: DecisionPolicy, decider: HrUser, permit: Permit):
    if not policy(decider, permit):
        raise NotAuthorized(f"{decider.name} is not allowed to decide permit #{permit.id}.")
