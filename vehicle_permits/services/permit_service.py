# vehicle_permits/services/permit_service.py
"""
Permit lifecycle engine.

    pending ──approved──▶ approved   (terminal)
    pending ──rejected──▶ rejected   (terminal)

submit_permit  — validates the request, commits a `pending` permit, notifies HR.
decide_permit  — compare-and-swap from `pending` to the decision, notifies the employee.
lookup_employee — read-only directory passthrough for the submission form.

The lifecycle change is committed before any notification is attempted, and a
notification problem never undoes or fails the lifecycle change.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from vehicle_permits.models.employee import Employee
from vehicle_permits.models.hr_user import HrUser
from vehicle_permits.models.notification import KIND_TO_HR, KIND_TO_EMPLOYEE
from vehicle_permits.models.permit import Permit, STATUS_PENDING, DECISION_STATUSES
from vehicle_permits.services import notification_dispatcher
from vehicle_permits.services.employee_directory import find_active_by_identifier
from vehicle_permits.services.errors import InvalidInput, InvalidTransition, InvalidWindow, NotFound
from vehicle_permits.services.notification_gateway import NotificationGateway, get_gateway
from vehicle_permits.utils.logger import get_logger
from vehicle_permits.utils.timeutil import to_naive_utc, utcnow

logger = get_logger(__name__)

MAX_FIELD_LENGTH = 255
MAX_PURPOSE_LENGTH = 1000


def lookup_employee(db: Session, employee_code: str) -> Employee:
    """Active employee for the submission form. Unknown and inactive codes look the same."""
    employee = find_active_by_identifier(db, employee_code)
    if employee is None:
        raise NotFound("Employee not found", field="employee_id")
    return employee


def _required_text(value: Optional[str], field: str, label: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidInput(f"{label} is required.", field=field)
    if len(value) > MAX_FIELD_LENGTH:
        raise InvalidInput(f"{label} must be at most {MAX_FIELD_LENGTH} characters.", field=field)
    return value


def validate_window(usage_start: datetime, usage_end: datetime, now: Optional[datetime] = None):
    """Returns the window as naive UTC. Start must be in the future and strictly before end."""
    if usage_start is None:
        raise InvalidWindow("Start date and time is required.", field="usage_start")
    if usage_end is None:
        raise InvalidWindow("End date and time is required.", field="usage_end")
    start, end = to_naive_utc(usage_start), to_naive_utc(usage_end)
    if start <= (now or utcnow()):
        raise InvalidWindow("Start date must be in the future.", field="usage_start")
    if end <= start:
        raise InvalidWindow("End date must be after start date.", field="usage_end")
    return start, end


async def _notify(kind: str, db: Session, permit: Permit, gateway: NotificationGateway):
    try:
        await notification_dispatcher.dispatch(kind, db, permit, gateway)
    except Exception as e:
        # The permit is already committed; the caller still gets it
        db.rollback()
        logger.error(f"[PERMIT] #{permit.id} {kind} dispatch error: {e}", exc_info=True)


async def submit_permit(
    db: Session,
    employee_code: str,
    vehicle_type: str,
    license_plate: str,
    usage_start: datetime,
    usage_end: datetime,
    purpose: Optional[str] = None,
    gateway: Optional[NotificationGateway] = None,
) -> Permit:
    employee = lookup_employee(db, employee_code)
    vehicle_type = _required_text(vehicle_type, "vehicle_type", "Vehicle type")
    license_plate = _required_text(license_plate, "license_plate", "License plate")
    purpose = (purpose or "").strip() or None
    if purpose and len(purpose) > MAX_PURPOSE_LENGTH:
        raise InvalidInput(f"Purpose must be at most {MAX_PURPOSE_LENGTH} characters.", field="purpose")
    start, end = validate_window(usage_start, usage_end)

    permit = Permit(
        employee_id=employee.id,
        vehicle_type=vehicle_type,
        license_plate=license_plate,
        usage_start=start,
        usage_end=end,
        purpose=purpose,
        status=STATUS_PENDING,
        created_at=utcnow(),
    )
    db.add(permit)
    db.commit()
    db.refresh(permit)
    logger.info(
        f"[PERMIT] #{permit.id} submitted by {employee.employee_code} | "
        f"{vehicle_type} {license_plate} | {start:%Y-%m-%d %H:%M} → {end:%Y-%m-%d %H:%M}"
    )

    await _notify(KIND_TO_HR, db, permit, gateway or get_gateway())
    return permit


async def decide_permit(
    db: Session,
    permit_id: int,
    decision: str,
    decider_id: int,
    comment: Optional[str] = None,
    gateway: Optional[NotificationGateway] = None,
) -> Permit:
    decision = (decision or "").strip().lower()
    if decision not in DECISION_STATUSES:
        raise InvalidInput("Decision must be 'approved' or 'rejected'.", field="decision")

    if db.get(Permit, permit_id) is None:
        raise NotFound("Permit not found")
    if db.get(HrUser, decider_id) is None:
        raise NotFound("Decider not found", field="decider_id")

    # Check-and-set in one statement: only one concurrent decision can match `pending`
    now = utcnow()
    updated = (
        db.query(Permit)
        .filter(Permit.id == permit_id, Permit.status == STATUS_PENDING)
        .update(
            {
                Permit.status: decision,
                Permit.hr_comments: (comment or "").strip() or None,
                Permit.decided_by: decider_id,
                Permit.decided_at: now,
                Permit.updated_at: now,
            },
            synchronize_session=False,
        )
    )
    if updated == 0:
        db.rollback()
        current = db.get(Permit, permit_id)
        if current is None:
            raise NotFound("Permit not found")
        db.refresh(current)
        logger.warning(f"[PERMIT] #{permit_id} {decision} refused: already {current.status}")
        raise InvalidTransition(f"Permit #{permit_id} has already been {current.status}.")
    db.commit()

    permit = db.get(Permit, permit_id)
    db.refresh(permit)
    logger.info(f"[PERMIT] #{permit.id} {decision} by hr_user={decider_id}")

    await _notify(KIND_TO_EMPLOYEE, db, permit, gateway or get_gateway())
    return permit
