# vehicle_permits/routers/permits.py
"""
Permit endpoints.
POST /permits                      — employee submits a request
GET  /permits                      — HR listing with status/date filters + summary counts
GET  /permits/export               — CSV dump for HR
GET  /permits/{id}                 — single permit
PUT  /permits/{id}/decision        — HR approves or rejects (X-Decider-Id header)
GET  /permits/{id}/notifications   — delivery audit trail for one permit
"""

import math
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from vehicle_permits.config import settings
from vehicle_permits.database import get_db
from vehicle_permits.models.hr_user import HrUser
from vehicle_permits.models.notification import Notification
from vehicle_permits.models.permit import Permit, PERMIT_STATUSES
from vehicle_permits.schemas.notification import NotificationOut
from vehicle_permits.schemas.permit import PermitCreate, PermitDecision, PermitOut, PermitPage
from vehicle_permits.services.decision_policy import DecisionPolicy, authorize_decision, get_decision_policy
from vehicle_permits.services.errors import InvalidInput, NotAuthorized, NotFound
from vehicle_permits.services.export_service import export_filename, iter_csv
from vehicle_permits.services.notification_gateway import NotificationGateway, get_gateway
from vehicle_permits.services.permit_queries import filtered_permits, status_counts
from vehicle_permits.services.permit_service import decide_permit, submit_permit

router = APIRouter()


def _get_permit_or_404(db: Session, permit_id: int) -> Permit:
    permit = db.get(Permit, permit_id)
    if not permit:
        raise NotFound("Permit not found")
    return permit


def get_decider(x_decider_id: Optional[int] = Header(default=None), db: Session = Depends(get_db)) -> HrUser:
    """Decider identity supplied by the authenticating front end."""
    if x_decider_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-Decider-Id header")
    decider = db.get(HrUser, x_decider_id)
    if not decider:
        raise NotAuthorized("Unknown decider")
    return decider


@router.post("/permits", response_model=PermitOut, status_code=status.HTTP_201_CREATED,
             summary="Submit a vehicle permit request")
async def create_permit(body: PermitCreate, db: Session = Depends(get_db),
                        gateway: NotificationGateway = Depends(get_gateway)):
    """Creates a pending permit and notifies HR. Delivery outcome never affects the response."""
    return await submit_permit(
        db,
        employee_code=body.employee_id,
        vehicle_type=body.vehicle_type,
        license_plate=body.license_plate,
        usage_start=body.usage_start,
        usage_end=body.usage_end,
        purpose=body.purpose,
        gateway=gateway,
    )


@router.get("/permits", response_model=PermitPage, summary="HR dashboard listing")
def list_permits(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    page: int = Query(default=1, ge=1),
    per_page: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    """Newest first. `stats` counts every permit in the store, not just the filtered page."""
    if status_filter and status_filter != "all" and status_filter not in PERMIT_STATUSES:
        raise InvalidInput(f"Unknown status '{status_filter}'", field="status")
    per_page = min(per_page or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)

    q = filtered_permits(db, status_filter, from_date, to_date)
    total_items = q.count()
    items = (
        q.order_by(Permit.created_at.desc(), Permit.id.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return {
        "items": items,
        "page": page,
        "per_page": per_page,
        "total_items": total_items,
        "pages": math.ceil(total_items / per_page) if total_items else 0,
        "stats": status_counts(db),
        "filters": {
            "status": status_filter,
            "from_date": from_date.isoformat() if from_date else None,
            "to_date": to_date.isoformat() if to_date else None,
        },
    }


@router.get("/permits/export", summary="Export permits as CSV")
def export_permits(from_date: Optional[date] = None, to_date: Optional[date] = None,
                   db: Session = Depends(get_db)):
    permits = filtered_permits(db, None, from_date, to_date).order_by(Permit.id).all()
    return StreamingResponse(
        iter_csv(permits),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.get("/permits/{permit_id}", response_model=PermitOut)
def get_permit(permit_id: int, db: Session = Depends(get_db)):
    return _get_permit_or_404(db, permit_id)


@router.put("/permits/{permit_id}/decision", response_model=PermitOut, summary="Approve or reject a permit")
async def decide(
    permit_id: int,
    body: PermitDecision,
    decider: HrUser = Depends(get_decider),
    policy: DecisionPolicy = Depends(get_decision_policy),
    gateway: NotificationGateway = Depends(get_gateway),
    db: Session = Depends(get_db),
):
    """A permit can be decided once. Later attempts return 409."""
    permit = _get_permit_or_404(db, permit_id)
    authorize_decision(policy, decider, permit)
    return await decide_permit(db, permit_id, body.decision, decider.id, body.comment, gateway=gateway)


@router.get("/permits/{permit_id}/notifications", response_model=list[NotificationOut],
            summary="Delivery records for a permit")
def list_permit_notifications(permit_id: int, db: Session = Depends(get_db)):
    _get_permit_or_404(db, permit_id)
    return (
        db.query(Notification)
        .filter(Notification.permit_id == permit_id)
        .order_by(Notification.id)
        .all()
    )
