# vehicle_permits/services/permit_queries.py
"""
Query helpers for permits — status / date-range predicates and the
filtered query used by both the HR listing and the CSV export.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload
from vehicle_permits.models.permit import Permit, PERMIT_STATUSES


def status_is(status: str):
    return Permit.status == status


def created_between(from_date: Optional[date] = None, to_date: Optional[date] = None) -> list:
    """Inclusive date range on submission time. Dates are whole days."""
    clauses = []
    if from_date:
        clauses.append(Permit.created_at >= datetime.combine(from_date, time.min))
    if to_date:
        clauses.append(Permit.created_at < datetime.combine(to_date + timedelta(days=1), time.min))
    return clauses


def filtered_permits(db: Session, status: Optional[str] = None,
                     from_date: Optional[date] = None, to_date: Optional[date] = None) -> Query:
    q = db.query(Permit).options(joinedload(Permit.employee), joinedload(Permit.decider))
    if status and status != "all":
        q = q.filter(status_is(status))
    for clause in created_between(from_date, to_date):
        q = q.filter(clause)
    return q


def status_counts(db: Session) -> dict:
    """Store-wide summary counts for the HR dashboard."""
    rows = db.query(Permit.status, func.count(Permit.id)).group_by(Permit.status).all()
    counts = {s: 0 for s in PERMIT_STATUSES}
    for status, count in rows:
        counts[status] = count
    return {"total": sum(counts.values()), **counts}
