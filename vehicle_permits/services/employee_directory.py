# vehicle_permits/services/employee_directory.py
"""
Employee directory lookups.
Used by permit_service for submissions and by the employee lookup endpoint.
"""

from typing import Optional
from sqlalchemy.orm import Session
from vehicle_permits.models.employee import Employee


def find_active_by_identifier(db: Session, employee_code: str) -> Optional[Employee]:
    """Find an active employee by code. Inactive and unknown codes both return None."""
    if not employee_code:
        return None
    return (
        db.query(Employee)
        .filter(Employee.employee_code == employee_code.strip(), Employee.is_active.is_(True))
        .first()
    )


def find_by_code(db: Session, employee_code: str) -> Optional[Employee]:
    """Admin lookup, ignores the active flag."""
    return db.query(Employee).filter(Employee.employee_code == employee_code).first()
