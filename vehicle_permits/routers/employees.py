# vehicle_permits/routers/employees.py
"""Employee directory — submission-form lookup plus HR administration (CRUD)."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from vehicle_permits.config import settings
from vehicle_permits.database import get_db
from vehicle_permits.models.employee import Employee
from vehicle_permits.schemas.employee import (
    EmployeeCreate,
    EmployeeDetailOut,
    EmployeeLookupOut,
    EmployeeOut,
    EmployeeUpdate,
)
from vehicle_permits.services.employee_directory import find_by_code
from vehicle_permits.services.permit_service import lookup_employee
from vehicle_permits.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/employees/lookup", response_model=EmployeeLookupOut, summary="Pre-fill the permit form")
def employee_lookup(identifier: str = Query(min_length=1), db: Session = Depends(get_db)):
    """Active employees only. Unknown and inactive identifiers both return 404."""
    return lookup_employee(db, identifier)


@router.get("/employees", response_model=list[EmployeeOut], summary="List employees")
def list_employees(page: int = Query(default=1, ge=1), active: bool = None, db: Session = Depends(get_db)):
    q = db.query(Employee)
    if active is not None:
        q = q.filter(Employee.is_active.is_(active))
    per_page = settings.DEFAULT_PAGE_SIZE
    return q.order_by(Employee.created_at.desc(), Employee.id.desc()).offset((page - 1) * per_page).limit(per_page).all()


@router.post("/employees", response_model=EmployeeOut, status_code=201, summary="Add an employee")
def create_employee(body: EmployeeCreate, db: Session = Depends(get_db)):
    if find_by_code(db, body.employee_code):
        raise HTTPException(status_code=400, detail=f"Employee {body.employee_code} already exists")
    employee = Employee(**body.model_dump())
    db.add(employee)
    db.commit()
    db.refresh(employee)
    logger.info(f"Employee {employee.employee_code} created")
    return employee


def _get_employee_or_404(db: Session, employee_id: int) -> Employee:
    employee = db.get(Employee, employee_id)
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    return employee


@router.get("/employees/{employee_id}", response_model=EmployeeDetailOut, summary="Employee with permit history")
def get_employee(employee_id: int, db: Session = Depends(get_db)):
    """Newest permits first."""
    return _get_employee_or_404(db, employee_id)


@router.put("/employees/{employee_id}", response_model=EmployeeOut, summary="Update an employee")
def update_employee(employee_id: int, body: EmployeeUpdate, db: Session = Depends(get_db)):
    """The employee code is the stable identifier and cannot be changed."""
    employee = _get_employee_or_404(db, employee_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(employee, field, value)
    db.commit()
    db.refresh(employee)
    return employee


@router.delete("/employees/{employee_id}", summary="Remove an employee and their permits")
def delete_employee(employee_id: int, db: Session = Depends(get_db)):
    employee = _get_employee_or_404(db, employee_id)
    code = employee.employee_code
    db.delete(employee)
    db.commit()
    logger.info(f"Employee {code} deleted (permits cascaded)")
    return {"status": "removed", "employee_code": code}
