# vehicle_permits/models/employee.py
"""
Employee directory table.
Only active employees can submit permits; deactivating an employee keeps
their historical permits. Deleting an employee cascades to their permits.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from vehicle_permits.database import Base
from vehicle_permits.utils.timeutil import utcnow


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_code = Column(String(50), unique=True, nullable=False, index=True)  # e.g. EMP0001
    name = Column(String(200), nullable=False, index=True)
    department = Column(String(100), nullable=False, index=True)
    grade = Column(String(50), nullable=False)
    email = Column(String(200))
    phone = Column(String(50))             # Notification contact address
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    permits = relationship(
        "Permit",
        back_populates="employee",
        cascade="all, delete-orphan",
        order_by="Permit.created_at.desc()",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Employee {self.employee_code} name={self.name} active={self.is_active}>"
