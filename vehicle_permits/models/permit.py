# vehicle_permits/models/permit.py
"""
Vehicle permits table.
A permit is created `pending` by a submission and decided exactly once
(`approved` or `rejected`). Status changes only go through permit_service.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from vehicle_permits.database import Base
from vehicle_permits.utils.timeutil import utcnow

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

PERMIT_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)
DECISION_STATUSES = (STATUS_APPROVED, STATUS_REJECTED)


class Permit(Base):
    __tablename__ = "permits"
    __table_args__ = (
        Index("ix_permits_status_created_at", "status", "created_at"),
        Index("ix_permits_employee_status", "employee_id", "status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    vehicle_type = Column(String(255), nullable=False)
    license_plate = Column(String(255), nullable=False)
    usage_start = Column(DateTime, nullable=False, index=True)
    usage_end = Column(DateTime, nullable=False, index=True)
    purpose = Column(Text)
    status = Column(String(20), default=STATUS_PENDING, nullable=False, index=True)
    hr_comments = Column(Text)
    decided_by = Column(Integer, ForeignKey("hr_users.id", ondelete="SET NULL"))
    decided_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    employee = relationship("Employee", back_populates="permits")
    decider = relationship("HrUser", back_populates="decided_permits")
    notifications = relationship(
        "Notification",
        back_populates="permit",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Notification.id",
    )

    def __repr__(self):
        return f"<Permit {self.id} employee={self.employee_id} status={self.status}>"
