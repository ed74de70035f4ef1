# vehicle_permits/models/hr_user.py
"""
HR user accounts — the people who approve or reject permits.
Deleting one keeps the permits they decided, with decided_by set to NULL.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from vehicle_permits.database import Base
from vehicle_permits.utils.timeutil import utcnow


class HrUser(Base):
    __tablename__ = "hr_users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200), unique=True, nullable=False, index=True)
    is_hr = Column(Boolean, default=True, nullable=False)   # Checked by the hr_only decision policy
    created_at = Column(DateTime, default=utcnow, nullable=False)

    decided_permits = relationship("Permit", back_populates="decider")

    def __repr__(self):
        return f"<HrUser {self.id} email={self.email} hr={self.is_hr}>"
