# vehicle_permits/models/notification.py
"""
Notification delivery records — one row per delivery attempt.
Created `pending`, then moved once to `sent` (with sent_at) or `failed`
(with error_message). Rows are never retried in place.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from vehicle_permits.database import Base
from vehicle_permits.utils.timeutil import utcnow

KIND_TO_HR = "to_hr"
KIND_TO_EMPLOYEE = "to_employee"

DELIVERY_PENDING = "pending"
DELIVERY_SENT = "sent"
DELIVERY_FAILED = "failed"


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_status_created_at", "status", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    permit_id = Column(Integer, ForeignKey("permits.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient = Column(String(100), nullable=False)
    kind = Column(String(20), nullable=False, index=True)       # to_hr | to_employee
    message = Column(Text, nullable=False)
    status = Column(String(20), default=DELIVERY_PENDING, nullable=False, index=True)
    sent_at = Column(DateTime)
    error_message = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    permit = relationship("Permit", back_populates="notifications")

    def __repr__(self):
        return f"<Notification {self.id} permit={self.permit_id} kind={self.kind} status={self.status}>"
