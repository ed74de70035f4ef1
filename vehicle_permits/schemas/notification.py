from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class NotificationOut(BaseModel):
    id: int
    permit_id: int
    recipient: str
    kind: str                      # to_hr | to_employee
    message: str
    status: str                    # pending | sent | failed
    sent_at: Optional[datetime]
    error_message: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
