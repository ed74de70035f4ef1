from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, Optional


class PermitCreate(BaseModel):
    employee_id: str                     # Employee code, e.g. EMP0001
    vehicle_type: str
    license_plate: str
    usage_start: datetime
    usage_end: datetime
    purpose: Optional[str] = None


class PermitDecision(BaseModel):
    decision: Literal["approved", "rejected"]
    comment: Optional[str] = Field(default=None, max_length=1000)


class EmployeeSummary(BaseModel):
    employee_code: str
    name: str
    department: str
    grade: str

    class Config:
        from_attributes = True


class DeciderSummary(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


class PermitOut(BaseModel):
    id: int
    employee: EmployeeSummary
    vehicle_type: str
    license_plate: str
    usage_start: datetime
    usage_end: datetime
    purpose: Optional[str]
    status: str
    hr_comments: Optional[str]
    decided_by: Optional[int]
    decider: Optional[DeciderSummary]
    decided_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class PermitStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int


class PermitPage(BaseModel):
    items: list[PermitOut]
    page: int
    per_page: int
    total_items: int
    pages: int
    stats: PermitStats
    filters: dict
