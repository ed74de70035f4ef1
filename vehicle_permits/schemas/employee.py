from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional


class EmployeeCreate(BaseModel):
    employee_code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    department: str = Field(min_length=1, max_length=100)
    grade: str = Field(min_length=1, max_length=50)
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    department: Optional[str] = Field(default=None, min_length=1, max_length=100)
    grade: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[str] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "department", "grade", "is_active")
    @classmethod
    def not_null(cls, value, info):
        # email and phone may be cleared; these columns are required
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class EmployeeLookupOut(BaseModel):
    name: str
    department: str
    grade: str

    class Config:
        from_attributes = True


class EmployeeOut(BaseModel):
    id: int
    employee_code: str
    name: str
    department: str
    grade: str
    email: Optional[str]
    phone: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class HrUserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=200)
    is_hr: bool = True


class HrUserOut(BaseModel):
    id: int
    name: str
    email: str
    is_hr: bool
    created_at: datetime

    class Config:
        from_attributes = True


class EmployeePermitOut(BaseModel):
    id: int
    vehicle_type: str
    license_plate: str
    usage_start: datetime
    usage_end: datetime
    purpose: Optional[str]
    status: str
    hr_comments: Optional[str]
    decided_at: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class EmployeeDetailOut(EmployeeOut):
    permits: list[EmployeePermitOut] = []
