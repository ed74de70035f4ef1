# vehicle_permits/services/export_service.py
"""
CSV export of permits joined with employee and decider identity.
One row per permit, in the column order HR's spreadsheet expects.
"""

import csv
import io
from datetime import datetime
from typing import Iterable, Iterator
from vehicle_permits.models.permit import Permit
from vehicle_permits.utils.timeutil import format_export, utcnow

EXPORT_COLUMNS = [
    "Request ID",
    "Employee ID",
    "Employee Name",
    "Department",
    "Grade",
    "Vehicle Type",
    "License Plate",
    "Usage Start",
    "Usage End",
    "Purpose",
    "Status",
    "HR Comments",
    "Approved By",
    "Approved At",
    "Submitted At",
]


def permit_row(permit: Permit) -> list:
    employee = permit.employee
    return [
        permit.id,
        employee.employee_code,
        employee.name,
        employee.department,
        employee.grade,
        permit.vehicle_type,
        permit.license_plate,
        format_export(permit.usage_start),
        format_export(permit.usage_end),
        permit.purpose or "",
        permit.status.capitalize(),
        permit.hr_comments or "",
        permit.decider.name if permit.decider else "",
        format_export(permit.decided_at),
        format_export(permit.created_at),
    ]


def iter_csv(permits: Iterable[Permit]) -> Iterator[str]:
    """Yields the CSV text line by line (header first) for a StreamingResponse."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    def flush() -> str:
        chunk = buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)
        return chunk

    writer.writerow(EXPORT_COLUMNS)
    yield flush()
    for permit in permits:
        writer.writerow(permit_row(permit))
        yield flush()


def export_filename(now: datetime = None) -> str:
    return f"vehicle_permits_{(now or utcnow()).strftime('%Y-%m-%d_%H-%M-%S')}.csv"
