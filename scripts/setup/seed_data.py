"""
Seed sample data — one HR admin, a handful of employees and permits in every status.
Permits are inserted directly (no notifications are sent).
Usage: python scripts/setup/seed_data.py [--employees 20]
"""

import argparse
import random
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from datetime import timedelta
from vehicle_permits.database import SessionLocal, create_tables
from vehicle_permits.models.employee import Employee
from vehicle_permits.models.hr_user import HrUser
from vehicle_permits.models.permit import Permit, STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED
from vehicle_permits.utils.timeutil import utcnow

DEPARTMENTS = ["Finance", "Operations", "Sales", "Engineering", "Human Resources", "Logistics"]
GRADES = ["G1", "G2", "G3", "G4", "G5"]
VEHICLES = ["Sedan", "SUV", "Pickup", "Van", "Minibus"]
PURPOSES = ["Client visit", "Site inspection", "Airport transfer", "Training", None]


def main():
    parser = argparse.ArgumentParser(description="Seed sample vehicle permit data")
    parser.add_argument("--employees", type=int, default=20)
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    rng = random.Random(42)
    now = utcnow()
    try:
        hr = db.query(HrUser).filter(HrUser.email == "hr@company.com").first()
        if not hr:
            hr = HrUser(name="HR Administrator", email="hr@company.com", is_hr=True)
            db.add(hr)
            db.flush()

        employees = []
        for i in range(1, args.employees + 1):
            code = f"EMP{i:04d}"
            emp = db.query(Employee).filter(Employee.employee_code == code).first()
            if not emp:
                emp = Employee(
                    employee_code=code,
                    name=f"Employee {i}",
                    department=rng.choice(DEPARTMENTS),
                    grade=rng.choice(GRADES),
                    email=f"emp{i:04d}@company.com",
                    phone=f"+1555{i:07d}",
                    is_active=i % 10 != 0,
                )
                db.add(emp)
            employees.append(emp)
        db.flush()

        plan = [STATUS_PENDING] * 8 + [STATUS_APPROVED] * 12 + [STATUS_REJECTED] * 5
        for status in plan:
            start = now + timedelta(days=rng.randint(1, 30), hours=rng.randint(0, 8))
            permit = Permit(
                employee_id=rng.choice(employees).id,
                vehicle_type=rng.choice(VEHICLES),
                license_plate=f"{rng.choice('ABCDEFGH')}{rng.choice('KLMNPRST')}{rng.randint(1000, 9999)}CD",
                usage_start=start,
                usage_end=start + timedelta(hours=rng.randint(2, 10)),
                purpose=rng.choice(PURPOSES),
                status=status,
                created_at=now - timedelta(days=rng.randint(0, 14)),
            )
            if status != STATUS_PENDING:
                permit.decided_by = hr.id
                permit.decided_at = now
                permit.hr_comments = "OK" if status == STATUS_APPROVED else "Vehicle unavailable"
            db.add(permit)
        db.commit()
    finally:
        db.close()

    print("Created:")
    print("- 1 HR admin user (hr@company.com)")
    print(f"- {args.employees} employees (EMP0001..EMP{args.employees:04d}, every 10th inactive)")
    print(f"- {len(plan)} vehicle permits (8 pending, 12 approved, 5 rejected)")


if __name__ == "__main__":
    main()
