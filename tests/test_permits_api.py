"""HTTP tests for the permit, employee and HR user endpoints."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import csv
import io
import pytest
from datetime import timedelta
from vehicle_permits.config import settings
from vehicle_permits.models.employee import Employee
from vehicle_permits.models.notification import Notification
from vehicle_permits.models.permit import Permit
from vehicle_permits.services.decision_policy import get_decision_policy, require_hr_flag
from vehicle_permits.services.export_service import EXPORT_COLUMNS
from vehicle_permits.services.notification_gateway import DeliveryResult
from vehicle_permits.utils.timeutil import utcnow

API = "/api/v1"


def submission(window, **overrides):
    start, end = window
    body = {
        "employee_id": "EMP0001",
        "vehicle_type": "Sedan",
        "license_plate": "AB1234CD",
        "usage_start": start.isoformat(),
        "usage_end": end.isoformat(),
        "purpose": "Client visit",
    }
    body.update(overrides)
    return body


def decide(client, permit_id, decision, decider_id, comment=None):
    return client.put(
        f"{API}/permits/{permit_id}/decision",
        json={"decision": decision, "comment": comment},
        headers={"X-Decider-Id": str(decider_id)},
    )


class TestSubmissionEndpoint:
    def test_submit_scenario(self, client, employee, window):
        resp = client.post(f"{API}/permits", json=submission(window))
        assert resp.status_code == 201
        body = resp.json()
        assert body["status"] == "pending"
        assert body["employee"]["employee_code"] == "EMP0001"
        assert body["decider"] is None

        notes = client.get(f"{API}/permits/{body['id']}/notifications").json()
        assert len(notes) == 1
        assert notes[0]["kind"] == "to_hr"
        assert notes[0]["status"] in ("sent", "failed")

    def test_failed_delivery_is_invisible_to_submitter(self, client, employee, window, gateway):
        gateway.outcomes.append(DeliveryResult.failed("provider down"))
        resp = client.post(f"{API}/permits", json=submission(window))
        assert resp.status_code == 201
        assert "provider down" not in resp.text

        notes = client.get(f"{API}/permits/{resp.json()['id']}/notifications").json()
        assert notes[0]["status"] == "failed"

    def test_past_start_is_field_error(self, client, employee):
        now = utcnow()
        resp = client.post(f"{API}/permits", json=submission((now - timedelta(hours=2), now + timedelta(hours=2))))
        assert resp.status_code == 422
        assert resp.json()["field"] == "usage_start"

    def test_unknown_employee_is_404(self, client, window):
        resp = client.post(f"{API}/permits", json=submission(window, employee_id="EMP4040"))
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Employee not found"


class TestEmployeeLookup:
    def test_lookup_active(self, client, employee):
        resp = client.get(f"{API}/employees/lookup", params={"identifier": "EMP0001"})
        assert resp.status_code == 200
        assert resp.json() == {"name": "Amina Diallo", "department": "Sales", "grade": "G3"}

    def test_lookup_inactive_is_404(self, client, inactive_employee):
        resp = client.get(f"{API}/employees/lookup", params={"identifier": "EMP0099"})
        assert resp.status_code == 404


class TestDecisionEndpoint:
    def test_approve_then_reject_conflicts(self, client, employee, hr_user, window):
        permit_id = client.post(f"{API}/permits", json=submission(window)).json()["id"]

        first = decide(client, permit_id, "approved", hr_user.id, "OK")
        assert first.status_code == 200
        assert first.json()["status"] == "approved"
        assert first.json()["decided_by"] == hr_user.id
        assert first.json()["hr_comments"] == "OK"

        second = decide(client, permit_id, "rejected", hr_user.id)
        assert second.status_code == 409
        assert client.get(f"{API}/permits/{permit_id}").json()["status"] == "approved"

        kinds = [n["kind"] for n in client.get(f"{API}/permits/{permit_id}/notifications").json()]
        assert kinds == ["to_hr", "to_employee"]

    def test_missing_decider_header(self, client, employee, window):
        permit_id = client.post(f"{API}/permits", json=submission(window)).json()["id"]
        resp = client.put(f"{API}/permits/{permit_id}/decision", json={"decision": "approved"})
        assert resp.status_code == 401

    def test_unknown_decider_forbidden(self, client, employee, window):
        permit_id = client.post(f"{API}/permits", json=submission(window)).json()["id"]
        assert decide(client, permit_id, "approved", 777).status_code == 403

    def test_unknown_permit(self, client, hr_user):
        assert decide(client, 999, "approved", hr_user.id).status_code == 404

    def test_hr_only_policy_refuses_non_hr(self, client, db, employee, window):
        from vehicle_permits.main import app
        from vehicle_permits.models.hr_user import HrUser

        clerk = HrUser(name="Front Desk", email="desk@company.com", is_hr=False)
        db.add(clerk)
        db.commit()
        app.dependency_overrides[get_decision_policy] = lambda: require_hr_flag

        permit_id = client.post(f"{API}/permits", json=submission(window)).json()["id"]
        assert decide(client, permit_id, "approved", clerk.id).status_code == 403
        assert client.get(f"{API}/permits/{permit_id}").json()["status"] == "pending"


@pytest.fixture
def seeded(db, employee, hr_user, window):
    """Three permits with fixed submission dates: pending, approved, rejected."""
    start, end = window
    now = utcnow()
    rows = [
        ("pending", now - timedelta(days=10), None),
        ("approved", now - timedelta(days=5), hr_user.id),
        ("rejected", now, hr_user.id),
    ]
    for status, created, decider in rows:
        db.add(Permit(employee_id=employee.id, vehicle_type="Van", license_plate="XY9876ZZ",
                      usage_start=start, usage_end=end, status=status, created_at=created,
                      decided_by=decider, decided_at=now if decider else None,
                      hr_comments="fine" if decider else None))
    db.commit()
    return now


class TestListing:
    def test_stats_and_status_filter(self, client, seeded):
        body = client.get(f"{API}/permits", params={"status": "pending"}).json()
        assert body["total_items"] == 1
        assert body["items"][0]["status"] == "pending"
        assert body["stats"] == {"total": 3, "pending": 1, "approved": 1, "rejected": 1}

    def test_status_all_means_no_filter(self, client, seeded):
        body = client.get(f"{API}/permits", params={"status": "all"}).json()
        assert body["total_items"] == 3
        created = [item["created_at"] for item in body["items"]]
        assert created == sorted(created, reverse=True)

    def test_date_range(self, client, seeded):
        from_date = (seeded - timedelta(days=6)).date().isoformat()
        body = client.get(f"{API}/permits", params={"from_date": from_date}).json()
        assert body["total_items"] == 2

    def test_pagination(self, client, seeded):
        body = client.get(f"{API}/permits", params={"per_page": 2, "page": 2}).json()
        assert body["pages"] == 2
        assert len(body["items"]) == 1

    def test_repeated_reads_are_identical(self, client, seeded):
        params = {"status": "all", "per_page": 10}
        assert client.get(f"{API}/permits", params=params).json() == client.get(f"{API}/permits", params=params).json()

    def test_unknown_status_rejected(self, client, seeded):
        assert client.get(f"{API}/permits", params={"status": "archived"}).status_code == 422


class TestExport:
    def test_csv_columns_and_rows(self, client, seeded):
        resp = client.get(f"{API}/permits/export")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert "vehicle_permits_" in resp.headers["content-disposition"]

        rows = list(csv.reader(io.StringIO(resp.text)))
        assert rows[0] == EXPORT_COLUMNS
        data = rows[1:]
        assert len(data) == 3
        assert [r[10] for r in data] == ["Pending", "Approved", "Rejected"]
        assert data[0][12] == "" and data[0][13] == ""
        assert data[1][12] == "HR Administrator"
        assert data[1][1] == "EMP0001"
        assert len(data[1][7]) == len("2030-01-01 09:00")

    def test_row_count_matches_filter(self, client, seeded):
        from_date = seeded.date().isoformat()
        rows = list(csv.reader(io.StringIO(client.get(f"{API}/permits/export", params={"from_date": from_date}).text)))
        listed = client.get(f"{API}/permits", params={"from_date": from_date}).json()["total_items"]
        assert len(rows) - 1 == listed == 1


class TestReferentialPolicy:
    def test_deleting_employee_cascades(self, client, db, employee, window):
        permit_id = client.post(f"{API}/permits", json=submission(window)).json()["id"]
        assert client.delete(f"{API}/employees/{employee.id}").status_code == 200

        db.expire_all()
        assert db.get(Permit, permit_id) is None
        assert db.query(Notification).filter(Notification.permit_id == permit_id).count() == 0

    def test_deleting_decider_keeps_permits(self, client, db, employee, hr_user, window):
        permit_id = client.post(f"{API}/permits", json=submission(window)).json()["id"]
        decide(client, permit_id, "approved", hr_user.id, "OK")
        assert client.delete(f"{API}/hr-users/{hr_user.id}").status_code == 200

        body = client.get(f"{API}/permits/{permit_id}").json()
        assert body["status"] == "approved"
        assert body["decided_by"] is None


class TestEmployeeAdmin:
    def test_create_and_duplicate(self, client):
        body = {"employee_code": "EMP0500", "name": "New Hire", "department": "Ops", "grade": "G1"}
        assert client.post(f"{API}/employees", json=body).status_code == 201
        assert client.post(f"{API}/employees", json=body).status_code == 400

    def test_deactivate_blocks_submission(self, client, employee, window):
        assert client.put(f"{API}/employees/{employee.id}", json={"is_active": False}).status_code == 200
        assert client.post(f"{API}/permits", json=submission(window)).status_code == 404

    @pytest.mark.parametrize("field", ["name", "department", "grade", "is_active"])
    def test_null_for_required_field_is_422(self, client, db, employee, field):
        resp = client.put(f"{API}/employees/{employee.id}", json={field: None})
        assert resp.status_code == 422
        db.expire_all()
        assert db.get(Employee, employee.id).name == "Amina Diallo"

    def test_contact_fields_can_be_cleared(self, client, employee):
        resp = client.put(f"{API}/employees/{employee.id}", json={"phone": None, "email": None})
        assert resp.status_code == 200
        assert resp.json()["phone"] is None

    def test_detail_includes_permit_history(self, client, employee, hr_user, window):
        first = client.post(f"{API}/permits", json=submission(window)).json()["id"]
        second = client.post(f"{API}/permits", json=submission(window, vehicle_type="Van")).json()["id"]
        decide(client, first, "approved", hr_user.id)

        body = client.get(f"{API}/employees/{employee.id}").json()
        assert body["employee_code"] == "EMP0001"
        by_id = {p["id"]: p for p in body["permits"]}
        assert set(by_id) == {first, second}
        assert by_id[first]["status"] == "approved"
        assert by_id[second]["status"] == "pending"
        assert by_id[second]["vehicle_type"] == "Van"
        assert by_id[second]["usage_start"].startswith(window[0].strftime("%Y-%m-%dT%H:%M"))

    def test_detail_without_permits(self, client, inactive_employee):
        body = client.get(f"{API}/employees/{inactive_employee.id}").json()
        assert body["permits"] == []


class TestHealth:
    def test_health(self, client):
        body = client.get(f"{API}/health").json()
        assert body["database"] == "ok"
        assert body["notifications"]["dispatch_mode"] == settings.DISPATCH_MODE
