"""Tests for the record lifecycle: booking, completion, status changes and deletion."""

from bookkeeper.models import Income, Record, RecordCompletion


class TestCreateRecord:
    """Booking records."""

    def test_record_is_created_pending_without_employee(self, create_record):
        record = create_record(patientCount=3)

        assert record["status"] == "pending"
        assert record["employeeId"] is None
        assert record["patientCount"] == 3
        assert record["completions"] == []
        assert record["service"]["name"] == "Consultation"

    def test_any_employee_can_book(self, client, employee_headers, consultation):
        response = client.post(
            "/records",
            json={"serviceId": consultation.id, "date": "2025-03-10"},
            headers=employee_headers,
        )

        assert response.status_code == 200
        assert response.json()["clientId"] is None
        assert response.json()["patientCount"] == 1

    def test_service_is_required(self, client, admin_headers):
        response = client.post("/records", json={"date": "2025-03-10"}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Service is required"

    def test_unknown_service_rejected(self, client, admin_headers):
        response = client.post("/records", json={"serviceId": 999, "date": "2025-03-10"}, headers=admin_headers)

        assert response.status_code == 400

    def test_unknown_client_rejected(self, client, admin_headers, consultation):
        response = client.post(
            "/records",
            json={"serviceId": consultation.id, "clientId": 999, "date": "2025-03-10"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Unknown client"

    def test_patient_count_below_one_rejected(self, client, admin_headers, consultation):
        response = client.post(
            "/records",
            json={"serviceId": consultation.id, "date": "2025-03-10", "patientCount": 0},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_malformed_date_rejected(self, client, admin_headers, consultation):
        response = client.post(
            "/records",
            json={"serviceId": consultation.id, "date": "10.03.2025"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_requires_authentication(self, client, db, consultation):
        response = client.post("/records", json={"serviceId": consultation.id, "date": "2025-03-10"})

        assert response.status_code == 401


class TestCompleteRecord:
    """Completing records generates exactly one income."""

    def test_consultation_example(self, client, db, create_record, employee_headers, employee2_headers):
        """Price 100, capacity 4, completions of 3 and 1 patients → one income of 400."""
        record = create_record(patientCount=4)

        first = client.post(f"/records/{record['id']}/complete", json={"patientCount": 3}, headers=employee_headers)
        second = client.post(f"/records/{record['id']}/complete", json={"patientCount": 1}, headers=employee2_headers)

        assert first.status_code == 200, first.text
        assert second.status_code == 200, second.text

        incomes = db.query(Income).filter(Income.record_id == record["id"]).all()
        assert len(incomes) == 1
        assert incomes[0].amount == 400
        assert incomes[0].name == "Consultation (4 pat.)"
        assert db.query(RecordCompletion).filter(RecordCompletion.record_id == record["id"]).count() == 2

        fetched = client.get(f"/records/{record['id']}", headers=employee_headers).json()
        assert fetched["status"] == "done"
        assert fetched["completedPatients"] == 4
        assert [c["employee"]["fullName"] for c in fetched["completions"]] == ["Nina Nurse", "Oleg Orderly"]

    def test_first_completion_moves_pending_to_done(self, client, create_record, employee_headers):
        record = create_record(patientCount=2)

        response = client.post(f"/records/{record['id']}/complete", json={"patientCount": 1}, headers=employee_headers)

        assert response.status_code == 200
        assert response.json()["patientCount"] == 1
        assert response.json()["employee"]["fullName"] == "Nina Nurse"
        assert client.get(f"/records/{record['id']}", headers=employee_headers).json()["status"] == "done"

    def test_income_uses_record_date_and_time(self, client, db, create_record, employee_headers):
        record = create_record(date="2025-04-01", time="14:30", patientCount=2)

        client.post(f"/records/{record['id']}/complete", json={"patientCount": 2}, headers=employee_headers)

        income = db.query(Income).filter(Income.record_id == record["id"]).one()
        assert income.date.isoformat() == "2025-04-01"
        assert income.time == "14:30"
        assert income.amount == 200

    def test_patient_count_above_capacity_rejected(self, client, db, create_record, employee_headers):
        record = create_record(patientCount=2)

        response = client.post(f"/records/{record['id']}/complete", json={"patientCount": 3}, headers=employee_headers)

        assert response.status_code == 400
        assert db.query(RecordCompletion).count() == 0
        assert db.query(Income).count() == 0

    def test_patient_count_zero_rejected(self, client, create_record, employee_headers):
        record = create_record()

        response = client.post(f"/records/{record['id']}/complete", json={"patientCount": 0}, headers=employee_headers)

        assert response.status_code == 400

    def test_canceled_record_cannot_be_completed(self, client, db, create_record, manager_headers, employee_headers):
        record = create_record()
        client.patch(f"/records/{record['id']}", json={"status": "canceled"}, headers=manager_headers)

        response = client.post(f"/records/{record['id']}/complete", json={"patientCount": 1}, headers=employee_headers)

        assert response.status_code == 400
        assert db.query(Income).count() == 0

    def test_unknown_record_returns_404(self, client, employee_headers):
        response = client.post("/records/999/complete", json={"patientCount": 1}, headers=employee_headers)

        assert response.status_code == 404


class TestUpdateRecord:
    """Status transitions and field updates."""

    def test_employee_cannot_edit(self, client, create_record, employee_headers):
        record = create_record()

        response = client.patch(f"/records/{record['id']}", json={"time": "11:00"}, headers=employee_headers)

        assert response.status_code == 403

    def test_status_done_generates_income(self, client, db, create_record, manager_headers):
        record = create_record(patientCount=3)

        response = client.patch(f"/records/{record['id']}", json={"status": "done"}, headers=manager_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "done"
        income = db.query(Income).filter(Income.record_id == record["id"]).one()
        assert income.amount == 300

    def test_done_then_completion_keeps_single_income(self, client, db, create_record, manager_headers, employee_headers):
        record = create_record(patientCount=2)
        client.patch(f"/records/{record['id']}", json={"status": "done"}, headers=manager_headers)

        client.post(f"/records/{record['id']}/complete", json={"patientCount": 2}, headers=employee_headers)

        assert db.query(Income).filter(Income.record_id == record["id"]).count() == 1

    def test_same_status_is_noop(self, client, create_record, manager_headers):
        record = create_record()

        response = client.patch(f"/records/{record['id']}", json={"status": "pending"}, headers=manager_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "pending"

    def test_done_cannot_be_reopened(self, client, create_record, manager_headers):
        record = create_record()
        client.patch(f"/records/{record['id']}", json={"status": "done"}, headers=manager_headers)

        response = client.patch(f"/records/{record['id']}", json={"status": "pending"}, headers=manager_headers)

        assert response.status_code == 400

    def test_canceled_cannot_become_done(self, client, db, create_record, manager_headers):
        record = create_record()
        client.patch(f"/records/{record['id']}", json={"status": "canceled"}, headers=manager_headers)

        response = client.patch(f"/records/{record['id']}", json={"status": "done"}, headers=manager_headers)

        assert response.status_code == 400
        assert db.query(Income).count() == 0

    def test_unknown_status_rejected(self, client, create_record, manager_headers):
        record = create_record()

        response = client.patch(f"/records/{record['id']}", json={"status": "archived"}, headers=manager_headers)

        assert response.status_code == 400

    def test_patient_count_cannot_drop_below_a_completion(self, client, create_record, manager_headers, employee_headers):
        record = create_record(patientCount=4)
        client.post(f"/records/{record['id']}/complete", json={"patientCount": 3}, headers=employee_headers)

        too_low = client.patch(f"/records/{record['id']}", json={"patientCount": 2}, headers=manager_headers)
        still_ok = client.patch(f"/records/{record['id']}", json={"patientCount": 3}, headers=manager_headers)

        assert too_low.status_code == 400
        assert still_ok.status_code == 200
        assert still_ok.json()["patientCount"] == 3

    def test_patient_count_zero_rejected(self, client, create_record, manager_headers):
        record = create_record()

        response = client.patch(f"/records/{record['id']}", json={"patientCount": 0}, headers=manager_headers)

        assert response.status_code == 400

    def test_reschedule_resets_notification(self, client, db, create_record, manager_headers):
        from datetime import datetime

        record = create_record(reminder=True)
        db.query(Record).filter(Record.id == record["id"]).update({Record.notification_sent_at: datetime(2025, 3, 10, 9, 0)})
        db.commit()

        response = client.patch(f"/records/{record['id']}", json={"time": "12:00"}, headers=manager_headers)

        assert response.status_code == 200
        assert response.json()["time"] == "12:00"
        assert response.json()["notificationSentAt"] is None

    def test_clear_client(self, client, create_record, manager_headers):
        record = create_record()

        response = client.patch(f"/records/{record['id']}", json={"clientId": None}, headers=manager_headers)

        assert response.status_code == 200
        assert response.json()["clientId"] is None


class TestDeleteRecord:
    """Deleting a record takes its completions and income with it."""

    def test_delete_cascades(self, client, db, create_record, manager_headers, employee_headers):
        record = create_record(patientCount=2)
        client.post(f"/records/{record['id']}/complete", json={"patientCount": 2}, headers=employee_headers)

        response = client.delete(f"/records/{record['id']}", headers=manager_headers)

        assert response.status_code == 200
        assert db.query(Record).count() == 0
        assert db.query(RecordCompletion).count() == 0
        assert db.query(Income).count() == 0

    def test_delete_unknown_record(self, client, manager_headers):
        assert client.delete("/records/999", headers=manager_headers).status_code == 404

    def test_employee_cannot_delete(self, client, create_record, employee_headers):
        record = create_record()

        response = client.delete(f"/records/{record['id']}", headers=employee_headers)

        assert response.status_code == 403

    def test_delete_completion(self, client, db, create_record, manager_headers, employee_headers):
        record = create_record()
        completion = client.post(
            f"/records/{record['id']}/complete", json={"patientCount": 1}, headers=employee_headers
        ).json()

        response = client.delete(f"/completions/{completion['id']}", headers=manager_headers)

        assert response.status_code == 200
        assert db.query(RecordCompletion).count() == 0
        assert client.delete(f"/completions/{completion['id']}", headers=manager_headers).status_code == 404


class TestRecordViews:
    """Listings, calendar counts and per-employee summaries."""

    def test_list_by_date(self, client, create_record, employee_headers):
        create_record(date="2025-03-10")
        create_record(date="2025-03-11")

        response = client.get("/records", params={"date": "2025-03-10"}, headers=employee_headers)

        assert response.status_code == 200
        assert [r["date"] for r in response.json()] == ["2025-03-10"]

    def test_list_without_filter_is_empty(self, client, create_record, employee_headers):
        create_record()

        assert client.get("/records", headers=employee_headers).json() == []
        assert len(client.get("/records/all", headers=employee_headers).json()) == 1

    def test_list_by_client(self, client, create_record, patient, employee_headers):
        create_record(date="2025-03-10")
        create_record(date="2025-03-12", clientId=None)

        response = client.get("/records", params={"clientId": patient.id}, headers=employee_headers)

        assert len(response.json()) == 1

    def test_my_records_are_those_i_completed(self, client, create_record, employee_headers, employee2_headers):
        mine = create_record()
        create_record()
        client.post(f"/records/{mine['id']}/complete", json={"patientCount": 1}, headers=employee_headers)

        response = client.get("/records/my", headers=employee_headers)

        assert [r["id"] for r in response.json()] == [mine["id"]]
        assert client.get("/records/my", headers=employee2_headers).json() == []

    def test_other_employee_records_need_capability(
        self, client, create_record, employee, employee2_headers, manager_headers
    ):
        assert client.get(f"/records/employee/{employee.id}", headers=employee2_headers).status_code == 403
        assert client.get(f"/records/employee/{employee.id}", headers=manager_headers).status_code == 200

    def test_counts_by_month(self, client, create_record, employee_headers):
        create_record(date="2025-03-01")
        create_record(date="2025-03-31")
        create_record(date="2025-03-31")
        create_record(date="2025-04-01")

        response = client.get("/records/counts/2025-03", headers=employee_headers)

        assert response.json() == {"2025-03-01": 1, "2025-03-31": 2}

    def test_counts_reject_bad_month(self, client, employee_headers, db):
        assert client.get("/records/counts/2025-13", headers=employee_headers).status_code == 400

    def test_completions_listing(self, client, create_record, employee_headers):
        record = create_record(patientCount=2)
        client.post(f"/records/{record['id']}/complete", json={"patientCount": 2}, headers=employee_headers)

        response = client.get(f"/records/{record['id']}/completions", headers=employee_headers)

        assert len(response.json()) == 1
        assert response.json()[0]["employee"]["fullName"] == "Nina Nurse"

    def test_employee_completion_summary_counts_each_record_once(
        self, client, create_record, employee, employee_headers, admin_headers
    ):
        record = create_record(patientCount=4)
        client.post(f"/records/{record['id']}/complete", json={"patientCount": 2}, headers=employee_headers)
        client.post(f"/records/{record['id']}/complete", json={"patientCount": 2}, headers=employee_headers)

        response = client.get(f"/employees/{employee.id}/completions", headers=admin_headers)

        summary = response.json()
        assert summary["totalPatients"] == 4
        assert summary["byService"] == [
            {"serviceId": record["serviceId"], "serviceName": "Consultation", "patientCount": 4, "revenue": 400}
        ]
